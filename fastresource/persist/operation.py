# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import logging
import uuid

from typing import TYPE_CHECKING, Any, ClassVar

from fastresource.audit.logger import ActionEventLogger
from fastresource.context import ResourceContext, reset_context, set_context
from fastresource.dependencies import get_service
from fastresource.exceptions import (
    AttachmentLimitExceeded,
    AuthorizationError,
    EntityNotFound,
    PersistenceFailure,
    ResourceError,
    UnsupportedOperation,
    ValidationError,
)
from fastresource.fields.base import Field
from fastresource.fields.enums import Capability, FieldContext
from fastresource.fields.rules import Rule
from fastresource.orm import atomic
from fastresource.orm.query import column_values
from fastresource.persist.state import OperationKind, PersistState, check_transition
from fastresource.persist.validation import Validator
from fastresource.resources.authorization import authorize
from fastresource.schemas.persist import PersistResult, PersistStatus

if TYPE_CHECKING:
    from fastresource.resources.resource import Resource


logger = logging.getLogger("fastresource.persist")


class PersistOperation:
    """
    Create or update one entity of a resource.

    Authorization and validation run first and never open a transaction.
    Fill, save, relation sync and the action log then run in one
    transaction: the first error rolls everything back. An operation
    instance runs once, its ``state`` tells how far it went.

    Example:
        ```python
        result = await CreateOperation(PostResource()).handle(ResourceContext(input={"title": "Hi"}, user=user))

        if result.successful:
            post = result.entity
        ```
    """

    kind: ClassVar[OperationKind]
    action: ClassVar[str]
    visibility: ClassVar[FieldContext]
    success_status_code: ClassVar[int] = 200
    partial_validation: ClassVar[bool] = False

    def __init__(self, resource: "Resource", event_logger: ActionEventLogger | None = None):
        self.resource = resource
        self._event_logger = event_logger
        self.state = PersistState.INITIALIZED
        self.entity: Any = None
        self.fields: list[Field] = []
        self.original: dict[str, Any] | None = None
        self.correlation_id: str | None = None
        self.batch_id: str | None = None

    @property
    def event_logger(self) -> ActionEventLogger:
        if self._event_logger is None:
            self._event_logger = get_service(ActionEventLogger)

        return self._event_logger

    def transition(self, target: PersistState) -> None:
        self.state = check_transition(self.state, target)

    def fail(self) -> None:
        if not self.state.is_terminal:
            self.transition(PersistState.FAILED)

    async def handle(self, context: ResourceContext, id: Any = None) -> PersistResult:
        """Run the operation and describe its outcome, client errors included."""
        try:
            entity = await self.execute(context, id)
        except ValidationError as e:
            return self._error_result(PersistStatus.VALIDATION_FAILED, e, errors=e.errors)
        except AuthorizationError as e:
            return self._error_result(PersistStatus.FORBIDDEN, e)
        except EntityNotFound as e:
            return self._error_result(PersistStatus.NOT_FOUND, e)
        except AttachmentLimitExceeded as e:
            return self._error_result(PersistStatus.LIMIT_EXCEEDED, e, data=e.to_dict())
        except UnsupportedOperation as e:
            return self._error_result(PersistStatus.UNSUPPORTED, e)
        except PersistenceFailure as e:
            return self._error_result(PersistStatus.FAILED, e, correlation_id=e.correlation_id)

        return PersistResult(
            status=PersistStatus.COMPLETED,
            status_code=self.success_status_code,
            entity=entity,
            data=await self.resource.resolve_fields(context, entity, FieldContext.DETAIL),
        )

    async def execute(self, context: ResourceContext, id: Any = None) -> Any:
        """
        Run the operation and return the persisted entity.

        Raises:
            AuthorizationError: The action is refused, nothing was written.
            EntityNotFound: No entity has this identifier, nothing was written.
            ValidationError: The input is invalid, nothing was written.
            AttachmentLimitExceeded: A relation is over its limit, everything was rolled back.
            UnsupportedOperation: A relation cannot run the requested operation, everything was rolled back.
            PersistenceFailure: Any other error while writing, everything was rolled back.
        """
        token = set_context(context)
        self.batch_id = self.event_logger.batch_id_for(context)

        try:
            self.entity = await self.resolve_entity(id)
            await authorize(self.resource, self.action, self.entity, context)
            self.transition(PersistState.AUTHORIZED)

            context.validated = await self.validate(context)
            self.transition(PersistState.VALIDATED)

            await self.persist(context)
            self.transition(PersistState.COMPLETED)
        except ResourceError:
            self.fail()
            raise
        finally:
            reset_context(token)

        return self.entity

    async def resolve_entity(self, id: Any) -> Any:
        raise NotImplementedError

    async def validate(self, context: ResourceContext) -> dict[str, Any]:
        self.fields = self.resource.get_fields_for(self.visibility, context, self.entity)

        return await Validator(self.get_rules(context), partial=self.partial_validation).validate(context.input)

    def get_rules(self, context: ResourceContext) -> dict[str, list[Rule]]:
        """Rules of the fields accepting input, in declaration order."""
        rules: dict[str, list[Rule]] = {}

        for field in self.fields:
            if field.disabled or field.is_readonly(context):
                continue

            for attribute, attribute_rules in field.get_rules_map().items():
                rules.setdefault(attribute, []).extend(attribute_rules)

        return rules

    async def persist(self, context: ResourceContext) -> None:
        try:
            async with atomic():
                await self.fill(context)
                self.transition(PersistState.FILLED)

                await self.entity.save()
                self.transition(PersistState.SAVED)

                await self.sync_relations(context)
                self.transition(PersistState.SYNCED)

                await self.after_hook(context)
                await self.log(context)
                self.transition(PersistState.LOGGED)
        except Exception as e:
            self.fail()

            if isinstance(e, ResourceError) and e.client_error:
                raise

            self.correlation_id = str(uuid.uuid4())
            logger.error(
                f"{type(self).__name__} of {self.resource.key()} failed [{self.correlation_id}]: {e}",
                exc_info=e,
            )

            raise PersistenceFailure(self.correlation_id, e) from e

    async def fill(self, context: ResourceContext) -> None:
        await self.before_hook(context)

        for field in self.fields:
            await field.before_save(context, self.entity, self)

            if field.has_capability(Capability.FILL) and not field.supports_after_save():
                await field.fill(context, self.entity)

    async def sync_relations(self, context: ResourceContext) -> None:
        for field in self.fields:
            if field.supports_after_save():
                await field.after_save(context, self.entity)

    async def before_hook(self, context: ResourceContext) -> None:
        pass

    async def after_hook(self, context: ResourceContext) -> None:
        pass

    async def log(self, context: ResourceContext) -> None:
        raise NotImplementedError

    def _error_result(
        self,
        status: PersistStatus,
        error: ResourceError,
        **kwargs: Any,
    ) -> PersistResult:
        return PersistResult(status=status, status_code=error.status_code, message=error.message, **kwargs)


class CreateOperation(PersistOperation):
    kind = OperationKind.CREATE
    action = "create"
    visibility = FieldContext.CREATE
    success_status_code = 201

    async def resolve_entity(self, id: Any) -> Any:
        return self.resource.new_entity()

    async def before_hook(self, context: ResourceContext) -> None:
        await self.resource.before_create(context, self.entity)

    async def after_hook(self, context: ResourceContext) -> None:
        await self.resource.after_create(context, self.entity)

    async def log(self, context: ResourceContext) -> None:
        await self.event_logger.record_create(context, self.entity, resource_key=self.resource.key())


class UpdateOperation(PersistOperation):
    kind = OperationKind.UPDATE
    action = "update"
    visibility = FieldContext.UPDATE
    partial_validation = True

    async def resolve_entity(self, id: Any) -> Any:
        entity = await self.resource.find(id) if id is not None else None

        if entity is None:
            raise EntityNotFound(self.resource.label(), id)

        return entity

    async def before_hook(self, context: ResourceContext) -> None:
        self.original = column_values(self.entity)
        await self.resource.before_update(context, self.entity)

    async def after_hook(self, context: ResourceContext) -> None:
        await self.resource.after_update(context, self.entity)

    async def log(self, context: ResourceContext) -> None:
        await self.event_logger.record_update(
            context,
            self.entity,
            self.original or {},
            resource_key=self.resource.key(),
        )


def operation_for(kind: OperationKind, resource: "Resource", **kwargs: Any) -> PersistOperation:
    match kind:
        case OperationKind.CREATE:
            return CreateOperation(resource, **kwargs)
        case OperationKind.UPDATE:
            return UpdateOperation(resource, **kwargs)

    raise ValueError(f"Unknown operation kind: {kind}")


__all__ = [
    "PersistOperation",
    "CreateOperation",
    "UpdateOperation",
    "operation_for",
]
