# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import logging
import math

from typing import TYPE_CHECKING, Any, ClassVar, Iterable, Mapping

from fastresource.config import get_settings
from fastresource.exceptions import (
    AttachmentLimitExceeded,
    FieldDefinitionError,
    ResourceError,
    UnsupportedOperation,
)
from fastresource.fields.enums import RelationKind
from fastresource.fields.relations.label import FALLBACK_LABEL_ATTRIBUTES
from fastresource.fields.relations.metadata import RelationMetadata
from fastresource.i18n import _t
from fastresource.orm.query import QuerySet, normalize_ids, search_clause
from fastresource.schemas.attachment import (
    AttachableItem,
    AttachableMeta,
    AttachablePage,
    AttachmentEnvelope,
    AttachResult,
    ChangeSet,
    DetachResult,
)

if TYPE_CHECKING:
    from fastresource.context import ResourceContext
    from fastresource.fields.relations.base import RelationField


logger = logging.getLogger("fastresource.attachments")


FALLBACK_SEARCH_ATTRIBUTES = FALLBACK_LABEL_ATTRIBUTES


class AttachmentService:
    """
    Changes which entities are associated to one parent through one relation field.

    The membership is read once at the start of each operation and every
    write of the operation runs in the same transaction as that read.
    Subclasses provide the membership snapshot and the writes of their
    relation kind.
    """

    relation_kinds: ClassVar[tuple[RelationKind, ...]] = ()
    supports_sync: ClassVar[bool] = False

    def __init__(self, field: "RelationField", parent: Any, context: "ResourceContext | None" = None):
        self.field = field
        self.parent = parent
        self.context = context
        self._metadata: RelationMetadata | None = None

    @property
    def metadata(self) -> RelationMetadata:
        if self._metadata is None:
            metadata = self.field.get_metadata(self.parent, self.context)

            if metadata is None:
                raise FieldDefinitionError(
                    f"Relation '{self.field.get_relation_name()}' of {type(self.parent).__name__} cannot be resolved"
                )

            self._metadata = metadata

        return self._metadata

    @property
    def related_model(self) -> Any:
        return self.metadata.related_model

    @property
    def parent_id(self) -> Any:
        return getattr(self.parent, "id", None)

    @property
    def relation_label(self) -> str:
        return self.field.get_relation_name()

    # Membership

    async def attached_ids(self) -> list[Any]:
        raise NotImplementedError

    def attachable_query(self, attached_ids: list[Any]) -> QuerySet:
        raise NotImplementedError

    # Operations

    async def list_attachable(
        self,
        page: int = 1,
        per_page: int | None = None,
        search: str | None = None,
    ) -> AttachablePage:
        """Related entities which are not associated to the parent yet, paginated."""
        settings = get_settings()
        per_page = min(max(per_page or settings.attachment_per_page, 1), settings.attachment_max_per_page)
        page = max(page, 1)

        attached_ids = await self.attached_ids()
        query = self.attachable_query(attached_ids)

        if search:
            clause = search_clause(self.related_model, self.get_searchable_attributes(), search)

            if clause is not None:
                query = query.filter(clause)

        query = self.field.apply_order(query)
        total = await query.count()
        items = await query.offset((page - 1) * per_page).limit(per_page).all()

        return AttachablePage(
            items=[AttachableItem(id=item.id, label=await self.field.resolve_label(item)) for item in items],
            meta=AttachableMeta(
                current_page=page,
                last_page=max(math.ceil(total / per_page), 1),
                per_page=per_page,
                total=total,
                attached_count=len(attached_ids),
                attachable_limit=self.field.attachable_limit,
            ),
        )

    async def attach(self, ids: Iterable[Any], pivot_data: Mapping[Any, Any] | None = None) -> AttachResult:
        raise NotImplementedError

    async def detach(self, ids: Iterable[Any]) -> DetachResult:
        raise NotImplementedError

    async def sync(
        self,
        ids: Iterable[Any],
        pivot_data: Mapping[Any, Any] | None = None,
        detaching: bool = True,
    ) -> ChangeSet:
        raise UnsupportedOperation("sync", self.field.relation_kind.value)

    async def handle(self, operation: str, **kwargs: Any) -> AttachmentEnvelope:
        """
        Run one operation and describe its outcome.

        Client errors (limit exceeded, unsupported operation) become failed
        envelopes, any other error propagates.
        """
        try:
            match operation:
                case "attachable":
                    page = await self.list_attachable(**kwargs)

                    return AttachmentEnvelope(success=True, message="", data=page.model_dump(mode="json"))

                case "attach":
                    ids = normalize_ids(kwargs.get("ids") or [])

                    if not ids:
                        return AttachmentEnvelope(success=False, message=_t("No items to attach"))

                    result = await self.attach(ids, kwargs.get("pivot_data"))

                    if not result.attached:
                        message = _t("All items are already attached or not found")
                    else:
                        message = _t("Items attached successfully")

                    return AttachmentEnvelope(success=True, message=message, data=result.model_dump(mode="json"))

                case "detach":
                    ids = normalize_ids(kwargs.get("ids") or [])

                    if not ids:
                        return AttachmentEnvelope(success=False, message=_t("No items to detach"))

                    result = await self.detach(ids)

                    return AttachmentEnvelope(
                        success=True,
                        message=_t("Items detached successfully"),
                        data=result.model_dump(mode="json"),
                    )

                case "sync":
                    changes = await self.sync(
                        kwargs.get("ids") or [],
                        kwargs.get("pivot_data"),
                        detaching=kwargs.get("detaching", True),
                    )

                    return AttachmentEnvelope(
                        success=True,
                        message=_t("Items synced successfully"),
                        data=changes.model_dump(mode="json"),
                    )

            raise UnsupportedOperation(operation, self.field.relation_kind.value)
        except AttachmentLimitExceeded as e:
            return AttachmentEnvelope(success=False, message=e.message, data=e.to_dict())
        except ResourceError as e:
            if not e.client_error:
                raise

            return AttachmentEnvelope(success=False, message=e.message)

    # Helpers

    def get_searchable_attributes(self) -> list[str]:
        """Field search attributes, else the related resource ones, else the common label attributes."""
        attributes = self.field.get_attachable_search_fields()

        if attributes and attributes != ["id"]:
            return list(attributes)

        resource = self.field.get_related_resource()

        if resource is not None:
            searchable = resource.get_searchable_attributes()

            if searchable:
                return searchable

        return list(FALLBACK_SEARCH_ATTRIBUTES)

    def check_limit(self, current: int, attempting: int) -> None:
        """
        Raises:
            AttachmentLimitExceeded: When ``current + attempting`` goes over the field limit.
        """
        limit = self.field.attachable_limit

        if limit is not None and current + attempting > limit:
            raise AttachmentLimitExceeded(current, limit, attempting, relation=self.relation_label)

    async def existing_ids(self, ids: list[Any]) -> list[Any]:
        if not ids:
            return []

        found = await self.related_model.query.filter(id__in=ids).all()
        found_ids = {item.id for item in found}

        return [identifier for identifier in ids if identifier in found_ids]

    def ensure_parent_saved(self) -> None:
        if self.parent_id is None:
            raise FieldDefinitionError(
                f"Relation '{self.relation_label}' cannot be changed before its parent is saved"
            )


__all__ = [
    "FALLBACK_SEARCH_ATTRIBUTES",
    "AttachmentService",
]
