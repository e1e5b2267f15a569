# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

import uuid

from typing import Any

from fastresource.i18n import _t


class ResourceError(Exception):
    """Base class of every error raised by the resource layer."""

    status_code: int = 500
    client_error: bool = False

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message()
        super().__init__(self.message)

    def default_message(self) -> str:
        return _t("An unexpected error occurred.")


class FieldDefinitionError(ResourceError):
    """A resource declares fields that cannot work together (duplicate keys, missing relation name...)."""

    def default_message(self) -> str:
        return _t("The field definition is invalid.")


class AuthorizationError(ResourceError):
    status_code = 403
    client_error = True

    def __init__(self, action: str | None = None, message: str | None = None):
        self.action = action
        super().__init__(message)

    def default_message(self) -> str:
        return _t("This action is unauthorized.")


class EntityNotFound(ResourceError):
    status_code = 404
    client_error = True

    def __init__(self, model_name: str, identifier: Any):
        self.model_name = model_name
        self.identifier = identifier
        super().__init__(_t("{model} not found", model=model_name))


class ValidationError(ResourceError):
    """Field keyed validation messages, raised before any transaction opens."""

    status_code = 422
    client_error = True

    def __init__(self, errors: dict[str, list[str]], message: str | None = None):
        self.errors = errors
        super().__init__(message)

    def default_message(self) -> str:
        return _t("The given data was invalid.")


class AttachmentLimitExceeded(ResourceError):
    status_code = 422
    client_error = True

    def __init__(self, current: int, limit: int, attempting: int, relation: str | None = None):
        self.current = current
        self.limit = limit
        self.attempting = attempting
        self.relation = relation
        super().__init__(
            _t(
                "Cannot attach {attempting} item(s): the limit of {limit} would be exceeded ({current} currently attached).",
                attempting=attempting,
                limit=limit,
                current=current,
            )
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "current": self.current,
            "limit": self.limit,
            "attempting": self.attempting,
        }


class UnsupportedOperation(ResourceError):
    status_code = 400
    client_error = True

    def __init__(self, operation: str, relation_kind: str | None = None):
        self.operation = operation
        self.relation_kind = relation_kind

        if relation_kind:
            message = _t(
                "The {operation} operation is not supported for {kind} relations.",
                operation=operation,
                kind=relation_kind,
            )
        else:
            message = _t("The {operation} operation is not supported.", operation=operation)

        super().__init__(message)


class PersistenceFailure(ResourceError):
    """
    Any failure inside the transactional window.

    The caller only gets a generic message and the correlation id, the
    original exception stays available as ``__cause__`` for the logs.
    """

    def __init__(self, correlation_id: str | None = None, original: BaseException | None = None):
        self.correlation_id = correlation_id or str(uuid.uuid4())
        self.original = original
        super().__init__(
            _t(
                "The operation could not be completed. Reference: {correlation_id}",
                correlation_id=self.correlation_id,
            )
        )


class InvalidStateTransition(ResourceError):
    def __init__(self, current: Any, target: Any):
        self.current = current
        self.target = target
        super().__init__(f"Cannot transition from {current} to {target}")


__all__ = [
    "ResourceError",
    "FieldDefinitionError",
    "AuthorizationError",
    "EntityNotFound",
    "ValidationError",
    "AttachmentLimitExceeded",
    "UnsupportedOperation",
    "PersistenceFailure",
    "InvalidStateTransition",
]
