# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import TYPE_CHECKING, Any

from fastresource.attachments.registry import AttachmentServiceRegistry
from fastresource.context import ResourceContext, reset_context, set_context
from fastresource.dependencies import get_service
from fastresource.exceptions import ResourceError
from fastresource.i18n import _t
from fastresource.resources.authorization import authorize
from fastresource.schemas.attachment import AttachmentEnvelope

if TYPE_CHECKING:
    from fastresource.resources.resource import Resource


OPERATION_ACTIONS: dict[str, str | None] = {
    "attachable": None,
    "attach": "attach",
    "detach": "detach",
    "sync": "attach",
}


async def handle_attachment(
    resource: "Resource",
    parent_id: Any,
    field_key: str,
    operation: str,
    context: ResourceContext,
    **kwargs: Any,
) -> AttachmentEnvelope:
    """
    Run an attachment operation on the relation field of a stored entity.

    The parent must exist, the field must be attachable and the user must
    be allowed to run the action on the parent. Every refusal is returned
    as a failed envelope.
    """
    token = set_context(context)

    try:
        parent = await resource.find(parent_id)

        if parent is None:
            return AttachmentEnvelope(success=False, message=_t("{model} not found", model=resource.label()))

        field = resource.get_field(field_key, context)

        if field is None or field.relation_kind is None:
            return AttachmentEnvelope(success=False, message=_t("Field not found"))

        if operation not in OPERATION_ACTIONS:
            return AttachmentEnvelope(
                success=False,
                message=_t("The {operation} operation is not supported.", operation=operation),
            )

        action = OPERATION_ACTIONS[operation]

        if action is not None:
            await authorize(resource, action, parent, context)

        if not field.attachable:
            return AttachmentEnvelope(success=False, message=_t("Field is not attachable"))

        registry = get_service(AttachmentServiceRegistry)

        if not registry.supports(field.relation_kind):
            return AttachmentEnvelope(
                success=False,
                message=_t(
                    "Attachment not supported for this field type: {type}",
                    type=field.type.value,
                ),
            )

        return await registry.for_field(field, parent, context).handle(operation, **kwargs)
    except ResourceError as e:
        if not e.client_error:
            raise

        return AttachmentEnvelope(success=False, message=e.message)
    finally:
        reset_context(token)


__all__ = [
    "OPERATION_ACTIONS",
    "handle_attachment",
]
