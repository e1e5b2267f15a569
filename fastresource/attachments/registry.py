# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from typing import TYPE_CHECKING, Any

from fastresource.attachments.base import AttachmentService
from fastresource.attachments.belongs_to_many import BelongsToManyAttachmentService
from fastresource.attachments.has_many import HasManyAttachmentService
from fastresource.attachments.morph_many import MorphManyAttachmentService
from fastresource.attachments.morph_to_many import MorphToManyAttachmentService
from fastresource.exceptions import UnsupportedOperation
from fastresource.fields.enums import RelationKind

if TYPE_CHECKING:
    from fastresource.context import ResourceContext
    from fastresource.fields.relations.base import RelationField


DEFAULT_SERVICES: tuple[type[AttachmentService], ...] = (
    HasManyAttachmentService,
    MorphManyAttachmentService,
    BelongsToManyAttachmentService,
    MorphToManyAttachmentService,
)


class AttachmentServiceRegistry:
    """
    Attachment service of each relation kind.

    Example:
        ```python
        service = get_service(AttachmentServiceRegistry).for_field(field, post, context)
        await service.attach([1, 2])
        ```
    """

    def __init__(self):
        self._services: dict[RelationKind, type[AttachmentService]] = {}

        for service_class in DEFAULT_SERVICES:
            self.register(service_class)

    def register(self, service_class: type[AttachmentService], *kinds: RelationKind) -> None:
        """Use the service class for its relation kinds, or for the given ones."""
        for kind in kinds or service_class.relation_kinds:
            self._services[kind] = service_class

    def get(self, kind: RelationKind | None) -> type[AttachmentService] | None:
        if kind is None:
            return None

        return self._services.get(kind)

    def supports(self, kind: RelationKind | None) -> bool:
        return self.get(kind) is not None

    def for_field(
        self,
        field: "RelationField",
        parent: Any,
        context: "ResourceContext | None" = None,
    ) -> AttachmentService:
        """
        Raises:
            UnsupportedOperation: When the relation kind of the field has no attachment service.
        """
        kind = getattr(field, "relation_kind", None)
        service_class = self.get(kind)

        if service_class is None:
            raise UnsupportedOperation("attach", kind.value if kind is not None else None)

        return service_class(field, parent, context)


__all__ = [
    "DEFAULT_SERVICES",
    "AttachmentServiceRegistry",
]
