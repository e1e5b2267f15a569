# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from fastresource.attachments.belongs_to_many import BelongsToManyAttachmentService
from fastresource.fields.enums import RelationKind


class MorphToManyAttachmentService(BelongsToManyAttachmentService):
    """Pivot rows point to the parent with the morph alias of its model and its identifier."""

    relation_kinds = (RelationKind.MORPH_TO_MANY,)


__all__ = [
    "MorphToManyAttachmentService",
]
