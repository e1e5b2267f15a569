# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from fastresource.attachments.has_many import HasManyAttachmentService
from fastresource.fields.enums import RelationKind


class MorphManyAttachmentService(HasManyAttachmentService):
    """Children pointing to the parent with a (type, id) pair, both written and cleared together."""

    relation_kinds = (RelationKind.MORPH_MANY,)


__all__ = [
    "MorphManyAttachmentService",
]
