# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from fastresource.attachments.pivot import filter_pivot_data, is_keyed_by_id, pivot_data_by_id
from fastresource.attachments.base import FALLBACK_SEARCH_ATTRIBUTES, AttachmentService
from fastresource.attachments.has_many import HasManyAttachmentService
from fastresource.attachments.morph_many import MorphManyAttachmentService
from fastresource.attachments.belongs_to_many import BelongsToManyAttachmentService
from fastresource.attachments.morph_to_many import MorphToManyAttachmentService
from fastresource.attachments.registry import DEFAULT_SERVICES, AttachmentServiceRegistry
from fastresource.attachments.manager import OPERATION_ACTIONS, handle_attachment


__all__ = [
    "filter_pivot_data",
    "is_keyed_by_id",
    "pivot_data_by_id",
    "FALLBACK_SEARCH_ATTRIBUTES",
    "AttachmentService",
    "HasManyAttachmentService",
    "MorphManyAttachmentService",
    "BelongsToManyAttachmentService",
    "MorphToManyAttachmentService",
    "DEFAULT_SERVICES",
    "AttachmentServiceRegistry",
    "OPERATION_ACTIONS",
    "handle_attachment",
]
