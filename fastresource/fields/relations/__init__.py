# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from fastresource.fields.relations.morph_map import MorphMap, get_morph_map
from fastresource.fields.relations.metadata import RelationMetadata, resolve_relation_metadata
from fastresource.fields.relations.label import FALLBACK_LABEL_ATTRIBUTES, resolve_label
from fastresource.fields.relations.base import RelationField
from fastresource.fields.relations.belongs_to import BelongsTo
from fastresource.fields.relations.has_one import HasOne
from fastresource.fields.relations.has_many import HasMany
from fastresource.fields.relations.morph_to import MorphTo
from fastresource.fields.relations.morph_one import MorphOne
from fastresource.fields.relations.morph_many import MorphMany
from fastresource.fields.relations.belongs_to_many import BelongsToMany
from fastresource.fields.relations.morph_to_many import MorphToMany


__all__ = [
    "MorphMap",
    "get_morph_map",
    "RelationMetadata",
    "resolve_relation_metadata",
    "FALLBACK_LABEL_ATTRIBUTES",
    "resolve_label",
    "RelationField",
    "BelongsTo",
    "HasOne",
    "HasMany",
    "MorphTo",
    "MorphOne",
    "MorphMany",
    "BelongsToMany",
    "MorphToMany",
]
