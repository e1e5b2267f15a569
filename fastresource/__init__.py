# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from fastresource import (
    attachments,
    audit,
    bus,
    config,
    context,
    dependencies,
    exceptions,
    fields,
    i18n,
    logger,
    models,
    orm,
    persist,
    resources,
    schemas,
)

__all__ = [
    "attachments",
    "audit",
    "bus",
    "config",
    "context",
    "dependencies",
    "exceptions",
    "fields",
    "i18n",
    "logger",
    "models",
    "orm",
    "persist",
    "resources",
    "schemas",
]
