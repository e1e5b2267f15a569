# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from fastresource.models.action_event import BaseActionEvent


__all__ = [
    "BaseActionEvent",
]
