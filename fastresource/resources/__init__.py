# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from fastresource.resources.resource import Resource
from fastresource.resources.registry import ResourceRegistry, register_resource
from fastresource.resources.authorization import Policy, authorize


__all__ = [
    "Resource",
    "ResourceRegistry",
    "register_resource",
    "Policy",
    "authorize",
]
