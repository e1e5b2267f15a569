# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from fastresource.persist.state import (
    OperationKind,
    PersistState,
    can_transition,
    check_transition,
)
from fastresource.persist.validation import RuleViolation, Validator
from fastresource.persist.operation import (
    CreateOperation,
    PersistOperation,
    UpdateOperation,
    operation_for,
)


__all__ = [
    "OperationKind",
    "PersistState",
    "can_transition",
    "check_transition",
    "Validator",
    "RuleViolation",
    "PersistOperation",
    "CreateOperation",
    "UpdateOperation",
    "operation_for",
]
