# Copyright Krafter SAS <developer@krafter.io>
# MIT License (see LICENSE file).

from enum import Enum

from fastresource.exceptions import InvalidStateTransition


class OperationKind(str, Enum):
    CREATE = "create"
    UPDATE = "update"


class PersistState(str, Enum):
    INITIALIZED = "initialized"
    AUTHORIZED = "authorized"
    VALIDATED = "validated"
    FILLED = "filled"
    SAVED = "saved"
    SYNCED = "synced"
    LOGGED = "logged"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PersistState.COMPLETED, PersistState.FAILED)


_FORWARD: dict[PersistState, PersistState] = {
    PersistState.INITIALIZED: PersistState.AUTHORIZED,
    PersistState.AUTHORIZED: PersistState.VALIDATED,
    PersistState.VALIDATED: PersistState.FILLED,
    PersistState.FILLED: PersistState.SAVED,
    PersistState.SAVED: PersistState.SYNCED,
    PersistState.SYNCED: PersistState.LOGGED,
    PersistState.LOGGED: PersistState.COMPLETED,
}


def can_transition(current: PersistState, target: PersistState) -> bool:
    if current.is_terminal:
        return False

    return target == PersistState.FAILED or _FORWARD.get(current) == target


def check_transition(current: PersistState, target: PersistState) -> PersistState:
    if not can_transition(current, target):
        raise InvalidStateTransition(current.value, target.value)

    return target


__all__ = [
    "OperationKind",
    "PersistState",
    "can_transition",
    "check_transition",
]
