"""Lock — single-entry дисциплина точки входа роутера."""

from .state_machine import (
    LockState,
    LockTransitionResult,
    SingleEntryLock,
)

__all__ = [
    "LockState",
    "LockTransitionResult",
    "SingleEntryLock",
]
