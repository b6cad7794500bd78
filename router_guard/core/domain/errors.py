"""
ErrorClassification и иерархия прерываний роутера

Любая ошибка на любой стадии прерывает весь вызов целиком. Классификация
не несёт payload, кроме своего вида; `details` — только диагностика.
"""

from enum import Enum


class ErrorClassification(str, Enum):
    """Причина прерывания вызова."""

    ZERO_ADDRESS = "ZERO_ADDRESS"
    POSTCONDITION_FAILED = "POSTCONDITION_FAILED"
    NATIVE_BALANCE_MISMATCH = "NATIVE_BALANCE_MISMATCH"
    REENTRANT_CALL = "REENTRANT_CALL"
    EXECUTION_FAILED = "EXECUTION_FAILED"


class RouterAbort(RuntimeError):
    """
    Прерывание top-level вызова.

    Attributes:
        kind: классификация причины
        details: человекочитаемая диагностика (может быть пустой)
    """

    def __init__(self, kind: ErrorClassification, details: str = ""):
        self.kind = ErrorClassification(kind)
        self.details = details
        message = self.kind.value if not details else f"{self.kind.value}: {details}"
        super().__init__(message)


class ReentrantCall(RouterAbort):
    """Повторный вход в роутер во время активного вызова."""

    def __init__(self, details: str = ""):
        super().__init__(ErrorClassification.REENTRANT_CALL, details)


class ExecutionFailed(RouterAbort):
    """Внешний движок сообщил об ошибке; исходное исключение — в __cause__."""

    def __init__(self, details: str = ""):
        super().__init__(ErrorClassification.EXECUTION_FAILED, details)
