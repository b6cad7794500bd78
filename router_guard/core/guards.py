"""AssertionGuard — превращение ложного предиката в прерывание вызова."""

from router_guard.core.domain.errors import ErrorClassification, RouterAbort


def check(predicate: bool, kind: ErrorClassification, details: str = "") -> None:
    """
    No-op если predicate истинен, иначе RouterAbort(kind).

    Откат эффектов выполняет транзакция леджера, открытая роутером:
    исключение проходит до верха вызова без локальной обработки.

    Raises:
        RouterAbort: Если predicate ложен
    """
    if not predicate:
        raise RouterAbort(kind, details)
