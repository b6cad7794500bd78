"""
ExpressionEvaluator — Чистая функция сравнения двух uint256

Единственная точка интерпретации RelationalOperator. Функция тотальна
по всем вариантам enum: отсутствие оператора в таблице — ошибка
программирования, а не пользовательского ввода.
"""

import operator
from typing import Callable, Dict

from router_guard.core.domain.operators import RelationalOperator
from router_guard.core.math.uint import require_uint256


_COMPARATORS: Dict[RelationalOperator, Callable[[int, int], bool]] = {
    RelationalOperator.EQ: operator.eq,
    RelationalOperator.NEQ: operator.ne,
    RelationalOperator.GT: operator.gt,
    RelationalOperator.GTE: operator.ge,
    RelationalOperator.LT: operator.lt,
    RelationalOperator.LTE: operator.le,
}


def evaluate(lhs: int, rhs: int, op: RelationalOperator) -> bool:
    """
    Вычисление `lhs <op> rhs` для беззнаковых целых.

    Args:
        lhs: Левый операнд (обычно наблюдаемый баланс)
        rhs: Правый операнд (порог из постусловия)
        op: Оператор сравнения

    Returns:
        Результат сравнения

    Raises:
        ValueError: Если операнд не uint256 или оператор неизвестен

    Examples:
        >>> evaluate(100, 100, RelationalOperator.GTE)
        True
        >>> evaluate(99, 100, RelationalOperator.GT)
        False
    """
    require_uint256(lhs, "lhs")
    require_uint256(rhs, "rhs")

    try:
        comparator = _COMPARATORS[RelationalOperator(op)]
    except (KeyError, ValueError):
        raise ValueError(f"Unknown relational operator: {op!r}")

    return comparator(lhs, rhs)
