"""
Uint256 Safeguards — Беззнаковые целые в пределах 256 бит

Все суммы, балансы и пороги в роутере — беззнаковые 256-битные целые.
Python int не ограничен, поэтому границы проверяются явно.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Отрицательные значения никогда не попадают в сравнения и переводы
2. Значения > UINT256_MAX отклоняются до любого побочного эффекта
3. bool не считается числом (True/False отклоняются)
"""

from typing import Final

# =============================================================================
# ГРАНИЦЫ
# =============================================================================

UINT256_MAX: Final[int] = (1 << 256) - 1


# =============================================================================
# ПРОВЕРКИ
# =============================================================================


def is_uint256(value: object) -> bool:
    """
    Проверка, что значение — целое в диапазоне [0, UINT256_MAX].

    Args:
        value: Проверяемое значение

    Returns:
        True если значение является валидным uint256

    Examples:
        >>> is_uint256(0)
        True
        >>> is_uint256(-1)
        False
        >>> is_uint256(True)
        False
    """
    if isinstance(value, bool) or not isinstance(value, int):
        return False
    return 0 <= value <= UINT256_MAX


def require_uint256(value: object, name: str = "value") -> int:
    """
    Валидация uint256 с исключением.

    Args:
        value: Проверяемое значение
        name: Имя параметра для сообщения об ошибке

    Returns:
        value без изменений

    Raises:
        ValueError: Если значение не является uint256
    """
    if not is_uint256(value):
        raise ValueError(f"{name} must be an unsigned 256-bit integer, got {value!r}")
    return value  # type: ignore[return-value]
