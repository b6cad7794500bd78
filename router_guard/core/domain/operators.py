"""
RelationalOperator — Операторы сравнения для постусловий

Закрытый набор из шести операторов. Новый оператор добавляется расширением
enum и таблицы в core.math.expressions, без условий в других местах.
"""

from enum import Enum


class RelationalOperator(str, Enum):
    """Оператор сравнения `lhs <op> rhs`."""

    EQ = "EQ"
    NEQ = "NEQ"
    GT = "GT"
    GTE = "GTE"
    LT = "LT"
    LTE = "LTE"

    @property
    def symbol(self) -> str:
        """Математическая запись оператора (для диагностики)."""
        return _SYMBOLS[self]


_SYMBOLS = {
    RelationalOperator.EQ: "==",
    RelationalOperator.NEQ: "!=",
    RelationalOperator.GT: ">",
    RelationalOperator.GTE: ">=",
    RelationalOperator.LT: "<",
    RelationalOperator.LTE: "<=",
}
