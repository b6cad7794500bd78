"""
PostconditionCheck — Факт о мире, обязательный после исполнения скрипта

Immutable Pydantic модель. Вычисляется ровно один раз, после исполнения,
и никогда не сохраняется.

Семантика: `balance_of(context, target) <op> compare_to`.
Если `context` — NATIVE_ASSET, используется нативный баланс `target`.
"""

from pydantic import BaseModel, Field

from router_guard.core.domain.addresses import NATIVE_ASSET, Address
from router_guard.core.domain.operators import RelationalOperator
from router_guard.core.domain.scalars import Uint256


class PostconditionCheck(BaseModel):
    """Постусловие над балансом `target` в активе `context`."""

    target: Address = Field(..., description="Адрес, чей баланс проверяется")
    context: Address = Field(..., description="Актив (или NATIVE_ASSET)")
    compare_to: Uint256 = Field(..., description="Порог (uint256)")
    op: RelationalOperator = Field(..., description="Оператор сравнения")

    model_config = {"frozen": True}

    def is_native(self) -> bool:
        """True если проверяется нативный баланс."""
        return self.context == NATIVE_ASSET

    def describe(self) -> str:
        return f"balance({self.context}, {self.target}) {self.op.symbol} {self.compare_to}"
