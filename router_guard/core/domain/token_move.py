"""
TokenMove — Перевод средств вызывающего до исполнения скрипта

Immutable Pydantic модель. Создаётся на один вызов из входа вызывающего,
жизненного цикла за пределами вызова не имеет.

Нулевой `to` представим намеренно: его отклоняет стадия FundEscrow с
классификацией ZERO_ADDRESS, а не валидация модели.
"""

from pydantic import BaseModel, Field

from router_guard.core.domain.addresses import ZERO_ADDRESS, Address
from router_guard.core.domain.scalars import Uint256


class TokenMove(BaseModel):
    """
    Перевод `amount` единиц `token` от вызывающего на `to`.

    Исполняется через transfer-on-behalf: вызывающий должен заранее
    выдать роутеру allowance на `token`.
    """

    token: Address = Field(..., description="Адрес актива (токен-контракта)")
    amount: Uint256 = Field(..., description="Сумма (uint256)")
    to: Address = Field(..., description="Адрес назначения (не нулевой)")

    model_config = {"frozen": True}

    def is_zero_destination(self) -> bool:
        """True если назначение — null-адрес."""
        return self.to == ZERO_ADDRESS
