"""
ExecuteRequest — Полный вход одного top-level вызова роутера

Immutable Pydantic модель. `commands` непрозрачны для роутера и
передаются движку без инспекции. `state` — начальное scratch-состояние
движка (байтовые буферы); в JSON представлении — hex-строки `0x...`.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from router_guard.core.domain.postcondition import PostconditionCheck
from router_guard.core.domain.token_move import TokenMove
from router_guard.core.domain.scalars import Uint256


class ExecuteRequest(BaseModel):
    """
    Вход точки входа роутера.

    Содержит:
    - Команды и начальное состояние движка
    - Переводы до исполнения (approval_tokens)
    - Постусловия после исполнения (checks)
    - Прикреплённое нативное значение (value)
    """

    commands: tuple[Any, ...] = Field(default=(), description="Непрозрачные команды движка")
    state: tuple[bytes, ...] = Field(default=(), description="Начальное состояние движка")
    approval_tokens: tuple[TokenMove, ...] = Field(
        default=(), description="Переводы от вызывающего до исполнения (в порядке списка)"
    )
    checks: tuple[PostconditionCheck, ...] = Field(
        default=(), description="Постусловия после исполнения (в порядке списка)"
    )
    value: Uint256 = Field(default=0, description="Прикреплённое нативное значение")

    model_config = {"frozen": True}

    @field_validator("state", mode="before")
    @classmethod
    def decode_hex_state(cls, v: Any) -> Any:
        """Декодирование hex-строк `0x...` в bytes (JSON payload)."""
        if isinstance(v, (list, tuple)):
            decoded = []
            for item in v:
                if isinstance(item, str):
                    if not item.startswith("0x"):
                        raise ValueError(f"state buffer must be 0x-prefixed hex, got {item!r}")
                    decoded.append(bytes.fromhex(item[2:]))
                else:
                    decoded.append(item)
            return tuple(decoded)
        return v
