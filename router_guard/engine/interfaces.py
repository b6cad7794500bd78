"""
ScriptEngine — внешний движок исполнения команд

Роутер не интерпретирует команды: он передаёт их движку вместе с
начальным состоянием и получает выходные буферы. Ошибка движка
сигнализируется исключением и прерывает весь вызов.
"""

from enum import Enum
from typing import Protocol, Sequence, runtime_checkable


class DelegateCallPolicy(str, Enum):
    """Политика для delegated-вызовов внутри скрипта."""

    ALLOW = "ALLOW"
    DENY = "DENY"


class EngineError(RuntimeError):
    """Ошибка исполнения скрипта внешним движком."""


class DelegateCallDenied(EngineError):
    """Delegated-вызов запрещён политикой DelegateCallPolicy.DENY."""


@runtime_checkable
class ScriptEngine(Protocol):
    """Публичная поверхность движка, потребляемая роутером."""

    def run(self, commands: Sequence[object], state: Sequence[bytes]) -> Sequence[bytes]:
        ...
