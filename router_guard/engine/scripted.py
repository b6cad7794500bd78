"""
ScriptedEngine — эталонный движок для встраивания и тестов

Команда — вызов Python callable над слотами состояния:
- args: индексы слотов state, передаваемые как позиционные аргументы
- output: индекс слота для результата (None — результат отбрасывается);
  индекс == len(state) дописывает новый слот
- call_type: CALL или DELEGATECALL (последний подчиняется DelegateCallPolicy)

JSON-представление команды (вход execute_payload):
    {"target": "<имя>", "args": [0, 1], "output": 2, "call_type": "CALL"}
`target` — имя callable в реестре `targets` движка; остальные поля
необязательны. Такие команды декодируются в Command перед исполнением.

Любое исключение команды превращается в EngineError с исходным
исключением в __cause__.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

from router_guard.engine.interfaces import DelegateCallDenied, DelegateCallPolicy, EngineError


logger = logging.getLogger(__name__)


class CallType(str, Enum):
    """Тип вызова команды."""

    CALL = "CALL"
    DELEGATECALL = "DELEGATECALL"


@dataclass(frozen=True)
class Command:
    """Одна команда скрипта."""

    target: Callable[..., Optional[bytes]]
    args: Tuple[int, ...] = ()
    output: Optional[int] = None
    call_type: CallType = CallType.CALL


class ScriptedEngine:
    """Движок, исполняющий Command по порядку над копией state."""

    def __init__(
        self,
        delegate_call_policy: DelegateCallPolicy = DelegateCallPolicy.ALLOW,
        targets: Optional[Mapping[str, Callable[..., Optional[bytes]]]] = None
    ):
        """
        Args:
            delegate_call_policy: политика DELEGATECALL
            targets: реестр именованных callable для JSON-команд
        """
        self.delegate_call_policy = DelegateCallPolicy(delegate_call_policy)
        self.targets = dict(targets or {})

    def decode(self, index: int, command: Mapping[str, Any]) -> Command:
        """JSON-команда → Command через реестр targets.

        Raises:
            EngineError: неизвестное имя или некорректные поля
        """
        name = command.get("target")
        if not isinstance(name, str) or name not in self.targets:
            raise EngineError(f"command {index}: unknown target {name!r}")

        args = command.get("args", [])
        output = command.get("output")
        if not isinstance(args, (list, tuple)) or not all(
            type(i) is int for i in args
        ):
            raise EngineError(f"command {index}: args must be a list of slot indices, got {args!r}")
        if output is not None and type(output) is not int:
            raise EngineError(f"command {index}: output must be a slot index, got {output!r}")

        try:
            call_type = CallType(command.get("call_type", CallType.CALL))
        except ValueError:
            raise EngineError(f"command {index}: unknown call type {command.get('call_type')!r}")

        return Command(target=self.targets[name], args=tuple(args), output=output, call_type=call_type)

    def run(self, commands: Sequence[object], state: Sequence[bytes]) -> List[bytes]:
        """
        Исполнение команд в порядке списка.

        Args:
            commands: последовательность Command или JSON-команд
            state: начальное состояние (не изменяется)

        Returns:
            Итоговое состояние

        Raises:
            EngineError: при неподдерживаемой команде, ошибке слота или
                исключении внутри команды
            DelegateCallDenied: DELEGATECALL при политике DENY
        """
        slots = list(state)

        for index, command in enumerate(commands):
            if isinstance(command, Mapping):
                command = self.decode(index, command)
            if not isinstance(command, Command):
                raise EngineError(f"command {index}: unsupported command type {type(command).__name__}")

            if (
                command.call_type == CallType.DELEGATECALL
                and self.delegate_call_policy == DelegateCallPolicy.DENY
            ):
                raise DelegateCallDenied(f"command {index}: delegated calls are disabled")

            # Отрицательные индексы не адресуют слоты с конца
            if not all(0 <= i < len(slots) for i in command.args):
                raise EngineError(f"command {index}: argument slot out of range {command.args}")
            inputs = [slots[i] for i in command.args]

            try:
                result = command.target(*inputs)
            except Exception as exc:
                raise EngineError(f"command {index} failed: {exc}") from exc

            if command.output is not None:
                self._store(slots, index, command.output, result)

            logger.debug("Command %d executed (%s)", index, command.call_type.value)

        return slots

    @staticmethod
    def _store(slots: List[bytes], index: int, output: int, result: object) -> None:
        if not isinstance(result, (bytes, bytearray)):
            raise EngineError(f"command {index}: output must be bytes, got {type(result).__name__}")
        if output == len(slots):
            slots.append(bytes(result))
        elif 0 <= output < len(slots):
            slots[output] = bytes(result)
        else:
            raise EngineError(f"command {index}: output slot {output} out of range")
