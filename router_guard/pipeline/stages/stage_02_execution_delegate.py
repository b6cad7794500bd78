"""STAGE 2: ExecutionDelegate

Непрозрачный вызов внешнего движка. Команды не инспектируются.
Вызов атомарен: ошибка движка прерывает весь top-level вызов, откат
эскроу и балансов выполняет транзакция роутера.
"""

import logging
from typing import Sequence, Tuple

from router_guard.core.domain.errors import ExecutionFailed
from router_guard.engine.interfaces import ScriptEngine


logger = logging.getLogger(__name__)


class ExecutionDelegate:
    """Адаптер внешнего движка."""

    def __init__(self, engine: ScriptEngine):
        self.engine = engine

    def run(self, commands: Sequence[object], state: Sequence[bytes]) -> Tuple[bytes, ...]:
        """Исполнение команд движком.

        Returns:
            Выходные буферы движка

        Raises:
            ExecutionFailed: любая ошибка движка, включая RouterAbort изнутри
                скрипта (исходная — в __cause__)
        """
        try:
            output = self.engine.run(list(commands), list(state))
        except Exception as exc:
            logger.warning("Engine failure: %s", exc)
            raise ExecutionFailed(f"{type(exc).__name__}: {exc}") from exc

        output = tuple(output)
        for index, buffer in enumerate(output):
            if not isinstance(buffer, (bytes, bytearray)):
                raise ExecutionFailed(
                    f"engine returned non-bytes buffer at index {index}: {type(buffer).__name__}"
                )

        logger.debug("Engine executed %d command(s), %d output buffer(s)", len(commands), len(output))
        return tuple(bytes(buffer) for buffer in output)
