"""STAGE 0 / STAGE 4: NativeBalanceGuard

- Снапшот собственного нативного баланса роутера на входе (STAGE 0)
- Проверка неизменности после исполнения и всех постусловий (STAGE 4)

Движок может принимать и пересылать нативное значение произвольно
во время скрипта. Guard не ограничивает, КАК значение использовалось,
только итог: баланс на выходе == баланс на входе.

Снапшот берётся до зачисления прикреплённого к вызову значения, поэтому
прикреплённое значение обязано быть выведено скриптом из роутера.
"""

import logging
from dataclasses import dataclass

from router_guard.core import guards
from router_guard.core.domain.addresses import normalize_address
from router_guard.core.domain.errors import ErrorClassification
from router_guard.ledger.interfaces import AssetLedger


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NativeBalanceResult:
    """Результат сравнения нативного баланса."""

    balance_before: int
    balance_after: int

    # Детали
    details: str


class NativeBalanceGuard:
    """Guard сохранения нативного баланса роутера."""

    def __init__(self, ledger: AssetLedger, router_address: str):
        self.ledger = ledger
        self.router_address = normalize_address(router_address)

    def snapshot(self) -> int:
        """Нативный баланс роутера на момент вызова."""
        balance = self.ledger.native_balance(self.router_address)
        logger.debug("Native balance snapshot: %d", balance)
        return balance

    def assert_unchanged(self, before: int) -> NativeBalanceResult:
        """
        Raises:
            RouterAbort(NATIVE_BALANCE_MISMATCH): если баланс изменился
        """
        after = self.ledger.native_balance(self.router_address)
        guards.check(
            after == before,
            ErrorClassification.NATIVE_BALANCE_MISMATCH,
            f"router native balance {after} != {before} at entry",
        )
        return NativeBalanceResult(
            balance_before=before,
            balance_after=after,
            details=f"PASS: native balance conserved at {after}",
        )
