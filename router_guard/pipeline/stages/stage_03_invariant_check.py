"""STAGE 3: InvariantChecker

Проверка постусловий после исполнения скрипта.

Для каждой проверки в порядке списка:
- запрос баланса target в активе context (нативный — для NATIVE_ASSET)
- balance <op> compare_to через ExpressionEvaluator
- ложный предикат → POSTCONDITION_FAILED

Все проверки обязаны выполняться одновременно: порядок определяет только,
какая ошибка будет сообщена первой. Стадия только читает состояние.
"""

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

from router_guard.core import guards
from router_guard.core.domain.errors import ErrorClassification
from router_guard.core.domain.postcondition import PostconditionCheck
from router_guard.core.math.expressions import evaluate
from router_guard.ledger.interfaces import AssetLedger


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckObservation:
    """Наблюдение одной выполненной проверки (ложная прерывает verify)."""

    index: int
    check: PostconditionCheck
    observed: int


@dataclass(frozen=True)
class VerificationResult:
    """Результат STAGE 3."""

    observations: Tuple[CheckObservation, ...]

    # Детали
    details: str

    @property
    def checks_passed(self) -> int:
        return len(self.observations)


class InvariantChecker:
    """Проверка постусловий над балансами."""

    def __init__(self, ledger: AssetLedger):
        self.ledger = ledger

    def observe(self, check: PostconditionCheck) -> int:
        """Текущий баланс, к которому относится проверка."""
        if check.is_native():
            return self.ledger.native_balance(check.target)
        return self.ledger.balance_of(check.context, check.target)

    def verify(self, checks: Sequence[PostconditionCheck]) -> VerificationResult:
        """
        Raises:
            RouterAbort(POSTCONDITION_FAILED): на первой ложной проверке
        """
        observations = []

        for index, check in enumerate(checks):
            observed = self.observe(check)
            passed = evaluate(observed, check.compare_to, check.op)

            guards.check(
                passed,
                ErrorClassification.POSTCONDITION_FAILED,
                f"check #{index}: {check.describe()} (observed {observed})",
            )

            observations.append(
                CheckObservation(index=index, check=check, observed=observed)
            )
            logger.debug("Check #%d passed: %s (observed %d)", index, check.describe(), observed)

        return VerificationResult(
            observations=tuple(observations),
            details=f"PASS: {len(observations)} postcondition(s) hold",
        )
