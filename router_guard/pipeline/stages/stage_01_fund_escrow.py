"""STAGE 1: FundEscrow

Перевод средств вызывающего по списку TokenMove до исполнения скрипта.

Порядок:
1. Валидация ВСЕХ назначений → ZERO_ADDRESS до первого перевода
2. transfer_from(caller → move.to) строго в порядке списка

Ретраев нет: ошибка любого перевода прерывает весь вызов.

ВНИМАНИЕ для интеграторов: отдельного API управления allowance нет.
Allowance, выданный роутеру, может быть потрачен любым вызывающим,
который передаст подходящие команды, если команды не ограничены внешним
слоем авторизации. Выдавайте роутеру только точные allowance на вызов.
"""

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

from router_guard.core import guards
from router_guard.core.domain.addresses import normalize_address
from router_guard.core.domain.errors import ErrorClassification
from router_guard.core.domain.token_move import TokenMove
from router_guard.ledger.interfaces import AssetLedger


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EscrowResult:
    """Результат STAGE 1."""

    caller: str
    applied_moves: Tuple[TokenMove, ...]

    # Детали
    details: str


class FundEscrow:
    """Перевод средств вызывающего через transfer-on-behalf."""

    def __init__(self, ledger: AssetLedger, router_address: str):
        """
        Args:
            ledger: внешний леджер активов
            router_address: адрес роутера (spender в transfer_from)
        """
        self.ledger = ledger
        self.router_address = normalize_address(router_address)

    def stage(self, moves: Sequence[TokenMove], caller: str) -> EscrowResult:
        """Валидация и исполнение переводов.

        Args:
            moves: переводы в порядке исполнения
            caller: владелец средств

        Returns:
            EscrowResult с применёнными переводами

        Raises:
            RouterAbort(ZERO_ADDRESS): если назначение хотя бы одного перевода нулевое
            LedgerError: ошибка внешнего актива (allowance, баланс)
        """
        caller = normalize_address(caller)

        # 1. Валидация до любых переводов
        for index, move in enumerate(moves):
            guards.check(
                not move.is_zero_destination(),
                ErrorClassification.ZERO_ADDRESS,
                f"approval token #{index} ({move.token}) has null destination",
            )

        # 2. Переводы в порядке списка
        for index, move in enumerate(moves):
            self.ledger.transfer_from(
                move.token, caller, self.router_address, move.to, move.amount
            )
            logger.debug(
                "Escrow #%d: %d of %s from %s to %s", index, move.amount, move.token, caller, move.to
            )

        return EscrowResult(
            caller=caller,
            applied_moves=tuple(moves),
            details=f"PASS: {len(moves)} token move(s) staged",
        )
