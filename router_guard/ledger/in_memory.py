"""
InMemoryLedger — эталонная реализация AssetLedger в памяти

Хранит балансы токенов, allowance, нативные балансы и журнал переводов.
Откат реализован стеком снапшотов: каждый transaction() сохраняет копию
состояния и восстанавливает её при исключении.

Allowance, равный UINT256_MAX, считается бесконечным и не уменьшается.
"""

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from router_guard.core.domain.addresses import NATIVE_ASSET, normalize_address
from router_guard.core.math.uint import UINT256_MAX, require_uint256


logger = logging.getLogger(__name__)


# =============================================================================
# ERRORS
# =============================================================================


class LedgerError(RuntimeError):
    """Ошибка внешнего актива (проходит через роутер без классификации)."""


class InsufficientBalance(LedgerError):
    pass


class InsufficientAllowance(LedgerError):
    pass


# =============================================================================
# RECORDS
# =============================================================================


@dataclass(frozen=True)
class TransferRecord:
    """Запись журнала переводов (token == NATIVE_ASSET для нативных)."""

    token: str
    sender: str
    to: str
    amount: int


@dataclass
class _LedgerState:
    tokens: Dict[str, Dict[str, int]]
    allowances: Dict[Tuple[str, str, str], int]
    native: Dict[str, int]
    transfers: List[TransferRecord]


# =============================================================================
# LEDGER
# =============================================================================


class InMemoryLedger:
    """
    Леджер в памяти с поддержкой вложенных транзакций.

    Все адреса нормализуются; суммы проверяются как uint256.
    """

    def __init__(self):
        self._state = _LedgerState(tokens={}, allowances={}, native={}, transfers=[])
        self._snapshots: List[_LedgerState] = []

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def balance_of(self, token: str, holder: str) -> int:
        token = normalize_address(token)
        holder = normalize_address(holder)
        return self._state.tokens.get(token, {}).get(holder, 0)

    def native_balance(self, holder: str) -> int:
        return self._state.native.get(normalize_address(holder), 0)

    def allowance(self, token: str, owner: str, spender: str) -> int:
        key = (normalize_address(token), normalize_address(owner), normalize_address(spender))
        return self._state.allowances.get(key, 0)

    @property
    def transfers(self) -> List[TransferRecord]:
        """Копия журнала переводов (в порядке исполнения)."""
        return list(self._state.transfers)

    @property
    def depth(self) -> int:
        """Глубина вложенности открытых транзакций."""
        return len(self._snapshots)

    # -------------------------------------------------------------------------
    # Token operations
    # -------------------------------------------------------------------------

    def mint(self, token: str, to: str, amount: int) -> None:
        """Выпуск токенов на `to` (настройка окружения)."""
        token = normalize_address(token)
        to = normalize_address(to)
        require_uint256(amount, "amount")
        self._credit(self._state.tokens.setdefault(token, {}), to, amount)

    def approve(self, token: str, owner: str, spender: str, amount: int) -> None:
        """Установка allowance `spender` на средства `owner`."""
        require_uint256(amount, "amount")
        key = (normalize_address(token), normalize_address(owner), normalize_address(spender))
        self._state.allowances[key] = amount

    def transfer(self, token: str, sender: str, to: str, amount: int) -> None:
        """Прямой перевод токенов от `sender` на `to`."""
        token = normalize_address(token)
        sender = normalize_address(sender)
        to = normalize_address(to)
        require_uint256(amount, "amount")

        balances = self._state.tokens.setdefault(token, {})
        self._debit(balances, sender, amount, token)
        self._credit(balances, to, amount)
        self._state.transfers.append(TransferRecord(token, sender, to, amount))

    def transfer_from(self, token: str, owner: str, spender: str, to: str, amount: int) -> None:
        """
        Перевод от имени `owner` силами `spender`.

        Raises:
            InsufficientAllowance: Если allowance < amount
            InsufficientBalance: Если баланс owner < amount
        """
        key = (normalize_address(token), normalize_address(owner), normalize_address(spender))
        require_uint256(amount, "amount")

        allowed = self._state.allowances.get(key, 0)
        if allowed < amount:
            raise InsufficientAllowance(
                f"allowance {allowed} < {amount} for token={key[0]} owner={key[1]} spender={key[2]}"
            )

        self.transfer(token, owner, to, amount)

        if allowed != UINT256_MAX:
            self._state.allowances[key] = allowed - amount

    # -------------------------------------------------------------------------
    # Native operations
    # -------------------------------------------------------------------------

    def fund_native(self, holder: str, amount: int) -> None:
        """Зачисление нативного значения (настройка окружения)."""
        require_uint256(amount, "amount")
        self._credit(self._state.native, normalize_address(holder), amount)

    def transfer_native(self, sender: str, to: str, amount: int) -> None:
        """
        Raises:
            InsufficientBalance: Если нативный баланс sender < amount
        """
        sender = normalize_address(sender)
        to = normalize_address(to)
        require_uint256(amount, "amount")

        self._debit(self._state.native, sender, amount, NATIVE_ASSET)
        self._credit(self._state.native, to, amount)
        self._state.transfers.append(TransferRecord(NATIVE_ASSET, sender, to, amount))

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """
        Транзакция: фиксация при успехе, полный откат при исключении.

        Вложенная транзакция при откате восстанавливает только своё
        начальное состояние; внешняя продолжает работу.
        """
        self._snapshots.append(copy.deepcopy(self._state))
        try:
            yield
        except BaseException:
            self._state = self._snapshots.pop()
            logger.debug("Ledger transaction rolled back (depth=%d)", len(self._snapshots))
            raise
        else:
            self._snapshots.pop()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @staticmethod
    def _debit(balances: Dict[str, int], holder: str, amount: int, token: Optional[str]) -> None:
        current = balances.get(holder, 0)
        if current < amount:
            raise InsufficientBalance(
                f"balance {current} < {amount} for token={token} holder={holder}"
            )
        balances[holder] = current - amount

    @staticmethod
    def _credit(balances: Dict[str, int], holder: str, amount: int) -> None:
        new_balance = balances.get(holder, 0) + amount
        if new_balance > UINT256_MAX:
            raise LedgerError(f"balance overflow for holder={holder}")
        balances[holder] = new_balance
