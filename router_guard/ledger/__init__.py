"""Ledger — внешнее состояние активов (интерфейс и эталонная реализация)."""

from .in_memory import (
    InMemoryLedger,
    InsufficientAllowance,
    InsufficientBalance,
    LedgerError,
    TransferRecord,
)
from .interfaces import AssetLedger

__all__ = [
    "AssetLedger",
    "InMemoryLedger",
    "LedgerError",
    "InsufficientBalance",
    "InsufficientAllowance",
    "TransferRecord",
]
