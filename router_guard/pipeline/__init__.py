"""Pipeline — стадии guarded-вызова роутера.

Порядок фиксирован:
lock → native snapshot → escrow → execution → postconditions → native compare → unlock
"""

from .stages import (
    CheckObservation,
    EscrowResult,
    ExecutionDelegate,
    FundEscrow,
    InvariantChecker,
    NativeBalanceGuard,
    NativeBalanceResult,
    VerificationResult,
)

__all__ = [
    "NativeBalanceGuard",
    "NativeBalanceResult",
    "FundEscrow",
    "EscrowResult",
    "ExecutionDelegate",
    "InvariantChecker",
    "VerificationResult",
    "CheckObservation",
]
