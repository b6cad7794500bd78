"""Stages — упорядоченные стадии guarded-вызова.

- STAGE 0: NativeBalanceGuard.snapshot
- STAGE 1: FundEscrow
- STAGE 2: ExecutionDelegate
- STAGE 3: InvariantChecker
- STAGE 4: NativeBalanceGuard.assert_unchanged
"""

from .stage_00_native_balance import NativeBalanceGuard, NativeBalanceResult
from .stage_01_fund_escrow import EscrowResult, FundEscrow
from .stage_02_execution_delegate import ExecutionDelegate
from .stage_03_invariant_check import CheckObservation, InvariantChecker, VerificationResult

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
