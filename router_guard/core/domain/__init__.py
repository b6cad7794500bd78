"""
Domain models and value objects.

Contains caller-facing entities of one router invocation: TokenMove,
PostconditionCheck, ExecuteRequest, plus operators and error kinds.
"""

from router_guard.core.domain.addresses import (
    NATIVE_ASSET,
    ZERO_ADDRESS,
    Address,
    is_zero_address,
    normalize_address,
)
from router_guard.core.domain.errors import (
    ErrorClassification,
    ExecutionFailed,
    ReentrantCall,
    RouterAbort,
)
from router_guard.core.domain.operators import RelationalOperator
from router_guard.core.domain.postcondition import PostconditionCheck
from router_guard.core.domain.request import ExecuteRequest
from router_guard.core.domain.token_move import TokenMove

__all__ = [
    # Addresses
    "Address",
    "ZERO_ADDRESS",
    "NATIVE_ASSET",
    "normalize_address",
    "is_zero_address",
    # Errors
    "ErrorClassification",
    "RouterAbort",
    "ReentrantCall",
    "ExecutionFailed",
    # Models
    "RelationalOperator",
    "TokenMove",
    "PostconditionCheck",
    "ExecuteRequest",
]
