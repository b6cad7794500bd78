"""
Router Guard — guarded execution front-end for an external script engine.

Stages caller funds before the script runs, runs the script atomically,
and verifies caller-declared postcondition and native-balance invariants
afterwards, rolling back the whole call on any failure.
"""

from router_guard.core.domain import (
    ErrorClassification,
    ExecuteRequest,
    PostconditionCheck,
    RelationalOperator,
    RouterAbort,
    TokenMove,
)
from router_guard.router import ExecutionContext, ExecutionResult, GuardedRouter, RouterConfig

__all__ = [
    "GuardedRouter",
    "RouterConfig",
    "ExecutionContext",
    "ExecutionResult",
    "ExecuteRequest",
    "TokenMove",
    "PostconditionCheck",
    "RelationalOperator",
    "ErrorClassification",
    "RouterAbort",
]
