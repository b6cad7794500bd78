"""
Contract Validation Module

Модуль для валидации JSON payload вызывающего перед построением моделей.
"""

from .validators import (
    ContractValidator,
    ExecuteRequestValidator,
    PostconditionCheckValidator,
    SchemaLoader,
    TokenMoveValidator,
    validate_execute_request,
    validate_postcondition_check,
    validate_token_move,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "TokenMoveValidator",
    "PostconditionCheckValidator",
    "ExecuteRequestValidator",
    # Functions
    "validate_token_move",
    "validate_postcondition_check",
    "validate_execute_request",
]
