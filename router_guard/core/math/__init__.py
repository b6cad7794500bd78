"""
Core Math — чистые примитивы над uint256.

Модули:
- uint: границы и валидация беззнаковых 256-битных целых
- expressions: вычисление оператора сравнения (ExpressionEvaluator)
"""

from .expressions import evaluate
from .uint import UINT256_MAX, is_uint256, require_uint256

__all__ = [
    "UINT256_MAX",
    "is_uint256",
    "require_uint256",
    "evaluate",
]
