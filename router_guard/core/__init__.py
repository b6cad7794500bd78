"""
Core domain models, pure math primitives, guards and JSON contracts.

This package contains the building blocks that are independent of the
external ledger and the external command-execution engine.
"""
