"""
Test suite for router-guard

Contains:
- tests/unit/          : Unit tests for models, math, lock, ledger, engine, stages and router
"""
