"""
Test suite for curve-sale

Contains:
- tests/unit/          : Unit tests for the curve engine, domain models and sale ledger
"""
