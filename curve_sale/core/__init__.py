"""
Core domain models, fixed-point primitives, and the curve pricing engine.

This module contains the building blocks that are independent of the
ledger and of any platform runtime.
"""
