"""Core Layer: pure domain logic, no IO, no async.

Invariants:
    - No module in core/ imports from services/ or infrastructure/
    - All functions are pure; randomness arrives through RandomSource
"""
