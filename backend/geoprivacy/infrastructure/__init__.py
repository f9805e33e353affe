"""Infrastructure Layer: logging setup and reference LocationStore implementations.

Invariants:
    - Store implementations map their own failures to StoreError
    - Timeouts enforced here, never in core/ or services/
"""
