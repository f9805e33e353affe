"""Services Layer: async orchestration around the pure core.

Invariants:
    - The only module layer that awaits a LocationStore
    - Every public operation returns a Success or Failure value
"""
