"""Core Layer: pure domain logic, no IO, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - validate_* functions return error descriptors; apply_* functions mutate
      only the dataclass they are given

Design Decisions:
    - Functional core separated from imperative shell; user_locks is the one
      async helper kept here because services of every kind share it
"""
