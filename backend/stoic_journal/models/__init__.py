"""ORM Models: SQLAlchemy declarative models.

Invariants:
    - All models inherit from Base (db/base.py)
    - Domain records live inside KVEntry.value; there are no per-entity tables

Design Decisions:
    - All models imported here so Base.metadata is complete before create_all
      or Alembic autogenerate runs
"""

from stoic_journal.models.kv_entry import KVEntry  # noqa: F401
