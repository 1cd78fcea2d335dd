"""Database Layer: SQLAlchemy declarative Base.

Invariants:
    - One Base shared by the ORM model and Alembic
    - Engines and sessions are owned by infrastructure/database.py

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for tests
"""
