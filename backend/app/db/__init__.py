"""Database Infrastructure — SQLAlchemy declarative Base.

Invariants:
    - One async engine per application (owned by DatabaseSessionManager)
    - All sessions are async (AsyncSession)

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for local runs and tests
"""
