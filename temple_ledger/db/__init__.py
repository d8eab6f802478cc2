"""Database Infrastructure — async session factory, SQLAlchemy Base and column types.

Invariants:
    - Single async engine per process (initialized via infrastructure.database.init_db)
    - All sessions are async (AsyncSession)

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite for SQLite and tests
"""
