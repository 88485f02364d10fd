"""Database Base — declarative Base, soft deletion, and a session factory for scripts.

Invariants:
    - Every table's model inherits Base; soft-deletable ones add SoftDeleteMixin
    - Timestamps are timezone-aware UTC (utcnow)

Design Decisions:
    - asyncpg driver for PostgreSQL, aiosqlite in tests (ADR: native async, no thread pool overhead)
"""
