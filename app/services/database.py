"""SQLite initialization and async connection management via aiosqlite."""

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import aiosqlite

DATABASE_URL = os.getenv("DATABASE_URL", "data/guttrack.db")

__all__ = ["DATABASE_URL", "create_tables", "get_db", "init_schema", "_CREATE_OBSERVATIONS", "_CREATE_OBSERVATIONS_INDEX"]

# observed_at is stored as a UTC ISO-8601 string with microseconds so that
# lexical order matches chronological order.
_CREATE_OBSERVATIONS = """
CREATE TABLE IF NOT EXISTS observations (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    observed_at         TEXT    NOT NULL,
    device_id           TEXT,
    bristol_score       INTEGER CHECK(bristol_score IS NULL OR bristol_score BETWEEN 1 AND 7),
    hydration_index     REAL    CHECK(hydration_index IS NULL OR (hydration_index >= 0 AND hydration_index <= 1)),
    volume_estimate     TEXT    CHECK(volume_estimate IS NULL OR volume_estimate IN ('low', 'medium', 'high')),
    color               TEXT,
    flags_json          TEXT    NOT NULL DEFAULT '[]',
    calm_mode_used      INTEGER NOT NULL DEFAULT 0,
    flush_delay_seconds INTEGER NOT NULL DEFAULT 0 CHECK(flush_delay_seconds >= 0),
    duration_seconds    INTEGER NOT NULL DEFAULT 0 CHECK(duration_seconds >= 0),
    sleep_impact        TEXT,
    notes               TEXT,
    created_at          TEXT    NOT NULL DEFAULT (datetime('now'))
)
"""

# Columns added after the first schema; ALTERed into older database files.
_SESSION_COLUMNS = {
    "calm_mode_used": "INTEGER NOT NULL DEFAULT 0",
    "flush_delay_seconds": "INTEGER NOT NULL DEFAULT 0",
    "duration_seconds": "INTEGER NOT NULL DEFAULT 0",
    "sleep_impact": "TEXT",
}

_CREATE_OBSERVATIONS_INDEX = """
CREATE INDEX IF NOT EXISTS idx_observations_device_time
    ON observations (device_id, observed_at)
"""


async def _migrate_observations(db: aiosqlite.Connection) -> None:
    """Add session columns to an observations table created by the old schema."""
    async with db.execute("PRAGMA table_info(observations)") as cur:
        cols = {row[1] for row in await cur.fetchall()}
    for name, ddl in _SESSION_COLUMNS.items():
        if name not in cols:
            await db.execute(f"ALTER TABLE observations ADD COLUMN {name} {ddl}")


async def init_schema(db: aiosqlite.Connection) -> None:
    """Create tables and indexes on an already open connection."""
    await db.execute(_CREATE_OBSERVATIONS)
    await _migrate_observations(db)
    await db.execute(_CREATE_OBSERVATIONS_INDEX)
    await db.commit()


async def create_tables(db_url: str = DATABASE_URL) -> None:
    """Create all application tables if they don't exist."""
    os.makedirs(os.path.dirname(db_url) if os.path.dirname(db_url) else ".", exist_ok=True)
    async with aiosqlite.connect(db_url) as db:
        await init_schema(db)


@asynccontextmanager
async def get_db(db_url: str = DATABASE_URL) -> AsyncGenerator[aiosqlite.Connection, None]:
    """Context manager that provides a SQLite connection with rows addressable by name."""
    async with aiosqlite.connect(db_url) as db:
        db.row_factory = aiosqlite.Row
        yield db
