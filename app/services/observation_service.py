"""Async persistence for observations (stool events)."""

import json
from datetime import datetime
from typing import Optional

import aiosqlite

from app.models.observation import Observation, ObservationCreate, to_utc

# Reserved device filter meaning "every device".
ALL_DEVICES = "all"


def _ts(value: datetime) -> str:
    return to_utc(value).isoformat(timespec="microseconds")


def _device_filter(device_id: Optional[str]) -> Optional[str]:
    if not device_id or device_id == ALL_DEVICES:
        return None
    return device_id


def _row_to_observation(row: aiosqlite.Row) -> Observation:
    return Observation(
        id=row["id"],
        observed_at=datetime.fromisoformat(row["observed_at"]),
        device_id=row["device_id"],
        bristol_score=row["bristol_score"],
        hydration_index=row["hydration_index"],
        volume_estimate=row["volume_estimate"],
        color=row["color"],
        flags=json.loads(row["flags_json"] or "[]"),
        calm_mode_used=bool(row["calm_mode_used"]),
        flush_delay_seconds=row["flush_delay_seconds"],
        duration_seconds=row["duration_seconds"],
        sleep_impact=row["sleep_impact"],
        notes=row["notes"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


async def add_observation(db: aiosqlite.Connection, observation: ObservationCreate) -> Observation:
    """Record an observation and return the full record."""
    cursor = await db.execute(
        """INSERT INTO observations
               (observed_at, device_id, bristol_score, hydration_index,
                volume_estimate, color, flags_json, calm_mode_used,
                flush_delay_seconds, duration_seconds, sleep_impact, notes)
           VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
        (
            _ts(observation.observed_at),
            observation.device_id,
            observation.bristol_score,
            observation.hydration_index,
            observation.volume_estimate,
            observation.color,
            json.dumps(observation.flags),
            int(observation.calm_mode_used),
            observation.flush_delay_seconds,
            observation.duration_seconds,
            observation.sleep_impact,
            observation.notes,
        ),
    )
    await db.commit()
    rows = await db.execute_fetchall(
        "SELECT * FROM observations WHERE id = ?", (cursor.lastrowid,)
    )
    return _row_to_observation(rows[0])


async def get_observation(db: aiosqlite.Connection, observation_id: int) -> Observation | None:
    """Return an observation by id, or None."""
    async with db.execute("SELECT * FROM observations WHERE id = ?", (observation_id,)) as cur:
        row = await cur.fetchone()
    return _row_to_observation(row) if row else None


async def list_observations(
    db: aiosqlite.Connection,
    limit: int = 50,
    offset: int = 0,
    device_id: Optional[str] = None,
) -> list[Observation]:
    """Return observations, most recent first."""
    device = _device_filter(device_id)
    if device is None:
        rows = await db.execute_fetchall(
            """SELECT * FROM observations
               ORDER BY observed_at DESC, id DESC
               LIMIT ? OFFSET ?""",
            (limit, offset),
        )
    else:
        rows = await db.execute_fetchall(
            """SELECT * FROM observations
               WHERE device_id = ?
               ORDER BY observed_at DESC, id DESC
               LIMIT ? OFFSET ?""",
            (device, limit, offset),
        )
    return [_row_to_observation(r) for r in rows]


async def count_observations(db: aiosqlite.Connection, device_id: Optional[str] = None) -> int:
    """Return the number of stored observations."""
    device = _device_filter(device_id)
    if device is None:
        rows = await db.execute_fetchall("SELECT COUNT(*) AS n FROM observations")
    else:
        rows = await db.execute_fetchall(
            "SELECT COUNT(*) AS n FROM observations WHERE device_id = ?", (device,)
        )
    return rows[0]["n"]


async def get_observations_by_datetime_range(
    db: aiosqlite.Connection,
    start: datetime,
    end: datetime,
    device_id: Optional[str] = None,
) -> list[Observation]:
    """Return observations between two datetime bounds (inclusive), oldest first.

    device_id=None or "all" disables the device filter.
    """
    device = _device_filter(device_id)
    params: list = [_ts(start), _ts(end)]
    query = """SELECT * FROM observations
               WHERE observed_at >= ?
                 AND observed_at <= ?"""
    if device is not None:
        query += " AND device_id = ?"
        params.append(device)
    query += " ORDER BY observed_at, id"
    rows = await db.execute_fetchall(query, params)
    return [_row_to_observation(r) for r in rows]


async def delete_observation(db: aiosqlite.Connection, observation_id: int) -> bool:
    """Delete an observation. Returns True if deleted."""
    cursor = await db.execute("DELETE FROM observations WHERE id = ?", (observation_id,))
    await db.commit()
    return cursor.rowcount > 0
