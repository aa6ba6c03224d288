"""Shared fixtures across tests — in-memory SQLite via aiosqlite."""

from datetime import datetime, timezone

import aiosqlite
import pytest
import pytest_asyncio

from app.models.observation import Observation
from app.services.database import init_schema


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory database with the observation schema."""
    async with aiosqlite.connect(":memory:") as conn:
        conn.row_factory = aiosqlite.Row
        await init_schema(conn)
        yield conn


_next_id = iter(range(1, 1_000_000))


def make_observation(
    observed_at: datetime,
    bristol_score: int | None = None,
    hydration_index: float | None = None,
    volume_estimate: str | None = None,
    flags: list[str] | None = None,
    calm_mode_used: bool = False,
    device_id: str | None = "toilet-1",
) -> Observation:
    """Build an in-memory Observation for the pure aggregation tests."""
    return Observation(
        id=next(_next_id),
        observed_at=observed_at,
        device_id=device_id,
        bristol_score=bristol_score,
        hydration_index=hydration_index,
        volume_estimate=volume_estimate,
        flags=flags or [],
        calm_mode_used=calm_mode_used,
        created_at=datetime.now(timezone.utc),
    )
