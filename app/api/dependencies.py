"""Reusable FastAPI dependencies."""

from collections.abc import AsyncGenerator
from typing import Annotated

import aiosqlite
from fastapi import Depends

from app.services.database import get_db as _get_db


async def db_dependency() -> AsyncGenerator[aiosqlite.Connection, None]:
    """Provide a SQLite connection for the duration of the request."""
    async with _get_db() as conn:
        yield conn


DbDep = Annotated[aiosqlite.Connection, Depends(db_dependency)]
