"""Event statistics endpoint."""

import logging
from typing import Optional

import aiosqlite
from fastapi import APIRouter, HTTPException, Query

from app.api.dependencies import DbDep
from app.models.analytics import ObservationStats
from app.services import analytics_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("", response_model=ObservationStats)
async def get_analytics(
    db: DbDep,
    limit: int = Query(50, ge=1, le=5000, description="Number of most recent observations to include"),
    device_id: Optional[str] = Query(None, description="Device filter, 'all' for every device"),
) -> ObservationStats:
    """Average Bristol score, calm-mode adoption, hydration risk, flag counts and Bristol distribution."""
    try:
        return await analytics_service.get_stats(db, limit=limit, device_id=device_id)
    except aiosqlite.Error:
        logger.exception("Analytics query failed (device=%s)", device_id)
        raise HTTPException(status_code=500, detail="Failed to fetch analytics")
