"""Daily / weekly trend endpoint."""

import logging
from typing import Optional

import aiosqlite
from fastapi import APIRouter, HTTPException, Query

from app.api.dependencies import DbDep
from app.models.trends import TrendsResponse
from app.services import trend_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trends", tags=["trends"])


@router.get("", response_model=TrendsResponse)
async def get_trends(
    db: DbDep,
    days: Optional[str] = Query(
        None,
        description="Window length in days (default 30). Invalid values fall back to the default.",
    ),
    device_id: Optional[str] = Query(None, description="Device filter, 'all' for every device"),
) -> TrendsResponse:
    """
    Dense daily summaries, weekly trends and overall stats for the window
    of `days` calendar days ending today (UTC).
    """
    window = trend_service.parse_days(days)
    try:
        trends = await trend_service.get_trends(db, days=window, device_id=device_id)
    except aiosqlite.Error:
        logger.exception("Trend query failed (days=%d, device=%s)", window, device_id)
        raise HTTPException(status_code=500, detail="Failed to fetch trend data")

    logger.info(
        "Trends computed: %d days, %d events, current trend %s",
        trends.overall_stats.total_days,
        trends.overall_stats.total_events,
        trends.overall_stats.current_trend,
    )
    return trends
