"""Daily / weekly trend aggregation and health scoring.

Observations are bucketed into UTC calendar days, reduced to one
DailySummary per day, densified over the requested window and then cut
into 7-day partitions carrying a trend direction, alerts and insights.

get_trends is the only function touching storage; everything else here
is pure.
"""

import logging
import os
from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional

import aiosqlite

from app.models.observation import Observation, to_utc
from app.models.trends import (
    DailySummary,
    OverallStats,
    TrendDirection,
    TrendsResponse,
    WeeklyInsights,
    WeeklyTrend,
)
from app.services import observation_service

logger = logging.getLogger(__name__)

DEFAULT_DAYS = int(os.getenv("TREND_DEFAULT_DAYS", "30"))
MAX_DAYS = int(os.getenv("TREND_MAX_DAYS", "365"))

BASE_SCORE = 50
NEUTRAL_SCORE = 50
FLAG_PENALTY = 5
DEFAULT_VOLUME = "medium"
WEEK_LENGTH = 7
TREND_THRESHOLD = 5

_CONSTIPATION_RECOMMENDATIONS = [
    "Increase fiber intake with fruits, vegetables, and whole grains",
    "Drink more water throughout the day",
    "Consider gentle exercise like walking",
]
_DIARRHEA_RECOMMENDATIONS = [
    "Stay hydrated with clear fluids",
    "Eat bland foods like bananas, rice, and toast",
    "Avoid dairy and fatty foods temporarily",
]
_INFREQUENT_RECOMMENDATIONS = [
    "Establish a regular bathroom routine",
    "Increase physical activity",
    "Consider natural laxatives like prunes or fiber supplements",
]
_LOW_HYDRATION_RECOMMENDATION = "Increase water intake to at least 8 glasses per day"
_HIGH_FREQUENCY_RECOMMENDATION = "Monitor food triggers that may cause high frequency"
_FALLBACK_RECOMMENDATIONS = [
    "Maintain current diet and hydration habits",
    "Continue regular monitoring",
]


def parse_days(raw: Optional[str]) -> int:
    """Parse the `days` query value. Anything unusable falls back to the default."""
    try:
        days = int(raw) if raw is not None else DEFAULT_DAYS
    except (TypeError, ValueError):
        return DEFAULT_DAYS
    if days < 1:
        return DEFAULT_DAYS
    return min(days, MAX_DAYS)


# ─── Sentinels ────────────────────────────────────────────────────────────────
# A stored 0 means "no reading that day". These helpers are the only place
# that knows it.

def has_score(day: DailySummary) -> bool:
    return day.avg_bristol_score > 0


def has_hydration(day: DailySummary) -> bool:
    return day.avg_hydration_index > 0


def _mean(values: list[float], default: float = 0.0) -> float:
    return sum(values) / len(values) if values else default


# ─── Daily aggregation ────────────────────────────────────────────────────────

def compute_health_score(avg_bristol: float, avg_hydration: float, flag_count: int) -> int:
    """Composite 0-100 score: Bristol proximity to 3-4, hydration to 0.6-0.8, minus flags."""
    score = BASE_SCORE

    if 3 <= avg_bristol <= 4:
        score += 30
    elif 2 <= avg_bristol <= 6:
        score += 15

    if 0.6 <= avg_hydration <= 0.8:
        score += 20
    elif 0.4 <= avg_hydration <= 0.9:
        score += 10

    score -= flag_count * FLAG_PENALTY
    return max(0, min(100, score))


def _most_common_volume(observations: list[Observation]) -> str:
    # Counter.most_common keeps insertion order among equal counts.
    tally = Counter(o.volume_estimate for o in observations if o.volume_estimate)
    if not tally:
        return DEFAULT_VOLUME
    return tally.most_common(1)[0][0]


def summarize_day(day: date, observations: list[Observation]) -> DailySummary:
    """Reduce one day's observations into a DailySummary."""
    scores = [o.bristol_score for o in observations if o.bristol_score is not None]
    hydrations = [o.hydration_index for o in observations if o.hydration_index is not None]
    avg_bristol = _mean(scores)
    avg_hydration = _mean(hydrations)

    flags = list(dict.fromkeys(flag for o in observations for flag in o.flags))

    return DailySummary(
        date=day,
        avg_bristol_score=avg_bristol,
        avg_hydration_index=avg_hydration,
        most_common_volume=_most_common_volume(observations),
        flags=flags,
        event_count=len(observations),
        health_score=compute_health_score(avg_bristol, avg_hydration, len(flags)),
    )


def group_by_date(observations: Iterable[Observation]) -> dict[date, list[Observation]]:
    """Bucket observations by their UTC calendar date, keeping input order."""
    buckets: dict[date, list[Observation]] = {}
    for obs in observations:
        buckets.setdefault(to_utc(obs.observed_at).date(), []).append(obs)
    return buckets


def summarize_days(observations: Iterable[Observation]) -> dict[date, DailySummary]:
    """Sparse summaries, only for dates that have at least one observation."""
    return {day: summarize_day(day, obs) for day, obs in group_by_date(observations).items()}


# ─── Gap filling ──────────────────────────────────────────────────────────────

def empty_day(day: date) -> DailySummary:
    return DailySummary(
        date=day,
        avg_bristol_score=0,
        avg_hydration_index=0,
        most_common_volume=DEFAULT_VOLUME,
        flags=[],
        event_count=0,
        health_score=NEUTRAL_SCORE,
    )


def window_start(end: date, days: int) -> date:
    """First date of a `days`-long window ending on `end` (inclusive)."""
    return end - timedelta(days=days - 1)


def fill_gaps(summaries: dict[date, DailySummary], start: date, days: int) -> list[DailySummary]:
    """Dense, chronological list covering exactly `days` dates from `start`."""
    filled = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        filled.append(summaries.get(day) or empty_day(day))
    return filled


# ─── Weekly composition ───────────────────────────────────────────────────────

def partition_weeks(daily: list[DailySummary]) -> list[list[DailySummary]]:
    """Consecutive 7-day chunks; the last one may be shorter."""
    return [daily[i:i + WEEK_LENGTH] for i in range(0, len(daily), WEEK_LENGTH)]


def classify_trend(week: list[DailySummary]) -> TrendDirection:
    """Compare the mean health score of the second half of the week to the first."""
    overall = _mean([d.health_score for d in week], NEUTRAL_SCORE)
    middle = len(week) // 2
    first = _mean([d.health_score for d in week[:middle]], overall)
    second = _mean([d.health_score for d in week[middle:]], overall)

    if second > first + TREND_THRESHOLD:
        return "improving"
    if second < first - TREND_THRESHOLD:
        return "declining"
    return "stable"


def _avg_event_count(week: list[DailySummary]) -> float:
    return _mean([d.event_count for d in week])


def detect_alerts(week: list[DailySummary]) -> list[str]:
    """Independent pattern scans over the week's days."""
    alerts = []
    if sum(1 for d in week if d.event_count == 0) >= 3:
        alerts.append("infrequent_bowel_movements")
    if sum(1 for d in week if has_score(d) and d.avg_bristol_score <= 2) >= 2:
        alerts.append("constipation_pattern")
    if sum(1 for d in week if d.avg_bristol_score >= 6) >= 2:
        alerts.append("diarrhea_pattern")
    if _avg_event_count(week) > 3:
        alerts.append("high_frequency")
    return alerts


def generate_recommendations(alerts: list[str], avg_hydration: float, avg_event_count: float) -> list[str]:
    recommendations: list[str] = []

    if "constipation_pattern" in alerts:
        recommendations.extend(_CONSTIPATION_RECOMMENDATIONS)
    if "diarrhea_pattern" in alerts:
        recommendations.extend(_DIARRHEA_RECOMMENDATIONS)
    if "infrequent_bowel_movements" in alerts:
        recommendations.extend(_INFREQUENT_RECOMMENDATIONS)
    if avg_hydration < 0.5:
        recommendations.append(_LOW_HYDRATION_RECOMMENDATION)
    if avg_event_count > 3:
        recommendations.append(_HIGH_FREQUENCY_RECOMMENDATION)

    if not recommendations:
        recommendations.extend(_FALLBACK_RECOMMENDATIONS)
    return recommendations


def build_insights(week: list[DailySummary], alerts: list[str]) -> WeeklyInsights:
    """Threshold-based assessment text for one week.

    Bristol and hydration means skip no-data days; with no reading at all
    they are 0, which reads as irregular / low.
    """
    avg_events = _avg_event_count(week)
    avg_bristol = _mean([d.avg_bristol_score for d in week if has_score(d)])
    avg_hydration = _mean([d.avg_hydration_index for d in week if has_hydration(d)])

    if avg_events < 1:
        frequency = "Low frequency - may indicate constipation"
    elif avg_events > 3:
        frequency = "High frequency - monitor for diarrhea"
    else:
        frequency = "Normal frequency"

    if avg_bristol < 3 or avg_bristol > 4:
        consistency = "Irregular consistency - monitor diet"
    else:
        consistency = "Good consistency"

    if avg_hydration < 0.5:
        hydration = "Low hydration - increase fluid intake"
    elif avg_hydration > 0.8:
        hydration = "Good hydration levels"
    else:
        hydration = "Adequate hydration"

    return WeeklyInsights(
        frequency=frequency,
        consistency=consistency,
        hydration=hydration,
        recommendations=generate_recommendations(alerts, avg_hydration, avg_events),
    )


def compose_week(week_start: date, week: list[DailySummary]) -> WeeklyTrend:
    alerts = detect_alerts(week)
    return WeeklyTrend(
        week_start=week_start,
        daily_data=week,
        overall_health_score=_mean([d.health_score for d in week], NEUTRAL_SCORE),
        trend_direction=classify_trend(week),
        alerts=alerts,
        insights=build_insights(week, alerts),
    )


def compose_weeks(daily: list[DailySummary], start: date) -> list[WeeklyTrend]:
    return [
        compose_week(start + timedelta(days=index * WEEK_LENGTH), week)
        for index, week in enumerate(partition_weeks(daily))
    ]


# ─── Output assembly ──────────────────────────────────────────────────────────

def overall_stats(daily: list[DailySummary], weeks: list[WeeklyTrend]) -> OverallStats:
    return OverallStats(
        total_days=len(daily),
        total_events=sum(d.event_count for d in daily),
        avg_health_score=_mean([d.health_score for d in daily], NEUTRAL_SCORE),
        current_trend=weeks[-1].trend_direction if weeks else "stable",
    )


def build_trends(observations: Iterable[Observation], end: date, days: int) -> TrendsResponse:
    """Full trend payload for a `days`-long window ending on `end`."""
    start = window_start(end, days)
    daily = fill_gaps(summarize_days(observations), start, days)
    weeks = compose_weeks(daily, start)
    return TrendsResponse(
        daily_summaries=daily,
        weekly_trends=weeks,
        overall_stats=overall_stats(daily, weeks),
    )


async def get_trends(
    db: aiosqlite.Connection,
    days: int = DEFAULT_DAYS,
    device_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> TrendsResponse:
    """Read the observations of the last `days` days and aggregate them."""
    now = to_utc(now) if now else datetime.now(timezone.utc)
    observations = await observation_service.get_observations_by_datetime_range(
        db, now - timedelta(days=days), now, device_id
    )
    logger.info(
        "Aggregating %d observations over %d days (device=%s)",
        len(observations), days, device_id or observation_service.ALL_DEVICES,
    )
    return build_trends(observations, now.date(), days)
