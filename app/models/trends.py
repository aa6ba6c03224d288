"""Derived trend models: daily summaries, weekly trends and overall stats.

Every model here is frozen. They are rebuilt from raw observations on each
request and never mutated afterwards.
"""

from datetime import date
from typing import Literal

from pydantic import BaseModel


TrendDirection = Literal["improving", "stable", "declining"]
AlertName = Literal[
    "infrequent_bowel_movements",
    "constipation_pattern",
    "diarrhea_pattern",
    "high_frequency",
]


class DailySummary(BaseModel):
    date: date
    avg_bristol_score: float       # 0 = no scored observation that day
    avg_hydration_index: float     # 0 = no hydration reading that day
    most_common_volume: str
    flags: list[str]
    event_count: int
    health_score: int              # 0-100

    model_config = {"frozen": True}


class WeeklyInsights(BaseModel):
    frequency: str
    consistency: str
    hydration: str
    recommendations: list[str]

    model_config = {"frozen": True}


class WeeklyTrend(BaseModel):
    week_start: date
    daily_data: list[DailySummary]
    overall_health_score: float
    trend_direction: TrendDirection
    alerts: list[AlertName]
    insights: WeeklyInsights

    model_config = {"frozen": True}


class OverallStats(BaseModel):
    total_days: int
    total_events: int
    avg_health_score: float
    current_trend: TrendDirection

    model_config = {"frozen": True}


class TrendsResponse(BaseModel):
    """Payload of GET /trends."""
    daily_summaries: list[DailySummary]
    weekly_trends: list[WeeklyTrend]
    overall_stats: OverallStats

    model_config = {"frozen": True}
