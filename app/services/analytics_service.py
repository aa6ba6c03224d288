"""Flat event statistics for the dashboard stat cards."""

import math
from collections import Counter
from typing import Optional

import aiosqlite

from app.models.analytics import ObservationStats
from app.models.observation import Observation
from app.services import observation_service

HYDRATION_RISK_THRESHOLD = 0.4


def average_bristol_score(observations: list[Observation]) -> float:
    """Mean Bristol score of scored events, one decimal. 0 when nothing is scored."""
    scores = [o.bristol_score for o in observations if o.bristol_score is not None]
    if not scores:
        return 0.0
    return round(sum(scores) / len(scores), 1)


def calm_mode_adoption(observations: list[Observation]) -> int:
    """Percentage of events where calm mode was used, rounded half-up to a whole number."""
    if not observations:
        return 0
    used = sum(1 for o in observations if o.calm_mode_used)
    return math.floor(used / len(observations) * 100 + 0.5)


def hydration_risk_count(observations: list[Observation]) -> int:
    return sum(
        1 for o in observations
        if o.hydration_index is not None and o.hydration_index < HYDRATION_RISK_THRESHOLD
    )


def flag_counts(observations: list[Observation]) -> dict[str, int]:
    """Number of events carrying each flag (a flag repeated on one event counts once)."""
    counts: Counter = Counter()
    for o in observations:
        counts.update(list(dict.fromkeys(o.flags)))
    return dict(counts.most_common())


def most_recent(observations: list[Observation]) -> Optional[Observation]:
    if not observations:
        return None
    return max(observations, key=lambda o: o.observed_at)


def bristol_distribution(observations: list[Observation]) -> dict[int, int]:
    """Event count per Bristol type, 1 through 7 always present."""
    distribution = {score: 0 for score in range(1, 8)}
    for o in observations:
        if o.bristol_score is not None:
            distribution[o.bristol_score] += 1
    return distribution


def compute_stats(observations: list[Observation]) -> ObservationStats:
    return ObservationStats(
        total_events=len(observations),
        average_bristol_score=average_bristol_score(observations),
        calm_mode_adoption=calm_mode_adoption(observations),
        hydration_risk_count=hydration_risk_count(observations),
        flag_counts=flag_counts(observations),
        bristol_distribution=bristol_distribution(observations),
        most_recent=most_recent(observations),
    )


async def get_stats(
    db: aiosqlite.Connection, limit: int = 50, device_id: Optional[str] = None
) -> ObservationStats:
    """Statistics over the most recent `limit` observations."""
    observations = await observation_service.list_observations(db, limit=limit, device_id=device_id)
    return compute_stats(observations)
