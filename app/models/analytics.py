"""Flat statistics over raw observations."""

from typing import Optional

from pydantic import BaseModel

from .observation import Observation


class ObservationStats(BaseModel):
    total_events: int
    average_bristol_score: float
    calm_mode_adoption: int
    hydration_risk_count: int
    flag_counts: dict[str, int]
    bristol_distribution: dict[int, int]
    most_recent: Optional[Observation] = None
