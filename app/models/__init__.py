from .analytics import ObservationStats
from .observation import Observation, ObservationCount, ObservationCreate
from .trends import DailySummary, OverallStats, TrendsResponse, WeeklyInsights, WeeklyTrend

__all__ = [
    "Observation", "ObservationCount", "ObservationCreate",
    "ObservationStats",
    "DailySummary", "OverallStats", "TrendsResponse", "WeeklyInsights", "WeeklyTrend",
]
