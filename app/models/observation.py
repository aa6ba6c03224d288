"""Pydantic models for stool observations (AI-analysed or manually entered)."""

import math
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator


VolumeEstimate = Literal["low", "medium", "high"]


def to_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime. Naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class ObservationBase(BaseModel):
    observed_at: datetime
    device_id: Optional[str] = Field(None, min_length=1, max_length=100)
    bristol_score: Optional[int] = Field(None, ge=1, le=7, description="Bristol stool scale, 1-7")
    hydration_index: Optional[float] = Field(None, description="Estimated hydration, 0-1")
    volume_estimate: Optional[VolumeEstimate] = None
    color: Optional[str] = Field(None, max_length=50)
    flags: list[str] = []
    calm_mode_used: bool = False
    flush_delay_seconds: int = Field(0, ge=0)
    duration_seconds: int = Field(0, ge=0)
    sleep_impact: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("observed_at")
    @classmethod
    def _normalize_observed_at(cls, value: datetime) -> datetime:
        return to_utc(value)

    @field_validator("hydration_index")
    @classmethod
    def _clamp_hydration(cls, value: Optional[float]) -> Optional[float]:
        if value is None:
            return None
        return max(0.0, min(1.0, value))

    @field_validator("calm_mode_used", mode="before")
    @classmethod
    def _coerce_calm_mode(cls, value: Any) -> bool:
        # booleans, "true"/"1" strings or numbers; anything else is False
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value in ("true", "1")
        if isinstance(value, (int, float)):
            return value != 0
        return False

    @field_validator("flush_delay_seconds", "duration_seconds", mode="before")
    @classmethod
    def _round_seconds(cls, value: Any) -> Any:
        if value is None:
            return 0
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return value
        # half-up rounding, negative durations floor at 0
        return max(0, math.floor(value + 0.5))


class ObservationCreate(ObservationBase):
    """Payload to record an observation."""
    pass


class Observation(ObservationBase):
    """Full model returned from the database."""
    id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class ObservationCount(BaseModel):
    count: int
