"""Endpoints for stool observations (intake, listing, deletion)."""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from app.api.dependencies import DbDep
from app.models.observation import Observation, ObservationCount, ObservationCreate
from app.services import observation_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/observations", tags=["observations"])


@router.post("", response_model=Observation, status_code=status.HTTP_201_CREATED)
async def add_observation(payload: ObservationCreate, db: DbDep) -> Observation:
    """Record an observation."""
    observation = await observation_service.add_observation(db, payload)
    logger.info(
        "Observation %d recorded (device=%s, bristol=%s)",
        observation.id, observation.device_id, observation.bristol_score,
    )
    return observation


@router.get("", response_model=list[Observation])
async def list_observations(
    db: DbDep,
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    device_id: Optional[str] = Query(None, description="Device filter, 'all' for every device"),
) -> list[Observation]:
    """Return observations, most recent first."""
    return await observation_service.list_observations(db, limit=limit, offset=offset, device_id=device_id)


@router.get("/count", response_model=ObservationCount)
async def count_observations(
    db: DbDep,
    device_id: Optional[str] = Query(None, description="Device filter, 'all' for every device"),
) -> ObservationCount:
    """Return the number of stored observations."""
    return ObservationCount(count=await observation_service.count_observations(db, device_id))


@router.get("/{observation_id}", response_model=Observation)
async def get_observation(observation_id: int, db: DbDep) -> Observation:
    observation = await observation_service.get_observation(db, observation_id)
    if not observation:
        raise HTTPException(status_code=404, detail=f"Observation {observation_id} not found")
    return observation


@router.delete("/{observation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_observation(observation_id: int, db: DbDep) -> None:
    """Delete an observation."""
    deleted = await observation_service.delete_observation(db, observation_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Observation {observation_id} not found")
