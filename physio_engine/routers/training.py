"""API endpoints for zones, power and time-in-zone analytics."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from physio_engine.config import AnalyticsThresholds
from physio_engine.models.schemas import (
    ActivityRecord,
    PowerEstimate,
    TrainingZones,
    ZoneDistributionAnalysis,
)
from physio_engine.routers.dependencies import get_profile_repository, get_thresholds, load_profile
from physio_engine.services.power_estimator import estimate_power_for_runs, filter_reliable_estimates
from physio_engine.services.profile_repository import ProfileRepository
from physio_engine.services.training_zones import calculate_training_zones
from physio_engine.services.zone_distribution import analyze_zone_distribution


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/training", tags=["training"])


class RunsPayload(BaseModel):
    runs: list[ActivityRecord] = []


class DistributionPayload(RunsPayload):
    weeks: int = 4


@router.post("/{user_id}/zones", response_model=TrainingZones)
async def get_training_zones(
    user_id: str,
    payload: RunsPayload,
    repository: ProfileRepository = Depends(get_profile_repository),
    thresholds: AnalyticsThresholds = Depends(get_thresholds),
) -> TrainingZones:
    """Heart rate, pace and power zones for the user's stored profile."""

    profile, _ = load_profile(repository, user_id)
    return calculate_training_zones(payload.runs, profile, thresholds=thresholds)


@router.post("/{user_id}/zone-distribution", response_model=ZoneDistributionAnalysis)
async def get_zone_distribution(
    user_id: str,
    payload: DistributionPayload,
    repository: ProfileRepository = Depends(get_profile_repository),
    thresholds: AnalyticsThresholds = Depends(get_thresholds),
) -> ZoneDistributionAnalysis:
    """Time-in-zone distribution of the supplied runs against the polarized target."""

    profile, _ = load_profile(repository, user_id)
    zones = calculate_training_zones(payload.runs, profile, thresholds=thresholds)
    analysis = analyze_zone_distribution(payload.runs, zones, thresholds, weeks=payload.weeks)
    logger.info(
        "Zone distribution for user %s | tracked=%d recommendations=%d",
        user_id,
        analysis.tracked_runs,
        len(analysis.recommendations),
    )
    return analysis


@router.post("/{user_id}/power", response_model=list[PowerEstimate])
async def get_power_estimates(
    user_id: str,
    payload: RunsPayload,
    reliable_only: bool = Query(default=False),
    repository: ProfileRepository = Depends(get_profile_repository),
    thresholds: AnalyticsThresholds = Depends(get_thresholds),
) -> list[PowerEstimate]:
    """Power estimate per run, using the stored body weight."""

    profile, _ = load_profile(repository, user_id)
    estimates = estimate_power_for_runs(payload.runs, profile.body_weight, thresholds)
    if reliable_only:
        estimates = filter_reliable_estimates(estimates)
    return estimates
