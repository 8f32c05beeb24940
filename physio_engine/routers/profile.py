"""API endpoints for reading and updating physiology profiles."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from physio_engine.config import AnalyticsThresholds
from physio_engine.models.schemas import (
    ActivityRecord,
    FreshnessResult,
    PhysiologyEstimation,
    PhysiologyProfile,
    ProfilePatch,
    ProfileUpdateResult,
    RecalculationResult,
    UpdatePromptSet,
)
from physio_engine.routers.dependencies import get_profile_repository, get_thresholds, load_profile
from physio_engine.services.freshness_checker import check_data_freshness
from physio_engine.services.physiology_estimator import estimate_physiology_data
from physio_engine.services.profile_manager import create_or_update_physiology_profile
from physio_engine.services.profile_repository import ProfileRepository, ProfileStoreError
from physio_engine.services.prompt_generator import generate_update_prompts
from physio_engine.services.recalculation_trigger import trigger_historical_recalculation


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile", tags=["profile"])


class ProfileResponse(BaseModel):
    profile: PhysiologyProfile
    exists: bool


class ProfileUpdateRequest(ProfilePatch):
    """Profile patch plus optional run history for heart rate estimation."""

    recent_runs: list[ActivityRecord] = []


class RecalculationRequest(BaseModel):
    changed_fields: list[str]


class EstimationRequest(BaseModel):
    runs: list[ActivityRecord] = []


@router.get("/{user_id}", response_model=ProfileResponse)
async def get_profile(
    user_id: str,
    repository: ProfileRepository = Depends(get_profile_repository),
) -> ProfileResponse:
    """Return the stored profile, or a blank default profile when none exists."""

    profile, exists = load_profile(repository, user_id)
    return ProfileResponse(profile=profile, exists=exists)


@router.post("/{user_id}", response_model=ProfileUpdateResult)
async def update_profile(
    user_id: str,
    payload: ProfileUpdateRequest,
    repository: ProfileRepository = Depends(get_profile_repository),
    thresholds: AnalyticsThresholds = Depends(get_thresholds),
) -> ProfileUpdateResult:
    """
    Merge a partial profile update and persist the result.

    The merged profile is stored even when validation fails, so the user
    can correct individual fields; ``success`` and ``validation_errors``
    report the problems.
    """
    existing, exists = load_profile(repository, user_id)
    patch = ProfilePatch.model_validate(
        payload.model_dump(include=set(payload.changed_fields()))
    )

    logger.info(
        "Updating profile | user=%s fields=%s existing=%s",
        user_id,
        ",".join(patch.changed_fields()) or "-",
        exists,
    )

    result = create_or_update_physiology_profile(
        user_id,
        patch,
        existing=existing if exists else None,
        recent_runs=payload.recent_runs,
        thresholds=thresholds,
    )

    try:
        result.profile = repository.save(result.profile)
    except ProfileStoreError as err:
        logger.exception("Failed to persist profile for user %s", user_id)
        raise HTTPException(status_code=503, detail="Profile store unavailable") from err

    return result


@router.get("/{user_id}/freshness", response_model=FreshnessResult)
async def get_freshness(
    user_id: str,
    repository: ProfileRepository = Depends(get_profile_repository),
    thresholds: AnalyticsThresholds = Depends(get_thresholds),
) -> FreshnessResult:
    """Report whether the stored profile needs refreshing."""

    profile, _ = load_profile(repository, user_id)
    return check_data_freshness(profile, thresholds=thresholds)


@router.get("/{user_id}/prompts", response_model=UpdatePromptSet)
async def get_update_prompts(
    user_id: str,
    repository: ProfileRepository = Depends(get_profile_repository),
    thresholds: AnalyticsThresholds = Depends(get_thresholds),
) -> UpdatePromptSet:
    """Prioritized prompts for missing or estimated profile fields."""

    profile, _ = load_profile(repository, user_id)
    return generate_update_prompts(profile, thresholds)


@router.post("/{user_id}/recalculation", response_model=RecalculationResult)
async def plan_recalculation(
    user_id: str,
    payload: RecalculationRequest,
    repository: ProfileRepository = Depends(get_profile_repository),
) -> RecalculationResult:
    """Decide which historical metrics a set of field changes invalidates."""

    profile, _ = load_profile(repository, user_id)
    return trigger_historical_recalculation(profile, payload.changed_fields)


@router.post("/{user_id}/estimate", response_model=PhysiologyEstimation)
async def estimate_heart_rates(
    user_id: str,
    payload: EstimationRequest,
    repository: ProfileRepository = Depends(get_profile_repository),
    thresholds: AnalyticsThresholds = Depends(get_thresholds),
) -> PhysiologyEstimation:
    """Resolve max and resting heart rate for the stored profile."""

    profile, _ = load_profile(repository, user_id)
    return estimate_physiology_data(profile, payload.runs, thresholds)
