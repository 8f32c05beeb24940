"""Create and update physiology profiles from partial user input."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Iterable, Mapping

from physio_engine.config import DEFAULT_THRESHOLDS, AnalyticsThresholds
from physio_engine.models.schemas import (
    ActivityRecord,
    EstimationMethod,
    PhysiologyProfile,
    ProfilePatch,
    ProfileUpdateResult,
    as_utc,
    utcnow,
)
from physio_engine.services.physiology_estimator import estimate_physiology_data
from physio_engine.services.profile_validator import validate_physiology_data
from physio_engine.services.recalculation_trigger import trigger_historical_recalculation


logger = logging.getLogger(__name__)


def merge_profile_patch(profile: PhysiologyProfile, patch: ProfilePatch) -> PhysiologyProfile:
    """Apply the explicitly-set fields of ``patch`` onto a copy of ``profile``."""

    updates = {field: getattr(patch, field) for field in patch.changed_fields()}
    return profile.model_copy(update=updates)


def create_or_update_physiology_profile(
    user_id: str,
    updates: ProfilePatch | Mapping[str, Any],
    existing: PhysiologyProfile | None = None,
    recent_runs: Iterable[ActivityRecord | Mapping[str, Any]] = (),
    now: datetime | None = None,
    thresholds: AnalyticsThresholds | None = None,
) -> ProfileUpdateResult:
    """
    Merge a partial update into a profile and re-derive its metadata.

    Heart rate values supplied directly (now or previously) are kept and
    flagged as measured. Values that are missing, or were estimated before
    and are not being supplied now, are re-estimated so an age or fitness
    level change flows into them.

    Validation problems never raise: they are returned on the profile
    (``validation_errors``) and reflected by ``success=False`` so the caller
    can still show the merged profile.

    Args:
        user_id: Owner of the profile
        updates: ProfilePatch or raw mapping (camelCase keys accepted)
        existing: Currently stored profile, if any
        recent_runs: Activity history used for observed-max estimation
        now: Reference time (defaults to current UTC time)
        thresholds: Policy overrides

    Returns:
        ProfileUpdateResult with the merged profile and recalculation needs
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    now = as_utc(now) if now else utcnow()
    patch = updates if isinstance(updates, ProfilePatch) else ProfilePatch.model_validate(updates)
    changed_fields = patch.changed_fields()

    base = existing if existing is not None else PhysiologyProfile.blank(user_id)
    merged = merge_profile_patch(base.model_copy(update={"user_id": user_id}), patch)

    # Previously estimated values are not user input; drop them before
    # validating so only supplied numbers are range-checked.
    max_supplied = "max_heart_rate" in changed_fields or (
        existing is not None and not existing.max_hr_estimated
    )
    resting_supplied = "resting_heart_rate" in changed_fields or (
        existing is not None and not existing.resting_hr_estimated
    )
    if not max_supplied:
        merged.max_heart_rate = None
    if not resting_supplied:
        merged.resting_heart_rate = None

    validation = validate_physiology_data(merged, thresholds)

    max_estimated = merged.max_heart_rate is None
    resting_estimated = merged.resting_heart_rate is None
    merged.max_hr_estimated = max_estimated
    merged.resting_hr_estimated = resting_estimated
    estimation_method: EstimationMethod = "user-input"

    if max_estimated or resting_estimated:
        estimation = estimate_physiology_data(merged, recent_runs, thresholds)
        if max_estimated:
            merged.max_heart_rate = estimation.max_heart_rate
            estimation_method = estimation.method
        if resting_estimated:
            merged.resting_heart_rate = estimation.resting_heart_rate
            if not max_estimated:
                estimation_method = "fitness-level" if merged.fitness_level else "default"
        logger.info(
            "Filled missing heart rate values | user=%s max_estimated=%s resting_estimated=%s method=%s",
            user_id,
            max_estimated,
            resting_estimated,
            estimation.method,
        )

    merged.estimation_method = estimation_method
    merged.last_updated = now
    merged.updated_at = now
    merged.created_at = existing.created_at if existing and existing.created_at else now
    merged.data_freshness = "fresh"
    merged.data_quality = validation.data_quality
    merged.validation_errors = list(validation.errors)
    merged.next_update_reminder = now + timedelta(days=thresholds.reminder_interval_days)

    recalculation = trigger_historical_recalculation(base, changed_fields)

    if validation.errors:
        logger.warning(
            "Profile update for user %s has %d validation error(s)",
            user_id,
            len(validation.errors),
        )

    return ProfileUpdateResult(
        success=not validation.errors,
        profile=merged,
        warnings=list(validation.warnings),
        recalculation_needed=recalculation.should_recalculate,
        affected_metrics=recalculation.affected_metrics,
    )
