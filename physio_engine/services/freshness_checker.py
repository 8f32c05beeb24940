"""Staleness detection for stored physiology profiles."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from physio_engine.config import DEFAULT_THRESHOLDS, AnalyticsThresholds
from physio_engine.models.schemas import (
    DataFreshness,
    FreshnessResult,
    PhysiologyProfile,
    as_utc,
    utcnow,
)


logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def days_since(timestamp: datetime | None, now: datetime | None = None) -> int:
    """Whole days elapsed since ``timestamp``; a missing timestamp counts from the epoch."""

    now = as_utc(now) if now else utcnow()
    reference = as_utc(timestamp) if timestamp else _EPOCH
    return max(0, (now - reference).days)


def check_data_freshness(
    profile: PhysiologyProfile,
    now: datetime | None = None,
    thresholds: AnalyticsThresholds | None = None,
) -> FreshnessResult:
    """
    Report how stale a profile is and what the user should refresh.

    A profile is stale once it is older than ``stale_after_days`` (90).
    Estimated heart rate values older than ``critical_after_days`` (365) are
    critical: the estimate should be re-measured or re-estimated. A missing
    ``last_updated`` is treated as the epoch, i.e. extremely stale.

    Example:
        >>> check_data_freshness(profile_updated_100_days_ago).days_since_update
        100
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    days = days_since(profile.last_updated, now)

    critical_updates: list[str] = []
    actions: list[str] = []

    if days > thresholds.critical_after_days:
        if profile.max_hr_estimated:
            critical_updates.append(
                "Max heart rate estimate is over 1 year old and should be re-measured or re-estimated"
            )
        if profile.resting_hr_estimated:
            critical_updates.append(
                "Resting heart rate estimate is over 1 year old and should be re-measured"
            )

    is_stale = days > thresholds.stale_after_days

    if is_stale:
        actions.append("Consider updating your body weight if it has changed")
        if profile.resting_hr_estimated:
            actions.append("Measure your current resting heart rate - it may have improved")
        else:
            actions.append("Re-check your resting heart rate - training may have lowered it")
        if days > thresholds.fitness_review_after_days:
            actions.append("Review your fitness level - has your training changed significantly?")
        if profile.max_hr_estimated and days > thresholds.critical_after_days:
            actions.append("Update your age or complete a fitness test to refresh your max heart rate")

    freshness: DataFreshness
    if is_stale:
        freshness = "stale"
    elif days > thresholds.aging_after_days:
        freshness = "aging"
    else:
        freshness = "fresh"

    if is_stale:
        logger.info(
            "Profile for user %s is stale | days=%d critical=%d",
            profile.user_id,
            days,
            len(critical_updates),
        )

    return FreshnessResult(
        is_stale=is_stale,
        days_since_update=days,
        freshness=freshness,
        critical_updates_needed=critical_updates,
        recommended_actions=actions,
    )
