"""Decide whether historical metrics must be recomputed after a profile change."""

from __future__ import annotations

import logging
from typing import Iterable

from physio_engine.models.schemas import (
    AffectedPeriod,
    PhysiologyProfile,
    RecalculationResult,
    to_snake,
)


logger = logging.getLogger(__name__)

HEART_RATE_METRICS = (
    "Training zones",
    "Heart rate-based metrics",
    "TRIMP calculations",
    "VO2 max estimates",
    "Training load analysis",
)
BODY_WEIGHT_METRICS = (
    "Power estimates",
    "Running economy",
    "Environmental adjustments",
)

_PERIOD_RANK: dict[AffectedPeriod, int] = {"none": 0, "recent": 1, "all": 2}
_DURATIONS: dict[AffectedPeriod, str] = {
    "none": "0 minutes",
    "recent": "1-2 minutes",
    "all": "5-10 minutes",
}


def trigger_historical_recalculation(
    profile: PhysiologyProfile | None,
    changed_fields: Iterable[str],
) -> RecalculationResult:
    """
    Map a set of changed profile fields to a recalculation plan.

    Heart rate changes invalidate every zone-derived metric, so the whole
    history is recomputed. A body weight change only affects power-derived
    metrics of recent runs. An age change counts as a max heart rate change
    when the stored max heart rate is only an estimate. Other fields
    (height, experience, mileage, gender, fitness level) do not affect stored
    metrics.

    Args:
        profile: Stored profile the change applies to (may be None)
        changed_fields: Field names, snake_case or camelCase

    Returns:
        RecalculationResult with the broadest affected period and the union
        of affected metrics in a stable order
    """
    changed = {to_snake(field) for field in changed_fields}

    heart_rate_changed = bool(changed & {"max_heart_rate", "resting_heart_rate"})
    if "age" in changed and profile is not None and profile.max_hr_estimated:
        heart_rate_changed = True

    period: AffectedPeriod = "none"
    metrics: list[str] = []

    if heart_rate_changed:
        metrics.extend(HEART_RATE_METRICS)
        period = "all"

    if "body_weight" in changed:
        metrics.extend(BODY_WEIGHT_METRICS)
        if _PERIOD_RANK["recent"] > _PERIOD_RANK[period]:
            period = "recent"

    # dict.fromkeys keeps first-seen order while dropping duplicates
    metrics = list(dict.fromkeys(metrics))

    if period != "none":
        logger.info(
            "Historical recalculation required | period=%s metrics=%d fields=%s",
            period,
            len(metrics),
            ",".join(sorted(changed)),
        )

    return RecalculationResult(
        should_recalculate=period != "none",
        affected_period=period,
        affected_metrics=metrics,
        estimated_duration=_DURATIONS[period],
    )
