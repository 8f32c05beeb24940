"""Running power estimation from pace, elevation and body weight."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from physio_engine.config import DEFAULT_THRESHOLDS, AnalyticsThresholds
from physio_engine.models.schemas import (
    ActivityRecord,
    Confidence,
    PowerEstimate,
    PowerFactors,
)


logger = logging.getLogger(__name__)


def _as_run(run: ActivityRecord | Mapping[str, Any]) -> ActivityRecord:
    return run if isinstance(run, ActivityRecord) else ActivityRecord.model_validate(run)


def _confidence(run: ActivityRecord, thresholds: AnalyticsThresholds) -> Confidence:
    """Grade how much of the expected sensor data backs the estimate."""

    has_hr = bool(run.average_heartrate and run.average_heartrate > 0)

    has_elevation = False
    if run.total_elevation_gain is not None and run.total_elevation_gain >= 0:
        gain_per_km = run.total_elevation_gain / (run.distance / 1000)
        has_elevation = gain_per_km <= thresholds.max_plausible_gain_per_km

    gps_quality = run.moving_time >= thresholds.min_gps_moving_time_s and (
        run.elapsed_time is None or run.elapsed_time >= run.moving_time
    )

    if has_hr and has_elevation and gps_quality:
        return "high"
    if has_hr or has_elevation:
        return "medium"
    return "low"


def estimate_running_power(
    run: ActivityRecord | Mapping[str, Any],
    body_weight: float | None = None,
    thresholds: AnalyticsThresholds | None = None,
) -> PowerEstimate:
    """
    Estimate average mechanical running power for one activity.

    Uses a grade-adjusted cost of running:

        P = m * v * (Cr + g * grade)

    where v is average speed (distance / moving time), Cr the flat cost of
    running (1.04 J/kg/m), g gravity and grade the total elevation gain per
    metre travelled. The first term is the pace component, the second the
    climbing component (m * g * vertical speed).

    Args:
        run: Activity with distance, moving_time and optional HR/elevation
        body_weight: Athlete weight in kg (70 kg default when unknown)
        thresholds: Policy overrides

    Returns:
        PowerEstimate in watts; unusable distance/time yields 0 W with low
        confidence

    Example:
        >>> estimate_running_power({"distance": 10000, "moving_time": 2400}, 70).estimated_power
        303.3
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    run = _as_run(run)
    body_weight_defaulted = not body_weight or body_weight <= 0
    weight = thresholds.default_body_weight_kg if body_weight_defaulted else float(body_weight)

    if run.distance <= 0 or run.moving_time <= 0:
        logger.debug("Skipping power estimate for activity %s: no distance or moving time", run.id)
        return PowerEstimate(
            estimated_power=0.0,
            power_per_kg=0.0,
            confidence="low",
            calculation_method="estimated",
            factors=PowerFactors(pace_component=0.0, elevation_component=0.0),
            body_weight_defaulted=body_weight_defaulted,
        )

    speed = run.distance / run.moving_time
    gain = max(run.total_elevation_gain or 0.0, 0.0)
    grade = gain / run.distance

    pace_power = weight * speed * thresholds.flat_running_cost
    climb_power = weight * speed * thresholds.gravity * grade
    total_power = pace_power + climb_power

    confidence = _confidence(run, thresholds)
    if body_weight_defaulted and confidence == "high":
        confidence = "medium"

    if confidence == "low":
        method = "estimated"
    elif gain > 0:
        method = "elevation-pace"
    else:
        method = "pace-only"

    return PowerEstimate(
        estimated_power=round(total_power, 1),
        power_per_kg=round(total_power / weight, 2),
        confidence=confidence,
        calculation_method=method,
        factors=PowerFactors(
            pace_component=round(pace_power, 1),
            elevation_component=round(climb_power, 1),
        ),
        body_weight_defaulted=body_weight_defaulted,
    )


def estimate_power_for_runs(
    runs: Iterable[ActivityRecord | Mapping[str, Any]],
    body_weight: float | None = None,
    thresholds: AnalyticsThresholds | None = None,
) -> list[PowerEstimate]:
    """Estimate power for every run, preserving input order."""

    return [estimate_running_power(run, body_weight, thresholds) for run in runs]


def filter_reliable_estimates(estimates: Iterable[PowerEstimate]) -> list[PowerEstimate]:
    """Drop low-confidence estimates before building aggregates."""

    return [estimate for estimate in estimates if estimate.confidence != "low"]
