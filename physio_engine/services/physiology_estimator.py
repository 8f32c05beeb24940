"""Estimation of missing heart rate values."""

from __future__ import annotations

import logging
import math
from typing import Any, Iterable, Mapping

from pydantic import BaseModel

from physio_engine.config import DEFAULT_THRESHOLDS, AnalyticsThresholds
from physio_engine.models.schemas import (
    ActivityRecord,
    Confidence,
    EstimationMethod,
    PhysiologyEstimation,
    to_snake,
)


logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest whole number with halves going up (190.5 -> 191)."""

    return int(math.floor(value + 0.5))


def calculate_max_hr_from_age(age: float, thresholds: AnalyticsThresholds | None = None) -> int:
    """
    Estimate maximum heart rate from age with the Tanaka formula.

    Tanaka (208 - 0.7 * age) tracks measured values better than 220 - age,
    particularly for older athletes.

    Example:
        >>> calculate_max_hr_from_age(30)
        187
        >>> calculate_max_hr_from_age(25)
        191
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    return round_half_up(thresholds.tanaka_intercept - thresholds.tanaka_age_factor * age)


def _as_runs(runs: Iterable[ActivityRecord | Mapping[str, Any]]) -> list[ActivityRecord]:
    return [
        run if isinstance(run, ActivityRecord) else ActivityRecord.model_validate(run)
        for run in runs
    ]


def _field(profile: BaseModel | Mapping[str, Any], name: str) -> Any:
    if isinstance(profile, BaseModel):
        return getattr(profile, name, None)
    for key, value in profile.items():
        if to_snake(key) == name:
            return value
    return None


def estimate_physiology_data(
    profile: BaseModel | Mapping[str, Any],
    recent_runs: Iterable[ActivityRecord | Mapping[str, Any]] = (),
    thresholds: AnalyticsThresholds | None = None,
) -> PhysiologyEstimation:
    """
    Resolve max and resting heart rate, estimating whatever is missing.

    Max heart rate precedence: user value, age (Tanaka), observed maximum over
    enough recorded runs, conservative default. Resting heart rate: user
    value, fitness level lookup, population average.

    Never fails; every missing input resolves to a number with a confidence
    grade, disclaimers and at least one recommendation.
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    runs = _as_runs(recent_runs)
    disclaimers: list[str] = []
    recommendations: list[str] = []

    # Stored estimates are re-derived rather than treated as measurements.
    max_hr = None if _field(profile, "max_hr_estimated") else _field(profile, "max_heart_rate")
    age = _field(profile, "age")
    method: EstimationMethod
    confidence: Confidence

    if max_hr:
        max_heart_rate = round_half_up(max_hr)
        method = "user-input"
        confidence = "high"
    elif age:
        max_heart_rate = calculate_max_hr_from_age(age, thresholds)
        method = "age-based"
        confidence = "medium"
        disclaimers.append("Max heart rate estimated using the age-based Tanaka formula (208 - 0.7 x age)")
        recommendations.append(
            "Consider a fitness test or note your highest heart rate during intense training"
        )
    else:
        observed = [run.max_heartrate for run in runs if run.max_heartrate and run.max_heartrate > 0]
        if len(observed) >= thresholds.min_runs_for_observed_max:
            max_heart_rate = int(
                min(max(observed) + thresholds.observed_max_buffer_bpm, thresholds.observed_max_cap_bpm)
            )
            method = "observed-max"
            confidence = "medium"
            disclaimers.append(
                f"Max heart rate estimated from your highest recorded heart rate across {len(observed)} runs"
            )
            recommendations.append("This estimate may be conservative - consider a proper fitness test")
        else:
            max_heart_rate = thresholds.default_max_hr
            method = "default"
            confidence = "low"
            disclaimers.append(
                f"Max heart rate set to a conservative default of {max_heart_rate} bpm "
                "because age and heart rate history are missing"
            )
            recommendations.append("Please provide your age or record more runs with a heart rate monitor")

    resting_hr = None if _field(profile, "resting_hr_estimated") else _field(profile, "resting_heart_rate")
    fitness_level = _field(profile, "fitness_level")
    resting_confidence: Confidence

    if resting_hr:
        resting_heart_rate = round_half_up(resting_hr)
        resting_confidence = "high"
    elif fitness_level in thresholds.resting_hr_by_fitness:
        resting_heart_rate = thresholds.resting_hr_by_fitness[fitness_level]
        resting_confidence = "medium"
        disclaimers.append(f"Resting heart rate estimated from your {fitness_level} fitness level")
        recommendations.append("Measure your resting heart rate first thing in the morning for accuracy")
    else:
        resting_heart_rate = thresholds.default_resting_hr
        resting_confidence = "low"
        disclaimers.append("Resting heart rate set to the population average")
        recommendations.append("Please measure and enter your actual resting heart rate")

    if not recommendations:
        recommendations.append(
            "Re-test your maximum and resting heart rate every few months to keep zones accurate"
        )

    logger.debug(
        "Resolved heart rates | max=%d (%s, %s) resting=%d (%s)",
        max_heart_rate,
        method,
        confidence,
        resting_heart_rate,
        resting_confidence,
    )

    return PhysiologyEstimation(
        max_heart_rate=max_heart_rate,
        resting_heart_rate=resting_heart_rate,
        max_hr_estimated=method != "user-input",
        resting_hr_estimated=resting_confidence != "high",
        method=method,
        confidence=confidence,
        resting_hr_confidence=resting_confidence,
        disclaimers=disclaimers,
        recommendations=recommendations,
    )
