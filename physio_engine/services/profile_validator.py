"""Range and consistency checks for physiological profile data."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import BaseModel

from physio_engine.config import DEFAULT_THRESHOLDS, AnalyticsThresholds
from physio_engine.models.schemas import ValidationResult, to_snake


logger = logging.getLogger(__name__)

# field -> (label, lower bound, upper bound, unit)
FIELD_RANGES: dict[str, tuple[str, float, float, str]] = {
    "max_heart_rate": ("Maximum heart rate", 100, 220, "bpm"),
    "resting_heart_rate": ("Resting heart rate", 30, 120, "bpm"),
    "body_weight": ("Body weight", 30, 200, "kg"),
    "height": ("Height", 100, 250, "cm"),
    "age": ("Age", 10, 100, "years"),
    "running_experience": ("Running experience", 0, 50, "years"),
    "weekly_mileage": ("Weekly mileage", 0, 300, "km"),
}


def _as_mapping(candidate: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(candidate, BaseModel):
        return candidate.model_dump()
    return {to_snake(key): value for key, value in candidate.items()}


def _fmt(value: float) -> str:
    return f"{value:g}"


def validate_physiology_data(
    candidate: BaseModel | Mapping[str, Any],
    thresholds: AnalyticsThresholds | None = None,
) -> ValidationResult:
    """
    Validate profile values without raising.

    Every check runs independently so the caller sees all problems at once.
    Absent values are not checked.

    Args:
        candidate: Profile, patch or raw mapping (camelCase keys accepted)
        thresholds: Policy overrides (narrow heart rate range)

    Returns:
        ValidationResult with errors, warnings and a high/low data quality
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    data = _as_mapping(candidate)
    errors: list[str] = []
    warnings: list[str] = []

    for field, (label, low, high, unit) in FIELD_RANGES.items():
        value = data.get(field)
        if value is None:
            continue
        if not low <= value <= high:
            errors.append(
                f"{label} {_fmt(value)} {unit} is out of range "
                f"(must be between {_fmt(low)} and {_fmt(high)} {unit})"
            )

    max_hr = data.get("max_heart_rate")
    resting_hr = data.get("resting_heart_rate")
    if max_hr is not None and resting_hr is not None:
        if max_hr <= resting_hr:
            errors.append("Maximum heart rate must be higher than resting heart rate")
        elif max_hr - resting_hr < thresholds.narrow_hr_range_bpm:
            warnings.append(
                f"Heart rate range seems narrow ({_fmt(max_hr - resting_hr)} bpm) - "
                "please verify your values"
            )

    if errors:
        logger.info("Profile validation found %d error(s)", len(errors))

    return ValidationResult(
        errors=errors,
        warnings=warnings,
        data_quality="low" if errors else "high",
    )
