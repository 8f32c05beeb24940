"""Pydantic models describing profiles, activities and derived analytics."""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

FitnessLevel = Literal["beginner", "intermediate", "advanced", "elite"]
Gender = Literal["male", "female", "other"]
Confidence = Literal["high", "medium", "low"]
Priority = Literal["high", "medium", "low"]
EstimationMethod = Literal["user-input", "age-based", "observed-max", "default", "fitness-level"]
DataFreshness = Literal["fresh", "aging", "stale"]
DataQuality = Literal["high", "medium", "low"]
AffectedPeriod = Literal["none", "recent", "all"]

EDITABLE_FIELDS = (
    "resting_heart_rate",
    "max_heart_rate",
    "body_weight",
    "height",
    "age",
    "gender",
    "fitness_level",
    "running_experience",
    "weekly_mileage",
)

_CAMEL_WORD = re.compile(r"(.)([A-Z][a-z]+)")
_CAMEL_TAIL = re.compile(r"([a-z0-9])([A-Z])")


def to_snake(name: str) -> str:
    """Convert ``maxHeartRate``/``maxHREstimated`` style names to snake_case."""

    return _CAMEL_TAIL.sub(r"\1_\2", _CAMEL_WORD.sub(r"\1_\2", name)).lower()


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime (naive values are assumed UTC)."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _SnakeCaseModel(BaseModel):
    """Accepts raw mappings keyed with either camelCase or snake_case names."""

    @model_validator(mode="before")
    @classmethod
    def _normalise_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {to_snake(key) if isinstance(key, str) else key: value for key, value in data.items()}
        return data


class ProfilePatch(_SnakeCaseModel):
    """Partial update of the user-editable profile fields.

    Only fields explicitly set are merged; an explicit ``None`` clears a field.
    """

    model_config = ConfigDict(extra="ignore")

    resting_heart_rate: float | None = None
    max_heart_rate: float | None = None
    body_weight: float | None = None
    height: float | None = None
    age: float | None = None
    gender: Gender | None = None
    fitness_level: FitnessLevel | None = None
    running_experience: float | None = None
    weekly_mileage: float | None = None

    def changed_fields(self) -> list[str]:
        """Editable fields explicitly present on this patch, in declaration order."""

        return [name for name in EDITABLE_FIELDS if name in self.model_fields_set]


class PhysiologyProfile(_SnakeCaseModel):
    """A user's physiological profile as stored by the caller."""

    model_config = ConfigDict(extra="ignore")

    user_id: str

    resting_heart_rate: float | None = None
    max_heart_rate: float | None = None
    body_weight: float | None = None  # kg
    height: float | None = None  # cm
    age: float | None = None
    gender: Gender | None = None

    fitness_level: FitnessLevel | None = None
    running_experience: float | None = None  # years
    weekly_mileage: float | None = None  # km per week

    max_hr_estimated: bool = False
    resting_hr_estimated: bool = False
    estimation_method: EstimationMethod = "user-input"

    last_updated: datetime | None = None
    data_freshness: DataFreshness = "fresh"
    data_quality: DataQuality = "high"
    validation_errors: list[str] = []
    next_update_reminder: datetime | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def blank(cls, user_id: str) -> "PhysiologyProfile":
        """Profile used for users who have not stored one yet."""

        return cls(
            user_id=user_id,
            max_hr_estimated=True,
            resting_hr_estimated=True,
            estimation_method="default",
            data_quality="low",
        )


class ActivityRecord(BaseModel):
    """One recorded run, keyed with Strava activity field names."""

    model_config = ConfigDict(extra="ignore")

    id: str | int | None = None
    name: str | None = None
    distance: float = 0.0  # metres
    moving_time: float = 0.0  # seconds
    elapsed_time: float | None = None  # seconds
    average_heartrate: float | None = None
    max_heartrate: float | None = None
    total_elevation_gain: float | None = None  # metres
    start_date: datetime | None = None

    @property
    def pace(self) -> float | None:
        """Average pace in seconds per km, or ``None`` when unusable."""

        if self.distance <= 0 or self.moving_time <= 0:
            return None
        return self.moving_time / (self.distance / 1000)

    @property
    def duration(self) -> float:
        """Time spent on the activity in seconds (moving time preferred)."""

        if self.moving_time > 0:
            return self.moving_time
        return self.elapsed_time or 0.0


class ValidationResult(BaseModel):
    errors: list[str] = []
    warnings: list[str] = []
    data_quality: DataQuality = "high"


class PhysiologyEstimation(BaseModel):
    """Resolved heart-rate values with the method and confidence behind them."""

    max_heart_rate: int
    resting_heart_rate: int
    max_hr_estimated: bool
    resting_hr_estimated: bool
    method: EstimationMethod
    confidence: Confidence
    resting_hr_confidence: Confidence
    disclaimers: list[str] = []
    recommendations: list[str] = []


class ProfileUpdateResult(BaseModel):
    success: bool
    profile: PhysiologyProfile
    warnings: list[str] = []
    recalculation_needed: bool = False
    affected_metrics: list[str] = []


class FreshnessResult(BaseModel):
    is_stale: bool
    days_since_update: int = Field(ge=0)
    freshness: DataFreshness
    critical_updates_needed: list[str] = []
    recommended_actions: list[str] = []


class RecalculationResult(BaseModel):
    should_recalculate: bool
    affected_period: AffectedPeriod
    affected_metrics: list[str] = []
    estimated_duration: str


class UpdatePrompt(BaseModel):
    field: str
    priority: Priority
    message: str
    help_text: str


class UpdatePromptSet(BaseModel):
    prompts: list[UpdatePrompt] = []
    overall_score: int = Field(ge=0, le=100)


class PowerFactors(BaseModel):
    pace_component: float
    elevation_component: float


class PowerEstimate(BaseModel):
    estimated_power: float  # watts
    power_per_kg: float
    confidence: Confidence
    calculation_method: Literal["elevation-pace", "pace-only", "estimated"]
    factors: PowerFactors
    body_weight_defaulted: bool = False


class HeartRateZone(BaseModel):
    zone: int
    name: str
    min: int  # bpm
    max: int  # bpm
    description: str


class PaceZone(BaseModel):
    zone: int
    name: str
    min: int  # seconds per km, faster edge
    max: int  # seconds per km, slower edge
    description: str


class PowerZone(BaseModel):
    zone: int
    name: str
    min: int  # watts
    max: int  # watts
    description: str


class ZoneBasis(BaseModel):
    max_heart_rate: int
    resting_heart_rate: int
    max_hr_estimated: bool
    resting_hr_estimated: bool
    threshold_pace: float
    vo2max_pace: float
    recent_performance: bool


class TrainingZones(BaseModel):
    heart_rate_zones: dict[int, HeartRateZone]
    pace_zones: dict[int, PaceZone]
    power_zones: dict[int, PowerZone] | None = None
    based_on: ZoneBasis
    last_calculated: datetime
    next_recalculation: datetime


class ZoneTime(BaseModel):
    percentage: float = Field(ge=0, le=100)
    total_time: float  # minutes
    runs: int = 0


class ZoneTargetComparison(BaseModel):
    group: Literal["low", "moderate", "high"]
    zones: list[int]
    recommended: float
    current: float
    status: Literal["optimal", "low", "high"]


class ZoneDistributionAnalysis(BaseModel):
    current_distribution: dict[int, ZoneTime]
    optimal_distribution: list[ZoneTargetComparison] = []
    recommendations: list[str] = []
    polarization_index: float = 0.0
    training_stress: Literal["low", "moderate", "high", "excessive"] = "low"
    tracked_runs: int = 0
    untracked_runs: int = 0


class ZoneRecalculationCheck(BaseModel):
    should_recalculate: bool
    reasons: list[str] = []
