"""Application configuration management."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalyticsThresholds(BaseModel):
    """Numeric policy constants used by the analytics services.

    Every service accepts an optional ``thresholds`` argument so callers (and
    tests) can override a single value without touching the others.
    """

    # Data freshness (days since the profile was last updated)
    aging_after_days: int = Field(default=45, ge=0)
    stale_after_days: int = Field(default=90, ge=1)
    fitness_review_after_days: int = Field(default=180, ge=1)
    critical_after_days: int = Field(default=365, ge=1)
    reminder_interval_days: int = Field(default=90, ge=1)

    # Heart rate estimation
    tanaka_intercept: float = 208.0
    tanaka_age_factor: float = 0.7
    observed_max_buffer_bpm: int = 5
    observed_max_cap_bpm: int = 220
    min_runs_for_observed_max: int = Field(default=5, ge=1)
    default_max_hr: int = 185
    default_resting_hr: int = 60
    resting_hr_by_fitness: dict[str, int] = Field(
        default_factory=lambda: {
            "elite": 45,
            "advanced": 50,
            "intermediate": 60,
            "beginner": 65,
        }
    )
    narrow_hr_range_bpm: int = 20

    # Karvonen heart rate reserve bands, zone 1 -> zone 5
    karvonen_bands: list[tuple[float, float]] = Field(
        default_factory=lambda: [
            (0.50, 0.60),
            (0.60, 0.70),
            (0.70, 0.80),
            (0.80, 0.90),
            (0.90, 1.00),
        ]
    )
    min_hr_reserve_bpm: int = 20

    # Pace zones
    zone_history_days: int = 56
    min_zone_run_distance_m: float = 3000.0
    default_threshold_pace: float = 300.0  # seconds per km
    zone_recalculation_days: int = 28

    # Completeness score deductions per priority class
    prompt_deductions: dict[str, int] = Field(
        default_factory=lambda: {"high": 15, "medium": 10, "low": 5}
    )

    # Running power
    default_body_weight_kg: float = 70.0
    flat_running_cost: float = 1.04  # J/kg/m
    gravity: float = 9.81
    max_plausible_gain_per_km: float = 150.0
    min_gps_moving_time_s: int = 600
    min_power_zone_estimates: int = 5

    # Polarized distribution targets (percent of tracked time)
    polarized_targets: dict[str, float] = Field(
        default_factory=lambda: {"low": 80.0, "moderate": 10.0, "high": 10.0}
    )
    distribution_tolerance_pct: float = 5.0
    max_distribution_recommendations: int = Field(default=3, ge=1)

    @model_validator(mode="after")
    def check_windows(self) -> "AnalyticsThresholds":
        """Keep the freshness windows in ascending order."""

        if not self.aging_after_days <= self.stale_after_days <= self.critical_after_days:
            raise ValueError(
                "Freshness windows must satisfy aging <= stale <= critical days"
            )
        if len(self.karvonen_bands) != 5:
            raise ValueError("Exactly five Karvonen bands are required")
        return self


DEFAULT_THRESHOLDS = AnalyticsThresholds()


class Settings(BaseSettings):
    """Centralised application settings derived from environment variables."""

    database_url: str = Field(
        default="sqlite:///./data/physiology.db",
        description="SQLAlchemy-compatible database URL.",
    )
    app_host: str = Field(default="0.0.0.0")
    app_port: int = Field(default=8000, ge=1, le=65535)

    debug: bool = Field(default=False)

    log_level: str = Field(default="INFO")
    log_dir: Path = Field(default=Path("logs"))

    thresholds: AnalyticsThresholds = Field(default_factory=AnalyticsThresholds)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        valid = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}
        upper = value.upper()
        if upper not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(sorted(valid))}")
        return upper


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings instance so it can be reused across the app."""

    settings = Settings()
    settings.log_dir.mkdir(parents=True, exist_ok=True)
    return settings
