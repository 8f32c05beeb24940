"""Heart rate, pace and power zone calculation."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from statistics import mean
from typing import Any, Iterable, Mapping

from physio_engine.config import DEFAULT_THRESHOLDS, AnalyticsThresholds
from physio_engine.models.schemas import (
    ActivityRecord,
    HeartRateZone,
    PaceZone,
    PhysiologyProfile,
    PowerZone,
    TrainingZones,
    ZoneBasis,
    ZoneRecalculationCheck,
    as_utc,
    utcnow,
)
from physio_engine.services.physiology_estimator import estimate_physiology_data, round_half_up
from physio_engine.services.power_estimator import estimate_power_for_runs, filter_reliable_estimates


logger = logging.getLogger(__name__)

HR_ZONE_LABELS = (
    ("Recovery", "Easy aerobic, recovery runs"),
    ("Aerobic", "Base building, long runs"),
    ("Tempo", "Tempo runs, moderate effort"),
    ("Threshold", "Lactate threshold training"),
    ("VO2 Max", "High intensity, VO2 max work"),
)

POWER_ZONE_BANDS = (
    ("Active Recovery", 0.00, 0.55, "Very easy effort for recovery"),
    ("Aerobic Base", 0.55, 0.75, "Base building power"),
    ("Aerobic Threshold", 0.75, 0.90, "Moderate aerobic effort"),
    ("Lactate Threshold", 0.90, 1.05, "Threshold power"),
    ("VO2 Max", 1.05, 1.20, "Maximum aerobic power"),
)


def _as_runs(runs: Iterable[ActivityRecord | Mapping[str, Any]]) -> list[ActivityRecord]:
    return [
        run if isinstance(run, ActivityRecord) else ActivityRecord.model_validate(run)
        for run in runs
    ]


def calculate_heart_rate_zones(
    max_hr: int,
    resting_hr: int,
    thresholds: AnalyticsThresholds | None = None,
) -> dict[int, HeartRateZone]:
    """
    Calculate five heart rate zones with the Karvonen method.

    Each boundary is ``resting + pct * (max - resting)`` using the heart rate
    reserve bands 50-60, 60-70, 70-80, 80-90 and 90-100%. Adjacent zones
    share a boundary. Boundaries round half up.

    When the reserve is narrower than ``min_hr_reserve_bpm`` the resting value
    is implausible for Karvonen, so zones fall back to percent of max heart
    rate (equivalent to a resting value of zero).

    Args:
        max_hr: Maximum heart rate in bpm
        resting_hr: Resting heart rate in bpm
        thresholds: Policy overrides (bands, minimum reserve)

    Returns:
        Mapping of zone number (1-5) to HeartRateZone, ascending intensity

    Example:
        >>> zones = calculate_heart_rate_zones(max_hr=190, resting_hr=60)
        >>> zones[2].min, zones[2].max
        (138, 151)
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS

    base = resting_hr
    if max_hr - resting_hr < thresholds.min_hr_reserve_bpm:
        logger.warning(
            "Heart rate reserve too narrow (max=%d bpm, resting=%d bpm). "
            "Falling back to percent-of-max zones.",
            max_hr,
            resting_hr,
        )
        base = 0

    reserve = max_hr - base
    zones: dict[int, HeartRateZone] = {}
    for number, ((low_pct, high_pct), (name, description)) in enumerate(
        zip(thresholds.karvonen_bands, HR_ZONE_LABELS), start=1
    ):
        zones[number] = HeartRateZone(
            zone=number,
            name=name,
            min=round_half_up(base + reserve * low_pct),
            max=max_hr if number == 5 else round_half_up(base + reserve * high_pct),
            description=description,
        )
    return zones


def recent_zone_runs(
    runs: Iterable[ActivityRecord],
    now: datetime,
    thresholds: AnalyticsThresholds,
) -> list[ActivityRecord]:
    """Runs recent and long enough to describe current performance."""

    cutoff = now - timedelta(days=thresholds.zone_history_days)
    return [
        run
        for run in runs
        if run.moving_time > 0
        and run.distance >= thresholds.min_zone_run_distance_m
        and (run.start_date is None or as_utc(run.start_date) > cutoff)
    ]


def estimate_threshold_pace(
    runs: list[ActivityRecord],
    thresholds: AnalyticsThresholds | None = None,
) -> float:
    """
    Estimate lactate threshold pace in seconds per km.

    Preference order: mean pace of tempo-length efforts (20-40 min, 5 km+),
    10K-ish runs (8-15 km) minus 10 s/km, best-effort pace plus 15 s/km,
    then the configured default.
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    paced = [(run, run.pace) for run in runs if run.pace is not None]

    tempo = [pace for run, pace in paced if 20 <= run.moving_time / 60 <= 40 and run.distance >= 5000]
    if tempo:
        return mean(tempo)

    medium = [pace for run, pace in paced if 8000 <= run.distance <= 15000]
    if medium:
        return mean(medium) - 10

    if paced:
        return min(pace for _, pace in paced) + 15

    return thresholds.default_threshold_pace


def estimate_vo2max_pace(runs: list[ActivityRecord], threshold_pace: float) -> float:
    """Fastest short hard effort (5-15 min, 1.5 km+), kept at least 15 s/km under threshold."""

    fast = [
        run.pace
        for run in runs
        if run.pace is not None and 5 <= run.moving_time / 60 <= 15 and run.distance >= 1500
    ]
    if fast:
        return min(min(fast), threshold_pace - 15)
    return threshold_pace - 20


def calculate_pace_zones(threshold_pace: float, vo2max_pace: float) -> dict[int, PaceZone]:
    """
    Build five pace zones around threshold and VO2max pace.

    ``min`` is the faster (smaller) edge in seconds per km, ``max`` the slower
    one. Zones are contiguous and ordered from Recovery to VO2max.
    """
    t = threshold_pace
    bands = (
        ("Recovery", t + 90, t + 150, "Very easy pace for recovery runs"),
        ("Easy", t + 45, t + 90, "Comfortable conversational pace"),
        ("Tempo", t + 10, t + 45, "Steady, controlled tempo effort"),
        ("Threshold", t - 10, t + 10, "Comfortably hard lactate threshold pace"),
        ("VO2max", vo2max_pace - 15, t - 10, "Hard interval pace"),
    )
    return {
        number: PaceZone(
            zone=number,
            name=name,
            min=round(fast_edge),
            max=round(slow_edge),
            description=description,
        )
        for number, (name, fast_edge, slow_edge, description) in enumerate(bands, start=1)
    }


def calculate_power_zones(
    runs: list[ActivityRecord],
    body_weight: float | None,
    thresholds: AnalyticsThresholds | None = None,
) -> dict[int, PowerZone] | None:
    """
    Power zones anchored on an estimated threshold power.

    Threshold power is the mean of the 20th-40th percentile (from the top) of
    reliable power estimates over 5 km+ runs. Returns ``None`` when fewer than
    ``min_power_zone_estimates`` reliable estimates exist.
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    estimates = filter_reliable_estimates(
        estimate_power_for_runs([run for run in runs if run.distance >= 5000], body_weight, thresholds)
    )
    if len(estimates) < thresholds.min_power_zone_estimates:
        return None

    powers = sorted((estimate.estimated_power for estimate in estimates), reverse=True)
    band = powers[int(len(powers) * 0.2):int(len(powers) * 0.4)] or powers
    threshold_power = mean(band)

    return {
        number: PowerZone(
            zone=number,
            name=name,
            min=round(threshold_power * low),
            max=round(threshold_power * high),
            description=description,
        )
        for number, (name, low, high, description) in enumerate(POWER_ZONE_BANDS, start=1)
    }


def calculate_training_zones(
    runs: Iterable[ActivityRecord | Mapping[str, Any]],
    profile: PhysiologyProfile,
    now: datetime | None = None,
    thresholds: AnalyticsThresholds | None = None,
) -> TrainingZones:
    """
    Derive heart rate, pace and (when possible) power zones for a profile.

    Missing heart rate values are filled by the physiology estimator using
    the supplied runs. Pace and power zones use only runs from the last
    ``zone_history_days`` days that are at least 3 km long.

    Args:
        runs: Activity history
        profile: Physiology profile (may be incomplete)
        now: Reference time (defaults to current UTC time)
        thresholds: Policy overrides

    Returns:
        TrainingZones with every zone mapping in ascending intensity order
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    now = as_utc(now) if now else utcnow()
    all_runs = _as_runs(runs)

    estimation = estimate_physiology_data(profile, all_runs, thresholds)
    heart_rate_zones = calculate_heart_rate_zones(
        estimation.max_heart_rate, estimation.resting_heart_rate, thresholds
    )

    recent = recent_zone_runs(all_runs, now, thresholds)
    threshold_pace = estimate_threshold_pace(recent, thresholds)
    vo2max_pace = estimate_vo2max_pace(recent, threshold_pace)
    pace_zones = calculate_pace_zones(threshold_pace, vo2max_pace)
    power_zones = calculate_power_zones(recent, profile.body_weight, thresholds)

    logger.info(
        "Calculated training zones | user=%s max_hr=%d resting_hr=%d threshold_pace=%.0f recent_runs=%d",
        profile.user_id,
        estimation.max_heart_rate,
        estimation.resting_heart_rate,
        threshold_pace,
        len(recent),
    )

    return TrainingZones(
        heart_rate_zones=heart_rate_zones,
        pace_zones=pace_zones,
        power_zones=power_zones,
        based_on=ZoneBasis(
            max_heart_rate=estimation.max_heart_rate,
            resting_heart_rate=estimation.resting_heart_rate,
            max_hr_estimated=estimation.max_hr_estimated,
            resting_hr_estimated=estimation.resting_hr_estimated,
            threshold_pace=round(threshold_pace, 1),
            vo2max_pace=round(vo2max_pace, 1),
            recent_performance=len(recent) >= 10,
        ),
        last_calculated=now,
        next_recalculation=now + timedelta(days=thresholds.zone_recalculation_days),
    )


def should_recalculate_zones(
    zones: TrainingZones,
    recent_runs: Iterable[ActivityRecord | Mapping[str, Any]],
    profile: PhysiologyProfile | None = None,
    now: datetime | None = None,
) -> ZoneRecalculationCheck:
    """Check whether previously calculated zones are out of date."""

    now = as_utc(now) if now else utcnow()
    reasons: list[str] = []

    if now > as_utc(zones.next_recalculation):
        reasons.append("Scheduled recalculation time reached")

    paces = sorted(run.pace for run in _as_runs(recent_runs) if run.distance >= 5000 and run.pace is not None)
    if len(paces) >= 3 and paces[0] < zones.based_on.threshold_pace - 15:
        reasons.append("Recent performance suggests a significant fitness improvement")

    if profile is not None:
        if profile.max_heart_rate and round_half_up(profile.max_heart_rate) != zones.based_on.max_heart_rate:
            reasons.append("Maximum heart rate changed since zones were calculated")
        if profile.resting_heart_rate and round_half_up(profile.resting_heart_rate) != zones.based_on.resting_heart_rate:
            reasons.append("Resting heart rate changed since zones were calculated")

    return ZoneRecalculationCheck(should_recalculate=bool(reasons), reasons=reasons)
