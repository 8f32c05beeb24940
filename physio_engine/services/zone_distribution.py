"""Time-in-zone distribution versus a polarized training target."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Literal, Mapping

from physio_engine.config import DEFAULT_THRESHOLDS, AnalyticsThresholds
from physio_engine.models.schemas import (
    ActivityRecord,
    TrainingZones,
    ZoneDistributionAnalysis,
    ZoneTargetComparison,
    ZoneTime,
)


logger = logging.getLogger(__name__)

IntensityGroup = Literal["low", "moderate", "high"]

INTENSITY_GROUPS: dict[IntensityGroup, tuple[int, ...]] = {
    "low": (1, 2),
    "moderate": (3,),
    "high": (4, 5),
}
_GROUP_LABELS: dict[IntensityGroup, str] = {
    "low": "easy training (Zones 1-2)",
    "moderate": "moderate training (Zone 3)",
    "high": "hard training (Zones 4-5)",
}


def classify_run(run: ActivityRecord, zones: TrainingZones) -> int | None:
    """
    Zone number for a run from its average heart rate, or its pace when
    heart rate is missing. Returns ``None`` when neither is usable.
    """
    if run.average_heartrate and run.average_heartrate > 0:
        for number in range(1, 5):
            if run.average_heartrate <= zones.heart_rate_zones[number].max:
                return number
        return 5

    pace = run.pace
    if pace is None:
        return None
    # Slower (larger) pace than a zone's fast edge belongs to that zone.
    for number in range(1, 5):
        if pace >= zones.pace_zones[number].min:
            return number
    return 5


def _recommendation(group: IntensityGroup, current: float, target: float) -> str:
    label = _GROUP_LABELS[group]
    delta = abs(current - target)
    verb = "Reduce" if current > target else "Increase"
    return f"{verb} {label} by {delta:.1f}% - currently {current:.1f}%, target {target:.0f}%"


def _polarization_index(percentages: dict[int, float]) -> float:
    """Share of tracked time that is either easy or very hard (0-1)."""

    total = sum(percentages.values())
    if total == 0:
        return 0.0
    polarized = percentages[1] + percentages[2] + percentages[5]
    return round(polarized / total, 2)


def _training_stress(total_seconds: float, percentages: dict[int, float], weeks: int) -> str:
    weekly_hours = total_seconds / 3600 / max(weeks, 1)
    hard_share = percentages[4] + percentages[5]
    if weekly_hours < 3:
        return "low"
    if weekly_hours > 15 or hard_share > 25:
        return "excessive"
    if weekly_hours > 8 or hard_share > 20:
        return "high"
    return "moderate"


def analyze_zone_distribution(
    runs: Iterable[ActivityRecord | Mapping[str, Any]],
    zones: TrainingZones,
    thresholds: AnalyticsThresholds | None = None,
    weeks: int = 4,
) -> ZoneDistributionAnalysis:
    """
    Bucket run time into zones and compare with the polarized target.

    Every run's time goes to a single zone (see ``classify_run``). Target:
    about 80% of time in zones 1-2, 10% in zone 3 and 10% in zones 4-5.
    Groups deviating by more than ``distribution_tolerance_pct`` points
    produce a recommendation, most deviant first, capped at
    ``max_distribution_recommendations``.

    Args:
        runs: Activities to analyse (the caller chooses the window)
        zones: Output of ``calculate_training_zones``
        thresholds: Policy overrides
        weeks: Length of the window the runs cover, for training stress

    Returns:
        ZoneDistributionAnalysis; percentages sum to 100 (within rounding)
        whenever any run could be tracked
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    seconds = {number: 0.0 for number in range(1, 6)}
    counts = {number: 0 for number in range(1, 6)}
    untracked = 0

    for raw in runs:
        run = raw if isinstance(raw, ActivityRecord) else ActivityRecord.model_validate(raw)
        zone = classify_run(run, zones)
        if zone is None or run.duration <= 0:
            untracked += 1
            continue
        seconds[zone] += run.duration
        counts[zone] += 1

    total_seconds = sum(seconds.values())
    raw_percentages = {
        number: (seconds[number] / total_seconds * 100) if total_seconds else 0.0
        for number in seconds
    }
    current = {
        number: ZoneTime(
            percentage=round(raw_percentages[number], 1),
            total_time=round(seconds[number] / 60, 1),
            runs=counts[number],
        )
        for number in seconds
    }

    comparisons: list[ZoneTargetComparison] = []
    deviations: list[tuple[float, str]] = []
    for group, members in INTENSITY_GROUPS.items():
        target = thresholds.polarized_targets[group]
        share = sum(raw_percentages[number] for number in members)
        deviation = share - target
        if total_seconds and abs(deviation) > thresholds.distribution_tolerance_pct:
            status = "high" if deviation > 0 else "low"
            deviations.append((abs(deviation), _recommendation(group, share, target)))
        else:
            status = "optimal"
        comparisons.append(
            ZoneTargetComparison(
                group=group,
                zones=list(members),
                recommended=target,
                current=round(share, 1),
                status=status,
            )
        )

    if not total_seconds:
        recommendations = ["No runs with heart rate or pace data to analyse yet"]
    elif deviations:
        deviations.sort(key=lambda item: item[0], reverse=True)
        recommendations = [text for _, text in deviations[: thresholds.max_distribution_recommendations]]
    else:
        recommendations = ["Your training zone distribution is well balanced"]

    logger.debug(
        "Zone distribution | tracked=%d untracked=%d minutes=%.1f",
        sum(counts.values()),
        untracked,
        total_seconds / 60,
    )

    return ZoneDistributionAnalysis(
        current_distribution=current,
        optimal_distribution=comparisons,
        recommendations=recommendations,
        polarization_index=_polarization_index(raw_percentages),
        training_stress=_training_stress(total_seconds, raw_percentages, weeks),
        tracked_runs=sum(counts.values()),
        untracked_runs=untracked,
    )
