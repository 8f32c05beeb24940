"""Prompts asking the user to fill in missing or estimated profile data."""

from __future__ import annotations

from physio_engine.config import DEFAULT_THRESHOLDS, AnalyticsThresholds
from physio_engine.models.schemas import PhysiologyProfile, Priority, UpdatePrompt, UpdatePromptSet


_PRIORITY_ORDER: dict[str, int] = {"high": 0, "medium": 1, "low": 2}

# field -> (priority, message, help text)
PROMPT_DEFINITIONS: dict[str, tuple[Priority, str, str]] = {
    "max_heart_rate": (
        "high",
        "Add your maximum heart rate for accurate training zones",
        "As a rough estimate use 220 minus your age; a value measured during a "
        "fitness test or a hard race finish is best",
    ),
    "resting_heart_rate": (
        "high",
        "Add your resting heart rate for personalized heart rate zones",
        "Measure it first thing in the morning before getting out of bed, "
        "averaged over a few days",
    ),
    "body_weight": (
        "high",
        "Add your body weight for running power estimates",
        "Weigh yourself in the morning; power scales directly with body weight",
    ),
    "age": (
        "medium",
        "Add your age for better heart rate estimates",
        "Age is used to estimate maximum heart rate (208 - 0.7 x age) when it is not measured",
    ),
    "fitness_level": (
        "medium",
        "Set your fitness level for personalized recommendations",
        "Pick the level that matches your current training, not your best season",
    ),
    "weekly_mileage": (
        "medium",
        "Add your typical weekly mileage for training load context",
        "Use the average kilometres per week over the last month",
    ),
    "height": (
        "low",
        "Add your height for body composition context",
        "Height helps with BMI and stride-related analysis",
    ),
}

_ESTIMATED_MESSAGES = {
    "max_heart_rate": "Your maximum heart rate is estimated - replace the estimate with a measured value",
    "resting_heart_rate": "Your resting heart rate is estimated - replace the estimate with a measured value",
}


def _is_estimated(profile: PhysiologyProfile, field: str) -> bool:
    if field == "max_heart_rate":
        return profile.max_hr_estimated
    if field == "resting_heart_rate":
        return profile.resting_hr_estimated
    return False


def generate_update_prompts(
    profile: PhysiologyProfile,
    thresholds: AnalyticsThresholds | None = None,
) -> UpdatePromptSet:
    """
    Build prioritized prompts for missing or estimated profile fields.

    The completeness score starts at 100 and loses a fixed deduction per
    prompt according to its priority (15/10/5 by default), so a complete,
    measured profile scores exactly 100.
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS
    prompts: list[UpdatePrompt] = []
    score = 100

    for field, (priority, message, help_text) in PROMPT_DEFINITIONS.items():
        missing = getattr(profile, field) is None
        estimated = not missing and _is_estimated(profile, field)
        if not (missing or estimated):
            continue
        prompts.append(
            UpdatePrompt(
                field=field,
                priority=priority,
                message=_ESTIMATED_MESSAGES[field] if estimated else message,
                help_text=help_text,
            )
        )
        score -= thresholds.prompt_deductions.get(priority, 0)

    # sorted() is stable, so declaration order is kept within a priority
    prompts = sorted(prompts, key=lambda prompt: _PRIORITY_ORDER[prompt.priority])

    return UpdatePromptSet(prompts=prompts, overall_score=max(0, min(100, score)))
