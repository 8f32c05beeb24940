"""Tests for max and resting heart rate estimation."""

import pytest

from conftest import make_profile, make_run

from physio_engine.config import AnalyticsThresholds
from physio_engine.services.physiology_estimator import (
    calculate_max_hr_from_age,
    estimate_physiology_data,
)


class TestMaxHRFromAge:
    """Tanaka formula."""

    def test_calculate_max_hr_from_age(self):
        """Test standard Tanaka max HR formula."""
        assert calculate_max_hr_from_age(30) == 187
        assert calculate_max_hr_from_age(40) == 180
        assert calculate_max_hr_from_age(50) == 173

    @pytest.mark.parametrize("age,expected", [(25, 191), (45, 177), (65, 163), (85, 149)])
    def test_half_values_round_up(self, age, expected):
        """Test that x.5 Tanaka results round up, not to the nearest even number."""
        assert calculate_max_hr_from_age(age) == expected

    def test_custom_formula_constants(self):
        """Test custom formula constants."""
        thresholds = AnalyticsThresholds(tanaka_intercept=220, tanaka_age_factor=1.0)

        assert calculate_max_hr_from_age(30, thresholds) == 190


class TestMaxHREstimation:
    """Precedence: user value, age, observed maximum, default."""

    def test_user_value_wins(self):
        """Test user value wins."""
        result = estimate_physiology_data({"max_heart_rate": 193, "age": 30})

        assert result.max_heart_rate == 193
        assert result.method == "user-input"
        assert result.confidence == "high"
        assert result.max_hr_estimated is False

    def test_age_based(self):
        """Test age-based estimate when max HR is missing."""
        result = estimate_physiology_data({"age": 30})

        assert result.max_heart_rate == 187
        assert result.method == "age-based"
        assert result.confidence == "medium"
        assert result.max_hr_estimated is True
        assert any("Tanaka" in line for line in result.disclaimers)

    def test_observed_max_from_runs(self):
        """Test observed max from runs."""
        runs = [make_run(max_heartrate=hr) for hr in (170, 175, 180, 182, 178)]

        result = estimate_physiology_data({}, runs)

        assert result.max_heart_rate == 187
        assert result.method == "observed-max"
        assert result.confidence == "medium"
        assert "5 runs" in result.disclaimers[0]

    def test_observed_max_is_capped(self):
        """Test observed max is capped."""
        runs = [make_run(max_heartrate=hr) for hr in (210, 216, 200, 205, 199)]

        result = estimate_physiology_data({}, runs)

        assert result.max_heart_rate == 220

    def test_too_few_runs_fall_back_to_default(self):
        """Test too few runs fall back to default."""
        runs = [make_run(max_heartrate=hr) for hr in (170, 175, 180, 182)]

        result = estimate_physiology_data({}, runs)

        assert result.max_heart_rate == 185
        assert result.method == "default"
        assert result.confidence == "low"
        assert "conservative default of 185 bpm" in result.disclaimers[0]

    def test_runs_without_heart_rate_are_ignored(self):
        """Test runs without heart rate are ignored."""
        runs = [make_run() for _ in range(6)] + [make_run(max_heartrate=0)]

        result = estimate_physiology_data({}, runs)

        assert result.method == "default"

    def test_stored_estimate_is_re_derived(self):
        """Test that a stored estimate is re-derived rather than trusted."""
        profile = make_profile(max_heart_rate=187, max_hr_estimated=True, age=40)

        result = estimate_physiology_data(profile)

        assert result.max_heart_rate == 180
        assert result.method == "age-based"


class TestRestingHREstimation:
    """Precedence: user value, fitness level, population average."""

    def test_user_value(self):
        """Test that a measured resting HR is used as-is."""
        result = estimate_physiology_data({"resting_heart_rate": 48, "age": 30})

        assert result.resting_heart_rate == 48
        assert result.resting_hr_confidence == "high"
        assert result.resting_hr_estimated is False

    def test_fitness_level_lookup(self):
        """Test fitness level lookup."""
        expected = {"elite": 45, "advanced": 50, "intermediate": 60, "beginner": 65}

        for level, resting in expected.items():
            result = estimate_physiology_data({"fitness_level": level, "age": 30})
            assert result.resting_heart_rate == resting
            assert result.resting_hr_confidence == "medium"

    def test_population_default(self):
        """Test population default."""
        result = estimate_physiology_data({"age": 30})

        assert result.resting_heart_rate == 60
        assert result.resting_hr_confidence == "low"
        assert result.resting_hr_estimated is True

    def test_camel_case_profile(self):
        """Test camelCase profile keys."""
        result = estimate_physiology_data({"maxHeartRate": 188, "restingHeartRate": 52})

        assert (result.max_heart_rate, result.resting_heart_rate) == (188, 52)


class TestRecommendations:
    """Every estimate carries at least one recommendation."""

    def test_fully_measured_profile_still_recommends(self):
        """Test fully measured profile still recommends."""
        result = estimate_physiology_data({"max_heart_rate": 190, "resting_heart_rate": 55})

        assert result.disclaimers == []
        assert len(result.recommendations) == 1

    def test_missing_everything(self):
        """Test missing everything."""
        result = estimate_physiology_data({})

        assert len(result.disclaimers) == 2
        assert len(result.recommendations) == 2
