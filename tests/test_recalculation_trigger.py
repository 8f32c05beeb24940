"""Tests for historical recalculation planning."""

import pytest

from conftest import make_profile

from physio_engine.services.recalculation_trigger import (
    BODY_WEIGHT_METRICS,
    HEART_RATE_METRICS,
    trigger_historical_recalculation,
)


@pytest.fixture
def profile():
    return make_profile(max_heart_rate=190, resting_heart_rate=55)


class TestRecalculationPlan:
    """Changed fields map to an affected period and metric list."""

    @pytest.mark.parametrize("field", ["max_heart_rate", "resting_heart_rate"])
    def test_heart_rate_change_recalculates_everything(self, profile, field):
        """Test heart rate change recalculates everything."""
        result = trigger_historical_recalculation(profile, [field])

        assert result.should_recalculate is True
        assert result.affected_period == "all"
        assert result.affected_metrics == list(HEART_RATE_METRICS)
        assert result.estimated_duration == "5-10 minutes"

    def test_body_weight_change_is_recent_only(self, profile):
        """Test body weight change is recent only."""
        result = trigger_historical_recalculation(profile, ["body_weight"])

        assert result.affected_period == "recent"
        assert result.affected_metrics == list(BODY_WEIGHT_METRICS)
        assert result.estimated_duration == "1-2 minutes"

    def test_combined_change_takes_broadest_period(self, profile):
        """Test combined change takes broadest period."""
        result = trigger_historical_recalculation(
            profile, ["body_weight", "max_heart_rate", "resting_heart_rate"]
        )

        assert result.affected_period == "all"
        assert result.affected_metrics == list(HEART_RATE_METRICS) + list(BODY_WEIGHT_METRICS)
        assert len(result.affected_metrics) == len(set(result.affected_metrics))

    @pytest.mark.parametrize(
        "fields", [[], ["height"], ["weekly_mileage", "running_experience", "gender"]]
    )
    def test_unrelated_fields_need_nothing(self, profile, fields):
        """Test unrelated fields need nothing."""
        result = trigger_historical_recalculation(profile, fields)

        assert result.should_recalculate is False
        assert result.affected_period == "none"
        assert result.affected_metrics == []
        assert result.estimated_duration == "0 minutes"

    def test_camel_case_field_names(self, profile):
        """Test camelCase field names."""
        result = trigger_historical_recalculation(profile, ["maxHeartRate"])

        assert result.affected_period == "all"


class TestAgeChanges:
    """Age only matters when max heart rate is derived from it."""

    def test_age_with_estimated_max_hr(self):
        """Test age change while max HR is estimated."""
        profile = make_profile(age=30, max_heart_rate=187, max_hr_estimated=True)

        result = trigger_historical_recalculation(profile, ["age"])

        assert result.affected_period == "all"

    def test_age_with_measured_max_hr(self, profile):
        """Test age change with a measured max HR."""
        result = trigger_historical_recalculation(profile, ["age"])

        assert result.should_recalculate is False

    def test_age_without_profile(self):
        """Test age without profile."""
        result = trigger_historical_recalculation(None, ["age"])

        assert result.should_recalculate is False
