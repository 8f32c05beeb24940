"""Tests for creating and updating physiology profiles."""
from datetime import timedelta

from conftest import make_run

from physio_engine.models.schemas import ProfilePatch
from physio_engine.services.profile_manager import (
    create_or_update_physiology_profile,
    merge_profile_patch,
)


class TestMergePatch:

    def test_only_set_fields_are_merged(self, measured_profile):
        """Test only set fields are merged."""
        merged = merge_profile_patch(measured_profile, ProfilePatch(body_weight=65))

        assert merged.body_weight == 65
        assert merged.max_heart_rate == 190
        assert measured_profile.body_weight == 70

    def test_explicit_none_clears(self, measured_profile):
        """Test that an explicit None clears a field."""
        merged = merge_profile_patch(measured_profile, ProfilePatch.model_validate({"height": None}))

        assert merged.height is None


class TestCreateProfile:
    """First-time profile creation."""

    def test_new_profile_from_age(self, now):
        """Test new profile from age."""
        result = create_or_update_physiology_profile("new-1", {"age": 30, "bodyWeight": 72}, now=now)

        profile = result.profile
        assert result.success is True
        assert profile.user_id == "new-1"
        assert profile.max_heart_rate == 187
        assert profile.max_hr_estimated is True
        assert profile.resting_heart_rate == 60
        assert profile.resting_hr_estimated is True
        assert profile.estimation_method == "age-based"
        assert profile.data_freshness == "fresh"
        assert profile.created_at == now
        assert profile.next_update_reminder == now + timedelta(days=90)

    def test_new_profile_with_measured_values(self, now):
        """Test new profile with measured values."""
        result = create_or_update_physiology_profile(
            "new-2", {"max_heart_rate": 192, "resting_heart_rate": 48}, now=now
        )

        assert result.profile.max_hr_estimated is False
        assert result.profile.resting_hr_estimated is False
        assert result.profile.estimation_method == "user-input"
        assert result.profile.data_quality == "high"
        assert result.recalculation_needed is True
        assert "Training zones" in result.affected_metrics

    def test_observed_max_from_recent_runs(self, now):
        """Test observed max from recent runs."""
        runs = [make_run(max_heartrate=hr) for hr in (172, 181, 176, 179, 184)]

        result = create_or_update_physiology_profile("new-3", {"fitness_level": "elite"}, recent_runs=runs, now=now)

        assert result.profile.max_heart_rate == 189
        assert result.profile.estimation_method == "observed-max"
        assert result.profile.resting_heart_rate == 45


class TestUpdateProfile:
    """Updates merged onto an existing profile."""

    def test_measured_max_replaces_estimate(self, now):
        """Test measured max replaces estimate."""
        created = create_or_update_physiology_profile("user-1", {"age": 40}, now=now).profile

        result = create_or_update_physiology_profile(
            "user-1", {"max_heart_rate": 186}, existing=created, now=now + timedelta(days=5)
        )

        profile = result.profile
        assert profile.max_heart_rate == 186
        assert profile.max_hr_estimated is False
        assert profile.resting_hr_estimated is True
        assert profile.estimation_method == "default"
        assert profile.created_at == now
        assert profile.last_updated == now + timedelta(days=5)

    def test_age_change_refreshes_estimate(self, now):
        """Test age change refreshes estimate."""
        created = create_or_update_physiology_profile("user-2", {"age": 30}, now=now).profile

        result = create_or_update_physiology_profile("user-2", {"age": 50}, existing=created, now=now)

        assert result.profile.max_heart_rate == 173
        assert result.recalculation_needed is True

    def test_age_change_keeps_measured_max(self, measured_profile, now):
        """Test age change keeps measured max."""
        result = create_or_update_physiology_profile(
            measured_profile.user_id, {"age": 50}, existing=measured_profile, now=now
        )

        assert result.profile.max_heart_rate == 190
        assert result.recalculation_needed is False

    def test_weight_change_affects_power_metrics(self, measured_profile, now):
        """Test weight change affects power metrics."""
        result = create_or_update_physiology_profile(
            measured_profile.user_id, {"body_weight": 66}, existing=measured_profile, now=now
        )

        assert result.recalculation_needed is True
        assert result.affected_metrics == ["Power estimates", "Running economy", "Environmental adjustments"]

    def test_invalid_values_are_reported_not_raised(self, measured_profile, now):
        """Test invalid values are reported not raised."""
        result = create_or_update_physiology_profile(
            measured_profile.user_id, {"resting_heart_rate": 20}, existing=measured_profile, now=now
        )

        assert result.success is False
        assert result.profile.data_quality == "low"
        assert result.profile.validation_errors == [
            "Resting heart rate 20 bpm is out of range (must be between 30 and 120 bpm)"
        ]

    def test_validation_errors_cleared_once_fixed(self, measured_profile, now):
        """Test validation errors cleared once fixed."""
        bad = create_or_update_physiology_profile(
            measured_profile.user_id, {"resting_heart_rate": 20}, existing=measured_profile, now=now
        ).profile

        result = create_or_update_physiology_profile(
            measured_profile.user_id, {"resting_heart_rate": 52}, existing=bad, now=now
        )

        assert result.success is True
        assert result.profile.validation_errors == []
        assert result.profile.data_quality == "high"

    def test_narrow_range_warning_surfaces(self, measured_profile, now):
        """Test narrow range warning surfaces."""
        result = create_or_update_physiology_profile(
            measured_profile.user_id,
            {"max_heart_rate": 120, "resting_heart_rate": 105},
            existing=measured_profile,
            now=now,
        )

        assert result.success is True
        assert result.warnings == ["Heart rate range seems narrow (15 bpm) - please verify your values"]


class TestCamelCaseUpdates:
    """Updates posted with camelCase keys behave like snake_case ones."""

    def test_resting_above_max_fails(self, now):
        """Test resting above max fails."""
        result = create_or_update_physiology_profile(
            "camel-1", {"restingHeartRate": 150, "maxHeartRate": 100}, now=now
        )

        assert result.success is False
        assert any("higher than resting" in error for error in result.profile.validation_errors)

    def test_narrow_range_warns(self, now):
        """Test narrow range warns."""
        result = create_or_update_physiology_profile(
            "camel-2", {"maxHeartRate": 150, "restingHeartRate": 140}, now=now
        )

        assert any("narrow" in warning for warning in result.warnings)

    def test_body_weight_out_of_range(self, now):
        """Test body weight out of range."""
        result = create_or_update_physiology_profile("camel-3", {"bodyWeight": 300}, now=now)

        assert result.success is False
        assert len(result.profile.validation_errors) == 1
        assert "Body weight" in result.profile.validation_errors[0]
