"""Tests for profile freshness checks."""
from datetime import timedelta

from conftest import make_profile

from physio_engine.config import AnalyticsThresholds
from physio_engine.services.freshness_checker import check_data_freshness, days_since


class TestDaysSince:

    def test_whole_days(self, now):
        """Test that partial days are dropped."""
        assert days_since(now - timedelta(days=10, hours=5), now) == 10

    def test_future_timestamp_clamps_to_zero(self, now):
        """Test future timestamp clamps to zero."""
        assert days_since(now + timedelta(days=2), now) == 0

    def test_naive_timestamp_treated_as_utc(self, now):
        """Test that naive timestamps are treated as UTC."""
        naive = (now - timedelta(days=3)).replace(tzinfo=None)
        assert days_since(naive, now) == 3

    def test_missing_timestamp_counts_from_epoch(self, now):
        """Test missing timestamp counts from epoch."""
        assert days_since(None, now) > 20000


class TestFreshness:
    """Fresh, aging and stale windows."""

    def test_recent_profile_is_fresh(self, now):
        """Test recent profile is fresh."""
        profile = make_profile(last_updated=now - timedelta(days=10))

        result = check_data_freshness(profile, now)

        assert result.is_stale is False
        assert result.freshness == "fresh"
        assert result.days_since_update == 10
        assert result.recommended_actions == []

    def test_aging_profile(self, now):
        """Test aging window between 45 and 90 days."""
        profile = make_profile(last_updated=now - timedelta(days=50))

        result = check_data_freshness(profile, now)

        assert result.is_stale is False
        assert result.freshness == "aging"

    def test_stale_after_ninety_days(self, now):
        """Test stale after ninety days."""
        profile = make_profile(last_updated=now - timedelta(days=100))

        result = check_data_freshness(profile, now)

        assert result.is_stale is True
        assert result.freshness == "stale"
        assert result.days_since_update == 100
        assert any("body weight" in action for action in result.recommended_actions)
        assert result.critical_updates_needed == []

    def test_exactly_ninety_days_is_not_stale(self, now):
        """Test exactly ninety days is not stale."""
        profile = make_profile(last_updated=now - timedelta(days=90))

        assert check_data_freshness(profile, now).is_stale is False

    def test_fitness_review_after_half_a_year(self, now):
        """Test fitness review after half a year."""
        profile = make_profile(last_updated=now - timedelta(days=200))

        result = check_data_freshness(profile, now)

        assert any("fitness level" in action for action in result.recommended_actions)

    def test_old_estimate_is_critical(self, now):
        """Test old estimate is critical."""
        profile = make_profile(
            last_updated=now - timedelta(days=400),
            max_heart_rate=187,
            max_hr_estimated=True,
        )

        result = check_data_freshness(profile, now)

        assert result.critical_updates_needed[0].startswith("Max heart rate estimate is over 1 year old")
        assert any("fitness test" in action for action in result.recommended_actions)

    def test_old_measured_values_are_not_critical(self, now):
        """Test old measured values are not critical."""
        profile = make_profile(last_updated=now - timedelta(days=400), max_heart_rate=190)

        result = check_data_freshness(profile, now)

        assert result.is_stale is True
        assert result.critical_updates_needed == []

    def test_never_updated_profile_is_stale(self, now):
        """Test never updated profile is stale."""
        profile = make_profile(resting_hr_estimated=True)

        result = check_data_freshness(profile, now)

        assert result.is_stale is True
        assert len(result.critical_updates_needed) == 1

    def test_custom_windows(self, now):
        """Test overridden freshness windows."""
        thresholds = AnalyticsThresholds(aging_after_days=5, stale_after_days=10)
        profile = make_profile(last_updated=now - timedelta(days=7))

        result = check_data_freshness(profile, now, thresholds)

        assert result.freshness == "aging"
