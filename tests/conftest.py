"""Pytest configuration for global fixtures and logging setup."""
from __future__ import annotations

import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient

_TEST_DIR = Path(tempfile.mkdtemp(prefix="physio_engine_tests_"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR / 'physiology.db'}"
os.environ["LOG_DIR"] = str(_TEST_DIR / "logs")

from physio_engine.logging_config import configure_logging

configure_logging()

from physio_engine.database import run_migrations

run_migrations()

from physio_engine.main import app
from physio_engine.models.schemas import ActivityRecord, PhysiologyProfile

NOW = datetime(2025, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="session")
def test_client() -> TestClient:
    """Provide a FastAPI test client."""

    return TestClient(app)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for date-dependent calculations."""

    return NOW


def make_run(
    distance: float = 10000,
    moving_time: float = 3000,
    days_ago: int = 3,
    **extra: Any,
) -> ActivityRecord:
    """Build a run relative to ``NOW``."""

    return ActivityRecord(
        distance=distance,
        moving_time=moving_time,
        start_date=NOW - timedelta(days=days_ago),
        **extra,
    )


def make_profile(user_id: str = "runner-1", **fields: Any) -> PhysiologyProfile:
    """Build a profile with measured heart rates unless overridden."""

    data: Dict[str, Any] = {"user_id": user_id}
    data.update(fields)
    return PhysiologyProfile(**data)


@pytest.fixture
def measured_profile() -> PhysiologyProfile:
    """Complete profile with measured heart rates (190/60 bpm, 70 kg)."""

    return make_profile(
        max_heart_rate=190,
        resting_heart_rate=60,
        body_weight=70,
        height=178,
        age=32,
        gender="female",
        fitness_level="intermediate",
        running_experience=6,
        weekly_mileage=45,
        last_updated=NOW,
    )
