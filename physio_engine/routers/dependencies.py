"""Shared FastAPI dependencies for the API routers."""
from __future__ import annotations

import logging

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from physio_engine.config import AnalyticsThresholds, get_settings
from physio_engine.database import get_db
from physio_engine.models.schemas import PhysiologyProfile
from physio_engine.services.profile_repository import (
    ProfileRepository,
    ProfileStoreError,
    SqlProfileRepository,
)


logger = logging.getLogger(__name__)


def get_profile_repository(db: Session = Depends(get_db)) -> ProfileRepository:
    """Repository bound to the request's database session (``get_db`` owns its lifecycle)."""

    return SqlProfileRepository(db)


def get_thresholds() -> AnalyticsThresholds:
    """Analytics thresholds from application settings."""

    return get_settings().thresholds


def load_profile(repository: ProfileRepository, user_id: str) -> tuple[PhysiologyProfile, bool]:
    """
    Fetch a user's profile, substituting a blank profile when none exists.

    Returns:
        (profile, exists) tuple

    Raises:
        HTTPException: 503 when the profile store is unavailable
    """
    try:
        profile = repository.fetch(user_id)
    except ProfileStoreError as err:
        logger.exception("Profile store unavailable while loading user %s", user_id)
        raise HTTPException(status_code=503, detail="Profile store unavailable") from err

    if profile is None:
        return PhysiologyProfile.blank(user_id), False
    return profile, True
