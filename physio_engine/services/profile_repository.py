"""Persistence boundary for physiology profiles."""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from physio_engine.models.database_models import UserTrainingProfile
from physio_engine.models.schemas import PhysiologyProfile


logger = logging.getLogger(__name__)

_COLUMNS = (
    "resting_heart_rate",
    "max_heart_rate",
    "max_hr_estimated",
    "resting_hr_estimated",
    "estimation_method",
    "body_weight",
    "height",
    "age",
    "gender",
    "fitness_level",
    "running_experience",
    "weekly_mileage",
    "data_freshness",
    "data_quality",
    "validation_errors",
    "last_updated",
    "next_update_reminder",
    "created_at",
    "updated_at",
)


class ProfileStoreError(RuntimeError):
    """The profile store could not be reached or failed mid-operation.

    Distinct from a missing profile, which ``fetch`` reports as ``None``.
    """


class ProfileRepository(Protocol):
    """Storage operations the API layer needs for profiles."""

    def fetch(self, user_id: str) -> PhysiologyProfile | None:
        ...

    def save(self, profile: PhysiologyProfile) -> PhysiologyProfile:
        ...


def _to_schema(row: UserTrainingProfile) -> PhysiologyProfile:
    data = {column: getattr(row, column) for column in _COLUMNS}
    data["validation_errors"] = data["validation_errors"] or []
    return PhysiologyProfile(user_id=row.user_id, **data)


class SqlProfileRepository:
    """Profile repository backed by the ``user_training_profiles`` table."""

    def __init__(self, db: Session):
        self.db = db

    def fetch(self, user_id: str) -> PhysiologyProfile | None:
        """Return the stored profile, or ``None`` when the user has none."""

        try:
            row = (
                self.db.query(UserTrainingProfile)
                .filter(UserTrainingProfile.user_id == user_id)
                .one_or_none()
            )
        except SQLAlchemyError as err:
            logger.exception("Profile fetch failed for user %s", user_id)
            raise ProfileStoreError(f"Failed to fetch profile for user {user_id}") from err

        if row is None:
            logger.info("No stored profile for user %s", user_id)
            return None
        return _to_schema(row)

    def save(self, profile: PhysiologyProfile) -> PhysiologyProfile:
        """Insert or replace the stored profile and return it as persisted."""

        try:
            row = (
                self.db.query(UserTrainingProfile)
                .filter(UserTrainingProfile.user_id == profile.user_id)
                .one_or_none()
            )
            if row is None:
                row = UserTrainingProfile(user_id=profile.user_id)
                self.db.add(row)
            for column in _COLUMNS:
                setattr(row, column, getattr(profile, column))
            self.db.flush()
        except SQLAlchemyError as err:
            self.db.rollback()
            logger.exception("Profile save failed for user %s", profile.user_id)
            raise ProfileStoreError(f"Failed to save profile for user {profile.user_id}") from err

        logger.info("Saved profile for user %s", profile.user_id)
        return _to_schema(row)
