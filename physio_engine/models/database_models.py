"""SQLAlchemy ORM models for stored physiology profiles."""
from datetime import datetime
from sqlalchemy import Boolean, DateTime, Float, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from physio_engine.database import Base


class UserTrainingProfile(Base):
    """One physiology profile per user."""

    __tablename__ = "user_training_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)

    # Heart rate
    resting_heart_rate: Mapped[float | None] = mapped_column(Float, nullable=True)  # bpm
    max_heart_rate: Mapped[float | None] = mapped_column(Float, nullable=True)  # bpm
    max_hr_estimated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    resting_hr_estimated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    estimation_method: Mapped[str] = mapped_column(String(20), default="user-input", nullable=False)

    # Body & background
    body_weight: Mapped[float | None] = mapped_column(Float, nullable=True)  # kg
    height: Mapped[float | None] = mapped_column(Float, nullable=True)  # cm
    age: Mapped[float | None] = mapped_column(Float, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(10), nullable=True)
    fitness_level: Mapped[str | None] = mapped_column(String(20), nullable=True)
    running_experience: Mapped[float | None] = mapped_column(Float, nullable=True)  # years
    weekly_mileage: Mapped[float | None] = mapped_column(Float, nullable=True)  # km per week

    # Quality & freshness
    data_freshness: Mapped[str] = mapped_column(String(10), default="fresh", nullable=False)
    data_quality: Mapped[str] = mapped_column(String(10), default="high", nullable=False)
    validation_errors: Mapped[list | None] = mapped_column(JSON, nullable=True)
    last_updated: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    next_update_reminder: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Timestamps
    created_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
