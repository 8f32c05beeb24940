"""Router exposing basic system endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from physio_engine.database import get_db


logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/status")
async def get_status() -> dict[str, str]:
    """Return a minimal status payload."""
    return {"status": "online"}


@router.get("/store")
async def get_store_status(db: Session = Depends(get_db)) -> dict[str, str]:
    """Check that the profile store answers a trivial query."""

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as err:
        logger.exception("Profile store health check failed")
        raise HTTPException(status_code=503, detail="Profile store unavailable") from err
    return {"store": "reachable"}
