"""FastAPI application entry point."""
from fastapi import FastAPI

from physio_engine.logging_config import configure_logging
from physio_engine.routers import health, profile, training


configure_logging()

app = FastAPI(title="Physiology & Training Zone API")


@app.get("/health", tags=["system"])
async def health_check() -> dict[str, str]:
    """Simple health probe for liveness checks."""
    return {"status": "ok"}


# Include routers
app.include_router(health.router)
app.include_router(profile.router)
app.include_router(training.router)
