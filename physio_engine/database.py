"""Engine, session factory and migration helpers for the profile store."""
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from physio_engine.config import get_settings


logger = logging.getLogger(__name__)

settings = get_settings()

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _ensure_sqlite_dir(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""

    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


_ensure_sqlite_dir(settings.database_url)
engine = create_engine(settings.database_url, echo=settings.debug)


class Base(DeclarativeBase):
    """Base class for the profile store's ORM models."""


SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session committed on success and rolled back on any error."""

    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_db() -> Iterator[Session]:
    """Per-request session for FastAPI dependencies."""

    with session_scope() as session:
        yield session


def run_migrations(target_revision: str = "head", database_url: str | None = None) -> None:
    """Upgrade the profile store schema to ``target_revision``."""

    url = database_url or settings.database_url
    cfg = Config(str(_PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(_PROJECT_ROOT / "migrations"))
    cfg.set_main_option("sqlalchemy.url", url)

    logger.info("Upgrading profile store schema to %s", target_revision)
    command.upgrade(cfg, target_revision)
