"""Create or upgrade the profile database schema."""
import logging

from physio_engine.config import get_settings
from physio_engine.database import run_migrations
from physio_engine.logging_config import configure_logging


logger = logging.getLogger(__name__)


def main() -> None:
    configure_logging()
    run_migrations()
    logger.info("Profile database ready at %s", get_settings().database_url)


if __name__ == "__main__":
    main()
