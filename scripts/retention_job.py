"""Retention job for cleaning up old saved routes."""

import logging
import sys

from greenroute.config import get_settings
from greenroute.db.base import SessionLocal
from greenroute.repositories.route_repository import RouteRepository

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()


def run_retention_job(days: int | None = None) -> int:
    """Hard delete saved routes older than the retention window."""
    days = days or settings.ROUTE_RETENTION_DAYS
    logger.info(f"Starting retention job ({days} day window)")

    try:
        with SessionLocal() as db:
            deleted_count = RouteRepository(db).hard_delete_old_records(days=days)

        logger.info(f"Retention job complete. Deleted {deleted_count} old routes.")
        return 0

    except Exception as e:
        logger.error(f"Error during retention job: {str(e)}")
        return 1


if __name__ == "__main__":
    sys.exit(run_retention_job())
