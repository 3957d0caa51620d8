"""
CLI entrypoint for the expired-session purge. Run from cron, e.g.:

  python -m app.cleanup

Or hourly: 0 * * * * cd /path/to/portico && .venv/bin/python -m app.cleanup

Validation already deletes an expired session when it is presented; this
only keeps the table from accumulating sessions nobody comes back for.
"""

import logging
import sys

from app.core.config import get_settings
from app.core.database import SessionLocal
from app.services.sessions import purge_expired_sessions

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Delete every session past its expiry."""
    settings = get_settings()
    db = SessionLocal()
    try:
        deleted = purge_expired_sessions(db, settings)
        logger.info("Session cleanup completed: sessions_deleted=%s", deleted)
        return 0
    except Exception as e:
        logger.exception("Session cleanup failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
