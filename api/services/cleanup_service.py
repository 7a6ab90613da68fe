"""Service for cleanup operations."""
import logging
import threading
import time

from sqlalchemy.exc import SQLAlchemyError

from api.config import SESSION_CLEANUP_INTERVAL_SECONDS
from api.database import SessionLocal
from api.services.auth_service import cleanup_expired_sessions

logger = logging.getLogger(__name__)

# Delay before the first run so startup is not slowed down
INITIAL_DELAY_SECONDS = 60


def purge_expired_sessions() -> int:
    """Remove expired auth sessions from database."""
    db = SessionLocal()
    try:
        return cleanup_expired_sessions(db)
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to clean up expired sessions")
        return 0
    finally:
        db.close()


def schedule_session_cleanup() -> None:
    """Schedule periodic cleanup of expired auth sessions."""
    if SESSION_CLEANUP_INTERVAL_SECONDS <= 0:
        logger.info("Session cleanup disabled")
        return

    def _worker() -> None:
        time.sleep(INITIAL_DELAY_SECONDS)
        while True:
            purge_expired_sessions()
            time.sleep(SESSION_CLEANUP_INTERVAL_SECONDS)

    thread = threading.Thread(
        target=_worker,
        name="session_cleanup",
        daemon=True,
    )
    thread.start()
