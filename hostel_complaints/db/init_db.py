"""Database initialization utilities."""
from typing import Optional

from sqlalchemy.engine import Engine

from hostel_complaints.core.logging import get_logger
from hostel_complaints.db.base import Base, import_models
from hostel_complaints.db.session import SessionLocal, engine as default_engine
from hostel_complaints.services.assignment.config_provider import AssignmentConfigProvider

logger = get_logger(__name__)


def init_db(bind: Optional[Engine] = None, session_factory=None) -> None:
    """
    Create missing tables and make sure the assignment configuration exists.

    Note: This is suitable for development/testing only.
    For production, use migrations instead.

    Args:
        bind: Engine to create tables on (defaults to the application engine)
        session_factory: Session factory used for the configuration bootstrap
    """
    bind = bind or default_engine
    session_factory = session_factory or SessionLocal

    try:
        import_models()
        Base.metadata.create_all(bind=bind)
        logger.info("Database tables ensured")
    except Exception as e:
        logger.error(f"Error initializing database: {e}")
        raise

    db = session_factory()
    try:
        AssignmentConfigProvider.from_session(db).ensure_default()
    finally:
        db.close()

