"""
Repository for the assignment configuration singleton.
"""

from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hostel_complaints.core.logging import get_logger
from hostel_complaints.models.assignment.assignment_config import (
    DEFAULT_SINGLETON_KEY,
    AssignmentConfig,
)
from hostel_complaints.repositories.base.base_repository import BaseRepository

logger = get_logger(__name__)


class AssignmentConfigRepository(BaseRepository[AssignmentConfig]):
    """Find-or-create access to the single configuration row."""

    def __init__(self, db: Session):
        super().__init__(AssignmentConfig, db)

    def find_singleton(self) -> Optional[AssignmentConfig]:
        query = select(AssignmentConfig).where(
            AssignmentConfig.singleton_key == DEFAULT_SINGLETON_KEY
        )
        return self.db.execute(query).scalars().first()

    def get_or_create(self, defaults: Optional[Dict[str, Any]] = None) -> AssignmentConfig:
        """
        Return the configuration row, inserting it with defaults if absent.

        The insert runs inside a SAVEPOINT. When a concurrent first access
        wins the race the UNIQUE singleton_key rejects our row, the savepoint
        is rolled back and the winner's row is read instead.
        """
        config = self.find_singleton()
        if config is not None:
            return config

        try:
            with self.db.begin_nested():
                config = AssignmentConfig(singleton_key=DEFAULT_SINGLETON_KEY, **(defaults or {}))
                self.db.add(config)
            logger.info("Created default assignment configuration")
            return config
        except IntegrityError:
            logger.info("Assignment configuration created concurrently; re-reading")
            config = self.find_singleton()
            if config is None:
                raise
            return config
