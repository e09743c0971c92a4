"""
Base repository with standardized CRUD operations and error handling.

Provides foundation for all domain repositories. Repositories flush but do
not commit; the owning service decides the transaction boundary.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hostel_complaints.core.exceptions import (
    ConflictError,
    RepositoryError,
    ResourceNotFoundError,
)
from hostel_complaints.core.logging import get_logger
from hostel_complaints.models.base import BaseModel

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Base repository with standardized operations.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    @property
    def supports_row_locks(self) -> bool:
        """Whether the bound database honours SELECT ... FOR UPDATE."""
        bind = self.db.get_bind()
        return bind.dialect.name != "sqlite"

    # ==================== Create Operations ====================

    def create(self, entity: ModelType) -> ModelType:
        """
        Add a new entity to the session and flush it.

        Args:
            entity: Entity to create

        Returns:
            Created entity

        Raises:
            ConflictError: If a uniqueness constraint is violated
        """
        try:
            self.db.add(entity)
            self.db.flush()

            logger.debug(f"Created {self.model.__name__} with id: {entity.id}")
            return entity

        except IntegrityError as e:
            raise ConflictError(f"{self.model.__name__} already exists") from e
        except SQLAlchemyError as e:
            raise RepositoryError(f"Create failed: {e}") from e

    # ==================== Read Operations ====================

    def find_by_id(self, id: str, for_update: bool = False) -> Optional[ModelType]:
        """
        Find entity by ID.

        Args:
            id: Entity ID
            for_update: Lock the row until the transaction ends where supported

        Returns:
            Entity or None
        """
        try:
            query = select(self.model).where(self.model.id == id)
            if for_update and self.supports_row_locks:
                query = query.with_for_update(of=self.model)
            return self.db.execute(query).scalars().first()

        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by ID failed: {e}") from e

    def get_by_id(self, id: str, for_update: bool = False) -> ModelType:
        """
        Get entity by ID or raise exception.

        Raises:
            ResourceNotFoundError: If entity not found
        """
        entity = self.find_by_id(id, for_update=for_update)
        if not entity:
            raise ResourceNotFoundError(self.model.__name__, id)
        return entity

    def find_by_criteria(
        self,
        criteria: Dict[str, Any],
        skip: int = 0,
        limit: Optional[int] = 100,
        order_by: Optional[List[str]] = None,
    ) -> List[ModelType]:
        """
        Find entities matching criteria.

        Args:
            criteria: Filter criteria as key-value pairs
            skip: Number of records to skip
            limit: Maximum number of records (None for no limit)
            order_by: List of fields to order by (prefix with - for desc)

        Returns:
            List of matching entities
        """
        try:
            query = select(self.model)

            for key, value in criteria.items():
                if hasattr(self.model, key):
                    column = getattr(self.model, key)
                    if isinstance(value, (list, tuple)):
                        query = query.where(column.in_(value))
                    else:
                        query = query.where(column == value)

            for field in order_by or []:
                if field.startswith('-'):
                    query = query.order_by(getattr(self.model, field[1:]).desc())
                else:
                    query = query.order_by(getattr(self.model, field))

            query = query.offset(skip)
            if limit is not None:
                query = query.limit(limit)

            return list(self.db.execute(query).scalars().all())

        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by criteria failed: {e}") from e

    # ==================== Delete Operations ====================

    def delete(self, entity: ModelType) -> None:
        """Hard delete an entity."""
        try:
            self.db.delete(entity)
            self.db.flush()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Delete failed: {e}") from e

        logger.debug(f"Deleted {self.model.__name__} with id: {entity.id}")
