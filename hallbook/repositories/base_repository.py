"""
Base repository with standardized CRUD operations and error handling.

Repositories never commit: they add, flush and run conditional updates
inside the caller's transaction. Services own the commit.
"""

from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hallbook.core.exceptions import ConflictError, RepositoryError, ResourceNotFoundError
from hallbook.core.logging import get_logger
from hallbook.models.base import BaseModel

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=BaseModel)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository over one SQLAlchemy model.
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

    # ==================== Create Operations ====================

    def create(self, entity: ModelType) -> ModelType:
        """
        Add a new entity and flush so its id and defaults are populated.

        Raises:
            ConflictError: If a unique constraint is violated
        """
        try:
            self.db.add(entity)
            self.db.flush()
            logger.debug(f"Created {self.model.__name__} with id: {entity.id}")
            return entity
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(f"{self.model.__name__} already exists or violates a constraint") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Create failed: {e}") from e

    # ==================== Read Operations ====================

    def find_by_id(self, id: str) -> Optional[ModelType]:
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by ID failed: {e}") from e

    def get_by_id(self, id: str) -> ModelType:
        """
        Get entity by ID or raise.

        Raises:
            ResourceNotFoundError: If entity not found
        """
        entity = self.find_by_id(id)
        if entity is None:
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
            criteria: Filter criteria as key-value pairs; list values become IN filters
            skip: Number of records to skip
            limit: Maximum number of records (None for all)
            order_by: Fields to order by (prefix with - for desc)
        """
        try:
            query = self.db.query(self.model)
            for key, value in criteria.items():
                if not hasattr(self.model, key):
                    continue
                column = getattr(self.model, key)
                if isinstance(value, (list, tuple, set, frozenset)):
                    query = query.filter(column.in_(list(value)))
                else:
                    query = query.filter(column == value)

            for field in order_by or []:
                if field.startswith('-'):
                    query = query.order_by(getattr(self.model, field[1:]).desc())
                else:
                    query = query.order_by(getattr(self.model, field))

            query = query.offset(skip)
            if limit is not None:
                query = query.limit(limit)
            return query.all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Find by criteria failed: {e}") from e

    def find_one_by_criteria(self, criteria: Dict[str, Any]) -> Optional[ModelType]:
        results = self.find_by_criteria(criteria, limit=1)
        return results[0] if results else None

    # ==================== Update Operations ====================

    def update(self, id: str, data: Dict[str, Any]) -> ModelType:
        """
        Apply field updates to an entity.

        Raises:
            ResourceNotFoundError: If entity not found
        """
        entity = self.get_by_id(id)
        for key, value in data.items():
            if hasattr(entity, key):
                setattr(entity, key, value)
        try:
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(f"{self.model.__name__} update violates a constraint") from e
        return entity

    def conditional_update(self, conditions: Dict[str, Any], values: Dict[str, Any]) -> int:
        """
        Single UPDATE ... WHERE statement; returns the number of rows changed.

        The conditions are evaluated by the database, so two concurrent
        callers cannot both match the same precondition.
        """
        try:
            stmt = update(self.model).values(**values)
            for key, value in conditions.items():
                column = getattr(self.model, key)
                stmt = stmt.where(column.is_(None) if value is None else column == value)
            result = self.db.execute(stmt.execution_options(synchronize_session=False))
            if result.rowcount:
                self.db.expire_all()
            return result.rowcount
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(f"{self.model.__name__} update violates a constraint") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise RepositoryError(f"Conditional update failed: {e}") from e

    # ==================== Delete Operations ====================

    def delete(self, id: str) -> bool:
        entity = self.find_by_id(id)
        if entity is None:
            return False
        try:
            self.db.delete(entity)
            self.db.flush()
            return True
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(f"{self.model.__name__} is still referenced") from e
