# backend/beautycatalog/repositories/base_repository.py
"""
Base Repository Pattern for the service catalog

Provides the document-store primitives every catalog collection needs:
- get / put (create, update) / delete by id
- predicate queries with caller-specified ordering
- cursor pagination (page size + opaque "last id" cursor)

Repositories never commit; transactions are managed by services.
Store failures are wrapped in RepositoryException and flagged as
transient or integrity errors so services can classify them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import logging
from typing import Any, Generic, List, Mapping, Optional, Type, TypeVar

from sqlalchemy import and_, or_
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..core.exceptions import RepositoryException

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass
class Page(Generic[T]):
    """One page of query results and the cursor for the next page."""

    items: List[T] = field(default_factory=list)
    next_cursor: Optional[str] = None


def _wrap_store_error(action: str, exc: SQLAlchemyError) -> RepositoryException:
    transient = isinstance(exc, OperationalError) or (
        isinstance(exc, DBAPIError) and bool(getattr(exc, "connection_invalidated", False))
    )
    return RepositoryException(
        f"{action}: {exc}",
        transient=transient,
        integrity=isinstance(exc, IntegrityError),
    )


class IRepository(ABC, Generic[T]):
    """
    Abstract repository interface defining core data access methods.

    All repositories must implement these methods to ensure consistency
    across the application.
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """
        Retrieve an entity by its primary key.

        Returns:
            The entity if found, None otherwise
        """

    @abstractmethod
    def create(self, **kwargs: Any) -> T:
        """
        Create a new entity.

        Raises:
            RepositoryException: If creation fails
        """

    @abstractmethod
    def update(self, id: str, **kwargs: Any) -> Optional[T]:
        """
        Update an existing entity.

        Returns:
            The updated entity if found, None otherwise
        """

    @abstractmethod
    def delete(self, id: str) -> bool:
        """
        Delete an entity by its primary key.

        Returns:
            True if deleted, False if not found
        """

    @abstractmethod
    def query(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        page_size: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> Page[T]:
        """
        Run an equality-predicate query with ordering and pagination.
        """


class BaseRepository(IRepository[T]):
    """
    Concrete base repository implementation with common data access patterns.

    Attributes:
        db: SQLAlchemy session
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize repository with database session and model.

        Args:
            db: SQLAlchemy session (managed by service layer)
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key."""
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting {self.model.__name__} by id {id}: {str(e)}")
            raise _wrap_store_error(f"Failed to retrieve {self.model.__name__}", e) from e

    def create(self, **kwargs: Any) -> T:
        """
        Create a new entity.

        Note: Does NOT commit - transaction management is handled by service layer.
        """
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()  # Get ID without committing
            return entity
        except IntegrityError as exc:
            self.logger.error("Integrity error creating %s: %s", self.model.__name__, exc)
            self.db.rollback()
            raise _wrap_store_error("Integrity constraint violated", exc) from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self.model.__name__}: {str(e)}")
            self.db.rollback()
            raise _wrap_store_error(f"Failed to create {self.model.__name__}", e) from e

    def update(self, id: str, **kwargs: Any) -> Optional[T]:
        """
        Update an existing entity.

        Only updates provided fields, preserves others.
        """
        entity = self.get_by_id(id)
        if entity is None:
            return None
        try:
            for key, value in kwargs.items():
                if hasattr(entity, key):
                    setattr(entity, key, value)
            self.db.flush()
            return entity
        except SQLAlchemyError as e:
            self.logger.error(f"Error updating {self.model.__name__} {id}: {str(e)}")
            self.db.rollback()
            raise _wrap_store_error(f"Failed to update {self.model.__name__}", e) from e

    def delete(self, id: str) -> bool:
        """
        Delete an entity by its primary key.

        Returns False if entity not found, raises exception for constraint violations.
        """
        entity = self.get_by_id(id)
        if entity is None:
            return False
        try:
            self.db.delete(entity)
            self.db.flush()
            return True
        except IntegrityError as e:
            self.logger.error(
                f"Cannot delete {self.model.__name__} {id} due to constraints: {str(e)}"
            )
            self.db.rollback()
            raise _wrap_store_error("Cannot delete due to existing references", e) from e
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting {self.model.__name__} {id}: {str(e)}")
            self.db.rollback()
            raise _wrap_store_error(f"Failed to delete {self.model.__name__}", e) from e

    def count(self, **kwargs: Any) -> int:
        """Count entities matching given criteria."""
        try:
            return self.db.query(self.model).filter_by(**kwargs).count()
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting records: {str(e)}")
            raise _wrap_store_error("Failed to count records", e) from e

    def find_one_by(self, **kwargs: Any) -> Optional[T]:
        """Find a single entity by given criteria (exact match)."""
        try:
            return self.db.query(self.model).filter_by(**kwargs).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding one by criteria: {str(e)}")
            raise _wrap_store_error("Failed to find record", e) from e

    def query(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        page_size: Optional[int] = None,
        cursor: Optional[str] = None,
    ) -> Page[T]:
        """
        Equality-predicate query with keyset pagination.

        Results are ordered by ``order_by`` (default: primary key) with the
        primary key as tie-breaker. ``cursor`` is the id of the last item of
        the previous page.
        """
        sort_column = self._sort_column(order_by)
        id_column = self.model.id  # type: ignore[attr-defined]

        query = self._apply_filters(self._build_query(), filters or {})
        if cursor:
            anchor = self.get_by_id(cursor)
            if anchor is None:
                raise RepositoryException(f"Unknown cursor: {cursor}")
            anchor_value = getattr(anchor, sort_column.key)
            if descending:
                query = query.filter(
                    or_(
                        sort_column < anchor_value,
                        and_(sort_column == anchor_value, id_column < cursor),
                    )
                )
            else:
                query = query.filter(
                    or_(
                        sort_column > anchor_value,
                        and_(sort_column == anchor_value, id_column > cursor),
                    )
                )

        if descending:
            query = query.order_by(sort_column.desc(), id_column.desc())
        else:
            query = query.order_by(sort_column.asc(), id_column.asc())

        if page_size is not None:
            # Fetch one extra row to learn whether another page exists
            rows = self._execute_query(query.limit(page_size + 1))
            has_more = len(rows) > page_size
            items = rows[:page_size]
            next_cursor = getattr(items[-1], "id") if has_more and items else None
            return Page(items=items, next_cursor=next_cursor)

        return Page(items=self._execute_query(query), next_cursor=None)

    # Protected helper methods for use by subclasses

    def _sort_column(self, order_by: Optional[str]) -> Any:
        name = order_by or "id"
        column = getattr(self.model, name, None)
        if column is None or not hasattr(column, "asc"):
            raise RepositoryException(f"{self.model.__name__} cannot be ordered by '{name}'")
        return column

    def _apply_filters(self, query: Query, filters: Mapping[str, Any]) -> Query:
        for name, value in filters.items():
            column = getattr(self.model, name, None)
            if column is None:
                raise RepositoryException(f"{self.model.__name__} has no field '{name}'")
            query = query.filter(column == value)
        return query

    def _build_query(self) -> Query:
        """Get base query for the model."""
        return self.db.query(self.model)

    def _execute_query(self, query: Query) -> List[T]:
        """Execute query with error handling."""
        try:
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Query execution error: {str(e)}")
            raise _wrap_store_error("Query failed", e) from e
