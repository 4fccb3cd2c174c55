"""
Base repository class for data access.

Example:
    class TeamRepository(BaseRepository[Team]):
        def find_by_external_id(self, external_id: str) -> Optional[Team]:
            return self.where_first(Team.external_id == external_id)
"""
from abc import ABC
from typing import TypeVar, Generic, Type, Optional, List, Any, Dict, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from court_vision.utils.timezone import utcnow

T = TypeVar("T")


class BaseRepository(Generic[T], ABC):
    """
    Common data access methods shared by every repository.

    Attributes:
        model_type: The SQLAlchemy model class this repository manages
        db: The database session
        pk_column: Primary key attribute name (``id`` unless overridden)
    """

    pk_column = "id"

    def __init__(self, model_type: Type[T], db: Session):
        self.model_type = model_type
        self.db = db

    @property
    def _pk(self):
        return getattr(self.model_type, self.pk_column)

    # ========================================================================
    # CRUD
    # ========================================================================

    def find_by_id(self, id: str) -> Optional[T]:
        return self.db.query(self.model_type).filter(self._pk == id).first()

    def create(self, **kwargs) -> T:
        """Add a new record to the session (not committed)."""
        instance = self.model_type(**kwargs)
        self.db.add(instance)
        return instance

    def update_instance(self, instance: T, values: Dict[str, Any]) -> bool:
        """
        Copy ``values`` onto ``instance``.

        Returns:
            True if any column actually changed
        """
        changed = False
        for key, value in values.items():
            if hasattr(instance, key) and getattr(instance, key) != value:
                setattr(instance, key, value)
                changed = True
        if changed and hasattr(instance, "updated_at"):
            instance.updated_at = utcnow()
        return changed

    def upsert(self, lookup: Dict[str, Any], values: Dict[str, Any]) -> Tuple[T, bool]:
        """
        Insert or update the single record matching ``lookup``.

        Args:
            lookup: Column/value pairs identifying the record (unique key)
            values: Remaining column values to write

        Returns:
            (instance, created)
        """
        instance = self.filter_by_first(**lookup)
        if instance is None:
            instance = self.create(**lookup, **values)
            return instance, True
        self.update_instance(instance, values)
        return instance, False

    # ========================================================================
    # Query builders
    # ========================================================================

    def query(self) -> Query:
        return self.db.query(self.model_type)

    def filter_by_first(self, **kwargs) -> Optional[T]:
        return self.db.query(self.model_type).filter_by(**kwargs).first()

    def where(self, *criterion) -> List[T]:
        return self.db.query(self.model_type).filter(*criterion).all()

    def where_first(self, *criterion) -> Optional[T]:
        return self.db.query(self.model_type).filter(*criterion).first()

    # ========================================================================
    # Existence / aggregation
    # ========================================================================

    def exists(self, id: str) -> bool:
        return self.db.query(
            self.db.query(self.model_type).filter(self._pk == id).exists()
        ).scalar()

    def count(self, *criterion) -> int:
        query = self.db.query(func.count(self._pk))
        if criterion:
            query = query.filter(*criterion)
        return query.scalar() or 0

    def count_since(self, date_field: str, since) -> int:
        """Count records whose ``date_field`` is at or after ``since``."""
        return self.count(getattr(self.model_type, date_field) >= since)

    # ========================================================================
    # Session
    # ========================================================================

    def save(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
