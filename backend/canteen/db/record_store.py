"""Record store facade over a SQLAlchemy session.

Business services read and write through this small CRUD surface instead of
issuing queries directly. Each write commits on its own, so a failure in a
later write never undoes an earlier one. Every SQLAlchemy error is rolled
back and re-raised as ``StoreUnavailable``; constraint violations use its
``DuplicateRecord`` subclass so callers can retry them.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar, Union

from sqlalchemy import select, update as sql_update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from canteen.core.exceptions import DuplicateRecord, RecordNotFound, StoreUnavailable
from canteen.db.base import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class RecordStore:
    """Generic create/read/update/delete over ORM model classes."""

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, model: Type[Base], exc: SQLAlchemyError) -> StoreUnavailable:
        self.db.rollback()
        if isinstance(exc, IntegrityError):
            logger.warning(f"Record store {action} on {model.__tablename__} rejected: {exc}")
            return DuplicateRecord(f"Could not {action} {model.__tablename__}: constraint violated")
        logger.error(f"Record store {action} on {model.__tablename__} failed: {exc}")
        return StoreUnavailable(f"Could not {action} {model.__tablename__}")

    def find(
        self,
        model: Type[ModelT],
        *criteria,
        order_by: Optional[Union[Any, Iterable[Any]]] = None,
        limit: Optional[int] = None,
        **equals: Any,
    ) -> List[ModelT]:
        """Return rows matching all criteria and ``column=value`` filters."""
        stmt = select(model)
        if criteria:
            stmt = stmt.where(*criteria)
        for column, value in equals.items():
            stmt = stmt.where(getattr(model, column) == value)
        if order_by is not None:
            if isinstance(order_by, (list, tuple)):
                stmt = stmt.order_by(*order_by)
            else:
                stmt = stmt.order_by(order_by)
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            return list(self.db.scalars(stmt).all())
        except SQLAlchemyError as e:
            raise self._fail("read", model, e) from e

    def get(self, model: Type[ModelT], record_id: Any, refresh: bool = False) -> Optional[ModelT]:
        try:
            return self.db.get(model, record_id, populate_existing=refresh)
        except SQLAlchemyError as e:
            raise self._fail("read", model, e) from e

    def insert(self, model: Type[ModelT], values: Union[Dict[str, Any], ModelT]) -> ModelT:
        record = values if isinstance(values, model) else model(**values)
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as e:
            raise self._fail("insert into", model, e) from e
        return record

    def insert_many(self, records: List[Base]) -> List[Base]:
        """Insert several records in one transaction (e.g. an order and its lines)."""
        if not records:
            return records
        try:
            self.db.add_all(records)
            self.db.commit()
            for record in records:
                self.db.refresh(record)
        except SQLAlchemyError as e:
            raise self._fail("insert into", type(records[0]), e) from e
        return records

    def update(self, model: Type[ModelT], record_id: Any, patch: Dict[str, Any]) -> ModelT:
        record = self.get(model, record_id)
        if record is None:
            raise RecordNotFound(model.__tablename__, record_id)
        try:
            for key, value in patch.items():
                setattr(record, key, value)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as e:
            raise self._fail("update", model, e) from e
        return record

    def update_if(
        self,
        model: Type[ModelT],
        record_id: Any,
        expected: Dict[str, Any],
        patch: Dict[str, Any],
    ) -> Optional[ModelT]:
        """Conditional update: apply ``patch`` only if ``expected`` still holds.

        Returns the refreshed record, or None when another writer changed
        one of the expected columns first (or the row is gone).
        """
        stmt = (
            sql_update(model)
            .where(model.id == record_id)
            .values(**patch)
            .execution_options(synchronize_session=False)
        )
        for column, value in expected.items():
            stmt = stmt.where(getattr(model, column) == value)
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("update", model, e) from e
        if result.rowcount == 0:
            return None
        return self.get(model, record_id, refresh=True)

    def delete(self, model: Type[ModelT], record_id: Any) -> None:
        record = self.get(model, record_id)
        if record is None:
            raise RecordNotFound(model.__tablename__, record_id)
        try:
            self.db.delete(record)
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("delete from", model, e) from e
