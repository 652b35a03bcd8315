# File: storefront/gateways/persistence.py
"""
Table-style access to the storefront database.

Each call runs in its own transaction. Calls cannot be grouped across
tables; multi-table writes are sequenced by the caller.
"""
from typing import Any, Dict, Iterable, List, Optional
import logging

from sqlalchemy import inspect, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from storefront.core.errors import UpstreamError
from storefront.db import models
from storefront.db.session import SessionLocal

logger = logging.getLogger(__name__)

TABLES = {
    "users": models.User,
    "orders": models.Order,
    "order_items": models.OrderItem,
    "order_status_history": models.OrderStatusHistory,
}

Row = Dict[str, Any]


def _as_dict(obj) -> Row:
    return {attr.key: getattr(obj, attr.key) for attr in inspect(obj).mapper.column_attrs}


class PersistenceGateway:
    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self._session_factory = session_factory

    @staticmethod
    def _model(table: str):
        try:
            return TABLES[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}")

    def insert(self, table: str, rows: Iterable[Row]) -> List[Row]:
        model = self._model(table)
        try:
            with self._session_factory.begin() as session:
                objs = [model(**row) for row in rows]
                session.add_all(objs)
                session.flush()
                return [_as_dict(o) for o in objs]
        except SQLAlchemyError as e:
            logger.error(f"Insert into {table} failed: {e}")
            raise UpstreamError(f"Insert into {table} failed: {e.__class__.__name__}")

    def select(self, table: str, filters: Optional[Row] = None) -> List[Row]:
        model = self._model(table)
        stmt = select(model).filter_by(**(filters or {}))
        try:
            with self._session_factory() as session:
                return [_as_dict(o) for o in session.execute(stmt).scalars().all()]
        except SQLAlchemyError as e:
            logger.error(f"Select from {table} failed: {e}")
            raise UpstreamError(f"Select from {table} failed: {e.__class__.__name__}")

    def select_one(self, table: str, filters: Row) -> Optional[Row]:
        rows = self.select(table, filters)
        return rows[0] if rows else None

    def update(self, table: str, patch: Row, filters: Row) -> int:
        """Apply ``patch`` to every row matching ``filters``; returns the row count."""
        model = self._model(table)
        stmt = update(model).filter_by(**filters).values(**patch)
        try:
            with self._session_factory.begin() as session:
                return session.execute(stmt).rowcount
        except SQLAlchemyError as e:
            logger.error(f"Update of {table} failed: {e}")
            raise UpstreamError(f"Update of {table} failed: {e.__class__.__name__}")
