# Overview: Store capability used by every command handler, plus its SQLAlchemy implementation.

"""
Data store capability.

Handlers never touch the ORM session directly. They receive a DataStore at
construction and talk to it in terms of logical table names and plain dict
rows. That keeps the order engine and the aggregator independent of the
storage technology, and makes the two optional primitives explicit:

- adjust_counter: atomic "col = max(col + delta, floor)" keyed by row id.
  Callers must check supports_atomic_counters and fall back to a
  read-then-write when it is False (see stock_service).
- execute_readonly: run one caller-supplied SELECT in the database's
  read-only mode.

Each write commits on its own. There is no multi-statement transaction
across calls; a command that performs several writes is a sequence of
durable steps.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from sqlalchemy import case, update
from sqlalchemy.exc import SQLAlchemyError

from ..models import TABLES
from ..time_utils import utcnow
from ..validation import (
    CapabilityUnavailableError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from .query_builder import QuerySpec, Window, apply_filters, build_query

logger = logging.getLogger(__name__)


class DataStore:
    """
    Table-scoped reads and writes over dict rows.

    Subclasses implement select/insert/update/delete and may opt into the
    optional primitives by overriding them and setting the capability flags.
    """

    supports_atomic_counters: bool = False
    supports_readonly_sql: bool = False

    def select(self, spec: QuerySpec) -> list[dict]:
        raise NotImplementedError

    def insert(self, table: str, values: Mapping[str, Any]) -> dict:
        raise NotImplementedError

    def insert_many(self, table: str, rows: Iterable[Mapping[str, Any]]) -> list[dict]:
        raise NotImplementedError

    def update(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        equals: Mapping[str, Any],
        not_equals: Mapping[str, Any] | None = None,
    ) -> list[dict]:
        raise NotImplementedError

    def delete(self, table: str, *, equals: Mapping[str, Any]) -> int:
        raise NotImplementedError

    def adjust_counter(self, table: str, row_id: str, column: str, delta: int, *, floor: int = 0) -> int:
        raise CapabilityUnavailableError("Atomic counter adjustment is not available for this store")

    def execute_readonly(self, sql: str) -> list[dict]:
        raise CapabilityUnavailableError("Read-only SQL execution is not available for this store")

    # Convenience reads built on select()

    def find_one(self, table: str, **equals: Any) -> dict | None:
        rows = self.select(QuerySpec(table=table, equals=equals, window=Window(size=1)))
        return rows[0] if rows else None

    def fetch_one(self, table: str, **equals: Any) -> dict:
        """Single-record fetch; zero rows is a NotFoundError."""
        if not equals or all(v is None for v in equals.values()):
            raise ValidationError(f"A lookup key is required to fetch from {table}")
        row = self.find_one(table, **equals)
        if row is None:
            criteria = ", ".join(f"{k}={v}" for k, v in equals.items() if v is not None)
            raise NotFoundError(f"No {table} record matches {criteria}")
        return row


def _store_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def _has_column(model, name: str) -> bool:
    return name in model.__mapper__.columns


class SqlAlchemyDataStore(DataStore):
    """
    DataStore over a SQLAlchemy session (normally flask_sqlalchemy's db.session).

    Store errors are rolled back and re-raised as StoreError carrying the
    database's own message; nothing is retried here.
    """

    def __init__(
        self,
        session,
        *,
        atomic_counters: bool = True,
        readonly_sql: bool = True,
        tables: Mapping[str, Any] | None = None,
    ):
        self.session = session
        self.supports_atomic_counters = atomic_counters
        self.supports_readonly_sql = readonly_sql
        self._tables = dict(tables or TABLES)

    def _model(self, table: str):
        try:
            return self._tables[table]
        except KeyError:
            raise ValidationError(f"Unknown table: {table}")

    def _write(self, op):
        try:
            result = op()
            self.session.commit()
            return result
        except SQLAlchemyError as exc:
            self.session.rollback()
            message = _store_message(exc)
            logger.warning("Store write failed: %s", message)
            raise StoreError(message) from exc

    def _to_row(self, obj, spec: QuerySpec | None = None) -> dict:
        row = obj.to_dict()
        if spec is not None and spec.include is not None:
            related = getattr(obj, spec.include.relation)
            row[spec.include.relation] = (
                {f: getattr(related, f) for f in spec.include.fields} if related is not None else None
            )
        return row

    def select(self, spec: QuerySpec) -> list[dict]:
        model = self._model(spec.table)
        try:
            objs = build_query(self.session, model, spec).all()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StoreError(_store_message(exc)) from exc
        return [self._to_row(o, spec) for o in objs]

    def insert(self, table: str, values: Mapping[str, Any]) -> dict:
        model = self._model(table)

        def _op():
            obj = model(**values)
            self.session.add(obj)
            self.session.flush()
            return obj

        return self._write(_op).to_dict()

    def insert_many(self, table: str, rows: Iterable[Mapping[str, Any]]) -> list[dict]:
        model = self._model(table)

        def _op():
            objs = [model(**values) for values in rows]
            self.session.add_all(objs)
            self.session.flush()
            return objs

        return [o.to_dict() for o in self._write(_op)]

    def update(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        equals: Mapping[str, Any],
        not_equals: Mapping[str, Any] | None = None,
    ) -> list[dict]:
        model = self._model(table)
        if not equals and not not_equals:
            raise ValidationError(f"Refusing to update every row of {table}")

        def _op():
            query = apply_filters(self.session.query(model), model, QuerySpec(table=table, equals=equals))
            for name, value in (not_equals or {}).items():
                query = query.filter(getattr(model, name) != value)
            objs = query.all()
            for obj in objs:
                for key, value in values.items():
                    setattr(obj, key, value)
            self.session.flush()
            return objs

        return [o.to_dict() for o in self._write(_op)]

    def delete(self, table: str, *, equals: Mapping[str, Any]) -> int:
        model = self._model(table)
        if not equals:
            raise ValidationError(f"Refusing to delete every row of {table}")

        def _op():
            query = apply_filters(self.session.query(model), model, QuerySpec(table=table, equals=equals))
            return query.delete(synchronize_session=False)

        return self._write(_op)

    def adjust_counter(self, table: str, row_id: str, column: str, delta: int, *, floor: int = 0) -> int:
        """
        col = max(col + delta, floor) in a single UPDATE, so concurrent
        adjustments of the same row cannot lose each other's deltas.
        """
        if not self.supports_atomic_counters:
            return super().adjust_counter(table, row_id, column, delta, floor=floor)

        model = self._model(table)
        col = getattr(model, column)
        values = {column: case((col + delta < floor, floor), else_=col + delta)}
        if _has_column(model, "updated_at"):
            values["updated_at"] = utcnow()

        def _op():
            stmt = (
                update(model)
                .where(model.id == row_id)
                .values(values)
                .execution_options(synchronize_session=False)
            )
            return self.session.execute(stmt).rowcount

        if not self._write(_op):
            raise NotFoundError(f"No {table} record matches id={row_id}")
        return self.session.query(col).filter(model.id == row_id).scalar()

    def execute_readonly(self, sql: str) -> list[dict]:
        """
        Run one statement with the database in read-only mode.

        SQLite: PRAGMA query_only on the session's connection (reset before
        the connection goes back to the pool); the driver refuses multiple
        statements. PostgreSQL: SET TRANSACTION READ ONLY. Anything else is
        reported as unavailable rather than run unguarded.
        """
        if not self.supports_readonly_sql:
            return super().execute_readonly(sql)

        dialect = self.session.get_bind().dialect.name
        if dialect not in {"sqlite", "postgresql"}:
            raise CapabilityUnavailableError(
                f"Read-only SQL execution is not available for the {dialect} dialect"
            )

        self.session.rollback()
        conn = self.session.connection()
        try:
            if dialect == "sqlite":
                conn.exec_driver_sql("PRAGMA query_only = ON")
            else:
                conn.exec_driver_sql("SET TRANSACTION READ ONLY")
            result = conn.exec_driver_sql(sql)
            if not result.returns_rows:
                return []
            return [dict(row._mapping) for row in result]
        except SQLAlchemyError as exc:
            raise StoreError(_store_message(exc)) from exc
        finally:
            if dialect == "sqlite":
                conn.exec_driver_sql("PRAGMA query_only = OFF")
            self.session.rollback()
