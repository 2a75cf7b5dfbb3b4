# Overview: Shared create/update/delete steps for single-table records.

from __future__ import annotations

from typing import Callable

from ..models import TABLES
from ..time_utils import utcnow
from ..validation import NotFoundError, ValidationError, validate_payload

Rules = Callable[[dict], None]


def _stamps_updates(table: str) -> bool:
    return "updated_at" in TABLES[table].__mapper__.columns


def clean_create(table: str, payload: dict, *, rules: Rules | None = None) -> dict:
    patch = validate_payload(model=TABLES[table], payload=payload, partial=False)
    if rules is not None:
        rules(patch)
    return patch


def clean_update(table: str, payload: dict, *, rules: Rules | None = None) -> dict:
    if not payload:
        raise ValidationError("No fields to update")
    patch = validate_payload(model=TABLES[table], payload=payload, partial=True)
    if rules is not None:
        rules(patch)
    if _stamps_updates(table):
        patch["updated_at"] = utcnow()
    return patch


def create_record(store, table: str, payload: dict, *, rules: Rules | None = None) -> dict:
    return store.insert(table, clean_create(table, payload, rules=rules))


def update_record(store, table: str, record_id: str, payload: dict, *, rules: Rules | None = None) -> dict:
    """Patch one row by id. Every update stamps updated_at where the table has it."""
    patch = clean_update(table, payload, rules=rules)
    rows = store.update(table, patch, equals={"id": record_id})
    if not rows:
        raise NotFoundError(f"No {table} record matches id={record_id}")
    return rows[0]


def delete_record(store, table: str, record_id: str) -> None:
    if not store.delete(table, equals={"id": record_id}):
        raise NotFoundError(f"No {table} record matches id={record_id}")
