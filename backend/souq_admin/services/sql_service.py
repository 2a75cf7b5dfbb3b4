# Overview: Ad hoc read-only SQL through the store's read-only primitive.

from __future__ import annotations

import logging

from ..validation import CapabilityUnavailableError, ValidationError

logger = logging.getLogger(__name__)


def ensure_select(query: str) -> str:
    """
    Cheap first gate: the trimmed statement must start with "select".
    It is not a parser; the store's read-only mode is what actually
    prevents writes.
    """
    statement = (query or "").strip()
    if not statement.lower().startswith("select"):
        raise ValidationError("Only SELECT queries are permitted")
    return statement


class SqlService:
    def __init__(self, store):
        self.store = store

    def execute(self, query: str) -> list[dict]:
        statement = ensure_select(query)
        if not self.store.supports_readonly_sql:
            raise CapabilityUnavailableError("Read-only SQL execution is not available for this store")
        logger.info("Running read-only SQL (%d chars)", len(statement))
        return self.store.execute_readonly(statement)
