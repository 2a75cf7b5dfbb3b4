# Overview: Currency CRUD and the single-default-currency rule.

"""
At most one currency has is_default = true.

Setting the flag on create or update first clears it on every other row,
then writes the requested change. The two writes are separate commits: a
concurrent default change can interleave between them, and a failed second
write leaves no default at all. Both are accepted; nothing here retries.
"""

from __future__ import annotations

import logging

from ..time_utils import utcnow
from ..validation import enforce_rules_currency
from .query_builder import QuerySpec, SortOption
from .records import clean_create, clean_update, delete_record, update_record

logger = logging.getLogger(__name__)


def _normalize(fields: dict) -> dict:
    payload = dict(fields)
    if isinstance(payload.get("code"), str):
        payload["code"] = payload["code"].strip().upper()
    return payload


class CurrencyService:
    def __init__(self, store):
        self.store = store

    def list_currencies(self) -> list[dict]:
        return self.store.select(QuerySpec(table="currencies", sort=SortOption("code")))

    def _clear_default(self, *, keep_id: str | None = None) -> int:
        cleared = self.store.update(
            "currencies",
            {"is_default": False, "updated_at": utcnow()},
            equals={"is_default": True},
            not_equals={"id": keep_id} if keep_id else None,
        )
        if cleared:
            logger.info("Cleared default flag on %d currency row(s)", len(cleared))
        return len(cleared)

    def create_currency(self, fields: dict) -> dict:
        patch = clean_create("currencies", _normalize(fields), rules=enforce_rules_currency)
        if patch.get("is_default"):
            self._clear_default()
        return self.store.insert("currencies", patch)

    def update_currency(self, currency_id: str, fields: dict) -> dict:
        payload = _normalize(fields)
        if payload.get("is_default"):
            # Validate before the first write
            clean_update("currencies", payload, rules=enforce_rules_currency)
            self.store.fetch_one("currencies", id=currency_id)
            self._clear_default(keep_id=currency_id)
        return update_record(self.store, "currencies", currency_id, payload, rules=enforce_rules_currency)

    def delete_currency(self, currency_id: str) -> None:
        delete_record(self.store, "currencies", currency_id)
