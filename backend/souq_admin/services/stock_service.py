# Overview: Stock quantity adjustments with an atomic path and a best-effort fallback.

from __future__ import annotations

import logging
from typing import Iterable

from ..time_utils import utcnow
from ..validation import NotFoundError, StoreError

logger = logging.getLogger(__name__)


def adjust_stock(store, product_id: str, delta: int) -> int:
    """
    Add delta (negative to decrement) to a product's stock, floored at 0.
    Returns the resulting stock_quantity.

    With store.supports_atomic_counters the change is one UPDATE in the
    database. Without it this is a read-then-write: two adjustments of the
    same product running at the same time can both read the same value and
    one of the deltas is lost. That race is accepted for stores without an
    atomic counter; there is no lock here to close it.
    """
    if store.supports_atomic_counters:
        return store.adjust_counter("products", product_id, "stock_quantity", delta, floor=0)

    product = store.fetch_one("products", id=product_id)
    new_quantity = max(int(product["stock_quantity"] or 0) + delta, 0)
    store.update(
        "products",
        {"stock_quantity": new_quantity, "updated_at": utcnow()},
        equals={"id": product_id},
    )
    return new_quantity


def apply_stock_deltas(store, deltas: Iterable[tuple[str, int]]) -> list[dict]:
    """
    Apply each (product_id, delta) independently and report per item.

    A failing item is logged and reported; it never stops the others and
    nothing already applied is undone.
    """
    outcomes = []
    for product_id, delta in deltas:
        try:
            new_quantity = adjust_stock(store, product_id, delta)
        except (NotFoundError, StoreError) as exc:
            logger.warning("Stock adjustment failed for product %s (delta %s): %s", product_id, delta, exc)
            outcomes.append({
                "product_id": product_id,
                "delta": delta,
                "status": "failed",
                "error": str(exc),
            })
            continue

        outcomes.append({
            "product_id": product_id,
            "delta": delta,
            "status": "applied",
            "stock_quantity": new_quantity,
        })
    return outcomes
