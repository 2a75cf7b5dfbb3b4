# Overview: Order lifecycle: creation, cancellation, status/payment transitions and notes.

"""
Order lifecycle engine.

States: pending -> processing -> shipped -> delivered, with cancelled
reachable from any non-terminal state. delivered and cancelled are terminal:
no command moves an order out of them. Between the non-terminal states no
ordering is enforced, and payment_status is only checked against its domain;
callers own the workflow discipline.

Every store write commits on its own, so creation and cancellation are
sequences of durable steps:

    create_order:  validate -> read products -> insert order -> insert items
                   -> adjust stock per item
    cancel_order:  read order -> mark cancelled (+ note) -> restore stock per item

A failure before the order insert writes nothing. A failure while adjusting
stock for one item is reported in the result and never undoes the order or
the other items.
"""

from __future__ import annotations

import logging
import threading
import time
from decimal import Decimal

from ..models import ORDER_STATUSES, PAYMENT_STATUSES
from ..time_utils import to_utc_z, utcnow
from ..validation import (
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
    parse_date_bound,
    to_money,
)
from .query_builder import QuerySpec, Range, Search, SortOption, Window
from .stock_service import apply_stock_deltas

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({"delivered", "cancelled"})
ORDER_NUMBER_PREFIX = "ORD-"

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


class OrderNumberGenerator:
    """
    ORD- + base-36 microsecond clock.

    The clock reading is forced strictly upward under a lock, so two calls in
    the same process never produce the same number even within one
    microsecond or across a backwards clock step.
    """

    def __init__(self, clock=time.time_ns, prefix: str = ORDER_NUMBER_PREFIX):
        self._clock = clock
        self._prefix = prefix
        self._lock = threading.Lock()
        self._last = 0

    def next(self) -> str:
        with self._lock:
            micros = self._clock() // 1000
            if micros <= self._last:
                micros = self._last + 1
            self._last = micros
        return f"{self._prefix}{_base36(micros)}"


def append_note(existing: str | None, text: str, *, now=None) -> str:
    """Append "[ts] text" after a blank line; prior content is kept verbatim."""
    entry = f"[{to_utc_z(now or utcnow())}] {text}"
    if existing:
        return f"{existing}\n\n{entry}"
    return entry


def _validate_items(items) -> list[tuple[str, int]]:
    if not isinstance(items, list) or not items:
        raise ValidationError("items must be a non-empty list")

    lines = []
    for index, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            raise ValidationError(f"Item {index} must be an object with product_id and quantity")
        unknown = set(item) - {"product_id", "quantity"}
        if unknown:
            raise ValidationError(f"Item {index} has unknown field: {sorted(unknown)[0]}")

        product_id = item.get("product_id")
        quantity = item.get("quantity")
        if not isinstance(product_id, str) or not product_id.strip():
            raise ValidationError(f"Item {index}: product_id is required")
        if isinstance(quantity, float) and quantity.is_integer():
            quantity = int(quantity)
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise ValidationError(f"Item {index}: quantity must be a positive integer")
        lines.append((product_id.strip(), quantity))
    return lines


class OrderService:
    def __init__(self, store, *, numbers: OrderNumberGenerator | None = None, page_size: int = 50):
        self.store = store
        self.numbers = numbers or OrderNumberGenerator()
        self.page_size = page_size

    # Reads

    def list_orders(
        self,
        *,
        status: str | None = None,
        payment_status: str | None = None,
        customer_email: str | None = None,
        date_from: str | None = None,
        date_to: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict]:
        spec = QuerySpec(
            table="orders",
            equals={"status": status, "payment_status": payment_status},
            search=Search(customer_email, ("customer_email",)) if customer_email else None,
            ranges=(
                Range(
                    "created_at",
                    gte=parse_date_bound(date_from, "date_from"),
                    lte=parse_date_bound(date_to, "date_to", end=True),
                ),
            ),
            sort=SortOption("created_at", descending=True),
            window=Window.from_args(limit, offset, default_size=self.page_size),
        )
        return self.store.select(spec)

    def get_order(self, *, id: str | None = None, order_number: str | None = None) -> dict:
        if id:
            order = self.store.fetch_one("orders", id=id)
        elif order_number:
            order = self.store.fetch_one("orders", order_number=order_number)
        else:
            raise ValidationError("Either id or order_number is required")
        order["items"] = self._items(order["id"])
        return order

    def _items(self, order_id: str) -> list[dict]:
        return self.store.select(QuerySpec(
            table="order_items",
            equals={"order_id": order_id},
            sort=SortOption("created_at"),
        ))

    # Creation

    def create_order(
        self,
        *,
        customer_email: str,
        customer_name: str,
        items: list,
        shipping_address: dict | None = None,
        payment_method: str | None = None,
        notes: str | None = None,
    ) -> dict:
        customer_email = (customer_email or "").strip()
        customer_name = (customer_name or "").strip()
        if not customer_email:
            raise ValidationError("customer_email cannot be blank")
        if not customer_name:
            raise ValidationError("customer_name cannot be blank")
        lines = _validate_items(items)

        # One batched read; an unresolved id aborts before anything is written
        wanted = sorted({product_id for product_id, _ in lines})
        products = self.store.select(QuerySpec(table="products", any_of={"id": wanted}))
        if not products:
            raise NotFoundError("No products found for the requested items")
        by_id = {p["id"]: p for p in products}
        missing = [pid for pid in wanted if pid not in by_id]
        if missing:
            raise NotFoundError(f"Products not found: {', '.join(missing)}")

        item_rows = []
        subtotal = Decimal("0.00")
        for product_id, quantity in lines:
            product = by_id[product_id]
            unit_price = to_money(product["base_price"])
            line_total = to_money(unit_price * quantity)
            subtotal += line_total
            item_rows.append({
                "product_id": product_id,
                "product_name": product["name"],
                "product_sku": product.get("sku"),
                "quantity": quantity,
                "unit_price": unit_price,
                "total_price": line_total,
            })

        customer = self.store.find_one("customers", email=customer_email)
        now = utcnow()
        order = self.store.insert("orders", {
            "order_number": self.numbers.next(),
            "customer_id": customer["id"] if customer else None,
            "customer_email": customer_email,
            "customer_name": customer_name,
            "status": "pending",
            "payment_status": "pending",
            "payment_method": payment_method,
            "subtotal": subtotal,
            "total_amount": subtotal,
            "shipping_address": shipping_address,
            "notes": append_note(None, notes.strip(), now=now) if notes and notes.strip() else None,
            "created_at": now,
            "updated_at": now,
        })

        for row in item_rows:
            row["order_id"] = order["id"]
        try:
            order["items"] = self.store.insert_many("order_items", item_rows)
        except StoreError:
            logger.error("Order %s was created but its items could not be stored", order["order_number"])
            raise

        order["stock_adjustments"] = apply_stock_deltas(
            self.store, [(product_id, -quantity) for product_id, quantity in lines]
        )
        logger.info(
            "Created order %s (%d items, total %s)",
            order["order_number"], len(item_rows), subtotal,
        )
        return order

    # Transitions

    def _fetch_open(self, order_id: str, action: str) -> dict:
        order = self.store.fetch_one("orders", id=order_id)
        if order["status"] in TERMINAL_STATUSES:
            raise ConflictError(
                f"Cannot {action} order {order['order_number']}: it is already {order['status']}"
            )
        return order

    def cancel_order(self, *, id: str, restore_stock: bool = True, reason: str | None = None) -> dict:
        """
        Mark the order cancelled, then put item quantities back in stock.

        The status change is written first, so a retried cancellation is
        refused instead of restoring the same stock twice. Restoration
        failures are reported per item in stock_restorations.
        """
        order = self._fetch_open(id, "cancel")

        text = "Order cancelled"
        if reason and reason.strip():
            text = f"{text}: {reason.strip()}"
        now = utcnow()
        updated = self._update_one(id, {
            "status": "cancelled",
            "notes": append_note(order["notes"], text, now=now),
            "updated_at": now,
        })

        restorations = []
        if restore_stock:
            deltas = []
            for item in self._items(id):
                if item["product_id"] is None:
                    restorations.append({
                        "product_id": None,
                        "delta": item["quantity"],
                        "status": "skipped",
                        "error": f"{item['product_name']} no longer references a product",
                    })
                    continue
                deltas.append((item["product_id"], item["quantity"]))
            restorations.extend(apply_stock_deltas(self.store, deltas))

        updated["stock_restorations"] = restorations
        logger.info("Cancelled order %s (restore_stock=%s)", updated["order_number"], restore_stock)
        return updated

    def update_status(self, *, id: str, status: str) -> dict:
        if status not in ORDER_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(ORDER_STATUSES)}")
        order = self.store.fetch_one("orders", id=id)
        if order["status"] in TERMINAL_STATUSES and status != order["status"]:
            raise ConflictError(
                f"Cannot change status of order {order['order_number']}: it is already {order['status']}"
            )
        return self._update_one(id, {"status": status, "updated_at": utcnow()})

    def update_payment_status(self, *, id: str, payment_status: str) -> dict:
        if payment_status not in PAYMENT_STATUSES:
            raise ValidationError(f"payment_status must be one of: {', '.join(PAYMENT_STATUSES)}")
        return self._update_one(id, {"payment_status": payment_status, "updated_at": utcnow()})

    def add_note(self, *, id: str, note: str) -> dict:
        """
        Read-modify-write of the notes column. Two notes added to the same
        order at the same moment can overwrite each other.
        """
        if not note or not note.strip():
            raise ValidationError("note cannot be blank")
        order = self.store.fetch_one("orders", id=id)
        return self._update_one(id, {
            "notes": append_note(order["notes"], note.strip()),
            "updated_at": utcnow(),
        })

    def _update_one(self, order_id: str, values: dict) -> dict:
        rows = self.store.update("orders", values, equals={"id": order_id})
        if not rows:
            raise NotFoundError(f"No orders record matches id={order_id}")
        return rows[0]
