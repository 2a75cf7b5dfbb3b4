# Overview: Customer listing and lookup with recent order history.

from __future__ import annotations

from ..validation import ValidationError
from .query_builder import QuerySpec, Search, SortOption, Window

RECENT_ORDER_LIMIT = 10
RECENT_ORDER_FIELDS = ("id", "order_number", "total_amount", "status", "created_at")


class CustomerService:
    def __init__(self, store, *, page_size: int = 50):
        self.store = store
        self.page_size = page_size

    def list_customers(self, *, search: str | None = None, limit: int | None = None, offset: int | None = None) -> list[dict]:
        return self.store.select(QuerySpec(
            table="customers",
            search=Search(search, ("email", "first_name", "last_name")) if search else None,
            sort=SortOption("created_at", descending=True),
            window=Window.from_args(limit, offset, default_size=self.page_size),
        ))

    def get_customer(self, *, id: str | None = None, email: str | None = None) -> dict:
        if id:
            customer = self.store.fetch_one("customers", id=id)
        elif email:
            customer = self.store.fetch_one("customers", email=email)
        else:
            raise ValidationError("Either id or email is required")

        orders = self.store.select(QuerySpec(
            table="orders",
            equals={"customer_id": customer["id"]},
            sort=SortOption("created_at", descending=True),
            window=Window(size=RECENT_ORDER_LIMIT),
        ))
        customer["recent_orders"] = [{k: o[k] for k in RECENT_ORDER_FIELDS} for o in orders]
        return customer
