# Overview: Products and categories: listing, CRUD, bulk edits and stock commands.

from __future__ import annotations

import logging
import re

from ..time_utils import utcnow
from ..validation import (
    NotFoundError,
    StoreError,
    ValidationError,
    enforce_rules_product,
    to_money,
)
from .query_builder import (
    Include,
    QuerySpec,
    Range,
    Search,
    SortChoices,
    SortOption,
    Window,
)
from .records import clean_update, create_record, delete_record, update_record
from .stock_service import adjust_stock

logger = logging.getLogger(__name__)

PRODUCT_SORTS = SortChoices(
    {
        "newest": SortOption("created_at", descending=True),
        "oldest": SortOption("created_at"),
        "price_asc": SortOption("base_price"),
        "price_desc": SortOption("base_price", descending=True),
        "name": SortOption("name"),
        "stock_asc": SortOption("stock_quantity"),
    },
    default="newest",
)

CATEGORY_INCLUDE = Include("category", ("name", "slug"))


def _price(value):
    return None if value is None else to_money(value)


def slugify(name: str) -> str:
    """Lowercase, whitespace runs -> '-', drop anything outside [a-z0-9-]."""
    slug = re.sub(r"\s+", "-", name.strip().lower())
    return re.sub(r"[^a-z0-9-]", "", slug)


class CatalogService:
    def __init__(self, store, *, page_size: int = 50):
        self.store = store
        self.page_size = page_size

    # Products

    def list_products(
        self,
        *,
        category_id: str | None = None,
        is_active: bool | None = None,
        is_featured: bool | None = None,
        search: str | None = None,
        min_price=None,
        max_price=None,
        sort: str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[dict]:
        spec = QuerySpec(
            table="products",
            equals={"category_id": category_id, "is_active": is_active, "is_featured": is_featured},
            search=Search(search, ("name", "description")) if search else None,
            ranges=(Range("base_price", gte=_price(min_price), lte=_price(max_price)),),
            sort=PRODUCT_SORTS.resolve(sort),
            window=Window.from_args(limit, offset, default_size=self.page_size),
            include=CATEGORY_INCLUDE,
        )
        return self.store.select(spec)

    def get_product(self, *, id: str | None = None, slug: str | None = None) -> dict:
        if id:
            equals = {"id": id}
        elif slug:
            equals = {"slug": slug}
        else:
            raise ValidationError("Either id or slug is required")
        rows = self.store.select(QuerySpec(
            table="products", equals=equals, window=Window(size=1), include=CATEGORY_INCLUDE,
        ))
        if not rows:
            key, value = next(iter(equals.items()))
            raise NotFoundError(f"No products record matches {key}={value}")
        return rows[0]

    def create_product(self, fields: dict) -> dict:
        payload = dict(fields)
        if not payload.get("slug"):
            payload["slug"] = slugify(payload.get("name") or "")
        return create_record(self.store, "products", payload, rules=enforce_rules_product)

    def update_product(self, product_id: str, fields: dict) -> dict:
        return update_record(self.store, "products", product_id, fields, rules=enforce_rules_product)

    def bulk_update_products(self, updates: list) -> list[dict]:
        """
        Apply each {"id": ..., <fields>} patch on its own.

        Every entry is validated up front; a store failure on one product is
        reported in its entry and the remaining patches still run.
        """
        if not isinstance(updates, list) or not updates:
            raise ValidationError("updates must be a non-empty list")

        prepared = []
        for index, entry in enumerate(updates, start=1):
            if not isinstance(entry, dict) or not entry.get("id"):
                raise ValidationError(f"Update {index} must be an object with an id")
            fields = {k: v for k, v in entry.items() if k != "id"}
            try:
                patch = clean_update("products", fields, rules=enforce_rules_product)
            except ValidationError as exc:
                raise ValidationError(f"Update {index}: {exc}")
            prepared.append((entry["id"], patch))

        results = []
        for product_id, patch in prepared:
            try:
                rows = self.store.update("products", patch, equals={"id": product_id})
            except StoreError as exc:
                results.append({"id": product_id, "status": "failed", "error": str(exc)})
                continue
            if not rows:
                results.append({"id": product_id, "status": "failed", "error": "Product not found"})
            else:
                results.append({"id": product_id, "status": "updated"})
        return results

    def delete_product(self, product_id: str) -> None:
        delete_record(self.store, "products", product_id)

    def update_stock(self, product_id: str, stock_quantity: int) -> dict:
        if stock_quantity < 0:
            raise ValidationError("stock_quantity must be >= 0")
        rows = self.store.update(
            "products",
            {"stock_quantity": stock_quantity, "updated_at": utcnow()},
            equals={"id": product_id},
        )
        if not rows:
            raise NotFoundError(f"No products record matches id={product_id}")
        product = rows[0]
        return {"id": product["id"], "name": product["name"], "stock_quantity": product["stock_quantity"]}

    def adjust_stock(self, product_id: str, delta: int) -> dict:
        if delta == 0:
            raise ValidationError("delta must not be 0")
        new_quantity = adjust_stock(self.store, product_id, delta)
        logger.info("Adjusted stock of product %s by %s to %s", product_id, delta, new_quantity)
        return {"id": product_id, "delta": delta, "stock_quantity": new_quantity}

    # Categories

    def list_categories(self, *, parent_id: str | None = None) -> list[dict]:
        return self.store.select(QuerySpec(
            table="categories",
            equals={"parent_id": parent_id},
            sort=SortOption("sort_order"),
        ))

    def create_category(self, fields: dict) -> dict:
        payload = dict(fields)
        if not payload.get("slug"):
            payload["slug"] = slugify(payload.get("name") or "")
        return create_record(self.store, "categories", payload)

    def update_category(self, category_id: str, fields: dict) -> dict:
        if fields.get("parent_id") == category_id:
            raise ValidationError("A category cannot be its own parent")
        return update_record(self.store, "categories", category_id, fields)

    def delete_category(self, category_id: str) -> None:
        delete_record(self.store, "categories", category_id)
