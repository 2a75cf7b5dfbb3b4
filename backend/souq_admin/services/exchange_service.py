# Overview: CSV export and row-by-row CSV import of catalog and customer data.

from __future__ import annotations

import csv
import io
import logging
from collections import Counter

from ..validation import StoreError, ValidationError, enforce_rules_product
from .catalog_service import slugify
from .query_builder import Include, QuerySpec, SortOption
from .records import create_record

logger = logging.getLogger(__name__)

EXPORT_ENTITIES = ("products", "orders", "customers", "reviews")
IMPORT_ENTITIES = ("products", "customers")

EXPORT_COLUMNS = {
    "products": [
        "name", "description", "slug", "category", "base_price", "compare_at_price",
        "stock_quantity", "is_featured", "image_url",
    ],
    "orders": [
        "order_number", "customer_email", "total_amount", "status", "payment_status",
        "created_at", "items_count",
    ],
    "customers": ["email", "first_name", "last_name", "phone", "created_at"],
    "reviews": ["product", "customer_email", "rating", "comment", "is_approved", "created_at"],
}


def _blank_to_none(value):
    if value is None:
        return None
    value = value.strip()
    return value or None


def _csv_bool(value) -> bool:
    return (value or "").strip().lower() in {"1", "true", "yes", "on"}


class ExchangeService:
    def __init__(self, store):
        self.store = store

    # Export

    def export_csv(self, entity: str) -> str:
        if entity not in EXPORT_ENTITIES:
            raise ValidationError(f"entity must be one of: {', '.join(EXPORT_ENTITIES)}")
        rows = getattr(self, f"_export_{entity}")()

        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=EXPORT_COLUMNS[entity], lineterminator="\n")
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
        return buf.getvalue()

    def _export_products(self) -> list[dict]:
        products = self.store.select(QuerySpec(
            table="products",
            sort=SortOption("created_at"),
            include=Include("category", ("name",)),
        ))
        return [
            {
                "name": p["name"],
                "description": p["description"] or "",
                "slug": p["slug"],
                "category": (p["category"] or {}).get("name") or "",
                "base_price": p["base_price"],
                "compare_at_price": "" if p["compare_at_price"] is None else p["compare_at_price"],
                "stock_quantity": p["stock_quantity"],
                "is_featured": "true" if p["is_featured"] else "false",
                "image_url": p["images"][0] if p["images"] else "",
            }
            for p in products
        ]

    def _export_orders(self) -> list[dict]:
        orders = self.store.select(QuerySpec(table="orders", sort=SortOption("created_at")))
        item_counts = Counter(i["order_id"] for i in self.store.select(QuerySpec(table="order_items")))
        return [
            {
                "order_number": o["order_number"],
                "customer_email": o["customer_email"],
                "total_amount": o["total_amount"],
                "status": o["status"],
                "payment_status": o["payment_status"],
                "created_at": o["created_at"],
                "items_count": item_counts.get(o["id"], 0),
            }
            for o in orders
        ]

    def _export_customers(self) -> list[dict]:
        customers = self.store.select(QuerySpec(table="customers", sort=SortOption("created_at")))
        return [
            {
                "email": c["email"],
                "first_name": c["first_name"] or "",
                "last_name": c["last_name"] or "",
                "phone": c["phone"] or "",
                "created_at": c["created_at"],
            }
            for c in customers
        ]

    def _export_reviews(self) -> list[dict]:
        reviews = self.store.select(QuerySpec(
            table="product_reviews",
            sort=SortOption("created_at"),
            include=Include("product", ("name",)),
        ))
        return [
            {
                "product": (r["product"] or {}).get("name") or "",
                "customer_email": r["customer_email"] or "",
                "rating": r["rating"],
                "comment": r["comment"] or "",
                "is_approved": "true" if r["is_approved"] else "false",
                "created_at": r["created_at"],
            }
            for r in reviews
        ]

    # Import

    def import_csv(self, entity: str, text: str) -> dict:
        """
        Insert one record per CSV row. Each row commits on its own; a bad row
        is reported as "Row n: <message>" and the rest still go in.
        """
        if entity not in IMPORT_ENTITIES:
            raise ValidationError(f"entity must be one of: {', '.join(IMPORT_ENTITIES)}")
        if not text or not text.strip():
            raise ValidationError("csv cannot be blank")

        reader = csv.DictReader(io.StringIO(text.strip()))
        if not reader.fieldnames:
            raise ValidationError("csv has no header row")
        to_payload = getattr(self, f"_{entity}_payload")

        result = {"success": 0, "failed": 0, "errors": []}
        for number, row in enumerate(reader, start=1):
            try:
                payload = to_payload(row)
                if entity == "products":
                    create_record(self.store, "products", payload, rules=enforce_rules_product)
                else:
                    create_record(self.store, "customers", payload)
            except (ValidationError, StoreError) as exc:
                result["failed"] += 1
                result["errors"].append(f"Row {number}: {exc}")
                continue
            result["success"] += 1

        logger.info("Imported %s: %d ok, %d failed", entity, result["success"], result["failed"])
        return result

    def _products_payload(self, row: dict) -> dict:
        name = _blank_to_none(row.get("name")) or ""
        image_url = _blank_to_none(row.get("image_url"))
        return {
            "name": name,
            "description": _blank_to_none(row.get("description")),
            "slug": _blank_to_none(row.get("slug")) or slugify(name),
            "category_id": _blank_to_none(row.get("category_id")),
            "base_price": _blank_to_none(row.get("base_price")) or "0",
            "compare_at_price": _blank_to_none(row.get("compare_at_price")),
            "stock_quantity": _blank_to_none(row.get("stock_quantity")) or 0,
            "is_featured": _csv_bool(row.get("is_featured")),
            "images": [image_url] if image_url else [],
        }

    def _customers_payload(self, row: dict) -> dict:
        return {
            "email": (_blank_to_none(row.get("email")) or "").lower(),
            "first_name": _blank_to_none(row.get("first_name")),
            "last_name": _blank_to_none(row.get("last_name")),
            "phone": _blank_to_none(row.get("phone")),
        }
