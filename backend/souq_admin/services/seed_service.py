# Overview: Idempotent seeding of reference catalog data keyed by slug/code.

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..validation import enforce_rules_product
from .records import clean_create

logger = logging.getLogger(__name__)


SEED_CATEGORIES = [
    {"name": "Electronics", "slug": "electronics", "description": "Phones, audio and accessories", "sort_order": 1},
    {"name": "Fashion", "slug": "fashion", "description": "Clothing, shoes and jewelry", "sort_order": 2},
    {"name": "Home & Garden", "slug": "home-garden", "description": "Furniture, decor and tools", "sort_order": 3},
    {"name": "Books", "slug": "books", "description": "Second-hand and new books", "sort_order": 4},
]

SEED_PRODUCTS = [
    {
        "name": "Wireless Earbuds", "slug": "wireless-earbuds", "category": "electronics",
        "description": "Bluetooth earbuds with charging case", "base_price": "49.99",
        "compare_at_price": "69.99", "sku": "EL-EARBUDS-01", "stock_quantity": 40, "is_featured": True,
    },
    {
        "name": "USB-C Charger", "slug": "usb-c-charger", "category": "electronics",
        "description": "65W fast charger", "base_price": "24.00",
        "sku": "EL-CHARGER-65", "stock_quantity": 75,
    },
    {
        "name": "Silver Ring", "slug": "silver-ring", "category": "fashion",
        "description": "Sterling silver band ring", "base_price": "35.00",
        "sku": "FA-RING-SLV", "stock_quantity": 12, "is_featured": True,
    },
    {
        "name": "Denim Jacket", "slug": "denim-jacket", "category": "fashion",
        "description": "Classic pre-loved denim jacket", "base_price": "55.00",
        "compare_at_price": "80.00", "sku": "FA-JACKET-DNM", "stock_quantity": 8,
    },
    {
        "name": "Ceramic Plant Pot", "slug": "ceramic-plant-pot", "category": "home-garden",
        "description": "Glazed pot with drainage tray", "base_price": "18.50",
        "sku": "HG-POT-CER", "stock_quantity": 30,
    },
    {
        "name": "Paperback Classics Bundle", "slug": "paperback-classics-bundle", "category": "books",
        "description": "Five classic novels", "base_price": "22.00",
        "sku": "BK-CLASSICS-5", "stock_quantity": 5,
    },
]

SEED_CURRENCIES = [
    {"code": "USD", "name": "US Dollar", "symbol": "$", "exchange_rate": "1", "is_default": True},
    {"code": "EUR", "name": "Euro", "symbol": "€", "exchange_rate": "0.92"},
    {"code": "GBP", "name": "British Pound", "symbol": "£", "exchange_rate": "0.79"},
    {"code": "SAR", "name": "Saudi Riyal", "symbol": "﷼", "exchange_rate": "3.75"},
]

SEED_PAGES = [
    {"slug": "about-us", "title": "About Us", "content": "We give quality pre-loved goods a second home."},
    {"slug": "privacy-policy", "title": "Privacy Policy", "content": "We only keep the data needed to fulfil your orders."},
    {"slug": "terms-of-service", "title": "Terms of Service", "content": "Orders are subject to availability."},
    {"slug": "shipping-returns", "title": "Shipping & Returns", "content": "Items ship within 3 business days."},
]


@dataclass
class SeedReport:
    entries: list[str] = field(default_factory=list)
    created: int = 0
    existing: int = 0

    def record(self, kind: str, key: str, created: bool) -> None:
        if created:
            self.created += 1
        else:
            self.existing += 1
        self.entries.append(f"{kind} {key}: {'created' if created else 'already exists'}")

    def to_dict(self) -> dict:
        return {"created": self.created, "already_existing": self.existing, "report": self.entries}


class SeedService:
    """
    Insert-if-absent by natural key (category/product/page slug, currency
    code). Existing rows are never modified, so running it again reports
    every entry as already existing.
    """

    def __init__(self, store):
        self.store = store

    def _ensure(self, report: SeedReport, table: str, kind: str, key_field: str, values: dict) -> dict:
        key = values[key_field]
        existing = self.store.find_one(table, **{key_field: key})
        if existing is not None:
            report.record(kind, key, created=False)
            return existing
        rules = enforce_rules_product if table == "products" else None
        row = self.store.insert(table, clean_create(table, values, rules=rules))
        report.record(kind, key, created=True)
        return row

    def seed(self) -> dict:
        report = SeedReport()

        categories = {}
        for values in SEED_CATEGORIES:
            categories[values["slug"]] = self._ensure(report, "categories", "category", "slug", dict(values))

        for values in SEED_PRODUCTS:
            payload = {k: v for k, v in values.items() if k != "category"}
            category = categories.get(values["category"])
            payload["category_id"] = category["id"] if category else None
            self._ensure(report, "products", "product", "slug", payload)

        has_default = self.store.find_one("currencies", is_default=True) is not None
        for values in SEED_CURRENCIES:
            payload = dict(values)
            if payload.get("is_default") and has_default:
                payload["is_default"] = False
            row = self._ensure(report, "currencies", "currency", "code", payload)
            has_default = has_default or bool(row["is_default"])

        for values in SEED_PAGES:
            self._ensure(report, "pages", "page", "slug", dict(values))

        logger.info("Seed finished: %d created, %d already existed", report.created, report.existing)
        return report.to_dict()
