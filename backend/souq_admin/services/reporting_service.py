# Overview: Dashboard and report figures reduced from store reads.

"""
Derived-metrics aggregator.

Read-only. Every figure is reduced in memory from full or date-windowed
table reads, which is fine at storefront scale and nothing more. All reads
go through SalesDataSource; a store that can aggregate server-side can
replace it without changing the report shapes.

Revenue never includes cancelled orders. Order counts include them unless a
figure says otherwise.
"""

from __future__ import annotations

from collections import Counter, OrderedDict
from datetime import datetime, timezone
from decimal import Decimal

from ..time_utils import local_midnight_utc, parse_iso_datetime, resolve_timezone, utcnow
from ..validation import ValidationError, parse_date_bound, to_money
from .query_builder import QuerySpec, Range, SortChoices, SortOption, Window

GROUPINGS = ("day", "week", "month")
TOP_PRODUCT_METRICS = ("sales", "revenue", "rating", "reviews")
UNCATEGORIZED = "Uncategorized"

PRODUCT_RANKINGS = SortChoices(
    {
        "rating": SortOption("average_rating", descending=True),
        "reviews": SortOption("review_count", descending=True),
    },
    default="reviews",
)

STOCK_FIELDS = ("id", "name", "sku", "stock_quantity", "low_stock_threshold", "images")


def _is_revenue(order: dict) -> bool:
    return order["status"] != "cancelled"


def _created(row: dict) -> datetime:
    return parse_iso_datetime(row["created_at"])


def period_key(dt: datetime, group_by: str, tz) -> str:
    local = dt.replace(tzinfo=timezone.utc).astimezone(tz)
    if group_by == "day":
        return local.strftime("%Y-%m-%d")
    if group_by == "week":
        year, week, _ = local.isocalendar()
        return f"{year}-W{week:02d}"
    return local.strftime("%Y-%m")


def _is_low_stock(product: dict) -> bool:
    return product["stock_quantity"] <= product["low_stock_threshold"]


class SalesDataSource:
    """Table reads for the aggregator, including the in-memory item/product joins."""

    def __init__(self, store):
        self.store = store

    def products(self) -> list[dict]:
        return self.store.select(QuerySpec(table="products", sort=SortOption("created_at")))

    def ranked_products(self, sort: SortOption, limit: int) -> list[dict]:
        return self.store.select(QuerySpec(table="products", sort=sort, window=Window(size=limit)))

    def products_at_or_below(self, threshold: int) -> list[dict]:
        return self.store.select(QuerySpec(
            table="products",
            ranges=(Range("stock_quantity", lte=threshold),),
            sort=SortOption("stock_quantity"),
        ))

    def categories(self) -> list[dict]:
        return self.store.select(QuerySpec(table="categories"))

    def orders(self, *, date_from: datetime | None = None, date_to: datetime | None = None) -> list[dict]:
        return self.store.select(QuerySpec(
            table="orders",
            ranges=(Range("created_at", gte=date_from, lte=date_to),),
            sort=SortOption("created_at"),
        ))

    def sold_items(self, *, date_from: datetime | None = None, date_to: datetime | None = None) -> list[dict]:
        """Order items belonging to non-cancelled orders in the window."""
        order_ids = [o["id"] for o in self.orders(date_from=date_from, date_to=date_to) if _is_revenue(o)]
        if not order_ids:
            return []
        return self.store.select(QuerySpec(
            table="order_items",
            any_of={"order_id": order_ids},
            sort=SortOption("created_at"),
        ))

    def count(self, table: str, **equals) -> int:
        return len(self.store.select(QuerySpec(table=table, equals=equals)))


class ReportingService:
    def __init__(self, source: SalesDataSource, *, timezone_name: str = "UTC"):
        self.source = source
        self.timezone_name = timezone_name

    def dashboard_stats(self, *, now: datetime | None = None) -> dict:
        products = self.source.products()
        orders = self.source.orders()
        midnight = local_midnight_utc(self.timezone_name, now=now or utcnow())
        today = [o for o in orders if _created(o) >= midnight]

        ratings = [Decimal(str(p["average_rating"] or 0)) for p in products]
        return {
            "total_products": len(products),
            "active_products": sum(1 for p in products if p["is_active"]),
            "low_stock_products": sum(1 for p in products if _is_low_stock(p)),
            "total_orders": len(orders),
            "pending_orders": sum(1 for o in orders if o["status"] == "pending"),
            "today_orders": len(today),
            "total_revenue": to_money(sum((to_money(o["total_amount"]) for o in orders if _is_revenue(o)), Decimal(0))),
            "today_revenue": to_money(sum((to_money(o["total_amount"]) for o in today if _is_revenue(o)), Decimal(0))),
            "average_rating": (sum(ratings) / len(ratings)).quantize(Decimal("0.01")) if ratings else Decimal("0.00"),
            "pending_reviews": self.source.count("product_reviews", is_approved=False),
            "total_customers": self.source.count("customers"),
        }

    def sales_report(self, *, date_from: str, date_to: str, group_by: str | None = None) -> dict:
        group_by = group_by or "day"
        if group_by not in GROUPINGS:
            raise ValidationError(f"group_by must be one of: {', '.join(GROUPINGS)}")
        start = parse_date_bound(date_from, "date_from")
        end = parse_date_bound(date_to, "date_to", end=True)
        if start is not None and end is not None and end < start:
            raise ValidationError("date_to must not be before date_from")

        orders = self.source.orders(date_from=start, date_to=end)
        tz = resolve_timezone(self.timezone_name)

        revenue = Decimal("0.00")
        revenue_orders = 0
        by_status = Counter()
        periods: OrderedDict[str, dict] = OrderedDict()
        for order in orders:
            by_status[order["status"]] += 1
            key = period_key(_created(order), group_by, tz)
            bucket = periods.setdefault(key, {"period": key, "orders": 0, "cancelled": 0, "revenue": Decimal("0.00")})
            if _is_revenue(order):
                amount = to_money(order["total_amount"])
                revenue += amount
                revenue_orders += 1
                bucket["orders"] += 1
                bucket["revenue"] += amount
            else:
                bucket["cancelled"] += 1

        return {
            "date_from": date_from,
            "date_to": date_to,
            "group_by": group_by,
            "total_orders": len(orders),
            "total_revenue": revenue,
            "average_order_value": to_money(revenue / revenue_orders) if revenue_orders else Decimal("0.00"),
            "orders_by_status": dict(by_status),
            "periods": list(periods.values()),
        }

    def top_products(self, *, sort_by: str | None = None, limit: int | None = None) -> list[dict]:
        sort_by = sort_by or "sales"
        limit = 10 if limit is None else limit
        if sort_by not in TOP_PRODUCT_METRICS:
            raise ValidationError(f"sort_by must be one of: {', '.join(TOP_PRODUCT_METRICS)}")
        if limit <= 0:
            raise ValidationError("limit must be > 0")

        fields = ("id", "name", "base_price", "stock_quantity", "average_rating", "review_count", "images")
        if sort_by in ("rating", "reviews"):
            rows = self.source.ranked_products(PRODUCT_RANKINGS.resolve(sort_by), limit)
            return [{k: r[k] for k in fields} for r in rows]

        units: Counter = Counter()
        revenue: dict[str, Decimal] = {}
        for item in self.source.sold_items():
            if item["product_id"] is None:
                continue
            units[item["product_id"]] += item["quantity"]
            revenue[item["product_id"]] = revenue.get(item["product_id"], Decimal("0.00")) + to_money(item["total_price"])

        ranked = []
        for product in self.source.products():
            if product["id"] not in units:
                continue
            entry = {k: product[k] for k in fields}
            entry["units_sold"] = units[product["id"]]
            entry["revenue"] = revenue[product["id"]]
            ranked.append(entry)

        metric = "units_sold" if sort_by == "sales" else "revenue"
        ranked.sort(key=lambda e: e[metric], reverse=True)
        return ranked[:limit]

    def low_stock_products(self, *, threshold: int | None = None) -> list[dict]:
        """
        threshold given: stock_quantity <= threshold, filtered by the store.
        Otherwise each product is compared to its own low_stock_threshold.
        """
        if threshold is not None:
            if threshold < 0:
                raise ValidationError("threshold must be >= 0")
            rows = self.source.products_at_or_below(threshold)
        else:
            rows = sorted(
                (p for p in self.source.products() if _is_low_stock(p)),
                key=lambda p: p["stock_quantity"],
            )
        return [{k: r[k] for k in STOCK_FIELDS} for r in rows]

    def revenue_by_category(self, *, date_from: str | None = None, date_to: str | None = None) -> list[dict]:
        start = parse_date_bound(date_from, "date_from")
        end = parse_date_bound(date_to, "date_to", end=True)

        category_names = {c["id"]: c["name"] for c in self.source.categories()}
        product_category = {p["id"]: p["category_id"] for p in self.source.products()}

        totals: OrderedDict[str, dict] = OrderedDict()
        for item in self.source.sold_items(date_from=start, date_to=end):
            category_id = product_category.get(item["product_id"])
            name = category_names.get(category_id, UNCATEGORIZED)
            bucket = totals.setdefault(name, {"category": name, "revenue": Decimal("0.00"), "units_sold": 0, "order_items": 0})
            bucket["revenue"] += to_money(item["total_price"])
            bucket["units_sold"] += item["quantity"]
            bucket["order_items"] += 1

        return sorted(totals.values(), key=lambda b: b["revenue"], reverse=True)

    def customer_insights(self, *, limit: int | None = None) -> list[dict]:
        """Customers keyed by lower-cased email, ranked by total spent; ties keep first-order order."""
        limit = 10 if limit is None else limit
        if limit <= 0:
            raise ValidationError("limit must be > 0")

        customers: OrderedDict[str, dict] = OrderedDict()
        for order in self.source.orders():
            if not _is_revenue(order):
                continue
            email = order["customer_email"].strip().lower()
            entry = customers.setdefault(email, {
                "customer_email": email,
                "customer_name": order["customer_name"],
                "order_count": 0,
                "total_spent": Decimal("0.00"),
                "last_order_at": None,
            })
            entry["order_count"] += 1
            entry["total_spent"] += to_money(order["total_amount"])
            entry["customer_name"] = order["customer_name"]
            entry["last_order_at"] = order["created_at"]

        ranked = sorted(customers.values(), key=lambda e: e["total_spent"], reverse=True)[:limit]
        for entry in ranked:
            entry["average_order_value"] = to_money(entry["total_spent"] / entry["order_count"])
        return ranked

    def inventory_report(self) -> dict:
        products = self.source.products()
        out_of_stock, low_stock, healthy = [], [], []
        total_value = Decimal("0.00")
        total_units = 0
        for product in products:
            stock = product["stock_quantity"]
            total_units += stock
            total_value += to_money(product["base_price"]) * stock
            if stock == 0:
                out_of_stock.append(product)
            elif stock <= product["low_stock_threshold"]:
                low_stock.append(product)
            else:
                healthy.append(product)

        def _brief(rows):
            return [{k: r[k] for k in STOCK_FIELDS if k != "images"} for r in rows]

        return {
            "total_products": len(products),
            "total_units": total_units,
            "total_value": to_money(total_value),
            "out_of_stock_count": len(out_of_stock),
            "low_stock_count": len(low_stock),
            "healthy_count": len(healthy),
            "out_of_stock": _brief(out_of_stock),
            "low_stock": _brief(low_stock),
        }
