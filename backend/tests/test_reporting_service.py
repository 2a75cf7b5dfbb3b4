"""
Report tests: revenue never counts cancelled orders, "today" follows the
store timezone, period grouping and the in-memory product/category joins.
"""

from decimal import Decimal
from itertools import count

import pytest

from souq_admin.models import Order, OrderItem
from souq_admin.services.reporting_service import (
    ReportingService,
    SalesDataSource,
    period_key,
)
from souq_admin.time_utils import resolve_timezone
from souq_admin.validation import ValidationError
from conftest import at, payload_of


@pytest.fixture
def reports(store):
    return ReportingService(SalesDataSource(store), timezone_name="UTC")


@pytest.fixture
def make_order(db_session):
    numbers = count(1)

    def _make(created, total, *, status="pending", email="layla@example.com", name="Layla", lines=()):
        order = Order(
            order_number=f"ORD-T{next(numbers)}",
            customer_email=email,
            customer_name=name,
            status=status,
            subtotal=Decimal(total),
            total_amount=Decimal(total),
            created_at=at(created),
            updated_at=at(created),
        )
        db_session.add(order)
        db_session.flush()
        for product, quantity in lines:
            db_session.add(OrderItem(
                order_id=order.id,
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                unit_price=product.base_price,
                total_price=product.base_price * quantity,
                created_at=at(created),
            ))
        db_session.commit()
        return order

    return _make


class TestDashboard:
    def test_revenue_excludes_cancelled_and_today_uses_midnight(self, reports, make_order, make_product):
        make_product(name="Plenty", stock=50)
        make_product(name="Scarce", stock=2)
        make_order("2026-03-09T20:00:00", "50.00", status="delivered")
        make_order("2026-03-10T08:00:00", "30.00")
        make_order("2026-03-10T09:00:00", "100.00", status="cancelled")

        stats = reports.dashboard_stats(now=at("2026-03-10T12:00:00"))

        assert stats["total_orders"] == 3
        assert stats["pending_orders"] == 1
        assert stats["today_orders"] == 2
        assert stats["total_revenue"] == Decimal("80.00")
        assert stats["today_revenue"] == Decimal("30.00")
        assert stats["total_products"] == 2
        assert stats["low_stock_products"] == 1
        assert stats["total_customers"] == 0

    def test_today_follows_store_timezone(self, store, make_order):
        # 22:30 UTC on the 9th is already the 10th in Riyadh (UTC+3)
        make_order("2026-03-09T22:30:00", "10.00")
        riyadh = ReportingService(SalesDataSource(store), timezone_name="Asia/Riyadh")
        utc = ReportingService(SalesDataSource(store), timezone_name="UTC")

        now = at("2026-03-10T06:00:00")
        assert riyadh.dashboard_stats(now=now)["today_orders"] == 1
        assert utc.dashboard_stats(now=now)["today_orders"] == 0

    def test_empty_store(self, reports, db_session):
        stats = reports.dashboard_stats(now=at("2026-03-10T12:00:00"))
        assert stats["total_revenue"] == Decimal("0.00")
        assert stats["average_rating"] == Decimal("0.00")


class TestSalesReport:
    def test_date_only_upper_bound_covers_the_day(self, reports, make_order):
        make_order("2026-03-01T10:00:00", "10.00")
        make_order("2026-03-02T23:59:00", "20.00")
        make_order("2026-03-03T00:00:01", "40.00")

        report = reports.sales_report(date_from="2026-03-01", date_to="2026-03-02")

        assert report["total_orders"] == 2
        assert report["total_revenue"] == Decimal("30.00")
        assert report["average_order_value"] == Decimal("15.00")

    def test_cancelled_counted_but_not_revenue(self, reports, make_order):
        make_order("2026-03-01T10:00:00", "10.00", status="delivered")
        make_order("2026-03-01T11:00:00", "90.00", status="cancelled")

        report = reports.sales_report(date_from="2026-03-01", date_to="2026-03-01")

        assert report["total_orders"] == 2
        assert report["total_revenue"] == Decimal("10.00")
        assert report["orders_by_status"] == {"delivered": 1, "cancelled": 1}
        assert report["periods"] == [
            {"period": "2026-03-01", "orders": 1, "cancelled": 1, "revenue": Decimal("10.00")},
        ]

    def test_group_by_month(self, reports, make_order):
        make_order("2026-01-15T10:00:00", "10.00")
        make_order("2026-02-03T10:00:00", "20.00")
        make_order("2026-02-20T10:00:00", "5.00")

        report = reports.sales_report(date_from="2026-01-01", date_to="2026-02-28", group_by="month")

        assert [(p["period"], p["revenue"]) for p in report["periods"]] == [
            ("2026-01", Decimal("10.00")),
            ("2026-02", Decimal("25.00")),
        ]

    def test_bounds_must_be_ordered(self, reports):
        with pytest.raises(ValidationError, match="date_to must not be before date_from"):
            reports.sales_report(date_from="2026-03-05", date_to="2026-03-01")

    def test_unparseable_bound(self, reports):
        with pytest.raises(ValidationError, match="date_from must be an ISO-8601"):
            reports.sales_report(date_from="last week", date_to="2026-03-01")


@pytest.mark.parametrize("group_by, expected", [
    ("day", "2026-03-02"),
    ("week", "2026-W10"),
    ("month", "2026-03"),
])
def test_period_keys(group_by, expected):
    assert period_key(at("2026-03-02T12:00:00"), group_by, resolve_timezone("UTC")) == expected


class TestTopProducts:
    def test_by_sales_and_revenue(self, reports, make_order, make_product):
        mug = make_product(name="Mug", price="5.00", stock=100)
        lamp = make_product(name="Lamp", price="40.00", stock=100)
        make_product(name="Unsold")
        make_order("2026-03-01T10:00:00", "55.00", lines=[(mug, 3), (lamp, 1)])
        make_order("2026-03-02T10:00:00", "10.00", lines=[(mug, 2)])
        make_order("2026-03-03T10:00:00", "400.00", status="cancelled", lines=[(lamp, 10)])

        by_sales = reports.top_products(sort_by="sales")
        by_revenue = reports.top_products(sort_by="revenue", limit=1)

        assert [(p["name"], p["units_sold"]) for p in by_sales] == [("Mug", 5), ("Lamp", 1)]
        assert [(p["name"], p["revenue"]) for p in by_revenue] == [("Lamp", Decimal("40.00"))]

    def test_by_reviews_uses_store_order(self, reports, make_product):
        make_product(name="Quiet", review_count=1)
        make_product(name="Popular", review_count=9)

        rows = reports.top_products(sort_by="reviews", limit=1)
        assert [r["name"] for r in rows] == ["Popular"]


class TestLowStock:
    def test_own_threshold(self, reports, make_product):
        make_product(name="Fine", stock=20, low_stock_threshold=5)
        make_product(name="Low", stock=4, low_stock_threshold=5)
        make_product(name="Out", stock=0, low_stock_threshold=5)

        assert [p["name"] for p in reports.low_stock_products()] == ["Out", "Low"]

    def test_explicit_threshold(self, reports, make_product):
        make_product(name="Fine", stock=20)
        make_product(name="Low", stock=4)

        assert [p["name"] for p in reports.low_stock_products(threshold=10)] == ["Low"]


def test_revenue_by_category_falls_back_to_uncategorized(reports, make_order, make_product, make_category):
    jewelry = make_category("Jewelry")
    ring = make_product(name="Ring", price="30.00", category_id=jewelry.id)
    loose = make_product(name="Loose", price="5.00")
    make_order("2026-03-01T10:00:00", "65.00", lines=[(ring, 2), (loose, 1)])

    rows = reports.revenue_by_category()

    assert rows == [
        {"category": "Jewelry", "revenue": Decimal("60.00"), "units_sold": 2, "order_items": 1},
        {"category": "Uncategorized", "revenue": Decimal("5.00"), "units_sold": 1, "order_items": 1},
    ]


def test_customer_insights_merge_emails_case_insensitively(reports, make_order):
    make_order("2026-03-01T10:00:00", "20.00", email="Layla@Example.com")
    make_order("2026-03-02T10:00:00", "40.00", email="layla@example.com")
    make_order("2026-03-03T10:00:00", "50.00", email="omar@example.com", name="Omar")
    make_order("2026-03-04T10:00:00", "999.00", email="omar@example.com", status="cancelled")

    rows = reports.customer_insights()

    assert [(r["customer_email"], r["order_count"], r["total_spent"]) for r in rows] == [
        ("layla@example.com", 2, Decimal("60.00")),
        ("omar@example.com", 1, Decimal("50.00")),
    ]
    assert rows[0]["average_order_value"] == Decimal("30.00")


def test_inventory_report(reports, make_product):
    make_product(name="Out", price="10.00", stock=0)
    make_product(name="Low", price="2.50", stock=4)
    make_product(name="Healthy", price="1.00", stock=30)

    report = reports.inventory_report()

    assert report["total_units"] == 34
    assert report["total_value"] == Decimal("40.00")
    assert (report["out_of_stock_count"], report["low_stock_count"], report["healthy_count"]) == (1, 1, 1)
    assert [p["name"] for p in report["out_of_stock"]] == ["Out"]


def test_sales_report_command_requires_range(call, db_session):
    envelope = call("get_sales_report", date_from="2026-03-01")
    assert envelope == {"content": "Error: Missing required argument(s): date_to", "error": True}

    report = payload_of(call("get_sales_report", date_from="2026-03-01", date_to="2026-03-31", group_by="week"))
    assert report["total_orders"] == 0
    assert report["periods"] == []
