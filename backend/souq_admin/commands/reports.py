# Overview: Dashboard and report commands.

from __future__ import annotations

from ..services.reporting_service import GROUPINGS, TOP_PRODUCT_METRICS
from .registry import Command, CommandSpec, Reply
from .schema import Arg, Kind


def report_commands(services) -> dict:
    reports = services.reports

    def get_dashboard_stats(args):
        return Reply(reports.dashboard_stats())

    def get_sales_report(args):
        return Reply(reports.sales_report(**args))

    def get_top_products(args):
        return Reply(reports.top_products(**args))

    def get_low_stock_products(args):
        return Reply(reports.low_stock_products(**args))

    def get_revenue_by_category(args):
        return Reply(reports.revenue_by_category(**args))

    def get_customer_insights(args):
        return Reply(reports.customer_insights(**args))

    def get_inventory_report(args):
        return Reply(reports.inventory_report())

    return {
        Command.GET_DASHBOARD_STATS: CommandSpec(
            "Get dashboard statistics. Revenue excludes cancelled orders; "
            "'today' starts at local midnight in the store timezone.",
            get_dashboard_stats,
        ),
        Command.GET_SALES_REPORT: CommandSpec(
            "Get a sales report for a date range, bucketed by day, ISO week or month",
            get_sales_report,
            {
                "date_from": Arg(Kind.STRING, "Start date (ISO-8601)", required=True),
                "date_to": Arg(Kind.STRING, "End date (ISO-8601; a bare date covers the whole day)", required=True),
                "group_by": Arg(Kind.STRING, "Bucket size (default day)", choices=GROUPINGS),
            },
        ),
        Command.GET_TOP_PRODUCTS: CommandSpec(
            "Get top products by units sold, revenue, rating or review count",
            get_top_products,
            {
                "sort_by": Arg(Kind.STRING, "Ranking metric (default sales)", choices=TOP_PRODUCT_METRICS),
                "limit": Arg(Kind.INTEGER, "Number of products (default 10)"),
            },
        ),
        Command.GET_LOW_STOCK_PRODUCTS: CommandSpec(
            "Get products at or below a stock threshold (each product's own threshold if none given)",
            get_low_stock_products,
            {"threshold": Arg(Kind.INTEGER, "Fixed stock threshold")},
        ),
        Command.GET_REVENUE_BY_CATEGORY: CommandSpec(
            "Get revenue per category from non-cancelled orders",
            get_revenue_by_category,
            {
                "date_from": Arg(Kind.STRING, "Start date (ISO-8601)"),
                "date_to": Arg(Kind.STRING, "End date (ISO-8601)"),
            },
        ),
        Command.GET_CUSTOMER_INSIGHTS: CommandSpec(
            "Get top customers by total spent",
            get_customer_insights,
            {"limit": Arg(Kind.INTEGER, "Number of customers (default 10)")},
        ),
        Command.GET_INVENTORY_REPORT: CommandSpec(
            "Get stock valuation and out-of-stock / low-stock / healthy breakdown",
            get_inventory_report,
        ),
    }
