# Overview: Wires services over one store and binds every command to its handler.

from __future__ import annotations

from dataclasses import dataclass

from ..services.auth_service import AdminUserService
from ..services.catalog_service import CatalogService
from ..services.content_service import ContentService
from ..services.coupon_service import CouponService
from ..services.currency_service import CurrencyService
from ..services.customer_service import CustomerService
from ..services.exchange_service import ExchangeService
from ..services.order_service import OrderNumberGenerator, OrderService
from ..services.reporting_service import ReportingService, SalesDataSource
from ..services.review_service import ReviewService
from ..services.seed_service import SeedService
from ..services.sql_service import SqlService
from .catalog import catalog_commands
from .commerce import commerce_commands
from .content import content_commands
from .data import data_commands
from .orders import customer_commands, order_commands
from .registry import Command, CommandRegistry, CommandSpec, Reply, render
from .reports import report_commands

# One generator per process keeps order numbers strictly increasing across registries
ORDER_NUMBERS = OrderNumberGenerator()


@dataclass(frozen=True)
class Services:
    catalog: CatalogService
    orders: OrderService
    customers: CustomerService
    reviews: ReviewService
    coupons: CouponService
    currencies: CurrencyService
    content: ContentService
    admins: AdminUserService
    reports: ReportingService
    exchange: ExchangeService
    seed: SeedService
    sql: SqlService


def build_services(store, *, page_size: int = 50, timezone_name: str = "UTC", numbers=None) -> Services:
    return Services(
        catalog=CatalogService(store, page_size=page_size),
        orders=OrderService(store, numbers=numbers or ORDER_NUMBERS, page_size=page_size),
        customers=CustomerService(store, page_size=page_size),
        reviews=ReviewService(store, page_size=page_size),
        coupons=CouponService(store),
        currencies=CurrencyService(store),
        content=ContentService(store),
        admins=AdminUserService(store),
        reports=ReportingService(SalesDataSource(store), timezone_name=timezone_name),
        exchange=ExchangeService(store),
        seed=SeedService(store),
        sql=SqlService(store),
    )


def build_registry(store, *, page_size: int = 50, timezone_name: str = "UTC", numbers=None) -> CommandRegistry:
    services = build_services(store, page_size=page_size, timezone_name=timezone_name, numbers=numbers)
    specs = {}
    for table in (
        catalog_commands,
        order_commands,
        customer_commands,
        commerce_commands,
        content_commands,
        report_commands,
        data_commands,
    ):
        specs.update(table(services))
    return CommandRegistry(specs)


__all__ = [
    "Command", "CommandRegistry", "CommandSpec", "Reply", "render",
    "Services", "build_services", "build_registry",
]
