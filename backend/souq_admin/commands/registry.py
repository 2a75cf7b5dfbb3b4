# Overview: Closed command catalog, per-command specs and the envelope-returning dispatcher.

"""
Command registry.

The catalog is the Command enum. Every member must be bound to exactly one
CommandSpec; building a registry with a member left unbound fails at
startup instead of at call time.

dispatch() never raises. Whatever a handler raises becomes

    {"content": "Error: <message>", "error": True}

Domain errors (validation, not found, conflict, store, capability) keep
their message; anything else is also logged with its traceback.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Mapping, Sequence

from ..time_utils import to_utc_z
from ..validation import (
    CapabilityUnavailableError,
    ConflictError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from .schema import Arg, validate_arguments

logger = logging.getLogger(__name__)

DOMAIN_ERRORS = (ValidationError, ConflictError, NotFoundError, StoreError, CapabilityUnavailableError)


class Command(str, Enum):
    # Products
    LIST_PRODUCTS = "list_products"
    GET_PRODUCT = "get_product"
    CREATE_PRODUCT = "create_product"
    UPDATE_PRODUCT = "update_product"
    BULK_UPDATE_PRODUCTS = "bulk_update_products"
    DELETE_PRODUCT = "delete_product"
    UPDATE_STOCK = "update_stock"
    ADJUST_STOCK = "adjust_stock"
    # Categories
    LIST_CATEGORIES = "list_categories"
    CREATE_CATEGORY = "create_category"
    UPDATE_CATEGORY = "update_category"
    DELETE_CATEGORY = "delete_category"
    # Orders
    LIST_ORDERS = "list_orders"
    GET_ORDER = "get_order"
    CREATE_ORDER = "create_order"
    CANCEL_ORDER = "cancel_order"
    UPDATE_ORDER_STATUS = "update_order_status"
    UPDATE_PAYMENT_STATUS = "update_payment_status"
    ADD_ORDER_NOTE = "add_order_note"
    # Customers and reviews
    LIST_CUSTOMERS = "list_customers"
    GET_CUSTOMER = "get_customer"
    LIST_REVIEWS = "list_reviews"
    APPROVE_REVIEW = "approve_review"
    RESPOND_TO_REVIEW = "respond_to_review"
    DELETE_REVIEW = "delete_review"
    # Coupons
    LIST_COUPONS = "list_coupons"
    CREATE_COUPON = "create_coupon"
    UPDATE_COUPON = "update_coupon"
    DELETE_COUPON = "delete_coupon"
    # Currencies
    LIST_CURRENCIES = "list_currencies"
    CREATE_CURRENCY = "create_currency"
    UPDATE_CURRENCY = "update_currency"
    DELETE_CURRENCY = "delete_currency"
    # Settings
    GET_STORE_SETTINGS = "get_store_settings"
    UPDATE_STORE_SETTINGS = "update_store_settings"
    GET_HERO_SETTINGS = "get_hero_settings"
    UPDATE_HERO_SETTINGS = "update_hero_settings"
    # Footer
    LIST_FOOTER_SECTIONS = "list_footer_sections"
    CREATE_FOOTER_SECTION = "create_footer_section"
    CREATE_FOOTER_LINK = "create_footer_link"
    UPDATE_FOOTER_LINK = "update_footer_link"
    DELETE_FOOTER_LINK = "delete_footer_link"
    # Payment methods
    LIST_PAYMENT_METHODS = "list_payment_methods"
    CREATE_PAYMENT_METHOD = "create_payment_method"
    UPDATE_PAYMENT_METHOD = "update_payment_method"
    DELETE_PAYMENT_METHOD = "delete_payment_method"
    # Admin users
    LIST_ADMIN_USERS = "list_admin_users"
    CREATE_ADMIN_USER = "create_admin_user"
    UPDATE_ADMIN_USER = "update_admin_user"
    DELETE_ADMIN_USER = "delete_admin_user"
    # Pages
    LIST_PAGES = "list_pages"
    GET_PAGE = "get_page"
    CREATE_PAGE = "create_page"
    UPDATE_PAGE = "update_page"
    DELETE_PAGE = "delete_page"
    # Reports
    GET_DASHBOARD_STATS = "get_dashboard_stats"
    GET_SALES_REPORT = "get_sales_report"
    GET_TOP_PRODUCTS = "get_top_products"
    GET_LOW_STOCK_PRODUCTS = "get_low_stock_products"
    GET_REVENUE_BY_CATEGORY = "get_revenue_by_category"
    GET_CUSTOMER_INSIGHTS = "get_customer_insights"
    GET_INVENTORY_REPORT = "get_inventory_report"
    # Data
    EXPORT_DATA = "export_data"
    IMPORT_DATA = "import_data"
    SEED_STORE_DATA = "seed_store_data"
    EXECUTE_SQL = "execute_sql"


@dataclass(frozen=True)
class Reply:
    """
    Handler result. Rendered as "<message>:\\n<json>", plain "<json>", or
    just "<message>" when there is no payload.
    """
    payload: Any = None
    message: str | None = None


Handler = Callable[[dict], Reply]


@dataclass(frozen=True)
class CommandSpec:
    description: str
    handler: Handler
    args: Mapping[str, Arg] = field(default_factory=dict)
    one_of: Sequence[Sequence[str]] = ()

    def to_schema(self) -> dict:
        return {
            "type": "object",
            "properties": {k: a.to_schema() for k, a in self.args.items()},
            "required": [k for k, a in self.args.items() if a.required],
        }


def _json_default(value):
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return to_utc_z(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def render(reply: Reply) -> str:
    if reply.payload is None:
        return reply.message or ""
    body = json.dumps(reply.payload, indent=2, default=_json_default, ensure_ascii=False)
    if reply.message:
        return f"{reply.message}:\n{body}"
    return body


class CommandRegistry:
    def __init__(self, specs: Mapping[Command, CommandSpec]):
        unbound = [c.value for c in Command if c not in specs]
        if unbound:
            raise RuntimeError(f"Commands without a spec: {', '.join(unbound)}")
        self._specs = dict(specs)

    def catalog(self) -> list[dict]:
        return [
            {
                "name": command.value,
                "description": self._specs[command].description,
                "input_schema": self._specs[command].to_schema(),
            }
            for command in Command
        ]

    def dispatch(self, name: str, arguments: Mapping[str, Any] | None = None) -> dict:
        try:
            command = Command(name)
        except ValueError:
            return {"content": f"Error: Unknown command: {name}", "error": True}

        spec = self._specs[command]
        try:
            cleaned = validate_arguments(spec.args, spec.one_of, arguments)
            reply = spec.handler(cleaned)
            return {"content": render(reply)}
        except DOMAIN_ERRORS as exc:
            logger.info("Command %s failed: %s", name, exc)
            return {"content": f"Error: {exc}", "error": True}
        except Exception as exc:
            logger.exception("Command %s raised an unexpected error", name)
            return {"content": f"Error: {exc}", "error": True}
