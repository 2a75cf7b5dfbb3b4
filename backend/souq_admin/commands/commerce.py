# Overview: Coupon, currency and payment method commands.

from __future__ import annotations

from ..models import DISCOUNT_TYPES
from .catalog import _split_id, required, with_id
from .registry import Command, CommandSpec, Reply
from .schema import Arg, Kind

COUPON_FIELDS = {
    "code": Arg(Kind.STRING, "Coupon code (stored upper-case)"),
    "description": Arg(Kind.STRING, "Coupon description"),
    "discount_type": Arg(Kind.STRING, "Type of discount", choices=DISCOUNT_TYPES),
    "discount_value": Arg(Kind.NUMBER, "Discount value (percent or fixed amount)"),
    "min_purchase_amount": Arg(Kind.NUMBER, "Minimum purchase amount"),
    "max_discount_amount": Arg(Kind.NUMBER, "Maximum discount amount"),
    "usage_limit": Arg(Kind.INTEGER, "Total usage limit"),
    "customer_usage_limit": Arg(Kind.INTEGER, "Usage limit per customer"),
    "start_date": Arg(Kind.STRING, "Start date (ISO-8601)"),
    "end_date": Arg(Kind.STRING, "End date (ISO-8601)"),
    "is_active": Arg(Kind.BOOLEAN, "Active status"),
}

CURRENCY_FIELDS = {
    "code": Arg(Kind.STRING, "Currency code (e.g., USD, EUR)"),
    "name": Arg(Kind.STRING, "Currency name"),
    "symbol": Arg(Kind.STRING, "Currency symbol"),
    "exchange_rate": Arg(Kind.NUMBER, "Exchange rate against the default currency"),
    "is_default": Arg(Kind.BOOLEAN, "Make this the only default currency"),
    "is_active": Arg(Kind.BOOLEAN, "Active status"),
}

PAYMENT_METHOD_FIELDS = {
    "name": Arg(Kind.STRING, "Display name"),
    "code": Arg(Kind.STRING, "Unique code"),
    "description": Arg(Kind.STRING, "Description"),
    "icon": Arg(Kind.STRING, "Icon name"),
    "is_active": Arg(Kind.BOOLEAN, "Active status"),
    "sort_order": Arg(Kind.INTEGER, "Display order"),
}


def commerce_commands(services) -> dict:
    coupons = services.coupons
    currencies = services.currencies
    content = services.content

    def list_coupons(args):
        return Reply(coupons.list_coupons(**args))

    def create_coupon(args):
        return Reply(coupons.create_coupon(args), "Coupon created")

    def update_coupon(args):
        coupon_id, fields = _split_id(args)
        return Reply(coupons.update_coupon(coupon_id, fields), "Coupon updated")

    def delete_coupon(args):
        coupons.delete_coupon(args["id"])
        return Reply(message=f"Coupon {args['id']} deleted successfully")

    def list_currencies(args):
        return Reply(currencies.list_currencies())

    def create_currency(args):
        return Reply(currencies.create_currency(args), "Currency created")

    def update_currency(args):
        currency_id, fields = _split_id(args)
        return Reply(currencies.update_currency(currency_id, fields), "Currency updated")

    def delete_currency(args):
        currencies.delete_currency(args["id"])
        return Reply(message=f"Currency {args['id']} deleted successfully")

    def list_payment_methods(args):
        return Reply(content.list_payment_methods())

    def create_payment_method(args):
        return Reply(content.create_payment_method(args), "Payment method created")

    def update_payment_method(args):
        method_id, fields = _split_id(args)
        return Reply(content.update_payment_method(method_id, fields), "Payment method updated")

    def delete_payment_method(args):
        content.delete_payment_method(args["id"])
        return Reply(message=f"Payment method {args['id']} deleted successfully")

    return {
        Command.LIST_COUPONS: CommandSpec(
            "List discount coupons, newest first",
            list_coupons,
            {"is_active": Arg(Kind.BOOLEAN, "Filter by active status")},
        ),
        Command.CREATE_COUPON: CommandSpec(
            "Create a discount coupon; percentage discounts cannot exceed 100",
            create_coupon,
            required(COUPON_FIELDS, "code", "discount_type", "discount_value"),
        ),
        Command.UPDATE_COUPON: CommandSpec(
            "Update a coupon",
            update_coupon,
            with_id(COUPON_FIELDS, "Coupon ID"),
        ),
        Command.DELETE_COUPON: CommandSpec(
            "Delete a coupon",
            delete_coupon,
            {"id": Arg(Kind.STRING, "Coupon ID", required=True)},
        ),
        Command.LIST_CURRENCIES: CommandSpec(
            "List currencies ordered by code",
            list_currencies,
        ),
        Command.CREATE_CURRENCY: CommandSpec(
            "Create a currency. Setting is_default clears the flag on every other currency first.",
            create_currency,
            required(CURRENCY_FIELDS, "code", "name", "symbol"),
        ),
        Command.UPDATE_CURRENCY: CommandSpec(
            "Update a currency. Setting is_default clears the flag on every other currency first.",
            update_currency,
            with_id(CURRENCY_FIELDS, "Currency ID"),
        ),
        Command.DELETE_CURRENCY: CommandSpec(
            "Delete a currency",
            delete_currency,
            {"id": Arg(Kind.STRING, "Currency ID", required=True)},
        ),
        Command.LIST_PAYMENT_METHODS: CommandSpec(
            "List payment methods by sort order",
            list_payment_methods,
        ),
        Command.CREATE_PAYMENT_METHOD: CommandSpec(
            "Create a payment method",
            create_payment_method,
            required(PAYMENT_METHOD_FIELDS, "name", "code"),
        ),
        Command.UPDATE_PAYMENT_METHOD: CommandSpec(
            "Update a payment method",
            update_payment_method,
            with_id(PAYMENT_METHOD_FIELDS, "Payment method ID"),
        ),
        Command.DELETE_PAYMENT_METHOD: CommandSpec(
            "Delete a payment method",
            delete_payment_method,
            {"id": Arg(Kind.STRING, "Payment method ID", required=True)},
        ),
    }
