# Overview: Order, customer and review commands.

from __future__ import annotations

from ..models import ORDER_STATUSES, PAYMENT_STATUSES
from .catalog import WINDOW_ARGS
from .registry import Command, CommandSpec, Reply
from .schema import Arg, Kind


def _count_failed(outcomes: list[dict]) -> int:
    return sum(1 for o in outcomes if o["status"] == "failed")


def order_commands(services) -> dict:
    orders = services.orders

    def list_orders(args):
        return Reply(orders.list_orders(**args))

    def get_order(args):
        return Reply(orders.get_order(**args))

    def create_order(args):
        order = orders.create_order(**args)
        failed = _count_failed(order["stock_adjustments"])
        message = f"Order {order['order_number']} created"
        if failed:
            message += f" ({failed} stock adjustment(s) failed)"
        return Reply(order, message)

    def cancel_order(args):
        order = orders.cancel_order(**args)
        failed = _count_failed(order["stock_restorations"])
        message = f"Order {order['order_number']} cancelled"
        if failed:
            message += f" ({failed} stock restoration(s) failed)"
        return Reply(order, message)

    def update_order_status(args):
        return Reply(orders.update_status(**args), "Order status updated")

    def update_payment_status(args):
        return Reply(orders.update_payment_status(**args), "Payment status updated")

    def add_order_note(args):
        return Reply(orders.add_note(**args), "Note added to order")

    return {
        Command.LIST_ORDERS: CommandSpec(
            "List orders, newest first. customer_email is a case-insensitive substring match.",
            list_orders,
            {
                "status": Arg(Kind.STRING, "Filter by order status", choices=ORDER_STATUSES),
                "payment_status": Arg(Kind.STRING, "Filter by payment status", choices=PAYMENT_STATUSES),
                "customer_email": Arg(Kind.STRING, "Substring of the customer email"),
                "date_from": Arg(Kind.STRING, "Earliest created_at (ISO-8601)"),
                "date_to": Arg(Kind.STRING, "Latest created_at (ISO-8601; a bare date covers the whole day)"),
                **WINDOW_ARGS,
            },
        ),
        Command.GET_ORDER: CommandSpec(
            "Get an order with its items by ID or order number",
            get_order,
            {"id": Arg(Kind.STRING, "Order ID"), "order_number": Arg(Kind.STRING, "Order number")},
            one_of=(("id", "order_number"),),
        ),
        Command.CREATE_ORDER: CommandSpec(
            "Create an order priced at current product prices and take the quantities out of stock",
            create_order,
            {
                "customer_email": Arg(Kind.STRING, "Customer email", required=True),
                "customer_name": Arg(Kind.STRING, "Customer full name", required=True),
                "items": Arg(Kind.ARRAY, "List of {product_id, quantity}", required=True),
                "shipping_address": Arg(Kind.OBJECT, "Shipping address"),
                "payment_method": Arg(Kind.STRING, "Payment method code"),
                "notes": Arg(Kind.STRING, "Initial order notes"),
            },
        ),
        Command.CANCEL_ORDER: CommandSpec(
            "Cancel an order and, by default, put its quantities back into stock",
            cancel_order,
            {
                "id": Arg(Kind.STRING, "Order ID", required=True),
                "restore_stock": Arg(Kind.BOOLEAN, "Return item quantities to stock (default true)"),
                "reason": Arg(Kind.STRING, "Cancellation reason, appended to the notes"),
            },
        ),
        Command.UPDATE_ORDER_STATUS: CommandSpec(
            "Update an order's fulfilment status",
            update_order_status,
            {
                "id": Arg(Kind.STRING, "Order ID", required=True),
                "status": Arg(Kind.STRING, "New status", required=True, choices=ORDER_STATUSES),
            },
        ),
        Command.UPDATE_PAYMENT_STATUS: CommandSpec(
            "Update an order's payment status",
            update_payment_status,
            {
                "id": Arg(Kind.STRING, "Order ID", required=True),
                "payment_status": Arg(Kind.STRING, "New payment status", required=True, choices=PAYMENT_STATUSES),
            },
        ),
        Command.ADD_ORDER_NOTE: CommandSpec(
            "Append a timestamped note to an order",
            add_order_note,
            {
                "id": Arg(Kind.STRING, "Order ID", required=True),
                "note": Arg(Kind.STRING, "Note text", required=True),
            },
        ),
    }


def customer_commands(services) -> dict:
    customers = services.customers
    reviews = services.reviews

    def list_customers(args):
        return Reply(customers.list_customers(**args))

    def get_customer(args):
        return Reply(customers.get_customer(**args))

    def list_reviews(args):
        return Reply(reviews.list_reviews(**args))

    def approve_review(args):
        approved = args.get("is_approved", True)
        review = reviews.approve_review(args["id"], approved)
        return Reply(review, "Review approved" if approved else "Review unapproved")

    def respond_to_review(args):
        return Reply(reviews.respond_to_review(args["id"], args["admin_response"]), "Response added")

    def delete_review(args):
        reviews.delete_review(args["id"])
        return Reply(message=f"Review {args['id']} deleted successfully")

    return {
        Command.LIST_CUSTOMERS: CommandSpec(
            "List customers, newest first. search is a case-insensitive substring match on email and names.",
            list_customers,
            {"search": Arg(Kind.STRING, "Substring of email, first or last name"), **WINDOW_ARGS},
        ),
        Command.GET_CUSTOMER: CommandSpec(
            "Get a customer by ID or email, with their 10 most recent orders",
            get_customer,
            {"id": Arg(Kind.STRING, "Customer ID"), "email": Arg(Kind.STRING, "Customer email")},
            one_of=(("id", "email"),),
        ),
        Command.LIST_REVIEWS: CommandSpec(
            "List product reviews, newest first",
            list_reviews,
            {
                "product_id": Arg(Kind.STRING, "Filter by product"),
                "is_approved": Arg(Kind.BOOLEAN, "Filter by approval status"),
                "rating": Arg(Kind.INTEGER, "Filter by rating (1-5)"),
                **WINDOW_ARGS,
            },
        ),
        Command.APPROVE_REVIEW: CommandSpec(
            "Approve or unapprove a review",
            approve_review,
            {
                "id": Arg(Kind.STRING, "Review ID", required=True),
                "is_approved": Arg(Kind.BOOLEAN, "Approval status (default true)"),
            },
        ),
        Command.RESPOND_TO_REVIEW: CommandSpec(
            "Add an admin response to a review",
            respond_to_review,
            {
                "id": Arg(Kind.STRING, "Review ID", required=True),
                "admin_response": Arg(Kind.STRING, "Response text", required=True),
            },
        ),
        Command.DELETE_REVIEW: CommandSpec(
            "Delete a review",
            delete_review,
            {"id": Arg(Kind.STRING, "Review ID", required=True)},
        ),
    }
