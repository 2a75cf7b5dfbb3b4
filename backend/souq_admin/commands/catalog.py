# Overview: Product and category commands.

from __future__ import annotations

from ..services.catalog_service import PRODUCT_SORTS
from .registry import Command, CommandSpec, Reply
from .schema import Arg, Kind

PRODUCT_FIELDS = {
    "name": Arg(Kind.STRING, "Product name"),
    "slug": Arg(Kind.STRING, "URL slug (derived from name if not provided)"),
    "description": Arg(Kind.STRING, "Full product description"),
    "short_description": Arg(Kind.STRING, "Short description for cards"),
    "category_id": Arg(Kind.STRING, "Category ID"),
    "base_price": Arg(Kind.NUMBER, "Price charged at order time"),
    "compare_at_price": Arg(Kind.NUMBER, "Original price for showing a discount"),
    "sku": Arg(Kind.STRING, "Stock keeping unit"),
    "stock_quantity": Arg(Kind.INTEGER, "Available stock"),
    "low_stock_threshold": Arg(Kind.INTEGER, "Low stock alert threshold"),
    "images": Arg(Kind.ARRAY, "Image URLs"),
    "specifications": Arg(Kind.OBJECT, "Product specifications"),
    "is_featured": Arg(Kind.BOOLEAN, "Featured product flag"),
    "is_active": Arg(Kind.BOOLEAN, "Active status"),
}

CATEGORY_FIELDS = {
    "name": Arg(Kind.STRING, "Category name"),
    "slug": Arg(Kind.STRING, "URL slug (derived from name if not provided)"),
    "description": Arg(Kind.STRING, "Category description"),
    "parent_id": Arg(Kind.STRING, "Parent category ID"),
    "image_url": Arg(Kind.STRING, "Category image URL"),
    "sort_order": Arg(Kind.INTEGER, "Display order"),
}

WINDOW_ARGS = {
    "limit": Arg(Kind.INTEGER, "Maximum rows to return"),
    "offset": Arg(Kind.INTEGER, "Start of the result window; width is limit, or 50 without one"),
}


def required(fields: dict, *names: str) -> dict:
    """Copy of fields with the named args marked required."""
    out = dict(fields)
    for name in names:
        arg = out[name]
        out[name] = Arg(arg.kind, arg.description, required=True, choices=arg.choices)
    return out


def with_id(fields: dict, description: str) -> dict:
    return {"id": Arg(Kind.STRING, description, required=True), **fields}


def _split_id(args: dict) -> tuple[str, dict]:
    fields = dict(args)
    return fields.pop("id"), fields


def catalog_commands(services) -> dict:
    catalog = services.catalog

    def list_products(args):
        return Reply(catalog.list_products(**args))

    def get_product(args):
        return Reply(catalog.get_product(**args))

    def create_product(args):
        return Reply(catalog.create_product(args), "Product created successfully")

    def update_product(args):
        product_id, fields = _split_id(args)
        return Reply(catalog.update_product(product_id, fields), "Product updated successfully")

    def bulk_update_products(args):
        results = catalog.bulk_update_products(args["updates"])
        updated = sum(1 for r in results if r["status"] == "updated")
        return Reply(results, f"Bulk update finished: {updated} of {len(results)} products updated")

    def delete_product(args):
        catalog.delete_product(args["id"])
        return Reply(message=f"Product {args['id']} deleted successfully")

    def update_stock(args):
        return Reply(catalog.update_stock(args["id"], args["stock_quantity"]), "Stock updated")

    def adjust_stock(args):
        return Reply(catalog.adjust_stock(args["id"], args["delta"]), "Stock adjusted")

    def list_categories(args):
        return Reply(catalog.list_categories(**args))

    def create_category(args):
        return Reply(catalog.create_category(args), "Category created")

    def update_category(args):
        category_id, fields = _split_id(args)
        return Reply(catalog.update_category(category_id, fields), "Category updated")

    def delete_category(args):
        catalog.delete_category(args["id"])
        return Reply(message=f"Category {args['id']} deleted successfully")

    return {
        Command.LIST_PRODUCTS: CommandSpec(
            "List products, newest first by default. search is a case-insensitive substring "
            "match on name and description, not a pattern language.",
            list_products,
            {
                "category_id": Arg(Kind.STRING, "Filter by category ID"),
                "is_active": Arg(Kind.BOOLEAN, "Filter by active status"),
                "is_featured": Arg(Kind.BOOLEAN, "Filter by featured status"),
                "search": Arg(Kind.STRING, "Substring to look for in name or description"),
                "min_price": Arg(Kind.NUMBER, "Lowest base_price to include"),
                "max_price": Arg(Kind.NUMBER, "Highest base_price to include"),
                "sort": Arg(Kind.STRING, "Sort order", choices=PRODUCT_SORTS.names),
                **WINDOW_ARGS,
            },
        ),
        Command.GET_PRODUCT: CommandSpec(
            "Get a single product by ID or slug, with its category",
            get_product,
            {"id": Arg(Kind.STRING, "Product ID"), "slug": Arg(Kind.STRING, "Product slug")},
            one_of=(("id", "slug"),),
        ),
        Command.CREATE_PRODUCT: CommandSpec(
            "Create a new product",
            create_product,
            required(PRODUCT_FIELDS, "name", "base_price"),
        ),
        Command.UPDATE_PRODUCT: CommandSpec(
            "Update an existing product",
            update_product,
            with_id(PRODUCT_FIELDS, "Product ID to update"),
        ),
        Command.BULK_UPDATE_PRODUCTS: CommandSpec(
            "Apply several product patches; each entry is {id, ...fields} and reports its own status",
            bulk_update_products,
            {"updates": Arg(Kind.ARRAY, "List of {id, ...fields} patches", required=True)},
        ),
        Command.DELETE_PRODUCT: CommandSpec(
            "Delete a product by ID",
            delete_product,
            {"id": Arg(Kind.STRING, "Product ID to delete", required=True)},
        ),
        Command.UPDATE_STOCK: CommandSpec(
            "Set a product's stock quantity",
            update_stock,
            {
                "id": Arg(Kind.STRING, "Product ID", required=True),
                "stock_quantity": Arg(Kind.INTEGER, "New stock quantity", required=True),
            },
        ),
        Command.ADJUST_STOCK: CommandSpec(
            "Add to or subtract from a product's stock; the result never goes below 0",
            adjust_stock,
            {
                "id": Arg(Kind.STRING, "Product ID", required=True),
                "delta": Arg(Kind.INTEGER, "Amount to add (negative to subtract)", required=True),
            },
        ),
        Command.LIST_CATEGORIES: CommandSpec(
            "List product categories by sort order",
            list_categories,
            {"parent_id": Arg(Kind.STRING, "Filter by parent category")},
        ),
        Command.CREATE_CATEGORY: CommandSpec(
            "Create a new category",
            create_category,
            required(CATEGORY_FIELDS, "name"),
        ),
        Command.UPDATE_CATEGORY: CommandSpec(
            "Update a category",
            update_category,
            with_id(CATEGORY_FIELDS, "Category ID"),
        ),
        Command.DELETE_CATEGORY: CommandSpec(
            "Delete a category; its products become uncategorized",
            delete_category,
            {"id": Arg(Kind.STRING, "Category ID", required=True)},
        ),
    }
