"""
CSV export/import tests.
"""

import csv
import io

import pytest

from souq_admin.extensions import db
from souq_admin.models import Customer, Product
from souq_admin.services.exchange_service import EXPORT_COLUMNS, ExchangeService
from souq_admin.validation import ValidationError


@pytest.fixture
def exchange(store):
    return ExchangeService(store)


def _rows(text):
    return list(csv.DictReader(io.StringIO(text)))


@pytest.mark.parametrize("entity", ["products", "orders", "customers", "reviews"])
def test_export_header_on_empty_store(exchange, db_session, entity):
    text = exchange.export_csv(entity)
    assert text == ",".join(EXPORT_COLUMNS[entity]) + "\n"


def test_export_products_with_category(exchange, make_product, make_category):
    jewelry = make_category("Jewelry")
    make_product(name="Ring, Silver", price="35.00", category_id=jewelry.id, images=["https://img/ring.jpg"])

    [row] = _rows(exchange.export_csv("products"))

    assert row["name"] == "Ring, Silver"
    assert row["category"] == "Jewelry"
    assert row["base_price"] == "35.00"
    assert row["image_url"] == "https://img/ring.jpg"
    assert row["is_featured"] == "false"


def test_import_products_reports_bad_rows(exchange, db_session):
    text = (
        "name,base_price,stock_quantity,is_featured\n"
        "Desk Lamp,19.99,4,yes\n"
        ",5.00,1,no\n"
        "Desk Lamp,21.00,2,no\n"
        "Mug,abc,3,no\n"
    )

    result = exchange.import_csv("products", text)

    assert result["success"] == 1
    assert result["failed"] == 3
    assert result["errors"][0] == "Row 2: name cannot be blank"
    assert result["errors"][1].startswith("Row 3: ")
    assert "UNIQUE constraint failed" in result["errors"][1]
    assert result["errors"][2] == "Row 4: base_price must be a number"

    lamp = db.session.query(Product).one()
    assert (lamp.slug, lamp.stock_quantity, lamp.is_featured) == ("desk-lamp", 4, True)


def test_import_customers_lowercases_email(exchange, db_session):
    result = exchange.import_csv("customers", "email,first_name\nOmar@Example.com,Omar\n")

    assert result == {"success": 1, "failed": 0, "errors": []}
    assert db.session.query(Customer).one().email == "omar@example.com"


def test_import_rejects_blank_csv(exchange):
    with pytest.raises(ValidationError, match="csv cannot be blank"):
        exchange.import_csv("products", "  ")


def test_export_then_import_through_commands(call, make_product):
    make_product(name="Vase", slug="vase", price="12.00", stock=2)

    exported = call("export_data", entity="products")["content"]
    assert exported.splitlines()[1].startswith("Vase,,vase,,12.00,,2,false,")

    envelope = call("import_data", entity="products", csv=exported)
    assert envelope["content"].startswith("Import finished: 0 imported, 1 failed")
