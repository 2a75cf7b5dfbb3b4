"""
Read-only SQL tests: the SELECT gate runs before the store is touched and
the store's read-only mode refuses anything that would write.
"""

import pytest

from souq_admin.extensions import db
from souq_admin.models import Product
from souq_admin.services.sql_service import SqlService, ensure_select
from souq_admin.validation import CapabilityUnavailableError, ValidationError
from conftest import payload_of


class UntouchableStore:
    supports_readonly_sql = True

    def execute_readonly(self, sql):
        raise AssertionError("store must not be reached")


@pytest.mark.parametrize("query", [
    "DELETE FROM products",
    "  update products set stock_quantity = 0",
    "WITH x AS (SELECT 1) DELETE FROM products",
    "",
])
def test_non_select_never_reaches_store(query):
    with pytest.raises(ValidationError, match="Only SELECT queries are permitted"):
        SqlService(UntouchableStore()).execute(query)


def test_gate_is_case_insensitive_and_trims():
    assert ensure_select("  SeLeCt 1  ") == "SeLeCt 1"


def test_select_returns_rows(store, make_product):
    make_product(name="Lamp", stock=7)

    rows = SqlService(store).execute("SELECT name, stock_quantity FROM products")

    assert rows == [{"name": "Lamp", "stock_quantity": 7}]


def test_store_without_readonly_mode(fallback_store):
    with pytest.raises(CapabilityUnavailableError):
        SqlService(fallback_store).execute("SELECT 1")


def test_select_prefixed_write_is_refused(call, make_product):
    make_product(name="Survivor")

    envelope = call("execute_sql", query="SELECT 1; DELETE FROM products")

    assert envelope["error"] is True
    db.session.expire_all()
    assert db.session.query(Product).count() == 1


def test_execute_sql_command(call, make_product):
    make_product(name="Lamp")

    envelope = call("execute_sql", query="SELECT name FROM products")

    assert envelope["content"].startswith("1 row(s):\n")
    assert payload_of(envelope) == [{"name": "Lamp"}]


def test_store_is_writable_again_afterwards(store, make_product):
    SqlService(store).execute("SELECT 1")

    make_product(name="After")
    assert db.session.query(Product).count() == 1
