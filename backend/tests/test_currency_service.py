"""
Currency tests: at most one default currency after any create or update.
"""

import pytest

from souq_admin.services.currency_service import CurrencyService
from souq_admin.validation import NotFoundError, ValidationError
from conftest import payload_of


@pytest.fixture
def currencies(store):
    return CurrencyService(store)


def _defaults(currencies):
    return [c["code"] for c in currencies.list_currencies() if c["is_default"]]


def test_create_default_clears_previous(currencies):
    currencies.create_currency({"code": "USD", "name": "US Dollar", "symbol": "$", "is_default": True})
    currencies.create_currency({"code": "EUR", "name": "Euro", "symbol": "€", "is_default": True})

    assert _defaults(currencies) == ["EUR"]


def test_update_to_default_keeps_exactly_one(currencies):
    usd = currencies.create_currency({"code": "USD", "name": "US Dollar", "symbol": "$", "is_default": True})
    gbp = currencies.create_currency({"code": "GBP", "name": "Pound", "symbol": "£"})

    updated = currencies.update_currency(gbp["id"], {"is_default": True})

    assert updated["is_default"] is True
    assert _defaults(currencies) == ["GBP"]

    # Re-setting the same default leaves it alone
    currencies.update_currency(gbp["id"], {"is_default": True})
    assert _defaults(currencies) == ["GBP"]

    currencies.update_currency(usd["id"], {"exchange_rate": "1.00"})
    assert _defaults(currencies) == ["GBP"]


def test_code_is_upper_cased(currencies):
    row = currencies.create_currency({"code": " sar ", "name": "Riyal", "symbol": "SR"})
    assert row["code"] == "SAR"


def test_invalid_default_update_writes_nothing(currencies):
    currencies.create_currency({"code": "USD", "name": "US Dollar", "symbol": "$", "is_default": True})
    eur = currencies.create_currency({"code": "EUR", "name": "Euro", "symbol": "€"})

    with pytest.raises(ValidationError, match="exchange_rate must be > 0"):
        currencies.update_currency(eur["id"], {"is_default": True, "exchange_rate": 0})

    assert _defaults(currencies) == ["USD"]


def test_default_update_of_missing_currency(currencies):
    currencies.create_currency({"code": "USD", "name": "US Dollar", "symbol": "$", "is_default": True})

    with pytest.raises(NotFoundError):
        currencies.update_currency("missing", {"is_default": True})

    assert _defaults(currencies) == ["USD"]


def test_currency_commands(call):
    created = payload_of(call("create_currency", code="usd", name="US Dollar", symbol="$", is_default=True))
    assert created["code"] == "USD"

    envelope = call("delete_currency", id=created["id"])
    assert envelope == {"content": f"Currency {created['id']} deleted successfully"}
    assert payload_of(call("list_currencies")) == []
