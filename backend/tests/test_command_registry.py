"""
Command registry tests: catalog completeness, argument validation before any
I/O, rendering and error envelopes.
"""

import json
import logging
from datetime import datetime
from decimal import Decimal

import pytest

from souq_admin.commands import Command, CommandRegistry, CommandSpec, Reply, render
from souq_admin.commands.schema import Arg, Kind, validate_arguments
from souq_admin.validation import NotFoundError, ValidationError


def _noop(args):
    return Reply(args)


def _full_specs(overrides=None):
    specs = {command: CommandSpec("noop", _noop) for command in Command}
    specs.update(overrides or {})
    return specs


def test_every_command_is_bound(registry):
    names = [entry["name"] for entry in registry.catalog()]
    assert names == [command.value for command in Command]
    assert len(names) == len(set(names))


def test_registry_refuses_unbound_commands():
    specs = _full_specs()
    del specs[Command.EXECUTE_SQL]
    del specs[Command.LIST_PAGES]

    with pytest.raises(RuntimeError, match="list_pages, execute_sql"):
        CommandRegistry(specs)


def test_catalog_schema_lists_required_and_choices(registry):
    catalog = {entry["name"]: entry for entry in registry.catalog()}
    schema = catalog["update_order_status"]["input_schema"]

    assert schema["type"] == "object"
    assert schema["required"] == ["id", "status"]
    assert schema["properties"]["status"]["enum"] == [
        "pending", "processing", "shipped", "delivered", "cancelled",
    ]


def test_unknown_command_envelope(call):
    envelope = call("drop_everything")
    assert envelope == {"content": "Error: Unknown command: drop_everything", "error": True}


class TestArgumentValidation:
    ARGS = {
        "id": Arg(Kind.STRING, required=True),
        "count": Arg(Kind.INTEGER),
        "price": Arg(Kind.NUMBER),
        "flag": Arg(Kind.BOOLEAN),
        "mode": Arg(Kind.STRING, choices=("fast", "slow")),
    }

    def test_missing_required(self):
        with pytest.raises(ValidationError, match=r"Missing required argument\(s\): id"):
            validate_arguments(self.ARGS, (), {})

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError, match="Unknown argument: colour"):
            validate_arguments(self.ARGS, (), {"id": "x", "colour": "red"})

    def test_wrong_kind(self):
        with pytest.raises(ValidationError, match="count must be an integer"):
            validate_arguments(self.ARGS, (), {"id": "x", "count": "3"})

    def test_bool_is_not_a_number(self):
        with pytest.raises(ValidationError, match="price must be a number"):
            validate_arguments(self.ARGS, (), {"id": "x", "price": True})

    def test_integral_float_becomes_int(self):
        cleaned = validate_arguments(self.ARGS, (), {"id": "x", "count": 3.0})
        assert cleaned["count"] == 3
        assert isinstance(cleaned["count"], int)

    def test_outside_domain(self):
        with pytest.raises(ValidationError, match="mode must be one of: fast, slow"):
            validate_arguments(self.ARGS, (), {"id": "x", "mode": "medium"})

    def test_none_means_not_supplied(self):
        cleaned = validate_arguments(self.ARGS, (), {"id": "x", "flag": None})
        assert cleaned == {"id": "x"}

    def test_arguments_must_be_an_object(self):
        with pytest.raises(ValidationError, match="Arguments must be an object"):
            validate_arguments(self.ARGS, (), ["id"])

    def test_one_of_group(self):
        args = {"id": Arg(Kind.STRING), "slug": Arg(Kind.STRING)}
        with pytest.raises(ValidationError, match="Either id or slug is required"):
            validate_arguments(args, (("id", "slug"),), {})
        assert validate_arguments(args, (("id", "slug"),), {"slug": "ring"}) == {"slug": "ring"}


def test_validation_failure_does_no_io(call, db_session):
    envelope = call("get_product")
    assert envelope == {"content": "Error: Either id or slug is required", "error": True}

    envelope = call("create_product", name="Ring")
    assert envelope["error"] is True
    assert envelope["content"] == "Error: Missing required argument(s): base_price"


class TestRender:
    def test_message_and_payload(self):
        text = render(Reply({"id": "p1"}, "Product created successfully"))
        assert text == 'Product created successfully:\n{\n  "id": "p1"\n}'

    def test_payload_only(self):
        assert json.loads(render(Reply([1, 2]))) == [1, 2]

    def test_message_only(self):
        assert render(Reply(message="Product p1 deleted successfully")) == "Product p1 deleted successfully"

    def test_decimal_datetime_and_bytes(self):
        text = render(Reply({
            "total": Decimal("20.00"),
            "at": datetime(2026, 3, 1, 9, 30),
            "blob": b"\x01\xff",
        }))
        assert json.loads(text) == {"total": 20.0, "at": "2026-03-01T09:30:00Z", "blob": "01ff"}


def test_domain_error_becomes_envelope(caplog):
    def missing(args):
        raise NotFoundError("No products record matches id=nope")

    registry = CommandRegistry(_full_specs({
        Command.GET_PRODUCT: CommandSpec("get", missing, {"id": Arg(Kind.STRING)}),
    }))

    with caplog.at_level(logging.INFO, logger="souq_admin.commands.registry"):
        envelope = registry.dispatch("get_product", {"id": "nope"})

    assert envelope == {"content": "Error: No products record matches id=nope", "error": True}
    assert not any(r.exc_info for r in caplog.records)


def test_unexpected_error_is_logged_with_traceback(caplog):
    def broken(args):
        raise KeyError("stock_quantity")

    registry = CommandRegistry(_full_specs({Command.GET_INVENTORY_REPORT: CommandSpec("inv", broken)}))

    with caplog.at_level(logging.ERROR, logger="souq_admin.commands.registry"):
        envelope = registry.dispatch("get_inventory_report", {})

    assert envelope["error"] is True
    assert envelope["content"] == "Error: 'stock_quantity'"
    assert any(r.exc_info for r in caplog.records)


def test_handler_runs_once_per_dispatch():
    calls = []

    def counting(args):
        calls.append(args)
        return Reply(message="ok")

    registry = CommandRegistry(_full_specs({Command.LIST_CURRENCIES: CommandSpec("list", counting)}))

    assert registry.dispatch("list_currencies") == {"content": "ok"}
    assert calls == [{}]
