"""
CLI tests: flask commands call/list and seed run.
"""

import json

import pytest

from conftest import payload_of


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def test_commands_list(runner, db_session):
    result = runner.invoke(args=["commands", "list"])

    assert result.exit_code == 0
    assert "create_order" in result.output
    assert "execute_sql" in result.output


def test_call_prints_content(runner, make_product):
    make_product(name="Lamp")

    result = runner.invoke(args=["commands", "call", "list_products", "--args", json.dumps({"search": "lamp"})])

    assert result.exit_code == 0
    rows = payload_of({"content": result.output})
    assert [r["name"] for r in rows] == ["Lamp"]


def test_call_error_envelope_exits_1(runner, db_session):
    result = runner.invoke(args=["commands", "call", "get_product", "--args", '{"id": "nope"}'])

    assert result.exit_code == 1
    assert result.output.startswith("Error: No products record matches id=nope")


def test_call_bad_json_exits_2(runner, db_session):
    result = runner.invoke(args=["commands", "call", "list_products", "--args", "{nope"])

    assert result.exit_code == 2
    assert result.output.startswith("FAIL --args is not valid JSON")


def test_seed_run(runner, db_session):
    result = runner.invoke(args=["seed", "run"])

    assert result.exit_code == 0
    assert result.output.startswith("Seed data applied:")


def test_reset_requires_confirmation(runner, db_session):
    result = runner.invoke(args=["system", "reset-db"])

    assert result.exit_code == 1
    assert "Refusing to reset without --yes" in result.output
