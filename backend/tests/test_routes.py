"""
HTTP transport tests: health, catalog, envelopes and the admin token.
"""

import pytest

from conftest import payload_of


@pytest.fixture
def admin_token(app):
    app.config["ADMIN_API_TOKEN"] = "s3cret-token"
    yield "s3cret-token"
    app.config["ADMIN_API_TOKEN"] = None


def test_health(client, db_session):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "healthy"
    assert body["checks"]["database"]["details"] == {"dialect": "sqlite"}
    assert set(body["capabilities"]) == {"atomic_stock_counters", "readonly_sql"}


def test_catalog(client, db_session):
    response = client.get("/api/commands")

    assert response.status_code == 200
    names = [c["name"] for c in response.get_json()["commands"]]
    assert "create_order" in names
    assert len(names) == len(set(names))


def test_success_envelope(client, make_product):
    make_product(name="Lamp")

    response = client.post("/api/commands/list_products", json={"search": "lamp"})

    assert response.status_code == 200
    rows = payload_of(response.get_json())
    assert [r["name"] for r in rows] == ["Lamp"]


def test_empty_body_means_no_arguments(client, db_session):
    response = client.post("/api/commands/list_coupons")
    assert response.get_json() == {"content": "[]"}


def test_command_error_is_200_envelope(client, db_session):
    response = client.post("/api/commands/get_order", json={"id": "nope"})

    assert response.status_code == 200
    assert response.get_json() == {"content": "Error: No orders record matches id=nope", "error": True}


def test_unknown_command_is_envelope(client, db_session):
    response = client.post("/api/commands/format_disk", json={})
    assert response.get_json() == {"content": "Error: Unknown command: format_disk", "error": True}


def test_non_json_body(client, db_session):
    response = client.post("/api/commands/list_products", data="search=lamp", content_type="text/plain")
    assert response.status_code == 415


def test_malformed_json(client, db_session):
    response = client.post("/api/commands/list_products", data="{oops", content_type="application/json")
    assert response.status_code == 400


class TestAdminToken:
    def test_missing_header(self, client, admin_token, db_session):
        assert client.get("/api/commands").status_code == 401

    def test_wrong_token(self, client, admin_token, db_session):
        response = client.post("/api/commands/list_products", json={}, headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        assert response.get_json() == {"error": "Invalid token"}

    def test_right_token(self, client, admin_token, db_session):
        response = client.get("/api/commands", headers={"Authorization": f"Bearer {admin_token}"})
        assert response.status_code == 200

    def test_health_stays_open(self, client, admin_token, db_session):
        assert client.get("/health").status_code == 200


def test_cors_header_for_allowed_origin(client, db_session):
    response = client.get("/health", headers={"Origin": "http://localhost:5173"})
    assert response.headers.get("Access-Control-Allow-Origin") == "http://localhost:5173"

    other = client.get("/health", headers={"Origin": "https://evil.example"})
    assert "Access-Control-Allow-Origin" not in other.headers
