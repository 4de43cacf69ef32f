import json

import pytest
from sqlalchemy.exc import OperationalError

from factory_inventory.deps import get_inventory_store
from factory_inventory.domain import MAX_STOCK
from factory_inventory.main import app
from factory_inventory.services.inventory_store import InventoryStore


def test_root_and_health(client):
    assert client.get("/").json()["status"] == "running"
    assert client.get("/health").json()["status"] == "healthy"


def test_login_returns_token_and_user(client):
    response = client.post("/api/auth/login", json={"username": "owner", "password": "owner123"})

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["role"] == "owner"


def test_login_failure_is_generic(client):
    wrong_password = client.post("/api/auth/login", json={"username": "owner", "password": "nope"})
    unknown_user = client.post("/api/auth/login", json={"username": "ghost", "password": "nope"})

    assert wrong_password.status_code == 401
    assert unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json()


def test_me_reports_pricing_visibility(client, owner_headers, worker_headers):
    assert client.get("/api/auth/me", headers=owner_headers).json()["can_view_pricing"] is True
    assert client.get("/api/auth/me", headers=worker_headers).json()["can_view_pricing"] is False


def test_inventory_requires_login(client):
    response = client.get("/api/inventory/location-1")

    assert response.status_code == 401
    assert response.json()["error"] == "auth_failure"


def test_list_hides_prices_from_workers(client, owner_headers, worker_headers):
    owner_items = client.get("/api/inventory/location-1", headers=owner_headers).json()
    worker_items = client.get("/api/inventory/location-1", headers=worker_headers).json()

    assert {item["id"] for item in owner_items} == {"MAT001", "MAT002", "PRO001"}
    assert all(item["price"] is not None for item in owner_items)
    assert all(item["price"] is None for item in worker_items)


def test_list_filters(client, owner_headers):
    response = client.get(
        "/api/inventory/location-2", params={"category": "material", "search": "BLUE"}, headers=owner_headers
    )

    assert [item["id"] for item in response.json()] == ["MAT003"]


def test_list_unknown_location(client, owner_headers):
    assert client.get("/api/inventory/location-9", headers=owner_headers).status_code == 422


def test_create_item(client, worker_headers, material_draft):
    response = client.post("/api/inventory/", json=material_draft, headers=worker_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["id"] == "MAT004"
    assert body["type"] == "virgin"
    assert body["price"] is None


def test_create_product_ignores_type(client, owner_headers, material_draft):
    payload = {**material_draft, "category": "product", "item_name": "Bottle Caps"}

    body = client.post("/api/inventory/", json=payload, headers=owner_headers).json()

    assert body["id"] == "PRO002"
    assert body["type"] is None
    assert body["price"] == 1.1


def test_create_material_requires_type(client, owner_headers, material_draft):
    payload = {k: v for k, v in material_draft.items() if k != "type"}

    assert client.post("/api/inventory/", json=payload, headers=owner_headers).status_code == 422


def test_set_quantity_clamps_at_zero(client, owner_headers):
    response = client.patch("/api/inventory/MAT002/quantity", json={"stock": -10}, headers=owner_headers)

    assert response.status_code == 200
    assert response.json()["stock"] == 0


def test_set_quantity_unknown_item(client, owner_headers):
    response = client.patch("/api/inventory/MAT404/quantity", json={"stock": 1}, headers=owner_headers)

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_custom_adjust(client, owner_headers):
    added = client.post(
        "/api/inventory/MAT002/adjust", json={"amount": "5", "operation": "add"}, headers=owner_headers
    )
    removed = client.post(
        "/api/inventory/MAT002/adjust", json={"amount": 100, "operation": "remove"}, headers=owner_headers
    )

    assert added.json()["stock"] == 30
    assert removed.json()["stock"] == 0


def test_custom_adjust_rejects_non_positive_amount(client, owner_headers):
    response = client.post(
        "/api/inventory/MAT002/adjust", json={"amount": 0, "operation": "add"}, headers=owner_headers
    )

    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"


def test_quick_adjust(client, worker_headers):
    response = client.post(
        "/api/inventory/ASS001/quick-adjust", json={"amount": 10, "operation": "add"}, headers=worker_headers
    )

    assert response.json()["stock"] == 11


def test_quick_adjust_only_allows_fixed_amounts(client, worker_headers):
    response = client.post(
        "/api/inventory/ASS001/quick-adjust", json={"amount": 5, "operation": "add"}, headers=worker_headers
    )

    assert response.status_code == 422


def test_dashboard_stats(client, owner_headers, worker_headers):
    owner_stats = client.get("/api/dashboard/stats/location-1", headers=owner_headers).json()
    worker_stats = client.get("/api/dashboard/stats/location-1", headers=worker_headers).json()

    assert owner_stats["total_items"] == 3
    assert owner_stats["low_stock"] == 1
    assert owner_stats["out_of_stock"] == 0
    assert owner_stats["total_value"] == pytest.approx(5000 * 1.25 + 25 * 0.85 + 10000 * 0.15)
    assert worker_stats["total_value"] is None


def test_logout_invalidates_token(client, owner_headers):
    assert client.post("/api/auth/logout", headers=owner_headers).json() == {"success": True}
    assert client.post("/api/auth/logout", headers=owner_headers).json() == {"success": True}
    assert client.get("/api/auth/me", headers=owner_headers).status_code == 401


@pytest.mark.parametrize("price", [1e12, 1e400])
def test_create_rejects_price_past_column_limit(client, owner_headers, material_draft, price):
    # 1e400 serializes as Infinity, which the JSON parser accepts as a float
    response = client.post(
        "/api/inventory/",
        content=json.dumps({**material_draft, "price": price}),
        headers={**owner_headers, "Content-Type": "application/json"},
    )

    assert response.status_code == 422
    items = client.get("/api/inventory/location-1", headers=owner_headers).json()
    assert material_draft["item_name"] not in {item["item_name"] for item in items}


def test_create_rejects_stock_past_column_limit(client, owner_headers, material_draft):
    payload = {**material_draft, "stock": MAX_STOCK + 1}

    assert client.post("/api/inventory/", json=payload, headers=owner_headers).status_code == 422


def test_set_quantity_rejects_stock_past_column_limit(client, owner_headers):
    response = client.patch("/api/inventory/MAT002/quantity", json={"stock": 10 ** 20}, headers=owner_headers)

    assert response.status_code == 422
    items = client.get("/api/inventory/location-1", params={"search": "MAT002"}, headers=owner_headers).json()
    assert items[0]["stock"] == 25


def test_backend_outage_returns_503(client, owner_headers, session_factory):
    session = session_factory()

    def fail(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    session.execute = fail
    app.dependency_overrides[get_inventory_store] = lambda: InventoryStore(session)
    try:
        response = client.get("/api/inventory/location-1", headers=owner_headers)
    finally:
        del app.dependency_overrides[get_inventory_store]
        session.close()

    assert response.status_code == 503
    assert response.json()["error"] == "backend_unavailable"
    assert client.get("/api/inventory/location-1", headers=owner_headers).status_code == 200


def test_search_matches_accented_names(client, owner_headers, material_draft):
    payload = {**material_draft, "item_name": "Émulsion Additive"}
    client.post("/api/inventory/", json=payload, headers=owner_headers)

    response = client.get("/api/inventory/location-1", params={"search": "ÉMULSION"}, headers=owner_headers)

    assert [item["item_name"] for item in response.json()] == ["Émulsion Additive"]
