"""Tests de l'API produits"""

import pytest

from tradehub.core.dependencies import get_product_service
from tradehub.core.executor import ExecutorError, SqlAlchemyExecutor
from tradehub.main import app
from tradehub.models.product import Product
from tradehub.models.sharing_audit import ProductSharingAudit
from tradehub.services.product_service import ProductService


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_list_products_anonymous_sees_public(client, catalog):
    response = client.get("/api/v1/products")
    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == [
        "Echinacea Tea",
        "Face Masks",
        "Ice Pack",
    ]


def test_list_products_as_wholesaler(client, catalog, token_for):
    response = client.get("/api/v1/products", headers=token_for("W1", "wholesale"))
    assert response.status_code == 200
    data = response.json()
    assert [p["name"] for p in data] == ["Amoxicillin", "Bandages", "Cough Syrup"]
    assert data[0]["wholesaler_name"] == "Acme Wholesale"


def test_list_products_search_and_category(client, catalog, token_for):
    headers = token_for("A1", "admin")

    response = client.get("/api/v1/products", params={"search": "tea"}, headers=headers)
    assert [p["name"] for p in response.json()] == ["Echinacea Tea"]

    response = client.get(
        "/api/v1/products", params={"category": "First Aid"}, headers=headers
    )
    assert [p["name"] for p in response.json()] == ["Bandages", "Face Masks"]


def test_role_claim_is_case_sensitive(client, catalog, token_for):
    response = client.get("/api/v1/products", headers=token_for("A1", "ADMIN"))
    assert response.status_code == 200
    assert [p["name"] for p in response.json()] == [
        "Echinacea Tea",
        "Face Masks",
        "Ice Pack",
    ]


def test_invalid_token_rejected(client, catalog):
    response = client.get(
        "/api/v1/products", headers={"Authorization": "Bearer not-a-token"}
    )
    assert response.status_code == 401


def test_list_categories(client, catalog, token_for):
    response = client.get("/api/v1/products/categories", headers=token_for("R1", "retail"))
    assert response.status_code == 200
    assert response.json() == ["First Aid", "Cold & Flu", "Devices", "Herbal"]


def test_catalog_endpoints(client, catalog):
    wholesale = client.get("/api/v1/products/catalog/wholesale").json()
    retail = client.get("/api/v1/products/catalog/retail").json()

    assert [p["id"] for p in wholesale] == ["p-w1-shared"]
    assert [p["id"] for p in retail] == ["p-r2-retail"]


def test_get_product_invisible_is_404(client, catalog, token_for):
    response = client.get(
        "/api/v1/products/p-w1-shared", headers=token_for("I1", "individual")
    )
    assert response.status_code == 404


def test_get_product_logs_view_for_other_users(client, db, catalog, token_for):
    response = client.get(
        "/api/v1/products/p-w1-shared", headers=token_for("R1", "retail")
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Bandages"

    entry = db.query(ProductSharingAudit).one()
    assert entry.product_id == "p-w1-shared"
    assert entry.shared_by == "W1"
    assert entry.shared_with_role == "retail"
    assert entry.action == "view"


def test_get_own_product_does_not_log(client, db, catalog, token_for):
    response = client.get(
        "/api/v1/products/p-w1-private", headers=token_for("W1", "wholesale")
    )
    assert response.status_code == 200
    assert db.query(ProductSharingAudit).count() == 0


def test_create_requires_authentication(client, profiles):
    response = client.post(
        "/api/v1/products", json={"name": "Aspirin", "category": "Pain Relief"}
    )
    assert response.status_code == 401


def test_create_as_wholesaler_then_visible_to_retailer(client, profiles, token_for):
    response = client.post(
        "/api/v1/products",
        headers=token_for("W1", "wholesale"),
        json={
            "name": "Aspirin",
            "category": "Pain Relief",
            "stock": 100,
            "min_stock": 10,
            "buy_price": 0.5,
            "sell_price": 1.2,
            "is_public_product": False,
        },
    )
    assert response.status_code == 201
    created = response.json()
    assert created["is_wholesale_product"] is True
    assert created["wholesaler_id"] == "W1"
    assert created["status"] == "in-stock"

    listing = client.get("/api/v1/products", headers=token_for("R1", "retail")).json()
    assert created["id"] in [p["id"] for p in listing]

    listing = client.get("/api/v1/products", headers=token_for("I1", "individual")).json()
    assert created["id"] not in [p["id"] for p in listing]


def test_create_validation(client, token_for):
    response = client.post(
        "/api/v1/products",
        headers=token_for("R1", "retail"),
        json={"name": "Aspirin", "category": "Pain Relief", "stock": -1},
    )
    assert response.status_code == 422


def test_update_product(client, catalog, token_for):
    response = client.put(
        "/api/v1/products/p-public",
        headers=token_for("A1", "admin"),
        json={"sell_price": 9.99},
    )
    assert response.status_code == 200
    assert response.json()["sell_price"] == 9.99
    assert response.json()["name"] == "Face Masks"


def test_update_missing_product(client, catalog, token_for):
    response = client.put(
        "/api/v1/products/nope", headers=token_for("A1", "admin"), json={"name": "X"}
    )
    assert response.status_code == 404


def test_update_stock(client, catalog, token_for):
    response = client.patch(
        "/api/v1/products/p-w1-shared/stock",
        headers=token_for("W1", "wholesale"),
        json={"stock": 0},
    )
    assert response.status_code == 200
    assert response.json()["status"] == "out-of-stock"


def test_delete_product_is_soft(client, db, catalog, token_for):
    headers = token_for("A1", "admin")

    response = client.delete("/api/v1/products/p-public", headers=headers)
    assert response.status_code == 204

    assert client.get("/api/v1/products/p-public", headers=headers).status_code == 404
    assert db.query(Product).filter(Product.id == "p-public").count() == 1


def test_sharing_log_endpoint(client, db, catalog, token_for):
    response = client.post(
        "/api/v1/products/p-r2-retail/sharing-log",
        headers=token_for("R2", "retail"),
        json={"shared_with_role": "individual", "action": "order"},
    )
    assert response.status_code == 202
    assert db.query(ProductSharingAudit).filter_by(action="order").count() == 1


def test_sharing_log_rejects_unknown_action(client, catalog, token_for):
    response = client.post(
        "/api/v1/products/p-r2-retail/sharing-log",
        headers=token_for("R2", "retail"),
        json={"shared_with_role": "individual", "action": "delete"},
    )
    assert response.status_code == 422


def test_query_failure_maps_to_502(client, failing_executor):
    app.dependency_overrides[get_product_service] = lambda: ProductService(
        failing_executor("upstream unavailable")
    )

    response = client.get("/api/v1/products")

    assert response.status_code == 502
    assert response.json()["message"] == "upstream unavailable"


def test_view_survives_sharing_log_failure(client, db, catalog, token_for):
    class BrokenAuditExecutor(SqlAlchemyExecutor):
        def call(self, call):
            raise ExecutorError("audit table unavailable")

    app.dependency_overrides[get_product_service] = lambda: ProductService(
        BrokenAuditExecutor(db)
    )

    response = client.get(
        "/api/v1/products/p-w1-shared", headers=token_for("R1", "retail")
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Bandages"
    assert db.query(ProductSharingAudit).count() == 0
