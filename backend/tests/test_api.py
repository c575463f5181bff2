from datetime import datetime
from types import SimpleNamespace

from fastapi.testclient import TestClient

from models.log import Log
from models.users import User
from routes.units import newest_first
from utils.tokenJWT import create_access_token


def _receive(client, seed, quantity=2, codes=("A", "B"), **extra):
    body = {
        "movement_type_id": seed.purchase_id,
        "product_id": seed.product_id,
        "quantity": quantity,
        "unit_cost": "100.00",
        "unit_codes": list(codes),
        "warehouse_id": seed.main_id,
    }
    body.update(extra)
    return client.post("/movements", json=body)


# ---- movements ----

def test_create_movement(client, seed, db):
    response = _receive(client, seed, quantity=3, codes=["IMEI-1"])
    assert response.status_code == 201
    data = response.json()
    assert data["product_id"] == seed.product_id
    assert data["kind"] == "INCOMING"
    assert data["quantity"] == 3
    assert data["resulting_quantity"] == 3
    assert len(data["unit_ids"]) == 3

    audit = db.query(Log).filter(Log.action == "MOVEMENT_CREATE").one()
    assert audit.status == "SUCCESS"
    assert audit.meta["id"] == data["movement_id"]


def test_codes_accepted_as_textarea(client, seed):
    response = _receive(client, seed, quantity=3, codes=[], unit_codes="X1\nX2, X3")
    assert response.status_code == 201
    units = client.get(f"/products/{seed.product_id}/units").json()
    assert [u["code"] for u in units] == ["X1", "X2", "X3"]


def test_validation_error_contract(client, seed, db):
    response = _receive(client, seed, unit_cost=None)
    assert response.status_code == 400
    assert response.json() == {
        "error": "MISSING_COST",
        "message": "Unit cost is required for incoming and outgoing movements",
        "details": {},
    }
    audit = db.query(Log).filter(Log.action == "MOVEMENT_CREATE").one()
    assert audit.status == "FAIL"
    assert audit.meta["error"] == "MISSING_COST"


def test_unknown_movement_type(client, seed):
    response = _receive(client, seed, movement_type_id=999)
    assert response.status_code == 404
    assert response.json()["error"] == "INVALID_MOVEMENT_TYPE"


def test_consistency_error_contract(client, seed):
    _receive(client, seed)
    response = client.post("/movements", json={
        "movement_type_id": seed.sale_id,
        "product_id": seed.product_id,
        "quantity": 2,
        "unit_cost": "100",
        "unit_codes": ["A", "NOPE"],
    })
    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "UNITS_NOT_FOUND"
    assert body["details"]["missing"] == ["NOPE"]
    assert client.get(f"/products/{seed.product_id}").json()["quantity"] == 2


def test_negative_stock_is_refused(client, seed):
    response = client.post("/movements", json={
        "movement_type_id": seed.sale_id,
        "product_id": seed.product_id,
        "quantity": 1,
        "unit_cost": "100",
    })
    assert response.status_code == 409
    assert response.json()["error"] == "NEGATIVE_RESULTING_QUANTITY"


def test_list_movement_types(client, seed):
    kinds = {t["name"]: t["kind"] for t in client.get("/movements/types").json()}
    assert kinds == {"Purchase": "INCOMING", "Sale": "OUTGOING", "Transfer": "LATERAL"}


def test_list_and_filter_movements(client, seed):
    _receive(client, seed, codes=["A", "B"])
    _receive(client, seed, codes=["Z-1", "Z-2"], supplier_id=seed.supplier_id)
    client.post("/movements", json={
        "movement_type_id": seed.transfer_id, "unit_codes": ["A"], "warehouse_id": seed.store_id,
    })

    page = client.get("/movements").json()
    assert page["total"] == 3
    assert page["items"][0]["kind"] == "LATERAL"
    assert page["items"][0]["unit_codes"] == ["A"]

    by_code = client.get("/movements", params={"q": "z-1"}).json()
    assert by_code["total"] == 1
    assert by_code["items"][0]["unit_codes"] == ["Z-1", "Z-2"]

    by_supplier = client.get("/movements", params={"supplier_id": seed.supplier_id}).json()
    assert by_supplier["total"] == 1

    paged = client.get("/movements", params={"page": 2, "page_size": 2}).json()
    assert len(paged["items"]) == 1


def test_bad_date_filter(client, seed):
    response = client.get("/movements", params={"date_from": "yesterday"})
    assert response.status_code == 400


# ---- products and units ----

def test_product_batch(client, seed, db):
    response = client.post("/products/batch", json={
        "brand_id": seed.brand_id,
        "model_id": seed.model_id,
        "storage_ids": [seed.storage_128_id, seed.storage_256_id],
        "ram_ids": [],
        "color_ids": [seed.blue_id],
        "cost": "90.00",
    })
    assert response.status_code == 201
    data = response.json()
    assert data["names"] == ["Samsung Galaxy A15 128GB Blue", "Samsung Galaxy A15 256GB Blue"]
    assert len(data["product_ids"]) == 2
    assert db.query(Log).filter(Log.action == "PRODUCT_BATCH_CREATE", Log.status == "SUCCESS").count() == 1


def test_product_batch_with_unknown_option(client, seed):
    response = client.post("/products/batch", json={"brand_id": seed.brand_id, "color_ids": [999]})
    assert response.status_code == 400
    assert response.json()["error"] == "CATALOG_REFERENCE_NOT_FOUND"


def test_create_single_product(client, seed):
    response = client.post("/products", json={"brand_id": seed.brand_id, "description": "Charger 25W"})
    assert response.status_code == 201
    assert response.json()["name"] == "Samsung Charger 25W"


def test_unknown_product(client, seed):
    response = client.get("/products/999")
    assert response.status_code == 404
    assert response.json()["error"] == "PRODUCT_NOT_FOUND"


def test_unit_locations(client, seed):
    _receive(client, seed, quantity=3, codes=["A", "B", "C"])
    client.post("/movements", json={
        "movement_type_id": seed.transfer_id, "unit_codes": ["C"], "warehouse_id": seed.store_id,
    })

    rows = client.get(f"/products/{seed.product_id}/units/locations").json()
    counts = {row["warehouse_name"]: row["active_unit_count"] for row in rows}
    assert counts == {"Main warehouse": 2, "Store 1": 1}

    in_store = client.get(f"/products/{seed.product_id}/units", params={"warehouse_id": seed.store_id}).json()
    assert [u["code"] for u in in_store] == ["C"]


def test_unit_timeline(client, seed):
    unit_id = _receive(client, seed, quantity=1, codes=["T-1"]).json()["unit_ids"][0]
    client.post("/movements", json={
        "movement_type_id": seed.transfer_id, "unit_codes": ["T-1"], "warehouse_id": seed.store_id,
        "comment": "to the shop",
    })

    timeline = client.get(f"/units/{unit_id}/timeline").json()
    assert timeline["code"] == "T-1"
    assert [e["movement_type_name"] for e in timeline["events"]] == ["Transfer", "Purchase"]
    assert timeline["events"][0]["comment"] == "to the shop"
    assert timeline["events"][1]["is_incoming"] is True
    assert timeline["events"][1]["user"] == "Stock Keeper"


def test_unknown_unit_uses_error_contract(client, seed):
    response = client.get("/units/999/timeline")
    assert response.status_code == 404
    assert response.json() == {
        "error": "UNIT_NOT_FOUND",
        "message": "Unit 999 not found",
        "details": {"unit_id": 999},
    }


def test_timeline_order_tolerates_undated_movements():
    undated = [SimpleNamespace(id=1, created_at=None), SimpleNamespace(id=2, created_at=None)]
    dated = SimpleNamespace(id=3, created_at=datetime(2024, 5, 1, 12, 0))
    assert [m.id for m in newest_first(undated + [dated])] == [3, 2, 1]


# ---- authentication ----

def test_bearer_token_resolves_user(client, seed):
    from main import app
    from utils.tokenJWT import get_current_user

    app.dependency_overrides.pop(get_current_user)
    token = create_access_token({"sub": seed.user_email})
    response = client.get("/movements/types", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


def test_role_without_stock_access_is_forbidden(client, seed, db):
    from main import app
    from utils.tokenJWT import get_current_user

    db.add(User(email="client@example.com", role="CLIENT"))
    db.commit()
    app.dependency_overrides.pop(get_current_user)
    token = create_access_token({"sub": "client@example.com"})
    response = client.get("/movements/types", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 403


def test_missing_token_is_rejected(db, seed):
    from main import app
    from database import get_db

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        response = TestClient(app).get("/movements/types")
    finally:
        app.dependency_overrides.clear()
    assert response.status_code in (401, 403)
