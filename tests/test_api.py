from decimal import Decimal

from jose import jwt

from bakery.core.config import settings
from bakery.core.jwt import decode_access_token


def _create_item(client, headers, **overrides):
    payload = {"name": "Flour", "unit": "kg", "currentStock": 10, "minLevel": 2, "costPerUnit": 2.0}
    payload.update(overrides)
    response = client.post("/api/inventory", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def _create_product(client, headers, ingredients, price=80):
    response = client.post(
        "/api/products",
        json={"name": "Croissant", "price": price, "ingredients": ingredients},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_health_check(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"message": "Bakery Management API is running"}


def test_endpoints_require_a_token(client):
    assert client.get("/api/inventory/low-stock").status_code == 401


def test_first_user_is_admin_and_second_is_not(client, auth_headers):
    me = client.get("/api/auth/me", headers=auth_headers).json()
    assert me["is_admin"] is True

    response = client.post("/api/auth/register", json={"email": "clerk@bakery.com", "password": "Baguette!99"})
    assert response.status_code == 201
    assert response.json()["is_admin"] is False


def test_duplicate_email_is_rejected(client, auth_headers):
    response = client.post("/api/auth/register", json={"email": "owner@bakery.com", "password": "Another!Pass1"})
    assert response.status_code == 409


def test_inventory_responses_use_camel_case(client, auth_headers):
    item = _create_item(client, auth_headers)

    assert item["currentStock"] == 10
    assert item["minLevel"] == 2
    assert item["costPerUnit"] == 2.0


def test_manual_transaction_endpoint(client, auth_headers):
    item = _create_item(client, auth_headers)

    response = client.post(
        f"/api/inventory/{item['id']}/transaction",
        json={"quantity": 3, "type": "out", "reason": "Spillage"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["success"] is True

    item = client.get(f"/api/inventory/{item['id']}", headers=auth_headers).json()
    assert item["currentStock"] == 7

    reconcile = client.get(f"/api/inventory/{item['id']}/reconcile", headers=auth_headers).json()
    assert reconcile["consistent"] is True

    history = client.get("/api/inventory/transactions", params={"item_id": item["id"]}, headers=auth_headers).json()
    assert [t["type"] for t in history] == ["out", "adjustment"]
    assert history[0]["itemName"] == "Flour"


def test_negative_stock_rejection_maps_to_conflict(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "NEGATIVE_STOCK_POLICY", "reject")
    item = _create_item(client, auth_headers, currentStock=1)

    response = client.post(
        f"/api/inventory/{item['id']}/transaction",
        json={"quantity": 5, "type": "out"},
        headers=auth_headers,
    )

    assert response.status_code == 409
    assert response.json()["error"] == "insufficient_stock"


def test_low_stock_endpoint(client, auth_headers):
    _create_item(client, auth_headers, name="Yeast", currentStock=1, minLevel=3)
    _create_item(client, auth_headers, name="Flour", currentStock=50, minLevel=3)

    rows = client.get("/api/inventory/low-stock", headers=auth_headers).json()

    assert [r["name"] for r in rows] == ["Yeast"]
    assert rows[0]["shortageAmount"] == 2
    assert rows[0]["supplier"] == "Unknown"


def test_purchase_with_stock_sync_endpoint(client, auth_headers):
    item = _create_item(client, auth_headers)
    party = client.post("/api/parties", json={"name": "Mill & Co"}, headers=auth_headers).json()

    response = client.post(
        "/api/purchases/with-stock-sync",
        json={
            "supplierName": "Mill & Co",
            "partyId": party["id"],
            "items": [{"inventoryItemId": item["id"], "quantity": 5, "unitPrice": 3}],
        },
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    assert response.json()["totalAmount"] == 15
    assert len(response.json()["items"]) == 1

    item = client.get(f"/api/inventory/{item['id']}", headers=auth_headers).json()
    assert item["currentStock"] == 15
    assert item["costPerUnit"] == 2.3333

    balance = client.get(f"/api/parties/{party['id']}/balance", headers=auth_headers).json()
    assert balance["balance"] == 15


def test_purchase_with_unknown_item_returns_404_and_changes_nothing(client, auth_headers):
    item = _create_item(client, auth_headers)

    response = client.post(
        "/api/purchases/with-stock-sync",
        json={
            "supplierName": "Mill & Co",
            "items": [
                {"inventoryItemId": item["id"], "quantity": 5, "unitPrice": 3},
                {"inventoryItemId": 9999, "quantity": 1, "unitPrice": 1},
            ],
        },
        headers=auth_headers,
    )
    assert response.status_code == 404

    item = client.get(f"/api/inventory/{item['id']}", headers=auth_headers).json()
    assert item["currentStock"] == 10
    assert client.get("/api/purchases", headers=auth_headers).json() == []


def test_cost_calculation_and_update_cost(client, auth_headers):
    butter = _create_item(client, auth_headers, name="Butter", costPerUnit=2)
    almond = _create_item(client, auth_headers, name="Almond paste", costPerUnit=8)
    product = _create_product(
        client,
        auth_headers,
        [{"inventoryItemId": butter["id"], "quantity": 0.5}, {"inventoryItemId": almond["id"], "quantity": 0.25}],
    )
    assert [i["itemName"] for i in product["ingredients"]] == ["Butter", "Almond paste"]

    breakdown = client.get(
        f"/api/products/{product['id']}/cost-calculation",
        params={"quantity": 1},
        headers=auth_headers,
    ).json()
    assert breakdown == {
        "materialCost": 3.0,
        "laborCost": 50.0,
        "overheadCost": 7.95,
        "totalCost": 60.95,
        "perUnitCost": 60.95,
    }

    response = client.put(f"/api/products/{product['id']}/update-cost", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["success"] is True

    product = client.get(f"/api/products/{product['id']}", headers=auth_headers).json()
    assert product["cost"] == 60.95
    assert product["margin"] == 23.81


def test_cost_calculation_rejects_zero_quantity(client, auth_headers):
    product = _create_product(client, auth_headers, [])

    response = client.get(
        f"/api/products/{product['id']}/cost-calculation",
        params={"quantity": 0},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_input"


def test_schedule_and_process_production(client, auth_headers):
    flour = _create_item(client, auth_headers, name="Flour", currentStock=10)
    product = _create_product(client, auth_headers, [{"inventoryItemId": flour["id"], "quantity": 0.5}])

    created = client.post(
        "/api/production-schedule/with-cost-tracking",
        json={"productId": product["id"], "quantity": 5, "scheduledDate": "2026-10-19T06:00:00"},
        headers=auth_headers,
    )
    assert created.status_code == 201, created.text
    run_id = created.json()["schedule"]["id"]
    assert created.json()["costBreakdown"]["materialCost"] == 5.0

    response = client.post(
        f"/api/production-schedule/{run_id}/process",
        json={"actualQuantity": 5},
        headers=auth_headers,
    )
    assert response.status_code == 200, response.text
    assert response.json()["success"] is True

    flour = client.get(f"/api/inventory/{flour['id']}", headers=auth_headers).json()
    assert flour["currentStock"] == 7.5

    again = client.post(
        f"/api/production-schedule/{run_id}/process",
        json={"actualQuantity": 5},
        headers=auth_headers,
    )
    assert again.status_code == 409

    flour = client.get(f"/api/inventory/{flour['id']}", headers=auth_headers).json()
    assert flour["currentStock"] == 7.5


def test_process_unknown_run_returns_404(client, auth_headers):
    response = client.post(
        "/api/production-schedule/999/process",
        json={"actualQuantity": 1},
        headers=auth_headers,
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Production schedule not found"


def test_customer_account_and_supplier_payment(client, auth_headers):
    customer = client.post("/api/customers", json={"name": "Corner Cafe"}, headers=auth_headers).json()

    response = client.post(
        f"/api/customers/{customer['id']}/account",
        json={"amount": 50, "type": "debit", "description": "Weekly bread"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["balance"] == 50
    assert response.json()["totalSpent"] == 50

    party = client.post("/api/parties", json={"name": "Dairy Farm"}, headers=auth_headers).json()
    response = client.post(
        f"/api/parties/{party['id']}/payment",
        json={"amount": 20, "paymentMethod": "cash"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert response.json()["balance"] == -20

    expenses = client.get("/api/expenses", params={"category": "supplier_payment"}, headers=auth_headers).json()
    assert [e["title"] for e in expenses] == ["Payment to Dairy Farm"]


def test_settings_update_changes_costing(client, auth_headers):
    response = client.put(
        "/api/settings",
        json={"labor_cost_per_hour": "30", "overhead_percentage": "10"},
        headers=auth_headers,
    )
    assert response.status_code == 200, response.text
    assert response.json()["costing"]["laborRatePerHour"] == 30
    assert response.json()["costing"]["overheadPercent"] == 10
    assert response.json()["costing"]["productionHours"] == 2


def test_settings_update_requires_admin(client, auth_headers):
    client.post("/api/auth/register", json={"email": "clerk@bakery.com", "password": "Baguette!99"})
    token = client.post(
        "/api/auth/login",
        data={"username": "clerk@bakery.com", "password": "Baguette!99"},
    ).json()["access_token"]

    response = client.put(
        "/api/settings",
        json={"labor_cost_per_hour": "1"},
        headers={"Authorization": f"Bearer {token}"},
    )
    assert response.status_code == 403


def test_order_and_dashboard(client, auth_headers):
    product = _create_product(client, auth_headers, [], price=12.5)

    response = client.post(
        "/api/orders",
        json={"customerName": "Walk-in", "status": "completed", "items": [{"productId": product["id"], "quantity": 2}]},
        headers=auth_headers,
    )
    assert response.status_code == 201, response.text
    assert response.json()["totalAmount"] == 25

    recent = client.get("/api/dashboard/recent-orders", headers=auth_headers).json()
    assert [o["orderNumber"] for o in recent] == [response.json()["orderNumber"]]

    summary = client.get("/api/analytics/financial-summary", headers=auth_headers).json()
    assert summary["totalRevenue"] == 25
    assert Decimal(str(summary["netProfit"])) == Decimal("25")


def test_inventory_item_keeps_its_category(client, auth_headers):
    category = client.post("/api/categories", json={"name": "Dry goods"}, headers=auth_headers).json()
    item = _create_item(client, auth_headers, categoryId=category["id"])

    assert item["categoryId"] == category["id"]

    response = client.put(f"/api/inventory/{item['id']}", json={"categoryId": None}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["categoryId"] is None


def test_token_of_another_type_is_rejected(client, auth_headers):
    me = client.get("/api/auth/me", headers=auth_headers).json()
    token = jwt.encode(
        {"sub": str(me["id"]), "type": "reset"},
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )

    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_access_token_carries_user_claims(client, auth_headers):
    token = auth_headers["Authorization"].split(" ", 1)[1]
    claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])

    assert claims["email"] == "owner@bakery.com"
    assert claims["is_admin"] is True
    assert decode_access_token(token) == int(claims["sub"])
