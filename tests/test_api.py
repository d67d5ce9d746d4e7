from decimal import Decimal


def test_health_is_public(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_api_requires_user_header(client):
    r = client.get("/api/users/me")
    assert r.status_code == 401
    assert r.json()["detail"] == "Not authenticated"

    r = client.get("/api/users/me", headers={"X-User-Id": "abc"})
    assert r.status_code == 401


def test_unknown_and_disabled_users(client, factory, auth):
    r = client.get("/api/users/me", headers={"X-User-Id": "999"})
    assert r.status_code == 401

    disabled = factory.user(is_active=False)
    r = client.get("/api/users/me", headers=auth(disabled))
    assert r.status_code == 403


def test_me_expands_city_and_bar(client, factory, auth):
    user = factory.user(points=120)
    r = client.get("/api/users/me", headers=auth(user))
    assert r.status_code == 200
    body = r.json()
    assert body["points"] == 120
    assert body["role"] == "bartender"
    assert body["city"]["name"] == "Москва"
    assert body["bar"]["name"] == "Бар на Тверской"


def test_sale_flow(client, factory, auth):
    user = factory.user()
    product = factory.product()

    r = client.get("/api/sales/quote", params={"product_id": product.id, "quantity": 4}, headers=auth(user))
    assert r.status_code == 200
    assert r.json()["points"] == 100
    assert Decimal(r.json()["total_price"]) == Decimal("200")

    r = client.post(
        "/api/sales",
        json={"product_id": product.id, "quantity": 4, "proof_type": "receipt", "proof_file": "uploads/r1.jpg"},
        headers=auth(user),
    )
    assert r.status_code == 201
    assert r.json()["points"] == 100
    assert r.json()["product_name"] == product.name

    r = client.get("/api/sales", headers=auth(user))
    assert r.json()["total"] == 1

    r = client.get("/api/payments/balance", headers=auth(user))
    assert Decimal(r.json()["available_balance"]) == Decimal("100")
    assert r.json()["points"] == 100


def test_sale_invalid_quantity_is_domain_error(client, factory, auth):
    user = factory.user()
    product = factory.product()
    r = client.post("/api/sales", json={"product_id": product.id, "quantity": 0}, headers=auth(user))
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_input"


def test_cart_checkout_and_cancel(client, factory, auth):
    user = factory.user(points=1000)
    a = factory.prize(cost=300, quantity=5)
    b = factory.prize(cost=150, quantity=5)
    h = auth(user)

    client.post(f"/api/cart/items/{a.id}", json={"quantity": 2}, headers=h)
    r = client.post(f"/api/cart/items/{b.id}", headers=h)
    assert r.status_code == 200
    assert r.json()["total_cost"] == 750
    assert r.json()["total_items"] == 3

    r = client.post("/api/cart/checkout", json={"delivery_address": "Тверская, 1"}, headers=h)
    assert r.status_code == 201
    order = r.json()
    assert order["status"] == "pending"
    assert order["total_cost"] == 750
    assert order["can_be_cancelled"] is True

    assert client.get("/api/cart", headers=h).json()["items"] == []
    assert client.get("/api/users/me", headers=h).json()["points"] == 250

    r = client.post(f"/api/orders/{order['id']}/cancel", json={"reason": "Ошибся"}, headers=h)
    assert r.status_code == 200
    assert r.json()["status"] == "cancelled"
    assert client.get("/api/users/me", headers=h).json()["points"] == 1000

    r = client.post(f"/api/orders/{order['id']}/cancel", headers=h)
    assert r.status_code == 409
    assert r.json()["code"] == "invalid_transition"


def test_checkout_errors(client, factory, auth):
    user = factory.user(points=700)
    a = factory.prize(cost=300)
    b = factory.prize(cost=150)
    h = auth(user)

    r = client.post("/api/cart/checkout", headers=h)
    assert r.status_code == 400
    assert r.json()["code"] == "empty_cart"

    client.post(f"/api/cart/items/{a.id}", json={"quantity": 2}, headers=h)
    client.post(f"/api/cart/items/{b.id}", json={"quantity": 1}, headers=h)
    r = client.post("/api/cart/checkout", headers=h)
    assert r.status_code == 400
    assert r.json()["code"] == "insufficient_points"
    assert client.get("/api/cart", headers=h).json()["total_cost"] == 750


def test_cart_item_updates(client, factory, auth):
    user = factory.user()
    prize = factory.prize(cost=100, quantity=3)
    h = auth(user)

    r = client.put(f"/api/cart/items/{prize.id}", json={"quantity": 2}, headers=h)
    assert r.status_code == 404

    client.post(f"/api/cart/items/{prize.id}", headers=h)
    r = client.put(f"/api/cart/items/{prize.id}", json={"quantity": 0}, headers=h)
    assert r.status_code == 400
    assert r.json()["code"] == "invalid_quantity"

    r = client.put(f"/api/cart/items/{prize.id}", json={"quantity": 5}, headers=h)
    assert r.json()["code"] == "prize_unavailable"

    r = client.delete(f"/api/cart/items/{prize.id}", headers=h)
    assert r.json()["items"] == []
    r = client.delete(f"/api/cart/items/{prize.id}", headers=h)
    assert r.status_code == 200


def test_order_status_is_admin_only(client, factory, auth):
    user = factory.user(points=500)
    admin = factory.user(role="admin")
    prize = factory.prize(cost=100)

    client.post(f"/api/cart/items/{prize.id}", headers=auth(user))
    order = client.post("/api/cart/checkout", headers=auth(user)).json()

    r = client.post(f"/api/orders/{order['id']}/status", json={"status": "confirmed"}, headers=auth(user))
    assert r.status_code == 403
    assert r.json()["code"] == "forbidden"

    r = client.post(f"/api/orders/{order['id']}/status", json={"status": "shipped"}, headers=auth(admin))
    assert r.status_code == 409

    r = client.post(
        f"/api/orders/{order['id']}/status",
        json={"status": "confirmed", "comment": "Собираем"},
        headers=auth(admin),
    )
    assert r.status_code == 200
    assert [x["status"] for x in r.json()["history"]] == ["pending", "confirmed"]

    r = client.put(f"/api/orders/{order['id']}", json={"delivery_address": "Мира, 3"}, headers=auth(user))
    assert r.json()["delivery_address"] == "Мира, 3"
    assert r.json()["status"] == "confirmed"

    other = factory.user()
    assert client.get(f"/api/orders/{order['id']}", headers=auth(other)).status_code == 404
    assert client.get(f"/api/orders/{order['id']}", headers=auth(admin)).status_code == 200


def test_withdraw_flow(client, factory, auth):
    user = factory.user(earnings="1000")
    admin = factory.user(role="admin")
    h = auth(user)

    r = client.put("/api/admin/settings", json={"commission_rate": "0.05"}, headers=auth(admin))
    assert r.status_code == 200

    r = client.post("/api/payments/withdraw", json={"amount": 50, "phone": "79991234567"}, headers=h)
    assert r.status_code == 400
    assert r.json()["code"] == "amount_below_minimum"

    r = client.post("/api/payments/withdraw", json={"amount": 5000, "phone": "79991234567"}, headers=h)
    assert r.json()["code"] == "insufficient_funds"

    r = client.post("/api/payments/withdraw", json={"amount": 1000, "phone": "8 999 123 45 67"}, headers=h)
    assert r.status_code == 201
    wr = r.json()
    assert Decimal(wr["commission"]) == Decimal("50")
    assert Decimal(wr["amount_to_receive"]) == Decimal("950")

    balance = client.get("/api/payments/balance", headers=h).json()
    assert Decimal(balance["available_balance"]) == Decimal("0")

    r = client.post(f"/api/payments/withdrawals/{wr['id']}/status", json={"status": "failed"}, headers=h)
    assert r.status_code == 403

    r = client.post(f"/api/payments/withdrawals/{wr['id']}/cancel", headers=h)
    assert r.json()["status"] == "cancelled"
    balance = client.get("/api/payments/balance", headers=h).json()
    assert Decimal(balance["available_balance"]) == Decimal("1000")

    items = client.get("/api/payments/withdrawals", params={"status": "cancelled"}, headers=h).json()["items"]
    assert len(items) == 1


def test_gamification_endpoints(client, factory, auth):
    user = factory.user(points=150)
    factory.prize(cost=100, name="Кепка")
    factory.prize(cost=500, name="Шейкер")
    h = auth(user)

    prizes = client.get("/api/gamification/prizes", headers=h).json()
    assert [(p["name"], p["can_afford"]) for p in prizes] == [("Кепка", True), ("Шейкер", False)]

    board = client.get("/api/gamification/leaderboard", params={"period": "all"}, headers=h).json()
    assert board["user_rank"] == 1
    assert board["leaderboard"][0]["period_points"] == 150

    r = client.get("/api/gamification/leaderboard", params={"period": "yearly"}, headers=h)
    assert r.status_code == 422

    ach = client.get("/api/gamification/achievements", headers=h).json()
    assert ach["summary"]["total"] == 7

    stats = client.get("/api/gamification/stats", headers=h).json()
    assert stats["user"]["level"] == 1

    lottery = client.get("/api/gamification/lottery", headers=h).json()
    assert lottery["user_tickets"] == 1

    ledger = client.get("/api/gamification/ledger", headers=h).json()
    assert [(e["type"], e["signed_amount"]) for e in ledger] == [("bonus", 150)]


def test_admin_catalog_and_adjust(client, factory, auth):
    admin = factory.user(role="admin")
    user = factory.user(points=100)
    factory.product()  # бренд и категория
    h = auth(admin)

    r = client.post("/api/admin/prizes", json={"name": "Футболка", "cost": 400, "quantity": 3}, headers=h)
    assert r.status_code == 201
    prize_id = r.json()["id"]

    r = client.put(f"/api/admin/prizes/{prize_id}", json={"quantity": 10}, headers=h)
    assert r.json()["quantity"] == 10
    assert r.json()["cost"] == 400

    r = client.post(
        "/api/admin/products",
        json={
            "name": "Джин",
            "brand_id": 1,
            "category_id": 1,
            "bottle_price": "2400",
            "portions_per_bottle": "16",
            "points_mode": "per_portion",
            "points_per_portion": 10,
        },
        headers=h,
    )
    assert r.status_code == 201
    assert r.json()["points_mode"] == "per_portion"

    r = client.post("/api/admin/products", json={"name": "X", "brand_id": 99, "category_id": 1, "bottle_price": "1"}, headers=h)
    assert r.status_code == 404

    r = client.post("/api/admin/ledger/adjust", json={"user_id": user.id, "type": "penalty", "amount": 500}, headers=h)
    assert r.status_code == 400
    assert r.json()["code"] == "insufficient_points"

    r = client.post("/api/admin/ledger/adjust", json={"user_id": user.id, "type": "bonus", "amount": 50}, headers=h)
    assert r.status_code == 201
    assert client.get("/api/users/me", headers=auth(user)).json()["points"] == 150

    r = client.post("/api/admin/prizes", json={"name": "Y", "cost": 1}, headers=auth(user))
    assert r.status_code == 403


def test_admin_settings_roundtrip(client, factory, auth):
    admin = factory.user(role="admin")
    r = client.get("/api/admin/settings", headers=auth(admin))
    assert r.status_code == 200
    assert r.json()["order_delivery_days"] == 7

    r = client.put(
        "/api/admin/settings",
        json={"withdraw_min_amount": "500", "withdraw_max_amount": "100"},
        headers=auth(admin),
    )
    assert r.status_code == 422


def test_admin_reference_data(client, factory, auth):
    admin = factory.user(role="admin")
    user = factory.user()
    h = auth(admin)

    r = client.post("/api/admin/brands", json={"name": "Craft Gin Co"}, headers=h)
    assert r.status_code == 201
    brand_id = r.json()["id"]
    r = client.post("/api/admin/brands", json={"name": "craft gin co"}, headers=h)
    assert r.status_code == 400
    assert r.json()["code"] == "duplicate_name"
    r = client.put(f"/api/admin/brands/{brand_id}", json={"name": "Craft Gin"}, headers=h)
    assert r.json() == {"id": brand_id, "name": "Craft Gin"}

    r = client.post("/api/admin/categories", json={"name": "Джин"}, headers=h)
    assert r.status_code == 201
    category_id = r.json()["id"]
    assert [c["name"] for c in client.get("/api/admin/categories", headers=h).json()] == ["Джин"]

    r = client.post("/api/admin/cities", json={"name": "Казань"}, headers=h)
    assert r.status_code == 201
    city_id = r.json()["id"]

    r = client.post("/api/admin/bars", json={"city_id": city_id, "name": "Кремль", "address": "Баумана, 5"}, headers=h)
    assert r.status_code == 201
    assert r.json()["city"] == {"id": city_id, "name": "Казань"}
    r = client.post("/api/admin/bars", json={"city_id": 999, "name": "Нигде"}, headers=h)
    assert r.status_code == 404

    # продукт на только что созданных справочниках
    r = client.post(
        "/api/admin/products",
        json={"name": "Gin Tonic", "brand_id": brand_id, "category_id": category_id, "bottle_price": "1800"},
        headers=h,
    )
    assert r.status_code == 201

    for path, body in (
        ("/api/admin/brands", {"name": "B"}),
        ("/api/admin/categories", {"name": "C"}),
        ("/api/admin/cities", {"name": "D"}),
        ("/api/admin/bars", {"city_id": city_id, "name": "E"}),
    ):
        assert client.post(path, json=body, headers=auth(user)).status_code == 403
    assert client.get("/api/admin/brands", headers=auth(user)).status_code == 403


def test_public_reference_data_needs_no_user(client, factory):
    city, bar = factory.venue()
    active = factory.product()
    factory.product(is_active=False)

    r = client.get("/api/data/cities")
    assert r.status_code == 200
    assert r.json() == [{"id": city.id, "name": "Москва"}]

    r = client.get("/api/data/bars", params={"city_id": city.id})
    assert r.status_code == 200
    assert [b["name"] for b in r.json()] == ["Бар на Тверской"]
    assert r.json()[0]["city"]["name"] == "Москва"
    assert client.get("/api/data/bars", params={"city_id": 999}).json() == []

    r = client.get("/api/data/products")
    assert r.status_code == 200
    products = r.json()
    assert [p["id"] for p in products] == [active.id]
    assert products[0]["brand"]["name"] == "Partner Spirits"
    assert products[0]["category"]["name"] == "Виски"
    assert Decimal(products[0]["bottle_price"]) == Decimal("1000")

    # остальной /api по-прежнему закрыт
    assert client.get("/api/sales").status_code == 401


def test_read_single_withdrawal(client, factory, auth):
    owner = factory.user(earnings="1000")
    stranger = factory.user()
    admin = factory.user(role="admin")

    r = client.post("/api/payments/withdraw", json={"amount": 500, "phone": "79991234567"}, headers=auth(owner))
    assert r.status_code == 201
    wr_id = r.json()["id"]

    r = client.get(f"/api/payments/withdrawals/{wr_id}", headers=auth(owner))
    assert r.status_code == 200
    assert r.json()["id"] == wr_id
    assert r.json()["status"] == "pending"

    assert client.get(f"/api/payments/withdrawals/{wr_id}", headers=auth(stranger)).status_code == 404
    assert client.get(f"/api/payments/withdrawals/{wr_id}", headers=auth(admin)).status_code == 200
    assert client.get("/api/payments/withdrawals/999", headers=auth(owner)).status_code == 404
