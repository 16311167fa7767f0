"""Integration tests for the /orders endpoints via TestClient."""

import pytest

USER = {"X-User-ID": "user-001"}
OTHER = {"X-User-ID": "user-002"}
ADMIN = {"X-User-ID": "admin-001", "X-User-Role": "admin"}
GUEST = {"X-Guest-ID": "guest_0d1c7f3e-5555-4a0b-8c2e-000000000005"}


def _checkout(client, address, headers=USER, product_id="prod-mug", quantity=2):
    client.post("/cart/add", json={"productId": product_id, "quantity": quantity}, headers=headers)
    response = client.post(
        "/orders/checkout",
        json={"shippingAddress": address, "paymentMethod": "stripe"},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


class TestCheckout:
    def test_checkout_prices_order(self, client, address_payload):
        order = _checkout(client, address_payload)

        assert order["orderNumber"].startswith("ORD-")
        assert order["userId"] == "user-001"
        assert order["status"] == "pending"
        assert order["paymentStatus"] == "pending"
        assert order["paymentMethod"] == "stripe"
        assert order["subtotal"] == 25.0
        assert order["shippingCost"] == 10.0
        assert order["tax"] == 2.5
        assert order["totalAmount"] == 37.5
        assert order["shippingAddress"]["zipCode"] == "N1 9GU"

    def test_checkout_clears_cart(self, client, address_payload):
        _checkout(client, address_payload)
        assert client.get("/cart/count", headers=USER).json() == {"count": 0}

    def test_free_shipping_over_threshold(self, client, address_payload):
        order = _checkout(client, address_payload, product_id="prod-lamp", quantity=3)
        assert order["subtotal"] == 135.0
        assert order["shippingCost"] == 0.0
        assert order["totalAmount"] == 148.5

    def test_empty_cart_rejected(self, client, address_payload):
        client.get("/cart", headers=USER)
        response = client.post("/orders/checkout", json={"shippingAddress": address_payload}, headers=USER)
        assert response.status_code == 400
        assert "Cart is empty" in str(response.json())

    def test_incomplete_address_rejected(self, client, address_payload):
        client.post("/cart/add", json={"productId": "prod-mug"}, headers=USER)
        address_payload.pop("city")
        response = client.post("/orders/checkout", json={"shippingAddress": address_payload}, headers=USER)
        assert response.status_code == 422


class TestGuestCheckout:
    def test_guest_checkout(self, client, address_payload):
        client.post("/guest-cart/add", json={"productId": "prod-tee"}, headers=GUEST)

        response = client.post("/orders/guest-checkout", json={"shippingAddress": address_payload}, headers=GUEST)
        assert response.status_code == 201

        body = response.json()
        assert body["userId"] is None
        assert body["order"]["userId"] == GUEST["X-Guest-ID"]
        assert body["order"]["totalAmount"] == 37.5

    def test_guest_checkout_with_account(self, client, address_payload, accounts):
        client.post("/guest-cart/add", json={"productId": "prod-tee"}, headers=GUEST)

        response = client.post(
            "/orders/guest-checkout",
            json={
                "shippingAddress": address_payload,
                "createAccount": True,
                "username": "ada",
                "password": "engine-42",
            },
            headers=GUEST,
        )
        assert response.status_code == 201

        body = response.json()
        assert body["userId"] in accounts.accounts
        assert body["order"]["userId"] == body["userId"]

    def test_user_cart_cannot_be_checked_out_as_guest(self, client, address_payload):
        client.post("/cart/add", json={"productId": "prod-mug", "quantity": 3}, headers=USER)

        response = client.post(
            "/orders/guest-checkout",
            json={"shippingAddress": address_payload},
            headers={"X-Guest-ID": USER["X-User-ID"]},
        )

        assert response.status_code == 400
        assert client.get("/cart/count", headers=USER).json() == {"count": 3}

    def test_failed_account_checkout_can_be_retried(self, client, address_payload, accounts):
        client.post("/guest-cart/add", json={"productId": "prod-tee"}, headers=GUEST)
        accounts.register("ada", "ada@example.com", "engine-42")
        body = {"shippingAddress": address_payload, "createAccount": True, "username": "ada", "password": "engine-42"}

        assert client.post("/orders/guest-checkout", json=body, headers=GUEST).status_code == 409
        assert client.get("/guest-cart/count", headers=GUEST).json() == {"count": 1}

        body["username"] = "countess"
        address_payload["email"] = "countess@example.com"
        assert client.post("/orders/guest-checkout", json=body, headers=GUEST).status_code == 201

    def test_guest_checkout_without_header(self, client, address_payload):
        response = client.post("/orders/guest-checkout", json={"shippingAddress": address_payload})
        assert response.status_code == 400

    def test_short_password_rejected(self, client, address_payload):
        client.post("/guest-cart/add", json={"productId": "prod-tee"}, headers=GUEST)
        response = client.post(
            "/orders/guest-checkout",
            json={"shippingAddress": address_payload, "createAccount": True, "username": "ada", "password": "123"},
            headers=GUEST,
        )
        assert response.status_code == 422


class TestMyOrders:
    def test_page_envelope(self, client, address_payload):
        for _ in range(3):
            _checkout(client, address_payload)

        response = client.get("/orders/my-orders", params={"limit": 2}, headers=USER)
        assert response.status_code == 200

        body = response.json()
        assert body["total"] == 3
        assert body["page"] == 1
        assert body["limit"] == 2
        assert body["totalPages"] == 2
        assert len(body["items"]) == 2

    def test_only_own_orders(self, client, address_payload):
        _checkout(client, address_payload)
        _checkout(client, address_payload, headers=OTHER)

        body = client.get("/orders/my-orders", headers=USER).json()
        assert body["total"] == 1
        assert body["items"][0]["userId"] == "user-001"

    def test_unknown_sort_field_rejected(self, client):
        response = client.get("/orders/my-orders", params={"sortBy": "password"}, headers=USER)
        assert response.status_code == 400

    def test_get_own_order(self, client, address_payload):
        order = _checkout(client, address_payload)
        response = client.get(f"/orders/my-orders/{order['id']}", headers=USER)
        assert response.status_code == 200
        assert response.json()["orderNumber"] == order["orderNumber"]

    def test_get_someone_elses_order(self, client, address_payload):
        order = _checkout(client, address_payload)
        response = client.get(f"/orders/my-orders/{order['id']}", headers=OTHER)
        assert response.status_code == 403

    def test_get_unknown_order(self, client):
        response = client.get("/orders/my-orders/does-not-exist", headers=USER)
        assert response.status_code == 404

    def test_my_stats(self, client, address_payload):
        _checkout(client, address_payload)
        body = client.get("/orders/my-orders/stats", headers=USER).json()
        assert body["totalOrders"] == 1
        assert body["pendingOrders"] == 1
        assert body["totalRevenue"] == 37.5


class TestCancel:
    def test_cancel_pending_order(self, client, address_payload):
        order = _checkout(client, address_payload)
        response = client.patch(f"/orders/my-orders/{order['id']}/cancel", headers=USER)
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

    def test_cancel_someone_elses_order(self, client, address_payload):
        order = _checkout(client, address_payload)
        response = client.patch(f"/orders/my-orders/{order['id']}/cancel", headers=OTHER)
        assert response.status_code == 404

    def test_cancel_confirmed_order(self, client, address_payload):
        order = _checkout(client, address_payload)
        client.patch(f"/orders/{order['id']}/status", json={"status": "confirmed"}, headers=ADMIN)

        response = client.patch(f"/orders/my-orders/{order['id']}/cancel", headers=USER)
        assert response.status_code == 400
        assert "Only pending orders can be cancelled" in str(response.json())


class TestAdmin:
    @pytest.mark.parametrize("path", ["/orders", "/orders/stats/overview"])
    def test_requires_admin_role(self, client, path):
        assert client.get(path, headers=USER).status_code == 403

    def test_list_all(self, client, address_payload):
        _checkout(client, address_payload)
        _checkout(client, address_payload, headers=OTHER)

        body = client.get("/orders", headers=ADMIN).json()
        assert body["total"] == 2

    def test_filter_by_status(self, client, address_payload):
        first = _checkout(client, address_payload)
        _checkout(client, address_payload)
        client.patch(f"/orders/{first['id']}/status", json={"status": "confirmed"}, headers=ADMIN)

        body = client.get("/orders", params={"status": "confirmed"}, headers=ADMIN).json()
        assert [order["id"] for order in body["items"]] == [first["id"]]

    def test_lookup_by_number(self, client, address_payload):
        order = _checkout(client, address_payload)
        response = client.get(f"/orders/number/{order['orderNumber']}", headers=ADMIN)
        assert response.json()["id"] == order["id"]

    def test_lookup_by_id(self, client, address_payload):
        order = _checkout(client, address_payload)
        response = client.get(f"/orders/{order['id']}", headers=ADMIN)
        assert response.json()["orderNumber"] == order["orderNumber"]

    def test_status_update(self, client, address_payload):
        order = _checkout(client, address_payload)
        response = client.patch(
            f"/orders/{order['id']}/status",
            json={"status": "confirmed", "paymentStatus": "paid"},
            headers=ADMIN,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"
        assert response.json()["paymentStatus"] == "paid"

    def test_illegal_transition(self, client, address_payload):
        order = _checkout(client, address_payload)
        response = client.patch(f"/orders/{order['id']}/status", json={"status": "shipped"}, headers=ADMIN)
        assert response.status_code == 400

    def test_forced_transition(self, client, address_payload):
        order = _checkout(client, address_payload)
        response = client.patch(
            f"/orders/{order['id']}/status", json={"status": "shipped", "force": True}, headers=ADMIN
        )
        assert response.status_code == 200
        assert response.json()["status"] == "shipped"

    def test_unknown_status(self, client, address_payload):
        order = _checkout(client, address_payload)
        response = client.patch(f"/orders/{order['id']}/status", json={"status": "teleported"}, headers=ADMIN)
        assert response.status_code == 400

    def test_overview(self, client, address_payload):
        _checkout(client, address_payload)
        _checkout(client, address_payload, headers=OTHER)

        body = client.get("/orders/stats/overview", headers=ADMIN).json()
        assert body["totalOrders"] == 2
        assert body["totalRevenue"] == 75.0
        assert body["averageOrderValue"] == 37.5
        assert body["revenueByStatus"]["pending"] == 75.0
