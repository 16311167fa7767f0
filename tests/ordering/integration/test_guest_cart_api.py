"""Integration tests for the /guest-cart endpoints via TestClient."""

GUEST_ID = "guest_b4f2a7b0-3333-4e55-9c1d-000000000003"
GUEST = {"X-Guest-ID": GUEST_ID}


def _add(client, product_id="prod-mug", quantity=1, headers=GUEST):
    return client.post("/guest-cart/add", json={"productId": product_id, "quantity": quantity}, headers=headers)


class TestGuestIdentity:
    def test_new_guest_gets_an_id(self, client):
        response = client.get("/guest-cart")
        assert response.status_code == 200

        guest_id = response.headers["X-Guest-ID"]
        assert guest_id.startswith("guest_")
        assert response.json()["ownerId"] == guest_id

    def test_existing_guest_id_is_echoed(self, client):
        response = client.get("/guest-cart", headers=GUEST)
        assert response.headers["X-Guest-ID"] == GUEST_ID

    def test_minted_id_can_be_reused(self, client):
        guest_id = _add(client, headers={}).headers["X-Guest-ID"]

        response = client.get("/guest-cart/count", headers={"X-Guest-ID": guest_id})
        assert response.json() == {"count": 1}


class TestGuestCartOperations:
    def test_add_update_remove(self, client):
        assert _add(client, quantity=2).json()["totalItems"] == 2

        response = client.patch("/guest-cart/items/prod-mug", json={"quantity": 5}, headers=GUEST)
        assert response.json()["totalAmount"] == 62.5

        _add(client, product_id="prod-tee")
        response = client.delete("/guest-cart/items/prod-mug", headers=GUEST)
        assert [line["productId"] for line in response.json()["items"]] == ["prod-tee"]

    def test_clear(self, client):
        _add(client)
        response = client.delete("/guest-cart", headers=GUEST)
        assert response.json()["totalItems"] == 0

    def test_update_missing_cart(self, client):
        response = client.patch("/guest-cart/items/prod-mug", json={"quantity": 5}, headers=GUEST)
        assert response.status_code == 404


class TestMerge:
    def test_merge_into_user_cart(self, client):
        _add(client, quantity=2)
        client.post("/cart/add", json={"productId": "prod-mug", "quantity": 1}, headers={"X-User-ID": "user-001"})

        response = client.post("/guest-cart/merge", headers={**GUEST, "X-User-ID": "user-001"})
        assert response.status_code == 200
        assert response.json()["totalItems"] == 3

        assert client.get("/guest-cart/count", headers=GUEST).json() == {"count": 0}

    def test_merge_requires_user(self, client):
        _add(client)
        assert client.post("/guest-cart/merge", headers=GUEST).status_code == 401

    def test_merge_without_guest_cart(self, client):
        response = client.post("/guest-cart/merge", headers={**GUEST, "X-User-ID": "user-001"})
        assert response.status_code == 400

    def test_merge_without_guest_header(self, client):
        response = client.post("/guest-cart/merge", headers={"X-User-ID": "user-001"})
        assert response.status_code == 400


class TestGuestHeaderOwnership:
    USER_HEADERS = {"X-User-ID": "user-001"}
    SPOOFED = {"X-Guest-ID": "user-001"}

    def test_user_id_in_guest_header_rejected(self, client):
        client.post("/cart/add", json={"productId": "prod-mug", "quantity": 3}, headers=self.USER_HEADERS)

        response = client.get("/guest-cart", headers=self.SPOOFED)

        assert response.status_code == 400
        assert client.get("/cart/count", headers=self.USER_HEADERS).json() == {"count": 3}

    def test_user_cart_not_mutable_through_guest_routes(self, client):
        client.post("/cart/add", json={"productId": "prod-mug", "quantity": 3}, headers=self.USER_HEADERS)

        assert client.delete("/guest-cart", headers=self.SPOOFED).status_code == 400
        assert _add(client, headers=self.SPOOFED).status_code == 400
        assert client.get("/cart/count", headers=self.USER_HEADERS).json() == {"count": 3}

    def test_user_cart_not_mergeable(self, client):
        client.post("/cart/add", json={"productId": "prod-mug", "quantity": 3}, headers=self.USER_HEADERS)

        response = client.post("/guest-cart/merge", headers={**self.SPOOFED, "X-User-ID": "user-002"})

        assert response.status_code == 400
        assert client.get("/cart/count", headers=self.USER_HEADERS).json() == {"count": 3}
