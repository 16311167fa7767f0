import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from ordering.api.routes import cart_router, guest_cart_router, order_router
from shared.http import register_error_handlers



@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(cart_router)
    app.include_router(guest_cart_router)
    app.include_router(order_router)
    return TestClient(app)


@pytest.fixture()
def address_payload():
    return {
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "phone": "+44 20 7946 0000",
        "address": "12 Analytical Row",
        "city": "London",
        "state": "Greater London",
        "zipCode": "N1 9GU",
        "country": "GB",
    }
