import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from payments.api.routes import payment_router
from shared.http import register_error_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(payment_router)
    return TestClient(app)
