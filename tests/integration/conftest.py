import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api.auth import create_token
from storefront.api.errors import register_exception_handlers
from storefront.api.routes import cart_router, order_router, product_router


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(order_router)
    app.include_router(cart_router)
    app.include_router(product_router)
    return TestClient(app)


def bearer(user_id, role="user", name=None):
    return {"Authorization": f"Bearer {create_token(user_id, role=role, name=name)}"}


@pytest.fixture()
def customer():
    return bearer("cust-001", name="Asha Rao")


@pytest.fixture()
def other_customer():
    return bearer("cust-002", name="Ravi Kumar")


@pytest.fixture()
def admin():
    return bearer("admin-001", role="admin", name="Store Admin")
