import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

import storefront.models  # noqa: F401
from storefront.config import settings
from storefront.db.base import Base
from storefront.db.session import engine as app_engine
from storefront.db.session import get_db
from storefront.main import app
from storefront.observability import metrics_store
from storefront.services.store import reset_store


@pytest.fixture(scope="session", autouse=True)
def runtime_settings():
    original = (settings.testing, settings.enable_test_auth_bypass)
    settings.testing = True
    settings.enable_test_auth_bypass = True
    yield
    settings.testing, settings.enable_test_auth_bypass = original


@pytest.fixture(autouse=True)
def reset_state():
    Base.metadata.drop_all(bind=app_engine)
    Base.metadata.create_all(bind=app_engine)
    reset_store()
    metrics_store.reset()
    yield


@pytest.fixture
def db_session():
    with Session(app_engine, autoflush=False) as db:
        yield db


@pytest.fixture
def client(db_session):
    # Requests share the test's session so assertions see the same rows.
    app.dependency_overrides[get_db] = lambda: db_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def checkout_form_payload() -> dict:
    return {
        "name": "Asha Rao",
        "email": "asha@example.com",
        "phone": "+919800000001",
        "company": "Rao Interiors",
        "gstNumber": "29ABCDE1234F1Z5",
        "shippingAddress1": "12 MG Road",
        "shippingCity": "Bengaluru",
        "shippingState": "Karnataka",
        "shippingPostalCode": "560001",
        "billingSameAsShipping": True,
        "paymentType": "pay_on_delivery",
        "orderType": "purchase",
    }


@pytest.fixture
def cart_line_payload() -> dict:
    return {
        "productId": "p-chair",
        "name": "Steel Chair",
        "slug": "steel-chair",
        "price": 1500,
        "quantity": 2,
    }
