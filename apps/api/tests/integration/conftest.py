import pytest

from storefront.auth.jwt import issue_jwt
from storefront.config import settings


@pytest.fixture
def auth_headers():
    def _headers(role: str, sub: str) -> dict[str, str]:
        token = issue_jwt({"sub": sub, "role": role}, settings.jwt_secret)
        return {"Authorization": f"Bearer {token}"}

    return {
        "admin": _headers("ADMIN", "admin-1"),
        "customer": _headers("CUSTOMER", "customer-1"),
    }


@pytest.fixture
def bypass_disabled():
    original = settings.enable_test_auth_bypass
    settings.enable_test_auth_bypass = False
    try:
        yield
    finally:
        settings.enable_test_auth_bypass = original


@pytest.fixture
def place_order(client, checkout_form_payload, cart_line_payload):
    def _place(**form_overrides) -> dict:
        response = client.post(
            "/api/v1/checkout",
            json={
                "cart": [cart_line_payload],
                "form": {**checkout_form_payload, **form_overrides},
            },
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _place
