import pytest
from fastapi import HTTPException

from storefront.auth.dependencies import (
    AuthContext,
    get_auth_context,
    get_optional_auth_context,
    require_admin,
)
from storefront.auth.jwt import JwtError, decode_jwt, issue_jwt
from storefront.config import settings


def _bearer(role: str, sub: str = "user-1", expires_in_s: int = 3600) -> str:
    return f"Bearer {issue_jwt({'sub': sub, 'role': role}, settings.jwt_secret, expires_in_s)}"


def test_get_auth_context_requires_bearer_when_bypass_disabled():
    original = settings.enable_test_auth_bypass
    settings.enable_test_auth_bypass = False
    try:
        with pytest.raises(HTTPException) as exc_info:
            get_auth_context(None)
        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Missing bearer token"
    finally:
        settings.enable_test_auth_bypass = original


def test_get_auth_context_allows_bypass_when_explicitly_enabled():
    auth = get_auth_context(None)
    assert auth.user_id == "test-admin"
    assert auth.role == "ADMIN"


def test_get_auth_context_decodes_token():
    auth = get_auth_context(_bearer("CUSTOMER", sub="customer-7"))
    assert auth == AuthContext(user_id="customer-7", role="CUSTOMER")


@pytest.mark.parametrize(
    "authorization",
    [
        "Token abc",
        "Bearer not-a-jwt",
        _bearer("SUPERUSER"),
    ],
)
def test_get_auth_context_rejects_bad_tokens(authorization):
    with pytest.raises(HTTPException) as exc_info:
        get_auth_context(authorization)
    assert exc_info.value.status_code == 401
    assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}


def test_optional_auth_context_allows_anonymous_checkout():
    assert get_optional_auth_context(None) is None
    assert get_optional_auth_context(_bearer("CUSTOMER")).role == "CUSTOMER"


def test_require_admin_rejects_customer():
    with pytest.raises(HTTPException) as exc_info:
        require_admin(AuthContext(user_id="customer-1", role="CUSTOMER"))
    assert exc_info.value.status_code == 403


def test_decode_jwt_rejects_tampering_and_expiry():
    token = issue_jwt({"sub": "admin-1", "role": "ADMIN"}, "secret-a")
    assert decode_jwt(token, "secret-a")["sub"] == "admin-1"

    with pytest.raises(JwtError, match="signature"):
        decode_jwt(token, "secret-b")

    expired = issue_jwt({"sub": "admin-1", "role": "ADMIN"}, "secret-a", expires_in_s=-10)
    with pytest.raises(JwtError, match="Expired"):
        decode_jwt(expired, "secret-a")
