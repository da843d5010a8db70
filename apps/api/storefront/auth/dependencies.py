from dataclasses import dataclass
from typing import Callable

from fastapi import Depends, Header, HTTPException, Request, status

from storefront.auth.jwt import JwtError, decode_jwt, jwt_http_exception
from storefront.config import allowed_roles_list, settings

TEST_BYPASS_USER_ID = "test-admin"


@dataclass
class AuthContext:
    user_id: str
    role: str


def _decode_bearer(authorization: str) -> AuthContext:
    if not authorization.startswith("Bearer "):
        raise jwt_http_exception("Missing bearer token")

    token = authorization.removeprefix("Bearer ").strip()
    try:
        claims = decode_jwt(token, settings.jwt_secret)
    except JwtError as err:
        raise jwt_http_exception("Invalid JWT") from err

    role = claims.get("role")
    user_id = claims.get("sub")
    if role not in allowed_roles_list() or not isinstance(user_id, str):
        raise jwt_http_exception("Invalid JWT claims")
    return AuthContext(user_id=user_id, role=role)


def get_auth_context(authorization: str | None = Header(default=None)) -> AuthContext:
    if authorization:
        return _decode_bearer(authorization)
    if settings.enable_test_auth_bypass:
        return AuthContext(user_id=TEST_BYPASS_USER_ID, role="ADMIN")
    raise jwt_http_exception("Missing bearer token")


def get_optional_auth_context(
    authorization: str | None = Header(default=None),
) -> AuthContext | None:
    """Shoppers check out anonymously; a token, when sent, must still be valid."""
    if not authorization:
        return None
    return _decode_bearer(authorization)


def require_roles(*roles: str) -> Callable[[AuthContext], AuthContext]:
    def dependency(auth: AuthContext = Depends(get_auth_context)) -> AuthContext:
        if auth.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return auth

    return dependency


require_admin = require_roles("ADMIN")


def client_identity(request: Request, auth: AuthContext | None) -> str:
    if auth is not None:
        return auth.user_id
    return request.client.host if request.client else "anonymous"
