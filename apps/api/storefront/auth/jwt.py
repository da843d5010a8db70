import base64
import hashlib
import hmac
import json
import time
from typing import Any

from fastapi import HTTPException, status

_HEADER = {"alg": "HS256", "typ": "JWT"}


class JwtError(Exception):
    pass


def _encode_segment(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode().rstrip("=")


def _decode_segment(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _json_segment(value: dict[str, Any]) -> str:
    return _encode_segment(json.dumps(value, separators=(",", ":")).encode())


def _sign(signing_input: str, secret: str) -> str:
    digest = hmac.new(secret.encode(), signing_input.encode(), hashlib.sha256).digest()
    return _encode_segment(digest)


def issue_jwt(claims: dict[str, Any], secret: str, expires_in_s: int = 3600) -> str:
    issued_at = int(time.time())
    body = {**claims, "iat": issued_at, "exp": issued_at + expires_in_s}
    signing_input = f"{_json_segment(_HEADER)}.{_json_segment(body)}"
    return f"{signing_input}.{_sign(signing_input, secret)}"


def decode_jwt(token: str, secret: str) -> dict[str, Any]:
    parts = token.split(".")
    if len(parts) != 3:
        raise JwtError("Malformed JWT")

    header_segment, body_segment, signature = parts
    expected = _sign(f"{header_segment}.{body_segment}", secret)
    if not hmac.compare_digest(expected, signature):
        raise JwtError("Invalid JWT signature")

    try:
        claims = json.loads(_decode_segment(body_segment))
    except ValueError as exc:
        raise JwtError("Malformed JWT payload") from exc

    expires_at = claims.get("exp")
    if not isinstance(expires_at, int) or expires_at < int(time.time()):
        raise JwtError("Expired JWT")
    return claims


def jwt_http_exception(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )
