"""Idempotency keys for checkout submissions.

A checkout retried with the same ``Idempotency-Key`` and the same payload is
answered with the stored confirmation instead of placing a second order. The
same key with a different payload is a 409. Keys are scoped per client and per
checkout route (and cart, for server-held carts) and expire after
``settings.idempotency_ttl_s``.
"""

import hashlib
import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.models.checkout_idempotency_key import CheckoutIdempotencyKey
from storefront.observability import log_event, metrics_store

IDEMPOTENCY_KEY_MAX_LENGTH = 255


@dataclass
class CheckoutReplay:
    order_id: uuid.UUID | None
    confirmation: dict[str, Any]


def normalize_idempotency_key(raw_key: str | None) -> str | None:
    if raw_key is None:
        return None

    key = raw_key.strip()
    if not key:
        metrics_store.increment("idempotency_invalid_key_total")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Idempotency-Key must not be empty"
        )
    if len(key) > IDEMPOTENCY_KEY_MAX_LENGTH:
        metrics_store.increment("idempotency_invalid_key_total")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Idempotency-Key exceeds max length {IDEMPOTENCY_KEY_MAX_LENGTH}",
        )
    return key


def checkout_scope(route: str, cart_id: str | None = None) -> str:
    return f"{route}#cart={cart_id}" if cart_id else route


def payload_fingerprint(payload: Any) -> str:
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _conflict(detail: str = "Idempotency key reused with different payload") -> HTTPException:
    metrics_store.increment("idempotency_conflict_total")
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)


def cart_changed_conflict() -> HTTPException:
    return _conflict("Idempotency key already used for an order; the cart has changed since")


def _lookup(
    db: Session, client_id: str, scope: str, idempotency_key: str
) -> CheckoutIdempotencyKey | None:
    return db.scalar(
        select(CheckoutIdempotencyKey).where(
            CheckoutIdempotencyKey.client_id == client_id,
            CheckoutIdempotencyKey.scope == scope,
            CheckoutIdempotencyKey.idempotency_key == idempotency_key,
        )
    )


def expire_stale_keys(db: Session, now: datetime | None = None) -> int:
    cutoff = now or datetime.now(timezone.utc)
    result = db.execute(
        delete(CheckoutIdempotencyKey).where(CheckoutIdempotencyKey.expires_at <= cutoff)
    )
    purged = int(result.rowcount or 0)
    if purged:
        db.commit()
        metrics_store.increment("idempotency_purged_total", purged)
    return purged


def find_replay(
    db: Session,
    *,
    client_id: str,
    scope: str,
    idempotency_key: str,
    request_payload: Any,
) -> CheckoutReplay | None:
    """Return the stored confirmation for a repeated key, or ``None`` for a fresh one."""
    expire_stale_keys(db)

    stored = _lookup(db, client_id, scope, idempotency_key)
    if stored is None:
        return None
    if stored.payload_hash != payload_fingerprint(request_payload):
        raise _conflict()

    metrics_store.increment("idempotency_replay_total")
    log_event("checkout_replayed", order_id=str(stored.order_id) if stored.order_id else None)
    return CheckoutReplay(order_id=stored.order_id, confirmation=stored.confirmation)


def remember_confirmation(
    db: Session,
    *,
    client_id: str,
    scope: str,
    idempotency_key: str,
    request_payload: Any,
    order_id: uuid.UUID,
    confirmation: dict[str, Any],
) -> bool:
    """Store the confirmation for ``idempotency_key``; returns whether it was stored.

    Called after the order is committed, so failures are logged and never raised.
    """
    db.add(
        CheckoutIdempotencyKey(
            client_id=client_id,
            scope=scope,
            idempotency_key=idempotency_key,
            payload_hash=payload_fingerprint(request_payload),
            order_id=order_id,
            confirmation=confirmation,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=settings.idempotency_ttl_s),
        )
    )
    try:
        db.commit()
    except IntegrityError:
        # A concurrent submission stored the same key first. Its row is kept and
        # later replays return its order; this request still reports its own.
        db.rollback()
        metrics_store.increment("idempotency_store_conflict_total")
        log_event(
            "idempotency_key_already_stored",
            order_id=str(order_id),
            level=logging.WARNING,
        )
        return False
    except SQLAlchemyError as exc:
        db.rollback()
        metrics_store.increment("idempotency_store_failure_total")
        log_event(
            "idempotency_key_store_failed",
            order_id=str(order_id),
            level=logging.WARNING,
            exc_info=exc,
        )
        return False

    metrics_store.increment("idempotency_store_total")
    return True
