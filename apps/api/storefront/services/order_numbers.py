"""Human-facing order numbers of the form ``<prefix>-<region>-ORD-<year>-<NNNN>``.

Two allocation strategies exist. ``latest`` reads the most recently created
order and increments its suffix; it is not transactional, so two checkouts
that read before either inserts get the same number. ``counter`` allocates
from a per prefix/region/year row in ``order_number_counters`` with an atomic
``UPDATE ... SET last_value = last_value + 1``.
"""

import logging
import re
from typing import Protocol

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.errors import OrderNumberUnavailableError
from storefront.models.order import Order
from storefront.models.order_number_counter import OrderNumberCounter
from storefront.observability import log_event, metrics_store

SEQUENCE_WIDTH = 4
_DIGITS = re.compile(r"\d+")


def format_order_number(prefix: str, region: str, year: int, sequence: int) -> str:
    return f"{prefix}-{region}-ORD-{year}-{sequence:0{SEQUENCE_WIDTH}d}"


def next_sequence_after(order_number: str | None) -> int:
    if not order_number:
        return 1

    suffix = order_number.split("-")[-1].strip()
    if not _DIGITS.fullmatch(suffix):
        return 1
    return int(suffix) + 1


def read_latest_order_number(db: Session) -> str | None:
    return db.scalar(select(Order.order_number).order_by(Order.created_at.desc()).limit(1))


class OrderNumberAllocator(Protocol):
    def allocate(self, db: Session, *, year: int) -> str: ...


class LatestOrderAllocator:
    def __init__(self, prefix: str, region: str) -> None:
        self.prefix = prefix
        self.region = region

    def allocate(self, db: Session, *, year: int) -> str:
        try:
            latest = read_latest_order_number(db)
        except SQLAlchemyError as exc:
            db.rollback()
            metrics_store.increment("order_number_read_failure_total")
            log_event(
                "order_number_read_failed_using_default",
                level=logging.WARNING,
                exc_info=exc,
            )
            latest = None

        return format_order_number(self.prefix, self.region, year, next_sequence_after(latest))


class CounterOrderAllocator:
    def __init__(self, prefix: str, region: str, max_attempts: int = 3) -> None:
        self.prefix = prefix
        self.region = region
        self.max_attempts = max_attempts

    def scope_for(self, year: int) -> str:
        return f"{self.prefix}-{self.region}-{year}"

    def allocate(self, db: Session, *, year: int) -> str:
        scope = self.scope_for(year)
        for _attempt in range(self.max_attempts):
            try:
                sequence = self._increment(db, scope)
            except IntegrityError:
                # Another checkout created the counter row first.
                db.rollback()
                continue
            except SQLAlchemyError as exc:
                db.rollback()
                metrics_store.increment("order_number_counter_failure_total")
                raise OrderNumberUnavailableError(str(exc)) from exc

            metrics_store.increment("order_number_counter_allocated_total")
            return format_order_number(self.prefix, self.region, year, sequence)

        metrics_store.increment("order_number_counter_failure_total")
        raise OrderNumberUnavailableError(f"Counter contention for scope {scope}")

    def _increment(self, db: Session, scope: str) -> int:
        result = db.execute(
            update(OrderNumberCounter)
            .where(OrderNumberCounter.scope == scope)
            .values(last_value=OrderNumberCounter.last_value + 1)
        )
        if not result.rowcount:
            db.add(OrderNumberCounter(scope=scope, last_value=1))
            db.commit()
            return 1

        sequence = db.scalar(
            select(OrderNumberCounter.last_value).where(OrderNumberCounter.scope == scope)
        )
        db.commit()
        return int(sequence)


def get_order_number_allocator() -> OrderNumberAllocator:
    if settings.order_number_strategy == "counter":
        return CounterOrderAllocator(settings.order_number_prefix, settings.order_number_region)
    return LatestOrderAllocator(settings.order_number_prefix, settings.order_number_region)
