from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError

import storefront.services.order_numbers as order_numbers
from storefront.config import settings
from storefront.errors import OrderNumberUnavailableError
from storefront.models.order import Order, OrderStatus, OrderType
from storefront.models.order_number_counter import OrderNumberCounter
from storefront.observability import metrics_store
from storefront.services.order_numbers import (
    CounterOrderAllocator,
    LatestOrderAllocator,
    format_order_number,
    get_order_number_allocator,
    next_sequence_after,
)


def _order(order_number: str | None, created_at: datetime) -> Order:
    return Order(
        order_number=order_number,
        customer_name="Asha Rao",
        order_type=OrderType.PURCHASE,
        status=OrderStatus.NEW,
        products=[],
        created_at=created_at,
        updated_at=created_at,
    )


def test_format_order_number_pads_sequence_to_four_digits():
    assert format_order_number("AiRS", "IN", 2025, 8) == "AiRS-IN-ORD-2025-0008"
    assert format_order_number("AiRS", "IN", 2025, 12345) == "AiRS-IN-ORD-2025-12345"


@pytest.mark.parametrize(
    ("latest", "expected"),
    [
        ("AiRS-IN-ORD-2025-0007", 8),
        ("AiRS-IN-ORD-2025-0999", 1000),
        (None, 1),
        ("", 1),
        ("AiRS-IN-ORD-2025-abc", 1),
        ("AiRS-IN-ORD-2025-12a", 1),
        ("legacy-order", 1),
    ],
)
def test_next_sequence_after(latest, expected):
    assert next_sequence_after(latest) == expected


def test_latest_allocator_starts_at_one_without_orders(db_session):
    allocator = LatestOrderAllocator("AiRS", "IN")
    assert allocator.allocate(db_session, year=2025) == "AiRS-IN-ORD-2025-0001"


def test_latest_allocator_increments_most_recent_order(db_session):
    db_session.add_all(
        [
            _order("AiRS-IN-ORD-2025-0009", datetime(2025, 1, 1, tzinfo=timezone.utc)),
            _order("AiRS-IN-ORD-2025-0007", datetime(2025, 3, 1, tzinfo=timezone.utc)),
        ]
    )
    db_session.commit()

    allocator = LatestOrderAllocator("AiRS", "IN")
    assert allocator.allocate(db_session, year=2025) == "AiRS-IN-ORD-2025-0008"


def test_latest_allocator_keeps_counting_across_years(db_session):
    db_session.add(_order("AiRS-IN-ORD-2025-0041", datetime(2025, 12, 31, tzinfo=timezone.utc)))
    db_session.commit()

    allocator = LatestOrderAllocator("AiRS", "IN")
    assert allocator.allocate(db_session, year=2026) == "AiRS-IN-ORD-2026-0042"


def test_latest_allocator_falls_back_to_first_number_when_read_fails(db_session, monkeypatch):
    def failing_read(_db):
        raise OperationalError("SELECT", {}, Exception("db down"))

    monkeypatch.setattr(order_numbers, "read_latest_order_number", failing_read)

    allocator = LatestOrderAllocator("AiRS", "IN")
    assert allocator.allocate(db_session, year=2025) == "AiRS-IN-ORD-2025-0001"
    assert metrics_store.snapshot().counters["order_number_read_failure_total"] == 1


def test_counter_allocator_allocates_distinct_numbers(db_session):
    allocator = CounterOrderAllocator("AiRS", "IN")

    numbers = [allocator.allocate(db_session, year=2025) for _ in range(3)]

    assert numbers == [
        "AiRS-IN-ORD-2025-0001",
        "AiRS-IN-ORD-2025-0002",
        "AiRS-IN-ORD-2025-0003",
    ]
    counter = db_session.get(OrderNumberCounter, "AiRS-IN-2025")
    assert counter is not None
    assert counter.last_value == 3


def test_counter_allocator_restarts_each_year(db_session):
    allocator = CounterOrderAllocator("AiRS", "IN")
    allocator.allocate(db_session, year=2025)
    allocator.allocate(db_session, year=2025)

    assert allocator.allocate(db_session, year=2026) == "AiRS-IN-ORD-2026-0001"


def test_counter_allocator_raises_when_counter_unavailable(db_session, monkeypatch):
    allocator = CounterOrderAllocator("AiRS", "IN")

    def failing_increment(_db, _scope):
        raise SQLAlchemyError("counter table missing")

    monkeypatch.setattr(allocator, "_increment", failing_increment)

    with pytest.raises(OrderNumberUnavailableError) as exc_info:
        allocator.allocate(db_session, year=2025)
    assert exc_info.value.retryable is True
    assert metrics_store.snapshot().counters["order_number_counter_failure_total"] == 1


def test_get_order_number_allocator_follows_settings():
    original = settings.order_number_strategy
    try:
        settings.order_number_strategy = "counter"
        assert isinstance(get_order_number_allocator(), CounterOrderAllocator)
        settings.order_number_strategy = "latest"
        assert isinstance(get_order_number_allocator(), LatestOrderAllocator)
    finally:
        settings.order_number_strategy = original
