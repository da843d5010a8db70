from fastapi import HTTPException, status

from storefront.models.order import OrderStatus

ORDER_STATE_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.NEW: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}


def ensure_valid_transition(current: OrderStatus, next_status: OrderStatus) -> None:
    if next_status == current:
        return

    allowed = ORDER_STATE_TRANSITIONS.get(current, set())
    if next_status not in allowed:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Invalid state transition: {current.value} -> {next_status.value}",
        )
