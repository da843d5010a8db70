import uuid
from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from storefront.auth.dependencies import AuthContext, require_admin
from storefront.db.session import get_db
from storefront.schemas.order import (
    OrderDetailResponse,
    OrderResetResponse,
    OrdersListResponse,
    OrderStatusUpdateRequest,
    OrderSummary,
)
from storefront.services.orders_service import (
    delete_order,
    export_orders_csv,
    get_order_details,
    list_orders,
    reset_orders,
    update_order_status,
)

router = APIRouter(prefix="/api/v1/admin/orders", tags=["admin-orders"])

StatusFilter = Literal["all", "new", "processing", "completed", "cancelled"]
TypeFilter = Literal["all", "purchase", "rental"]


@router.get("", response_model=OrdersListResponse, summary="List orders for the back office")
def list_orders_endpoint(
    db: Session = Depends(get_db),
    status_filter: StatusFilter = Query(default="all", alias="status"),
    type_filter: TypeFilter = Query(default="all", alias="type"),
    search: str | None = Query(default=None, max_length=255),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100),
    _auth: AuthContext = Depends(require_admin),
) -> OrdersListResponse:
    items, total = list_orders(
        db,
        status_filter=status_filter,
        type_filter=type_filter,
        search=search,
        page=page,
        page_size=page_size,
    )
    return OrdersListResponse(
        items=[OrderSummary.model_validate(order) for order in items],
        page=page,
        page_size=page_size,
        total=total,
    )


@router.get("/export", summary="Export all orders as CSV", response_class=Response)
def export_orders_endpoint(
    db: Session = Depends(get_db),
    _auth: AuthContext = Depends(require_admin),
) -> Response:
    stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    return Response(
        content=export_orders_csv(db),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="orders-{stamp}.csv"'},
    )


@router.post("/reset", response_model=OrderResetResponse, summary="Delete every order")
def reset_orders_endpoint(
    db: Session = Depends(get_db),
    _auth: AuthContext = Depends(require_admin),
) -> OrderResetResponse:
    return OrderResetResponse(deleted=reset_orders(db))


@router.get("/{order_id}", response_model=OrderDetailResponse, summary="Get order with details")
def get_order_endpoint(
    order_id: uuid.UUID,
    db: Session = Depends(get_db),
    _auth: AuthContext = Depends(require_admin),
) -> OrderDetailResponse:
    return OrderDetailResponse.from_details(get_order_details(db, order_id))


@router.patch("/{order_id}/status", response_model=OrderSummary, summary="Change order status")
def update_status_endpoint(
    order_id: uuid.UUID,
    payload: OrderStatusUpdateRequest,
    db: Session = Depends(get_db),
    _auth: AuthContext = Depends(require_admin),
) -> OrderSummary:
    return OrderSummary.model_validate(update_order_status(db, order_id, payload.status))


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete one order",
)
def delete_order_endpoint(
    order_id: uuid.UUID,
    db: Session = Depends(get_db),
    _auth: AuthContext = Depends(require_admin),
) -> Response:
    delete_order(db, order_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
