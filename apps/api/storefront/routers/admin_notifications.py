import uuid

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from storefront.auth.dependencies import AuthContext, require_admin
from storefront.db.session import get_db
from storefront.schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
)
from storefront.services.notifications_service import (
    delete_notification,
    list_notifications,
    mark_all_as_read,
    mark_as_read,
    unread_count,
)

router = APIRouter(prefix="/api/v1/admin/notifications", tags=["admin-notifications"])


@router.get("", response_model=NotificationListResponse, summary="Latest notifications")
def list_notifications_endpoint(
    db: Session = Depends(get_db),
    _auth: AuthContext = Depends(require_admin),
) -> NotificationListResponse:
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(item) for item in list_notifications(db)],
        unread_count=unread_count(db),
    )


@router.post("/read-all", response_model=MarkAllReadResponse, summary="Mark all as read")
def mark_all_read_endpoint(
    db: Session = Depends(get_db),
    _auth: AuthContext = Depends(require_admin),
) -> MarkAllReadResponse:
    return MarkAllReadResponse(updated=mark_all_as_read(db))


@router.post(
    "/{notification_id}/read", response_model=NotificationResponse, summary="Mark as read"
)
def mark_read_endpoint(
    notification_id: uuid.UUID,
    db: Session = Depends(get_db),
    _auth: AuthContext = Depends(require_admin),
) -> NotificationResponse:
    return NotificationResponse.model_validate(mark_as_read(db, notification_id))


@router.delete(
    "/{notification_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete notification",
)
def delete_notification_endpoint(
    notification_id: uuid.UUID,
    db: Session = Depends(get_db),
    _auth: AuthContext = Depends(require_admin),
) -> Response:
    delete_notification(db, notification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
