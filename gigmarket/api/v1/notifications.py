"""Notification inbox endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from gigmarket.api.deps import get_current_principal, get_inbox_service
from gigmarket.core.security import Principal
from gigmarket.schemas.notification import MarkReadRequest, NotificationListResponse, NotificationResponse
from gigmarket.services.inbox_service import InboxService

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    is_read: Optional[bool] = Query(None),
    event: Optional[str] = Query(None, alias="type", description="Notification event, e.g. job_accepted"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    principal: Principal = Depends(get_current_principal),
    service: InboxService = Depends(get_inbox_service),
):
    result = service.list_notifications(principal.id, is_read=is_read, event=event, page=page, limit=limit)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in result["notifications"]],
        unread_count=result["unread_count"],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
        pages=result["pages"],
    )


@router.get("/stats")
def notification_stats(
    principal: Principal = Depends(get_current_principal),
    service: InboxService = Depends(get_inbox_service),
):
    return {"success": True, "stats": service.get_stats(principal.id)}


@router.put("/mark-read")
def mark_many_read(
    payload: MarkReadRequest,
    principal: Principal = Depends(get_current_principal),
    service: InboxService = Depends(get_inbox_service),
):
    unread = service.mark_many_read(principal.id, payload.notification_ids)
    return {"success": True, "unread_count": unread}


@router.put("/mark-all-read")
def mark_all_read(
    principal: Principal = Depends(get_current_principal),
    service: InboxService = Depends(get_inbox_service),
):
    updated = service.mark_all_read(principal.id)
    return {"success": True, "updated": updated, "message": "All notifications marked as read"}


@router.put("/{notification_id}/read")
def mark_read(
    notification_id: str,
    principal: Principal = Depends(get_current_principal),
    service: InboxService = Depends(get_inbox_service),
):
    notification = service.mark_read(principal.id, notification_id)
    return {"success": True, "notification": NotificationResponse.model_validate(notification)}


@router.delete("/{notification_id}")
def delete_notification(
    notification_id: str,
    principal: Principal = Depends(get_current_principal),
    service: InboxService = Depends(get_inbox_service),
):
    service.delete_notification(principal.id, notification_id)
    return {"success": True, "message": "Notification deleted successfully"}
