"""User Notifications API - Requester notification endpoints"""
from fastapi import APIRouter, Depends, Query, Response, status

from ..deps import get_current_user_dep, get_notification_service, require_reviewer_dep
from ...domain.models import ActorContext, Notification
from ...services.notification_service import NotificationService
from .schemas import NotificationListResponse, SendNoticeBody, UnreadCountResponse

router = APIRouter()


@router.get("", response_model=NotificationListResponse)
def get_notifications(
    unread_only: bool = Query(False),
    actor: ActorContext = Depends(get_current_user_dep),
    service: NotificationService = Depends(get_notification_service)
):
    """Notifications for the current user, newest first"""
    items = service.list_notifications(actor.user_id, unread_only=unread_only)
    unread = sum(1 for n in items if not n.is_read) if not unread_only else len(items)
    return NotificationListResponse(items=items, unread_count=unread, total=len(items))


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    actor: ActorContext = Depends(get_current_user_dep),
    service: NotificationService = Depends(get_notification_service)
):
    """Just the unread notification count (for the bell badge)"""
    return UnreadCountResponse(unread_count=service.unread_count(actor.user_id))


@router.post("/{notification_id}/read", status_code=status.HTTP_204_NO_CONTENT)
def mark_read(
    notification_id: str,
    actor: ActorContext = Depends(get_current_user_dep),
    service: NotificationService = Depends(get_notification_service)
):
    """Mark one notification read. Idempotent; never overwrites read_at."""
    service.mark_read(notification_id, actor.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/send", response_model=Notification, status_code=status.HTTP_201_CREATED)
def send_notice(
    body: SendNoticeBody,
    actor: ActorContext = Depends(require_reviewer_dep),
    service: NotificationService = Depends(get_notification_service)
):
    """Send a notice, recognition or salary review to an employee"""
    return service.send_notice(actor.user_id, body.requester_id, body.type, body.message)
