"""
API Schemas

Request and response models for the request, review and notification endpoints.
"""

from datetime import date
from typing import List, Optional
from pydantic import BaseModel, Field

from ...domain.enums import NotificationType, RequestKind, ReviewOutcome
from ...domain.models import Notification, Request


# =============================================================================
# Requests
# =============================================================================

class SubmitRequestBody(BaseModel):
    """Request to submit a new employee request"""
    request_kind: RequestKind
    reason: str = Field(..., max_length=5000)
    from_date: Optional[date] = None
    to_date: Optional[date] = None


class RequestListResponse(BaseModel):
    """Response for the caller's own requests"""
    items: List[Request]
    total: int


# =============================================================================
# Reviews
# =============================================================================

class DecisionBody(BaseModel):
    """Request for accept/reject"""
    outcome: ReviewOutcome
    comment: Optional[str] = Field(None, max_length=2000)


class DecisionResponse(BaseModel):
    """Response after a decision; warnings list best-effort failures"""
    request: Request
    notification_id: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)


# =============================================================================
# Notifications
# =============================================================================

class SendNoticeBody(BaseModel):
    """Manager-initiated notice, recognition or salary review"""
    requester_id: str = Field(..., min_length=1)
    type: NotificationType
    message: str = Field(..., max_length=2000)


class NotificationListResponse(BaseModel):
    """List of notifications with metadata"""
    items: List[Notification]
    unread_count: int
    total: int


class UnreadCountResponse(BaseModel):
    """Just the unread count"""
    unread_count: int
