"""Domain Models - Pydantic schemas for all entities"""
from datetime import date, datetime
from typing import Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from .enums import (
    RequestKind, RequestCategory, Priority, RequestStatus, SuggestedAction,
    RiskLevel, TriageSource, NotificationType, UserRole
)


MAX_INTENT_SIGNALS = 10


# ============================================================================
# Identity
# ============================================================================

class ActorContext(BaseModel):
    """Current caller, as asserted by the upstream identity gateway"""
    model_config = ConfigDict(extra="forbid")

    user_id: str = Field(..., description="Opaque user identifier")
    role: UserRole = Field(default=UserRole.EMPLOYEE, description="Caller role")
    department: Optional[str] = Field(None, description="Department, used to scope reviewer queues")

    @property
    def is_reviewer(self) -> bool:
        return self.role == UserRole.MANAGER


class RequesterProfile(BaseModel):
    """Profile snapshot joined onto requests for reviewers"""
    model_config = ConfigDict(extra="ignore")

    user_id: str
    full_name: str = "Unknown"
    email: str = ""
    department: Optional[str] = None
    role: UserRole = UserRole.EMPLOYEE


# ============================================================================
# Insights
# ============================================================================

def normalize_intent_signals(signals: List[str]) -> List[str]:
    """Strip, drop empties, deduplicate keeping first occurrence, cap length"""
    seen = set()
    result = []
    for signal in signals:
        text = str(signal).strip()
        if not text or text in seen:
            continue
        seen.add(text)
        result.append(text)
        if len(result) >= MAX_INTENT_SIGNALS:
            break
    return result


class Insights(BaseModel):
    """Explanation and decision-support bundle attached to every request"""
    model_config = ConfigDict(extra="ignore")

    category_reason: str
    priority_reason: str
    intent_signals: List[str] = Field(default_factory=list)
    confidence_score: float = Field(..., ge=0, le=100)
    suggested_action: SuggestedAction
    risk_level: RiskLevel
    business_impact: str

    @field_validator("intent_signals")
    @classmethod
    def _normalize_signals(cls, value: List[str]) -> List[str]:
        return normalize_intent_signals(value)


class TriageResult(BaseModel):
    """Category, priority and insights produced together by one classifier"""
    category: RequestCategory
    priority: Priority
    insights: Insights
    source: TriageSource
    model: Optional[str] = Field(None, description="Upstream model variant when source is ai")


class AdapterSuccess(BaseModel):
    """AI gateway produced a validated classification"""
    ok: bool = True
    result: TriageResult


class AdapterFailure(BaseModel):
    """AI gateway could not produce a trustworthy classification"""
    ok: bool = False
    reason: str
    attempts: List[str] = Field(default_factory=list, description="Model variants that were tried")


AdapterResult = Union[AdapterSuccess, AdapterFailure]


# ============================================================================
# Requests
# ============================================================================

class Request(BaseModel):
    """Employee request with its triage stamp and review state"""
    model_config = ConfigDict(extra="ignore")

    request_id: str = Field(..., description="Unique request ID")
    requester_id: str
    request_kind: RequestKind
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    reason: str
    category: RequestCategory
    priority: Priority
    status: RequestStatus = Field(default=RequestStatus.PENDING)
    created_at: datetime
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    manager_comment: Optional[str] = None
    insights: Insights
    triage_source: TriageSource = Field(default=TriageSource.FALLBACK)

    @field_serializer("from_date", "to_date")
    def _serialize_date(self, value: Optional[date]) -> Optional[str]:
        # BSON has no plain date type
        return value.isoformat() if value else None

    @model_validator(mode="after")
    def _check_invariants(self) -> "Request":
        if self.from_date and self.to_date and self.to_date < self.from_date:
            raise ValueError("to_date must not precede from_date")
        reviewed = self.reviewed_at is not None and self.reviewed_by is not None
        if self.status == RequestStatus.PENDING and (self.reviewed_at or self.reviewed_by):
            raise ValueError("pending request cannot carry review fields")
        if self.status != RequestStatus.PENDING and not reviewed:
            raise ValueError("decided request must carry reviewed_at and reviewed_by")
        return self


class RequestView(BaseModel):
    """Request as surfaced to reviewers, with derived fields"""
    request: Request
    requester: RequesterProfile
    escalated: bool = False


class ReviewDecision(BaseModel):
    """Outcome of a successful decide call"""
    request: Request
    notification: Optional["Notification"] = None
    notification_error: Optional[str] = Field(
        None, description="Set when the status changed but the notification could not be stored"
    )


class RequesterStats(BaseModel):
    """Per-requester request counts for managers"""
    requester: RequesterProfile
    total_requests: int = 0
    accepted: int = 0
    rejected: int = 0
    pending: int = 0


class QueueSummary(BaseModel):
    """Reviewer queue counts"""
    emergency: int = 0
    pending: int = 0
    not_necessary: int = 0
    accepted: int = 0
    rejected: int = 0
    total: int = 0
    escalated: int = 0


class ReviewAnalytics(BaseModel):
    """Reviewer analytics: volume by category and priority, turnaround, bottlenecks"""
    by_category: Dict[str, int] = Field(default_factory=dict)
    by_priority: Dict[str, int] = Field(
        default_factory=lambda: {p.value: 0 for p in Priority},
        description="Always lists High, Medium and Low"
    )
    reviewed_count: int = Field(0, description="Requests with a decision")
    avg_review_hours: float = Field(0.0, description="Mean of reviewed_at - created_at, one decimal; 0 when nothing is decided")
    high_priority_pending: int = Field(0, description="Bottleneck indicator")


# ============================================================================
# Notifications
# ============================================================================

class Notification(BaseModel):
    """Notification addressed to a requester"""
    model_config = ConfigDict(extra="ignore")

    notification_id: str = Field(..., description="Unique notification ID")
    requester_id: str = Field(..., description="User who receives the notification")
    type: NotificationType
    title: str
    message: str
    created_by: Optional[str] = Field(None, description="Who triggered the notification")
    created_at: datetime
    read_at: Optional[datetime] = None
    request_id: Optional[str] = Field(None, description="Related request, for decision notifications")

    @property
    def is_read(self) -> bool:
        return self.read_at is not None


ReviewDecision.model_rebuild()

