"""
Review Routes

Reviewer queue, summary, requester stats and decisions. Managers only.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from ..deps import get_review_service, require_reviewer_dep
from ...domain.enums import QueueBucket
from ...domain.models import ActorContext, QueueSummary, RequesterStats, RequestView, ReviewAnalytics
from ...services.review_service import ReviewService
from .schemas import DecisionBody, DecisionResponse

router = APIRouter()


@router.get("/queue", response_model=List[RequestView])
def get_queue(
    bucket: QueueBucket = Query(QueueBucket.ALL, description="Queue tab"),
    actor: ActorContext = Depends(require_reviewer_dep),
    service: ReviewService = Depends(get_review_service)
):
    """
    Requests visible to the reviewer, newest first
    
    The escalated flag is recomputed on every call.
    """
    return service.list_queue(actor, bucket)


@router.get("/summary", response_model=QueueSummary)
def get_summary(
    actor: ActorContext = Depends(require_reviewer_dep),
    service: ReviewService = Depends(get_review_service)
):
    """Counts per queue tab"""
    return service.summary(actor)


@router.get("/analytics", response_model=ReviewAnalytics)
def get_analytics(
    actor: ActorContext = Depends(require_reviewer_dep),
    service: ReviewService = Depends(get_review_service)
):
    """Requests per category and priority, average review time, pending High count"""
    return service.analytics(actor)


@router.get("/requesters", response_model=List[RequesterStats])
def get_requester_stats(
    actor: ActorContext = Depends(require_reviewer_dep),
    service: ReviewService = Depends(get_review_service)
):
    """Per-employee request counts"""
    return service.requester_stats(actor)


@router.post("/{request_id}/decision", response_model=DecisionResponse)
def decide(
    request_id: str,
    body: DecisionBody,
    actor: ActorContext = Depends(require_reviewer_dep),
    service: ReviewService = Depends(get_review_service)
):
    """
    Accept or reject a pending request
    
    Returns 409 REQUEST_ALREADY_DECIDED if another reviewer got there first.
    """
    decision = service.decide(request_id, body.outcome, actor.user_id, body.comment)
    warnings = [decision.notification_error] if decision.notification_error else []
    return DecisionResponse(
        request=decision.request,
        notification_id=decision.notification.notification_id if decision.notification else None,
        warnings=warnings
    )
