"""
Request Routes

Employee submission and "my requests" endpoints.
"""

from fastapi import APIRouter, Depends, status

from ..deps import get_current_user_dep, get_triage_service
from ...domain.models import ActorContext, Request
from ...services.triage_service import TriageService
from .schemas import RequestListResponse, SubmitRequestBody

router = APIRouter()


@router.post("", response_model=Request, status_code=status.HTTP_201_CREATED)
def submit_request(
    body: SubmitRequestBody,
    actor: ActorContext = Depends(get_current_user_dep),
    service: TriageService = Depends(get_triage_service)
):
    """
    Submit a request
    
    Always succeeds with some classification: when the AI service is
    unavailable the keyword fallback is used (lower confidence score).
    """
    return service.submit_request(
        requester_id=actor.user_id,
        request_kind=body.request_kind,
        reason=body.reason,
        from_date=body.from_date,
        to_date=body.to_date,
        requester_role=actor.role.value
    )


@router.get("/mine", response_model=RequestListResponse)
def list_my_requests(
    actor: ActorContext = Depends(get_current_user_dep),
    service: TriageService = Depends(get_triage_service)
):
    """List the caller's own requests, newest first"""
    items = service.list_my_requests(actor.user_id)
    return RequestListResponse(items=items, total=len(items))
