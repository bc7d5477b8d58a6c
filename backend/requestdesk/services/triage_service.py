"""Triage Service - Request submission and classification

AI gateway first, keyword fallback on any failure. The category, priority and
insights persisted on a request always come from the same classifier run.
"""
from datetime import date
from typing import List, Optional

from ..domain.models import Request, TriageResult
from ..domain.enums import RequestKind, RequestStatus
from ..domain.errors import ValidationError
from ..engine.classifier import FallbackClassifier
from ..repositories.request_repo import RequestRepository, MongoRequestRepository
from .ai_gateway import AIGateway
from ..utils.idgen import generate_request_id
from ..utils.time import Clock, utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)

MAX_REASON_LENGTH = 5000


class TriageService:
    """Service for submitting and classifying requests"""

    def __init__(
        self,
        request_repo: Optional[RequestRepository] = None,
        gateway: Optional[AIGateway] = None,
        classifier: Optional[FallbackClassifier] = None,
        now_fn: Clock = utc_now
    ):
        self.request_repo = request_repo or MongoRequestRepository()
        self.gateway = gateway or AIGateway()
        self.classifier = classifier or FallbackClassifier()
        self.now_fn = now_fn

    def triage(
        self,
        text: str,
        requested_kind: RequestKind,
        requester_role: str = "employee"
    ) -> TriageResult:
        """
        Classify text; never fails

        Worst case the deterministic fallback output is returned.
        """
        try:
            outcome = self.gateway.analyze(text, requested_kind, requester_role)
        except Exception as e:
            logger.warning(f"AI gateway raised, using fallback: {e}")
            outcome = None

        if outcome is not None and outcome.ok:
            return outcome.result

        if outcome is not None:
            logger.info(
                f"AI triage unavailable ({outcome.reason}), using keyword fallback",
                extra={"source": "fallback"}
            )
        return self.classifier.classify(text, requested_kind)

    def submit_request(
        self,
        requester_id: str,
        request_kind: RequestKind,
        reason: str,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        requester_role: str = "employee"
    ) -> Request:
        """
        Validate, triage and persist a new Pending request

        Raises:
            ValidationError: input rejected before anything is stored
        """
        reason = (reason or "").strip()
        self._validate(requester_id, request_kind, reason, from_date, to_date)

        result = self.triage(reason, request_kind, requester_role)

        request = Request(
            request_id=generate_request_id(),
            requester_id=requester_id,
            request_kind=request_kind,
            from_date=from_date,
            to_date=to_date,
            reason=reason,
            category=result.category,
            priority=result.priority,
            status=RequestStatus.PENDING,
            created_at=self.now_fn(),
            insights=result.insights,
            triage_source=result.source,
        )
        self.request_repo.create_request(request)

        logger.info(
            f"Submitted request {request.request_id} as {request.category.value}/{request.priority.value}",
            extra={
                "request_id": request.request_id,
                "requester_id": requester_id,
                "source": result.source.value
            }
        )
        return request

    def list_my_requests(self, requester_id: str) -> List[Request]:
        """Requests submitted by the caller, newest first"""
        return self.request_repo.list_requests_by_requester(requester_id)

    def _validate(
        self,
        requester_id: str,
        request_kind: RequestKind,
        reason: str,
        from_date: Optional[date],
        to_date: Optional[date]
    ) -> None:
        if not requester_id:
            raise ValidationError("Requester is required")
        if not reason:
            raise ValidationError("Reason is required", details={"field": "reason"})
        if len(reason) > MAX_REASON_LENGTH:
            raise ValidationError(
                f"Reason must be at most {MAX_REASON_LENGTH} characters",
                details={"field": "reason", "length": len(reason)}
            )
        if request_kind == RequestKind.LEAVE_APPLICATION and from_date is None:
            raise ValidationError(
                "Leave applications need a start date",
                details={"field": "from_date"}
            )
        if from_date and to_date and to_date < from_date:
            raise ValidationError(
                "End date cannot be before start date",
                details={"from_date": from_date.isoformat(), "to_date": to_date.isoformat()}
            )
