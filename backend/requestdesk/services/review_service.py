"""Review Service - Manager decisions and reviewer queues"""
from typing import Dict, List, Optional

from ..domain.models import (
    ActorContext, QueueSummary, Request, RequesterStats,
    RequestView, ReviewAnalytics, ReviewDecision
)
from ..domain.enums import Priority, QueueBucket, RequestStatus, ReviewOutcome, UserRole
from ..domain.errors import NotificationDispatchError, RequestAlreadyDecidedError, RequestNotFoundError
from ..engine.escalation import is_escalated
from ..engine.lifecycle import INITIAL_STATUS, assert_transition
from ..repositories.request_repo import RequestRepository, MongoRequestRepository
from .directory_service import DirectoryService
from .notification_service import NotificationService
from ..config.settings import settings
from ..utils.time import Clock, elapsed_since, utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)


def _in_bucket(request: Request, bucket: QueueBucket) -> bool:
    pending = request.status == RequestStatus.PENDING
    if bucket == QueueBucket.EMERGENCY:
        return pending and request.priority == Priority.HIGH
    if bucket == QueueBucket.PENDING:
        return pending and request.priority == Priority.MEDIUM
    if bucket == QueueBucket.NOT_NECESSARY:
        return pending and request.priority == Priority.LOW
    if bucket == QueueBucket.ACCEPTED:
        return request.status == RequestStatus.ACCEPTED
    if bucket == QueueBucket.REJECTED:
        return request.status == RequestStatus.REJECTED
    return True


class ReviewService:
    """Service for reviewer decisions and read-time queue views"""

    def __init__(
        self,
        request_repo: Optional[RequestRepository] = None,
        notification_service: Optional[NotificationService] = None,
        directory: Optional[DirectoryService] = None,
        now_fn: Clock = utc_now,
        escalation_hours: Optional[int] = None
    ):
        self.request_repo = request_repo or MongoRequestRepository()
        self.directory = directory or DirectoryService()
        self.notification_service = notification_service or NotificationService(directory=self.directory)
        self.now_fn = now_fn
        self.escalation_hours = settings.escalation_hours if escalation_hours is None else escalation_hours

    # =========================================================================
    # Decisions
    # =========================================================================

    def decide(
        self,
        request_id: str,
        outcome: ReviewOutcome,
        reviewer_id: str,
        comment: Optional[str] = None
    ) -> ReviewDecision:
        """
        Accept or reject a pending request

        The status change is a single compare-and-set on status=Pending, so
        of several concurrent reviewers exactly one wins. The notification is
        best-effort: if it cannot be stored the decision still stands and the
        failure is reported on the returned ReviewDecision.

        Raises:
            RequestNotFoundError: unknown request
            RequestAlreadyDecidedError: request is no longer Pending
        """
        request = self.request_repo.get_request(request_id)
        if request is None:
            raise RequestNotFoundError(f"Request {request_id} not found", details={"request_id": request_id})

        new_status = assert_transition(request_id, request.status, outcome)
        comment = (comment or "").strip() or None
        reviewed_at = self.now_fn()

        won = self.request_repo.update_request_status(
            request_id,
            expected_status=INITIAL_STATUS,
            new_status=new_status,
            reviewer_id=reviewer_id,
            comment=comment,
            reviewed_at=reviewed_at
        )
        if not won:
            current = self.request_repo.get_request(request_id)
            if current is None:
                raise RequestNotFoundError(f"Request {request_id} not found", details={"request_id": request_id})
            raise RequestAlreadyDecidedError(
                f"Request {request_id} was already {current.status.value.lower()}",
                details={"request_id": request_id, "status": current.status.value}
            )

        updated = request.model_copy(update={
            "status": new_status,
            "reviewed_by": reviewer_id,
            "reviewed_at": reviewed_at,
            "manager_comment": comment,
        })
        logger.info(
            f"Request {request_id} {new_status.value.lower()} by {reviewer_id}",
            extra={"request_id": request_id, "reviewer_id": reviewer_id, "outcome": outcome.value}
        )

        decision = ReviewDecision(request=updated)
        try:
            decision.notification = self.notification_service.notify_decision(
                updated, outcome, reviewer_id, comment
            )
        except NotificationDispatchError as e:
            logger.warning(
                f"Decision recorded but notification failed: {e.message}",
                extra={"request_id": request_id, "requester_id": updated.requester_id}
            )
            decision.notification_error = e.message
        return decision

    # =========================================================================
    # Queue views
    # =========================================================================

    def _visible_requests(self, actor: ActorContext) -> List[RequestView]:
        """All requests joined to requester profiles, scoped to the reviewer's department"""
        requests = self.request_repo.list_all_requests()
        profiles = self.directory.resolve_many(r.requester_id for r in requests)

        views = []
        for request in requests:
            requester = profiles[request.requester_id]
            if actor.department and requester.department != actor.department:
                continue
            views.append(RequestView(
                request=request,
                requester=requester,
                escalated=is_escalated(request, self.now_fn, self.escalation_hours),
            ))

        views.sort(key=lambda v: v.request.created_at, reverse=True)
        return views

    def list_queue(self, actor: ActorContext, bucket: QueueBucket = QueueBucket.ALL) -> List[RequestView]:
        """Requests in one reviewer tab, newest first, with escalation derived now"""
        return [v for v in self._visible_requests(actor) if _in_bucket(v.request, bucket)]

    def summary(self, actor: ActorContext) -> QueueSummary:
        """Counts per reviewer tab"""
        views = self._visible_requests(actor)
        counts = QueueSummary(total=len(views))
        for view in views:
            request = view.request
            if _in_bucket(request, QueueBucket.EMERGENCY):
                counts.emergency += 1
            elif _in_bucket(request, QueueBucket.PENDING):
                counts.pending += 1
            elif _in_bucket(request, QueueBucket.NOT_NECESSARY):
                counts.not_necessary += 1
            elif request.status == RequestStatus.ACCEPTED:
                counts.accepted += 1
            elif request.status == RequestStatus.REJECTED:
                counts.rejected += 1
            if view.escalated:
                counts.escalated += 1
        return counts

    def analytics(self, actor: ActorContext) -> ReviewAnalytics:
        """
        Volume per category and priority, mean review turnaround in hours,
        and the number of High priority requests still waiting
        """
        result = ReviewAnalytics()
        total_seconds = 0.0
        for view in self._visible_requests(actor):
            request = view.request
            category = request.category.value
            result.by_category[category] = result.by_category.get(category, 0) + 1
            result.by_priority[request.priority.value] += 1
            if request.reviewed_at is not None:
                result.reviewed_count += 1
                total_seconds += elapsed_since(request.created_at, request.reviewed_at).total_seconds()
            elif request.priority == Priority.HIGH:
                result.high_priority_pending += 1

        if result.reviewed_count:
            result.avg_review_hours = round(total_seconds / result.reviewed_count / 3600, 1)
        return result

    def requester_stats(self, actor: ActorContext) -> List[RequesterStats]:
        """Request counts per employee, for recognition and notice decisions"""
        stats: Dict[str, RequesterStats] = {}
        for profile in self.directory.list_profiles():
            if profile.role != UserRole.EMPLOYEE:
                continue
            if actor.department and profile.department != actor.department:
                continue
            stats[profile.user_id] = RequesterStats(requester=profile)

        for view in self._visible_requests(actor):
            entry = stats.get(view.requester.user_id)
            if entry is None:
                entry = stats[view.requester.user_id] = RequesterStats(requester=view.requester)
            entry.total_requests += 1
            if view.request.status == RequestStatus.ACCEPTED:
                entry.accepted += 1
            elif view.request.status == RequestStatus.REJECTED:
                entry.rejected += 1
            else:
                entry.pending += 1

        return sorted(stats.values(), key=lambda s: s.requester.full_name.lower())
