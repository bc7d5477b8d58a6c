"""Notification Service - Requester notifications

Notifications are created as a side effect of a review decision or by an
explicit manager action. The only mutation afterwards is setting read_at.
"""
from typing import List, Optional

from ..domain.models import Notification, Request
from ..domain.enums import NotificationType, ReviewOutcome
from ..domain.errors import NotificationDispatchError, ValidationError
from ..repositories.notification_repo import NotificationRepository, MongoNotificationRepository
from .directory_service import DirectoryService
from ..utils.idgen import decision_notification_id, generate_notification_id
from ..utils.time import Clock, utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)

MAX_NOTICE_LENGTH = 2000


class NotificationService:
    """Service for creating and reading requester notifications"""

    DECISION_TYPES = {
        ReviewOutcome.ACCEPTED: NotificationType.RECOGNITION,
        ReviewOutcome.REJECTED: NotificationType.NOTICE,
    }

    NOTICE_TITLES = {
        NotificationType.SALARY_REVIEW: "Performance recognition – salary review",
        NotificationType.NOTICE: "Performance notice",
        NotificationType.RECOGNITION: "Recognition",
    }

    def __init__(
        self,
        notification_repo: Optional[NotificationRepository] = None,
        directory: Optional[DirectoryService] = None,
        now_fn: Clock = utc_now
    ):
        self.notification_repo = notification_repo or MongoNotificationRepository()
        self._directory = directory
        self.now_fn = now_fn

    @property
    def directory(self) -> DirectoryService:
        if self._directory is None:
            self._directory = DirectoryService()
        return self._directory

    def notify_decision(
        self,
        request: Request,
        outcome: ReviewOutcome,
        reviewer_id: str,
        comment: Optional[str] = None
    ) -> Notification:
        """
        Create the single notification for a decided request

        Raises:
            NotificationDispatchError: the store rejected the write
        """
        message = f"Your request for {request.request_kind.value} has been {outcome.value.lower()}."
        if comment:
            message += f" Comment: {comment}"

        notification = Notification(
            notification_id=decision_notification_id(request.request_id),
            requester_id=request.requester_id,
            type=self.DECISION_TYPES[outcome],
            title=f"Request {outcome.value}",
            message=message,
            created_by=reviewer_id,
            created_at=self.now_fn(),
            request_id=request.request_id,
        )
        return self._dispatch(notification)

    def send_notice(
        self,
        sender_id: str,
        requester_id: str,
        notice_type: NotificationType,
        message: str
    ) -> Notification:
        """
        Manager-initiated notice, recognition or salary review

        Raises:
            ValidationError: empty or oversized message
            ProfileNotFoundError: unknown recipient
            NotificationDispatchError: the store rejected the write
        """
        message = (message or "").strip()
        if not message:
            raise ValidationError("Message is required", details={"field": "message"})
        if len(message) > MAX_NOTICE_LENGTH:
            raise ValidationError(
                f"Message must be at most {MAX_NOTICE_LENGTH} characters",
                details={"field": "message", "length": len(message)}
            )

        recipient = self.directory.get_profile(requester_id)

        notification = Notification(
            notification_id=generate_notification_id(),
            requester_id=recipient.user_id,
            type=notice_type,
            title=self.NOTICE_TITLES[notice_type],
            message=message,
            created_by=sender_id,
            created_at=self.now_fn(),
        )
        return self._dispatch(notification)

    def list_notifications(self, requester_id: str, unread_only: bool = False) -> List[Notification]:
        """Notifications for the caller, newest first"""
        return self.notification_repo.list_notifications_by_requester(requester_id, unread_only=unread_only)

    def unread_count(self, requester_id: str) -> int:
        return len(self.notification_repo.list_notifications_by_requester(requester_id, unread_only=True))

    def mark_read(self, notification_id: str, requester_id: str) -> None:
        """
        Idempotent: only the target requester can mark a notification read,
        and an existing read_at is never overwritten. Everything else is a no-op.
        """
        changed = self.notification_repo.mark_read(notification_id, requester_id, self.now_fn())
        if changed:
            logger.info(
                f"Notification {notification_id} marked read",
                extra={"notification_id": notification_id, "requester_id": requester_id}
            )

    def _dispatch(self, notification: Notification) -> Notification:
        try:
            self.notification_repo.create_notification(notification)
        except Exception as e:
            raise NotificationDispatchError(
                f"Failed to store notification for {notification.requester_id}: {e}",
                details={
                    "notification_id": notification.notification_id,
                    "requester_id": notification.requester_id
                }
            )
        return notification
