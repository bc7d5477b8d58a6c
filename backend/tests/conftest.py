"""
Pytest Configuration and Fixtures

In-memory stand-ins for the Mongo repositories and the OpenAI client,
plus a controllable clock. Services receive them through their constructors.
"""

import json
import threading
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest

from requestdesk.domain.enums import RequestStatus, UserRole
from requestdesk.domain.errors import ConflictError
from requestdesk.domain.models import ActorContext, Notification, Request, RequesterProfile
from requestdesk.repositories.notification_repo import NotificationRepository
from requestdesk.repositories.profile_repo import ProfileRepository
from requestdesk.repositories.request_repo import RequestRepository
from requestdesk.services.ai_gateway import AIGateway
from requestdesk.services.directory_service import DirectoryService
from requestdesk.services.notification_service import NotificationService
from requestdesk.services.review_service import ReviewService
from requestdesk.services.triage_service import TriageService


T0 = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)


# =============================================================================
# Fakes
# =============================================================================

class FakeClock:
    """Callable clock that tests can move forward"""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryRequestRepository(RequestRepository):

    def __init__(self):
        self._requests: Dict[str, Request] = {}
        self._lock = threading.Lock()

    def create_request(self, request: Request) -> str:
        with self._lock:
            if request.request_id in self._requests:
                raise ConflictError(f"Request {request.request_id} already exists")
            self._requests[request.request_id] = request
        return request.request_id

    def get_request(self, request_id: str) -> Optional[Request]:
        return self._requests.get(request_id)

    def list_requests_by_requester(self, requester_id: str) -> List[Request]:
        return [r for r in self.list_all_requests() if r.requester_id == requester_id]

    def list_all_requests(self) -> List[Request]:
        return sorted(self._requests.values(), key=lambda r: r.created_at, reverse=True)

    def update_request_status(self, request_id, expected_status, new_status, reviewer_id, comment, reviewed_at):
        with self._lock:
            current = self._requests.get(request_id)
            if current is None or current.status != expected_status:
                return False
            self._requests[request_id] = current.model_copy(update={
                "status": new_status,
                "reviewed_by": reviewer_id,
                "reviewed_at": reviewed_at,
                "manager_comment": comment,
            })
            return True


class InMemoryNotificationRepository(NotificationRepository):

    def __init__(self):
        self._items: Dict[str, Notification] = {}
        self._lock = threading.Lock()
        self.fail_writes = False

    def create_notification(self, notification: Notification) -> str:
        if self.fail_writes:
            raise RuntimeError("notification store unavailable")
        with self._lock:
            self._items.setdefault(notification.notification_id, notification)
        return notification.notification_id

    def get_notification(self, notification_id: str) -> Optional[Notification]:
        return self._items.get(notification_id)

    def list_notifications_by_requester(self, requester_id: str, unread_only: bool = False) -> List[Notification]:
        items = [
            n for n in self._items.values()
            if n.requester_id == requester_id and not (unread_only and n.is_read)
        ]
        return sorted(items, key=lambda n: n.created_at, reverse=True)

    def mark_read(self, notification_id: str, requester_id: str, read_at: datetime) -> bool:
        with self._lock:
            current = self._items.get(notification_id)
            if current is None or current.requester_id != requester_id or current.is_read:
                return False
            self._items[notification_id] = current.model_copy(update={"read_at": read_at})
            return True


class InMemoryProfileRepository(ProfileRepository):

    def __init__(self, profiles: Optional[List[RequesterProfile]] = None):
        self.profiles = {p.user_id: p for p in profiles or []}
        self.get_calls = 0
        self.list_calls = 0

    def get_profile(self, user_id: str) -> Optional[RequesterProfile]:
        self.get_calls += 1
        return self.profiles.get(user_id)

    def list_profiles(self) -> List[RequesterProfile]:
        self.list_calls += 1
        return sorted(self.profiles.values(), key=lambda p: p.full_name)


class FakeCompletions:
    """Scripted chat.completions: each entry is a payload dict, raw string or exception"""

    def __init__(self, answers: Dict[str, list]):
        self.answers = answers
        self.calls: List[str] = []

    def create(self, model: str, messages, **kwargs):
        self.calls.append(model)
        queue = self.answers.get(model) or [RuntimeError(f"model {model} not found")]
        answer = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(answer, Exception):
            raise answer
        content = answer if isinstance(answer, str) else json.dumps(answer)
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class FakeModels:

    def __init__(self, model_ids: Optional[List[str]] = None, error: Optional[Exception] = None):
        self.model_ids = model_ids or []
        self.error = error
        self.calls = 0

    def list(self):
        self.calls += 1
        if self.error:
            raise self.error
        return [SimpleNamespace(id=m) for m in self.model_ids]


class FakeOpenAIClient:
    """Just enough of openai.OpenAI for the gateway"""

    def __init__(self, answers=None, model_ids=None, discovery_error=None):
        self.chat = SimpleNamespace(completions=FakeCompletions(answers or {}))
        self.models = FakeModels(model_ids, discovery_error)


def valid_ai_payload(**overrides) -> dict:
    payload = {
        "category": "Funds",
        "priority": "High",
        "category_reason": "Mentions medical bills and reimbursement.",
        "priority_reason": "Employee describes an emergency.",
        "intent_signals": ["emergency", "reimbursement"],
        "confidence_score": 88,
        "suggested_action": "Review",
        "risk_level": "Medium",
        "business_impact": "Employee wellbeing; low cost to the team.",
    }
    payload.update(overrides)
    return payload


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def request_repo():
    return InMemoryRequestRepository()


@pytest.fixture
def notification_repo():
    return InMemoryNotificationRepository()


@pytest.fixture
def profiles():
    return [
        RequesterProfile(user_id="mgr-1", full_name="Priya Raman", email="priya@example.com",
                         department="Engineering", role=UserRole.MANAGER),
        RequesterProfile(user_id="emp-1", full_name="Alex Chen", email="alex@example.com",
                         department="Engineering"),
        RequesterProfile(user_id="emp-2", full_name="Sam Okafor", email="sam@example.com",
                         department="Engineering"),
        RequesterProfile(user_id="emp-3", full_name="Maria Lopez", email="maria@example.com",
                         department="Finance"),
    ]


@pytest.fixture
def profile_repo(profiles):
    return InMemoryProfileRepository(profiles)


@pytest.fixture
def directory(profile_repo):
    return DirectoryService(profile_repo=profile_repo, ttl_seconds=300)


@pytest.fixture
def offline_gateway():
    """Gateway with no client configured: every call is an AdapterFailure"""
    gateway = AIGateway(client=None, fallback_models=["gemini-1.5-flash"], timeout_seconds=5)
    gateway.client = None
    return gateway


@pytest.fixture
def triage_service(request_repo, offline_gateway, clock):
    return TriageService(request_repo=request_repo, gateway=offline_gateway, now_fn=clock)


@pytest.fixture
def notification_service(notification_repo, directory, clock):
    return NotificationService(notification_repo=notification_repo, directory=directory, now_fn=clock)


@pytest.fixture
def review_service(request_repo, notification_service, directory, clock):
    return ReviewService(
        request_repo=request_repo,
        notification_service=notification_service,
        directory=directory,
        now_fn=clock,
        escalation_hours=24
    )


@pytest.fixture
def manager():
    return ActorContext(user_id="mgr-1", role=UserRole.MANAGER, department="Engineering")


@pytest.fixture
def global_manager():
    """Manager without a department sees every request"""
    return ActorContext(user_id="mgr-hq", role=UserRole.MANAGER)


@pytest.fixture
def make_request(clock):
    """Factory for stored-shape requests without going through triage"""
    from requestdesk.domain.enums import Priority, RequestCategory, RequestKind, TriageSource
    from requestdesk.engine.classifier import FallbackClassifier

    insights = FallbackClassifier(confidence=70).classify("leave").insights

    def _make(
        request_id: str = "REQ-1",
        requester_id: str = "emp-1",
        priority: Priority = Priority.HIGH,
        status: RequestStatus = RequestStatus.PENDING,
        created_at: Optional[datetime] = None,
        **fields
    ) -> Request:
        data = dict(
            request_id=request_id,
            requester_id=requester_id,
            request_kind=RequestKind.LEAVE_APPLICATION,
            reason="Need leave",
            category=RequestCategory.LEAVE,
            priority=priority,
            status=status,
            created_at=created_at or clock(),
            insights=insights,
            triage_source=TriageSource.FALLBACK,
        )
        if status != RequestStatus.PENDING:
            data.update(reviewed_by="mgr-1", reviewed_at=data["created_at"])
        data.update(fields)
        return Request(**data)

    return _make
