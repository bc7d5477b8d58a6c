"""Mongo repository filters, exercised against mongomock"""
import mongomock
import pytest

from requestdesk.domain.enums import NotificationType, RequestStatus
from requestdesk.domain.models import Notification
from requestdesk.repositories.notification_repo import MongoNotificationRepository
from requestdesk.repositories.request_repo import MongoRequestRepository


@pytest.fixture
def db():
    return mongomock.MongoClient(tz_aware=True)["requestdesk_test"]


class TestRequestStatusUpdate:

    def test_only_the_first_update_applies(self, db, make_request, clock):
        repo = MongoRequestRepository(collection=db["requests"])
        repo.create_request(make_request())

        first = repo.update_request_status(
            "REQ-1", expected_status=RequestStatus.PENDING, new_status=RequestStatus.ACCEPTED,
            reviewer_id="mgr-1", comment="ok", reviewed_at=clock.now
        )
        second = repo.update_request_status(
            "REQ-1", expected_status=RequestStatus.PENDING, new_status=RequestStatus.REJECTED,
            reviewer_id="mgr-2", comment="late", reviewed_at=clock.now
        )

        assert first is True
        assert second is False
        stored = repo.get_request("REQ-1")
        assert stored.status == RequestStatus.ACCEPTED
        assert stored.reviewed_by == "mgr-1"
        assert stored.manager_comment == "ok"

    def test_unknown_request_is_not_updated(self, db, clock):
        repo = MongoRequestRepository(collection=db["requests"])
        assert not repo.update_request_status(
            "REQ-missing", expected_status=RequestStatus.PENDING, new_status=RequestStatus.ACCEPTED,
            reviewer_id="mgr-1", comment=None, reviewed_at=clock.now
        )


class TestNotificationMarkRead:

    @pytest.fixture
    def repo(self, db, clock):
        repo = MongoNotificationRepository(collection=db["notifications"])
        repo.create_notification(Notification(
            notification_id="NTF-1",
            requester_id="emp-1",
            type=NotificationType.RECOGNITION,
            title="Recognition",
            message="Well done",
            created_by="mgr-1",
            created_at=clock.now,
        ))
        return repo

    def test_read_at_is_set_once(self, repo, clock):
        assert repo.mark_read("NTF-1", "emp-1", clock.now) is True
        first_read_at = repo.get_notification("NTF-1").read_at

        clock.advance(minutes=5)
        assert repo.mark_read("NTF-1", "emp-1", clock.now) is False
        assert repo.get_notification("NTF-1").read_at == first_read_at
        assert repo.list_notifications_by_requester("emp-1", unread_only=True) == []

    def test_other_requester_cannot_mark_read(self, repo, clock):
        assert repo.mark_read("NTF-1", "emp-2", clock.now) is False
        assert repo.get_notification("NTF-1").read_at is None
