"""Tests for reviewer decisions and queue views"""
import threading
from datetime import timedelta

import pytest

from requestdesk.domain.enums import NotificationType, Priority, QueueBucket, RequestStatus, ReviewOutcome
from requestdesk.domain.errors import RequestAlreadyDecidedError, RequestNotFoundError


class TestDecide:

    def test_accept(self, review_service, request_repo, notification_repo, make_request, clock):
        request_repo.create_request(make_request())
        clock.advance(hours=1)

        decision = review_service.decide("REQ-1", ReviewOutcome.ACCEPTED, "mgr-1", "  Enjoy  ")

        stored = request_repo.get_request("REQ-1")
        assert stored.status == RequestStatus.ACCEPTED
        assert stored.reviewed_by == "mgr-1"
        assert stored.reviewed_at == clock.now
        assert stored.manager_comment == "Enjoy"
        assert decision.request == stored
        assert decision.notification_error is None

        notification = decision.notification
        assert notification.requester_id == "emp-1"
        assert notification.type == NotificationType.RECOGNITION
        assert notification.title == "Request Accepted"
        assert notification.message == "Your request for Leave Application has been accepted. Comment: Enjoy"
        assert notification_repo.list_notifications_by_requester("emp-1") == [notification]

    def test_reject_without_comment(self, review_service, request_repo, make_request):
        request_repo.create_request(make_request())

        decision = review_service.decide("REQ-1", ReviewOutcome.REJECTED, "mgr-1", "   ")

        assert decision.request.status == RequestStatus.REJECTED
        assert decision.request.manager_comment is None
        assert decision.notification.type == NotificationType.NOTICE
        assert decision.notification.message == "Your request for Leave Application has been rejected."

    def test_unknown_request(self, review_service):
        with pytest.raises(RequestNotFoundError):
            review_service.decide("REQ-missing", ReviewOutcome.ACCEPTED, "mgr-1")

    def test_second_decision_conflicts(self, review_service, request_repo, notification_repo, make_request):
        request_repo.create_request(make_request())
        review_service.decide("REQ-1", ReviewOutcome.ACCEPTED, "mgr-1")

        with pytest.raises(RequestAlreadyDecidedError) as exc_info:
            review_service.decide("REQ-1", ReviewOutcome.REJECTED, "mgr-2")

        assert exc_info.value.http_status == 409
        assert request_repo.get_request("REQ-1").status == RequestStatus.ACCEPTED
        assert len(notification_repo.list_notifications_by_requester("emp-1")) == 1

    def test_lost_compare_and_set(self, review_service, request_repo, make_request, clock):
        """Another reviewer wins between our read and our write"""
        request_repo.create_request(make_request())
        original = request_repo.update_request_status

        def racing_update(request_id, **kwargs):
            original(request_id, expected_status=RequestStatus.PENDING, new_status=RequestStatus.REJECTED,
                     reviewer_id="mgr-2", comment=None, reviewed_at=clock.now)
            return original(request_id, **kwargs)

        request_repo.update_request_status = racing_update

        with pytest.raises(RequestAlreadyDecidedError):
            review_service.decide("REQ-1", ReviewOutcome.ACCEPTED, "mgr-1")
        assert request_repo.get_request("REQ-1").reviewed_by == "mgr-2"

    def test_concurrent_reviewers_exactly_one_wins(self, review_service, request_repo, notification_repo, make_request):
        request_repo.create_request(make_request())
        barrier = threading.Barrier(8)
        wins, conflicts = [], []

        def review(i):
            barrier.wait()
            outcome = ReviewOutcome.ACCEPTED if i % 2 else ReviewOutcome.REJECTED
            try:
                wins.append(review_service.decide("REQ-1", outcome, f"mgr-{i}"))
            except RequestAlreadyDecidedError:
                conflicts.append(i)

        threads = [threading.Thread(target=review, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(wins) == 1
        assert len(conflicts) == 7
        stored = request_repo.get_request("REQ-1")
        assert stored.status == wins[0].request.status
        assert stored.reviewed_by == wins[0].request.reviewed_by
        assert len(notification_repo.list_notifications_by_requester("emp-1")) == 1

    def test_notification_failure_keeps_decision(self, review_service, request_repo, notification_repo, make_request):
        request_repo.create_request(make_request())
        notification_repo.fail_writes = True

        decision = review_service.decide("REQ-1", ReviewOutcome.ACCEPTED, "mgr-1")

        assert request_repo.get_request("REQ-1").status == RequestStatus.ACCEPTED
        assert decision.notification is None
        assert "notification store unavailable" in decision.notification_error

    def test_redispatch_does_not_duplicate(self, review_service, notification_service, request_repo,
                                           notification_repo, make_request):
        request_repo.create_request(make_request())
        decision = review_service.decide("REQ-1", ReviewOutcome.ACCEPTED, "mgr-1")

        notification_service.notify_decision(decision.request, ReviewOutcome.ACCEPTED, "mgr-1")

        assert len(notification_repo.list_notifications_by_requester("emp-1")) == 1


@pytest.fixture
def seeded(request_repo, make_request, clock):
    """One request per tab, across two departments"""
    base = clock.now
    rows = [
        make_request("REQ-high-old", "emp-1", Priority.HIGH, created_at=base - timedelta(hours=30)),
        make_request("REQ-high-new", "emp-2", Priority.HIGH, created_at=base - timedelta(hours=1)),
        make_request("REQ-medium", "emp-1", Priority.MEDIUM, created_at=base - timedelta(hours=2)),
        make_request("REQ-low", "emp-2", Priority.LOW, created_at=base - timedelta(hours=3)),
        make_request("REQ-accepted", "emp-1", Priority.HIGH, RequestStatus.ACCEPTED,
                     created_at=base - timedelta(hours=40)),
        make_request("REQ-rejected", "emp-2", Priority.LOW, RequestStatus.REJECTED,
                     created_at=base - timedelta(hours=50)),
        make_request("REQ-finance", "emp-3", Priority.HIGH, created_at=base - timedelta(hours=48)),
        make_request("REQ-ghost", "emp-unknown", Priority.MEDIUM, created_at=base - timedelta(hours=4)),
    ]
    for row in rows:
        request_repo.create_request(row)
    return rows


class TestQueues:

    @pytest.mark.parametrize("bucket,expected", [
        (QueueBucket.EMERGENCY, ["REQ-high-new", "REQ-high-old"]),
        (QueueBucket.PENDING, ["REQ-medium"]),
        (QueueBucket.NOT_NECESSARY, ["REQ-low"]),
        (QueueBucket.ACCEPTED, ["REQ-accepted"]),
        (QueueBucket.REJECTED, ["REQ-rejected"]),
    ])
    def test_buckets_are_scoped_to_department(self, review_service, manager, seeded, bucket, expected):
        views = review_service.list_queue(manager, bucket)
        assert [v.request.request_id for v in views] == expected

    def test_all_is_newest_first(self, review_service, manager, seeded):
        ids = [v.request.request_id for v in review_service.list_queue(manager, QueueBucket.ALL)]
        assert ids == ["REQ-high-new", "REQ-medium", "REQ-low", "REQ-high-old", "REQ-accepted", "REQ-rejected"]

    def test_escalation_is_derived_at_read_time(self, review_service, manager, seeded, clock):
        views = {v.request.request_id: v for v in review_service.list_queue(manager, QueueBucket.EMERGENCY)}
        assert views["REQ-high-old"].escalated
        assert not views["REQ-high-new"].escalated

        clock.advance(hours=23)
        views = {v.request.request_id: v for v in review_service.list_queue(manager, QueueBucket.EMERGENCY)}
        assert views["REQ-high-new"].escalated

    def test_requester_profile_is_joined(self, review_service, manager, seeded):
        view = review_service.list_queue(manager, QueueBucket.PENDING)[0]
        assert view.requester.full_name == "Alex Chen"
        assert view.requester.email == "alex@example.com"

    def test_unscoped_manager_sees_everything(self, review_service, global_manager, seeded):
        views = review_service.list_queue(global_manager)
        assert len(views) == len(seeded)
        ghost = next(v for v in views if v.request.request_id == "REQ-ghost")
        assert ghost.requester.full_name == "Unknown"

    def test_summary(self, review_service, manager, seeded):
        summary = review_service.summary(manager)
        assert summary.emergency == 2
        assert summary.pending == 1
        assert summary.not_necessary == 1
        assert summary.accepted == 1
        assert summary.rejected == 1
        assert summary.total == 6
        assert summary.escalated == 1

    def test_requester_stats(self, review_service, manager, seeded):
        stats = {s.requester.user_id: s for s in review_service.requester_stats(manager)}

        assert set(stats) == {"emp-1", "emp-2"}
        assert stats["emp-1"].total_requests == 3
        assert stats["emp-1"].accepted == 1
        assert stats["emp-1"].pending == 2
        assert stats["emp-2"].rejected == 1
        assert stats["emp-2"].pending == 2

    def test_requester_stats_include_employees_without_requests(self, review_service, manager):
        stats = review_service.requester_stats(manager)
        assert [s.requester.full_name for s in stats] == ["Alex Chen", "Sam Okafor"]
        assert all(s.total_requests == 0 for s in stats)


class TestAnalytics:

    def test_nothing_decided_averages_zero(self, review_service, manager):
        analytics = review_service.analytics(manager)

        assert analytics.reviewed_count == 0
        assert analytics.avg_review_hours == 0.0
        assert analytics.by_category == {}
        assert analytics.by_priority == {"High": 0, "Medium": 0, "Low": 0}
        assert analytics.high_priority_pending == 0

    def test_review_turnaround(self, review_service, request_repo, make_request, manager, clock):
        request_repo.create_request(make_request("REQ-a", "emp-1", Priority.HIGH))
        request_repo.create_request(make_request("REQ-b", "emp-2", Priority.MEDIUM))
        request_repo.create_request(make_request("REQ-c", "emp-2", Priority.HIGH))

        clock.advance(hours=2)
        review_service.decide("REQ-a", ReviewOutcome.ACCEPTED, "mgr-1")
        clock.advance(hours=3)
        review_service.decide("REQ-b", ReviewOutcome.REJECTED, "mgr-1")

        analytics = review_service.analytics(manager)

        assert analytics.reviewed_count == 2
        assert analytics.avg_review_hours == 3.5
        assert analytics.by_category == {"Leave": 3}
        assert analytics.by_priority == {"High": 2, "Medium": 1, "Low": 0}
        assert analytics.high_priority_pending == 1

    def test_scoped_to_department(self, review_service, manager, seeded):
        analytics = review_service.analytics(manager)

        assert sum(analytics.by_priority.values()) == 6
        assert analytics.by_priority == {"High": 3, "Medium": 1, "Low": 2}
        assert analytics.high_priority_pending == 2
        assert analytics.reviewed_count == 2
