"""Escalation Evaluator - Derived flag for aging high-priority requests

Nothing is persisted and no timer runs: every read recomputes the flag from
the current clock.
"""
from datetime import timedelta
from typing import Optional

from ..domain.enums import Priority, RequestStatus
from ..domain.models import Request
from ..utils.time import Clock, elapsed_since, utc_now

ESCALATION_HOURS = 24


def is_escalated(
    request: Request,
    now_fn: Clock = utc_now,
    threshold_hours: Optional[int] = None
) -> bool:
    """
    True iff the request is Pending, High priority and at least
    threshold_hours old according to now_fn.
    """
    if request.status != RequestStatus.PENDING or request.priority != Priority.HIGH:
        return False
    hours = ESCALATION_HOURS if threshold_hours is None else threshold_hours
    return elapsed_since(request.created_at, now_fn()) >= timedelta(hours=hours)
