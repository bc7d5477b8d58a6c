"""Request Lifecycle - Allowed status transitions

    Pending --Accept--> Accepted   (terminal)
    Pending --Reject--> Rejected   (terminal)
"""
from typing import Dict, FrozenSet

from ..domain.enums import RequestStatus, ReviewOutcome
from ..domain.errors import InvalidStateError, RequestAlreadyDecidedError

TRANSITIONS: Dict[RequestStatus, FrozenSet[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({RequestStatus.ACCEPTED, RequestStatus.REJECTED}),
    RequestStatus.ACCEPTED: frozenset(),
    RequestStatus.REJECTED: frozenset(),
}

INITIAL_STATUS = RequestStatus.PENDING


def is_terminal(status: RequestStatus) -> bool:
    return not TRANSITIONS[status]


def can_transition(current: RequestStatus, target: RequestStatus) -> bool:
    return target in TRANSITIONS[current]


def assert_transition(request_id: str, current: RequestStatus, outcome: ReviewOutcome) -> RequestStatus:
    """
    Validate a review outcome against the current status

    Returns:
        The status the request moves to

    Raises:
        RequestAlreadyDecidedError: request is already Accepted/Rejected
        InvalidStateError: transition not allowed for any other reason
    """
    target = outcome.status
    if can_transition(current, target):
        return target
    details = {"request_id": request_id, "status": current.value, "attempted": target.value}
    if is_terminal(current):
        raise RequestAlreadyDecidedError(
            f"Request {request_id} was already {current.value.lower()}",
            details=details
        )
    raise InvalidStateError(
        f"Cannot move request {request_id} from {current.value} to {target.value}",
        details=details
    )
