"""Domain Enumerations - All status and type definitions"""
from enum import Enum


class RequestKind(str, Enum):
    """What the employee asked for (chosen on the submission form)"""
    LEAVE_APPLICATION = "Leave Application"
    FUND_REQUEST = "Fund Request"
    PROMOTION_REQUEST = "Promotion Request"
    SPONSORSHIP_REQUEST = "Sponsorship Request"
    OTHER = "Other"


class RequestCategory(str, Enum):
    """Derived category assigned during triage"""
    LEAVE = "Leave"
    FUNDS = "Funds"
    PROMOTION = "Promotion"
    OTHER = "Other"


class Priority(str, Enum):
    """Derived priority assigned during triage"""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class RequestStatus(str, Enum):
    """Request lifecycle status"""
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"


class ReviewOutcome(str, Enum):
    """Decisions a reviewer can take on a pending request"""
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"

    @property
    def status(self) -> RequestStatus:
        return RequestStatus(self.value)


class SuggestedAction(str, Enum):
    """Decision-support hint shown to reviewers"""
    APPROVE = "Approve"
    REVIEW = "Review"
    ESCALATE = "Escalate"


class RiskLevel(str, Enum):
    """Risk estimate attached to insights"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class TriageSource(str, Enum):
    """Which classifier produced the final insights"""
    AI = "ai"
    FALLBACK = "fallback"


class NotificationType(str, Enum):
    """Types of requester notifications"""
    RECOGNITION = "recognition"
    NOTICE = "notice"
    SALARY_REVIEW = "salary_review"


class UserRole(str, Enum):
    """Roles supplied by the upstream identity provider"""
    EMPLOYEE = "employee"
    MANAGER = "manager"


class QueueBucket(str, Enum):
    """Reviewer queue tabs"""
    EMERGENCY = "emergency"          # Pending, High priority
    PENDING = "pending"              # Pending, Medium priority
    NOT_NECESSARY = "not-necessary"  # Pending, Low priority
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    ALL = "all"
