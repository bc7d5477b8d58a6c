"""Fallback Classifier - Deterministic keyword triage

Used whenever the AI gateway is unavailable or returns something we cannot
trust. Pure and total: the same text always yields the same classification.

Category tie-break: Funds wins only when its score is strictly greater than
both Leave and Promotion, Promotion likewise; every other outcome (including
ties and texts with no keywords at all) lands on Leave. Leave is the baseline
category, so e.g. Funds=1 / Leave=1 classifies as Leave.
"""
from typing import List, Optional, Tuple

from ..config.settings import settings
from ..domain.enums import RequestCategory, Priority, RequestKind, RiskLevel, SuggestedAction, TriageSource
from ..domain.models import Insights, TriageResult, normalize_intent_signals


LEAVE_KEYWORDS: Tuple[str, ...] = (
    "leave", "vacation", "sick", "absent", "time off", "pto", "holiday", "day off", "medical",
)
FUNDS_KEYWORDS: Tuple[str, ...] = (
    "fund", "money", "budget", "expense", "reimbursement", "payment", "purchase",
    "cost", "financial", "allowance",
)
PROMOTION_KEYWORDS: Tuple[str, ...] = (
    "promotion", "raise", "salary", "career", "position", "advancement", "growth",
    "increment", "appraisal",
)
HIGH_URGENCY_KEYWORDS: Tuple[str, ...] = (
    "urgent", "asap", "immediately", "critical", "emergency", "important", "pressing",
)
LOW_URGENCY_KEYWORDS: Tuple[str, ...] = (
    "whenever", "no rush", "flexible", "eventually", "someday",
)

CATEGORY_REASONS = {
    RequestCategory.LEAVE: "Keywords indicate time-off or absence (leave, vacation, sick, PTO, etc.).",
    RequestCategory.FUNDS: "Keywords indicate financial request (funds, expense, reimbursement, etc.).",
    RequestCategory.PROMOTION: "Keywords indicate career or compensation (promotion, raise, advancement, etc.).",
}

PRIORITY_REASONS = {
    Priority.HIGH: "Urgency keywords detected (urgent, ASAP, emergency).",
    Priority.LOW: "Flexibility keywords detected (no rush, flexible, whenever).",
    Priority.MEDIUM: "No strong urgency or flexibility signals; defaulting to medium priority.",
}

HIGH_PRIORITY_IMPACT = "May impact team availability or deadlines; recommend quick review."
LEAVE_IMPACT = "Standard leave request; check team coverage if needed."
ROUTINE_IMPACT = "Routine request; low operational impact."


def _matches(text: str, keywords: Tuple[str, ...]) -> List[str]:
    """Keywords found in text (already lower-cased), in keyword-list order"""
    return [k for k in keywords if k in text]


def pick_category(leave_score: int, funds_score: int, promotion_score: int) -> RequestCategory:
    """Apply the strict-majority tie-break described in the module docstring"""
    if funds_score > leave_score and funds_score > promotion_score:
        return RequestCategory.FUNDS
    if promotion_score > leave_score and promotion_score > funds_score:
        return RequestCategory.PROMOTION
    return RequestCategory.LEAVE


def business_impact_for(priority: Priority, category: RequestCategory) -> str:
    if priority == Priority.HIGH:
        return HIGH_PRIORITY_IMPACT
    if category == RequestCategory.LEAVE:
        return LEAVE_IMPACT
    return ROUTINE_IMPACT


class FallbackClassifier:
    """
    Keyword-scoring classifier of last resort

    Scores each category by counting case-insensitive substring hits,
    then derives priority independently from the urgency keyword sets.
    """

    def __init__(self, confidence: Optional[float] = None):
        self.confidence = settings.fallback_confidence if confidence is None else confidence

    def classify(self, text: str, requested_kind: Optional[RequestKind] = None) -> TriageResult:
        """
        Classify free text into category, priority and insights

        Args:
            text: Raw request reason
            requested_kind: Kind chosen on the form. Accepted for interface
                parity with the AI gateway; keyword scoring does not use it.

        Returns:
            TriageResult with source=fallback
        """
        lowered = (text or "").lower()

        leave_hits = _matches(lowered, LEAVE_KEYWORDS)
        funds_hits = _matches(lowered, FUNDS_KEYWORDS)
        promotion_hits = _matches(lowered, PROMOTION_KEYWORDS)
        signals = leave_hits + funds_hits + promotion_hits

        category = pick_category(len(leave_hits), len(funds_hits), len(promotion_hits))

        high_hits = _matches(lowered, HIGH_URGENCY_KEYWORDS)
        low_hits = _matches(lowered, LOW_URGENCY_KEYWORDS)
        if high_hits:
            priority = Priority.HIGH
            signals += high_hits
        elif low_hits:
            priority = Priority.LOW
            signals += low_hits
        else:
            priority = Priority.MEDIUM

        insights = Insights(
            category_reason=CATEGORY_REASONS[category],
            priority_reason=PRIORITY_REASONS[priority],
            intent_signals=normalize_intent_signals(signals),
            confidence_score=self.confidence,
            suggested_action=SuggestedAction.REVIEW if priority == Priority.HIGH else SuggestedAction.APPROVE,
            risk_level=RiskLevel.MEDIUM if priority == Priority.HIGH else RiskLevel.LOW,
            business_impact=business_impact_for(priority, category),
        )

        return TriageResult(
            category=category,
            priority=priority,
            insights=insights,
            source=TriageSource.FALLBACK,
        )
