"""AI Gateway - Request classification through an external LLM

The upstream service is untrusted: it may be absent, slow, or answer with
malformed JSON. Everything it returns is validated field by field, and every
problem is turned into an AdapterFailure. Nothing raises past analyze().
"""
import json
import re
import time
from typing import Any, Dict, List, Optional
from openai import OpenAI

from ..domain.enums import (
    RequestKind, RequestCategory, Priority, RiskLevel, SuggestedAction, TriageSource
)
from ..domain.models import (
    AdapterFailure, AdapterResult, AdapterSuccess, Insights, TriageResult,
    normalize_intent_signals
)
from ..domain.errors import AIGatewayError
from ..config.settings import settings
from ..utils.logger import get_logger

logger = get_logger(__name__)


REQUIRED_FIELDS = (
    "priority", "risk_level", "confidence_score", "priority_reason",
    "category_reason", "business_impact", "suggested_action", "intent_signals",
)

CATEGORY_FOR_KIND = {
    RequestKind.LEAVE_APPLICATION: RequestCategory.LEAVE,
    RequestKind.FUND_REQUEST: RequestCategory.FUNDS,
    RequestKind.SPONSORSHIP_REQUEST: RequestCategory.FUNDS,
    RequestKind.PROMOTION_REQUEST: RequestCategory.PROMOTION,
    RequestKind.OTHER: RequestCategory.OTHER,
}

DEFAULT_CATEGORY_REASON = "AI classification based on request content."
DEFAULT_PRIORITY_REASON = "Priority based on urgency signals."
DEFAULT_BUSINESS_IMPACT = "Review request for impact."

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def _coerce_enum(enum_cls, value: Any):
    """Case-insensitive enum lookup; None when value is not a member"""
    if not isinstance(value, str):
        return None
    wanted = value.strip().lower()
    for member in enum_cls:
        if member.value.lower() == wanted:
            return member
    return None


def _text_or(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _confidence(value: Any) -> float:
    """
    Numeric confidence on a 0-100 scale

    Values strictly between 0 and 1 are read as fractions and scaled up.
    Whole and decimal JSON numbers are treated alike, so 1 and 1.0 both mean 1%.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise AIGatewayError("confidence_score is not numeric", details={"value": repr(value)})
    score = float(value)
    if score != score:  # NaN
        raise AIGatewayError("confidence_score is NaN")
    if 0 < score < 1:
        score *= 100
    return max(0.0, min(100.0, score))


def parse_analysis(content: Optional[str], requested_kind: RequestKind) -> TriageResult:
    """
    Validate a raw model answer into a TriageResult

    Missing keys, an unknown priority or a non-numeric confidence are fatal.
    Every other field that fails its own check is replaced by a safe default.

    Raises:
        AIGatewayError: payload cannot be trusted
    """
    if not content or not content.strip():
        raise AIGatewayError("AI returned empty response")

    try:
        payload = json.loads(_CODE_FENCE.sub("", content.strip()))
    except json.JSONDecodeError as e:
        raise AIGatewayError(f"AI response is not valid JSON: {e}")

    if not isinstance(payload, dict):
        raise AIGatewayError("AI response is not a JSON object")

    missing = [f for f in REQUIRED_FIELDS if f not in payload]
    if missing:
        raise AIGatewayError("AI response is missing fields", details={"missing": missing})

    priority = _coerce_enum(Priority, payload["priority"])
    if priority is None:
        raise AIGatewayError("AI response has invalid priority", details={"value": repr(payload["priority"])})

    confidence = _confidence(payload["confidence_score"])

    category = _coerce_enum(RequestCategory, payload.get("category")) or CATEGORY_FOR_KIND[requested_kind]
    risk_level = _coerce_enum(RiskLevel, payload["risk_level"]) or RiskLevel.LOW
    suggested_action = _coerce_enum(SuggestedAction, payload["suggested_action"]) or SuggestedAction.REVIEW

    raw_signals = payload["intent_signals"]
    signals = normalize_intent_signals(
        [s for s in raw_signals if isinstance(s, (str, int, float))] if isinstance(raw_signals, list) else []
    )

    insights = Insights(
        category_reason=_text_or(payload["category_reason"], DEFAULT_CATEGORY_REASON),
        priority_reason=_text_or(payload["priority_reason"], DEFAULT_PRIORITY_REASON),
        intent_signals=signals,
        confidence_score=confidence,
        suggested_action=suggested_action,
        risk_level=risk_level,
        business_impact=_text_or(payload["business_impact"], DEFAULT_BUSINESS_IMPACT),
    )

    return TriageResult(
        category=category,
        priority=priority,
        insights=insights,
        source=TriageSource.AI,
    )


def rank_models(model_ids: List[str]) -> List[str]:
    """Keep flash/pro variants, flash (faster) first, otherwise preserving order"""
    names = [m.split("/", 1)[1] if m.startswith("models/") else m for m in model_ids]
    usable = [m for m in names if "flash" in m or "pro" in m]
    return sorted(usable, key=lambda m: 0 if "flash" in m else 1)


class AIGateway:
    """Adapter around an OpenAI-compatible chat completions endpoint"""

    def __init__(
        self,
        client: Optional[Any] = None,
        fallback_models: Optional[List[str]] = None,
        timeout_seconds: Optional[float] = None
    ):
        self.timeout_seconds = settings.ai_timeout_seconds if timeout_seconds is None else timeout_seconds
        self.fallback_models = fallback_models if fallback_models is not None else settings.ai_fallback_models_list
        self.client = client
        if self.client is None and settings.ai_enabled:
            self.client = OpenAI(
                api_key=settings.ai_api_key,
                base_url=settings.ai_base_url,
                timeout=self.timeout_seconds,
                max_retries=0
            )
        self._available_models: Optional[List[str]] = None

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def _build_messages(self, text: str, requested_kind: RequestKind, requester_role: str) -> List[Dict[str, str]]:
        system_prompt = """You are an enterprise HR workflow classifier. Classify employee requests and explain your reasoning transparently.

Respond with ONLY valid JSON (no markdown). Use this exact structure:
{
  "category": "Leave" | "Funds" | "Promotion" | "Other",
  "priority": "High" | "Medium" | "Low",
  "category_reason": "One sentence explaining why this category was chosen.",
  "priority_reason": "One sentence explaining why this priority was chosen.",
  "intent_signals": ["keyword1", "keyword2"],
  "confidence_score": 0-100,
  "suggested_action": "Approve" | "Review" | "Escalate",
  "risk_level": "Low" | "Medium" | "High",
  "business_impact": "One sentence on business/team impact."
}

Rules:
- category: Leave (time off, sick, vacation), Funds (money, expense, sponsorship), Promotion (raise, career), Other otherwise.
- priority: High = urgent/ASAP/emergency, Low = flexible/no rush, else Medium.
- intent_signals: 2-6 words or phrases from the message that drove the classification.
- suggested_action: Escalate only for high-risk or ambiguous; Review for high-priority; Approve for clear low-risk.
- risk_level: based on urgency and impact.
- business_impact: human-readable note for the manager."""

        user_message = f"""Request type: {requested_kind.value}
Employee role: {requester_role or 'employee'}
Request message: "{text}\""""

        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_message},
        ]

    def candidate_models(self) -> List[str]:
        """
        Model variants to try, fastest first

        Discovery runs once per gateway; if it fails or finds nothing usable
        the configured fallback list is used (and discovery is retried next time).
        """
        if self._available_models is not None:
            return self._available_models

        try:
            discovered = rank_models([m.id for m in self.client.models.list()])
        except Exception as e:
            logger.warning(f"AI model discovery failed: {e}")
            discovered = []

        if discovered:
            logger.info(f"Available AI models: {', '.join(discovered)}")
            self._available_models = discovered
            return discovered

        return list(self.fallback_models)

    def analyze(
        self,
        text: str,
        requested_kind: RequestKind,
        requester_role: str = "employee"
    ) -> AdapterResult:
        """
        Classify a request with the upstream model

        Tries each candidate model in turn within one overall time budget.
        A transport error or an untrustworthy answer from one model moves on
        to the next.
        """
        if not self.enabled:
            return AdapterFailure(reason="AI gateway not configured")

        attempts: List[str] = []
        last_error = "no candidate models"

        try:
            deadline = time.monotonic() + self.timeout_seconds
            messages = self._build_messages(text, requested_kind, requester_role)

            for model in self.candidate_models():
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    last_error = f"timed out after {self.timeout_seconds}s"
                    break

                attempts.append(model)
                try:
                    response = self.client.chat.completions.create(
                        model=model,
                        messages=messages,
                        temperature=settings.ai_temperature,
                        max_tokens=settings.ai_max_tokens,
                        response_format={"type": "json_object"},
                        timeout=remaining
                    )
                    if not response.choices:
                        raise AIGatewayError("AI returned no response choices")
                    result = parse_analysis(response.choices[0].message.content, requested_kind)
                except AIGatewayError as e:
                    last_error = f"{model}: {e.message}"
                    logger.warning(f"AI answer rejected - {last_error}", extra={"model": model})
                    continue
                except Exception as e:
                    last_error = f"{model}: {str(e)[:200]}"
                    logger.warning(f"AI call failed - {last_error}", extra={"model": model})
                    continue

                logger.info(
                    f"AI triage succeeded with {model}",
                    extra={"model": model, "source": TriageSource.AI.value}
                )
                return AdapterSuccess(result=result.model_copy(update={"model": model}))

        except Exception as e:
            # Anything unexpected (prompt building, discovery bookkeeping) is still a failure
            logger.error(f"AI gateway error: {e}", exc_info=True)
            last_error = str(e)

        return AdapterFailure(reason=last_error, attempts=attempts)
