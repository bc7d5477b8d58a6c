"""Triage & lifecycle engine - Pure decision logic"""
from .classifier import FallbackClassifier, pick_category
from .escalation import is_escalated, ESCALATION_HOURS
from .lifecycle import can_transition, assert_transition, is_terminal

__all__ = [
    "FallbackClassifier",
    "pick_category",
    "is_escalated",
    "ESCALATION_HOURS",
    "can_transition",
    "assert_transition",
    "is_terminal",
]
