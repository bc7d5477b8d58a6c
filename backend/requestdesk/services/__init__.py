"""Service modules - Business logic layer"""
from .ai_gateway import AIGateway
from .directory_service import DirectoryService
from .notification_service import NotificationService
from .review_service import ReviewService
from .triage_service import TriageService

__all__ = [
    "AIGateway",
    "DirectoryService",
    "NotificationService",
    "ReviewService",
    "TriageService",
]
