"""Repository modules - Data access layer"""
from .mongo_client import get_database, get_collection
from .request_repo import RequestRepository, MongoRequestRepository
from .notification_repo import NotificationRepository, MongoNotificationRepository
from .profile_repo import ProfileRepository, MongoProfileRepository

__all__ = [
    "get_database",
    "get_collection",
    "RequestRepository",
    "MongoRequestRepository",
    "NotificationRepository",
    "MongoNotificationRepository",
    "ProfileRepository",
    "MongoProfileRepository",
]
