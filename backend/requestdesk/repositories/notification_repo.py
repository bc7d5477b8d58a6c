"""Notification Repository - Data access for requester notifications"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from pymongo.collection import Collection
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from .mongo_client import get_collection
from ..domain.models import Notification
from ..utils.logger import get_logger

logger = get_logger(__name__)


class NotificationRepository(ABC):
    """Notification dispatcher consumed by the review and notification services"""
    
    @abstractmethod
    def create_notification(self, notification: Notification) -> str:
        """
        Append a notification, returning its ID
        
        Creating a notification whose ID already exists is a no-op, so a
        retried dispatch never produces a duplicate.
        """
    
    @abstractmethod
    def get_notification(self, notification_id: str) -> Optional[Notification]:
        """Get notification by ID"""
    
    @abstractmethod
    def list_notifications_by_requester(
        self,
        requester_id: str,
        unread_only: bool = False
    ) -> List[Notification]:
        """Notifications for one requester, newest first"""
    
    @abstractmethod
    def mark_read(self, notification_id: str, requester_id: str, read_at: datetime) -> bool:
        """
        Set read_at if the notification targets requester_id and is unread
        
        Returns:
            True if this call set read_at
        """


class MongoNotificationRepository(NotificationRepository):
    """MongoDB-backed notification store"""
    
    COLLECTION_NAME = "notifications"
    
    def __init__(self, collection: Optional[Collection] = None):
        self._collection: Collection = collection if collection is not None else get_collection(self.COLLECTION_NAME)
    
    def create_notification(self, notification: Notification) -> str:
        """Create a new notification"""
        doc = notification.model_dump()
        doc["_id"] = notification.notification_id
        
        try:
            self._collection.insert_one(doc)
        except DuplicateKeyError:
            logger.info(
                f"Notification {notification.notification_id} already exists, skipping",
                extra={"notification_id": notification.notification_id}
            )
            return notification.notification_id
        
        logger.info(
            f"Created notification for {notification.requester_id}",
            extra={
                "notification_id": notification.notification_id,
                "requester_id": notification.requester_id,
                "request_id": notification.request_id
            }
        )
        return notification.notification_id
    
    def get_notification(self, notification_id: str) -> Optional[Notification]:
        """Get a single notification by ID"""
        doc = self._collection.find_one({"notification_id": notification_id})
        if doc:
            doc.pop("_id", None)
            return Notification.model_validate(doc)
        return None
    
    def list_notifications_by_requester(
        self,
        requester_id: str,
        unread_only: bool = False
    ) -> List[Notification]:
        """Get notifications for a requester, newest first"""
        query = {"requester_id": requester_id}
        if unread_only:
            query["read_at"] = None
        
        cursor = self._collection.find(query).sort("created_at", DESCENDING)
        
        notifications = []
        for doc in cursor:
            doc.pop("_id", None)
            notifications.append(Notification.model_validate(doc))
        return notifications
    
    def mark_read(self, notification_id: str, requester_id: str, read_at: datetime) -> bool:
        """Mark a notification as read; never overwrites an existing read_at"""
        result = self._collection.update_one(
            {
                "notification_id": notification_id,
                "requester_id": requester_id,
                "read_at": None
            },
            {"$set": {"read_at": read_at}}
        )
        return result.modified_count > 0
