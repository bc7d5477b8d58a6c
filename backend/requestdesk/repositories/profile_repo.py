"""Profile Repository - Read access to requester profiles

Profiles are owned by the identity system; this service only reads them.
"""
from abc import ABC, abstractmethod
from typing import List, Optional
from pymongo.collection import Collection
from pymongo import ASCENDING

from .mongo_client import get_collection
from ..domain.models import RequesterProfile


class ProfileRepository(ABC):
    """Source of requester profiles"""
    
    @abstractmethod
    def get_profile(self, user_id: str) -> Optional[RequesterProfile]:
        """Get profile by user ID"""
    
    @abstractmethod
    def list_profiles(self) -> List[RequesterProfile]:
        """All known profiles"""


class MongoProfileRepository(ProfileRepository):
    """MongoDB-backed profile lookups"""
    
    COLLECTION_NAME = "profiles"
    
    def __init__(self, collection: Optional[Collection] = None):
        self._collection: Collection = collection if collection is not None else get_collection(self.COLLECTION_NAME)
    
    def get_profile(self, user_id: str) -> Optional[RequesterProfile]:
        doc = self._collection.find_one({"user_id": user_id})
        if doc:
            doc.pop("_id", None)
            return RequesterProfile.model_validate(doc)
        return None
    
    def list_profiles(self) -> List[RequesterProfile]:
        cursor = self._collection.find({}).sort("full_name", ASCENDING)
        profiles = []
        for doc in cursor:
            doc.pop("_id", None)
            profiles.append(RequesterProfile.model_validate(doc))
        return profiles
