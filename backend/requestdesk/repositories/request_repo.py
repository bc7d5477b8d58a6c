"""Request Repository - Data access for employee requests

The store owns canonical request state. Writers go through two narrow
operations only: create-once and a conditional status update.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from pymongo.collection import Collection
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError

from .mongo_client import get_collection
from ..domain.models import Request
from ..domain.enums import RequestStatus
from ..domain.errors import ConflictError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class RequestRepository(ABC):
    """Lifecycle store consumed by the triage and review services"""
    
    @abstractmethod
    def create_request(self, request: Request) -> str:
        """Persist a new request, returning its ID"""
    
    @abstractmethod
    def get_request(self, request_id: str) -> Optional[Request]:
        """Get request by ID"""
    
    @abstractmethod
    def list_requests_by_requester(self, requester_id: str) -> List[Request]:
        """Requests submitted by one requester, newest first"""
    
    @abstractmethod
    def list_all_requests(self) -> List[Request]:
        """Every request, newest first (reviewer view)"""
    
    @abstractmethod
    def update_request_status(
        self,
        request_id: str,
        expected_status: RequestStatus,
        new_status: RequestStatus,
        reviewer_id: str,
        comment: Optional[str],
        reviewed_at: datetime
    ) -> bool:
        """
        Compare-and-set on status
        
        Returns:
            False when the stored status is not expected_status
            (or the request does not exist); nothing is written then.
        """


class MongoRequestRepository(RequestRepository):
    """MongoDB-backed request store"""
    
    COLLECTION_NAME = "requests"
    
    def __init__(self, collection: Optional[Collection] = None):
        self._requests: Collection = collection if collection is not None else get_collection(self.COLLECTION_NAME)
    
    def create_request(self, request: Request) -> str:
        """Create a new request"""
        # Don't use mode="json" - it converts datetime to strings, breaking MongoDB sorting
        doc = request.model_dump()
        doc["_id"] = request.request_id
        
        try:
            self._requests.insert_one(doc)
        except DuplicateKeyError:
            raise ConflictError(
                f"Request {request.request_id} already exists",
                details={"request_id": request.request_id}
            )
        
        logger.info(
            f"Created request: {request.request_id}",
            extra={"request_id": request.request_id, "requester_id": request.requester_id}
        )
        return request.request_id
    
    def get_request(self, request_id: str) -> Optional[Request]:
        """Get request by ID"""
        doc = self._requests.find_one({"request_id": request_id})
        if doc:
            doc.pop("_id", None)
            return Request.model_validate(doc)
        return None
    
    def list_requests_by_requester(self, requester_id: str) -> List[Request]:
        """List a requester's own requests, newest first"""
        cursor = self._requests.find({"requester_id": requester_id}).sort("created_at", DESCENDING)
        return self._to_models(cursor)
    
    def list_all_requests(self) -> List[Request]:
        """List all requests, newest first"""
        cursor = self._requests.find({}).sort("created_at", DESCENDING)
        return self._to_models(cursor)
    
    def update_request_status(
        self,
        request_id: str,
        expected_status: RequestStatus,
        new_status: RequestStatus,
        reviewer_id: str,
        comment: Optional[str],
        reviewed_at: datetime
    ) -> bool:
        """Single conditional update keyed on the expected status"""
        result = self._requests.update_one(
            {"request_id": request_id, "status": expected_status.value},
            {
                "$set": {
                    "status": new_status.value,
                    "reviewed_by": reviewer_id,
                    "reviewed_at": reviewed_at,
                    "manager_comment": comment,
                }
            }
        )
        
        if result.matched_count == 0:
            logger.info(
                f"Status update lost for request {request_id}",
                extra={"request_id": request_id, "status": expected_status.value}
            )
            return False
        
        logger.info(
            f"Updated request {request_id} to {new_status.value}",
            extra={"request_id": request_id, "status": new_status.value, "reviewer_id": reviewer_id}
        )
        return True
    
    @staticmethod
    def _to_models(cursor) -> List[Request]:
        requests = []
        for doc in cursor:
            doc.pop("_id", None)
            requests.append(Request.model_validate(doc))
        return requests
