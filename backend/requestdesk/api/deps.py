"""API Dependencies - Common dependencies for routes"""
from functools import lru_cache
from typing import Optional
from fastapi import Depends, Header, HTTPException, status

from ..domain.models import ActorContext
from ..domain.enums import UserRole
from ..domain.errors import PermissionDeniedError
from ..services.directory_service import DirectoryService
from ..services.notification_service import NotificationService
from ..services.review_service import ReviewService
from ..services.triage_service import TriageService


async def get_current_user_dep(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    x_user_role: Optional[str] = Header(None, alias="X-User-Role"),
    x_user_department: Optional[str] = Header(None, alias="X-User-Department")
) -> ActorContext:
    """
    Caller identity as forwarded by the authenticating gateway
    
    Raises:
        HTTPException: 401 if the identity headers are missing or malformed
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": {"code": "AUTHENTICATION_ERROR", "message": "X-User-Id header is missing"}}
        )
    
    try:
        role = UserRole((x_user_role or UserRole.EMPLOYEE.value).lower())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": {"code": "AUTHENTICATION_ERROR", "message": f"Unknown role: {x_user_role}"}}
        )
    
    return ActorContext(user_id=x_user_id, role=role, department=x_user_department or None)


async def require_reviewer_dep(
    actor: ActorContext = Depends(get_current_user_dep)
) -> ActorContext:
    """Only managers may review requests or send notices"""
    if not actor.is_reviewer:
        raise PermissionDeniedError(
            "Only managers can perform this action",
            details={"user_id": actor.user_id, "role": actor.role.value}
        )
    return actor


# Services are shared per process so the directory cache survives across requests

@lru_cache()
def get_directory_service() -> DirectoryService:
    return DirectoryService()


@lru_cache()
def get_notification_service() -> NotificationService:
    return NotificationService(directory=get_directory_service())


@lru_cache()
def get_triage_service() -> TriageService:
    return TriageService()


@lru_cache()
def get_review_service() -> ReviewService:
    return ReviewService(
        notification_service=get_notification_service(),
        directory=get_directory_service()
    )
