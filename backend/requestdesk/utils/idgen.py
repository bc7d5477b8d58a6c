"""ID Generation Utilities"""
import uuid
from datetime import datetime, timezone
from typing import Optional


def generate_id(prefix: Optional[str] = None) -> str:
    """
    Generate a unique ID with optional prefix
    
    Args:
        prefix: Optional prefix for the ID (e.g., 'REQ', 'NTF')
        
    Returns:
        Unique ID string
        
    Examples:
        >>> generate_id('REQ')
        'REQ-a1b2c3d4e5f6'
        >>> generate_id()
        'a1b2c3d4e5f6'
    """
    # Generate short unique ID from UUID4
    unique_part = uuid.uuid4().hex[:12]
    
    if prefix:
        return f"{prefix}-{unique_part}"
    return unique_part


def generate_request_id() -> str:
    """Generate request ID"""
    return generate_id("REQ")


def generate_notification_id() -> str:
    """Generate notification ID"""
    return generate_id("NTF")


def decision_notification_id(request_id: str) -> str:
    """
    Deterministic notification ID for the decision on a request
    
    A request is decided at most once, so re-dispatching the decision
    notification always targets the same ID.
    """
    return f"NTF-DEC-{request_id}"


def generate_correlation_id() -> str:
    """
    Generate a correlation ID for request tracing
    
    Returns:
        Correlation ID string with timestamp prefix
    """
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    unique_part = uuid.uuid4().hex[:8]
    return f"COR-{timestamp}-{unique_part}"
