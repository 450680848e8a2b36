"""
Caller identity from API Gateway JWT authorizer events.
"""
import logging
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)


def get_user_from_event(event: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Read the caller from requestContext.authorizer.jwt.claims.

    Returns:
        {"id", "email", "auth_time"} built from the claims, or None when the
        event carries no `sub` claim
    """
    authorizer = (event.get("requestContext") or {}).get("authorizer") or {}
    claims = (authorizer.get("jwt") or {}).get("claims") or {}

    user_sub = claims.get("sub")
    if not user_sub:
        logger.warning("Request has no sub claim")
        return None

    return {
        "id": user_sub,
        "email": claims.get("email", "unknown"),
        "auth_time": claims.get("auth_time"),
    }
