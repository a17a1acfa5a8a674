import jwt
import logging
from typing import Any, Dict, Optional

from .core.config import settings

logger = logging.getLogger(__name__)


def decode_jwt_token(token: str) -> Optional[Dict[str, Any]]:
    """Decode and verify a JWT issued by the auth service"""
    if not token or not settings.SECRET_KEY:
        return None
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("JWT token expired")
        return None
    except jwt.InvalidTokenError:
        return None


def claim_user_id(payload: Dict[str, Any]) -> Optional[int]:
    user_id = payload.get("userId", payload.get("sub"))
    if user_id is None or isinstance(user_id, bool):
        return None
    try:
        return int(user_id)
    except (ValueError, TypeError):
        return None
