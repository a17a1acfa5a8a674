from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
import logging
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..core.config import settings
from ..utils import decode_jwt_token, claim_user_id
from ..application.ports.ai_provider import AIProvider
from ..application.ports.audit_logger import AuditLogger
from ..infrastructure.audit.std_logger import StdAuditLogger

logger = logging.getLogger(__name__)

DOCTOR = "doctor"
PATIENT = "patient"

oauth2_scheme = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    user_id: int
    role: Optional[str] = None


def get_current_user(credentials: Optional[HTTPAuthorizationCredentials] = Depends(oauth2_scheme)) -> CurrentUser:
    if not credentials or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Access token required")
    payload = decode_jwt_token(credentials.credentials)
    if not payload:
        logger.warning("JWT token decode failed - invalid or expired token")
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    user_id = claim_user_id(payload)
    if user_id is None:
        logger.warning("JWT token missing user ID")
        raise HTTPException(status_code=401, detail="Invalid token: missing user ID")
    return CurrentUser(user_id=user_id, role=payload.get("role"))


def require_doctor(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if user.role != DOCTOR:
        raise HTTPException(status_code=403, detail="Doctor access required")
    return user


def require_patient(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if user.role != PATIENT:
        raise HTTPException(status_code=403, detail="Patient access required")
    return user


@lru_cache()
def _gemini_provider() -> AIProvider:
    from ..infrastructure.ai.gemini_provider import GeminiProvider
    return GeminiProvider()


def get_ai_provider() -> Optional[AIProvider]:
    if not settings.ai_configured:
        return None
    return _gemini_provider()


def get_audit_logger() -> AuditLogger:
    return StdAuditLogger()
