from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
import logging

from ..database import get_session
from ..schemas.ai.chat import ChatRequest, ChatResponse, ChatMessageResponse
from ..application.services.chat_service import ChatService, DOCTOR, PATIENT
from ..application.ports.ai_provider import AIProvider
from ..infrastructure.persistence.sqlalchemy.repositories.chat_repository_sql import SqlChatRepository
from ..infrastructure.persistence.sqlalchemy.repositories.metrics_repository_sql import SqlMetricsRepository
from .deps import CurrentUser, get_ai_provider, require_doctor, require_patient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["AI Assistant"])
doctor_router = APIRouter(prefix="/api/doctor/ai", tags=["AI Assistant"])


def get_chat_service(
    session: Session = Depends(get_session),
    ai_provider: Optional[AIProvider] = Depends(get_ai_provider),
) -> ChatService:
    return ChatService(
        chat_repo=SqlChatRepository(session),
        metrics_repo=SqlMetricsRepository(session),
        ai_provider=ai_provider,
    )


def _chat(svc: ChatService, user_id: int, audience: str, message: Optional[str]) -> ChatResponse:
    try:
        reply = svc.ask(user_id, audience, message)
        return ChatResponse(message="AI response generated", response=reply)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error in {audience} AI chat: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to process AI chat")


def _history(svc: ChatService, user_id: int, audience: str) -> List[ChatMessageResponse]:
    try:
        return [
            ChatMessageResponse(id=m.id, sender=m.sender, content=m.content, created_at=m.created_at)
            for m in svc.history(user_id, audience)
        ]
    except Exception as e:
        logger.error(f"Error fetching {audience} AI conversation: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch AI conversation")


@router.post("/chat", response_model=ChatResponse)
def patient_chat(
    body: ChatRequest,
    current_user: CurrentUser = Depends(require_patient),
    svc: ChatService = Depends(get_chat_service),
):
    return _chat(svc, current_user.user_id, PATIENT, body.message)


@router.get("/conversations", response_model=List[ChatMessageResponse])
def patient_conversation(
    current_user: CurrentUser = Depends(require_patient),
    svc: ChatService = Depends(get_chat_service),
):
    return _history(svc, current_user.user_id, PATIENT)


@doctor_router.post("/chat", response_model=ChatResponse)
def doctor_chat(
    body: ChatRequest,
    current_user: CurrentUser = Depends(require_doctor),
    svc: ChatService = Depends(get_chat_service),
):
    return _chat(svc, current_user.user_id, DOCTOR, body.message)


@doctor_router.get("/conversations", response_model=List[ChatMessageResponse])
def doctor_conversation(
    current_user: CurrentUser = Depends(require_doctor),
    svc: ChatService = Depends(get_chat_service),
):
    return _history(svc, current_user.user_id, DOCTOR)
