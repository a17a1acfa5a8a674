from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional
import logging
from fastapi import HTTPException

from ..ports.chat_repo import ChatRepository, ChatMessageDto
from ..ports.metrics_repo import MetricsRepository
from ..ports.ai_provider import AIProvider
from .health_context import (
    DOCTOR_TODAY_SERIES,
    PATIENT_TODAY_SERIES,
    build_sleep_history,
    build_snapshot,
    collect_series,
    start_of_day,
)
from .prompts import build_doctor_chat_prompt, build_patient_chat_prompt

logger = logging.getLogger(__name__)

PATIENT = "patient"
DOCTOR = "doctor"

USER_SENDER = "user"
ASSISTANT_SENDER = "assistant"

EMPTY_REPLY = {
    PATIENT: "Sorry, I could not process your request right now.",
    DOCTOR: "Unable to process clinical data at this time.",
}
UNAVAILABLE_REPLY = "I'm experiencing technical difficulties. Please try again later."


@dataclass
class ChatService:
    chat_repo: ChatRepository
    metrics_repo: MetricsRepository
    ai_provider: Optional[AIProvider] = None
    clock: Callable[[], datetime] = field(default=datetime.now)

    def history(self, user_id: int, audience: str) -> List[ChatMessageDto]:
        return self.chat_repo.history(user_id, audience)

    def ask(self, user_id: int, audience: str, message: Optional[str]) -> str:
        if not message or not message.strip():
            raise HTTPException(status_code=400, detail="Message is required")
        if audience not in EMPTY_REPLY:
            raise ValueError(f"Unknown chat audience: {audience}")

        self.chat_repo.add(user_id, audience, USER_SENDER, message)
        reply = self._reply(audience, self._prompt(audience, message))
        self.chat_repo.add(user_id, audience, ASSISTANT_SENDER, reply)
        return reply

    def _prompt(self, audience: str, message: str) -> str:
        now = self.clock()
        today: date = now.date()
        snapshot = build_snapshot(self.metrics_repo, today)
        sleep = build_sleep_history(self.metrics_repo, today)
        specs = PATIENT_TODAY_SERIES if audience == PATIENT else DOCTOR_TODAY_SERIES
        series = collect_series(self.metrics_repo, specs, start_of_day(today), start_of_day(today + timedelta(days=1)))
        if audience == PATIENT:
            return build_patient_chat_prompt(message, snapshot, sleep, series)
        return build_doctor_chat_prompt(message, snapshot, sleep, series)

    def _reply(self, audience: str, prompt: str) -> str:
        if self.ai_provider is None:
            logger.warning("AI provider not configured, returning fallback reply")
            return UNAVAILABLE_REPLY
        try:
            text = self.ai_provider.generate_text(prompt)
        except Exception as e:
            logger.error(f"AI provider call failed: {e}")
            return UNAVAILABLE_REPLY
        return text or EMPTY_REPLY[audience]
