from datetime import datetime

import pytest
from fastapi import HTTPException

from medlink.application.ports.chat_repo import ChatMessageDto
from medlink.application.ports.metrics_repo import REALTIME
from medlink.application.services.chat_service import (
    DOCTOR,
    EMPTY_REPLY,
    PATIENT,
    UNAVAILABLE_REPLY,
    ChatService,
)

NOW = datetime(2024, 5, 15, 14, 0)


class FakeChatRepo:
    def __init__(self):
        self.messages = []

    def add(self, user_id, audience, sender, content):
        m = ChatMessageDto(len(self.messages) + 1, user_id, audience, sender, content, NOW)
        self.messages.append(m)
        return m

    def history(self, user_id, audience):
        return [m for m in self.messages if m.user_id == user_id and m.audience == audience]


class FakeAI:
    def __init__(self, reply="All good.", error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    def generate_text(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.reply


def make(metrics_repo, ai):
    return ChatService(chat_repo=FakeChatRepo(), metrics_repo=metrics_repo, ai_provider=ai, clock=lambda: NOW)


def test_empty_message_rejected(metrics_repo):
    svc = make(metrics_repo, FakeAI())
    with pytest.raises(HTTPException) as exc:
        svc.ask(1, PATIENT, "   ")
    assert exc.value.status_code == 400
    assert svc.history(1, PATIENT) == []


def test_reply_stored_after_question(metrics_repo):
    metrics_repo.add(REALTIME, "heart_rate", datetime(2024, 5, 15, 9, 0), 72)
    ai = FakeAI()
    svc = make(metrics_repo, ai)

    assert svc.ask(1, PATIENT, "How is my heart?") == "All good."

    history = svc.history(1, PATIENT)
    assert [(m.sender, m.content) for m in history] == [("user", "How is my heart?"), ("assistant", "All good.")]
    assert '"current_heart_rate": 72' in ai.prompts[0]
    assert "How is my heart?" in ai.prompts[0]


def test_doctor_prompt_and_history_are_separate(metrics_repo):
    ai = FakeAI()
    svc = make(metrics_repo, ai)
    svc.ask(3, DOCTOR, "Summarize the week")
    assert "physician" in ai.prompts[0]
    assert svc.history(3, PATIENT) == []
    assert len(svc.history(3, DOCTOR)) == 2


def test_provider_error_returns_apology(metrics_repo):
    svc = make(metrics_repo, FakeAI(error=RuntimeError("quota")))
    assert svc.ask(1, PATIENT, "hi") == UNAVAILABLE_REPLY
    assert svc.history(1, PATIENT)[-1].content == UNAVAILABLE_REPLY


def test_missing_provider_returns_apology(metrics_repo):
    assert make(metrics_repo, None).ask(1, PATIENT, "hi") == UNAVAILABLE_REPLY


def test_empty_reply_uses_audience_fallback(metrics_repo):
    svc = make(metrics_repo, FakeAI(reply=""))
    assert svc.ask(3, DOCTOR, "status?") == EMPTY_REPLY[DOCTOR]
