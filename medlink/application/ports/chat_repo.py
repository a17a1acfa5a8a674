from dataclasses import dataclass
from typing import List
from datetime import datetime


@dataclass
class ChatMessageDto:
    id: int
    user_id: int
    audience: str
    sender: str
    content: str
    created_at: datetime


class ChatRepository:
    def add(self, user_id: int, audience: str, sender: str, content: str) -> ChatMessageDto:
        ...

    def history(self, user_id: int, audience: str) -> List[ChatMessageDto]:
        ...
