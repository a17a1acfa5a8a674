from typing import List
from sqlmodel import Session, select

from .....db.models import AIChatMessage
from .....application.ports.chat_repo import ChatRepository, ChatMessageDto


class SqlChatRepository(ChatRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, m: AIChatMessage) -> ChatMessageDto:
        return ChatMessageDto(
            id=m.id,
            user_id=m.user_id,
            audience=m.audience,
            sender=m.sender,
            content=m.content,
            created_at=m.created_at,
        )

    def add(self, user_id: int, audience: str, sender: str, content: str) -> ChatMessageDto:
        m = AIChatMessage(user_id=user_id, audience=audience, sender=sender, content=content)
        self.session.add(m)
        self.session.commit()
        self.session.refresh(m)
        return self._to_dto(m)

    def history(self, user_id: int, audience: str) -> List[ChatMessageDto]:
        rows = self.session.exec(
            select(AIChatMessage)
            .where(AIChatMessage.user_id == user_id)
            .where(AIChatMessage.audience == audience)
            .order_by(AIChatMessage.created_at, AIChatMessage.id)
        ).all()
        return [self._to_dto(r) for r in rows]
