# medlink/db/models/health/chat_message.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime

class AIChatMessage(SQLModel, table=True):
    __tablename__ = "ai_messages"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    audience: str = Field(default="patient")  # patient | doctor
    sender: str  # user | assistant
    content: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
