# medlink/schemas/ai/chat.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class ChatRequest(BaseModel):
    message: Optional[str] = None

class ChatResponse(BaseModel):
    message: str
    response: str

class ChatMessageResponse(BaseModel):
    id: int
    sender: str
    content: str
    created_at: datetime
