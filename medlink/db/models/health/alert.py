# medlink/db/models/health/alert.py
from typing import Optional
from sqlalchemy import Column, Text
from sqlmodel import SQLModel, Field
from datetime import datetime

class Alert(SQLModel, table=True):
    __tablename__ = "alerts"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    doctor_id: Optional[int] = Field(default=None, index=True)
    alert_type: str = Field(default="general")
    title: str
    message: str
    severity: str = Field(default="medium")
    # JSON text; "metadata" is reserved on declarative classes
    meta_json: str = Field(default="{}", sa_column=Column("metadata", Text, nullable=False, default="{}"))
    is_read: bool = Field(default=False)
    is_dismissed: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
