# medlink/db/models/users/patient.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime

class Patient(SQLModel, table=True):
    __tablename__ = "patients"
    user_id: int = Field(primary_key=True)
    doctor_id: Optional[int] = Field(default=None, index=True)  # doctor's user id
    updated_at: datetime = Field(default_factory=datetime.utcnow)
