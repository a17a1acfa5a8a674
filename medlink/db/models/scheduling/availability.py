# medlink/db/models/scheduling/availability.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime

class DoctorAvailability(SQLModel, table=True):
    __tablename__ = "doctor_availability"
    id: Optional[int] = Field(default=None, primary_key=True)
    doctor_id: int = Field(index=True)
    day_of_week: int  # 0 = Sunday .. 6 = Saturday
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    created_at: datetime = Field(default_factory=datetime.utcnow)
