# medlink/db/models/scheduling/appointment.py
from typing import Optional
from sqlalchemy import Index, text
from sqlmodel import SQLModel, Field
from datetime import datetime, date

# Only one live booking may start at a given time for a doctor; cancelled and
# finished appointments release the slot.
_ACTIVE = text("status IN ('scheduled', 'confirmed')")

class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        Index(
            "uq_appointments_active_slot",
            "doctor_id",
            "appointment_date",
            "start_time",
            unique=True,
            sqlite_where=_ACTIVE,
            postgresql_where=_ACTIVE,
        ),
    )
    id: Optional[int] = Field(default=None, primary_key=True)
    patient_id: int = Field(index=True)
    doctor_id: int = Field(index=True)
    appointment_date: date
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    status: str = Field(default="scheduled")
    appointment_type: str
    notes: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
