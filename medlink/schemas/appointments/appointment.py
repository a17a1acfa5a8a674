# medlink/schemas/appointments/appointment.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime, date

class AvailabilityCreate(BaseModel):
    day_of_week: Optional[int] = None  # 0 = Sunday .. 6 = Saturday
    start_time: Optional[str] = None  # HH:MM
    end_time: Optional[str] = None  # HH:MM

class AvailabilityResponse(BaseModel):
    id: int
    doctor_id: int
    day_of_week: int
    day_name: str
    start_time: str
    end_time: str
    created_at: datetime

class AvailabilityCreateResponse(BaseModel):
    message: str
    availability: AvailabilityResponse

class SlotResponse(BaseModel):
    start_time: str
    end_time: str
    day_name: Optional[str] = None

class AppointmentCreate(BaseModel):
    doctor_id: Optional[int] = None
    appointment_date: Optional[str] = None  # YYYY-MM-DD
    start_time: Optional[str] = None  # HH:MM
    end_time: Optional[str] = None  # HH:MM
    appointment_type: Optional[str] = None
    notes: Optional[str] = None

class AppointmentStatusUpdate(BaseModel):
    status: str

class AppointmentResponse(BaseModel):
    id: int
    patient_id: int
    doctor_id: int
    appointment_date: date
    start_time: str
    end_time: str
    status: str
    appointment_type: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class AppointmentActionResponse(BaseModel):
    message: str
    appointment: AppointmentResponse
