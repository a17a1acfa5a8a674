from dataclasses import dataclass
from typing import List, Optional
from datetime import datetime, date


@dataclass
class BookedInterval:
    appointment_id: int
    start_time: str
    end_time: str


@dataclass
class AppointmentDto:
    id: int
    patient_id: int
    doctor_id: int
    appointment_date: date
    start_time: str
    end_time: str
    status: str
    appointment_type: str
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime


class SlotTakenError(Exception):
    """Raised by the store when a concurrent booking already holds the slot."""


class AppointmentsRepository:
    def list_booked(self, doctor_id: int, appointment_date: date) -> List[BookedInterval]:
        ...

    def create(self, patient_id: int, doctor_id: int, appointment_date: date, start_time: str, end_time: str, appointment_type: str, notes: Optional[str]) -> AppointmentDto:
        ...

    def list_for_patient(self, patient_id: int) -> List[AppointmentDto]:
        ...

    def list_for_doctor(self, doctor_id: int) -> List[AppointmentDto]:
        ...

    def get_by_id(self, appointment_id: int) -> Optional[AppointmentDto]:
        ...

    def update_status(self, appointment_id: int, status: str) -> AppointmentDto:
        ...
