from dataclasses import dataclass
from typing import List, Optional
from datetime import datetime, date
import logging
from fastapi import HTTPException

from ..ports.appointments_repo import AppointmentsRepository, AppointmentDto, BookedInterval, SlotTakenError
from ..ports.availability_repo import AvailabilityRepository
from ..ports.audit_logger import AuditLogger
from .timeslots import (
    BLOCKING_STATUSES,
    Slot,
    day_of_week,
    generate_slots,
    intervals_overlap,
    normalize_time,
    time_to_minutes,
)

logger = logging.getLogger(__name__)

VALID_STATUSES = ["scheduled", "confirmed", "cancelled", "completed", "no_show"]

SLOT_TAKEN = "Time slot is no longer available"


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid date format. Use YYYY-MM-DD")


@dataclass
class AppointmentsService:
    repo: AppointmentsRepository
    availability_repo: AvailabilityRepository
    audit: Optional[AuditLogger] = None
    slot_minutes: int = 60

    def available_slots(self, doctor_id: int, date_str: str) -> List[Slot]:
        appointment_date = parse_date(date_str)
        windows = self.availability_repo.list_for_doctor(doctor_id, day_of_week(appointment_date))
        booked = self.repo.list_booked(doctor_id, appointment_date)
        try:
            return generate_slots(windows, booked, self.slot_minutes)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    def book(
        self,
        patient_id: int,
        doctor_id: Optional[int],
        appointment_date: Optional[str],
        start_time: Optional[str],
        end_time: Optional[str],
        appointment_type: Optional[str],
        notes: Optional[str] = None,
    ) -> AppointmentDto:
        if not doctor_id or not appointment_date or not start_time or not end_time or not appointment_type:
            raise HTTPException(status_code=400, detail="All required fields must be provided")

        day = parse_date(appointment_date)
        try:
            start_time = normalize_time(start_time)
            end_time = normalize_time(end_time)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid appointment time format. Use HH:MM")
        start = time_to_minutes(start_time)
        end = time_to_minutes(end_time)
        if start >= end:
            raise HTTPException(status_code=400, detail="Start time must be before end time")

        if self.find_conflict(doctor_id, day, start, end):
            raise HTTPException(status_code=409, detail=SLOT_TAKEN)

        try:
            appt = self.repo.create(
                patient_id,
                doctor_id,
                day,
                start_time,
                end_time,
                appointment_type,
                notes,
            )
        except SlotTakenError:
            logger.warning(f"Concurrent booking for doctor {doctor_id} on {day} at {start_time}")
            raise HTTPException(status_code=409, detail=SLOT_TAKEN)

        if self.audit:
            self.audit.log("appointment_booked", user_id=patient_id, details={"appointment_id": appt.id, "doctor_id": doctor_id})
        return appt

    def find_conflict(self, doctor_id: int, appointment_date: date, start: int, end: int, exclude_id: Optional[int] = None) -> Optional[BookedInterval]:
        for booked in self.repo.list_booked(doctor_id, appointment_date):
            if booked.appointment_id == exclude_id:
                continue
            try:
                booked_start = time_to_minutes(booked.start_time)
                booked_end = time_to_minutes(booked.end_time)
            except ValueError:
                logger.warning(f"Skipping appointment {booked.appointment_id} with unreadable times")
                continue
            if intervals_overlap(start, end, booked_start, booked_end):
                return booked
        return None

    def list_for_patient(self, patient_id: int) -> List[AppointmentDto]:
        return self.repo.list_for_patient(patient_id)

    def list_for_doctor(self, doctor_id: int) -> List[AppointmentDto]:
        return self.repo.list_for_doctor(doctor_id)

    def update_status(self, user_id: int, appointment_id: int, status: str) -> AppointmentDto:
        if status not in VALID_STATUSES:
            raise HTTPException(status_code=400, detail=f"Invalid status. Must be one of: {VALID_STATUSES}")

        appt = self.repo.get_by_id(appointment_id)
        if not appt or user_id not in (appt.patient_id, appt.doctor_id):
            raise HTTPException(status_code=404, detail="Appointment not found or access denied")

        if status in BLOCKING_STATUSES and appt.status not in BLOCKING_STATUSES:
            conflict = self.find_conflict(
                appt.doctor_id,
                appt.appointment_date,
                time_to_minutes(appt.start_time),
                time_to_minutes(appt.end_time),
                exclude_id=appt.id,
            )
            if conflict:
                raise HTTPException(status_code=409, detail=SLOT_TAKEN)

        try:
            updated = self.repo.update_status(appointment_id, status)
        except SlotTakenError:
            raise HTTPException(status_code=409, detail=SLOT_TAKEN)

        if self.audit:
            self.audit.log("appointment_status_changed", user_id=user_id, details={"appointment_id": appointment_id, "status": status})
        return updated
