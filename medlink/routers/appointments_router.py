from dataclasses import asdict
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
import logging

from ..core.config import settings
from ..database import get_session
from ..schemas.appointments.appointment import (
    AvailabilityCreate,
    AvailabilityCreateResponse,
    AvailabilityResponse,
    SlotResponse,
    AppointmentCreate,
    AppointmentStatusUpdate,
    AppointmentResponse,
    AppointmentActionResponse,
)
from ..schemas.common.common import MessageResponse
from ..application.services.appointments_service import AppointmentsService
from ..application.services.availability_service import AvailabilityService
from ..application.ports.audit_logger import AuditLogger
from ..infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from ..infrastructure.persistence.sqlalchemy.repositories.availability_repository_sql import SqlAvailabilityRepository
from .deps import CurrentUser, get_audit_logger, get_current_user, require_doctor, require_patient

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/appointments", tags=["Appointments"])


def get_availability_service(session: Session = Depends(get_session)) -> AvailabilityService:
    return AvailabilityService(repo=SqlAvailabilityRepository(session))


def get_appointments_service(
    session: Session = Depends(get_session),
    audit: AuditLogger = Depends(get_audit_logger),
) -> AppointmentsService:
    return AppointmentsService(
        repo=SqlAppointmentsRepository(session),
        availability_repo=SqlAvailabilityRepository(session),
        audit=audit,
        slot_minutes=settings.SLOT_DURATION_MINUTES,
    )


@router.get("/availability", response_model=List[AvailabilityResponse])
def get_availability(
    current_user: CurrentUser = Depends(require_doctor),
    svc: AvailabilityService = Depends(get_availability_service),
):
    try:
        return [AvailabilityResponse(**asdict(w)) for w in svc.list_for_doctor(current_user.user_id)]
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching availability: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch availability")


@router.post("/availability", response_model=AvailabilityCreateResponse, status_code=201)
def add_availability(
    body: AvailabilityCreate,
    current_user: CurrentUser = Depends(require_doctor),
    svc: AvailabilityService = Depends(get_availability_service),
):
    try:
        window = svc.add(current_user.user_id, body.day_of_week, body.start_time, body.end_time)
        return AvailabilityCreateResponse(
            message="Availability added successfully",
            availability=AvailabilityResponse(**asdict(window)),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error adding availability: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to add availability")


@router.delete("/availability/{availability_id}", response_model=MessageResponse)
def delete_availability(
    availability_id: int,
    current_user: CurrentUser = Depends(require_doctor),
    svc: AvailabilityService = Depends(get_availability_service),
):
    try:
        svc.delete(current_user.user_id, availability_id)
        return MessageResponse(message="Availability deleted successfully")
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting availability: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to delete availability")


@router.get("/available-slots/{doctor_id}/{date}", response_model=List[SlotResponse])
def get_available_slots(
    doctor_id: int,
    date: str,
    svc: AppointmentsService = Depends(get_appointments_service),
):
    try:
        return [SlotResponse(**asdict(s)) for s in svc.available_slots(doctor_id, date)]
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching available slots: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch available slots")


@router.post("/", response_model=AppointmentActionResponse, status_code=201)
def book_appointment(
    body: AppointmentCreate,
    current_user: CurrentUser = Depends(require_patient),
    svc: AppointmentsService = Depends(get_appointments_service),
):
    try:
        appt = svc.book(
            patient_id=current_user.user_id,
            doctor_id=body.doctor_id,
            appointment_date=body.appointment_date,
            start_time=body.start_time,
            end_time=body.end_time,
            appointment_type=body.appointment_type,
            notes=body.notes,
        )
        return AppointmentActionResponse(
            message="Appointment booked successfully",
            appointment=AppointmentResponse(**asdict(appt)),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error booking appointment: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create appointment")


@router.get("/patient", response_model=List[AppointmentResponse])
def get_patient_appointments(
    current_user: CurrentUser = Depends(require_patient),
    svc: AppointmentsService = Depends(get_appointments_service),
):
    try:
        return [AppointmentResponse(**asdict(a)) for a in svc.list_for_patient(current_user.user_id)]
    except Exception as e:
        logger.error(f"Error retrieving patient appointments: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch appointments")


@router.get("/doctor", response_model=List[AppointmentResponse])
def get_doctor_appointments(
    current_user: CurrentUser = Depends(require_doctor),
    svc: AppointmentsService = Depends(get_appointments_service),
):
    try:
        return [AppointmentResponse(**asdict(a)) for a in svc.list_for_doctor(current_user.user_id)]
    except Exception as e:
        logger.error(f"Error retrieving doctor appointments: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to fetch appointments")


@router.put("/{appointment_id}/status", response_model=AppointmentActionResponse)
def update_appointment_status(
    appointment_id: int,
    body: AppointmentStatusUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    svc: AppointmentsService = Depends(get_appointments_service),
):
    try:
        appt = svc.update_status(current_user.user_id, appointment_id, body.status)
        return AppointmentActionResponse(
            message="Appointment status updated successfully",
            appointment=AppointmentResponse(**asdict(appt)),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating appointment status: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update appointment status")
