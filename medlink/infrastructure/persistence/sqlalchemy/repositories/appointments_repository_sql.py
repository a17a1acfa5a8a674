from datetime import date, datetime
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....db.models import Appointment
from .....application.ports.appointments_repo import (
    AppointmentsRepository,
    AppointmentDto,
    BookedInterval,
    SlotTakenError,
)
from .....application.services.timeslots import BLOCKING_STATUSES


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _appt_to_dto(self, a: Appointment) -> AppointmentDto:
        return AppointmentDto(
            id=a.id,
            patient_id=a.patient_id,
            doctor_id=a.doctor_id,
            appointment_date=a.appointment_date,
            start_time=a.start_time,
            end_time=a.end_time,
            status=a.status,
            appointment_type=a.appointment_type,
            notes=a.notes,
            created_at=a.created_at,
            updated_at=a.updated_at,
        )

    def _commit(self) -> None:
        # The partial unique index rejects a second live booking for the same start
        try:
            self.session.commit()
        except IntegrityError as e:
            self.session.rollback()
            raise SlotTakenError(str(e.orig)) from e

    def list_booked(self, doctor_id: int, appointment_date: date) -> List[BookedInterval]:
        rows = self.session.exec(
            select(Appointment)
            .where(Appointment.doctor_id == doctor_id)
            .where(Appointment.appointment_date == appointment_date)
            .where(Appointment.status.in_(BLOCKING_STATUSES))
            .order_by(Appointment.start_time)
        ).all()
        return [BookedInterval(appointment_id=r.id, start_time=r.start_time, end_time=r.end_time) for r in rows]

    def create(self, patient_id: int, doctor_id: int, appointment_date: date, start_time: str, end_time: str, appointment_type: str, notes: Optional[str]) -> AppointmentDto:
        appt = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            appointment_date=appointment_date,
            start_time=start_time,
            end_time=end_time,
            appointment_type=appointment_type,
            notes=notes,
            status="scheduled",
        )
        self.session.add(appt)
        self._commit()
        self.session.refresh(appt)
        return self._appt_to_dto(appt)

    def list_for_patient(self, patient_id: int) -> List[AppointmentDto]:
        rows = self.session.exec(
            select(Appointment)
            .where(Appointment.patient_id == patient_id)
            .order_by(Appointment.appointment_date.desc(), Appointment.start_time.desc())
        ).all()
        return [self._appt_to_dto(r) for r in rows]

    def list_for_doctor(self, doctor_id: int) -> List[AppointmentDto]:
        rows = self.session.exec(
            select(Appointment)
            .where(Appointment.doctor_id == doctor_id)
            .order_by(Appointment.appointment_date.desc(), Appointment.start_time.desc())
        ).all()
        return [self._appt_to_dto(r) for r in rows]

    def get_by_id(self, appointment_id: int) -> Optional[AppointmentDto]:
        a = self.session.exec(select(Appointment).where(Appointment.id == appointment_id)).first()
        return self._appt_to_dto(a) if a else None

    def update_status(self, appointment_id: int, status: str) -> Optional[AppointmentDto]:
        a = self.session.exec(select(Appointment).where(Appointment.id == appointment_id)).first()
        if not a:
            return None
        a.status = status
        a.updated_at = datetime.utcnow()
        self.session.add(a)
        self._commit()
        self.session.refresh(a)
        return self._appt_to_dto(a)
