from typing import List, Optional
from sqlmodel import Session, select

from .....db.models import DoctorAvailability
from .....application.ports.availability_repo import AvailabilityRepository, AvailabilityWindowDto
from .....application.services.timeslots import day_name


class SqlAvailabilityRepository(AvailabilityRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, a: DoctorAvailability) -> AvailabilityWindowDto:
        return AvailabilityWindowDto(
            id=a.id,
            doctor_id=a.doctor_id,
            day_of_week=a.day_of_week,
            day_name=day_name(a.day_of_week),
            start_time=a.start_time,
            end_time=a.end_time,
            created_at=a.created_at,
        )

    def list_for_doctor(self, doctor_id: int, day_of_week: Optional[int] = None) -> List[AvailabilityWindowDto]:
        stmt = select(DoctorAvailability).where(DoctorAvailability.doctor_id == doctor_id)
        if day_of_week is not None:
            stmt = stmt.where(DoctorAvailability.day_of_week == day_of_week)
        rows = self.session.exec(
            stmt.order_by(DoctorAvailability.day_of_week, DoctorAvailability.start_time)
        ).all()
        return [self._to_dto(r) for r in rows]

    def create(self, doctor_id: int, day_of_week: int, start_time: str, end_time: str) -> AvailabilityWindowDto:
        a = DoctorAvailability(doctor_id=doctor_id, day_of_week=day_of_week, start_time=start_time, end_time=end_time)
        self.session.add(a)
        self.session.commit()
        self.session.refresh(a)
        return self._to_dto(a)

    def delete(self, availability_id: int, doctor_id: int) -> bool:
        a = self.session.exec(
            select(DoctorAvailability)
            .where(DoctorAvailability.id == availability_id)
            .where(DoctorAvailability.doctor_id == doctor_id)
        ).first()
        if not a:
            return False
        self.session.delete(a)
        self.session.commit()
        return True
