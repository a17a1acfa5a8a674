from datetime import datetime
from typing import Optional
from sqlmodel import Session, select

from .....db.models import Patient
from .....application.ports.patients_repo import PatientsRepository


class SqlPatientsRepository(PatientsRepository):
    def __init__(self, session: Session):
        self.session = session

    def get_doctor_id(self, user_id: int) -> Optional[int]:
        p = self.session.exec(select(Patient).where(Patient.user_id == user_id)).first()
        return p.doctor_id if p else None

    def connect_doctor(self, user_id: int, doctor_id: int) -> None:
        p = self.session.exec(select(Patient).where(Patient.user_id == user_id)).first()
        if not p:
            p = Patient(user_id=user_id)
        p.doctor_id = doctor_id
        p.updated_at = datetime.utcnow()
        self.session.add(p)
        self.session.commit()
