from dataclasses import dataclass
from typing import Optional
import logging
from fastapi import HTTPException

from ..ports.patients_repo import PatientsRepository

logger = logging.getLogger(__name__)


@dataclass
class PatientsService:
    repo: PatientsRepository

    def connect_doctor(self, user_id: int, doctor_id: Optional[int]) -> int:
        if not doctor_id or doctor_id <= 0:
            raise HTTPException(status_code=400, detail="A valid doctor_id is required")
        if doctor_id == user_id:
            raise HTTPException(status_code=400, detail="A patient cannot be their own doctor")
        self.repo.connect_doctor(user_id, doctor_id)
        logger.info(f"Patient {user_id} connected to doctor {doctor_id}")
        return doctor_id

    def connected_doctor(self, user_id: int) -> int:
        doctor_id = self.repo.get_doctor_id(user_id)
        if not doctor_id:
            raise HTTPException(status_code=404, detail="No connected doctor found")
        return doctor_id
