from dataclasses import dataclass
from typing import List, Optional
from fastapi import HTTPException

from ..ports.availability_repo import AvailabilityRepository, AvailabilityWindowDto
from .timeslots import normalize_time, time_to_minutes


@dataclass
class AvailabilityService:
    repo: AvailabilityRepository

    def list_for_doctor(self, doctor_id: int) -> List[AvailabilityWindowDto]:
        return self.repo.list_for_doctor(doctor_id)

    def add(self, doctor_id: int, day_of_week: Optional[int], start_time: Optional[str], end_time: Optional[str]) -> AvailabilityWindowDto:
        if day_of_week is None or not start_time or not end_time:
            raise HTTPException(status_code=400, detail="Day of week and times are required")
        if not 0 <= day_of_week <= 6:
            raise HTTPException(status_code=400, detail="Day of week must be between 0 (Sunday) and 6 (Saturday)")

        try:
            start_time = normalize_time(start_time)
            end_time = normalize_time(end_time)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid time format. Use HH:MM")
        if time_to_minutes(start_time) >= time_to_minutes(end_time):
            raise HTTPException(status_code=400, detail="Start time must be before end time")

        return self.repo.create(doctor_id, day_of_week, start_time, end_time)

    def delete(self, doctor_id: int, availability_id: int) -> None:
        if not self.repo.delete(availability_id, doctor_id):
            raise HTTPException(status_code=404, detail="Availability not found")
