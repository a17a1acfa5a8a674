from dataclasses import dataclass
from typing import List, Optional
from datetime import datetime


@dataclass
class AvailabilityWindowDto:
    id: int
    doctor_id: int
    day_of_week: int
    day_name: str
    start_time: str
    end_time: str
    created_at: datetime


class AvailabilityRepository:
    def list_for_doctor(self, doctor_id: int, day_of_week: Optional[int] = None) -> List[AvailabilityWindowDto]:
        ...

    def create(self, doctor_id: int, day_of_week: int, start_time: str, end_time: str) -> AvailabilityWindowDto:
        ...

    def delete(self, availability_id: int, doctor_id: int) -> bool:
        ...
