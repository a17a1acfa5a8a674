from typing import Optional


class PatientsRepository:
    def get_doctor_id(self, user_id: int) -> Optional[int]:
        ...

    def connect_doctor(self, user_id: int, doctor_id: int) -> None:
        ...
