from datetime import datetime

import pytest
from fastapi import HTTPException

from medlink.application.ports.availability_repo import AvailabilityWindowDto
from medlink.application.services.availability_service import AvailabilityService
from medlink.application.services.timeslots import DAY_NAMES


class FakeAvailabilityRepo:
    def __init__(self):
        self._id = 1
        self.windows = []

    def list_for_doctor(self, doctor_id, day_of_week=None):
        return [w for w in self.windows if w.doctor_id == doctor_id]

    def create(self, doctor_id, day_of_week, start_time, end_time):
        w = AvailabilityWindowDto(self._id, doctor_id, day_of_week, DAY_NAMES[day_of_week], start_time, end_time, datetime.utcnow())
        self._id += 1
        self.windows.append(w)
        return w

    def delete(self, availability_id, doctor_id):
        before = len(self.windows)
        self.windows = [w for w in self.windows if not (w.id == availability_id and w.doctor_id == doctor_id)]
        return len(self.windows) < before


def test_add_normalizes_times():
    svc = AvailabilityService(repo=FakeAvailabilityRepo())
    w = svc.add(1, 1, "9:00", "12:00")
    assert (w.start_time, w.end_time, w.day_name) == ("09:00", "12:00", "Monday")
    assert svc.list_for_doctor(1) == [w]


@pytest.mark.parametrize("dow,start,end", [
    (None, "09:00", "10:00"),
    (7, "09:00", "10:00"),
    (-1, "09:00", "10:00"),
    (1, "9h", "10:00"),
    (1, "11:00", "10:00"),
    (1, "10:00", "10:00"),
])
def test_add_rejects_bad_windows(dow, start, end):
    svc = AvailabilityService(repo=FakeAvailabilityRepo())
    with pytest.raises(HTTPException) as exc:
        svc.add(1, dow, start, end)
    assert exc.value.status_code == 400


def test_delete_only_own_window():
    svc = AvailabilityService(repo=FakeAvailabilityRepo())
    w = svc.add(1, 1, "09:00", "12:00")
    with pytest.raises(HTTPException) as exc:
        svc.delete(2, w.id)
    assert exc.value.status_code == 404
    svc.delete(1, w.id)
    assert svc.list_for_doctor(1) == []
