from datetime import datetime, date

import pytest
from fastapi import HTTPException

from medlink.application.ports.appointments_repo import AppointmentDto, BookedInterval, SlotTakenError
from medlink.application.ports.availability_repo import AvailabilityWindowDto
from medlink.application.services.appointments_service import AppointmentsService
from medlink.application.services.timeslots import BLOCKING_STATUSES, DAY_NAMES

MONDAY = "2030-01-07"


class FakeApptRepo:
    def __init__(self):
        self._id = 1
        self.appts = []
        self.race = False

    def list_booked(self, doctor_id: int, appointment_date: date):
        return [
            BookedInterval(a.id, a.start_time, a.end_time)
            for a in self.appts
            if a.doctor_id == doctor_id and a.appointment_date == appointment_date and a.status in BLOCKING_STATUSES
        ]

    def create(self, patient_id, doctor_id, appointment_date, start_time, end_time, appointment_type, notes):
        if self.race:
            raise SlotTakenError("duplicate")
        now = datetime.utcnow()
        a = AppointmentDto(self._id, patient_id, doctor_id, appointment_date, start_time, end_time, "scheduled", appointment_type, notes, now, now)
        self.appts.append(a)
        self._id += 1
        return a

    def list_for_patient(self, patient_id: int):
        return [a for a in self.appts if a.patient_id == patient_id]

    def list_for_doctor(self, doctor_id: int):
        return [a for a in self.appts if a.doctor_id == doctor_id]

    def get_by_id(self, appointment_id: int):
        return next((a for a in self.appts if a.id == appointment_id), None)

    def update_status(self, appointment_id: int, status: str):
        a = self.get_by_id(appointment_id)
        a.status = status
        return a


class FakeAvailabilityRepo:
    def __init__(self, windows=None):
        self.windows = windows or []

    def list_for_doctor(self, doctor_id, day_of_week=None):
        return [
            w for w in self.windows
            if w.doctor_id == doctor_id and (day_of_week is None or w.day_of_week == day_of_week)
        ]


class FakeAudit:
    def __init__(self):
        self.events = []

    def log(self, action, user_id=None, success=True, details=None):
        self.events.append((action, user_id))


def window(doctor_id, dow, start, end):
    return AvailabilityWindowDto(1, doctor_id, dow, DAY_NAMES[dow], start, end, datetime.utcnow())


@pytest.fixture
def repo():
    return FakeApptRepo()


@pytest.fixture
def svc(repo):
    return AppointmentsService(repo=repo, availability_repo=FakeAvailabilityRepo(), audit=FakeAudit())


def test_book_success(svc):
    out = svc.book(10, 1, MONDAY, "9:00", "10:00", "consultation")
    assert out.id == 1
    assert out.status == "scheduled"
    assert out.start_time == "09:00"
    assert out.appointment_date == date(2030, 1, 7)
    assert svc.audit.events == [("appointment_booked", 10)]


@pytest.mark.parametrize("first,second", [
    (("10:00", "11:00"), ("09:30", "10:30")),
    (("09:30", "10:30"), ("10:00", "11:00")),
    (("09:00", "12:00"), ("10:00", "10:30")),
    (("10:00", "10:30"), ("09:00", "12:00")),
])
def test_overlap_rejected_in_either_order(svc, first, second):
    svc.book(10, 1, MONDAY, first[0], first[1], "consultation")
    with pytest.raises(HTTPException) as exc:
        svc.book(11, 1, MONDAY, second[0], second[1], "consultation")
    assert exc.value.status_code == 409
    assert exc.value.detail == "Time slot is no longer available"


def test_adjacent_bookings_allowed(svc):
    svc.book(10, 1, MONDAY, "09:00", "10:00", "consultation")
    out = svc.book(11, 1, MONDAY, "10:00", "11:00", "consultation")
    assert out.id == 2


def test_other_doctor_or_day_not_in_conflict(svc):
    svc.book(10, 1, MONDAY, "09:00", "10:00", "consultation")
    svc.book(11, 2, MONDAY, "09:00", "10:00", "consultation")
    svc.book(12, 1, "2030-01-08", "09:00", "10:00", "consultation")


def test_cancelled_appointment_releases_slot(svc, repo):
    first = svc.book(10, 1, MONDAY, "09:00", "10:00", "consultation")
    svc.update_status(10, first.id, "cancelled")
    out = svc.book(11, 1, MONDAY, "09:00", "10:00", "consultation")
    assert out.status == "scheduled"


@pytest.mark.parametrize("start,end", [("25:00", "26:00"), ("9am", "10:00"), ("09:00", "")])
def test_invalid_times_rejected(svc, start, end):
    with pytest.raises(HTTPException) as exc:
        svc.book(10, 1, MONDAY, start, end, "consultation")
    assert exc.value.status_code == 400


def test_start_must_precede_end(svc):
    with pytest.raises(HTTPException) as exc:
        svc.book(10, 1, MONDAY, "10:00", "10:00", "consultation")
    assert exc.value.status_code == 400


def test_missing_fields_rejected(svc):
    with pytest.raises(HTTPException) as exc:
        svc.book(10, None, MONDAY, "09:00", "10:00", "consultation")
    assert exc.value.detail == "All required fields must be provided"


def test_bad_date_rejected(svc):
    with pytest.raises(HTTPException) as exc:
        svc.book(10, 1, "07/01/2030", "09:00", "10:00", "consultation")
    assert exc.value.status_code == 400


def test_store_level_duplicate_maps_to_conflict(svc, repo):
    repo.race = True
    with pytest.raises(HTTPException) as exc:
        svc.book(10, 1, MONDAY, "09:00", "10:00", "consultation")
    assert exc.value.status_code == 409


def test_update_status_validates_status(svc):
    appt = svc.book(10, 1, MONDAY, "09:00", "10:00", "consultation")
    with pytest.raises(HTTPException) as exc:
        svc.update_status(10, appt.id, "postponed")
    assert exc.value.status_code == 400


def test_update_status_requires_participant(svc):
    appt = svc.book(10, 1, MONDAY, "09:00", "10:00", "consultation")
    with pytest.raises(HTTPException) as exc:
        svc.update_status(99, appt.id, "confirmed")
    assert exc.value.status_code == 404
    assert svc.update_status(1, appt.id, "confirmed").status == "confirmed"


def test_reactivation_rechecks_conflicts(svc):
    first = svc.book(10, 1, MONDAY, "09:00", "10:00", "consultation")
    svc.update_status(10, first.id, "cancelled")
    svc.book(11, 1, MONDAY, "09:30", "10:30", "consultation")
    with pytest.raises(HTTPException) as exc:
        svc.update_status(10, first.id, "scheduled")
    assert exc.value.status_code == 409


def test_available_slots_excludes_booked(repo):
    availability = FakeAvailabilityRepo([window(1, 1, "09:00", "12:00"), window(1, 2, "09:00", "17:00")])
    svc = AppointmentsService(repo=repo, availability_repo=availability)
    svc.book(10, 1, MONDAY, "10:00", "11:00", "consultation")
    slots = svc.available_slots(1, MONDAY)
    assert [(s.start_time, s.day_name) for s in slots] == [("09:00", "Monday"), ("11:00", "Monday")]


def test_available_slots_no_availability(svc):
    assert svc.available_slots(1, MONDAY) == []


def test_available_slots_bad_date(svc):
    with pytest.raises(HTTPException) as exc:
        svc.available_slots(1, "not-a-date")
    assert exc.value.status_code == 400


def test_list_for_patient_and_doctor(svc):
    svc.book(10, 1, MONDAY, "09:00", "10:00", "consultation")
    svc.book(11, 1, MONDAY, "10:00", "11:00", "follow_up")
    assert [a.patient_id for a in svc.list_for_patient(10)] == [10]
    assert len(svc.list_for_doctor(1)) == 2
