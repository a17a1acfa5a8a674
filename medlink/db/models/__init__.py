# Models package (re-export feature modules for stable imports)
from .scheduling.availability import DoctorAvailability
from .scheduling.appointment import Appointment
from .health.metric import HealthRealtime, HealthAggregated, SleepAnalysis
from .health.alert import Alert
from .health.chat_message import AIChatMessage
from .users.patient import Patient

__all__ = [
    "DoctorAvailability",
    "Appointment",
    "HealthRealtime",
    "HealthAggregated",
    "SleepAnalysis",
    "Alert",
    "AIChatMessage",
    "Patient",
]
