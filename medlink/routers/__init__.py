# Routers package
from . import appointments_router
from . import trends_router
from . import alerts_router
from . import health_data_router
from . import patients_router
from . import ai_router

__all__ = [
    "appointments_router",
    "trends_router",
    "alerts_router",
    "health_data_router",
    "patients_router",
    "ai_router",
]
