# Schemas package (re-export feature modules for stable imports)
from .appointments.appointment import *
from .trends.trend import *
from .alerts.alert import *
from .health.health import *
from .ai.chat import *
from .patients.patient import *
from .common.common import *
