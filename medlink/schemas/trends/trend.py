# medlink/schemas/trends/trend.py
from pydantic import BaseModel

class TrendSnapshot(BaseModel):
    spo2_current: float = 0
    spo2_previous: float = 0
    spo2_pct_change: float = 0
    heart_rate_current: float = 0
    heart_rate_previous: float = 0
    heart_rate_pct_change: float = 0
    respiratory_rate_current: float = 0
    respiratory_rate_previous: float = 0
    respiratory_rate_pct_change: float = 0
    temperature_current: float = 0
    temperature_previous: float = 0
    temperature_pct_change: float = 0
    calories_current: float = 0
    calories_previous: float = 0
    calories_pct_change: float = 0
    sleep_current: float = 0
    sleep_previous: float = 0
    sleep_pct_change: float = 0

class TrendsResponse(BaseModel):
    daily: TrendSnapshot
    weekly: TrendSnapshot
    monthly: TrendSnapshot
