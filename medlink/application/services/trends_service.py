"""Period-over-period health trends.

Every tracked metric is reported for three windows (daily, weekly, monthly)
as a current value, a previous value and the percentage change between them.
"""
import math
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from ..ports.metrics_repo import AGGREGATED, REALTIME, WRIST_TEMPERATURE, MetricsRepository
from .health_context import start_of_day

TRACKED_METRICS = ("spo2", "heart_rate", "respiratory_rate", "temperature", "calories", "sleep")

SPO2_METRIC = "blood_oxygen_saturation"

DAILY_TEMPERATURE_READINGS = 2
WEEKLY_TEMPERATURE_READINGS = 14
MONTHLY_TEMPERATURE_READINGS = 60
DAILY_SLEEP_NIGHTS = 2

Pair = Tuple[Optional[float], Optional[float]]


def _coerce(value) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def percentage_change(current, previous) -> float:
    """Relative change from ``previous`` to ``current`` in percent.

    A missing, non-numeric or zero ``previous`` yields 0.
    """
    prev = _coerce(previous)
    if prev == 0:
        return 0.0
    return (_coerce(current) - prev) / prev * 100


def _round(value: Optional[float], ndigits: int = 0) -> Optional[float]:
    if value is None:
        return None
    return round(value, ndigits)


def _mean(values: List[float]) -> Optional[float]:
    if not values:
        return None
    return round(sum(values) / len(values), 2)


@dataclass(frozen=True)
class TrendWindow:
    name: str
    current_start: date
    current_end: date
    previous_start: date
    previous_end: date


def trend_windows(today: date) -> Dict[str, TrendWindow]:
    # Each window is [start, end) with the previous window ending where the current starts
    week_start = today - timedelta(days=today.weekday())
    month_start = today.replace(day=1)
    next_month = (month_start + timedelta(days=32)).replace(day=1)
    prev_month = (month_start - timedelta(days=1)).replace(day=1)
    return {
        "daily": TrendWindow("daily", today, today + timedelta(days=1), today - timedelta(days=1), today),
        "weekly": TrendWindow("weekly", week_start, week_start + timedelta(days=7), week_start - timedelta(days=7), week_start),
        "monthly": TrendWindow("monthly", month_start, next_month, prev_month, month_start),
    }


def build_trend_snapshot(pairs: Dict[str, Pair]) -> Dict[str, float]:
    snapshot: Dict[str, float] = OrderedDict()
    for metric in TRACKED_METRICS:
        current, previous = pairs.get(metric, (None, None))
        snapshot[f"{metric}_current"] = _coerce(current)
        snapshot[f"{metric}_previous"] = _coerce(previous)
        snapshot[f"{metric}_pct_change"] = percentage_change(current, previous)
    return snapshot


@dataclass
class TrendsService:
    metrics: MetricsRepository
    clock: Callable[[], date] = field(default=date.today)

    def summary(self) -> Dict[str, Dict[str, float]]:
        windows = trend_windows(self.clock())
        return {
            "daily": self.daily(windows["daily"]),
            "weekly": self.periodic(windows["weekly"], WEEKLY_TEMPERATURE_READINGS),
            "monthly": self.periodic(windows["monthly"], MONTHLY_TEMPERATURE_READINGS),
        }

    def _pair(self, fetch: Callable[[datetime, datetime], Optional[float]], window: TrendWindow) -> Pair:
        current = fetch(start_of_day(window.current_start), start_of_day(window.current_end))
        previous = fetch(start_of_day(window.previous_start), start_of_day(window.previous_end))
        return current, previous

    def daily(self, window: TrendWindow) -> Dict[str, float]:
        m = self.metrics
        pairs = {
            "spo2": self._pair(lambda s, e: m.average(AGGREGATED, SPO2_METRIC, s, e), window),
            "heart_rate": self._pair(lambda s, e: m.average(REALTIME, "heart_rate", s, e), window),
            "respiratory_rate": self._pair(lambda s, e: _round(m.latest(REALTIME, "respiratory_rate", s, e)), window),
            "temperature": self._latest_days_temperature(),
            "calories": self._pair(lambda s, e: _round(m.total(REALTIME, "active_energy", s, e)), window),
            "sleep": self._latest_nights(window.previous_start),
        }
        return build_trend_snapshot(pairs)

    def periodic(self, window: TrendWindow, temperature_readings: int) -> Dict[str, float]:
        m = self.metrics
        pairs = {
            "spo2": self._pair(lambda s, e: m.average(AGGREGATED, SPO2_METRIC, s, e), window),
            "heart_rate": self._pair(lambda s, e: m.average(REALTIME, "heart_rate", s, e), window),
            "respiratory_rate": self._pair(lambda s, e: m.average(REALTIME, "respiratory_rate", s, e), window),
            "temperature": self._temperature_split(window, temperature_readings),
            "calories": self._pair(lambda s, e: m.average(REALTIME, "active_energy", s, e), window),
            "sleep": (
                m.sleep_average(window.current_start, window.current_end),
                m.sleep_average(window.previous_start, window.previous_end),
            ),
        }
        return build_trend_snapshot(pairs)

    def _latest_days_temperature(self) -> Pair:
        # Most recent readings grouped by calendar day; the newest day is current
        by_day: Dict[date, List[float]] = OrderedDict()
        for ts, value in self.metrics.recent(AGGREGATED, WRIST_TEMPERATURE, DAILY_TEMPERATURE_READINGS):
            by_day.setdefault(ts.date(), []).append(value)
        averages = [_mean(values) for values in by_day.values()]
        current = averages[0] if averages else None
        previous = averages[1] if len(averages) > 1 else None
        return current, previous

    def _temperature_split(self, window: TrendWindow, limit: int) -> Pair:
        boundary = start_of_day(window.current_start)
        current: List[float] = []
        previous: List[float] = []
        for ts, value in self.metrics.recent(AGGREGATED, WRIST_TEMPERATURE, limit):
            (current if ts >= boundary else previous).append(value)
        return _mean(current), _mean(previous)

    def _latest_nights(self, since: date) -> Pair:
        nights = self.metrics.recent_sleep(since, DAILY_SLEEP_NIGHTS)
        current = round(nights[0].total_hours, 2) if nights else None
        previous = round(nights[1].total_hours, 2) if len(nights) > 1 else None
        return current, previous
