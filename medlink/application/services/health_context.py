"""Read-side helpers that fold stored metrics into the payloads handed to the AI provider."""
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..ports.metrics_repo import AGGREGATED, REALTIME, WRIST_TEMPERATURE, MetricsRepository

# (payload key, store, metric name, decimals)
SeriesSpec = Tuple[str, str, str, int]

ALERT_SERIES: List[SeriesSpec] = [
    ("heart_rate_series", REALTIME, "heart_rate", 1),
    ("respiratory_rate_series", REALTIME, "respiratory_rate", 1),
    ("step_count_series", REALTIME, "step_count", 0),
    ("active_energy_series", REALTIME, "active_energy", 0),
    ("exercise_time_series", AGGREGATED, "apple_exercise_time", 0),
    ("time_in_daylight_series", AGGREGATED, "time_in_daylight", 0),
    ("heart_rate_variability_series", AGGREGATED, "heart_rate_variability", 2),
    ("sleeping_wrist_temp_series", AGGREGATED, WRIST_TEMPERATURE, 2),
    ("blood_oxygen_saturation_series", AGGREGATED, "blood_oxygen_saturation", 1),
]

PATIENT_TODAY_SERIES: List[SeriesSpec] = [
    ("heart_rate_series", REALTIME, "heart_rate", 1),
    ("respiratory_rate_series", REALTIME, "respiratory_rate", 1),
    ("step_count_series", REALTIME, "step_count", 0),
    ("active_energy_series", REALTIME, "active_energy", 0),
    ("heart_rate_variability_series", AGGREGATED, "heart_rate_variability", 2),
    ("blood_oxygen_saturation_series", AGGREGATED, "blood_oxygen_saturation", 1),
]

DOCTOR_TODAY_SERIES: List[SeriesSpec] = [
    ("heart_rate_series", REALTIME, "heart_rate", 1),
    ("respiratory_rate_series", REALTIME, "respiratory_rate", 1),
    ("heart_rate_variability_series", AGGREGATED, "heart_rate_variability", 2),
    ("blood_oxygen_saturation_series", AGGREGATED, "blood_oxygen_saturation", 1),
]

SLEEP_HISTORY_DAYS = 7


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def _round(value: Optional[float], ndigits: int = 0):
    if value is None:
        return None
    if ndigits == 0:
        return int(round(value))
    return round(value, ndigits)


def collect_series(metrics: MetricsRepository, specs: Sequence[SeriesSpec], start: datetime, end: datetime) -> Dict[str, List[Dict[str, Any]]]:
    payload: Dict[str, List[Dict[str, Any]]] = {}
    for key, store, metric, ndigits in specs:
        payload[key] = [
            {"t": ts.strftime("%H:%M:%S"), "v": _round(value, ndigits)}
            for ts, value in metrics.series(store, metric, start, end)
        ]
    return payload


def build_snapshot(metrics: MetricsRepository, today: date) -> Dict[str, Any]:
    start, end = start_of_day(today), start_of_day(today + timedelta(days=1))
    return {
        "current_heart_rate": _round(metrics.latest(REALTIME, "heart_rate")),
        "avg_heart_rate_today": _round(metrics.average(REALTIME, "heart_rate", start, end)),
        "current_respiratory_rate": _round(metrics.latest(REALTIME, "respiratory_rate")),
        "avg_respiratory_rate_today": _round(metrics.average(REALTIME, "respiratory_rate", start, end)),
        "total_steps_today": _round(metrics.total(REALTIME, "step_count", start, end) or 0),
        "active_energy_kcal_today": _round(metrics.total(REALTIME, "active_energy", start, end) or 0),
        "blood_oxygen_saturation_latest": _round(metrics.latest(AGGREGATED, "blood_oxygen_saturation"), 1),
    }


def _share(part: float, total: float) -> Optional[float]:
    if not total:
        return None
    return round(part / total * 100, 1)


def build_sleep_history(metrics: MetricsRepository, today: date) -> List[Dict[str, Any]]:
    history = []
    for record in metrics.recent_sleep(today - timedelta(days=SLEEP_HISTORY_DAYS), SLEEP_HISTORY_DAYS):
        total = record.total_hours
        history.append({
            "record_date": record.record_date.isoformat(),
            "deep_hours": round(record.deep, 2),
            "core_hours": round(record.core, 2),
            "rem_hours": round(record.rem, 2),
            "total_sleep_hours": round(total, 2),
            "deep_pct": _share(record.deep, total),
            "core_pct": _share(record.core, total),
            "rem_pct": _share(record.rem, total),
        })
    return history
