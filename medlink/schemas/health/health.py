# medlink/schemas/health/health.py
from pydantic import BaseModel
from typing import Dict, List, Optional

class IngestResponse(BaseModel):
    success: bool
    message: str
    inserted: int
    errors: Optional[List[str]] = None

class HealthSummaryResponse(BaseModel):
    realtime: int
    aggregated: int
    sleep_analysis: int
    metrics: Dict[str, int]
