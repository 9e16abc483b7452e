from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .hikes import AccessibilityName


class ExitPointSummary(BaseModel):
    id: str
    name: str
    lat: float
    lon: float
    accessibility: AccessibilityName
    distance_from_current: float = Field(..., description="Miles from the hiker's position")


class ExitStrategySummary(BaseModel):
    id: str
    exit_point: ExitPointSummary
    estimated_arrival_time: datetime
    confidence_score: float = Field(..., ge=0, le=1)
    reasoning: str
    arrival_hint: Optional[str] = None


class ExitStrategiesResponse(BaseModel):
    user_id: str
    strategies: List[ExitStrategySummary]
    issues: List[str] = Field(default_factory=list)


class SynthesisFailureDetail(BaseModel):
    code: str
    message: str
    issues: List[str] = Field(default_factory=list)
