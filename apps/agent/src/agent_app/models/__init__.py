"""Pydantic schemas for the agent API."""

from .hikes import (
    CompletedHikeSummary,
    HikeEndRequest,
    HikeStartRequest,
    HikeStatus,
    LocationUpdate,
    ProfileCreate,
)
from .strategies import (
    ExitPointSummary,
    ExitStrategiesResponse,
    ExitStrategySummary,
    SynthesisFailureDetail,
)

__all__ = [
    "CompletedHikeSummary",
    "HikeEndRequest",
    "HikeStartRequest",
    "HikeStatus",
    "LocationUpdate",
    "ProfileCreate",
    "ExitPointSummary",
    "ExitStrategiesResponse",
    "ExitStrategySummary",
    "SynthesisFailureDetail",
]
