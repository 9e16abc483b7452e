from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

RouteDifficultyName = Literal["easy", "moderate", "hard", "expert"]
AccessibilityName = Literal["easy", "moderate", "difficult"]


class ProfileCreate(BaseModel):
    user_id: str
    average_pace: float = Field(..., gt=0, description="Average pace in mph")
    max_distance: float = Field(..., gt=0, description="Maximum comfortable distance in miles")
    risk_tolerance: Literal["conservative", "moderate", "adventurous"] = Field(default="moderate")
    weather_sensitivity: Literal["low", "medium", "high"] = Field(default="medium")


class HikeStartRequest(BaseModel):
    user_id: str
    user_name: str
    email: str = Field(default="")
    route_id: str
    route_name: str
    start_lat: float
    start_lon: float
    start_elevation: Optional[float] = None
    total_distance: float = Field(..., ge=0, description="Route length in miles")
    estimated_duration: float = Field(..., ge=0, description="Expected duration in hours")
    difficulty: RouteDifficultyName = Field(default="moderate")


class LocationUpdate(BaseModel):
    lat: float
    lon: float
    elevation: Optional[float] = None


class HikeEndRequest(BaseModel):
    exit_point_id: str


class HikeStatus(BaseModel):
    hike_id: str
    user_id: str
    route_name: str
    difficulty: RouteDifficultyName
    start_time: datetime
    current_lat: float
    current_lon: float
    is_active: bool


class CompletedHikeSummary(BaseModel):
    hike_id: str
    user_id: str
    route_name: str
    exit_point_id: str
    exit_point_name: str
    end_time: datetime
    total_distance: float
    actual_duration_hours: float
