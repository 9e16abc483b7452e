from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class Accessibility(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    DIFFICULT = "difficult"


class RouteDifficulty(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"
    EXPERT = "expert"


RISK_TOLERANCES = ("conservative", "moderate", "adventurous")
WEATHER_SENSITIVITIES = ("low", "medium", "high")


@dataclass(frozen=True, slots=True)
class Location:
    latitude: float
    longitude: float
    elevation: Optional[float] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True, slots=True)
class ExitPoint:
    id: str
    name: str
    location: Location
    accessibility: Accessibility
    distance_from_current: float  # miles

    def __post_init__(self) -> None:
        if self.distance_from_current < 0:
            raise ValueError(f"Exit point {self.id} has a negative distance.")


@dataclass(slots=True)
class User:
    id: str
    name: str
    email: str


@dataclass(slots=True)
class PlannedRoute:
    id: str
    name: str
    waypoints: List[Location]
    total_distance: float  # miles
    estimated_duration: float  # hours
    difficulty: RouteDifficulty


@dataclass(frozen=True, slots=True)
class ActiveHikeContext:
    route_difficulty: RouteDifficulty
    elapsed_hours: float
    current_location: Location


@dataclass(slots=True)
class ActiveHike:
    id: str
    user: User
    route: PlannedRoute
    start_time: datetime
    current_location: Location
    is_active: bool = True

    def elapsed_hours(self, now: Optional[datetime] = None) -> float:
        now = now or datetime.now(timezone.utc)
        return (now - self.start_time).total_seconds() / 3600.0

    def context(self, now: Optional[datetime] = None) -> ActiveHikeContext:
        return ActiveHikeContext(
            route_difficulty=self.route.difficulty,
            elapsed_hours=self.elapsed_hours(now),
            current_location=self.current_location,
        )


@dataclass(slots=True)
class UserProfile:
    id: str
    user_id: str
    average_pace: float  # mph
    max_distance: float  # miles
    risk_tolerance: str
    weather_sensitivity: str

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "UserProfile":
        """Build a profile from the camelCase mapping a model returns.

        Raises ``ValueError`` when a field is missing or out of range.
        """
        try:
            profile = cls(
                id=str(raw["id"]),
                user_id=str(raw["userId"]),
                average_pace=float(raw["averagePace"]),
                max_distance=float(raw["maxDistance"]),
                risk_tolerance=str(raw["riskTolerance"]),
                weather_sensitivity=str(raw["weatherSensitivity"]),
            )
        except KeyError as exc:
            raise ValueError(f"Profile is missing field {exc.args[0]!r}") from exc
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Profile has an invalid field: {exc}") from exc
        if profile.risk_tolerance not in RISK_TOLERANCES:
            raise ValueError(f"Unknown risk tolerance: {profile.risk_tolerance}")
        if profile.weather_sensitivity not in WEATHER_SENSITIVITIES:
            raise ValueError(f"Unknown weather sensitivity: {profile.weather_sensitivity}")
        if profile.average_pace <= 0 or profile.max_distance <= 0:
            raise ValueError("Profile pace and max distance must be positive.")
        return profile

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "averagePace": self.average_pace,
            "maxDistance": self.max_distance,
            "riskTolerance": self.risk_tolerance,
            "weatherSensitivity": self.weather_sensitivity,
        }


@dataclass(slots=True)
class WeatherConditions:
    temperature: float  # fahrenheit
    conditions: str
    forecast: str


@dataclass(slots=True)
class TrailConditions:
    difficulty: str
    surface: str
    obstacles: List[str]


@dataclass(slots=True)
class FatigueIndicators:
    pace: float  # mph
    energy_level: int  # 1-10
    perceived_exertion: int  # 1-10


@dataclass(slots=True)
class ContextualFactors:
    weather: WeatherConditions
    trail_conditions: TrailConditions
    user_fatigue: FatigueIndicators


@dataclass(slots=True)
class ExitStrategy:
    id: str
    exit_point: ExitPoint
    estimated_arrival_time: datetime
    confidence_score: float
    reasoning: str
    arrival_hint: Optional[str] = None


@dataclass(slots=True)
class UserFeedback:
    hike_id: str
    exit_strategy_id: str
    satisfaction: int  # 1-5
    accuracy: int  # 1-5
    helpfulness: int  # 1-5
    comments: str = ""


@dataclass(slots=True)
class CompletedHike:
    id: str
    user: User
    route: PlannedRoute
    start_time: datetime
    end_time: datetime
    exit_point: ExitPoint
    total_distance: float
    actual_duration: float  # hours
    user_feedback: Optional[UserFeedback] = None


@dataclass(slots=True)
class SynthesisPolicy:
    arrival_offset: timedelta = timedelta(hours=2)
    high_confidence_threshold: float = 0.95
    low_average_confidence_threshold: float = 0.3
