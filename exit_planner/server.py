from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from .data_loader import exit_point_from_dict, load_exit_points
from .data_models import (
    ActiveHike,
    CompletedHike,
    ExitPoint,
    ExitStrategy,
    Location,
    PlannedRoute,
    RouteDifficulty,
    User,
    UserProfile,
)
from .issues import SynthesisResult
from .planner import ExitPlanner
from .reference_store import ReferenceStore

SCHEMA = {"version": "1.0.0", "payload_key": "strategies"}


def _serialize_datetime(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt else None


def location_to_dict(location: Location) -> Dict[str, Any]:
    return {
        "lat": location.latitude,
        "lon": location.longitude,
        "elevation": location.elevation,
        "timestamp": _serialize_datetime(location.timestamp),
    }


def exit_point_to_dict(exit_point: ExitPoint) -> Dict[str, Any]:
    return {
        "id": exit_point.id,
        "name": exit_point.name,
        "location": location_to_dict(exit_point.location),
        "accessibility": exit_point.accessibility.value,
        "distance_from_current": exit_point.distance_from_current,
    }


def strategy_to_dict(strategy: ExitStrategy) -> Dict[str, Any]:
    return {
        "id": strategy.id,
        "exit_point": exit_point_to_dict(strategy.exit_point),
        "estimated_arrival_time": _serialize_datetime(strategy.estimated_arrival_time),
        "confidence_score": strategy.confidence_score,
        "reasoning": strategy.reasoning,
        "arrival_hint": strategy.arrival_hint,
    }


def synthesis_to_dict(result: SynthesisResult) -> Dict[str, Any]:
    return {
        "ok": result.ok,
        "failure": (
            {"code": result.failure.code.value, "message": result.failure.message}
            if result.failure
            else None
        ),
        "strategies": [strategy_to_dict(strategy) for strategy in result.strategies],
        "issues": list(result.issues),
    }


def hike_to_dict(hike: ActiveHike) -> Dict[str, Any]:
    return {
        "id": hike.id,
        "user_id": hike.user.id,
        "route": {
            "id": hike.route.id,
            "name": hike.route.name,
            "difficulty": hike.route.difficulty.value,
            "total_distance": hike.route.total_distance,
        },
        "start_time": _serialize_datetime(hike.start_time),
        "current_location": location_to_dict(hike.current_location),
        "is_active": hike.is_active,
    }


def completed_hike_to_dict(completed: CompletedHike) -> Dict[str, Any]:
    return {
        "id": completed.id,
        "user_id": completed.user.id,
        "route_name": completed.route.name,
        "start_time": _serialize_datetime(completed.start_time),
        "end_time": _serialize_datetime(completed.end_time),
        "exit_point": exit_point_to_dict(completed.exit_point),
        "total_distance": completed.total_distance,
        "actual_duration": completed.actual_duration,
    }


class ExitPlannerService:
    """Dict-in, dict-out facade over ExitPlanner used by the MCP tools."""

    def __init__(self, planner: Optional[ExitPlanner] = None) -> None:
        self.planner = planner or ExitPlanner(ReferenceStore(load_exit_points()))

    def exit_points_list(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "schema": SCHEMA,
            "exit_points": [exit_point_to_dict(ep) for ep in self.planner.list_exit_points()],
        }

    def exit_point_register(self, params: Dict[str, Any]) -> Dict[str, Any]:
        exit_point = self.planner.register_exit_point(exit_point_from_dict(params))
        return {"schema": SCHEMA, "exit_point": exit_point_to_dict(exit_point)}

    def exit_profile_add(self, params: Dict[str, Any]) -> Dict[str, Any]:
        profile = UserProfile.from_dict(params)
        self.planner.add_user_profile(profile)
        return {"schema": SCHEMA, "profile": profile.to_dict()}

    def exit_hike_start(self, params: Dict[str, Any]) -> Dict[str, Any]:
        user = User(
            id=params["user_id"],
            name=params.get("user_name") or params["user_id"],
            email=params.get("email", ""),
        )
        start = Location(latitude=params["start"][0], longitude=params["start"][1])
        route = PlannedRoute(
            id=params.get("route_id") or params["route_name"],
            name=params["route_name"],
            waypoints=[start],
            total_distance=params.get("total_distance", 0.0),
            estimated_duration=params.get("estimated_duration", 0.0),
            difficulty=RouteDifficulty(params.get("difficulty", "moderate")),
        )
        hike = self.planner.start_hike(route, user)
        return {"schema": SCHEMA, "hike": hike_to_dict(hike)}

    def exit_hike_update_location(self, params: Dict[str, Any]) -> Dict[str, Any]:
        hike = self._active_hike(params["user_id"])
        location = Location(
            latitude=params["location"][0],
            longitude=params["location"][1],
            elevation=params.get("elevation"),
        )
        updated = self.planner.update_location(hike, location)
        return {"schema": SCHEMA, "hike": hike_to_dict(updated)}

    def exit_hike_end(self, params: Dict[str, Any]) -> Dict[str, Any]:
        hike = self._active_hike(params["user_id"])
        exit_point = self.planner.store.get_exit_point(params["exit_point_id"])
        if exit_point is None:
            raise ValueError(f"Unknown exit point: {params['exit_point_id']}")
        completed = self.planner.end_hike(hike, exit_point)
        return {"schema": SCHEMA, "completed_hike": completed_hike_to_dict(completed)}

    def exit_strategy_prompt(self, params: Dict[str, Any]) -> str:
        return self.planner.build_exit_strategy_prompt(self._active_hike(params["user_id"]))

    def exit_validate_response(self, params: Dict[str, Any]) -> Dict[str, Any]:
        hike = self._active_hike(params["user_id"])
        result = self.planner.assess_response(hike, params["response_text"])
        return {"schema": SCHEMA, "synthesis": synthesis_to_dict(result)}

    def _active_hike(self, user_id: str) -> ActiveHike:
        hike = self.planner.get_active_hike(user_id)
        if hike is None:
            raise ValueError(f"No active hike for user: {user_id}")
        return hike


mcp = FastMCP("exit-planner-mcp")
SERVICE = ExitPlannerService()


@mcp.tool()
def exit_points_list() -> Dict[str, Any]:
    """List the registered exit points."""
    return SERVICE.exit_points_list({})


@mcp.tool()
def exit_point_register(
    id: str,
    name: str,
    lat: float,
    lon: float,
    accessibility: str,
    distance_from_current: float,
) -> Dict[str, Any]:
    """Register a new exit point. Registered exit points are never modified."""
    return SERVICE.exit_point_register(
        {
            "id": id,
            "name": name,
            "location": {"lat": lat, "lon": lon},
            "accessibility": accessibility,
            "distance_from_current": distance_from_current,
        }
    )


@mcp.tool()
def exit_profile_add(
    user_id: str,
    average_pace: float,
    max_distance: float,
    risk_tolerance: str = "moderate",
    weather_sensitivity: str = "medium",
) -> Dict[str, Any]:
    """Add or replace the hiking profile for a user."""
    return SERVICE.exit_profile_add(
        {
            "id": f"profile_{user_id}",
            "userId": user_id,
            "averagePace": average_pace,
            "maxDistance": max_distance,
            "riskTolerance": risk_tolerance,
            "weatherSensitivity": weather_sensitivity,
        }
    )


@mcp.tool()
def exit_hike_start(
    user_id: str,
    route_name: str,
    start: List[float],
    difficulty: str = "moderate",
    total_distance: float = 0.0,
    estimated_duration: float = 0.0,
    user_name: Optional[str] = None,
) -> Dict[str, Any]:
    """Start tracking a hike for a user at the route trailhead."""
    return SERVICE.exit_hike_start(
        {
            "user_id": user_id,
            "user_name": user_name,
            "route_name": route_name,
            "start": start,
            "difficulty": difficulty,
            "total_distance": total_distance,
            "estimated_duration": estimated_duration,
        }
    )


@mcp.tool()
def exit_hike_update_location(
    user_id: str,
    location: List[float],
    elevation: Optional[float] = None,
) -> Dict[str, Any]:
    """Move the hiker's current position."""
    return SERVICE.exit_hike_update_location(
        {"user_id": user_id, "location": location, "elevation": elevation}
    )


@mcp.tool()
def exit_hike_end(user_id: str, exit_point_id: str) -> Dict[str, Any]:
    """Finish the active hike at a registered exit point."""
    return SERVICE.exit_hike_end({"user_id": user_id, "exit_point_id": exit_point_id})


@mcp.tool()
def exit_validate_response(user_id: str, response_text: str) -> Dict[str, Any]:
    """Validate a model's exit strategy answer against the catalogue and the active hike.

    Args:
        user_id: Hiker whose active hike provides the route difficulty.
        response_text: Raw model output containing a {"strategies": [...]} object.
    """
    return SERVICE.exit_validate_response({"user_id": user_id, "response_text": response_text})


@mcp.prompt(name="@exit/strategies")
def exit_strategies_prompt(user_id: str) -> str:
    """Exit strategy request for the user's active hike."""
    return SERVICE.exit_strategy_prompt({"user_id": user_id})


def main() -> None:
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
