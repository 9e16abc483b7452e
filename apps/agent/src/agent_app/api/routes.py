from __future__ import annotations

from functools import lru_cache
from typing import Callable, List

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from agent_app.config import get_settings
from agent_app.graph import ExitAdvisorGraph
from agent_app.llm import OllamaGenerator, get_llm
from agent_app.models import (
    CompletedHikeSummary,
    ExitPointSummary,
    ExitStrategiesResponse,
    ExitStrategySummary,
    HikeEndRequest,
    HikeStartRequest,
    HikeStatus,
    LocationUpdate,
    ProfileCreate,
    SynthesisFailureDetail,
)
from exit_planner.data_loader import load_exit_points
from exit_planner.data_models import (
    ActiveHike,
    ExitPoint,
    ExitStrategy,
    Location,
    PlannedRoute,
    RouteDifficulty,
    User,
    UserProfile,
)
from exit_planner.issues import GenerationError
from exit_planner.planner import ExitPlanner
from exit_planner.reference_store import ReferenceStore

router = APIRouter(prefix="/api/v1", tags=["exit-planner"])


@lru_cache(maxsize=1)
def get_planner() -> ExitPlanner:
    settings = get_settings()
    store = ReferenceStore(load_exit_points(settings.exit_points_path))
    return ExitPlanner(store, policy=settings.synthesis_policy())


def get_generator() -> Callable[[str], str]:
    return OllamaGenerator(get_llm())


def _exit_point_summary(exit_point: ExitPoint) -> ExitPointSummary:
    return ExitPointSummary(
        id=exit_point.id,
        name=exit_point.name,
        lat=exit_point.location.latitude,
        lon=exit_point.location.longitude,
        accessibility=exit_point.accessibility.value,
        distance_from_current=exit_point.distance_from_current,
    )


def _strategy_summary(strategy: ExitStrategy) -> ExitStrategySummary:
    return ExitStrategySummary(
        id=strategy.id,
        exit_point=_exit_point_summary(strategy.exit_point),
        estimated_arrival_time=strategy.estimated_arrival_time,
        confidence_score=strategy.confidence_score,
        reasoning=strategy.reasoning,
        arrival_hint=strategy.arrival_hint,
    )


def _hike_status(hike: ActiveHike) -> HikeStatus:
    return HikeStatus(
        hike_id=hike.id,
        user_id=hike.user.id,
        route_name=hike.route.name,
        difficulty=hike.route.difficulty.value,
        start_time=hike.start_time,
        current_lat=hike.current_location.latitude,
        current_lon=hike.current_location.longitude,
        is_active=hike.is_active,
    )


def _active_hike(planner: ExitPlanner, user_id: str) -> ActiveHike:
    hike = planner.get_active_hike(user_id)
    if hike is None:
        raise HTTPException(status_code=404, detail=f"No active hike for user: {user_id}")
    return hike


@router.get("/exit-points", response_model=List[ExitPointSummary])
def list_exit_points(planner: ExitPlanner = Depends(get_planner)) -> List[ExitPointSummary]:
    """List all registered exit points."""
    return [_exit_point_summary(exit_point) for exit_point in planner.list_exit_points()]


@router.post("/profiles", response_model=ProfileCreate)
def add_profile(request: ProfileCreate, planner: ExitPlanner = Depends(get_planner)) -> ProfileCreate:
    planner.add_user_profile(
        UserProfile(
            id=f"profile_{request.user_id}",
            user_id=request.user_id,
            average_pace=request.average_pace,
            max_distance=request.max_distance,
            risk_tolerance=request.risk_tolerance,
            weather_sensitivity=request.weather_sensitivity,
        )
    )
    return request


@router.post("/hikes", response_model=HikeStatus)
def start_hike(request: HikeStartRequest, planner: ExitPlanner = Depends(get_planner)) -> HikeStatus:
    user = User(id=request.user_id, name=request.user_name, email=request.email)
    route = PlannedRoute(
        id=request.route_id,
        name=request.route_name,
        waypoints=[
            Location(
                latitude=request.start_lat,
                longitude=request.start_lon,
                elevation=request.start_elevation,
            )
        ],
        total_distance=request.total_distance,
        estimated_duration=request.estimated_duration,
        difficulty=RouteDifficulty(request.difficulty),
    )
    try:
        hike = planner.start_hike(route, user)
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _hike_status(hike)


@router.put("/hikes/{user_id}/location", response_model=HikeStatus)
def update_location(
    user_id: str,
    request: LocationUpdate,
    planner: ExitPlanner = Depends(get_planner),
) -> HikeStatus:
    hike = _active_hike(planner, user_id)
    location = Location(latitude=request.lat, longitude=request.lon, elevation=request.elevation)
    return _hike_status(planner.update_location(hike, location))


@router.post("/hikes/{user_id}/exit-strategies", response_model=ExitStrategiesResponse)
def get_exit_strategies(
    user_id: str,
    planner: ExitPlanner = Depends(get_planner),
    generate: Callable[[str], str] = Depends(get_generator),
) -> ExitStrategiesResponse:
    _active_hike(planner, user_id)
    graph = ExitAdvisorGraph(planner, generate)
    try:
        state = graph.run(user_id=user_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except GenerationError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc

    result = state["synthesis"]
    if not result.ok:
        logger.warning("Exit strategy synthesis failed", user_id=user_id, code=result.failure.code.value)
        detail = SynthesisFailureDetail(
            code=result.failure.code.value,
            message=result.failure.message,
            issues=result.issues,
        )
        raise HTTPException(status_code=422, detail=detail.model_dump())
    return ExitStrategiesResponse(
        user_id=user_id,
        strategies=[_strategy_summary(strategy) for strategy in result.strategies],
        issues=result.issues,
    )


@router.post("/hikes/{user_id}/end", response_model=CompletedHikeSummary)
def end_hike(
    user_id: str,
    request: HikeEndRequest,
    planner: ExitPlanner = Depends(get_planner),
) -> CompletedHikeSummary:
    hike = _active_hike(planner, user_id)
    exit_point = planner.store.get_exit_point(request.exit_point_id)
    if exit_point is None:
        raise HTTPException(status_code=404, detail=f"Unknown exit point: {request.exit_point_id}")
    completed = planner.end_hike(hike, exit_point)
    return CompletedHikeSummary(
        hike_id=completed.id,
        user_id=completed.user.id,
        route_name=completed.route.name,
        exit_point_id=exit_point.id,
        exit_point_name=exit_point.name,
        end_time=completed.end_time,
        total_distance=completed.total_distance,
        actual_duration_hours=completed.actual_duration,
    )
