from __future__ import annotations

import copy
import dataclasses
import json
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from loguru import logger

from .data_models import (
    ActiveHike,
    CompletedHike,
    ContextualFactors,
    ExitPoint,
    FatigueIndicators,
    Location,
    PlannedRoute,
    SynthesisPolicy,
    TrailConditions,
    User,
    UserFeedback,
    UserProfile,
    WeatherConditions,
)
from .extraction import extract_json_object
from .issues import GenerationError, SynthesisResult
from .prompt_templates import (
    EXIT_STRATEGY_PROMPT,
    GUIDANCE_PROMPT,
    PROFILE_LEARNING_PROMPT,
    USER_STATE_PROMPT,
)
from .reference_store import ReferenceStore
from .synthesis import Clock, IdFactory, synthesize

Generator = Callable[[str], str]

DEFAULT_USER_STATE: Dict[str, Any] = {
    "physicalState": {"fatigue": 5, "energy": 6, "pace": 2.5},
    "mentalState": {"confidence": 7, "stress": 3, "motivation": 8},
    "recommendations": ["Continue monitoring your condition"],
}


def default_contextual_factors(hike: ActiveHike) -> ContextualFactors:
    return ContextualFactors(
        weather=WeatherConditions(
            temperature=65,
            conditions="Partly cloudy",
            forecast="Light rain expected in 2 hours",
        ),
        trail_conditions=TrailConditions(
            difficulty=hike.route.difficulty.value,
            surface="dirt",
            obstacles=["rocky sections", "muddy patches"],
        ),
        user_fatigue=FatigueIndicators(pace=2.5, energy_level=7, perceived_exertion=6),
    )


class ExitPlanner:
    """Hike bookkeeping plus the prompt, generate and synthesize advisory flow."""

    def __init__(
        self,
        store: Optional[ReferenceStore] = None,
        generate: Optional[Generator] = None,
        policy: Optional[SynthesisPolicy] = None,
        clock: Optional[Clock] = None,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        self.store = store or ReferenceStore()
        self.generate = generate
        self.policy = policy or SynthesisPolicy()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.id_factory = id_factory
        self._lock = threading.Lock()
        self._active_hikes: Dict[str, ActiveHike] = {}

    def register_exit_point(self, exit_point: ExitPoint) -> ExitPoint:
        return self.store.register_exit_point(exit_point)

    def add_user_profile(self, profile: UserProfile) -> None:
        self.store.add_user_profile(profile)

    def list_exit_points(self) -> List[ExitPoint]:
        return self.store.list_exit_points()

    def get_active_hike(self, user_id: str) -> Optional[ActiveHike]:
        with self._lock:
            return self._active_hikes.get(user_id)

    def start_hike(self, route: PlannedRoute, user: User) -> ActiveHike:
        if not route.waypoints:
            raise ValueError(f"Route {route.id} has no waypoints.")
        with self._lock:
            if user.id in self._active_hikes:
                raise ValueError("User is already on an active hike")
            now = self.clock()
            hike = ActiveHike(
                id=f"hike_{int(now.timestamp() * 1000)}",
                user=user,
                route=route,
                start_time=now,
                current_location=route.waypoints[0],
            )
            self._active_hikes[user.id] = hike
        logger.info(f"🏔️ Started hike: {route.name} for {user.name}")
        return hike

    def update_location(self, hike: ActiveHike, new_location: Location) -> ActiveHike:
        with self._lock:
            self._check_active(hike)
            updated = dataclasses.replace(hike, current_location=new_location)
            self._active_hikes[hike.user.id] = updated
        logger.info(f"📍 Updated location: {new_location.latitude}, {new_location.longitude}")
        return updated

    def end_hike(self, hike: ActiveHike, exit_point: ExitPoint) -> CompletedHike:
        if self.store.get_exit_point(exit_point.id) is None:
            raise ValueError(f"Unknown exit point: {exit_point.id}")
        with self._lock:
            self._check_active(hike)
            end_time = self.clock()
            completed = CompletedHike(
                id=hike.id,
                user=hike.user,
                route=hike.route,
                start_time=hike.start_time,
                end_time=end_time,
                exit_point=exit_point,
                total_distance=hike.route.total_distance,
                actual_duration=hike.elapsed_hours(end_time),
            )
            del self._active_hikes[hike.user.id]
            hike.is_active = False
        logger.info(
            f"🏁 Completed hike: {hike.route.name} via {exit_point.name} "
            f"({completed.actual_duration:.2f} hours)"
        )
        return completed

    def build_exit_strategy_prompt(
        self,
        hike: ActiveHike,
        factors: Optional[ContextualFactors] = None,
    ) -> str:
        self._require_active(hike)
        profile = self._require_profile(hike.user.id)
        factors = factors or default_contextual_factors(hike)
        exit_points = "\n".join(
            f"- {ep.name} ({ep.distance_from_current} miles, {ep.accessibility.value} access)"
            for ep in self.store.list_exit_points()
        )
        return EXIT_STRATEGY_PROMPT.format(
            user_id=profile.user_id,
            average_pace=profile.average_pace,
            max_distance=profile.max_distance,
            risk_tolerance=profile.risk_tolerance,
            weather_sensitivity=profile.weather_sensitivity,
            route_name=hike.route.name,
            route_distance=hike.route.total_distance,
            route_difficulty=hike.route.difficulty.value,
            elapsed_hours=hike.elapsed_hours(self.clock()),
            latitude=hike.current_location.latitude,
            longitude=hike.current_location.longitude,
            temperature=factors.weather.temperature,
            conditions=factors.weather.conditions,
            surface=factors.trail_conditions.surface,
            trail_difficulty=factors.trail_conditions.difficulty,
            fatigue_pace=factors.user_fatigue.pace,
            energy_level=factors.user_fatigue.energy_level,
            exit_points=exit_points,
        )

    def assess_response(self, hike: ActiveHike, response_text: str) -> SynthesisResult:
        self._require_active(hike)
        result = synthesize(
            response_text,
            self.store,
            hike.context(self.clock()),
            policy=self.policy,
            clock=self.clock,
            id_factory=self.id_factory,
        )
        if result.ok:
            logger.info(f"🎯 Generated {len(result.strategies)} exit strategies for {hike.user.name}")
        return result

    def get_exit_strategies(
        self,
        hike: ActiveHike,
        factors: Optional[ContextualFactors] = None,
    ) -> SynthesisResult:
        prompt = self.build_exit_strategy_prompt(hike, factors)
        logger.info("🤖 Requesting exit strategies from the language model...")
        text = self._generate(prompt)
        logger.debug("Model response received", excerpt=text[:200])
        return self.assess_response(hike, text)

    def analyze_user_state(self, hike: ActiveHike, sensor_data: Mapping[str, Any]) -> Dict[str, Any]:
        self._require_active(hike)
        prompt = USER_STATE_PROMPT.format(
            route_name=hike.route.name,
            elapsed_hours=hike.elapsed_hours(self.clock()),
            latitude=hike.current_location.latitude,
            longitude=hike.current_location.longitude,
            sensor_data=", ".join(f"{key}: {value}" for key, value in sensor_data.items()),
        )
        state = extract_json_object(self._generate(prompt))
        if state is None:
            logger.warning("User state response was not parseable, using defaults")
            return copy.deepcopy(DEFAULT_USER_STATE)
        return state

    def provide_contextual_guidance(self, hike: ActiveHike, query: str) -> str:
        self._require_active(hike)
        prompt = GUIDANCE_PROMPT.format(
            route_name=hike.route.name,
            elapsed_hours=hike.elapsed_hours(self.clock()),
            latitude=hike.current_location.latitude,
            longitude=hike.current_location.longitude,
            query=query,
        )
        return self._generate(prompt)

    def learn_from_user_feedback(self, completed: CompletedHike, feedback: UserFeedback) -> UserProfile:
        if feedback.hike_id != completed.id:
            raise ValueError(f"Feedback is for hike {feedback.hike_id}, not {completed.id}")
        profile = self._require_profile(completed.user.id)
        prompt = PROFILE_LEARNING_PROMPT.format(
            profile=json.dumps(profile.to_dict(), indent=2),
            satisfaction=feedback.satisfaction,
            accuracy=feedback.accuracy,
            helpfulness=feedback.helpfulness,
            comments=feedback.comments,
        )
        raw = extract_json_object(self._generate(prompt))
        if raw is None:
            raise ValueError("No JSON found in profile update response")
        updated = UserProfile.from_dict(raw)
        if updated.user_id != profile.user_id:
            raise ValueError("Profile update changed the user id")
        self.store.add_user_profile(updated)
        completed.user_feedback = feedback
        return updated

    def _generate(self, prompt: str) -> str:
        if self.generate is None:
            raise GenerationError("No text generator configured")
        return self.generate(prompt)

    def _require_active(self, hike: ActiveHike) -> None:
        with self._lock:
            self._check_active(hike)

    def _check_active(self, hike: ActiveHike) -> None:
        current = self._active_hikes.get(hike.user.id)
        if not hike.is_active or current is None or current.id != hike.id:
            raise ValueError("Hike is not active")

    def _require_profile(self, user_id: str) -> UserProfile:
        profile = self.store.get_user_profile(user_id)
        if profile is None:
            raise ValueError("User profile not found")
        return profile
