from __future__ import annotations

import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .data_models import ExitPoint, UserProfile


@dataclass(frozen=True, slots=True)
class ExitPointSnapshot:
    """Read-only view of the exit points registered when the snapshot was taken."""

    exit_points: Tuple[ExitPoint, ...]
    by_name: Mapping[str, ExitPoint]

    def find_exit_point_by_name(self, name: str) -> Optional[ExitPoint]:
        return self.by_name.get(name)

    def list_exit_points(self) -> List[ExitPoint]:
        return list(self.exit_points)


class ReferenceStore:
    """In-memory registry of exit points and user profiles."""

    def __init__(self, exit_points: Iterable[ExitPoint] = ()) -> None:
        self._lock = threading.Lock()
        self._exit_points: Dict[str, ExitPoint] = {}
        self._profiles: Dict[str, UserProfile] = {}
        for exit_point in exit_points:
            self.register_exit_point(exit_point)

    def register_exit_point(self, exit_point: ExitPoint) -> ExitPoint:
        with self._lock:
            if exit_point.id in self._exit_points:
                raise ValueError(f"Exit point already registered: {exit_point.id}")
            self._exit_points[exit_point.id] = exit_point
        return exit_point

    def find_exit_point_by_name(self, name: str) -> Optional[ExitPoint]:
        return self.snapshot().find_exit_point_by_name(name)

    def get_exit_point(self, exit_point_id: str) -> Optional[ExitPoint]:
        with self._lock:
            return self._exit_points.get(exit_point_id)

    def list_exit_points(self) -> List[ExitPoint]:
        with self._lock:
            return list(self._exit_points.values())

    def snapshot(self) -> ExitPointSnapshot:
        with self._lock:
            exit_points = tuple(self._exit_points.values())
        by_name: Dict[str, ExitPoint] = {}
        # first registration wins when display names collide
        for exit_point in exit_points:
            by_name.setdefault(exit_point.name, exit_point)
        return ExitPointSnapshot(exit_points=exit_points, by_name=MappingProxyType(by_name))

    def add_user_profile(self, profile: UserProfile) -> None:
        with self._lock:
            self._profiles[profile.user_id] = profile

    def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        with self._lock:
            return self._profiles.get(user_id)

    def list_user_profiles(self) -> List[UserProfile]:
        with self._lock:
            return list(self._profiles.values())
