import itertools
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure the repo root and the agent app are importable without installation
_ROOT = Path(__file__).resolve().parents[1]
for path in (_ROOT, _ROOT / "apps" / "agent" / "src"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from exit_planner.data_models import (  # noqa: E402
    Accessibility,
    ActiveHikeContext,
    ExitPoint,
    Location,
    RouteDifficulty,
)
from exit_planner.reference_store import ReferenceStore  # noqa: E402

FIXED_NOW = datetime(2025, 10, 18, 12, 0, tzinfo=timezone.utc)


def make_exit_point(id, name, accessibility, distance):
    return ExitPoint(
        id=id,
        name=name,
        location=Location(latitude=44.1, longitude=-71.5, timestamp=FIXED_NOW),
        accessibility=Accessibility(accessibility),
        distance_from_current=distance,
    )


@pytest.fixture
def store():
    return ReferenceStore(
        [
            make_exit_point("exit1", "Bear Brook Trail", "easy", 1.2),
            make_exit_point("exit2", "North Trailhead", "moderate", 2.1),
            make_exit_point("exit3", "Emergency Shelter", "difficult", 0.8),
        ]
    )


@pytest.fixture
def context():
    return ActiveHikeContext(
        route_difficulty=RouteDifficulty.MODERATE,
        elapsed_hours=1.5,
        current_location=Location(latitude=44.12, longitude=-71.56, timestamp=FIXED_NOW),
    )


@pytest.fixture
def expert_context(context):
    return ActiveHikeContext(
        route_difficulty=RouteDifficulty.EXPERT,
        elapsed_hours=context.elapsed_hours,
        current_location=context.current_location,
    )


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def id_factory():
    counter = itertools.count(1)
    return lambda: f"strategy-{next(counter)}"
