from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from .data_models import Accessibility, ExitPoint, Location

DATA_DIR = Path(__file__).resolve().parent / "data"


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00")).astimezone(timezone.utc)


def _load_location(raw: Dict[str, Any], fallback: datetime) -> Location:
    timestamp = raw.get("timestamp")
    return Location(
        latitude=float(raw["lat"]),
        longitude=float(raw["lon"]),
        elevation=raw.get("elevation"),
        timestamp=_parse_timestamp(timestamp) if timestamp else fallback,
    )


def exit_point_from_dict(raw: Dict[str, Any], fallback: datetime | None = None) -> ExitPoint:
    fallback = fallback or datetime.now(timezone.utc)
    return ExitPoint(
        id=str(raw["id"]),
        name=str(raw["name"]),
        location=_load_location(raw["location"], fallback),
        accessibility=Accessibility(raw["accessibility"]),
        distance_from_current=float(raw["distance_from_current"]),
    )


def load_exit_points(path: Path | None = None) -> List[ExitPoint]:
    source = path or DATA_DIR / "exit_points.json"
    with source.open("r", encoding="utf-8") as fh:
        payload = json.load(fh)
    meta = payload.get("metadata", {})
    last_updated = meta.get("last_updated")
    fallback = _parse_timestamp(last_updated) if last_updated else datetime.now(timezone.utc)
    return [exit_point_from_dict(entry, fallback) for entry in payload["exit_points"]]
