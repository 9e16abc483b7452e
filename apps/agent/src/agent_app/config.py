from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from exit_planner.data_models import SynthesisPolicy


class Settings(BaseSettings):
    debug: bool = Field(default=False, description="Enable FastAPI debug mode")
    exit_points_path: Optional[Path] = Field(
        default=None,
        description="Exit point catalogue JSON; the bundled catalogue is used when unset",
    )
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama server base URL",
    )
    ollama_model: str = Field(
        default="llama3.1:8b",
        description="Ollama model identifier used for exit strategy generation",
    )
    arrival_offset_minutes: float = Field(
        default=120.0,
        gt=0,
        description="Fixed offset added to the current time for estimated arrival",
    )
    high_confidence_threshold: float = Field(default=0.95, ge=0, le=1)
    low_average_confidence_threshold: float = Field(default=0.3, ge=0, le=1)
    cors_allow_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Origins allowed for CORS",
    )

    class Config:
        env_prefix = "EXIT_AGENT_"
        env_file = ".env"
        case_sensitive = False

    def synthesis_policy(self) -> SynthesisPolicy:
        return SynthesisPolicy(
            arrival_offset=timedelta(minutes=self.arrival_offset_minutes),
            high_confidence_threshold=self.high_confidence_threshold,
            low_average_confidence_threshold=self.low_average_confidence_threshold,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
