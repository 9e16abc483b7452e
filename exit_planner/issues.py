"""Issue codes and result types shared by the extraction, validation and synthesis passes."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .data_models import ExitPoint, ExitStrategy


class IssueCode(str, Enum):
    MALFORMED_RESPONSE = "MalformedResponse"
    MISSING_FIELD = "MissingField"
    UNKNOWN_EXIT_POINT = "UnknownExitPoint"
    INVALID_CONFIDENCE = "InvalidConfidence"
    MISSING_REASONING = "MissingReasoning"
    INCONSISTENT_REASONING = "InconsistentReasoning"
    DUPLICATE_EXIT_POINT = "DuplicateExitPoint"
    SUSPICIOUSLY_HIGH_CONFIDENCE = "SuspiciouslyHighConfidence"
    SUSPICIOUSLY_LOW_AVERAGE_CONFIDENCE = "SuspiciouslyLowAverageConfidence"
    NO_VALID_STRATEGIES = "NoValidStrategies"


def format_issue(code: IssueCode, detail: str) -> str:
    return f"{code.value}: {detail}"


class GenerationError(RuntimeError):
    """Raised by a text generator when the upstream model call fails."""


class SynthesisError(ValueError):
    def __init__(self, code: IssueCode, message: str, issues: List[str]) -> None:
        self.code = code
        self.issues = issues
        super().__init__(message)


@dataclass(slots=True)
class Failure:
    code: IssueCode
    message: str


@dataclass(slots=True)
class PayloadResult:
    payload: Optional[Dict[str, Any]] = None
    failure: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def candidates(self) -> List[Any]:
        return list(self.payload["strategies"]) if self.payload is not None else []


@dataclass(slots=True)
class ValidatedCandidate:
    exit_point: ExitPoint
    confidence: float
    reasoning: str
    arrival_hint: Optional[str] = None
    flags: List[str] = field(default_factory=list)


@dataclass(slots=True)
class Rejection:
    code: IssueCode
    message: str

    @property
    def issue(self) -> str:
        return format_issue(self.code, self.message)


@dataclass(slots=True)
class CandidateOutcome:
    accepted: Optional[ValidatedCandidate] = None
    rejection: Optional[Rejection] = None

    @property
    def ok(self) -> bool:
        return self.rejection is None


@dataclass(slots=True)
class SynthesisResult:
    strategies: List[ExitStrategy] = field(default_factory=list)
    issues: List[str] = field(default_factory=list)
    failure: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def raise_for_failure(self) -> "SynthesisResult":
        if self.failure is not None:
            raise SynthesisError(self.failure.code, self.failure.message, list(self.issues))
        return self
