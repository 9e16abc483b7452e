from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Callable, Iterable, List, Mapping, Optional, Protocol

from .data_models import (
    Accessibility,
    ActiveHikeContext,
    ExitPoint,
    RouteDifficulty,
    SynthesisPolicy,
)
from .issues import (
    CandidateOutcome,
    IssueCode,
    Rejection,
    ValidatedCandidate,
    format_issue,
)

CLOSE_MAX_MILES = 2.0
FAR_MIN_MILES = 1.0


class ExitPointLookup(Protocol):
    def find_exit_point_by_name(self, name: str) -> Optional[ExitPoint]: ...

    def list_exit_points(self) -> List[ExitPoint]: ...


@dataclass(frozen=True, slots=True)
class ConsistencyRule:
    """A lexical claim in the reasoning and the facts that contradict it."""

    name: str
    claim: str
    contradicted: Callable[[ExitPoint, ActiveHikeContext], bool]
    description: str

    def violated(self, reasoning: str, exit_point: ExitPoint, context: ActiveHikeContext) -> bool:
        return self.claim in reasoning.lower() and self.contradicted(exit_point, context)


def _access_is_difficult(exit_point: ExitPoint, context: ActiveHikeContext) -> bool:
    return exit_point.accessibility is Accessibility.DIFFICULT


def _access_is_easy(exit_point: ExitPoint, context: ActiveHikeContext) -> bool:
    return exit_point.accessibility is Accessibility.EASY


def _beyond_close_range(exit_point: ExitPoint, context: ActiveHikeContext) -> bool:
    return exit_point.distance_from_current > CLOSE_MAX_MILES


def _within_far_range(exit_point: ExitPoint, context: ActiveHikeContext) -> bool:
    return exit_point.distance_from_current < FAR_MIN_MILES


def _expert_route(exit_point: ExitPoint, context: ActiveHikeContext) -> bool:
    return context.route_difficulty is RouteDifficulty.EXPERT


CONSISTENCY_RULES = (
    ConsistencyRule(
        "easy_access",
        "easy",
        _access_is_difficult,
        'reasoning claims "easy" but exit point is marked as difficult',
    ),
    ConsistencyRule(
        "difficult_access",
        "difficult",
        _access_is_easy,
        'reasoning claims "difficult" but exit point is marked as easy',
    ),
    ConsistencyRule(
        "close_distance",
        "close",
        _beyond_close_range,
        f'reasoning claims "close" but exit point is over {CLOSE_MAX_MILES:g} miles away',
    ),
    ConsistencyRule(
        "far_distance",
        "far",
        _within_far_range,
        f'reasoning claims "far" but exit point is under {FAR_MIN_MILES:g} mile away',
    ),
    ConsistencyRule(
        "good_weather",
        "good weather",
        _expert_route,
        'reasoning mentions "good weather" for expert-level trail',
    ),
    ConsistencyRule(
        "beginner_level",
        "beginner",
        _expert_route,
        'reasoning mentions "beginner" for expert-level trail',
    ),
)


def reasoning_contradictions(
    reasoning: str,
    exit_point: ExitPoint,
    context: ActiveHikeContext,
    rules: Iterable[ConsistencyRule] = CONSISTENCY_RULES,
) -> List[str]:
    return [rule.description for rule in rules if rule.violated(reasoning, exit_point, context)]


def _is_confidence(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return not math.isnan(value) and 0.0 <= value <= 1.0


def _reject(code: IssueCode, message: str) -> CandidateOutcome:
    return CandidateOutcome(rejection=Rejection(code, message))


def validate_candidate(
    raw: Any,
    store: ExitPointLookup,
    context: ActiveHikeContext,
    policy: Optional[SynthesisPolicy] = None,
    rules: Iterable[ConsistencyRule] = CONSISTENCY_RULES,
) -> CandidateOutcome:
    """Check one decoded strategy entry against the reference data.

    Hard failures reject the candidate at the first failing check. Soft
    failures are kept on the accepted candidate as ``flags``.
    """
    policy = policy or SynthesisPolicy()

    if not isinstance(raw, Mapping):
        return _reject(IssueCode.MISSING_FIELD, "Encountered a strategy entry that is not an object.")
    name = raw.get("exitPointName")
    if not isinstance(name, str) or not name.strip():
        return _reject(IssueCode.MISSING_FIELD, "Strategy is missing a valid exit point name.")

    exit_point = store.find_exit_point_by_name(name)
    if exit_point is None:
        return _reject(IssueCode.UNKNOWN_EXIT_POINT, f'Exit point "{name}" not found.')

    confidence = raw.get("confidence")
    if not _is_confidence(confidence):
        return _reject(
            IssueCode.INVALID_CONFIDENCE,
            f'Strategy for "{name}" has invalid confidence score ({confidence!r}).',
        )

    reasoning = raw.get("reasoning")
    if not isinstance(reasoning, str) or not reasoning.strip():
        return _reject(IssueCode.MISSING_REASONING, f'Strategy for "{name}" is missing reasoning.')

    contradictions = reasoning_contradictions(reasoning, exit_point, context, rules)
    if contradictions:
        return _reject(
            IssueCode.INCONSISTENT_REASONING,
            f'Strategy for "{name}" has logical issues: {", ".join(contradictions)}',
        )

    flags: List[str] = []
    if confidence > policy.high_confidence_threshold:
        flags.append(
            format_issue(
                IssueCode.SUSPICIOUSLY_HIGH_CONFIDENCE,
                f'Strategy for "{name}" has unrealistic confidence score ({confidence}). '
                "Consider lowering to 0.9 or below.",
            )
        )

    hint = raw.get("estimatedArrivalTime")
    return CandidateOutcome(
        accepted=ValidatedCandidate(
            exit_point=exit_point,
            confidence=float(confidence),
            reasoning=reasoning,
            arrival_hint=hint if isinstance(hint, str) else None,
            flags=flags,
        )
    )
