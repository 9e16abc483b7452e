from __future__ import annotations

import uuid
from datetime import datetime, timezone
from statistics import mean
from typing import Callable, List, Optional, Set

from loguru import logger

from .data_models import ActiveHikeContext, ExitStrategy, SynthesisPolicy
from .extraction import extract_payload
from .issues import Failure, IssueCode, SynthesisResult, format_issue
from .reference_store import ExitPointSnapshot, ReferenceStore
from .validation import ExitPointLookup, validate_candidate

Clock = Callable[[], datetime]
IdFactory = Callable[[], str]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _strategy_id() -> str:
    return f"strategy_{uuid.uuid4().hex}"


def _snapshot(store: ExitPointLookup) -> ExitPointLookup:
    # registrations made after this point are invisible to the pass
    if isinstance(store, ReferenceStore):
        return store.snapshot()
    if isinstance(store, ExitPointSnapshot):
        return store
    points = store.list_exit_points()
    by_name = {}
    for point in points:
        by_name.setdefault(point.name, point)
    return ExitPointSnapshot(exit_points=tuple(points), by_name=by_name)


def synthesize(
    response_text: str,
    store: ExitPointLookup,
    context: ActiveHikeContext,
    policy: Optional[SynthesisPolicy] = None,
    clock: Optional[Clock] = None,
    id_factory: Optional[IdFactory] = None,
) -> SynthesisResult:
    """Turn a raw model response into validated exit strategies.

    Per-candidate problems are recorded in ``issues`` and never abort the
    batch. The result only fails when no payload can be extracted or when
    no candidate survives validation.
    """
    policy = policy or SynthesisPolicy()
    clock = clock or _utc_now
    id_factory = id_factory or _strategy_id
    lookup = _snapshot(store)

    extracted = extract_payload(response_text)
    if not extracted.ok:
        return SynthesisResult(
            issues=[format_issue(extracted.failure.code, extracted.failure.message)],
            failure=extracted.failure,
        )

    issues: List[str] = []
    strategies: List[ExitStrategy] = []
    seen: Set[str] = set()

    for raw in extracted.candidates:
        outcome = validate_candidate(raw, lookup, context, policy)
        if not outcome.ok:
            issues.append(outcome.rejection.issue)
            continue

        candidate = outcome.accepted
        issues.extend(candidate.flags)
        exit_point = candidate.exit_point
        if exit_point.id in seen:
            issues.append(
                format_issue(
                    IssueCode.DUPLICATE_EXIT_POINT,
                    f'Duplicate exit point "{exit_point.name}" in strategies.',
                )
            )
            continue
        seen.add(exit_point.id)

        strategy = ExitStrategy(
            id=id_factory(),
            exit_point=exit_point,
            estimated_arrival_time=clock() + policy.arrival_offset,
            confidence_score=candidate.confidence,
            reasoning=candidate.reasoning,
            arrival_hint=candidate.arrival_hint,
        )
        strategies.append(strategy)
        logger.info(
            f"✅ Generated strategy for \"{exit_point.name}\" "
            f"(confidence: {candidate.confidence * 100:.1f}%)"
        )

    if not strategies:
        failure = Failure(IssueCode.NO_VALID_STRATEGIES, "LLM provided no valid exit strategies")
        issues.append(format_issue(failure.code, failure.message))
        logger.warning("No valid exit strategies", issues=issues)
        return SynthesisResult(issues=issues, failure=failure)

    average = mean(strategy.confidence_score for strategy in strategies)
    if average < policy.low_average_confidence_threshold:
        issues.append(
            format_issue(
                IssueCode.SUSPICIOUSLY_LOW_AVERAGE_CONFIDENCE,
                f"Average confidence score ({average:.2f}) is suspiciously low.",
            )
        )

    if issues:
        logger.warning("LLM provided some invalid strategies:\n- " + "\n- ".join(issues))
    return SynthesisResult(strategies=strategies, issues=issues)
