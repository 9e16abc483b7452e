import math

import pytest

from exit_planner.data_models import SynthesisPolicy
from exit_planner.issues import IssueCode
from exit_planner.validation import (
    CONSISTENCY_RULES,
    reasoning_contradictions,
    validate_candidate,
)


def candidate(name="Bear Brook Trail", confidence=0.8, reasoning="A sensible option.", **extra):
    raw = {"exitPointName": name, "confidence": confidence, "reasoning": reasoning}
    raw.update(extra)
    return raw


def test_valid_candidate_resolves_to_registered_exit_point(store, context):
    outcome = validate_candidate(candidate(), store, context)
    assert outcome.ok
    assert outcome.accepted.exit_point is store.get_exit_point("exit1")
    assert outcome.accepted.confidence == 0.8
    assert outcome.accepted.flags == []


@pytest.mark.parametrize("raw", ["text", 3, None, ["Bear Brook Trail"]])
def test_non_object_entries_are_missing_field(store, context, raw):
    outcome = validate_candidate(raw, store, context)
    assert outcome.rejection.code is IssueCode.MISSING_FIELD


@pytest.mark.parametrize("name", [None, "", "   ", 42])
def test_blank_or_non_string_names_are_missing_field(store, context, name):
    outcome = validate_candidate(candidate(name=name), store, context)
    assert outcome.rejection.code is IssueCode.MISSING_FIELD


@pytest.mark.parametrize("name", ["bear brook trail", "Bear Brook", "Bear Brook Trail "])
def test_name_resolution_is_exact(store, context, name):
    outcome = validate_candidate(candidate(name=name), store, context)
    assert outcome.rejection.code is IssueCode.UNKNOWN_EXIT_POINT


@pytest.mark.parametrize("confidence", [0, 1, 0.0, 1.0])
def test_confidence_bounds_are_inclusive(store, context, confidence):
    assert validate_candidate(candidate(confidence=confidence), store, context).ok


@pytest.mark.parametrize("confidence", [-0.0001, 1.0001, "0.8", None, True, math.nan])
def test_out_of_range_or_non_numeric_confidence_is_rejected(store, context, confidence):
    outcome = validate_candidate(candidate(confidence=confidence), store, context)
    assert outcome.rejection.code is IssueCode.INVALID_CONFIDENCE


@pytest.mark.parametrize("reasoning", [None, "", "   \n", 7])
def test_missing_reasoning_is_rejected(store, context, reasoning):
    outcome = validate_candidate(candidate(reasoning=reasoning), store, context)
    assert outcome.rejection.code is IssueCode.MISSING_REASONING


@pytest.mark.parametrize(
    "name, reasoning, expected",
    [
        ("Emergency Shelter", "An EASY walk out.", 'claims "easy"'),
        ("Bear Brook Trail", "A difficult descent.", 'claims "difficult"'),
        ("North Trailhead", "It is close by.", 'claims "close"'),
        ("Emergency Shelter", "It is far away.", 'claims "far"'),
    ],
)
def test_reasoning_contradicting_exit_point_is_rejected(store, context, name, reasoning, expected):
    outcome = validate_candidate(candidate(name=name, reasoning=reasoning), store, context)
    assert outcome.rejection.code is IssueCode.INCONSISTENT_REASONING
    assert expected in outcome.rejection.message


@pytest.mark.parametrize("reasoning", ["Enjoy the good weather.", "Suitable for a beginner."])
def test_expert_routes_reject_weather_and_beginner_claims(store, expert_context, context, reasoning):
    rejected = validate_candidate(candidate(reasoning=reasoning), store, expert_context)
    assert rejected.rejection.code is IssueCode.INCONSISTENT_REASONING
    assert validate_candidate(candidate(reasoning=reasoning), store, context).ok


def test_matching_claims_are_consistent(store, context):
    outcome = validate_candidate(
        candidate(reasoning="This is a close and easy exit given current pace."), store, context
    )
    assert outcome.ok


def test_all_contradictions_are_reported_together(store, expert_context):
    exit_point = store.get_exit_point("exit3")
    found = reasoning_contradictions("easy and far, good weather for a beginner", exit_point, expert_context)
    assert len(found) == 4


def test_rules_are_named():
    assert [rule.name for rule in CONSISTENCY_RULES] == [
        "easy_access",
        "difficult_access",
        "close_distance",
        "far_distance",
        "good_weather",
        "beginner_level",
    ]


def test_high_confidence_is_flagged_not_rejected(store, context):
    outcome = validate_candidate(candidate(confidence=0.97), store, context)
    assert outcome.ok
    assert len(outcome.accepted.flags) == 1
    assert outcome.accepted.flags[0].startswith(IssueCode.SUSPICIOUSLY_HIGH_CONFIDENCE.value)
    assert validate_candidate(candidate(confidence=0.95), store, context).accepted.flags == []


def test_high_confidence_threshold_follows_policy(store, context):
    policy = SynthesisPolicy(high_confidence_threshold=0.5)
    outcome = validate_candidate(candidate(confidence=0.6), store, context, policy)
    assert outcome.accepted.flags


def test_arrival_hint_is_kept_when_textual(store, context):
    outcome = validate_candidate(candidate(estimatedArrivalTime="2:30 PM"), store, context)
    assert outcome.accepted.arrival_hint == "2:30 PM"
    outcome = validate_candidate(candidate(estimatedArrivalTime=1430), store, context)
    assert outcome.accepted.arrival_hint is None
