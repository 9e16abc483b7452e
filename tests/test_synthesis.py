import itertools
import json
from datetime import timedelta

import pytest

from conftest import FIXED_NOW, make_exit_point
from exit_planner.data_models import SynthesisPolicy
from exit_planner.issues import IssueCode, SynthesisError
from exit_planner.synthesis import synthesize


def response(*entries):
    return json.dumps({"strategies": list(entries)})


def entry(name, confidence=0.8, reasoning="Reasonable option for the conditions."):
    return {"exitPointName": name, "confidence": confidence, "reasoning": reasoning}


def codes(issues):
    return [issue.split(":", 1)[0] for issue in issues]


def test_bear_brook_scenario_accepts_one_strategy(store, context, clock, id_factory):
    text = (
        '{"strategies":[{"exitPointName":"Bear Brook Trail","confidence":0.85,'
        '"reasoning":"This is a close and easy exit given current pace."}]}'
    )
    result = synthesize(text, store, context, clock=clock, id_factory=id_factory)
    assert result.ok
    assert result.issues == []
    [strategy] = result.strategies
    assert strategy.id == "strategy-1"
    assert strategy.exit_point is store.get_exit_point("exit1")
    assert strategy.confidence_score == 0.85
    assert strategy.estimated_arrival_time == FIXED_NOW + timedelta(hours=2)


def test_contradictory_reasoning_fails_with_no_valid_strategies(store, context):
    text = response(entry("Bear Brook Trail", 0.85, "This difficult route is far from here"))
    result = synthesize(text, store, context)
    assert not result.ok
    assert result.strategies == []
    assert result.failure.code is IssueCode.NO_VALID_STRATEGIES
    assert codes(result.issues) == ["InconsistentReasoning", "NoValidStrategies"]
    assert 'claims "difficult" but exit point is marked as easy' in result.issues[0]
    with pytest.raises(SynthesisError) as excinfo:
        result.raise_for_failure()
    assert excinfo.value.code is IssueCode.NO_VALID_STRATEGIES
    assert excinfo.value.issues == result.issues


def test_text_without_payload_is_malformed(store, context):
    result = synthesize("I cannot help with that.", store, context)
    assert result.failure.code is IssueCode.MALFORMED_RESPONSE
    assert codes(result.issues) == ["MalformedResponse"]


def test_empty_strategy_list_fails(store, context):
    result = synthesize(response(), store, context)
    assert result.failure.code is IssueCode.NO_VALID_STRATEGIES


def test_well_formed_distinct_candidates_all_survive(store, context):
    text = response(
        entry("Bear Brook Trail"),
        entry("North Trailhead"),
        entry("Emergency Shelter"),
    )
    result = synthesize(text, store, context)
    assert result.ok
    assert result.issues == []
    assert [s.exit_point.id for s in result.strategies] == ["exit1", "exit2", "exit3"]


def test_unknown_exit_point_does_not_affect_others(store, context):
    text = response(entry("Bear Brook Trail"), entry("Hidden Valley"), entry("North Trailhead"))
    result = synthesize(text, store, context)
    assert [s.exit_point.name for s in result.strategies] == ["Bear Brook Trail", "North Trailhead"]
    assert codes(result.issues) == ["UnknownExitPoint"]
    assert "Hidden Valley" in result.issues[0]


def test_duplicates_keep_first_seen(store, context):
    text = response(
        entry("North Trailhead", 0.6, "first"),
        entry("Bear Brook Trail"),
        entry("North Trailhead", 0.9, "second"),
    )
    result = synthesize(text, store, context)
    assert [s.reasoning for s in result.strategies] == ["first", "Reasonable option for the conditions."]
    assert codes(result.issues) == ["DuplicateExitPoint"]


def test_rejected_entry_does_not_claim_exit_point(store, context):
    text = response(entry("Bear Brook Trail", confidence=2), entry("Bear Brook Trail", 0.7))
    result = synthesize(text, store, context)
    assert [s.confidence_score for s in result.strategies] == [0.7]
    assert codes(result.issues) == ["InvalidConfidence"]


def test_low_average_confidence_is_flagged_without_dropping(context):
    from exit_planner.reference_store import ReferenceStore

    store = ReferenceStore(
        make_exit_point(f"exit{i}", f"Exit {i}", "moderate", 1.5) for i in range(10)
    )
    text = response(*(entry(f"Exit {i}", 0.1) for i in range(10)))
    result = synthesize(text, store, context)
    assert result.ok
    assert len(result.strategies) == 10
    assert codes(result.issues) == ["SuspiciouslyLowAverageConfidence"]


def test_high_confidence_flag_is_reported_alongside_result(store, context):
    result = synthesize(response(entry("Bear Brook Trail", 0.99)), store, context)
    assert result.ok
    assert codes(result.issues) == ["SuspiciouslyHighConfidence"]


def test_identical_inputs_give_identical_outputs(store, context, clock):
    text = response(entry("Bear Brook Trail"), entry("North Trailhead", 0.4))

    def fresh_ids():
        counter = itertools.count(1)
        return lambda: f"strategy-{next(counter)}"

    first = synthesize(text, store, context, clock=clock, id_factory=fresh_ids())
    second = synthesize(text, store, context, clock=clock, id_factory=fresh_ids())
    assert first == second


def test_arrival_offset_follows_policy(store, context, clock):
    policy = SynthesisPolicy(arrival_offset=timedelta(minutes=45))
    result = synthesize(response(entry("Bear Brook Trail")), store, context, policy=policy, clock=clock)
    assert result.strategies[0].estimated_arrival_time == FIXED_NOW + timedelta(minutes=45)


def test_default_ids_are_unique(store, context):
    result = synthesize(response(entry("Bear Brook Trail"), entry("North Trailhead")), store, context)
    ids = [s.id for s in result.strategies]
    assert len(set(ids)) == 2
    assert all(i.startswith("strategy_") for i in ids)


def test_pass_uses_snapshot_taken_at_start(store, context):
    def registering_clock():
        if store.get_exit_point("exit9") is None:
            store.register_exit_point(make_exit_point("exit9", "Late Exit", "easy", 0.5))
        return FIXED_NOW

    text = response(entry("Bear Brook Trail"), entry("Late Exit"))
    result = synthesize(text, store, context, clock=registering_clock)
    assert [s.exit_point.name for s in result.strategies] == ["Bear Brook Trail"]
    assert codes(result.issues) == ["UnknownExitPoint"]
    assert store.find_exit_point_by_name("Late Exit") is not None


def test_deeply_nested_response_is_malformed(store, context):
    text = 'Here: {"strategies": [' + '{"a":' * 50000 + "1" + "}" * 50000 + "]}"
    result = synthesize(text, store, context)
    assert not result.ok
    assert result.failure.code is IssueCode.MALFORMED_RESPONSE
    assert codes(result.issues) == ["MalformedResponse"]
