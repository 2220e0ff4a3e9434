"""
Tests for the tie-break engine.
"""

import pytest

from impasta.core import TieBreakEngine, TieState, RankCutoffResolver, SingleEliminationResolver


@pytest.fixture
def engine():
    return TieBreakEngine(RankCutoffResolver())


ORIGINAL = {"p1": ["p1", "p2"], "p2": ["p1", "p3"], "p3": ["p1", "p2"], "p4": ["p3", "p4"]}


def test_start_opens_tie(engine):
    state = engine.start(["p2", "p3"], 1, ORIGINAL)
    assert state.active
    assert state.contenders == ("p2", "p3")
    assert state.remaining_slots == 1
    assert state.subround == 1
    assert state.original_votes == ORIGINAL


def test_subround_resolves_tie(engine):
    """Sub-round p2=2, p3=1 eliminates p2."""
    state = engine.start(["p2", "p3"], 1, ORIGINAL)
    votes = {"p1": ["p2"], "p4": ["p2"], "p5": ["p3"]}

    next_state, step = engine.resolve_subround(state, votes)

    assert step.eliminated == ["p2"]
    assert step.tally == {"p2": 2, "p3": 1}
    assert not step.forced
    assert not next_state.active
    assert next_state.subround_history == (votes,)


def test_votes_outside_contenders_ignored(engine):
    state = engine.start(["p2", "p3"], 1, {})
    _, step = engine.resolve_subround(state, {"p1": ["p5"], "p4": ["p3"]})
    assert step.tally == {"p2": 0, "p3": 1}
    assert step.eliminated == ["p3"]


def test_smaller_tie_continues(engine):
    """Three contenders for two slots: one clears, two tie for the last slot."""
    state = engine.start(["p1", "p2", "p3"], 2, {})
    votes = {"p4": ["p1", "p2"], "p5": ["p1", "p3"]}

    next_state, step = engine.resolve_subround(state, votes)

    assert step.eliminated == ["p1"]
    assert next_state.active
    assert next_state.contenders == ("p2", "p3")
    assert next_state.remaining_slots == 1
    assert next_state.subround == 2


def test_zero_votes_force_deterministic_pick(engine):
    """An empty sub-round still fills the slot, ranked by earlier votes."""
    original = {"p1": ["p3"], "p2": ["p3"], "p4": ["p2"], "p5": ["p2"], "p6": ["p2"], "p3": ["p2"]}
    state = engine.start(["p2", "p3"], 1, original)

    next_state, step = engine.resolve_subround(state, {})

    assert step.forced
    assert step.eliminated == ["p2"]
    assert not next_state.active


def test_retied_subround_votes_again(engine):
    """A 2-2 re-vote among the same contenders opens another sub-round."""
    state = engine.start(["p2", "p3"], 1, ORIGINAL)

    next_state, step = engine.resolve_subround(state, {"p1": ["p2"], "p4": ["p2"], "p5": ["p3"], "p6": ["p3"]})

    assert not step.forced
    assert step.eliminated == []
    assert next_state.active
    assert next_state.contenders == ("p2", "p3")
    assert next_state.remaining_slots == 1
    assert next_state.subround == 2

    final_state, step = engine.resolve_subround(next_state, {"p1": ["p3"], "p4": ["p3"], "p5": ["p2"]})

    assert step.eliminated == ["p3"]
    assert not step.forced
    assert not final_state.active
    assert len(final_state.subround_history) == 2


def test_tie_still_open_after_last_subround_picks_by_seat(engine):
    state = engine.start(["p2", "p3"], 1, {"p1": ["p2"], "p4": ["p3"]})
    tied = {"p1": ["p2"], "p4": ["p3"]}

    state, step = engine.resolve_subround(state, tied)
    assert state.active and not step.forced

    state, step = engine.resolve_subround(state, tied)
    assert step.forced
    assert step.eliminated == ["p2"]
    assert not state.active


def test_last_subround_keeps_clear_winners(engine):
    """Contenders above the cutoff go out; only the still-tied slot is picked."""
    state = engine.start(["p1", "p2", "p3"], 2, {"p4": ["p3"]})
    tied = {"p4": ["p1", "p2"], "p5": ["p1", "p3"], "p6": ["p2", "p3"]}

    state, _ = engine.resolve_subround(state, tied)
    state, _ = engine.resolve_subround(state, tied)
    assert state.active

    state, step = engine.resolve_subround(state, {"p4": ["p1", "p2"], "p5": ["p1", "p3"]})

    assert step.forced
    # p1 clears with 2 votes; p3 leads p2 on cumulative votes thanks to the original round
    assert step.eliminated == ["p1", "p3"]
    assert not state.active


def test_inactive_state_rejected(engine):
    with pytest.raises(ValueError):
        engine.resolve_subround(TieState(), {})


def test_run_terminates_within_contender_count(engine):
    """Adversarial voters who always tie still end after at most N sub-rounds."""
    state = engine.start(["p1", "p2", "p3", "p4"], 2, {})
    calls = []

    def always_tied(current):
        calls.append(current.contenders)
        return {f"v{i}": [pid] for i, pid in enumerate(current.contenders)}

    final_state, eliminated = engine.run(state, always_tied)

    assert not final_state.active
    assert len(eliminated) == 2
    assert len(calls) == 4


def test_run_with_randomize_resolver():
    engine = TieBreakEngine(SingleEliminationResolver())
    state = engine.start(["p1", "p2"], 1, {})

    final_state, eliminated = engine.run(state, lambda current: {"p3": ["p1"], "p4": ["p1"], "p5": ["p2"]})

    assert eliminated == ["p1"]
    assert len(final_state.subround_history) == 1
