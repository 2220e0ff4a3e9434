"""
Tie-break engine: repeated restricted sub-rounds until no ambiguity remains.
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Sequence, Tuple

from .resolver import RankCutoffResolver
from .tally import VoteSet, tally_votes, merge_tallies


@dataclass(frozen=True)
class TieState:
    """Tie-break progress for the current round."""
    active: bool = False
    contenders: Tuple[str, ...] = ()
    remaining_slots: int = 0
    subround_history: Tuple[VoteSet, ...] = ()
    original_votes: VoteSet = field(default_factory=dict)  # Votes of the round that opened the tie
    subround_limit: int = 0  # One sub-round per initial contender

    @property
    def subround(self) -> int:
        """1-based number of the sub-round currently being voted."""
        return len(self.subround_history) + 1


@dataclass
class TieStepResult:
    """What a single sub-round produced."""
    eliminated: List[str]
    tally: Dict[str, int]
    forced: bool = False  # Deterministic pick after an empty or final sub-round


class TieBreakEngine:
    """
    Drives restricted re-votes among tie contenders.

    Each sub-round is tallied over the contenders only and resolved with the
    variant's resolver for the remaining slots. A sub-round that ties again
    (narrowed or among the same contenders) is followed by another re-vote.
    Two cases are settled by a deterministic pick instead: a sub-round where
    nobody voted, and a still-tied sub-round once N sub-rounds have been held
    for N initial contenders. The pick ranks contenders by their cumulative
    votes over the original round and all sub-rounds, then by seat.
    """

    def __init__(self, resolver: RankCutoffResolver):
        self.resolver = resolver

    def start(self, contenders: List[str], remaining_slots: int, original_votes: VoteSet) -> TieState:
        """Open a tie-break for the given contenders."""
        return TieState(
            active=True,
            contenders=tuple(contenders),
            remaining_slots=remaining_slots,
            original_votes=dict(original_votes),
            subround_limit=len(contenders),
        )

    def resolve_subround(self, state: TieState, votes: VoteSet) -> Tuple[TieState, TieStepResult]:
        """
        Resolve one sub-round of votes.

        Args:
            state: Active tie state
            votes: Fresh votes cast in this sub-round

        Returns:
            (next tie state, step result). The next state is inactive once no
            contenders remain.
        """
        if not state.active:
            raise ValueError("No tie-break in progress")

        tally = tally_votes(votes, state.contenders)
        history = state.subround_history + (dict(votes),)
        outcome = self.resolver.resolve(tally, state.remaining_slots)
        closed = replace(state, active=False, contenders=(), remaining_slots=0, subround_history=history)

        if outcome is not None and not outcome.is_tie:
            return closed, TieStepResult(eliminated=list(outcome.eliminated), tally=tally)

        if outcome is not None and any(tally.values()) and len(history) < state.subround_limit:
            next_state = replace(
                state,
                contenders=tuple(outcome.contenders),
                remaining_slots=outcome.remaining_slots,
                subround_history=history,
            )
            return next_state, TieStepResult(eliminated=list(outcome.eliminated), tally=tally)

        if outcome is not None:
            eliminated = list(outcome.eliminated)
            eliminated.extend(self._forced_pick(state, history, outcome.contenders, outcome.remaining_slots))
        else:
            eliminated = self._forced_pick(state, history, state.contenders, state.remaining_slots)
        return closed, TieStepResult(eliminated=eliminated, tally=tally, forced=True)

    def run(self, state: TieState, collect_votes: Callable[[TieState], VoteSet]) -> Tuple[TieState, List[str]]:
        """
        Run sub-rounds until the tie is resolved.

        Args:
            state: Active tie state
            collect_votes: Returns the votes for a sub-round, given its state

        Returns:
            (final tie state, every player eliminated during the tie-break)
        """
        eliminated: List[str] = []
        for _ in range(max(1, state.subround_limit - len(state.subround_history))):
            state, step = self.resolve_subround(state, collect_votes(state))
            eliminated.extend(step.eliminated)
            if not state.active:
                return state, eliminated
        raise RuntimeError(f"Tie-break did not terminate: {list(state.contenders)}")

    def _forced_pick(self, state: TieState, history: Tuple[VoteSet, ...],
                     contenders: Sequence[str], slots: int) -> List[str]:
        tallies = [tally_votes(state.original_votes, contenders)]
        tallies.extend(tally_votes(votes, contenders) for votes in history)
        totals = merge_tallies(*tallies)
        ranked = sorted(contenders, key=lambda pid: totals.get(pid, 0), reverse=True)
        return ranked[:slots]
