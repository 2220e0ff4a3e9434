"""
Voting rounds: tallying, rank-cutoff resolution and tie-break sub-rounds.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Sequence, TYPE_CHECKING

from ..core import GameState, Judge
from ..agents import BaseAgent

if TYPE_CHECKING:
    from ..web.event_emitter import EventEmitter


@dataclass
class VotingResult:
    """What closing a (sub)round of votes produced."""
    eliminated: List[str] = field(default_factory=list)
    tie_open: bool = False
    stalled: bool = False


class VotingHandler:
    """Handles vote collection, resolution and tie-breaking."""

    def __init__(self, game_state: GameState, judge: Judge, event_emitter: Optional['EventEmitter'] = None):
        self.game_state = game_state
        self.judge = judge
        self.event_emitter = event_emitter

    @property
    def subround(self) -> int:
        """0 for the normal vote, otherwise the tie-break sub-round number."""
        tie = self.game_state.tie
        return tie.subround if tie.active else 0

    def record_vote(self, voter_id: str, target_ids: Sequence[str]) -> bool:
        """Record one submission through the judge and emit it."""
        accepted = self.judge.process_vote(voter_id, target_ids)
        if accepted and self.event_emitter:
            self.event_emitter.emit_vote(
                voter_id,
                self.game_state.votes[voter_id],
                self.game_state.round_number,
                self.subround,
            )
        return accepted

    def collect_votes(self, agents: Dict[str, BaseAgent]) -> int:
        """
        Ask every agent whose player still owes a vote.

        Returns:
            Number of votes recorded
        """
        recorded = 0
        for player_id in self.judge.get_missing_voters():
            agent = agents.get(player_id)
            if agent is None:
                continue
            context = agent.build_context(self.game_state, self.judge)
            if self.record_vote(player_id, agent.get_vote_choice(context)):
                recorded += 1
        return recorded

    def close(self) -> VotingResult:
        """Resolve the live votes of the normal round or of the current tie sub-round."""
        if self.game_state.tie.active:
            return self._close_subround()
        return self._close_round()

    def _close_round(self) -> VotingResult:
        state = self.game_state
        rules = self.judge.rules

        counts = self._publish_counts()
        required = self.judge.required_eliminations()
        outcome = rules.resolver.resolve(counts, required)

        if outcome is None:
            self.judge.announce(
                f"Only {len(counts)} players can be voted for but {required} must go. Voting is stalled."
            )
            return VotingResult(stalled=True)

        state.original_votes = dict(state.votes)
        if outcome.eliminated:
            state.apply_batch(outcome.eliminated, rules, reason="voting")
            self.judge.announce(f"Eliminated by vote: {self._names(outcome.eliminated)}")

        if outcome.is_tie:
            state.tie = rules.on_boundary_tie(outcome, state.original_votes)
            state.clear_votes()
            self._announce_tie()
            return VotingResult(eliminated=list(outcome.eliminated), tie_open=True)

        state.clear_votes()
        return VotingResult(eliminated=list(outcome.eliminated))

    def _close_subround(self) -> VotingResult:
        state = self.game_state
        rules = self.judge.rules

        self._publish_counts()
        next_tie, step = rules.tie_engine.resolve_subround(state.tie, state.votes)
        state.tie = next_tie
        state.clear_votes()

        if step.eliminated:
            reason = "tie-break pick" if step.forced else "tie-break vote"
            state.apply_batch(step.eliminated, rules, reason=reason)
            if step.forced:
                self.judge.announce(
                    f"The tie could not be broken by vote. Most votes overall decides: {self._names(step.eliminated)}"
                )
            else:
                self.judge.announce(f"Eliminated by re-vote: {self._names(step.eliminated)}")

        if next_tie.active:
            self._announce_tie()
            return VotingResult(eliminated=step.eliminated, tie_open=True)
        return VotingResult(eliminated=step.eliminated)

    def _publish_counts(self) -> Dict[str, int]:
        """Tally the live votes, store and emit them."""
        state = self.game_state
        counts = self.judge.get_vote_counts()
        breakdown = self.judge.get_vote_breakdown()
        state.last_tally = counts

        for target, count in counts.items():
            if count:
                self.judge.announce(f"{count} votes for {self._names([target])}, voted: {breakdown[target]}")

        if self.event_emitter:
            self.event_emitter.emit_vote_results(counts, breakdown, state.round_number, self.subround)
        return counts

    def _announce_tie(self) -> None:
        tie = self.game_state.tie
        self.judge.announce(
            f"Tie between {self._names(tie.contenders)} for {tie.remaining_slots} "
            f"spot{'s' if tie.remaining_slots != 1 else ''}. Vote again among them."
        )
        if self.event_emitter:
            self.event_emitter.emit_tie_break_started(
                list(tie.contenders),
                tie.remaining_slots,
                self.game_state.round_number,
                tie.subround,
            )

    def _names(self, player_ids: Sequence[str]) -> str:
        names = []
        for player_id in player_ids:
            player = self.game_state.get_player(player_id)
            names.append(player.display_name if player else player_id)
        return ", ".join(names)
