"""
Judge/Moderator: vote validation, eligibility and announcements.
"""

from typing import List, Optional, Dict, Sequence, TYPE_CHECKING

from .game_engine import GameState, GamePhase
from .tally import tally_votes, voters_by_target
from .variants import VariantRules, get_variant_rules
from ..config.game_config import GameConfig, default_config

if TYPE_CHECKING:
    from ..web.event_emitter import EventEmitter


VOTING_PHASES = (GamePhase.VOTING, GamePhase.TIE_BREAK)


class Judge:
    """Judge/Moderator that enforces voting rules and makes announcements."""

    def __init__(self, game_state: GameState, config: GameConfig = default_config,
                 event_emitter: Optional['EventEmitter'] = None):
        self.game_state = game_state
        self.config = config
        self.event_emitter = event_emitter
        self.rules: VariantRules = get_variant_rules(game_state.round_config.variant)
        self.announcements: List[str] = []

    def announce(self, message: str) -> None:
        """Make a judge announcement."""
        if self.config.use_announcements:
            self.announcements.append(message)
            print(f"[JUDGE] {message}")
            if self.event_emitter:
                self.event_emitter.emit_announcement(
                    message,
                    self.game_state.phase.value,
                    self.game_state.round_number
                )

    def get_eligible_voters(self) -> List[str]:
        """Non-eliminated, non-spectator players, in seating order."""
        return [p.player_id for p in self.game_state.get_active_players()]

    def get_eligible_targets(self) -> List[str]:
        """Players who may receive votes right now; only contenders during a tie-break."""
        if self.game_state.tie.active:
            return list(self.game_state.tie.contenders)
        return [p.player_id for p in self.game_state.get_active_players()]

    def votes_required(self) -> int:
        """How many targets each voter names in the current (sub)round."""
        state = self.game_state
        return self.rules.votes_per_voter(state.impostor_count, state.elimination, state.tie)

    def required_eliminations(self) -> int:
        state = self.game_state
        return self.rules.required_elimination_count(state.impostor_count, state.elimination)

    def process_vote(self, voter_id: str, target_ids: Sequence[str]) -> bool:
        """
        Record a vote submission.

        A later submission from the same voter replaces the earlier one.
        Targets are not checked here: unknown or ineligible ones are dropped
        when the votes are tallied.

        Returns:
            True if the vote was recorded
        """
        if self.game_state.phase not in VOTING_PHASES:
            return False

        if voter_id not in self.get_eligible_voters():
            return False

        targets = list(dict.fromkeys(target_ids))
        if len(targets) > self.votes_required():
            return False

        self.game_state.votes[voter_id] = targets
        return True

    def get_missing_voters(self) -> List[str]:
        """Eligible voters who have not submitted yet."""
        votes = self.game_state.votes
        return [voter for voter in self.get_eligible_voters() if voter not in votes]

    def all_votes_in(self) -> bool:
        """Check the voting barrier."""
        return not self.get_missing_voters()

    def get_vote_counts(self) -> Dict[str, int]:
        """Tally the live votes over the current eligible targets."""
        return tally_votes(self.game_state.votes, self.get_eligible_targets())

    def get_vote_breakdown(self) -> Dict[str, List[str]]:
        """Voters per eligible target."""
        return voters_by_target(self.game_state.votes, self.get_eligible_targets())
