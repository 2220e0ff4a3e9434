"""
Game variants and the rules that differ between them.
"""

from enum import Enum
from dataclasses import dataclass
from typing import List, Union

from .elimination import EliminationState
from .player import Player
from .resolver import EliminationOutcome, RankCutoffResolver, SingleEliminationResolver
from .tie_break import TieBreakEngine, TieState
from .tally import VoteSet


class GameVariant(Enum):
    """Mutually exclusive game variants."""
    STANDARD = "standard"
    RANDOMIZE = "randomize"
    WORDS = "words"


@dataclass
class RoundConfig:
    """Settings fixed when a game starts."""
    impostor_count: Union[int, str] = 1
    jester_enabled: bool = False
    variant: GameVariant = GameVariant.STANDARD


class VariantRules:
    """
    Standard count-based rules.

    A game owes one elimination per impostor; the first full batch ends it.
    """
    variant = GameVariant.STANDARD
    allows_jester = True
    team_rules = True  # Impostor-exhausted / impostor-surviving checked every round
    host_driven = False  # Host decides when VOTE_RESULTS moves on
    takes_turns = False  # Discussion follows a clockwise speaking order

    def __init__(self):
        self.resolver = self._make_resolver()
        self.tie_engine = TieBreakEngine(self.resolver)

    def _make_resolver(self) -> RankCutoffResolver:
        return RankCutoffResolver()

    def required_elimination_count(self, impostor_count: int, elimination: EliminationState) -> int:
        """Eliminations still owed this game."""
        return max(0, impostor_count - len(elimination))

    def votes_per_voter(self, impostor_count: int, elimination: EliminationState, tie: TieState) -> int:
        if tie.active:
            return tie.remaining_slots
        return self.required_elimination_count(impostor_count, elimination)

    def on_boundary_tie(self, outcome: EliminationOutcome, original_votes: VoteSet) -> TieState:
        """Open the tie-break a resolver reported."""
        return self.tie_engine.start(outcome.contenders, outcome.remaining_slots, original_votes)

    def on_round_end(self, players: List[Player], batch: List[str]) -> List[Player]:
        """Apply a batch of eliminations to the players. Roles are kept for the reveal."""
        return [p.eliminated() if p.player_id in batch else p for p in players]


class WordsRules(VariantRules):
    """Standard rules without a jester; players describe their word in turn."""
    variant = GameVariant.WORDS
    allows_jester = False
    takes_turns = True


class RandomizeRules(VariantRules):
    """
    Open-ended single-elimination rules.

    One player leaves per round and becomes a spectator right away; the game
    runs until the host finishes it.
    """
    variant = GameVariant.RANDOMIZE
    allows_jester = False
    team_rules = False
    host_driven = True

    def _make_resolver(self) -> RankCutoffResolver:
        return SingleEliminationResolver()

    def required_elimination_count(self, impostor_count: int, elimination: EliminationState) -> int:
        return 1

    def votes_per_voter(self, impostor_count: int, elimination: EliminationState, tie: TieState) -> int:
        return 1

    def on_boundary_tie(self, outcome: EliminationOutcome, original_votes: VoteSet) -> TieState:
        return self.tie_engine.start(outcome.contenders, 1, original_votes)

    def on_round_end(self, players: List[Player], batch: List[str]) -> List[Player]:
        return [p.eliminated(as_spectator=True) if p.player_id in batch else p for p in players]


_RULES = {
    GameVariant.STANDARD: VariantRules,
    GameVariant.WORDS: WordsRules,
    GameVariant.RANDOMIZE: RandomizeRules,
}


def get_variant_rules(variant: GameVariant) -> VariantRules:
    """Create the rule strategy for a variant. Selected once per game."""
    return _RULES[variant]()


def variant_for(randomize_mode: bool, game_mode: str = "questions") -> GameVariant:
    """
    Map lobby settings to a variant.

    Raises:
        ValueError: If the game mode is unknown
    """
    if game_mode not in ("questions", "words"):
        raise ValueError(f"Unknown game_mode: {game_mode}. Must be 'questions' or 'words'")
    if randomize_mode:
        return GameVariant.RANDOMIZE
    if game_mode == "words":
        return GameVariant.WORDS
    return GameVariant.STANDARD
