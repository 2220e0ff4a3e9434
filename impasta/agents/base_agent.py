"""
Base agent interface for Impasta voters.
"""

from typing import List
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from ..core import Player, GameState, GamePhase, Judge
from ..config.game_config import GameConfig, default_config


@dataclass
class AgentContext:
    """Context information provided to an agent."""
    player: Player
    game_state: GameState
    current_phase: GamePhase
    eligible_targets: List[str]
    votes_needed: int
    tied_players: List[str] = field(default_factory=list)

    @property
    def round_number(self) -> int:
        return self.game_state.round_number


class BaseAgent(ABC):
    """
    Abstract base class for all voting agents.

    This defines the interface that all agent implementations must follow.
    """

    def __init__(self, player: Player, config: GameConfig = default_config):
        """
        Initialize the agent.

        Args:
            player: The player this agent represents
            config: Game configuration
        """
        self.player = player
        self.config = config

    @property
    def player_id(self) -> str:
        return self.player.player_id

    @abstractmethod
    def get_vote_choice(self, context: AgentContext) -> List[str]:
        """
        Get voting choice.

        Args:
            context: Current game context

        Returns:
            Player ids to vote against, at most `context.votes_needed` of them
        """
        pass

    def build_context(self, game_state: GameState, judge: Judge) -> AgentContext:
        """
        Build context for the agent.

        Eligible targets exclude the agent itself and, during a tie-break,
        everyone who is not a contender.

        Args:
            game_state: Current game state
            judge: Judge that knows the eligibility rules

        Returns:
            AgentContext for the current (sub)round
        """
        # Refresh the player; eliminations replace Player objects in the state
        player = game_state.get_player(self.player_id) or self.player
        self.player = player

        targets = [pid for pid in judge.get_eligible_targets() if pid != self.player_id]
        tied = list(game_state.tie.contenders) if game_state.tie.active else []

        return AgentContext(
            player=player,
            game_state=game_state,
            current_phase=game_state.phase,
            eligible_targets=targets,
            votes_needed=judge.votes_required(),
            tied_players=tied,
        )
