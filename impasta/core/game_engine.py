"""
Core game state and phase bookkeeping.
"""

from enum import Enum
from typing import List, Optional, Dict, Any, TYPE_CHECKING
from dataclasses import dataclass, field

from .elimination import EliminationState
from .player import Player
from .roles import Role, RoleAssignment
from .tally import VoteSet
from .tie_break import TieState
from .turns import TurnOrder
from .variants import RoundConfig, VariantRules
from .win_conditions import WinnerResult

if TYPE_CHECKING:
    from ..web.event_emitter import EventEmitter


class GamePhase(Enum):
    """Current game phase."""
    LOBBY = "lobby"
    ROLE_ASSIGNMENT = "role_assignment"
    DISCUSSION = "discussion"
    VOTING = "voting"
    TIE_BREAK = "tie_break"
    VOTE_RESULTS = "vote_results"
    RESULTS = "results"


@dataclass
class GameState:
    """Complete game state owned by one round controller."""
    phase: GamePhase = GamePhase.LOBBY
    round_number: int = 0
    players: List[Player] = field(default_factory=list)
    round_config: RoundConfig = field(default_factory=RoundConfig)
    impostor_count: int = 0  # Resolved at game start
    assignment: Optional[RoleAssignment] = None

    # Voting
    votes: VoteSet = field(default_factory=dict)  # Live votes of the current (sub)round
    original_votes: VoteSet = field(default_factory=dict)  # Last full vote of the round, before any tie
    last_tally: Dict[str, int] = field(default_factory=dict)
    tie: TieState = field(default_factory=TieState)
    turns: TurnOrder = field(default_factory=TurnOrder)  # Words game speaking order

    elimination: EliminationState = field(default_factory=EliminationState)
    winner: Optional[WinnerResult] = None

    action_log: List[Dict[str, Any]] = field(default_factory=list)
    event_emitter: Optional['EventEmitter'] = None

    def get_player(self, player_id: str) -> Optional[Player]:
        """Get player by id."""
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def get_playing_players(self) -> List[Player]:
        """Players taking part in the game (spectators excluded)."""
        return [p for p in self.players if not p.is_spectator]

    def get_active_players(self) -> List[Player]:
        """Players who can vote and be voted for."""
        return [p for p in self.players if p.is_active and p.player_id not in self.elimination]

    def get_host(self) -> Optional[Player]:
        for player in self.players:
            if player.is_host:
                return player
        return None

    def assigned_role(self, player_id: str) -> Optional[Role]:
        """Role assigned at game start, unaffected by spectator conversion."""
        if self.assignment is None:
            return None
        return self.assignment.role_of(player_id)

    def set_phase(self, phase: GamePhase) -> None:
        """Transition to a new phase."""
        if phase == self.phase:
            return
        previous = self.phase
        self.phase = phase
        self._log_action("phase_change", {"from": previous.value, "to": phase.value})
        if self.event_emitter:
            self.event_emitter.emit_phase_change(phase.value, self.round_number)

    def apply_assignment(self, assignment: RoleAssignment) -> None:
        """Give every assigned player their role."""
        self.assignment = assignment
        self.impostor_count = assignment.impostor_count
        self.players = [
            p.with_role(assignment.roles[p.player_id]) if p.player_id in assignment.roles else p
            for p in self.players
        ]
        self._log_action("roles_assigned", {
            "impostor_count": assignment.impostor_count,
            "jester_clue_players": assignment.jester_clue_players,
        })

    def clear_votes(self) -> None:
        """Start a fresh (sub)round of votes."""
        self.votes = {}

    def start_round(self) -> None:
        """Begin the next discussion/voting round."""
        self.round_number += 1
        self.clear_votes()
        self.original_votes = {}
        self.last_tally = {}
        self.tie = TieState()
        self.elimination = self.elimination.begin_round()
        self._log_action("round_start", {"round_number": self.round_number})

    def apply_batch(self, batch: List[str], rules: VariantRules, reason: str = "voting") -> None:
        """
        Record eliminations and update the eliminated players.

        Args:
            batch: Player ids eliminated together
            rules: Variant rules deciding how eliminated players change
            reason: Why they were eliminated ("voting", "tie-break vote", ...)
        """
        batch = [pid for pid in batch if pid not in self.elimination]
        if not batch:
            return
        self.elimination = self.elimination.append(batch)
        self.players = rules.on_round_end(self.players, batch)
        self._log_action("elimination_batch", {
            "players": batch,
            "reason": reason,
            "round_number": self.round_number,
            "version": self.elimination.version,
        })

        if self.event_emitter:
            self.event_emitter.emit_elimination_batch(
                batch,
                reason,
                self.round_number,
                self.elimination.version,
            )
            self._emit_game_state_update()

    def end_game(self, result: WinnerResult) -> None:
        """Record the winner."""
        self.winner = result
        self._log_action("game_over", {
            "winner_type": result.winner_type.value,
            "winners": result.winner_ids,
            "reason": result.reason,
            "round_number": self.round_number,
        })

    def reset_for_lobby(self) -> None:
        """Drop all per-game state; players stay seated."""
        self.round_number = 0
        self.impostor_count = 0
        self.assignment = None
        self.votes = {}
        self.original_votes = {}
        self.last_tally = {}
        self.tie = TieState()
        self.turns = TurnOrder()
        self.elimination = EliminationState()
        self.winner = None

    def _log_action(self, action_type: str, data: Dict[str, Any]) -> None:
        """Log a game action."""
        self.action_log.append({
            "type": action_type,
            "phase": self.phase.value,
            "round": self.round_number,
            "data": data
        })

    def get_game_summary(self) -> Dict[str, Any]:
        """Get a summary of the current game state."""
        return {
            "phase": self.phase.value,
            "round": self.round_number,
            "variant": self.round_config.variant.value,
            "impostor_count": self.impostor_count,
            "active_players": len(self.get_active_players()),
            "eliminated_players": list(self.elimination),
            "previous_eliminated_players": list(self.elimination.previous),
            "tie_break_active": self.tie.active,
            "tied_players": list(self.tie.contenders),
            "turn_order": list(self.turns.order),
            "starting_player": self.turns.starting_player,
            "current_turn_player": self.turns.current_player,
            "winner_type": self.winner.winner_type.value if self.winner else None,
            "winners": self.winner.winner_ids if self.winner else [],
        }

    def _emit_game_state_update(self) -> None:
        """Emit game state update event."""
        if self.event_emitter:
            players_data = []
            for player in self.players:
                assigned = self.assigned_role(player.player_id)
                players_data.append({
                    "id": player.player_id,
                    "name": player.display_name,
                    "role": player.role.value,
                    "assigned_role": assigned.value if assigned else None,
                    "is_eliminated": player.is_eliminated,
                    "is_host": player.is_host,
                    "is_bot": player.is_bot,
                })

            game_state = self.get_game_summary()
            game_state["players"] = players_data
            self.event_emitter.emit_game_state_update(game_state)
