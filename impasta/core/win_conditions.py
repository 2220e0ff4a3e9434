"""
Win condition evaluation.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, List, Iterable, Optional

from .elimination import EliminationState
from .player import Player
from .roles import Role


class WinnerType(Enum):
    """Who won the game."""
    INNOCENT = "innocent"
    IMPOSTOR = "impostor"
    JESTER = "jester"
    TIE = "tie"
    NONE = "none"


@dataclass
class WinnerResult:
    """Outcome of a win-condition check."""
    winners: List[Player] = field(default_factory=list)
    winner_type: WinnerType = WinnerType.NONE
    reason: Optional[str] = None  # jester_win, innocent_win, impostor_win, population, host_ended, tie

    @property
    def is_game_over(self) -> bool:
        return self.winner_type != WinnerType.NONE

    @property
    def winner_ids(self) -> List[str]:
        return [p.player_id for p in self.winners]


class WinConditionEvaluator:
    """
    Checks, in priority order, whether a round ended the game.

    1. Jester eliminated in this batch (jester enabled) - jester wins.
    2. No active impostors - active innocents win.
    3. Any active impostor - the whole impostor team wins.
    4. Two or fewer active players - impostors win.
    5. Otherwise the game goes on.

    Rules 2 and 3 only run when `team_rules` is set; the randomize variant
    leaves them to the host's finish signal.
    """

    def __init__(self, roles: Dict[str, Role]):
        # Roles as assigned at game start; randomize turns eliminated players
        # into spectators, so live Player.role cannot be used for team checks.
        self.roles = dict(roles)

    def active_players(self, players: Iterable[Player], elimination: EliminationState) -> List[Player]:
        """Assigned players not yet eliminated."""
        return [p for p in players if p.player_id in self.roles and p.player_id not in elimination]

    def team(self, players: Iterable[Player], role: Role) -> List[Player]:
        """Every player assigned a role, eliminated or not."""
        return [p for p in players if self.roles.get(p.player_id) == role]

    def evaluate_round(
        self,
        players: List[Player],
        elimination: EliminationState,
        batch: List[str],
        jester_enabled: bool,
        team_rules: bool = True,
    ) -> WinnerResult:
        """
        Evaluate the game after a round's eliminations were applied.

        Args:
            players: All players in seating order
            elimination: Cumulative eliminations, this batch included
            batch: Players eliminated in this round
            jester_enabled: Whether the jester rule applies
            team_rules: Evaluate the impostor-exhausted/impostor-surviving rules
        """
        if jester_enabled:
            jester_result = self.check_jester(players, batch)
            if jester_result is not None:
                return jester_result

        active = self.active_players(players, elimination)
        active_impostors = [p for p in active if self.roles[p.player_id] == Role.IMPOSTOR]

        if team_rules:
            if not active_impostors:
                innocents = [p for p in active if self.roles[p.player_id] == Role.INNOCENT]
                return WinnerResult(innocents, WinnerType.INNOCENT, "innocent_win")
            return WinnerResult(self.team(players, Role.IMPOSTOR), WinnerType.IMPOSTOR, "impostor_win")

        if len(active) <= 2:
            return WinnerResult(self.team(players, Role.IMPOSTOR), WinnerType.IMPOSTOR, "population")

        return WinnerResult()

    def check_jester(self, players: List[Player], batch: Iterable[str]) -> Optional[WinnerResult]:
        """Jester win if the jester is in the batch, else None."""
        for player_id in batch:
            if self.roles.get(player_id) == Role.JESTER:
                jester = [p for p in players if p.player_id == player_id]
                return WinnerResult(jester, WinnerType.JESTER, "jester_win")
        return None

    def evaluate_host_finish(self, players: List[Player], elimination: EliminationState) -> WinnerResult:
        """Final check when the host ends an open-ended game."""
        active = self.active_players(players, elimination)
        if any(self.roles[p.player_id] == Role.IMPOSTOR for p in active):
            return WinnerResult(self.team(players, Role.IMPOSTOR), WinnerType.IMPOSTOR, "host_ended")
        innocents = [p for p in active if self.roles[p.player_id] == Role.INNOCENT]
        return WinnerResult(innocents, WinnerType.INNOCENT, "host_ended")

    def unresolved_tie(self) -> WinnerResult:
        """Fallback when rank ambiguity survived the round."""
        return WinnerResult([], WinnerType.TIE, "tie")
