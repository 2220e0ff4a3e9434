"""
Role definitions and hidden-role assignment for the Impasta game.
"""

import random
from enum import Enum
from typing import List, Dict, Optional, Union, Sequence, TYPE_CHECKING
from dataclasses import dataclass, field

if TYPE_CHECKING:
    from .player import Player


RANDOMIZE_IMPOSTORS = "randomize"

MIN_PLAYERS = 3
JESTER_MIN_PLAYERS = 5


class Role(Enum):
    """Hidden player roles."""
    INNOCENT = "innocent"
    IMPOSTOR = "impostor"
    JESTER = "jester"
    SPECTATOR = "spectator"

    @property
    def is_playing(self) -> bool:
        """Spectators never vote and are never voted for."""
        return self != Role.SPECTATOR


@dataclass
class RoleAssignment:
    """Result of assigning hidden roles to the playing players."""
    roles: Dict[str, Role]
    impostor_count: int
    jester_clue_players: List[str] = field(default_factory=list)

    def role_of(self, player_id: str) -> Optional[Role]:
        return self.roles.get(player_id)

    def players_with(self, role: Role) -> List[str]:
        """Player ids holding a role, in seating order."""
        return [pid for pid, r in self.roles.items() if r == role]

    @property
    def jester_id(self) -> Optional[str]:
        jesters = self.players_with(Role.JESTER)
        return jesters[0] if jesters else None


def max_impostor_count(player_count: int) -> int:
    """Largest impostor count that stays below half of the players."""
    return max(1, (player_count - 1) // 2)


def clamp_impostor_count(requested: int, player_count: int) -> int:
    """max(1, min(requested, floor((N - 1) / 2)))"""
    return max(1, min(requested, (player_count - 1) // 2))


def random_impostor_count(player_count: int, rng: Optional[random.Random] = None) -> int:
    """Resolve the randomize sentinel to a uniform count in [1, floor((N - 1) / 2)]."""
    rng = rng or random.Random()
    return rng.randint(1, max_impostor_count(player_count))


def resolve_impostor_count(requested: Union[int, str], player_count: int,
                           rng: Optional[random.Random] = None) -> int:
    """Resolve a requested impostor count (or the randomize sentinel) for N players."""
    if requested == RANDOMIZE_IMPOSTORS:
        return random_impostor_count(player_count, rng)
    return clamp_impostor_count(int(requested), player_count)


def get_role_distribution(player_count: int, impostor_count: int, with_jester: bool) -> List[Role]:
    """
    Build the unshuffled role multiset for a game.

    Returns: impostors first, then at most one jester, then innocents.
    """
    roles = [Role.IMPOSTOR] * impostor_count
    if with_jester:
        roles.append(Role.JESTER)
    roles.extend([Role.INNOCENT] * (player_count - len(roles)))
    return roles


def assign_roles(
    players: Sequence["Player"],
    requested_impostors: Union[int, str] = 1,
    jester_enabled: bool = False,
    allow_jester: bool = True,
    rng: Optional[random.Random] = None,
) -> RoleAssignment:
    """
    Assign hidden roles to the playing players.

    Spectators are skipped. The role multiset is shuffled with a uniform
    permutation and zipped with the players by seat. Player objects are not
    touched; the caller applies the returned assignment.

    Args:
        players: Players in seating order
        requested_impostors: Requested impostor count or RANDOMIZE_IMPOSTORS
        jester_enabled: Whether the lobby switched the jester on
        allow_jester: Whether the variant permits a jester at all
        rng: Random source, seeded for reproducible games

    Raises:
        ValueError: If fewer than MIN_PLAYERS players are playing
    """
    rng = rng or random.Random()
    playing = [p for p in players if p.role != Role.SPECTATOR]
    player_count = len(playing)
    if player_count < MIN_PLAYERS:
        raise ValueError(f"Need at least {MIN_PLAYERS} playing players, got {player_count}")

    impostor_count = resolve_impostor_count(requested_impostors, player_count, rng)
    with_jester = jester_enabled and allow_jester and player_count >= JESTER_MIN_PLAYERS

    distribution = get_role_distribution(player_count, impostor_count, with_jester)
    rng.shuffle(distribution)

    roles = {player.player_id: role for player, role in zip(playing, distribution)}
    assignment = RoleAssignment(roles=roles, impostor_count=impostor_count)
    if with_jester:
        assignment.jester_clue_players = _pick_jester_clue_players(assignment, rng)
    return assignment


def _pick_jester_clue_players(assignment: RoleAssignment, rng: random.Random) -> List[str]:
    """Half of the non-impostors (at least one) learn a jester is in play; the jester is always among them."""
    jester = assignment.jester_id
    non_impostors = [pid for pid, r in assignment.roles.items() if r != Role.IMPOSTOR]
    clue_count = max(1, len(non_impostors) // 2)

    others = [pid for pid in non_impostors if pid != jester]
    rng.shuffle(others)
    recipients = set([jester] + others[:clue_count - 1])
    return [pid for pid in non_impostors if pid in recipients]
