"""
Player class representing a game participant.
"""

from dataclasses import dataclass, replace
from typing import Optional
from enum import Enum

from .roles import Role


class Personality(Enum):
    """Voting personality for bot players."""
    AGGRESSIVE = "aggressive"
    CAUTIOUS = "cautious"
    RANDOM = "random"
    HELPFUL = "helpful"


@dataclass
class Player:
    """Represents a player in the game."""
    player_id: str
    display_name: str
    role: Role = Role.INNOCENT
    is_eliminated: bool = False
    is_host: bool = False
    is_bot: bool = False
    is_connected: bool = True
    personality: Optional[Personality] = None

    def __str__(self) -> str:
        return f"{self.display_name} ({self.role.value})"

    @property
    def is_spectator(self) -> bool:
        return self.role == Role.SPECTATOR

    @property
    def is_active(self) -> bool:
        """Check if player can still vote and be voted for."""
        return not self.is_eliminated and not self.is_spectator

    @property
    def is_impostor(self) -> bool:
        return self.role == Role.IMPOSTOR

    def with_role(self, role: Role) -> "Player":
        """Copy of this player holding a new role."""
        return replace(self, role=role)

    def eliminated(self, as_spectator: bool = False) -> "Player":
        """
        Copy of this player marked eliminated.

        Args:
            as_spectator: Convert the role to spectator (randomize variant)
        """
        role = Role.SPECTATOR if as_spectator else self.role
        return replace(self, is_eliminated=True, role=role)
