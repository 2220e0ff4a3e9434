"""
Speaking order for the words game's discussion.
"""

import random
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from .player import Player


@dataclass(frozen=True)
class TurnOrder:
    """Clockwise speaking order starting from a randomly chosen player."""
    order: Tuple[str, ...] = ()
    starting_player: Optional[str] = None
    current_player: Optional[str] = None

    @property
    def is_set(self) -> bool:
        return bool(self.order)

    def next_player(self, player_id: str) -> Optional[str]:
        """Player after `player_id`, wrapping around to the start."""
        if player_id not in self.order:
            return None
        index = self.order.index(player_id)
        return self.order[(index + 1) % len(self.order)]

    def advance(self) -> 'TurnOrder':
        """Pass the turn to the next player."""
        if not self.is_set or self.current_player is None:
            return self
        return replace(self, current_player=self.next_player(self.current_player))

    def reset(self) -> 'TurnOrder':
        """Give the turn back to the starting player."""
        if not self.is_set:
            return self
        return replace(self, current_player=self.starting_player)


def select_starting_player(players: List[Player], rng: Optional[random.Random] = None) -> Optional[Player]:
    """Pick a random active player to speak first."""
    active = [p for p in players if p.is_active]
    if not active:
        return None
    return (rng or random.Random()).choice(active)


def build_turn_order(players: List[Player], starting: Player) -> TurnOrder:
    """
    Seat order rotated to begin at the starting player.

    Args:
        players: Players in seating order; only active ones get a turn
        starting: Player who speaks first

    Returns:
        TurnOrder with the turn on the starting player, or an empty one if
        the starting player is not seated
    """
    seated = [p.player_id for p in players if p.is_active]
    if starting.player_id not in seated:
        return TurnOrder()
    start = seated.index(starting.player_id)
    order = tuple(seated[start:] + seated[:start])
    return TurnOrder(order=order, starting_player=starting.player_id, current_player=starting.player_id)
