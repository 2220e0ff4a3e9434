"""
Versioned, append-only record of eliminated players.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple, List


@dataclass(frozen=True)
class EliminationState:
    """
    Cumulative eliminations for one game.

    Never mutated in place: every change returns a new value with a bumped
    version, so each transition's history stays auditable.
    """
    eliminated: Tuple[str, ...] = ()
    previous: Tuple[str, ...] = ()  # Eliminations before the current round (UI highlighting)
    version: int = 0

    def __contains__(self, player_id: object) -> bool:
        return player_id in self.eliminated

    def __iter__(self) -> Iterator[str]:
        return iter(self.eliminated)

    def __len__(self) -> int:
        return len(self.eliminated)

    def append(self, player_ids: Iterable[str]) -> "EliminationState":
        """Add a batch of eliminations. Already-eliminated ids are ignored."""
        batch = []
        for player_id in player_ids:
            if player_id not in self.eliminated and player_id not in batch:
                batch.append(player_id)
        if not batch:
            return self
        return EliminationState(
            eliminated=self.eliminated + tuple(batch),
            previous=self.previous,
            version=self.version + 1,
        )

    def begin_round(self) -> "EliminationState":
        """Snapshot the current eliminations as the previous-round list."""
        if self.previous == self.eliminated:
            return self
        return EliminationState(
            eliminated=self.eliminated,
            previous=self.eliminated,
            version=self.version + 1,
        )

    @property
    def this_round(self) -> List[str]:
        """Players eliminated since the last round snapshot."""
        return [pid for pid in self.eliminated if pid not in self.previous]
