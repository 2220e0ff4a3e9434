"""
Elimination resolvers: turn a tally into eliminations and tie contenders.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Iterable


@dataclass
class EliminationOutcome:
    """Result of resolving one tally."""
    eliminated: List[str] = field(default_factory=list)
    contenders: List[str] = field(default_factory=list)
    remaining_slots: int = 0
    cutoff: Optional[int] = None

    @property
    def is_tie(self) -> bool:
        """True if a boundary tie needs a restricted sub-round."""
        return bool(self.contenders)


class RankCutoffResolver:
    """
    Count-based resolver used by the standard and words variants.

    Targets are ranked by vote count; the count at rank `required` is the
    cutoff. Targets above the cutoff are eliminated outright. Targets at
    the cutoff are eliminated too unless there are more of them than slots
    left, in which case they go to a tie-break for the remaining slots.
    """

    def resolve(self, tally: Dict[str, int], required: int,
                already_eliminated: Iterable[str] = ()) -> Optional[EliminationOutcome]:
        """
        Resolve a tally.

        Args:
            tally: Counts per eligible target, in seating order
            required: Number of eliminations this tally must produce
            already_eliminated: Ids excluded from the ranking

        Returns:
            EliminationOutcome, or None when there are fewer eligible targets
            than required eliminations (the round stalls)
        """
        excluded = set(already_eliminated)
        ranked = [(target, count) for target, count in tally.items() if target not in excluded]

        if len(ranked) < required:
            return None
        if required <= 0:
            return EliminationOutcome()

        # sorted() is stable, so equal counts keep seating order
        ranked.sort(key=lambda item: item[1], reverse=True)
        cutoff = ranked[required - 1][1]

        above = [target for target, count in ranked if count > cutoff]
        at_cutoff = [target for target, count in ranked if count == cutoff]
        remaining_slots = required - len(above)

        if len(at_cutoff) > remaining_slots:
            return EliminationOutcome(
                eliminated=above,
                contenders=at_cutoff,
                remaining_slots=remaining_slots,
                cutoff=cutoff,
            )
        return EliminationOutcome(eliminated=above + at_cutoff, cutoff=cutoff)


class SingleEliminationResolver(RankCutoffResolver):
    """
    Randomize-variant resolver: exactly one elimination per round.

    A shared top count makes every top target a contender for the single
    slot; otherwise the sole leader is eliminated.
    """

    def resolve(self, tally: Dict[str, int], required: int = 1,
                already_eliminated: Iterable[str] = ()) -> Optional[EliminationOutcome]:
        return super().resolve(tally, min(required, 1), already_eliminated)
