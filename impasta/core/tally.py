"""
Vote aggregation.
"""

from typing import Dict, List, Iterable

# voter id -> ordered target ids
VoteSet = Dict[str, List[str]]


def tally_votes(votes: VoteSet, eligible_targets: Iterable[str]) -> Dict[str, int]:
    """
    Count votes per eligible target.

    Every eligible target appears in the result, zero-vote targets included,
    in the order the targets were given. Votes naming an ineligible target
    are dropped, and a voter naming the same target twice counts once.
    """
    counts = {target: 0 for target in eligible_targets}
    for targets in votes.values():
        for target in set(targets):
            if target in counts:
                counts[target] += 1
    return counts


def voters_by_target(votes: VoteSet, eligible_targets: Iterable[str]) -> Dict[str, List[str]]:
    """Who voted for whom, for the vote breakdown display."""
    breakdown: Dict[str, List[str]] = {target: [] for target in eligible_targets}
    for voter, targets in votes.items():
        for target in dict.fromkeys(targets):
            if target in breakdown:
                breakdown[target].append(voter)
    return breakdown


def merge_tallies(*tallies: Dict[str, int]) -> Dict[str, int]:
    """Sum several tallies key by key, keeping first-seen key order."""
    total: Dict[str, int] = {}
    for tally in tallies:
        for target, count in tally.items():
            total[target] = total.get(target, 0) + count
    return total
