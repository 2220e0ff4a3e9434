"""
Bot agent voting by personality.
"""

import random
from typing import List

from .base_agent import BaseAgent, AgentContext
from ..core import Player, Personality
from ..config.game_config import GameConfig, default_config


class BotAgent(BaseAgent):
    """
    Bot with one of the lobby personalities:
    - Aggressive / Random: uniformly shuffled eligible players
    - Cautious: like random, but never the first eligible player (usually the host)
    - Helpful: the last players in seating order
    """

    def __init__(self, player: Player, config: GameConfig = default_config):
        super().__init__(player, config)
        self.personality = player.personality or Personality.RANDOM
        # Use seed from config if provided, otherwise use None (non-deterministic)
        seed = config.random_seed
        if seed is not None:
            # Combine seed with player id so each bot differs but stays reproducible
            self.random = random.Random(f"{seed}:{player.player_id}")
        else:
            self.random = random.Random()

    def get_vote_choice(self, context: AgentContext) -> List[str]:
        candidates = list(context.eligible_targets)
        needed = context.votes_needed
        if needed <= 0:
            return []

        if self.personality == Personality.HELPFUL:
            return candidates[-needed:] if len(candidates) > needed else candidates

        if self.personality == Personality.CAUTIOUS:
            candidates = candidates[1:]

        self.random.shuffle(candidates)
        return candidates[:needed]
