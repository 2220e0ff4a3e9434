"""
Core game engine components: roles, vote tallying, elimination, tie-breaks and win conditions.
"""

from .roles import (
    Role, RoleAssignment, RANDOMIZE_IMPOSTORS, MIN_PLAYERS, JESTER_MIN_PLAYERS,
    assign_roles, clamp_impostor_count, max_impostor_count, random_impostor_count,
    resolve_impostor_count, get_role_distribution,
)
from .player import Player, Personality
from .elimination import EliminationState
from .tally import VoteSet, tally_votes, voters_by_target
from .resolver import EliminationOutcome, RankCutoffResolver, SingleEliminationResolver
from .tie_break import TieState, TieStepResult, TieBreakEngine
from .turns import TurnOrder, build_turn_order, select_starting_player
from .win_conditions import WinnerType, WinnerResult, WinConditionEvaluator
from .variants import (
    GameVariant, RoundConfig, VariantRules, WordsRules, RandomizeRules,
    get_variant_rules, variant_for,
)
from .game_engine import GameState, GamePhase
from .judge import Judge

__all__ = [
    'Role',
    'RoleAssignment',
    'RANDOMIZE_IMPOSTORS',
    'MIN_PLAYERS',
    'JESTER_MIN_PLAYERS',
    'assign_roles',
    'clamp_impostor_count',
    'max_impostor_count',
    'random_impostor_count',
    'resolve_impostor_count',
    'get_role_distribution',
    'Player',
    'Personality',
    'EliminationState',
    'VoteSet',
    'tally_votes',
    'voters_by_target',
    'EliminationOutcome',
    'RankCutoffResolver',
    'SingleEliminationResolver',
    'TieState',
    'TieStepResult',
    'TieBreakEngine',
    'TurnOrder',
    'build_turn_order',
    'select_starting_player',
    'WinnerType',
    'WinnerResult',
    'WinConditionEvaluator',
    'GameVariant',
    'RoundConfig',
    'VariantRules',
    'WordsRules',
    'RandomizeRules',
    'get_variant_rules',
    'variant_for',
    'GameState',
    'GamePhase',
    'Judge',
]
