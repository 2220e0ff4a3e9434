"""
Pytest fixtures for Impasta tests.
"""

import pytest
from typing import Dict, List, Tuple, Any, Callable, Optional
from unittest.mock import patch

from impasta.core import (
    GameState, Judge, Player, Role, RoleAssignment, RoundConfig, GameVariant,
)
from impasta.config.game_config import GameConfig
from impasta.phases import RoundController
from impasta.web import EventEmitter


def make_players(count: int) -> List[Player]:
    """Players p1..pN seated in order; p1 hosts."""
    return [
        Player(player_id=f"p{i}", display_name=f"Player {i}", is_host=(i == 1))
        for i in range(1, count + 1)
    ]


@pytest.fixture
def game_config():
    """Test game configuration."""
    return GameConfig(
        use_announcements=False,  # Disable for cleaner test output
        random_seed=42,
    )


@pytest.fixture
def game_state():
    """Five seated players in the lobby."""
    return GameState(players=make_players(5))


@pytest.fixture
def judge(game_state, game_config):
    """Create a judge instance."""
    return Judge(game_state, game_config)


@pytest.fixture
def recorded_events():
    """Emitter plus the list of (event_type, data) it delivered."""
    events: List[Tuple[str, Dict[str, Any]]] = []
    emitter = EventEmitter()
    emitter.register_listener(lambda event_type, data: events.append((event_type, data)))
    return emitter, events


@pytest.fixture
def make_controller(game_config) -> Callable[..., RoundController]:
    """
    Build a controller with seated players and, optionally, fixed roles.

    `roles` maps player ids to roles; unlisted players are innocent. When it
    is given, role assignment is patched so the game starts with exactly
    those roles.
    """
    patches = []

    def factory(player_count: int = 5, roles: Optional[Dict[str, Role]] = None,
                variant: GameVariant = GameVariant.STANDARD, impostor_count: int = 1,
                jester_enabled: bool = False, event_emitter: Optional[EventEmitter] = None,
                start: bool = True) -> RoundController:
        controller = RoundController(game_config, event_emitter=event_emitter)
        for player in make_players(player_count):
            controller.add_player(player.player_id, player.display_name)
        controller.game_state.round_config = RoundConfig(
            impostor_count=impostor_count, jester_enabled=jester_enabled, variant=variant,
        )

        if roles is not None:
            full_roles = {f"p{i}": roles.get(f"p{i}", Role.INNOCENT) for i in range(1, player_count + 1)}
            impostors = sum(1 for role in full_roles.values() if role == Role.IMPOSTOR)
            assignment = RoleAssignment(roles=full_roles, impostor_count=impostors)
            patcher = patch("impasta.phases.round_controller.assign_roles", return_value=assignment)
            patcher.start()
            patches.append(patcher)

        if start:
            assert controller.start_game()
        return controller

    yield factory

    for patcher in patches:
        patcher.stop()


def vote_all(controller: RoundController, votes: Dict[str, List[str]]) -> None:
    """Submit a whole VoteSet through the controller."""
    for voter, targets in votes.items():
        assert controller.submit_vote(voter, targets), f"vote from {voter} rejected"
