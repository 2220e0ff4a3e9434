"""
Tests for lobby settings and their population gates.
"""

import pytest

from impasta.core import GamePhase, GameVariant, Role, RANDOMIZE_IMPOSTORS
from impasta.phases import RoundController


@pytest.fixture
def lobby_controller(game_config):
    def factory(player_count: int) -> RoundController:
        controller = RoundController(game_config)
        for i in range(1, player_count + 1):
            assert controller.add_player(f"p{i}", f"Player {i}").success
        return controller
    return factory


def test_first_player_hosts(lobby_controller):
    controller = lobby_controller(3)
    assert controller.game_state.get_host().player_id == "p1"
    assert not controller.add_player("p9", "Second host", is_host=True).success


def test_duplicate_player_rejected(lobby_controller):
    controller = lobby_controller(3)
    result = controller.add_player("p2", "Again")
    assert not result.success
    assert len(controller.game_state.players) == 3


def test_impostor_count_needs_three_players(lobby_controller):
    controller = lobby_controller(2)
    assert not controller.set_impostor_count(1).success


def test_impostor_count_is_clamped(lobby_controller):
    controller = lobby_controller(6)
    result = controller.set_impostor_count(4)

    assert result.success
    assert controller.game_state.round_config.impostor_count == 2
    assert "clamped" in result.message


def test_jester_needs_five_players(lobby_controller):
    controller = lobby_controller(4)
    assert not controller.toggle_jester(True).success

    controller.add_player("p5", "Player 5")
    assert controller.toggle_jester(True).success
    assert controller.game_state.round_config.jester_enabled


def test_jester_and_randomize_exclusive(lobby_controller):
    controller = lobby_controller(6)
    assert controller.toggle_jester(True).success
    assert not controller.toggle_randomize_mode(True).success

    assert controller.toggle_jester(False).success
    assert controller.toggle_randomize_mode(True).success
    assert not controller.toggle_jester(True).success


def test_randomize_mode_switches_variant(lobby_controller):
    controller = lobby_controller(5)
    assert controller.toggle_randomize_mode(True).success

    config = controller.game_state.round_config
    assert config.variant == GameVariant.RANDOMIZE
    assert config.impostor_count == RANDOMIZE_IMPOSTORS
    assert controller.rules.host_driven
    assert not controller.set_impostor_count(2).success

    assert controller.toggle_randomize_mode(False).success
    assert config.variant == GameVariant.STANDARD
    assert config.impostor_count == 1


def test_words_mode_has_no_jester(lobby_controller):
    controller = lobby_controller(6)
    controller.toggle_jester(True)
    assert controller.set_game_mode("words").success

    config = controller.game_state.round_config
    assert config.variant == GameVariant.WORDS
    assert not config.jester_enabled
    assert not controller.toggle_jester(True).success


def test_unknown_game_mode_rejected(lobby_controller):
    controller = lobby_controller(3)
    assert not controller.set_game_mode("pictures").success
    assert controller.game_state.round_config.variant == GameVariant.STANDARD


def test_removal_reclamps_settings(lobby_controller):
    controller = lobby_controller(7)
    controller.set_impostor_count(3)
    controller.toggle_jester(True)

    assert controller.remove_player("p7").success
    config = controller.game_state.round_config
    # Three impostors no longer fit six players
    assert config.impostor_count == 1
    assert not config.jester_enabled


def test_removal_below_five_switches_off_randomize(lobby_controller):
    controller = lobby_controller(5)
    controller.toggle_randomize_mode(True)

    controller.remove_player("p5")

    config = controller.game_state.round_config
    assert config.variant == GameVariant.STANDARD
    assert config.impostor_count == 1


def test_removing_host_passes_host_on(lobby_controller):
    controller = lobby_controller(4)
    controller.remove_player("p1")
    assert controller.game_state.get_host().player_id == "p2"


def test_spectators_do_not_count(lobby_controller):
    controller = lobby_controller(4)
    controller.add_player("s1", "Watcher", spectator=True)
    assert not controller.toggle_jester(True).success
    assert controller.game_state.get_player("s1").role == Role.SPECTATOR


def test_settings_locked_outside_lobby(lobby_controller):
    controller = lobby_controller(5)
    assert controller.start_game()
    assert controller.phase == GamePhase.DISCUSSION

    assert not controller.add_player("p6", "Late").success
    assert not controller.set_impostor_count(2).success
    assert not controller.toggle_jester(True).success


def test_host_passes_over_spectators(lobby_controller):
    controller = lobby_controller(0)
    controller.add_player("h", "Host")
    controller.add_player("s1", "Watcher", spectator=True)
    controller.add_player("p2", "Player 2")

    controller.remove_player("h")

    assert controller.game_state.get_host().player_id == "p2"
    assert not controller.game_state.get_player("s1").is_host


def test_impostor_count_text_is_not_reported_as_clamped(lobby_controller):
    controller = lobby_controller(6)

    result = controller.set_impostor_count("2")

    assert result.success
    assert result.message == "Impostor count set to 2"
    assert controller.game_state.round_config.impostor_count == 2
    assert not controller.set_impostor_count("many").success


def test_configured_settings_pass_the_gates(game_config):
    game_config.randomize_mode = True
    controller = RoundController(game_config)
    for i in range(1, 4):
        controller.add_player(f"p{i}", f"Player {i}")

    results = controller.apply_config()

    assert [r.success for r in results] == [False]
    assert controller.game_state.round_config.variant == GameVariant.STANDARD
    assert not controller.rules.host_driven


def test_configured_settings_applied_when_room_is_big_enough(game_config):
    game_config.jester_enabled = True
    game_config.impostor_count = 2
    controller = RoundController(game_config)
    for i in range(1, 7):
        controller.add_player(f"p{i}", f"Player {i}")

    results = controller.apply_config()

    assert all(r.success for r in results)
    config = controller.game_state.round_config
    assert config.jester_enabled
    assert config.impostor_count == 2
