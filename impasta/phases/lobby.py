"""
Lobby settings with population gates.
"""

from dataclasses import dataclass
from typing import Optional, Set, Union

from ..core import (
    GameState, GamePhase, Judge, Player, Personality, Role,
    GameVariant, RANDOMIZE_IMPOSTORS, get_variant_rules, max_impostor_count, variant_for,
)
from ..config.game_config import GameConfig, default_config


@dataclass
class SettingResult:
    """Result of a lobby operation."""
    success: bool
    message: str = ""


class LobbyHandler:
    """Handles players joining/leaving and the host's game settings."""

    def __init__(self, game_state: GameState, judge: Judge, config: GameConfig = default_config):
        self.game_state = game_state
        self.judge = judge
        self.config = config
        self.game_mode = config.game_mode
        self.spectator_ids: Set[str] = set()  # Joined as spectators, never dealt a role

    @property
    def playing_count(self) -> int:
        return len(self.game_state.get_playing_players())

    def _in_lobby(self) -> Optional[SettingResult]:
        if self.game_state.phase != GamePhase.LOBBY:
            return SettingResult(False, "Settings can only change in the lobby")
        return None

    def add_player(self, player_id: str, display_name: str, is_host: bool = False, is_bot: bool = False,
                   personality: Optional[Personality] = None, spectator: bool = False) -> SettingResult:
        """Seat a new player. The first player to join hosts unless someone already does."""
        rejected = self._in_lobby()
        if rejected:
            return rejected
        if self.game_state.get_player(player_id):
            return SettingResult(False, f"Player {player_id} already joined")

        if self.game_state.get_host() is None:
            is_host = True
        elif is_host:
            return SettingResult(False, "The room already has a host")

        player = Player(
            player_id=player_id,
            display_name=display_name,
            role=Role.SPECTATOR if spectator else Role.INNOCENT,
            is_host=is_host,
            is_bot=is_bot,
            personality=personality or (Personality.RANDOM if is_bot else None),
        )
        self.game_state.players.append(player)
        if spectator:
            self.spectator_ids.add(player_id)
        return SettingResult(True, f"{display_name} joined")

    def remove_player(self, player_id: str) -> SettingResult:
        """Remove a player and re-clamp the settings for the smaller room."""
        rejected = self._in_lobby()
        if rejected:
            return rejected
        player = self.game_state.get_player(player_id)
        if player is None:
            return SettingResult(False, f"Unknown player {player_id}")

        self.game_state.players = [p for p in self.game_state.players if p.player_id != player_id]
        self.spectator_ids.discard(player_id)
        if player.is_host:
            successor = next((p for p in self.game_state.players if not p.is_spectator), None)
            if successor is not None:
                successor.is_host = True

        self._reclamp_settings()
        return SettingResult(True, f"{player.display_name} left")

    def set_impostor_count(self, count: Union[int, str]) -> SettingResult:
        """Set the impostor count, clamped below half of the playing players."""
        rejected = self._in_lobby()
        if rejected:
            return rejected
        if self.playing_count < self.config.min_players:
            return SettingResult(False, f"Need at least {self.config.min_players} players to change impostors")

        config = self.game_state.round_config
        if count == RANDOMIZE_IMPOSTORS:
            config.impostor_count = RANDOMIZE_IMPOSTORS
            return SettingResult(True, "Impostor count will be randomized")
        if config.variant == GameVariant.RANDOMIZE:
            return SettingResult(False, "Impostor count is random in randomize mode")

        upper = max_impostor_count(self.playing_count)
        try:
            requested = int(count)
        except (TypeError, ValueError):
            return SettingResult(False, f"Invalid impostor count: {count!r}")
        clamped = max(1, min(requested, upper))
        config.impostor_count = clamped
        if clamped != requested:
            return SettingResult(True, f"Impostor count clamped to {clamped}")
        return SettingResult(True, f"Impostor count set to {clamped}")

    def toggle_jester(self, enabled: bool) -> SettingResult:
        rejected = self._in_lobby()
        if rejected:
            return rejected
        config = self.game_state.round_config
        if enabled:
            if self.playing_count < self.config.special_role_min_players:
                return SettingResult(False, f"Jester needs at least {self.config.special_role_min_players} players")
            if config.variant == GameVariant.RANDOMIZE:
                return SettingResult(False, "Jester and randomize mode cannot be combined")
            if not self.judge.rules.allows_jester:
                return SettingResult(False, f"No jester in {config.variant.value} games")
        config.jester_enabled = enabled
        return SettingResult(True, f"Jester {'on' if enabled else 'off'}")

    def toggle_randomize_mode(self, enabled: bool) -> SettingResult:
        rejected = self._in_lobby()
        if rejected:
            return rejected
        config = self.game_state.round_config
        if enabled:
            if self.playing_count < self.config.special_role_min_players:
                return SettingResult(False, f"Randomize mode needs at least {self.config.special_role_min_players} players")
            if config.jester_enabled:
                return SettingResult(False, "Jester and randomize mode cannot be combined")
            config.impostor_count = RANDOMIZE_IMPOSTORS
        elif config.impostor_count == RANDOMIZE_IMPOSTORS:
            config.impostor_count = 1
        self._set_variant(variant_for(enabled, self.game_mode))
        return SettingResult(True, f"Randomize mode {'on' if enabled else 'off'}")

    def set_game_mode(self, game_mode: str) -> SettingResult:
        """Switch between the questions and words games."""
        rejected = self._in_lobby()
        if rejected:
            return rejected
        config = self.game_state.round_config
        try:
            variant = variant_for(config.variant == GameVariant.RANDOMIZE, game_mode)
        except ValueError as e:
            return SettingResult(False, str(e))
        self.game_mode = game_mode
        self._set_variant(variant)
        if not self.judge.rules.allows_jester:
            config.jester_enabled = False
        return SettingResult(True, f"Game mode set to {game_mode}")

    def _set_variant(self, variant: GameVariant) -> None:
        self.game_state.round_config.variant = variant
        if self.judge.rules.variant != variant:
            self.judge.rules = get_variant_rules(variant)

    def _reclamp_settings(self) -> None:
        """Mirror the lobby's auto-adjust when the room shrinks."""
        config = self.game_state.round_config
        playing = self.playing_count

        if isinstance(config.impostor_count, int) and config.impostor_count > max_impostor_count(playing):
            config.impostor_count = 1
            config.jester_enabled = False
            if config.variant == GameVariant.RANDOMIZE:
                self._set_variant(variant_for(False, self.game_mode))

        if playing < self.config.special_role_min_players:
            config.jester_enabled = False
            if config.variant == GameVariant.RANDOMIZE:
                config.impostor_count = 1
                self._set_variant(variant_for(False, self.game_mode))
