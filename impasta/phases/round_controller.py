"""
Round controller: the game's state machine and its inbound operations.
"""

import random
from contextlib import contextmanager, ExitStack
from threading import Lock
from typing import Dict, Iterator, List, Optional, Sequence, Union, Any, TYPE_CHECKING

from ..core import (
    GameState, GamePhase, GameVariant, Judge, Role, RoundConfig, TieState, Personality, VariantRules,
    WinnerResult, WinConditionEvaluator,
    assign_roles, build_turn_order, get_variant_rules, select_starting_player, variant_for,
)
from ..core.judge import VOTING_PHASES
from ..agents import BaseAgent
from ..config.game_config import GameConfig, default_config
from .lobby import LobbyHandler, SettingResult
from .voting import VotingHandler, VotingResult

if TYPE_CHECKING:
    from ..web.event_emitter import EventEmitter


IN_GAME_PHASES = (GamePhase.DISCUSSION, GamePhase.VOTING, GamePhase.TIE_BREAK, GamePhase.VOTE_RESULTS)


class RoundController:
    """
    Drives one game room through
    LOBBY -> ROLE_ASSIGNMENT -> DISCUSSION -> VOTING -> (TIE_BREAK)* -> VOTE_RESULTS -> DISCUSSION | RESULTS.

    Every public operation runs under a single lock, so one controller is the
    only writer of its GameState. Event listeners are called once the lock
    is released and may read the state or call back into the controller.
    Operations called in the wrong phase return False (or a failed
    SettingResult) and change nothing.
    """

    def __init__(self, config: GameConfig = default_config, event_emitter: Optional['EventEmitter'] = None,
                 rng: Optional[random.Random] = None):
        self.config = config
        self.event_emitter = event_emitter
        self.rng = rng or random.Random(config.random_seed)

        # Jester, randomize and the impostor count go through the lobby gates in apply_config
        round_config = RoundConfig(variant=variant_for(False, config.game_mode))
        self.game_state = GameState(round_config=round_config, event_emitter=event_emitter)
        self.judge = Judge(self.game_state, config, event_emitter)
        self.lobby = LobbyHandler(self.game_state, self.judge, config)
        self.voting = VotingHandler(self.game_state, self.judge, event_emitter)
        self.evaluator: Optional[WinConditionEvaluator] = None

        self._lock = Lock()

    @contextmanager
    def _locked(self) -> Iterator[None]:
        """Run one operation under the lock; listeners hear its events after release."""
        with ExitStack() as stack:
            if self.event_emitter:
                stack.enter_context(self.event_emitter.deferred())
            with self._lock:
                yield

    @property
    def phase(self) -> GamePhase:
        return self.game_state.phase

    @property
    def rules(self) -> VariantRules:
        return self.judge.rules

    # Lobby

    def add_player(self, player_id: str, display_name: str, is_host: bool = False, is_bot: bool = False,
                   personality: Optional[Personality] = None, spectator: bool = False) -> SettingResult:
        with self._locked():
            return self.lobby.add_player(player_id, display_name, is_host, is_bot, personality, spectator)

    def remove_player(self, player_id: str) -> SettingResult:
        with self._locked():
            return self.lobby.remove_player(player_id)

    def set_impostor_count(self, count: Union[int, str]) -> SettingResult:
        with self._locked():
            return self.lobby.set_impostor_count(count)

    def toggle_jester(self, enabled: bool) -> SettingResult:
        with self._locked():
            return self.lobby.toggle_jester(enabled)

    def toggle_randomize_mode(self, enabled: bool) -> SettingResult:
        with self._locked():
            return self.lobby.toggle_randomize_mode(enabled)

    def set_game_mode(self, game_mode: str) -> SettingResult:
        with self._locked():
            return self.lobby.set_game_mode(game_mode)

    def apply_config(self) -> List[SettingResult]:
        """
        Apply the configured lobby settings as if the host had chosen them.

        Call once the players are seated. Settings the room is too small for
        are rejected or clamped by the same gates a host meets.

        Returns:
            One SettingResult per setting applied
        """
        config = self.config
        with self._locked():
            results = []
            if config.randomize_mode:
                results.append(self.lobby.toggle_randomize_mode(True))
            elif config.jester_enabled:
                results.append(self.lobby.toggle_jester(True))

            randomized = self.game_state.round_config.variant == GameVariant.RANDOMIZE
            if not randomized and config.impostor_count != 1:
                results.append(self.lobby.set_impostor_count(config.impostor_count))
            return results

    # Game flow

    def start_game(self) -> bool:
        """Assign roles and open the first discussion (host signal)."""
        with self._locked():
            state = self.game_state
            if state.phase != GamePhase.LOBBY:
                return False
            playing = state.get_playing_players()
            if len(playing) < self.config.min_players:
                self.judge.announce(f"Need at least {self.config.min_players} players to start")
                return False

            # Variant is fixed for the whole game from here on
            self.judge.rules = get_variant_rules(state.round_config.variant)
            state.set_phase(GamePhase.ROLE_ASSIGNMENT)

            round_config = state.round_config
            assignment = assign_roles(
                state.players,
                requested_impostors=round_config.impostor_count,
                jester_enabled=round_config.jester_enabled,
                allow_jester=self.rules.allows_jester,
                rng=self.rng,
            )
            state.apply_assignment(assignment)
            self.evaluator = WinConditionEvaluator(assignment.roles)

            if self.event_emitter:
                self.event_emitter.emit_game_start(
                    [p.player_id for p in playing],
                    round_config.variant.value,
                    assignment.impostor_count,
                    assignment.jester_id is not None,
                )
                self.event_emitter.emit_roles_assigned(
                    {pid: role.value for pid, role in assignment.roles.items()},
                    list(assignment.jester_clue_players),
                )

            impostors = assignment.impostor_count
            self.judge.announce(
                f"The game begins with {len(playing)} players and "
                f"{impostors} impostor{'s' if impostors != 1 else ''}."
            )
            if assignment.jester_clue_players:
                self.judge.announce("Some of you know there is a jester among you.")

            if self.rules.takes_turns:
                starting = select_starting_player(state.players, self.rng)
                if starting is not None:
                    state.turns = build_turn_order(state.players, starting)

            self._begin_discussion()
            return True

    def advance_turn(self) -> bool:
        """Pass the speaking turn to the next player (words game discussion)."""
        with self._locked():
            state = self.game_state
            if state.phase != GamePhase.DISCUSSION or not state.turns.is_set:
                return False
            state.turns = state.turns.advance()
            self._announce_turn()
            return True

    def start_voting(self) -> bool:
        """Close the discussion and open the vote (host signal)."""
        with self._locked():
            state = self.game_state
            if state.phase != GamePhase.DISCUSSION:
                return False
            if self.rules.host_driven and len(state.get_active_players()) < self.config.min_players:
                self.judge.announce("Too few players left to vote. The host can only finish the game.")
                return False

            state.clear_votes()
            state.set_phase(GamePhase.VOTING)
            needed = self.judge.votes_required()
            self.judge.announce(f"Voting is open. Vote for {needed} player{'s' if needed != 1 else ''}.")
            return True

    def submit_vote(self, player_id: str, target_ids: Sequence[str]) -> bool:
        """
        Record a player's vote. The (sub)round closes once every eligible voter is in.

        Returns:
            True if the vote was accepted
        """
        with self._locked():
            if not self.voting.record_vote(player_id, target_ids):
                return False
            if self.judge.all_votes_in():
                self._close_voting()
            return True

    def collect_bot_votes(self, agents: Dict[str, BaseAgent]) -> int:
        """Let every bot that still owes a vote submit one, then check the barrier."""
        with self._locked():
            if self.game_state.phase not in VOTING_PHASES:
                return 0
            recorded = self.voting.collect_votes(agents)
            if self.judge.all_votes_in():
                self._close_voting()
            return recorded

    def force_submit(self) -> bool:
        """Close the current (sub)round with whatever votes are in (timer expiry)."""
        with self._locked():
            if self.game_state.phase not in VOTING_PHASES:
                return False
            missing = self.judge.get_missing_voters()
            if missing:
                self.judge.announce(f"Time is up. No vote from: {missing}")
            self._close_voting()
            return True

    def host_continue_game(self) -> bool:
        """Move on from the vote results to the next discussion (randomize only)."""
        with self._locked():
            state = self.game_state
            if state.phase != GamePhase.VOTE_RESULTS or not self.rules.host_driven:
                return False
            if len(state.get_active_players()) < self.config.min_players:
                self.judge.announce("Too few players left to continue. The host can only finish the game.")
                return False
            self._begin_discussion()
            return True

    def host_finish_game(self) -> bool:
        """End an open-ended game and run the final team check (randomize only)."""
        with self._locked():
            state = self.game_state
            if state.phase not in IN_GAME_PHASES or not self.rules.host_driven:
                return False
            state.tie = TieState()
            state.clear_votes()
            self._finish(self.evaluator.evaluate_host_finish(state.players, state.elimination))
            return True

    def abandon_tie_break(self) -> bool:
        """
        Give up on the running tie-break.

        The sub-round's votes and contenders are discarded. Count-based games
        then end: the jester still wins if already voted out, otherwise the
        game is a tie. Randomize games return to the vote results for the host.
        """
        with self._locked():
            state = self.game_state
            if state.phase != GamePhase.TIE_BREAK:
                return False
            state.tie = TieState()
            state.clear_votes()
            self.judge.announce("The tie-break was abandoned.")
            state.set_phase(GamePhase.VOTE_RESULTS)

            if self.rules.host_driven:
                return True

            result = None
            if state.round_config.jester_enabled:
                result = self.evaluator.check_jester(state.players, state.elimination.this_round)
            self._finish(result or self.evaluator.unresolved_tie())
            return True

    def return_to_lobby(self) -> bool:
        """Play again: drop the game, keep players and settings."""
        with self._locked():
            state = self.game_state
            if state.phase == GamePhase.LOBBY:
                return False

            state.reset_for_lobby()
            for player in state.players:
                player.role = Role.SPECTATOR if player.player_id in self.lobby.spectator_ids else Role.INNOCENT
                player.is_eliminated = False
            self.evaluator = None
            self.judge.rules = get_variant_rules(state.round_config.variant)
            state.set_phase(GamePhase.LOBBY)
            return True

    def get_state(self) -> Dict[str, Any]:
        """Snapshot of the public game state."""
        with self._locked():
            summary = self.game_state.get_game_summary()
            summary["votes"] = {voter: list(targets) for voter, targets in self.game_state.votes.items()}
            summary["original_votes"] = dict(self.game_state.original_votes)
            summary["subround_history"] = [dict(votes) for votes in self.game_state.tie.subround_history]
            return summary

    # Internal transitions, called with the lock held

    def _begin_discussion(self) -> None:
        self.game_state.start_round()
        self.game_state.set_phase(GamePhase.DISCUSSION)
        self.judge.announce(f"Round {self.game_state.round_number}. Discuss!")
        if self.game_state.turns.is_set:
            self.game_state.turns = self.game_state.turns.reset()
            self._announce_turn()

    def _announce_turn(self) -> None:
        state = self.game_state
        player = state.get_player(state.turns.current_player)
        self.judge.announce(f"{player.display_name}, describe your word.")
        if self.event_emitter:
            self.event_emitter.emit_turn_change(player.player_id, list(state.turns.order), state.round_number)

    def _close_voting(self) -> None:
        result: VotingResult = self.voting.close()
        if result.stalled:
            return
        if result.tie_open:
            self.game_state.set_phase(GamePhase.TIE_BREAK)
            return

        self.game_state.set_phase(GamePhase.VOTE_RESULTS)
        self._after_round()

    def _after_round(self) -> None:
        state = self.game_state
        round_config = state.round_config
        result = self.evaluator.evaluate_round(
            state.players,
            state.elimination,
            state.elimination.this_round,
            jester_enabled=round_config.jester_enabled and self.rules.allows_jester,
            team_rules=self.rules.team_rules,
        )
        if result.is_game_over:
            self._finish(result)
            return

        if self.rules.host_driven:
            self.judge.announce("Waiting for the host to continue or finish the game.")
            return
        self._begin_discussion()

    def _finish(self, result: WinnerResult) -> None:
        state = self.game_state
        state.end_game(result)
        if self.event_emitter:
            self.event_emitter.emit_winner_determined(
                result.winner_type.value,
                result.winner_ids,
                result.reason,
                state.round_number,
            )

        if result.winners:
            names = ", ".join(p.display_name for p in result.winners)
            self.judge.announce(f"Game over: {result.winner_type.value} win ({names}).")
        else:
            self.judge.announce(f"Game over: {result.winner_type.value}.")
        state.set_phase(GamePhase.RESULTS)
