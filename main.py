"""
Bot-only Impasta game simulation.
"""

import argparse
import os
import random
from typing import Dict, Optional, Any

from dotenv import load_dotenv

from impasta.core import GamePhase, Personality, Role
from impasta.core.judge import VOTING_PHASES
from impasta.agents import BaseAgent, BotAgent
from impasta.phases import RoundController
from impasta.config.game_config import GameConfig
from impasta.config.config_loader import load_config
from impasta.web import EventEmitter, RunRecorder


class ImpastaGame:
    """Runs one game with every seat taken by a bot; the first seat hosts."""

    def __init__(self, config: Optional[GameConfig] = None, event_emitter: Optional[EventEmitter] = None,
                 run_name: Optional[str] = None):
        self.config = config or GameConfig()

        # Create run recorder and event emitter
        if event_emitter is None:
            run_recorder = RunRecorder(runs_dir=self.config.runs_dir)
            run_name = run_recorder.create_run(run_name)
            self.event_emitter = EventEmitter(run_recorder)
            self.run_recorder: Optional[RunRecorder] = run_recorder
            print(f"Recording game to: {self.config.runs_dir}/{run_name}/")
        else:
            self.event_emitter = event_emitter
            self.run_recorder = event_emitter.run_recorder

        # Generate seed if not provided
        if self.config.random_seed is None:
            self.config.random_seed = random.randint(0, 2**31 - 1)

        self.controller = RoundController(self.config, event_emitter=self.event_emitter)
        self.agents: Dict[str, BaseAgent] = {}

        self._seat_players()

    def _seat_players(self) -> None:
        """Add the bots to the lobby and apply the configured settings."""
        personalities = self.config.bot_personalities or {}
        for seat in range(1, self.config.bot_count + 1):
            personality = Personality(personalities.get(seat, self.config.bot_personality))
            result = self.controller.add_player(f"p{seat}", f"Bot {seat}", is_bot=True, personality=personality)
            if not result.success:
                raise ValueError(result.message)

        for player in self.controller.game_state.players:
            self.agents[player.player_id] = BotAgent(player, self.config)

        # Lobby gates clamp or reject settings the table is too small for
        for result in self.controller.apply_config():
            self._report(result)

    def _report(self, result) -> None:
        if not result.success or "clamped" in result.message:
            print(f"Lobby: {result.message}")

    def run_game(self) -> str:
        """
        Run the game until it reaches the results.

        Returns:
            The winner type ("innocent", "impostor", "jester", "tie" or "none")
        """
        controller = self.controller
        state = controller.game_state

        if not controller.start_game():
            print("Could not start the game")
            return "none"

        if self.run_recorder:
            self.run_recorder.save_metadata({
                "players": [p.player_id for p in state.players],
                "variant": state.round_config.variant.value,
                "impostor_count": state.impostor_count,
                "jester_enabled": state.round_config.jester_enabled,
                "bot_personalities": {
                    p.player_id: p.personality.value for p in state.players if p.personality
                },
                "config": {
                    "game_mode": self.config.game_mode,
                    "max_rounds": self.config.max_rounds,
                    "random_seed": self.config.random_seed,
                },
            })

        print("=" * 60)
        print("IMPASTA - Starting")
        print("=" * 60)
        print(f"Players: {[p.player_id for p in state.players]}")
        print(f"Variant: {state.round_config.variant.value}")
        print(f"Impostors: {state.assignment.players_with(Role.IMPOSTOR)}")
        print("=" * 60)

        # Every round takes at most one discussion, one vote and a bounded tie-break
        max_steps = (self.config.max_rounds + 1) * (len(state.players) + 4)
        for _ in range(max_steps):
            phase = state.phase
            if phase == GamePhase.RESULTS:
                break

            if phase == GamePhase.DISCUSSION:
                print(f"\n--- ROUND {state.round_number} ---")
                for _ in range(len(state.turns.order) - 1):
                    controller.advance_turn()
                if not controller.start_voting():
                    controller.host_finish_game()
                continue

            if phase in VOTING_PHASES:
                recorded = controller.collect_bot_votes(self.agents)
                if recorded == 0 and state.phase in VOTING_PHASES:
                    # Stalled vote: nobody can change it
                    if state.phase == GamePhase.TIE_BREAK:
                        controller.abandon_tie_break()
                    elif controller.rules.host_driven:
                        controller.host_finish_game()
                    else:
                        break
                continue

            if phase == GamePhase.VOTE_RESULTS:
                if self._host_should_finish() or not controller.host_continue_game():
                    controller.host_finish_game()
                continue

            break

        return self._print_result()

    def _host_should_finish(self) -> bool:
        state = self.controller.game_state
        return (state.round_number >= self.config.max_rounds
                or len(state.get_active_players()) < self.config.min_players)

    def _print_result(self) -> str:
        winner = self.controller.game_state.winner
        print("\n" + "=" * 60)
        if winner is None:
            print("Game ended without a result")
            print("=" * 60)
            return "none"

        print(f"GAME OVER - {winner.winner_type.value.upper()} ({winner.reason})")
        print("=" * 60)
        self._print_game_summary()
        return winner.winner_type.value

    def _print_game_summary(self) -> None:
        """Print a formatted game summary."""
        state = self.controller.game_state

        print("\nGAME SUMMARY")
        print("-" * 60)
        if state.winner and state.winner.winners:
            print(f"Winners: {', '.join(p.display_name for p in state.winner.winners)}")
        else:
            print("Winners: none")
        print(f"Rounds played: {state.round_number}")
        print(f"Random Seed: {self.config.random_seed}")

        print("\nRoles:")
        for player in state.players:
            role = state.assigned_role(player.player_id)
            status = "eliminated" if player.player_id in state.elimination else "active"
            print(f"  - {player.display_name}: {role.value if role else 'spectator'} ({status})")

        batches = [a["data"] for a in state.action_log if a["type"] == "elimination_batch"]
        if batches:
            print("\nEliminations:")
            for batch in batches:
                print(f"  - Round {batch['round_number']}: {batch['players']} ({batch['reason']})")

    def get_game_summary(self) -> Dict[str, Any]:
        """Get final game summary as dictionary."""
        state = self.controller.game_state
        return {
            "winner": state.winner.winner_type.value if state.winner else None,
            "reason": state.winner.reason if state.winner else None,
            "rounds": state.round_number,
            "final_state": state.get_game_summary(),
            "action_log": state.action_log[-10:],  # Last 10 actions
        }


def main():
    """Entry point for running a game."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Run a bot-only Impasta game",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                 # Use default config
  python main.py --config configs/standard.yaml  # Two impostors, jester on
  python main.py --config configs/randomize.yaml --seed 7
        """
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=os.getenv("IMPASTA_CONFIG"),
        help="Path to YAML configuration file (default: $IMPASTA_CONFIG, else built-in defaults)"
    )
    parser.add_argument(
        "--seed",
        "-s",
        type=int,
        default=None,
        help="Random seed for reproducible games (if not provided, one is generated and shown)"
    )
    parser.add_argument(
        "--run-name",
        "-r",
        type=str,
        default=None,
        help="Custom name for this run (default: auto-generated timestamp)"
    )

    args = parser.parse_args()

    config = load_config(args.config)
    if args.seed is not None:
        config.random_seed = args.seed
    runs_dir = os.getenv("IMPASTA_RUNS_DIR")
    if runs_dir:
        config.runs_dir = runs_dir

    print("Impasta Game Simulation")
    print("=" * 60)
    if args.config:
        print(f"Using config: {args.config}")
    print("=" * 60)

    game = ImpastaGame(config=config, run_name=args.run_name)
    game.run_game()

    if game.run_recorder:
        run_path = game.run_recorder.get_run_path()
        if run_path:
            print(f"\nGame events saved to: {run_path}")


if __name__ == "__main__":
    main()
