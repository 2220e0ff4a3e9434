"""
Game configuration and constants.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Union


@dataclass
class GameConfig:
    """Configuration for game parameters."""

    # Lobby settings
    impostor_count: Union[int, str] = 1  # Integer or "randomize"
    jester_enabled: bool = False
    randomize_mode: bool = False
    game_mode: str = "questions"  # Options: "questions" or "words"

    # Population gates
    min_players: int = 3  # Needed to start and to edit the impostor count
    special_role_min_players: int = 5  # Needed for the jester and randomize mode

    # Judge announcements
    use_announcements: bool = True

    # Simulation settings (main.py)
    bot_count: int = 6
    bot_personality: str = "random"  # Used for bots without an entry in bot_personalities
    bot_personalities: Optional[Dict[int, str]] = field(default=None)  # {seat_number: "personality"}
    max_rounds: int = 10  # Randomize games are finished by the host after this many rounds
    random_seed: Optional[int] = None  # Random seed for reproducible role assignment and bot votes
    runs_dir: str = "runs"


# Default configuration instance
default_config = GameConfig()
