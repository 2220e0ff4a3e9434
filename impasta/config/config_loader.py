"""
Configuration loader for YAML-based game configurations.
"""

import yaml
from pathlib import Path
from typing import Optional

from .game_config import GameConfig


VALID_GAME_MODES = ("questions", "words")
VALID_PERSONALITIES = ("aggressive", "cautious", "random", "helpful")


def validate_config(config: GameConfig) -> GameConfig:
    """
    Check values a YAML file can get wrong.

    Raises:
        ValueError: If a setting has an unusable value
    """
    if isinstance(config.impostor_count, str) and config.impostor_count != "randomize":
        raise ValueError(f"impostor_count must be an integer or 'randomize', got '{config.impostor_count}'")
    if isinstance(config.impostor_count, int) and config.impostor_count < 1:
        raise ValueError(f"impostor_count must be at least 1, got {config.impostor_count}")
    if config.game_mode not in VALID_GAME_MODES:
        raise ValueError(f"Unknown game_mode: {config.game_mode}. Must be 'questions' or 'words'")

    personalities = [config.bot_personality] + list((config.bot_personalities or {}).values())
    for personality in personalities:
        if personality not in VALID_PERSONALITIES:
            raise ValueError(f"Unknown bot personality: {personality}")
    return config


def load_config_from_yaml(config_path: str) -> GameConfig:
    """
    Load game configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        GameConfig instance with values from YAML file

    Raises:
        FileNotFoundError: If the config file doesn't exist
        yaml.YAMLError: If the YAML file is invalid
        ValueError: If a setting has an unusable value
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_file, 'r') as f:
        config_dict = yaml.safe_load(f)

    # Create config from dict, using defaults for missing values
    config = GameConfig()
    if config_dict is None:
        return config

    for key, value in config_dict.items():
        if hasattr(config, key):
            setattr(config, key, value)
        else:
            # Warn about unknown keys but don't fail
            print(f"Warning: Unknown config key '{key}' in YAML file")

    return validate_config(config)


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load configuration from YAML file or return a default one.

    Args:
        config_path: Optional path to YAML config file. If None, returns default config.

    Returns:
        GameConfig instance
    """
    if config_path is None:
        return GameConfig()

    return load_config_from_yaml(config_path)
