"""
Game phase handlers: lobby settings, voting and the round controller.
"""

from .lobby import LobbyHandler, SettingResult
from .voting import VotingHandler, VotingResult
from .round_controller import RoundController

__all__ = ['LobbyHandler', 'SettingResult', 'VotingHandler', 'VotingResult', 'RoundController']
