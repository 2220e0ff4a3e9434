"""
Agent implementations for Impasta voters.
"""

from .base_agent import BaseAgent, AgentContext
from .bot_agent import BotAgent

__all__ = ['BaseAgent', 'AgentContext', 'BotAgent']
