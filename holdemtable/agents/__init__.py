"""
Holdem Table Agents - Bot Strategies

Every bot seat carries a BaseAgent. The engine hands it a TableView and
validates whatever it proposes.
"""

from holdemtable.agents.base import BaseAgent, BotDecision
from holdemtable.agents.heuristic import HeuristicAgent
from holdemtable.agents.simple import CallAgent, RandomAgent

__all__ = ["BaseAgent", "BotDecision", "HeuristicAgent", "CallAgent", "RandomAgent"]
