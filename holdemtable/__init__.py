"""
Holdem Table - Single-table No-Limit Texas Hold'em

One human against up to eight bots:
- Pure Python game core (cards, hand ranking, side pots, betting rounds)
- Heuristic bot strategy behind a pluggable agent interface
- Observer and scheduler seams for any front end

Usage:
    from holdemtable import PokerGame, TableConfig
    from holdemtable.agents import HeuristicAgent
"""

__version__ = "0.2.0"

# core first: holdemtable.config imports holdemtable.core.rules
from holdemtable.core import Card, Deck, Player, PokerGame, ActionType, GamePhase
from holdemtable.core.hand import HandCategory, best_of_7
from holdemtable.config import TableConfig, ConfigurationError

__all__ = [
    "Card",
    "Deck",
    "Player",
    "PokerGame",
    "ActionType",
    "GamePhase",
    "HandCategory",
    "best_of_7",
    "TableConfig",
    "ConfigurationError",
    "__version__",
]
