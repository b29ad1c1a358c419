"""
Holdem Table Core - Pure Python Texas Hold'em Game Logic

Cards, hand ranking, pot settlement and the table state machine. Nothing
here knows about terminals, sockets or rendering.
"""

from holdemtable.core.card import Card, Deck, Rank, Suit
from holdemtable.core.player import Player, HumanSeat, BotSeat
from holdemtable.core.hand import HandCategory, RankedHand, best_of_7, compare, rank5
from holdemtable.core.pot import PotManager, PotShare
from holdemtable.core.events import EventKind, GameEvent, GameObserver, CallbackObserver
from holdemtable.core.scheduler import TurnScheduler, ManualScheduler, AsyncioScheduler
from holdemtable.core.view import TableView, PlayerView
from holdemtable.core.rules import GamePhase, ActionType, EndReason
from holdemtable.core.game import PokerGame, ActionResult, HandResult

__all__ = [
    "Card",
    "Deck",
    "Rank",
    "Suit",
    "Player",
    "HumanSeat",
    "BotSeat",
    "HandCategory",
    "RankedHand",
    "best_of_7",
    "compare",
    "rank5",
    "PotManager",
    "PotShare",
    "EventKind",
    "GameEvent",
    "GameObserver",
    "CallbackObserver",
    "TurnScheduler",
    "ManualScheduler",
    "AsyncioScheduler",
    "TableView",
    "PlayerView",
    "GamePhase",
    "ActionType",
    "EndReason",
    "PokerGame",
    "ActionResult",
    "HandResult",
]
