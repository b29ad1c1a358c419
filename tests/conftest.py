"""
Pytest configuration and shared fixtures for Holdem Table tests.
"""

from typing import List, Sequence

import pytest
from holdemtable.config import TableConfig
from holdemtable.core.card import Card, Deck, Rank, Suit, full_deck, parse_cards
from holdemtable.core.events import GameEvent, GameObserver, EventKind
from holdemtable.core.game import PokerGame
from holdemtable.core.player import Player
from holdemtable.core.rules import ActionType
from holdemtable.core.scheduler import ManualScheduler
from holdemtable.agents.base import BaseAgent, BotDecision
from holdemtable.agents.simple import CallAgent


class StackedDeck(Deck):
    """A deck that deals the given cards first, in order, and never shuffles."""

    def __init__(self, cards: Sequence[Card]):
        self._top = list(cards)
        super().__init__(shuffle=False)

    def reset(self) -> None:
        super().reset()
        rest = [c for c in self._cards if c not in self._top]
        self._cards = self._top + rest

    def shuffle(self) -> None:
        pass


class ScriptedAgent(BaseAgent):
    """Plays the given decisions in order, then calls."""

    def __init__(self, decisions: Sequence[BotDecision] = ()):
        super().__init__(name="scripted")
        self.decisions = list(decisions)
        self.seen = []

    def decide(self, view, player_id: int) -> BotDecision:
        self.seen.append(view)
        if self.decisions:
            return self.decisions.pop(0)
        return BotDecision.call()


class RecordingObserver(GameObserver):
    """Counts change notifications and keeps every event."""

    def __init__(self):
        self.changes = 0
        self.events: List[GameEvent] = []

    def on_state_changed(self) -> None:
        self.changes += 1

    def on_event(self, event: GameEvent) -> None:
        self.events.append(event)

    def kinds(self) -> List[EventKind]:
        return [e.kind for e in self.events]


def cards(text: str) -> List[Card]:
    """Shorthand: cards("As Kh") -> [A♠, K♥]."""
    return parse_cards(text)


def rig_board(game: PokerGame, board: str) -> None:
    """Make the next streets come out as ``board`` (5 cards, burns handled)."""
    b = cards(board)
    used = {c for p in game.players for c in p.hole_cards} | set(b)
    burns = [c for c in full_deck() if c not in used][:3]
    game.deck = StackedDeck([burns[0], *b[:3], burns[1], b[3], burns[2], b[4]])


def play_out(game: PokerGame, human_action=ActionType.CALL, max_steps: int = 5000) -> int:
    """
    Drive the current hand to its end.

    The human repeats ``human_action`` whenever it is their turn; bot turns
    come off the ManualScheduler. Returns the number of steps taken.
    """
    steps = 0
    while game.is_hand_running():
        steps += 1
        assert steps <= max_steps, "hand did not finish"
        if game.is_player_turn():
            result = game.apply_player_action(human_action)
            assert result.success, result.message
        else:
            assert game.scheduler.run_next(), "no bot turn queued while the hand is running"
    return steps


def total_chips(game: PokerGame) -> int:
    """Chips on the table: stacks plus whatever is still in the pot."""
    in_pot = game.pot if game.is_hand_running() else 0
    return sum(p.chips for p in game.players) + in_pot


@pytest.fixture
def deck():
    """Create a fresh shuffled deck."""
    return Deck(shuffle=True)


@pytest.fixture
def unshuffled_deck():
    """Create a fresh unshuffled deck."""
    return Deck(shuffle=False)


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def make_game(observer):
    """
    Factory for tables with calling bots and a manual scheduler.

    Usage: game = make_game(player_count=3, starting_chips=500)
    """
    def _make(agent_factory=None, **settings) -> PokerGame:
        settings.setdefault("player_count", 3)
        settings.setdefault("bot_delay", 0)
        settings.setdefault("seed", 7)
        config = TableConfig(**settings)
        return PokerGame(
            config,
            observer=observer,
            scheduler=ManualScheduler(),
            agent_factory=agent_factory or (lambda seat, seed: CallAgent(seed=seed)),
        )
    return _make


@pytest.fixture
def heads_up_game(make_game):
    """Human in seat 0 against one calling bot, blinds 50/100, 1000 chips."""
    return make_game(player_count=2)


@pytest.fixture
def three_player_game(make_game):
    return make_game(player_count=3)


@pytest.fixture
def sample_player():
    """Create a sample player with 1000 chips."""
    return Player(player_id=0, name="Alice", chips=1000)


@pytest.fixture
def royal_flush():
    """Create a royal flush hand."""
    return [
        Card(Rank.ACE, Suit.SPADES),
        Card(Rank.KING, Suit.SPADES),
        Card(Rank.QUEEN, Suit.SPADES),
        Card(Rank.JACK, Suit.SPADES),
        Card(Rank.TEN, Suit.SPADES),
    ]


@pytest.fixture
def straight_flush():
    """Create a straight flush (9-high)."""
    return [
        Card(Rank.NINE, Suit.HEARTS),
        Card(Rank.EIGHT, Suit.HEARTS),
        Card(Rank.SEVEN, Suit.HEARTS),
        Card(Rank.SIX, Suit.HEARTS),
        Card(Rank.FIVE, Suit.HEARTS),
    ]


@pytest.fixture
def wheel_straight():
    """Create a wheel straight (A-2-3-4-5)."""
    return [
        Card(Rank.ACE, Suit.SPADES),
        Card(Rank.TWO, Suit.HEARTS),
        Card(Rank.THREE, Suit.DIAMONDS),
        Card(Rank.FOUR, Suit.CLUBS),
        Card(Rank.FIVE, Suit.SPADES),
    ]
