"""
Card and Deck classes for Texas Hold'em.

Ranks carry their poker value directly (2..14, Ace high) so the hand
evaluator and the bot heuristics can do arithmetic on them without a
lookup table.
"""

from __future__ import annotations
import random
from typing import List, Optional
from dataclasses import dataclass
from enum import IntEnum


class Suit(IntEnum):
    """Card suits."""
    CLUBS = 0     # ♣
    DIAMONDS = 1  # ♦
    HEARTS = 2    # ♥
    SPADES = 3    # ♠


class Rank(IntEnum):
    """Card ranks valued 2 (lowest) to 14 (Ace)."""
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14


SUIT_SYMBOLS = {
    Suit.CLUBS: "♣",
    Suit.DIAMONDS: "♦",
    Suit.HEARTS: "♥",
    Suit.SPADES: "♠",
}

SUIT_CHARS = {
    Suit.CLUBS: "c",
    Suit.DIAMONDS: "d",
    Suit.HEARTS: "h",
    Suit.SPADES: "s",
}

RANK_LABELS = {
    Rank.TWO: "2",
    Rank.THREE: "3",
    Rank.FOUR: "4",
    Rank.FIVE: "5",
    Rank.SIX: "6",
    Rank.SEVEN: "7",
    Rank.EIGHT: "8",
    Rank.NINE: "9",
    Rank.TEN: "10",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
    Rank.ACE: "A",
}

LABEL_TO_RANK = {v: k for k, v in RANK_LABELS.items()}
LABEL_TO_RANK["T"] = Rank.TEN
CHAR_TO_SUIT = {v: k for k, v in SUIT_CHARS.items()}
SYMBOL_TO_SUIT = {v: k for k, v in SUIT_SYMBOLS.items()}

DECK_SIZE = 52


@dataclass(frozen=True)
class Card:
    """
    An immutable playing card.

    Build one from enums, Card(Rank.ACE, Suit.SPADES), or from text with
    Card.from_string("As") / Card.from_string("10♠").
    """

    rank: Rank
    suit: Suit

    def __post_init__(self):
        object.__setattr__(self, "rank", Rank(self.rank))
        object.__setattr__(self, "suit", Suit(self.suit))

    @property
    def value(self) -> int:
        """Numeric rank value, 2..14."""
        return int(self.rank)

    @property
    def label(self) -> str:
        return RANK_LABELS[self.rank]

    @classmethod
    def from_string(cls, text: str) -> Card:
        """Parse "As", "Td", "10h" or the symbol forms "A♠", "10♦"."""
        text = text.strip()
        rank = LABEL_TO_RANK.get(text[:-1].upper())
        if len(text) < 2 or rank is None:
            raise ValueError(f"Invalid card string: {text!r}")
        suit = CHAR_TO_SUIT.get(text[-1].lower(), SYMBOL_TO_SUIT.get(text[-1]))
        if suit is None:
            raise ValueError(f"Invalid suit in card string: {text!r}")
        return cls(rank, suit)

    def __lt__(self, other: Card) -> bool:
        # Sorting orders by rank only
        return self.rank < other.rank

    def __repr__(self) -> str:
        return f"Card({self.label}{SUIT_CHARS[self.suit]})"

    def __str__(self) -> str:
        return f"{self.label}{SUIT_SYMBOLS[self.suit]}"

    @property
    def color(self) -> str:
        return "red" if self.suit in (Suit.HEARTS, Suit.DIAMONDS) else "black"

    def to_dict(self) -> dict:
        return {
            "rank": self.label,
            "suit": SUIT_SYMBOLS[self.suit],
            "text": str(self),
            "color": self.color,
        }


def full_deck() -> List[Card]:
    """All 52 cards in a fixed order."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


class Deck:
    """
    A standard 52-card deck, consumed from the top.

    Usage:
        deck = Deck(rng=random.Random(7))
        hole_cards = deck.deal(2)
        deck.burn()
        flop = deck.deal(3)
    """

    def __init__(self, shuffle: bool = True, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self.reset()
        if shuffle:
            self.shuffle()

    def reset(self) -> None:
        """Reset the deck to a full 52 cards in order."""
        self._cards: List[Card] = full_deck()
        self._dealt: List[Card] = []

    def shuffle(self) -> None:
        """Uniformly permute the remaining cards."""
        self._rng.shuffle(self._cards)

    def deal(self, n: int = 1) -> List[Card]:
        """
        Deal n cards from the top of the deck.

        Raises:
            ValueError: If not enough cards remain.
        """
        if n > len(self._cards):
            raise ValueError(f"Cannot deal {n} cards, only {len(self._cards)} remain")

        dealt = self._cards[:n]
        self._cards = self._cards[n:]
        self._dealt.extend(dealt)
        return dealt

    def burn(self) -> Card:
        """Discard the top card face down; it still counts as dealt."""
        return self.deal(1)[0]

    @property
    def remaining(self) -> int:
        """Number of cards remaining in the deck."""
        return len(self._cards)

    @property
    def dealt_cards(self) -> List[Card]:
        """List of cards that have been dealt."""
        return self._dealt.copy()

    def __len__(self) -> int:
        return len(self._cards)

    def __repr__(self) -> str:
        return f"Deck({self.remaining} cards remaining)"


def parse_cards(cards_str: str) -> List[Card]:
    """
    Parse space-separated cards, e.g. "As Kh 10d" or "A♠ K♥ T♦".
    """
    return [Card.from_string(s) for s in cards_str.split()]
