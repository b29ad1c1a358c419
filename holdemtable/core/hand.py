"""
Hand Evaluation for Texas Hold'em.

Every 5-card hand is reduced to a category plus a tie-break sequence:

    9 Royal Flush        (top straight flush, display only)
    8 Straight Flush     [high card]          wheel counts as 5 high
    7 Four of a Kind     [quad, kicker]
    6 Full House         [trips, pair]
    5 Flush              all five values descending
    4 Straight           [high card]          wheel counts as 5 high
    3 Three of a Kind    values by frequency, then value
    2 Two Pair           values by frequency, then value
    1 One Pair           values by frequency, then value
    0 High Card          values descending

Hands compare by category first and then element-wise on the tie-break
sequence, so a higher result is always a stronger hand.
"""

from __future__ import annotations
from typing import List, Sequence, Tuple, Union
from itertools import combinations
from enum import IntEnum
from collections import Counter
from dataclasses import dataclass

from holdemtable.core.card import Card, Rank, LABEL_TO_RANK


class HandCategory(IntEnum):
    """Hand categories, higher is stronger."""
    HIGH_CARD = 0
    ONE_PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9


HAND_CATEGORY_NAMES = {
    HandCategory.ROYAL_FLUSH: "Royal Flush",
    HandCategory.STRAIGHT_FLUSH: "Straight Flush",
    HandCategory.FOUR_OF_A_KIND: "Four of a Kind",
    HandCategory.FULL_HOUSE: "Full House",
    HandCategory.FLUSH: "Flush",
    HandCategory.STRAIGHT: "Straight",
    HandCategory.THREE_OF_A_KIND: "Three of a Kind",
    HandCategory.TWO_PAIR: "Two Pair",
    HandCategory.ONE_PAIR: "One Pair",
    HandCategory.HIGH_CARD: "High Card",
}

HAND_SIZE = 5


@dataclass(frozen=True)
class RankedHand:
    """A ranked 5-card hand."""
    category: HandCategory
    tiebreak: Tuple[int, ...]
    cards: Tuple[Card, ...]

    @property
    def name(self) -> str:
        return HAND_CATEGORY_NAMES[self.category]

    @property
    def is_royal(self) -> bool:
        return self.category == HandCategory.ROYAL_FLUSH

    def __str__(self) -> str:
        return f"{self.name} ({' '.join(str(c) for c in self.cards)})"


def value_of(rank: Union[Rank, int, str]) -> int:
    """Return the poker value of a rank, 2..14 with the Ace high."""
    if isinstance(rank, str):
        key = rank.strip().upper()
        if key not in LABEL_TO_RANK:
            raise ValueError(f"Invalid rank: {rank}")
        return int(LABEL_TO_RANK[key])
    return int(Rank(rank))


def rank5(cards: Sequence[Card]) -> RankedHand:
    """Rank exactly five cards."""
    if len(cards) != HAND_SIZE:
        raise ValueError(f"rank5 needs exactly 5 cards, got {len(cards)}")

    sorted_cards = sorted(cards, key=lambda c: c.rank, reverse=True)
    values = [c.value for c in sorted_cards]
    counts = Counter(values)
    # Frequency first, then value, both descending
    by_frequency = sorted(counts, key=lambda v: (counts[v], v), reverse=True)
    shape = sorted(counts.values(), reverse=True)

    is_flush = len({c.suit for c in cards}) == 1
    straight_high = _straight_high(values)

    if straight_high and is_flush:
        if straight_high == Rank.ACE:
            category = HandCategory.ROYAL_FLUSH
        else:
            category = HandCategory.STRAIGHT_FLUSH
        return RankedHand(category, (straight_high,), _straight_order(sorted_cards, straight_high))

    if shape == [4, 1]:
        return RankedHand(
            HandCategory.FOUR_OF_A_KIND,
            (by_frequency[0], by_frequency[1]),
            _sort_by_count(sorted_cards, counts),
        )

    if shape == [3, 2]:
        return RankedHand(
            HandCategory.FULL_HOUSE,
            (by_frequency[0], by_frequency[1]),
            _sort_by_count(sorted_cards, counts),
        )

    if is_flush:
        return RankedHand(HandCategory.FLUSH, tuple(values), tuple(sorted_cards))

    if straight_high:
        return RankedHand(HandCategory.STRAIGHT, (straight_high,), _straight_order(sorted_cards, straight_high))

    if shape == [3, 1, 1]:
        category = HandCategory.THREE_OF_A_KIND
    elif shape == [2, 2, 1]:
        category = HandCategory.TWO_PAIR
    elif shape == [2, 1, 1, 1]:
        category = HandCategory.ONE_PAIR
    else:
        category = HandCategory.HIGH_CARD

    return RankedHand(category, tuple(by_frequency), _sort_by_count(sorted_cards, counts))


def best_of_7(cards: Sequence[Card]) -> RankedHand:
    """
    Pick the strongest 5-card hand out of 5 to 7 cards.

    All C(n, 5) combinations are ranked; the first maximum under
    ``compare`` wins, so the category and tie-break do not depend on the
    order of the input.

    Raises:
        ValueError: If not 5-7 cards provided
    """
    if len(cards) < 5 or len(cards) > 7:
        raise ValueError(f"Need 5-7 cards, got {len(cards)}")

    best = None
    for combo in combinations(cards, HAND_SIZE):
        ranked = rank5(combo)
        if best is None or compare(ranked, best) > 0:
            best = ranked
    return best


def compare(a: RankedHand, b: RankedHand) -> int:
    """
    Compare two ranked hands.

    Returns:
        1 if a is stronger, -1 if b is stronger, 0 if they tie
    """
    if a.category != b.category:
        return 1 if a.category > b.category else -1

    for i in range(max(len(a.tiebreak), len(b.tiebreak))):
        v1 = a.tiebreak[i] if i < len(a.tiebreak) else 0
        v2 = b.tiebreak[i] if i < len(b.tiebreak) else 0
        if v1 != v2:
            return 1 if v1 > v2 else -1

    return 0


def compare_hands(cards1: Sequence[Card], cards2: Sequence[Card]) -> int:
    """Compare two 5-7 card holdings; 1 if cards1 wins, -1 if cards2 wins, 0 on a tie."""
    return compare(best_of_7(cards1), best_of_7(cards2))


def _straight_high(values: List[int]) -> int:
    """High card of a straight in descending values, 5 for the wheel, 0 if none."""
    unique = sorted(set(values), reverse=True)
    if len(unique) != 5:
        return 0
    if unique[0] - unique[4] == 4:
        return unique[0]
    if unique == [14, 5, 4, 3, 2]:
        return 5
    return 0


def _straight_order(cards: List[Card], high: int) -> Tuple[Card, ...]:
    """Order straight cards from the top; the wheel puts the Ace last."""
    if high != 5:
        return tuple(cards)
    ace = [c for c in cards if c.rank == Rank.ACE]
    others = [c for c in cards if c.rank != Rank.ACE]
    return tuple(others + ace)


def _sort_by_count(cards: List[Card], counts: Counter) -> Tuple[Card, ...]:
    """Sort cards by count (descending), then by rank (descending)."""
    return tuple(sorted(cards, key=lambda c: (counts[c.value], c.value), reverse=True))


def get_hand_description(cards: Sequence[Card]) -> str:
    """Get a human-readable description of the best hand in the cards."""
    if len(cards) < 5:
        return "Incomplete hand"

    return describe(best_of_7(cards))


def describe(hand: RankedHand) -> str:
    """Describe an already ranked hand."""
    top = hand.tiebreak[0]
    if hand.category == HandCategory.ROYAL_FLUSH:
        return "Royal Flush"
    elif hand.category == HandCategory.STRAIGHT_FLUSH:
        return f"Straight Flush, {_rank_name(top)} high"
    elif hand.category == HandCategory.FOUR_OF_A_KIND:
        return f"Four of a Kind, {_rank_name(top)}s"
    elif hand.category == HandCategory.FULL_HOUSE:
        return f"Full House, {_rank_name(top)}s full of {_rank_name(hand.tiebreak[1])}s"
    elif hand.category == HandCategory.FLUSH:
        return f"Flush, {_rank_name(top)} high"
    elif hand.category == HandCategory.STRAIGHT:
        if top == 5:
            return "Straight, Five high (Wheel)"
        return f"Straight, {_rank_name(top)} high"
    elif hand.category == HandCategory.THREE_OF_A_KIND:
        return f"Three of a Kind, {_rank_name(top)}s"
    elif hand.category == HandCategory.TWO_PAIR:
        return f"Two Pair, {_rank_name(top)}s and {_rank_name(hand.tiebreak[1])}s"
    elif hand.category == HandCategory.ONE_PAIR:
        return f"Pair of {_rank_name(top)}s"
    return f"High Card, {_rank_name(top)}"


def _rank_name(value: int) -> str:
    """Get the name of a rank value."""
    names = {
        2: "Two", 3: "Three", 4: "Four", 5: "Five", 6: "Six", 7: "Seven",
        8: "Eight", 9: "Nine", 10: "Ten", 11: "Jack", 12: "Queen",
        13: "King", 14: "Ace",
    }
    return names[value]
