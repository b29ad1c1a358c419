"""
Player and seat types for Texas Hold'em.

A seat is either the human seat or a bot seat carrying its strategy
handle; the engine asks ``player.controller`` instead of branching on a
loose flag.
"""

from __future__ import annotations
from typing import List, Optional, Dict, Any, Union, TYPE_CHECKING
from dataclasses import dataclass, field

from holdemtable.core.card import Card

if TYPE_CHECKING:
    from holdemtable.agents.base import BaseAgent


@dataclass(frozen=True)
class HumanSeat:
    """The seat driven by ``PokerGame.apply_player_action``."""


@dataclass(frozen=True)
class BotSeat:
    """A seat whose actions come from an agent."""
    agent: "BaseAgent"


Seat = Union[HumanSeat, BotSeat]


@dataclass(eq=False)
class Player:
    """
    A player at the table.

    Attributes:
        player_id: Seat index, fixed for the lifetime of the table
        name: Display name
        chips: Chips behind (not yet committed to the pot)
        hole_cards: The player's private cards (0 or 2)
        bet: Amount bet in the current betting round
        total_bet: Total committed this hand
        folded: Out of the current hand
        acted_this_round: Has acted since the last raise or street
        all_in: Committed every chip this hand
        controller: HumanSeat or BotSeat
    """
    player_id: int
    name: str
    chips: int
    controller: Seat = field(default_factory=HumanSeat)
    hole_cards: List[Card] = field(default_factory=list)
    bet: int = 0
    total_bet: int = 0
    folded: bool = False
    acted_this_round: bool = False
    all_in: bool = False

    @property
    def is_bot(self) -> bool:
        return isinstance(self.controller, BotSeat)

    @property
    def agent(self) -> Optional["BaseAgent"]:
        if isinstance(self.controller, BotSeat):
            return self.controller.agent
        return None

    def reset_for_new_hand(self) -> None:
        """Reset player state for a new hand. Busted players sit the hand out."""
        self.hole_cards = []
        self.bet = 0
        self.total_bet = 0
        self.acted_this_round = False
        self.all_in = False
        self.folded = self.chips <= 0

    def reset_for_new_round(self) -> None:
        """Reset per-round state for a new street."""
        self.bet = 0
        self.acted_this_round = False

    def commit(self, amount: int) -> int:
        """
        Move chips from the stack into this round's bet.

        Returns:
            Actual amount committed (less than asked when going all-in)
        """
        if amount <= 0:
            return 0
        actual = min(amount, self.chips)
        self.chips -= actual
        self.bet += actual
        self.total_bet += actual
        if self.chips == 0:
            self.all_in = True
        return actual

    @property
    def can_act(self) -> bool:
        """Still holds cards and chips to act with."""
        return not self.folded and not self.all_in and self.chips > 0

    def to_dict(self, hide_cards: bool = True) -> Dict[str, Any]:
        """
        Convert to dictionary for the presentation layer.

        Args:
            hide_cards: If True, don't include hole cards
        """
        result = {
            "id": self.player_id,
            "name": self.name,
            "chips": self.chips,
            "bet": self.bet,
            "total_bet": self.total_bet,
            "folded": self.folded,
            "all_in": self.all_in,
            "is_bot": self.is_bot,
        }
        if not hide_cards and self.hole_cards:
            result["cards"] = [card.to_dict() for card in self.hole_cards]
        return result

    def __repr__(self) -> str:
        return (
            f"Player({self.player_id}, {self.name}, chips={self.chips}, "
            f"bet={self.bet}, folded={self.folded}, all_in={self.all_in})"
        )

    def __str__(self) -> str:
        cards_str = " ".join(str(c) for c in self.hole_cards) if self.hole_cards else "??"
        return f"{self.name} [{cards_str}] ${self.chips}"
