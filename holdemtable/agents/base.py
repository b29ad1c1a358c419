"""
Base Agent Interface for holdemtable.

An agent is the strategy behind a bot seat. It looks at a read-only
``TableView`` and proposes exactly one action; the engine validates and
applies it.

Usage:
    class MyAgent(BaseAgent):
        def decide(self, view, player_id):
            return BotDecision.call()
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from dataclasses import dataclass
import random

from holdemtable.core.rules import ActionType, normalize_bet
from holdemtable.core.view import TableView, PlayerView


@dataclass(frozen=True)
class BotDecision:
    """
    A proposed action.

    ``amount`` is only set for raises and is the player's new total bet
    for the round, not the chips added.
    """
    action: ActionType
    amount: Optional[int] = None

    @classmethod
    def fold(cls) -> "BotDecision":
        return cls(ActionType.FOLD)

    @classmethod
    def call(cls) -> "BotDecision":
        return cls(ActionType.CALL)

    @classmethod
    def raise_to(cls, total: int) -> "BotDecision":
        return cls(ActionType.RAISE, total)

    def to_dict(self) -> Dict[str, Any]:
        return {"action": self.action.value, "amount": self.amount}


class BaseAgent(ABC):
    """
    Abstract base class for bot strategies.

    Attributes:
        name: Human-readable strategy name
        rng: Random source; seed it for reproducible decisions
    """

    def __init__(self, name: Optional[str] = None, seed: Optional[int] = None):
        self.name = name or self.__class__.__name__
        self.rng = random.Random(seed)

    @abstractmethod
    def decide(self, view: TableView, player_id: int) -> BotDecision:
        """
        Choose an action for ``player_id``, whose turn it is in ``view``.

        Must not mutate anything but the agent's own random state.
        """

    def reset(self) -> None:
        """Reset any state kept between hands."""
        pass

    def on_hand_start(self, hand_number: int) -> None:
        """Called when a new hand starts."""
        pass

    def on_hand_end(self, result: Dict[str, Any]) -> None:
        """
        Called when a hand ends.

        Args:
            result: Dictionary with ``winners`` (player ids), ``pot`` and
                ``showdown`` (False when everyone else folded)
        """
        pass

    @staticmethod
    def raise_total(view: TableView, me: PlayerView, target: int) -> BotDecision:
        """
        Turn a desired round total into a legal raise.

        The total is lifted to at least one bet unit above the current bet,
        rounded down to the bet unit, and capped at the player's stack (an
        all-in total is kept as is). Falls back to a call when the player
        cannot raise at all.
        """
        cap = me.bet + me.chips
        min_total = view.current_bet + view.bet_unit
        total = normalize_bet(max(target, min_total), view.bet_unit)
        if total < min_total:
            total += view.bet_unit
        if total >= cap:
            total = cap
        if total <= view.current_bet:
            return BotDecision.call()
        return BotDecision.raise_to(total)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name})"
