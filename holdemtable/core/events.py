"""
Outbound notifications.

The engine never renders anything. It calls ``on_state_changed()`` after
every mutation so a presentation layer can redraw, and ``on_event()`` with
a structured fact for every line a game log would want to show.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Optional
from dataclasses import dataclass, field
from enum import Enum


class EventKind(Enum):
    """Kinds of facts the engine reports."""
    HAND_STARTED = "HAND_STARTED"
    BLIND_POSTED = "BLIND_POSTED"
    CHIPS_CLAMPED = "CHIPS_CLAMPED"
    FOLD = "FOLD"
    CHECK = "CHECK"
    CALL = "CALL"
    RAISE = "RAISE"
    ALL_IN = "ALL_IN"
    FLOP = "FLOP"
    TURN = "TURN"
    RIVER = "RIVER"
    SHOWDOWN = "SHOWDOWN"
    POT_AWARDED = "POT_AWARDED"
    WIN_BY_FOLD = "WIN_BY_FOLD"
    HAND_ENDED = "HAND_ENDED"
    GAME_ENDED = "GAME_ENDED"


@dataclass(frozen=True)
class GameEvent:
    """One fact for the game log: what happened, in which phase, with which numbers."""
    kind: EventKind
    hand_number: int
    phase: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.kind.value,
            "hand_number": self.hand_number,
            "phase": self.phase,
            **self.details,
        }


class GameObserver:
    """
    Receives engine notifications. Override what you need.
    """

    def on_state_changed(self) -> None:
        pass

    def on_event(self, event: GameEvent) -> None:
        pass


class CallbackObserver(GameObserver):
    """Adapts plain callables to the observer interface."""

    def __init__(
        self,
        on_change: Optional[Callable[[], None]] = None,
        on_event: Optional[Callable[[GameEvent], None]] = None,
    ):
        self._on_change = on_change
        self._on_event = on_event

    def on_state_changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    def on_event(self, event: GameEvent) -> None:
        if self._on_event is not None:
            self._on_event(event)
