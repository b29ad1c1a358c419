"""
Read-only snapshots of the table.

Agents and presentation layers receive a ``TableView`` instead of the
engine itself; nothing in a view can change the game.
"""

from __future__ import annotations
from typing import Any, Dict, Optional, Tuple
from dataclasses import dataclass

from holdemtable.core.card import Card
from holdemtable.core.rules import GamePhase


@dataclass(frozen=True)
class PlayerView:
    """Public state of one seat, plus hole cards when the viewer owns them."""
    player_id: int
    name: str
    chips: int
    bet: int
    total_bet: int
    folded: bool
    all_in: bool
    acted_this_round: bool
    is_bot: bool
    hole_cards: Tuple[Card, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
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
        if self.hole_cards:
            result["cards"] = [c.to_dict() for c in self.hole_cards]
        return result


@dataclass(frozen=True)
class TableView:
    """Everything visible at the table at one instant."""
    hand_number: int
    phase: GamePhase
    players: Tuple[PlayerView, ...]
    community_cards: Tuple[Card, ...]
    pot: int
    current_bet: int
    dealer_position: int
    current_player_index: int
    small_blind: int
    big_blind: int
    bet_unit: int
    game_ended: bool
    viewer_id: Optional[int] = None

    def player(self, player_id: int) -> PlayerView:
        for p in self.players:
            if p.player_id == player_id:
                return p
        raise KeyError(f"No player with id {player_id}")

    @property
    def current_player(self) -> Optional[PlayerView]:
        if self.game_ended or not self.players:
            return None
        return self.players[self.current_player_index]

    def call_amount(self, player_id: int) -> int:
        """Chips the player must add to match the current bet."""
        return max(0, self.current_bet - self.player(player_id).bet)

    def to_dict(self) -> Dict[str, Any]:
        current = self.current_player
        return {
            "hand_number": self.hand_number,
            "phase": self.phase.name,
            "pot": self.pot,
            "current_bet": self.current_bet,
            "board": [c.to_dict() for c in self.community_cards],
            "dealer_position": self.dealer_position,
            "current_player": current.player_id if current else None,
            "players": [p.to_dict() for p in self.players],
            "small_blind": self.small_blind,
            "big_blind": self.big_blind,
            "game_ended": self.game_ended,
        }
