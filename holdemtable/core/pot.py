"""
Pot settlement with side pots.

The pot manager remembers every all-in of the current hand (the player's
cumulative commitment at the moment their stack hit zero) and, at the end
of the hand, turns the single pot total into per-player payouts:

- nobody all-in: the pot is split evenly between the winners;
- everyone else folded: the last player standing takes everything;
- otherwise the pot is cut into layers at each all-in level. A layer is
  paid to the winners whose commitment reaches it. A layer none of the
  winners reached goes to the best hand among the players who did reach
  it, or is carried into the next layer when no hands are supplied.
  Whatever is left after the last layer belongs to the winners who never
  went all-in.

Odd chips always go to the earliest winners in the order given, and the
sum of the payouts always equals the pot.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence
from dataclasses import dataclass
import logging

from holdemtable.core.player import Player
from holdemtable.core.hand import RankedHand, compare


logger = logging.getLogger(__name__)

MAIN_POT = "main"
REMAINDER_POT = "remainder"


@dataclass(frozen=True)
class AllInRecord:
    """A player going all-in, with their total commitment at that moment."""
    player: Player
    amount: int
    order: int


@dataclass(frozen=True)
class PotShare:
    """Chips paid from one pot layer to one player."""
    pot: str
    amount: int
    player_id: int
    player_name: str

    def to_dict(self) -> dict:
        return {
            "pot": self.pot,
            "amount": self.amount,
            "player_id": self.player_id,
            "player": self.player_name,
        }


def split_evenly(amount: int, recipients: Sequence[Player], pot: str) -> List[PotShare]:
    """Split chips between recipients; odd chips go to the first ones listed."""
    if amount <= 0 or not recipients:
        return []
    share, remainder = divmod(amount, len(recipients))
    shares = []
    for idx, player in enumerate(recipients):
        paid = share + 1 if idx < remainder else share
        if paid > 0:
            shares.append(PotShare(pot, paid, player.player_id, player.name))
    return shares


class PotManager:
    """
    Tracks all-ins for one hand and settles the pot at showdown.

    Usage:
        pots = PotManager()
        pots.reset()                 # new hand
        pots.record_all_in(player)   # whenever a stack reaches 0
        shares = pots.settle(players, winners, pot_amount, hands)
    """

    def __init__(self):
        self._records: List[AllInRecord] = []

    def reset(self) -> None:
        """Forget every all-in; called at the start of each hand."""
        self._records = []

    @property
    def records(self) -> List[AllInRecord]:
        return list(self._records)

    @property
    def has_all_in(self) -> bool:
        return bool(self._records)

    def record_all_in(self, player: Player) -> bool:
        """
        Record that a player's stack just reached zero.

        Returns:
            True if a record was added, False if the player was already
            recorded this hand or still has chips.
        """
        if any(r.player is player for r in self._records):
            return False
        if player.chips != 0:
            logger.warning(f"Ignoring all-in record for {player.name}: {player.chips} chips left")
            return False

        record = AllInRecord(player=player, amount=player.total_bet, order=len(self._records))
        self._records.append(record)
        logger.debug(f"All-in recorded: {player.name} for {player.total_bet} (#{record.order})")
        return True

    def settle(
        self,
        players: Sequence[Player],
        winners: Sequence[Player],
        pot_amount: int,
        hands: Optional[Dict[int, RankedHand]] = None,
    ) -> List[PotShare]:
        """
        Turn the pot into payouts.

        Args:
            players: Every seat at the table
            winners: Best hand(s) at showdown, in odd-chip order
            pot_amount: Chips to distribute
            hands: Optional ranked hands by player_id, used to award layers
                that none of the winners is eligible for

        Returns:
            One PotShare per recipient per layer; amounts sum to pot_amount.
        """
        if pot_amount <= 0:
            return []
        if not winners:
            raise ValueError("Cannot settle a pot without winners")

        winners = list(winners)
        contenders = [p for p in players if not p.folded]

        if not self._records:
            return split_evenly(pot_amount, winners, MAIN_POT)

        if len(winners) == 1 and all(p is winners[0] for p in contenders):
            logger.debug(f"{winners[0].name} takes the uncontested pot of {pot_amount}")
            return split_evenly(pot_amount, winners, MAIN_POT)

        return self._settle_layers(players, winners, contenders, pot_amount, hands)

    def _settle_layers(
        self,
        players: Sequence[Player],
        winners: List[Player],
        contenders: List[Player],
        pot_amount: int,
        hands: Optional[Dict[int, RankedHand]],
    ) -> List[PotShare]:
        levels = sorted({r.amount for r in self._records})

        shares: List[PotShare] = []
        remaining = pot_amount
        carry = 0
        previous = 0
        layer_index = 0

        for level in levels:
            if level <= previous:
                continue

            # Every contribution between the previous level and this one,
            # including chips from players who later folded
            layer = sum(min(p.total_bet, level) - min(p.total_bet, previous) for p in players)
            layer = min(layer, remaining - carry)
            previous = level

            eligible = [p for p in contenders if p.total_bet >= level]
            recipients = [w for w in winners if w.total_bet >= level]
            if not recipients:
                recipients = self._best_of(eligible, hands)

            if not recipients:
                logger.debug(f"No eligible winner at level {level}, carrying {layer} forward")
                carry += layer
                continue

            label = MAIN_POT if layer_index == 0 else f"side-{layer_index}"
            paid = split_evenly(layer + carry, recipients, label)
            shares.extend(paid)
            remaining -= layer + carry
            carry = 0
            layer_index += 1

        if remaining > 0:
            recipients = self._leftover_recipients(winners, contenders, previous, hands)
            shares.extend(split_evenly(remaining, recipients, REMAINDER_POT))

        return shares

    def _leftover_recipients(
        self,
        winners: List[Player],
        contenders: List[Player],
        top_level: int,
        hands: Optional[Dict[int, RankedHand]],
    ) -> List[Player]:
        """Chips above the last all-in level go to whoever still had chips behind."""
        covering = [w for w in winners if not w.all_in]
        if covering:
            return covering
        above = self._best_of([p for p in contenders if p.total_bet > top_level], hands)
        if above:
            return above
        return winners

    @staticmethod
    def _best_of(candidates: List[Player], hands: Optional[Dict[int, RankedHand]]) -> List[Player]:
        if not hands:
            return []
        ranked = [p for p in candidates if p.player_id in hands]
        if not ranked:
            return []
        best = ranked[0]
        for player in ranked[1:]:
            if compare(hands[player.player_id], hands[best.player_id]) > 0:
                best = player
        return [p for p in ranked if compare(hands[p.player_id], hands[best.player_id]) == 0]
