"""
Heuristic bot strategy.

The bot scores its holding between 0 and 1, looks at how much of its stack
a call would cost, and picks fold, call or raise with thresholds that move
with the situation:

- a cheap call is made with almost anything, an expensive one only with a
  strong hand;
- facing an all-in, a pot already raised several times, or a short stack
  makes it tighter;
- four cards to a flush or a straight make it much looser, even when the
  made hand is weak;
- roughly one decision in eight is a bluff, unless someone is already
  all-in or the call is a big share of the stack.
"""

from __future__ import annotations
from typing import Sequence
import logging

from holdemtable.agents.base import BaseAgent, BotDecision
from holdemtable.core.card import Card, Suit, DECK_SIZE
from holdemtable.core.hand import best_of_7, HandCategory
from holdemtable.core.rules import GamePhase, normalize_bet
from holdemtable.core.view import TableView, PlayerView


logger = logging.getLogger(__name__)

BLUFF_CHANCE = 0.12
BLUFF_MAX_CHIP_RATIO = 0.3

# Draw strength levels returned by flush_potential / straight_potential
FLUSH_MADE = 0.3
FLUSH_FOUR = 0.25
FLUSH_THREE = 0.08
FLUSH_THREE_SUITED_HOLE = 0.05
STRAIGHT_MADE = 0.2
STRAIGHT_FOUR = 0.12
STRAIGHT_THREE = 0.05

# Thresholds that count as "one card away" / "has a chance"
STRONG_FLUSH_DRAW = 0.25
FLUSH_DRAW = 0.15
STRONG_STRAIGHT_DRAW = 0.12
STRAIGHT_DRAW = 0.08

PHASE_AGGRESSION = {
    GamePhase.FLOP: 0.1,
    GamePhase.TURN: 0.15,
    GamePhase.RIVER: 0.2,
}


class HeuristicAgent(BaseAgent):
    """
    Rule-of-thumb No-Limit Hold'em bot.

    Aside from its own random draws (bluffing and raise frequency) the
    decision depends only on the view, so a seeded agent replays exactly.
    """

    def decide(self, view: TableView, player_id: int) -> BotDecision:
        me = view.player(player_id)
        call_amount = view.call_amount(player_id)
        chip_ratio = call_amount / me.chips if me.chips > 0 else 1.0

        strength = self.hand_strength(me.hole_cards, view.community_cards)
        facing_all_in = any(
            p.player_id != player_id and not p.folded and p.all_in for p in view.players
        )

        pot_odds = call_amount / (view.pot + call_amount) if call_amount > 0 else 0.0
        implied_odds = min(0.3, me.chips / (view.pot * 2)) if view.pot > 0 else 0.0
        adjusted_odds = pot_odds - implied_odds

        bluffing = (
            self.rng.random() < BLUFF_CHANCE
            and not facing_all_in
            and chip_ratio < BLUFF_MAX_CHIP_RATIO
        )

        flush = self.flush_potential(me.hole_cards, view.community_cards)
        straight = self.straight_potential(me.hole_cards, view.community_cards)

        logger.debug(
            f"{me.name} thinking: call={call_amount} chips={me.chips} "
            f"ratio={chip_ratio:.1%} strength={strength:.2f} flush={flush:.3f} "
            f"straight={straight:.3f} pot_odds={pot_odds:.2f} adjusted={adjusted_odds:.2f} "
            f"facing_all_in={facing_all_in} bluff={bluffing}"
        )

        if call_amount == 0:
            return self._free_action(view, me, strength, bluffing)

        score = strength - chip_ratio * 0.6
        if flush >= STRONG_FLUSH_DRAW:
            score += 0.4
        elif flush >= FLUSH_DRAW:
            score += 0.2
        if straight >= STRONG_STRAIGHT_DRAW:
            score += 0.15

        fold_threshold = -0.05 if facing_all_in else -0.35
        if bluffing:
            fold_threshold -= 0.3

        if score < fold_threshold:
            logger.debug(f"{me.name} folds: score {score:.2f} below {fold_threshold:.2f}")
            return BotDecision.fold()

        if chip_ratio < 0.05:
            return self._small_bet(view, me, strength, adjusted_odds, flush, straight, bluffing)
        if chip_ratio < 0.2:
            return self._medium_bet(view, me, strength, adjusted_odds, flush, straight, bluffing, facing_all_in)
        if chip_ratio < 0.5:
            return self._large_bet(view, me, strength, adjusted_odds, flush, straight, bluffing)
        return self._huge_bet(view, me, chip_ratio, strength, adjusted_odds, flush, straight, bluffing)

    # Decision branches -------------------------------------------------

    def _free_action(self, view: TableView, me: PlayerView, strength: float, bluffing: bool) -> BotDecision:
        phase_bonus = PHASE_AGGRESSION.get(view.phase, 0.0)
        position_bonus = self.position_bonus(me.player_id, view.dealer_position, len(view.players))

        if strength > 0.6:
            raise_chance = 0.6
        else:
            raise_chance = (0.45 if bluffing else 0.25) + phase_bonus + position_bonus

        if self.rng.random() < raise_chance:
            size = max(normalize_bet(int(view.pot * (0.4 + strength * 0.5)), view.bet_unit), view.big_blind)
            logger.debug(f"{me.name} bets {size} for free (strength {strength:.2f})")
            return self.raise_total(view, me, view.current_bet + size)

        return BotDecision.call()

    def _small_bet(self, view, me, strength, adjusted_odds, flush, straight, bluffing) -> BotDecision:
        min_strength = 0.4 if view.current_bet > view.big_blind * 2 else 0.3
        if view.phase == GamePhase.PREFLOP:
            min_strength += 0.1

        if flush >= STRONG_FLUSH_DRAW or straight >= STRONG_STRAIGHT_DRAW:
            min_strength = min(min_strength, 0.15)
        elif flush >= FLUSH_DRAW or straight >= STRAIGHT_DRAW:
            min_strength = min(min_strength, 0.2)

        if adjusted_odds < 0.08:
            min_strength = min(min_strength, 0.1)

        if strength > min_strength or (adjusted_odds < 0.15 and strength > 0.25) or bluffing:
            return BotDecision.call()
        logger.debug(f"{me.name} folds a small bet: {strength:.2f} <= {min_strength:.2f}")
        return BotDecision.fold()

    def _medium_bet(self, view, me, strength, adjusted_odds, flush, straight, bluffing, facing_all_in) -> BotDecision:
        repeated_raises = view.pot > view.big_blind * 6

        threshold = 0.4 if view.phase == GamePhase.PREFLOP else 0.3
        if repeated_raises:
            threshold += 0.15

        if flush >= STRONG_FLUSH_DRAW:
            threshold = min(threshold, 0.2)
        elif flush >= FLUSH_DRAW:
            threshold = min(threshold, 0.25)

        if straight >= STRONG_STRAIGHT_DRAW:
            threshold = min(threshold, 0.2)
        elif straight >= STRAIGHT_DRAW:
            threshold = min(threshold, 0.25)

        if adjusted_odds < 0.1:
            threshold = min(threshold, 0.15)

        if strength > 0.55 or bluffing:
            raise_chance = 0.4 if bluffing else 0.3
            if view.phase != GamePhase.PREFLOP and not repeated_raises:
                raise_chance += 0.1
            if repeated_raises:
                raise_chance -= 0.2

            if self.rng.random() < raise_chance and not facing_all_in:
                target = view.current_bet + int(view.pot * (0.5 if bluffing else 0.4))
                return self.raise_total(view, me, target)
            return BotDecision.call()

        if strength > threshold:
            return BotDecision.call()
        logger.debug(f"{me.name} folds a medium bet: {strength:.2f} <= {threshold:.2f}")
        return BotDecision.fold()

    def _large_bet(self, view, me, strength, adjusted_odds, flush, straight, bluffing) -> BotDecision:
        short_stack = me.chips < view.big_blind
        call_amount = view.call_amount(me.player_id)
        stack_at_risk = me.chips <= call_amount * 2

        if view.phase == GamePhase.PREFLOP:
            threshold = 0.6
        elif view.phase == GamePhase.RIVER:
            threshold = 0.45
        else:
            threshold = 0.5

        if short_stack:
            threshold += 0.15
        if stack_at_risk:
            threshold += 0.1

        if flush >= STRONG_FLUSH_DRAW:
            threshold = min(threshold, 0.35)
        elif flush >= FLUSH_DRAW:
            threshold = min(threshold, 0.4)

        if straight >= STRONG_STRAIGHT_DRAW:
            threshold = min(threshold, 0.35)
        elif straight >= STRAIGHT_DRAW:
            threshold = min(threshold, 0.4)

        if adjusted_odds < 0.05:
            threshold = min(threshold, 0.25)

        if strength > threshold or (bluffing and strength > 0.4 and not short_stack):
            return BotDecision.call()
        logger.debug(f"{me.name} folds a large bet: {strength:.2f} <= {threshold:.2f}")
        return BotDecision.fold()

    def _huge_bet(self, view, me, chip_ratio, strength, adjusted_odds, flush, straight, bluffing) -> BotDecision:
        threshold = 0.7
        if flush >= STRONG_FLUSH_DRAW or straight >= STRONG_STRAIGHT_DRAW:
            threshold = 0.5
        elif flush >= FLUSH_DRAW or straight >= STRAIGHT_DRAW:
            threshold = 0.6

        # Calling would put the whole stack in
        if chip_ratio >= 1.0:
            if view.phase == GamePhase.RIVER:
                threshold = min(threshold, 0.4)
            elif view.phase == GamePhase.TURN:
                threshold = min(threshold, 0.45)
            else:
                threshold = min(threshold, 0.55)

        if adjusted_odds < 0.05:
            threshold = min(threshold, 0.3)

        if strength > threshold or (bluffing and strength > 0.5):
            return BotDecision.call()
        logger.debug(f"{me.name} folds a huge bet: {strength:.2f} <= {threshold:.2f}")
        return BotDecision.fold()

    # Hand reading ------------------------------------------------------

    def hand_strength(self, hole_cards: Sequence[Card], community_cards: Sequence[Card]) -> float:
        """Score the holding between 0 and 1."""
        if not community_cards:
            return self.preflop_strength(hole_cards)

        best = best_of_7(list(hole_cards) + list(community_cards))
        strength = best.category / HandCategory.ROYAL_FLUSH
        kicker = best.tiebreak[0] / 14 * 0.1
        strength += self.flush_potential(hole_cards, community_cards)
        strength += self.straight_potential(hole_cards, community_cards) * 0.5
        return min(1.0, strength + kicker)

    @staticmethod
    def preflop_strength(hole_cards: Sequence[Card]) -> float:
        """Pairs, suitedness, connectedness and high cards."""
        high, low = sorted((c.value for c in hole_cards), reverse=True)
        suited = hole_cards[0].suit == hole_cards[1].suit
        gap = high - low

        if gap == 0:
            return min(1.0, 0.5 + (high - 2) / 12 * 0.5)

        strength = high / 14 * 0.4
        if suited:
            strength += 0.1
        if gap <= 4:
            strength += (4 - gap) / 4 * 0.15
        if high >= 12:
            strength += 0.1
        return min(1.0, strength)

    @staticmethod
    def flush_potential(hole_cards: Sequence[Card], community_cards: Sequence[Card]) -> float:
        """0.3 for a made flush, about 0.25-0.37 with four suited, 0.08-0.13 with three."""
        all_cards = list(hole_cards) + list(community_cards)
        best = 0.0

        for suit in Suit:
            count = sum(1 for c in all_cards if c.suit == suit)
            mine = [c for c in hole_cards if c.suit == suit]

            if count >= 5:
                potential = FLUSH_MADE
            elif count == 4:
                potential = FLUSH_FOUR
                if mine:
                    potential += max(c.value for c in mine) / 14 * 0.1
                outs = 13 - count
                unseen = DECK_SIZE - len(all_cards)
                potential += outs / unseen * 0.15
            elif count == 3:
                potential = FLUSH_THREE
                if len(mine) == 2:
                    potential += FLUSH_THREE_SUITED_HOLE
            else:
                potential = 0.0

            best = max(best, potential)

        return best

    @staticmethod
    def straight_potential(hole_cards: Sequence[Card], community_cards: Sequence[Card]) -> float:
        """Longest run of consecutive values: 5 -> 0.2, 4 -> 0.12, 3 -> 0.05."""
        values = sorted({c.value for c in list(hole_cards) + list(community_cards)})
        if not values:
            return 0.0

        longest = run = 1
        for prev, cur in zip(values, values[1:]):
            if cur == prev + 1:
                run += 1
                longest = max(longest, run)
            else:
                run = 1

        if {14, 2, 3, 4, 5} <= set(values):
            longest = max(longest, 5)

        if longest >= 5:
            return STRAIGHT_MADE
        if longest == 4:
            return STRAIGHT_FOUR
        if longest == 3:
            return STRAIGHT_THREE
        return 0.0

    @staticmethod
    def position_bonus(player_index: int, dealer_position: int, player_count: int) -> float:
        """Seats acting later get more aggressive."""
        position = (player_index - dealer_position + player_count) % player_count
        if position == 3:
            return 0.15
        if position >= 2:
            return 0.1
        return 0.0
