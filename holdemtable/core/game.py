"""
Texas Hold'em Game Engine - State Machine Implementation.

This module drives one table of one human against bots:
- Hand setup (stack checks, shuffle, blinds, hole cards)
- Player actions (fold, call/check, raise) and turn order
- Betting round completion and phase advancement (preflop -> flop ->
  turn -> river -> showdown), including the all-in run-out
- Showdown and pot settlement with side pots
- Delayed bot turns through a per-game scheduler

All mutation happens on one logical thread: ``start_hand``,
``apply_player_action`` and the scheduled bot turns. After each of them
the observer's ``on_state_changed`` is called exactly once.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List, Optional, Sequence, Union
from dataclasses import dataclass, field
from functools import partial
import logging
import random

from holdemtable.config import TableConfig
from holdemtable.core.card import Card, Deck
from holdemtable.core.player import Player, HumanSeat, BotSeat
from holdemtable.core.hand import RankedHand, best_of_7, compare, describe
from holdemtable.core.pot import PotManager, PotShare
from holdemtable.core.events import EventKind, GameEvent, GameObserver
from holdemtable.core.scheduler import TurnScheduler, ManualScheduler, ScheduledTurn
from holdemtable.core.view import TableView, PlayerView
from holdemtable.core.rules import (
    GamePhase, ActionType, EndReason,
    HOLE_CARDS, TOTAL_COMMUNITY_CARDS, STREET_CARDS, NEXT_PHASE,
    SEAT_SEARCH_LAPS, TURN_SEARCH_LAPS,
    normalize_bet, next_seat,
)
from holdemtable.agents.base import BaseAgent
from holdemtable.agents.heuristic import HeuristicAgent


logger = logging.getLogger(__name__)

STREET_EVENTS = {
    GamePhase.FLOP: EventKind.FLOP,
    GamePhase.TURN: EventKind.TURN,
    GamePhase.RIVER: EventKind.RIVER,
}


@dataclass
class ActionResult:
    """Result of a player action."""
    success: bool
    message: str
    action_type: Optional[ActionType] = None
    amount: int = 0


@dataclass
class HandResult:
    """How the last hand ended."""
    hand_number: int
    pot: int
    winners: List[int]
    shares: List[PotShare]
    showdown: bool
    hands: Dict[int, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hand_number": self.hand_number,
            "pot": self.pot,
            "winners": self.winners,
            "shares": [s.to_dict() for s in self.shares],
            "showdown": self.showdown,
            "hands": self.hands,
        }


class PokerGame:
    """
    No-Limit Texas Hold'em engine for one human and N bots.

    Usage:
        game = PokerGame(TableConfig(player_count=4), observer=my_ui)
        game.start_hand()

        # Bot turns are queued on the scheduler; a synchronous driver runs them
        game.scheduler.run_pending()

        if game.is_player_turn():
            game.apply_player_action(ActionType.CALL)
    """

    def __init__(
        self,
        config: Optional[TableConfig] = None,
        observer: Optional[GameObserver] = None,
        scheduler: Optional[TurnScheduler] = None,
        agent_factory: Optional[Callable[[int, Optional[int]], BaseAgent]] = None,
    ):
        """
        Initialize a table.

        Args:
            config: Blinds, stacks and seating (defaults to TableConfig())
            observer: Receives change notifications and events
            scheduler: Runs delayed bot turns (defaults to a ManualScheduler)
            agent_factory: Builds the strategy for a bot seat from
                (seat index, seed); defaults to HeuristicAgent
        """
        self.config = config or TableConfig()
        self.observer = observer or GameObserver()
        self.scheduler = scheduler or ManualScheduler()
        self._agent_factory = agent_factory or _default_agent
        self._rng = random.Random(self.config.seed)

        self.pot_manager = PotManager()
        self.players: List[Player] = self._build_players(self.config)

        self.deck = Deck(shuffle=False, rng=self._rng)
        self.community_cards: List[Card] = []
        self.phase = GamePhase.WAITING
        self.hand_number = 0

        # Position tracking
        self.dealer_position = 0
        self.small_blind_position: Optional[int] = None
        self.big_blind_position: Optional[int] = None
        self.current_player_index = 0

        # Betting state
        self.pot = 0
        self.current_bet = 0

        self.game_ended = False
        self.end_reason: Optional[EndReason] = None
        self.last_result: Optional[HandResult] = None
        self.hand_history: List[GameEvent] = []

        self._pending_config: Optional[TableConfig] = None
        self._pending_turn: Optional[ScheduledTurn] = None

    # Table setup -------------------------------------------------------

    def _build_players(self, config: TableConfig) -> List[Player]:
        players = []
        bot_number = 0
        for seat in range(config.player_count):
            if seat == config.human_seat:
                players.append(Player(seat, config.human_name, config.starting_chips, HumanSeat()))
                continue
            bot_number += 1
            seed = None if config.seed is None else config.seed + seat
            agent = self._agent_factory(seat, seed)
            players.append(Player(seat, f"Bot {bot_number}", config.starting_chips, BotSeat(agent)))
        return players

    def configure(
        self,
        small_blind: Optional[int] = None,
        big_blind: Optional[int] = None,
        starting_chips: Optional[int] = None,
        player_count: Optional[int] = None,
    ) -> TableConfig:
        """
        Change the table settings for the next hand.

        The new settings take effect at the next ``start_hand()``, which
        reseats everyone with the starting stack.

        Raises:
            ConfigurationError: If the settings are invalid; nothing changes.
        """
        changes = {
            key: value for key, value in (
                ("small_blind", small_blind),
                ("big_blind", big_blind),
                ("starting_chips", starting_chips),
                ("player_count", player_count),
            ) if value is not None
        }
        base = self._pending_config or self.config
        if "player_count" in changes and base.human_seat >= changes["player_count"]:
            changes["human_seat"] = 0
        new_config = base.updated(**changes)
        self._pending_config = new_config

        self.scheduler.cancel_all()
        self._pending_turn = None
        if self.is_hand_running():
            logger.info(f"Hand #{self.hand_number} abandoned for new table settings")
            self.phase = GamePhase.WAITING
        self._notify()
        logger.info(
            f"Table reconfigured for next hand: blinds {new_config.small_blind}/{new_config.big_blind}, "
            f"{new_config.starting_chips} chips, {new_config.player_count} players"
        )
        return new_config

    def _apply_pending_config(self) -> None:
        if self._pending_config is None:
            return
        self.config = self._pending_config
        self._pending_config = None
        self.players = self._build_players(self.config)
        self.dealer_position = 0
        self.game_ended = False
        self.end_reason = None
        logger.info("New table settings applied; all stacks reset")

    # Properties --------------------------------------------------------

    @property
    def num_players(self) -> int:
        return len(self.players)

    @property
    def human_player(self) -> Player:
        return self.players[self.config.human_seat]

    @property
    def current_player(self) -> Optional[Player]:
        """The player whose turn it is to act."""
        if not self.is_hand_running():
            return None
        return self.players[self.current_player_index]

    def is_hand_running(self) -> bool:
        """Check if a hand is currently accepting actions."""
        return self.phase not in (GamePhase.WAITING, GamePhase.SHOWDOWN) and not self.game_ended

    def is_player_turn(self) -> bool:
        """True when the engine is waiting for the human's action."""
        player = self.current_player
        return player is not None and not player.is_bot and not player.folded

    def _find_seat(
        self,
        start: int,
        predicate: Callable[[Player], bool],
        laps: int = SEAT_SEARCH_LAPS,
    ) -> Optional[int]:
        """First seat after ``start`` matching ``predicate``, or None after ``laps`` trips round the table."""
        idx = start
        for _ in range(self.num_players * laps):
            idx = next_seat(idx, self.num_players)
            if predicate(self.players[idx]):
                return idx
        return None

    # Hand lifecycle ----------------------------------------------------

    def start_hand(self) -> bool:
        """
        Start a new hand.

        Returns:
            True if the hand started. False if one is already running or the
            stacks cannot support a hand, in which case ``game_ended`` and
            ``end_reason`` explain why.
        """
        if self.is_hand_running():
            logger.warning("Cannot start hand: a hand is already in progress")
            return False

        self._cancel_pending_turn()
        self.scheduler.cancel_all()
        self._apply_pending_config()
        self.hand_history = []

        sb_amount = self.config.small_blind
        bb_amount = self.config.big_blind

        for player in self.players:
            if player.chips < 0:
                logger.warning(f"Negative stack for {player.name} ({player.chips}), reset to 0")
                self._emit(EventKind.CHIPS_CLAMPED, player=player.name, chips=player.chips)
                player.chips = 0

        if self.human_player.chips < bb_amount:
            return self._end_game(EndReason.HUMAN_BUSTED, "Not enough chips to post the big blind")

        if sum(1 for p in self.players if p.chips >= bb_amount) < 2:
            return self._end_game(EndReason.NOT_ENOUGH_PLAYERS, f"Need at least 2 players with {bb_amount} chips")

        sb_pos = self._find_seat(self.dealer_position, lambda p: p.chips >= sb_amount)
        bb_pos = None
        if sb_pos is not None:
            bb_pos = self._find_seat(sb_pos, lambda p: p.chips >= bb_amount and p.player_id != sb_pos)
        if sb_pos is None or bb_pos is None:
            return self._end_game(EndReason.NO_BLIND_POSITIONS, "No players available for the blinds")

        self.hand_number += 1
        logger.info(f"Starting hand #{self.hand_number}")

        self.deck = Deck(shuffle=True, rng=self._rng)
        self.community_cards = []
        self.pot = 0
        self.current_bet = 0
        self.phase = GamePhase.PREFLOP
        self.game_ended = False
        self.end_reason = None
        self.last_result = None
        self.pot_manager.reset()

        for player in self.players:
            player.reset_for_new_hand()
            if player.is_bot:
                player.agent.on_hand_start(self.hand_number)

        self._emit(
            EventKind.HAND_STARTED,
            dealer=self.dealer_position,
            small_blind=sb_amount,
            big_blind=bb_amount,
            chips={p.name: p.chips for p in self.players},
        )

        self.small_blind_position = sb_pos
        self.big_blind_position = bb_pos
        self._post_blind(self.players[sb_pos], sb_amount, "small")
        self._post_blind(self.players[bb_pos], bb_amount, "big")
        self.current_bet = max(p.bet for p in self.players)

        self._deal_hole_cards()

        first = self._find_seat(bb_pos, lambda p: p.can_act)
        if first is None:
            logger.warning("Nobody can act after the blinds; running out the board")
            self._run_out_and_showdown()
        else:
            self.current_player_index = first
            self._dispatch_turn()

        self._notify()
        return True

    def _post_blind(self, player: Player, amount: int, kind: str) -> None:
        paid = player.commit(amount)
        self.pot += paid
        self._emit(EventKind.BLIND_POSTED, player=player.name, blind=kind, amount=paid)
        logger.debug(f"{player.name} posts {kind} blind {paid}")
        if player.all_in:
            self.pot_manager.record_all_in(player)
            self._emit(EventKind.ALL_IN, player=player.name, total=player.total_bet)

    def _deal_hole_cards(self) -> None:
        for player in self.players:
            if not player.folded:
                player.hole_cards = self.deck.deal(HOLE_CARDS)

    def _end_game(self, reason: EndReason, message: str) -> bool:
        logger.warning(f"Game over: {message}")
        self.game_ended = True
        self.end_reason = reason
        self._emit(EventKind.GAME_ENDED, reason=reason.value, message=message)
        self._notify()
        return False

    def shutdown(self) -> None:
        """Cancel every scheduled bot turn; call when the host tears the game down."""
        cancelled = self.scheduler.cancel_all()
        self._cancel_pending_turn()
        logger.info(f"Game shut down, {cancelled} pending turn(s) cancelled")

    # Actions -----------------------------------------------------------

    def apply_player_action(
        self,
        action: Union[ActionType, str],
        amount: Optional[int] = None,
    ) -> ActionResult:
        """
        Apply the human's action.

        Args:
            action: FOLD, CALL (also checks) or RAISE
            amount: For RAISE, the new total bet for the round

        Returns:
            ActionResult; on failure nothing has changed.
        """
        if isinstance(action, str):
            try:
                action = ActionType(action.upper())
            except ValueError:
                return ActionResult(False, f"Unknown action: {action}")

        if not self.is_hand_running():
            return ActionResult(False, "No hand in progress")
        if not self.is_player_turn():
            return ActionResult(False, "Not your turn")

        result = self._apply_action(self.players[self.current_player_index], action, amount)
        if result.success:
            self._notify()
        return result

    def _run_bot_turn(self, hand_number: int, seat: int) -> None:
        """Scheduled callback: let the bot in ``seat`` act."""
        self._pending_turn = None
        if hand_number != self.hand_number or not self.is_hand_running() or seat != self.current_player_index:
            logger.debug(f"Dropping stale bot turn for seat {seat} (hand #{hand_number})")
            return

        player = self.players[seat]
        if not player.is_bot or not player.can_act:
            return

        decision = player.agent.decide(self.view(for_player_id=seat), seat)
        result = self._apply_action(player, decision.action, decision.amount)
        if not result.success:
            logger.warning(f"{player.name} proposed an invalid {decision.action.value} ({result.message}); calling instead")
            self._apply_action(player, ActionType.CALL, None)

        self._notify()

    def _apply_action(self, player: Player, action: ActionType, amount: Optional[int]) -> ActionResult:
        """Validate and execute an action for the player, then move the game on."""
        was_all_in = player.all_in
        to_call = max(0, self.current_bet - player.bet)

        if action == ActionType.FOLD:
            player.folded = True
            result = ActionResult(True, "Folded", ActionType.FOLD, 0)
            self._emit(EventKind.FOLD, player=player.name)

        elif action == ActionType.CALL:
            paid = player.commit(min(to_call, player.chips))
            self.pot += paid
            if paid == 0:
                result = ActionResult(True, "Checked", ActionType.CALL, 0)
                self._emit(EventKind.CHECK, player=player.name)
            else:
                result = ActionResult(True, f"Called ${paid}", ActionType.CALL, paid)
                self._emit(EventKind.CALL, player=player.name, amount=paid)

        elif action == ActionType.RAISE:
            target, error = self._validate_raise(player, amount)
            if error:
                return ActionResult(False, error)
            paid = player.commit(target - player.bet)
            self.pot += paid
            self.current_bet = player.bet
            self._reopen_action(player)
            result = ActionResult(True, f"Raised to ${player.bet}", ActionType.RAISE, paid)
            self._emit(EventKind.RAISE, player=player.name, to=player.bet, amount=paid)

        else:
            return ActionResult(False, f"Unknown action: {action}")

        player.acted_this_round = True
        if player.all_in and not was_all_in:
            self.pot_manager.record_all_in(player)
            self._emit(EventKind.ALL_IN, player=player.name, total=player.total_bet)

        logger.debug(
            f"{player.name}: {result.message} | chips={player.chips} bet={player.bet} "
            f"pot={self.pot} current_bet={self.current_bet}"
        )

        self._advance_turn()
        return result

    def _validate_raise(self, player: Player, amount: Optional[int]):
        """Return (new round total, None) or (None, error message)."""
        if amount is None:
            return None, "Raise needs an amount"

        all_in_total = player.bet + player.chips
        if amount > all_in_total:
            return None, f"Cannot raise to ${amount}, only ${all_in_total} available"

        unit = self.config.bet_unit
        target = amount if amount == all_in_total else normalize_bet(amount, unit)
        if target <= self.current_bet:
            return None, f"Raise must be above the current bet of ${self.current_bet}"
        if target < self.current_bet + unit and target != all_in_total:
            return None, f"Minimum raise is to ${self.current_bet + unit}"
        return target, None

    def _reopen_action(self, raiser: Player) -> None:
        """A raise means everyone else still in with chips has to act again."""
        for player in self.players:
            if player is not raiser and not player.folded and not player.all_in:
                player.acted_this_round = False

    # Turn order --------------------------------------------------------

    def _advance_turn(self) -> None:
        """Move to the next player, or close the round, or end the hand."""
        remaining = [p for p in self.players if not p.folded]
        if len(remaining) == 1:
            self._award_uncontested(remaining[0])
            return

        if self._is_betting_round_complete():
            self._advance_phase()
            return

        nxt = self._find_seat(
            self.current_player_index,
            lambda p: p.can_act and not p.acted_this_round,
            laps=TURN_SEARCH_LAPS,
        )
        if nxt is None:
            logger.warning("No eligible player found for the next turn; forcing showdown")
            self._run_out_and_showdown()
            return

        self.current_player_index = nxt
        self._dispatch_turn()

    def _is_betting_round_complete(self) -> bool:
        """Everyone still able to bet has acted and matched the current bet."""
        return all(
            p.acted_this_round and p.bet == self.current_bet
            for p in self.players
            if not p.folded and not p.all_in
        )

    def _advance_phase(self) -> None:
        """Close the betting round and deal the next street."""
        for player in self.players:
            player.reset_for_new_round()
        self.current_bet = 0

        can_act = [p for p in self.players if not p.folded and not p.all_in]
        if len(can_act) <= 1:
            logger.debug("At most one player can still bet; dealing the rest of the board")
            self._run_out_and_showdown()
            return

        if self.phase == GamePhase.RIVER:
            self._showdown()
            return

        self._deal_street(NEXT_PHASE[self.phase])

        first = self._find_seat(self.dealer_position, lambda p: p.can_act)
        if first is None:
            logger.warning("No eligible player for the new street; going to showdown")
            self._run_out_and_showdown()
            return

        self.current_player_index = first
        self._dispatch_turn()

    def _deal_street(self, phase: GamePhase) -> None:
        self.deck.burn()
        cards = self.deck.deal(STREET_CARDS[phase])
        self.community_cards.extend(cards)
        self.phase = phase
        self._emit(STREET_EVENTS[phase], cards=[str(c) for c in cards])
        logger.debug(f"{phase.name}: {' '.join(str(c) for c in self.community_cards)}")

    def _run_out_and_showdown(self) -> None:
        while len(self.community_cards) < TOTAL_COMMUNITY_CARDS:
            self._deal_street(NEXT_PHASE[self.phase])
        self._showdown()

    def _dispatch_turn(self) -> None:
        """Queue the bot's turn, or wait for the human."""
        if not self.is_hand_running():
            return
        player = self.players[self.current_player_index]
        if player.is_bot:
            self._cancel_pending_turn()
            self._pending_turn = self.scheduler.schedule(
                self.config.bot_delay,
                partial(self._run_bot_turn, self.hand_number, self.current_player_index),
            )
        else:
            logger.debug(f"Waiting for {player.name}")

    def _cancel_pending_turn(self) -> None:
        if self._pending_turn is not None:
            self._pending_turn.cancel()
            self._pending_turn = None

    # Hand end ----------------------------------------------------------

    def _showdown_order(self) -> List[Player]:
        """Players still in, starting left of the dealer (odd chips go first)."""
        order = [self.players[(self.dealer_position + 1 + i) % self.num_players] for i in range(self.num_players)]
        return [p for p in order if not p.folded]

    def _showdown(self) -> None:
        """Compare the remaining hands and settle the pot."""
        self.phase = GamePhase.SHOWDOWN
        contenders = self._showdown_order()

        hands: Dict[int, RankedHand] = {
            p.player_id: best_of_7(p.hole_cards + self.community_cards) for p in contenders
        }

        winners = [contenders[0]]
        for player in contenders[1:]:
            result = compare(hands[player.player_id], hands[winners[0].player_id])
            if result > 0:
                winners = [player]
            elif result == 0:
                winners.append(player)

        descriptions = {pid: describe(hand) for pid, hand in hands.items()}
        self._emit(
            EventKind.SHOWDOWN,
            board=[str(c) for c in self.community_cards],
            players=[
                {
                    "player": p.name,
                    "cards": [str(c) for c in p.hole_cards],
                    "hand": descriptions[p.player_id] if p.player_id in descriptions else None,
                    "folded": p.folded,
                }
                for p in self.players if p.hole_cards
            ],
            winners=[w.name for w in winners],
        )
        logger.info(f"Showdown: {', '.join(w.name for w in winners)} win with {descriptions[winners[0].player_id]}")

        shares = self.pot_manager.settle(self.players, winners, self.pot, hands)
        self._pay(shares)
        self._finish_hand(winners, shares, showdown=True, hands=descriptions)

    def _award_uncontested(self, winner: Player) -> None:
        """Everyone else folded: no showdown."""
        shares = self.pot_manager.settle(self.players, [winner], self.pot)
        self._emit(EventKind.WIN_BY_FOLD, player=winner.name, amount=self.pot)
        logger.info(f"{winner.name} wins {self.pot} uncontested")
        self._pay(shares)
        self._finish_hand([winner], shares, showdown=False)

    def _pay(self, shares: Sequence[PotShare]) -> None:
        for share in shares:
            self.players[share.player_id].chips += share.amount
            self._emit(EventKind.POT_AWARDED, player=share.player_name, pot=share.pot, amount=share.amount)

    def _finish_hand(
        self,
        winners: List[Player],
        shares: List[PotShare],
        showdown: bool,
        hands: Optional[Dict[int, str]] = None,
    ) -> None:
        self.game_ended = True
        self.end_reason = EndReason.HAND_COMPLETE
        self._cancel_pending_turn()

        self.last_result = HandResult(
            hand_number=self.hand_number,
            pot=self.pot,
            winners=[w.player_id for w in winners],
            shares=list(shares),
            showdown=showdown,
            hands=hands or {},
        )
        self._emit(
            EventKind.HAND_ENDED,
            pot=self.pot,
            winners=[w.name for w in winners],
            chips={p.name: p.chips for p in self.players},
        )

        summary = {"winners": self.last_result.winners, "pot": self.pot, "showdown": showdown}
        for player in self.players:
            if player.is_bot:
                player.agent.on_hand_end(summary)

        self._rotate_dealer()

    def _rotate_dealer(self) -> None:
        nxt = self._find_seat(self.dealer_position, lambda p: p.chips >= self.config.small_blind)
        if nxt is not None:
            self.dealer_position = nxt

    # State views -------------------------------------------------------

    def legal_actions(self, player: Optional[Player] = None) -> List[Dict[str, Any]]:
        """
        Legal actions for the specified player (or current player).

        Returns:
            List of action dicts with type and constraints
        """
        if player is None:
            player = self.current_player
        if player is None or not player.can_act:
            return []

        to_call = min(max(0, self.current_bet - player.bet), player.chips)
        actions = [
            {"type": ActionType.FOLD.value},
            {"type": ActionType.CALL.value, "amount": to_call},
        ]

        max_total = player.bet + player.chips
        if max_total > self.current_bet:
            # Smallest total that survives rounding down to the bet unit
            unit = self.config.bet_unit
            min_raise = -(-(self.current_bet + unit) // unit) * unit
            min_total = min(min_raise, max_total)
            actions.append({"type": ActionType.RAISE.value, "min": min_total, "max": max_total})

        return actions

    def view(self, for_player_id: Optional[int] = None) -> TableView:
        """
        Read-only snapshot of the table.

        Args:
            for_player_id: If given, that player's hole cards are included
        """
        return TableView(
            hand_number=self.hand_number,
            phase=self.phase,
            players=tuple(
                PlayerView(
                    player_id=p.player_id,
                    name=p.name,
                    chips=p.chips,
                    bet=p.bet,
                    total_bet=p.total_bet,
                    folded=p.folded,
                    all_in=p.all_in,
                    acted_this_round=p.acted_this_round,
                    is_bot=p.is_bot,
                    hole_cards=tuple(p.hole_cards) if p.player_id == for_player_id else (),
                )
                for p in self.players
            ),
            community_cards=tuple(self.community_cards),
            pot=self.pot,
            current_bet=self.current_bet,
            dealer_position=self.dealer_position,
            current_player_index=self.current_player_index,
            small_blind=self.config.small_blind,
            big_blind=self.config.big_blind,
            bet_unit=self.config.bet_unit,
            game_ended=self.game_ended,
            viewer_id=for_player_id,
        )

    # Notifications -----------------------------------------------------

    def _emit(self, kind: EventKind, **details: Any) -> None:
        event = GameEvent(kind=kind, hand_number=self.hand_number, phase=self.phase.name, details=details)
        self.hand_history.append(event)
        self.observer.on_event(event)

    def _notify(self) -> None:
        self.observer.on_state_changed()


def _default_agent(seat: int, seed: Optional[int]) -> BaseAgent:
    return HeuristicAgent(name=f"heuristic-{seat}", seed=seed)
