#!/usr/bin/env python3
"""
Holdem Table - Terminal Driver

Plays one human against bots in the terminal. Bot turns are queued on a
ManualScheduler and run here, paced by the configured bot delay.

Usage:
    python run.py [--players N] [--small-blind SB] [--big-blind BB]
                  [--chips CHIPS] [--seed SEED] [--fast] [--verbose]
"""

import argparse
import logging
import sys
import time

from holdemtable import PokerGame, TableConfig, ConfigurationError
from holdemtable.core.events import EventKind, GameEvent, GameObserver
from holdemtable.core.rules import ActionType
from holdemtable.core.scheduler import ManualScheduler


logger = logging.getLogger("holdemtable.run")


class TerminalTable(GameObserver):
    """Prints one line per game event."""

    def on_event(self, event: GameEvent) -> None:
        line = format_event(event)
        if line:
            print(line)


def format_event(event: GameEvent) -> str:
    d = event.details
    kind = event.kind
    if kind == EventKind.HAND_STARTED:
        return f"\n=== Hand #{event.hand_number} (blinds {d['small_blind']}/{d['big_blind']}) ==="
    if kind == EventKind.BLIND_POSTED:
        return f"{d['player']} posts the {d['blind']} blind: ${d['amount']}"
    if kind == EventKind.FOLD:
        return f"{d['player']} folds"
    if kind == EventKind.CHECK:
        return f"{d['player']} checks"
    if kind == EventKind.CALL:
        return f"{d['player']} calls ${d['amount']}"
    if kind == EventKind.RAISE:
        return f"{d['player']} raises to ${d['to']}"
    if kind == EventKind.ALL_IN:
        return f"{d['player']} is ALL-IN (${d['total']})"
    if kind in (EventKind.FLOP, EventKind.TURN, EventKind.RIVER):
        return f"--- {kind.value.upper()}: {' '.join(d['cards'])} ---"
    if kind == EventKind.SHOWDOWN:
        lines = [f"Showdown on {' '.join(d['board'])}"]
        for p in d["players"]:
            status = "folded" if p["folded"] else p["hand"]
            lines.append(f"  {p['player']}: {' '.join(p['cards'])} ({status})")
        return "\n".join(lines)
    if kind == EventKind.POT_AWARDED:
        return f"{d['player']} wins ${d['amount']} from the {d['pot']} pot"
    if kind == EventKind.WIN_BY_FOLD:
        return "Everyone else folded"
    if kind == EventKind.GAME_ENDED:
        return f"Game over: {d['message']}"
    return ""


def show_table(game: PokerGame) -> None:
    view = game.view(for_player_id=game.config.human_seat)
    board = " ".join(str(c) for c in view.community_cards) or "-"
    print(f"\nBoard: {board}   Pot: ${view.pot}   To match: ${view.current_bet}")
    for p in view.players:
        marker = "D" if p.player_id == view.dealer_position else " "
        state = "folded" if p.folded else ("all-in" if p.all_in else "")
        cards = " ".join(str(c) for c in p.hole_cards)
        print(f" {marker} {p.name:<8} ${p.chips:<6} bet ${p.bet:<5} {cards} {state}")


def prompt_action(game: PokerGame):
    """Ask the human for an action until the engine accepts one."""
    show_table(game)
    legal = {a["type"]: a for a in game.legal_actions()}
    call = legal[ActionType.CALL.value]["amount"]
    options = ["[f]old", "[c]heck" if call == 0 else f"[c]all ${call}"]
    if ActionType.RAISE.value in legal:
        r = legal[ActionType.RAISE.value]
        options.append(f"[r]aise <total {r['min']}-{r['max']}>")

    while True:
        reply = input(f"Your move: {', '.join(options)} > ").strip().lower().split()
        if not reply:
            continue
        if reply[0] in ("q", "quit"):
            return None
        action = {"f": ActionType.FOLD, "c": ActionType.CALL, "r": ActionType.RAISE}.get(reply[0][0])
        if action is None:
            print("Unknown action")
            continue
        amount = None
        if action == ActionType.RAISE:
            try:
                amount = int(reply[1])
            except (IndexError, ValueError):
                print("Raise needs a total, e.g. 'r 300'")
                continue
        result = game.apply_player_action(action, amount)
        if result.success:
            return result
        print(result.message)


def play(game: PokerGame, scheduler: ManualScheduler) -> None:
    while True:
        if not game.start_hand():
            break

        while game.is_hand_running():
            if game.is_player_turn():
                if prompt_action(game) is None:
                    game.shutdown()
                    return
                continue
            time.sleep(game.config.bot_delay)
            if not scheduler.run_next():
                logger.error("Hand stalled with no pending turn")
                game.shutdown()
                return

        reply = input("\nPress Enter for the next hand, q to quit > ").strip().lower()
        if reply in ("q", "quit"):
            break

    game.shutdown()


def main():
    parser = argparse.ArgumentParser(description="Holdem Table - play No-Limit Hold'em against bots")
    parser.add_argument("--players", type=int, default=None, help="Seats at the table, 2-9")
    parser.add_argument("--small-blind", type=int, default=None, help="Small blind")
    parser.add_argument("--big-blind", type=int, default=None, help="Big blind")
    parser.add_argument("--chips", type=int, default=None, help="Starting chips")
    parser.add_argument("--name", default="You", help="Your name at the table")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the shuffle and the bots")
    parser.add_argument("--fast", action="store_true", help="Bots act without delay")
    parser.add_argument("--verbose", action="store_true", help="Log engine and bot reasoning")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    settings = {
        key: value for key, value in (
            ("player_count", args.players),
            ("small_blind", args.small_blind),
            ("big_blind", args.big_blind),
            ("starting_chips", args.chips),
        ) if value is not None
    }
    settings.update(human_name=args.name, seed=args.seed)
    if args.fast:
        settings["bot_delay"] = 0

    try:
        config = TableConfig.build(**settings)
    except ConfigurationError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        sys.exit(2)

    scheduler = ManualScheduler()
    game = PokerGame(config, observer=TerminalTable(), scheduler=scheduler)
    try:
        play(game, scheduler)
    except (KeyboardInterrupt, EOFError):
        game.shutdown()
        print()


if __name__ == "__main__":
    main()
