"""
Texas Hold'em Rules and Constants.

Table defaults follow the house game this engine was built for: blinds
50/100, 1000 starting chips, one human against six bots, and every bet
rounded to a 10-chip unit.
"""

from enum import Enum, auto


class GamePhase(Enum):
    """Phases of a Texas Hold'em hand."""
    WAITING = auto()      # No hand dealt yet
    PREFLOP = auto()      # After hole cards dealt, before flop
    FLOP = auto()         # After 3 community cards
    TURN = auto()         # After 4th community card
    RIVER = auto()        # After 5th community card
    SHOWDOWN = auto()     # Determine winner


class ActionType(Enum):
    """Possible player actions. A call with nothing to call is a check."""
    FOLD = "FOLD"
    CALL = "CALL"
    RAISE = "RAISE"


class EndReason(Enum):
    """Why the engine stopped accepting actions."""
    HAND_COMPLETE = "hand_complete"
    HUMAN_BUSTED = "human_busted"
    NOT_ENOUGH_PLAYERS = "not_enough_players"
    NO_BLIND_POSITIONS = "no_blind_positions"


# Default game settings
DEFAULT_SMALL_BLIND = 50
DEFAULT_BIG_BLIND = 100
DEFAULT_STARTING_CHIPS = 1000
DEFAULT_PLAYER_COUNT = 7
DEFAULT_BET_UNIT = 10
DEFAULT_BOT_DELAY = 1.5
MIN_PLAYERS = 2
MAX_PLAYERS = 9

# Cards per phase
HOLE_CARDS = 2
FLOP_CARDS = 3
TURN_CARDS = 1
RIVER_CARDS = 1
TOTAL_COMMUNITY_CARDS = 5

# Seat searches give up after this many laps around the table
SEAT_SEARCH_LAPS = 2
TURN_SEARCH_LAPS = 3

STREET_CARDS = {
    GamePhase.FLOP: FLOP_CARDS,
    GamePhase.TURN: TURN_CARDS,
    GamePhase.RIVER: RIVER_CARDS,
}

NEXT_PHASE = {
    GamePhase.PREFLOP: GamePhase.FLOP,
    GamePhase.FLOP: GamePhase.TURN,
    GamePhase.TURN: GamePhase.RIVER,
    GamePhase.RIVER: GamePhase.SHOWDOWN,
}


def normalize_bet(amount: int, bet_unit: int) -> int:
    """Round an amount down to a multiple of the bet unit."""
    if bet_unit <= 0:
        return amount
    return (amount // bet_unit) * bet_unit


def next_seat(index: int, num_players: int) -> int:
    """Seat to the left of ``index``, wrapping around the table."""
    return (index + 1) % num_players
