"""
Simple baseline strategies.

Useful as opponents in tests and as a sanity baseline for the heuristic
bot.
"""

from typing import Optional

from holdemtable.agents.base import BaseAgent, BotDecision
from holdemtable.core.view import TableView


class CallAgent(BaseAgent):
    """
    An agent that always calls (or checks).
    """

    def decide(self, view: TableView, player_id: int) -> BotDecision:
        return BotDecision.call()


class RandomAgent(BaseAgent):
    """
    An agent that picks random actions.

    The agent has configurable tendencies:
    - fold_probability: How likely to fold when facing a bet
    - raise_probability: How likely to raise instead of calling
    """

    def __init__(
        self,
        name: Optional[str] = None,
        seed: Optional[int] = None,
        fold_probability: float = 0.1,
        raise_probability: float = 0.3,
    ):
        super().__init__(name, seed)
        self.fold_probability = fold_probability
        self.raise_probability = raise_probability

    def decide(self, view: TableView, player_id: int) -> BotDecision:
        me = view.player(player_id)
        roll = self.rng.random()

        if view.call_amount(player_id) > 0 and roll < self.fold_probability:
            return BotDecision.fold()

        if roll < self.fold_probability + self.raise_probability:
            cap = me.bet + me.chips
            target = self.rng.randint(view.current_bet, max(view.current_bet, cap))
            return self.raise_total(view, me, target)

        return BotDecision.call()
