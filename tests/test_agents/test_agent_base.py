"""
Tests for the agent interface and the simple strategies.
"""

from holdemtable.core.rules import GamePhase, ActionType
from holdemtable.agents.base import BaseAgent, BotDecision
from holdemtable.agents.simple import CallAgent, RandomAgent
from test_heuristic import make_view


class TestBotDecision:
    """Tests for decision values."""

    def test_constructors(self):
        assert BotDecision.fold().action == ActionType.FOLD
        assert BotDecision.call().amount is None
        assert BotDecision.raise_to(300) == BotDecision(ActionType.RAISE, 300)

    def test_to_dict(self):
        assert BotDecision.raise_to(300).to_dict() == {"action": "RAISE", "amount": 300}


class TestRaiseTotal:
    """Tests for turning a wanted total into a legal raise."""

    def test_rounds_down_to_bet_unit(self):
        view = make_view("As Ah", current_bet=100)
        assert BaseAgent.raise_total(view, view.player(1), 347) == BotDecision.raise_to(340)

    def test_lifts_to_minimum_raise(self):
        view = make_view("As Ah", current_bet=100)
        assert BaseAgent.raise_total(view, view.player(1), 50) == BotDecision.raise_to(110)

    def test_caps_at_stack(self):
        view = make_view("As Ah", chips=255, bet=0, current_bet=100)
        assert BaseAgent.raise_total(view, view.player(1), 5000) == BotDecision.raise_to(255)

    def test_calls_when_it_cannot_raise(self):
        view = make_view("As Ah", chips=80, bet=0, current_bet=100)
        assert BaseAgent.raise_total(view, view.player(1), 500) == BotDecision.call()


class TestSimpleAgents:
    """Tests for CallAgent and RandomAgent."""

    def test_call_agent(self):
        view = make_view("7d 2c")
        assert CallAgent().decide(view, 1) == BotDecision.call()

    def test_random_agent_is_seeded(self):
        view = make_view("7d 2c", phase=GamePhase.FLOP, board="Ks Qh 9d")
        a, b = RandomAgent(seed=5), RandomAgent(seed=5)
        assert [a.decide(view, 1) for _ in range(30)] == [b.decide(view, 1) for _ in range(30)]

    def test_random_agent_never_folds_for_free(self):
        view = make_view("7d 2c", current_bet=0, bet=0)
        agent = RandomAgent(seed=1, fold_probability=1.0)
        assert all(agent.decide(view, 1).action != ActionType.FOLD for _ in range(20))

    def test_repr(self):
        assert repr(CallAgent(name="steady")) == "CallAgent(steady)"
