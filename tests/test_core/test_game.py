"""
Tests for the Texas Hold'em game engine: table setup, hand lifecycle,
configuration and the human action boundary.
"""

import pytest
from holdemtable.config import TableConfig, ConfigurationError
from holdemtable.core.events import EventKind
from holdemtable.core.game import PokerGame
from holdemtable.core.player import BotSeat, HumanSeat
from holdemtable.core.rules import GamePhase, ActionType, EndReason
from holdemtable.agents.heuristic import HeuristicAgent
from holdemtable.agents.base import BotDecision
from conftest import ScriptedAgent, play_out, total_chips


class TestGameInitialization:
    """Tests for table setup."""

    def test_default_table(self):
        """One human in seat 0 against six heuristic bots."""
        game = PokerGame()
        assert game.num_players == 7
        assert isinstance(game.players[0].controller, HumanSeat)
        assert game.players[0].name == "You"
        for bot in game.players[1:]:
            assert isinstance(bot.controller, BotSeat)
            assert isinstance(bot.agent, HeuristicAgent)
        assert all(p.chips == 1000 for p in game.players)

    def test_bot_names_skip_the_human_seat(self, make_game):
        game = make_game(player_count=3, human_seat=1, human_name="Ann")
        assert [p.name for p in game.players] == ["Bot 1", "Ann", "Bot 2"]
        assert game.human_player is game.players[1]

    def test_initial_state(self, three_player_game):
        """Nothing runs until the first hand starts."""
        assert three_player_game.phase == GamePhase.WAITING
        assert not three_player_game.is_hand_running()
        assert not three_player_game.is_player_turn()
        assert three_player_game.current_player is None

    def test_seeded_bots_get_distinct_seeds(self):
        seeds = []
        PokerGame(TableConfig(player_count=4, seed=10), agent_factory=lambda seat, seed: seeds.append(seed) or HeuristicAgent(seed=seed))
        assert seeds == [11, 12, 13]


class TestStartHand:
    """Tests for starting a hand."""

    def test_start_hand_changes_phase(self, three_player_game):
        assert three_player_game.start_hand()
        assert three_player_game.phase == GamePhase.PREFLOP
        assert three_player_game.is_hand_running()
        assert three_player_game.hand_number == 1

    def test_players_receive_cards(self, three_player_game):
        three_player_game.start_hand()
        for player in three_player_game.players:
            assert len(player.hole_cards) == 2
        assert three_player_game.community_cards == []
        assert three_player_game.deck.remaining == 52 - 6

    def test_hole_cards_are_unique(self, make_game):
        game = make_game(player_count=9)
        game.start_hand()
        dealt = [c for p in game.players for c in p.hole_cards]
        assert len(set(dealt)) == 18

    def test_blinds_posted(self, three_player_game):
        """Small blind left of the dealer, big blind next."""
        game = three_player_game
        game.start_hand()

        assert game.small_blind_position == 1
        assert game.big_blind_position == 2
        assert game.players[1].bet == 50
        assert game.players[2].bet == 100
        assert game.pot == 150
        assert game.current_bet == 100
        assert game.pot == sum(p.total_bet for p in game.players)

    def test_first_to_act_is_after_big_blind(self, three_player_game):
        three_player_game.start_hand()
        assert three_player_game.current_player_index == 0
        assert three_player_game.is_player_turn()

    def test_heads_up_small_blind_acts_first(self, heads_up_game):
        game = heads_up_game
        game.start_hand()
        assert game.small_blind_position == 1
        assert game.big_blind_position == 0
        assert game.current_player_index == 1
        assert game.scheduler.pending_count == 1

    def test_start_events(self, three_player_game, observer):
        three_player_game.start_hand()
        assert observer.kinds()[:3] == [EventKind.HAND_STARTED, EventKind.BLIND_POSTED, EventKind.BLIND_POSTED]
        assert three_player_game.hand_history[0].kind == EventKind.HAND_STARTED
        assert observer.changes == 1

    def test_cannot_start_twice(self, three_player_game):
        assert three_player_game.start_hand()
        assert not three_player_game.start_hand()
        assert three_player_game.hand_number == 1

    def test_short_blind_goes_all_in(self, three_player_game):
        """A small blind that uses the whole stack is an all-in."""
        game = three_player_game
        game.players[1].chips = 50
        game.start_hand()

        assert game.players[1].all_in
        assert game.players[1].chips == 0
        assert len(game.pot_manager.records) == 1
        assert EventKind.ALL_IN in [e.kind for e in game.hand_history]

    def test_negative_chips_clamped(self, three_player_game, caplog):
        """A negative stack is reset to zero and that player sits out."""
        game = three_player_game
        game.players[2].chips = -50
        with caplog.at_level("WARNING"):
            assert game.start_hand()

        assert game.players[2].chips == 0
        assert game.players[2].folded
        assert game.players[2].hole_cards == []
        assert game.big_blind_position == 0
        assert "Negative stack" in caplog.text
        assert EventKind.CHIPS_CLAMPED in [e.kind for e in game.hand_history]


class TestGameEnd:
    """Tests for conditions that stop the game."""

    def test_human_without_big_blind(self, three_player_game, observer):
        game = three_player_game
        game.players[0].chips = 99
        assert not game.start_hand()
        assert game.game_ended
        assert game.end_reason == EndReason.HUMAN_BUSTED
        assert observer.kinds() == [EventKind.GAME_ENDED]

    def test_not_enough_players(self, three_player_game):
        game = three_player_game
        game.players[1].chips = 0
        game.players[2].chips = 60
        assert not game.start_hand()
        assert game.end_reason == EndReason.NOT_ENOUGH_PLAYERS
        assert game.hand_number == 0

    def test_no_blind_positions(self, heads_up_game, monkeypatch):
        """A seat search that comes back empty ends the game instead of looping."""
        game = heads_up_game
        monkeypatch.setattr(game, "_find_seat", lambda *args, **kwargs: None)
        assert not game.start_hand()
        assert game.end_reason == EndReason.NO_BLIND_POSITIONS
        assert game.players[0].chips == 1000


class TestHumanActions:
    """Tests for the human action boundary."""

    def test_call(self, three_player_game):
        game = three_player_game
        game.start_hand()
        result = game.apply_player_action(ActionType.CALL)

        assert result.success
        assert result.amount == 100
        assert game.players[0].chips == 900
        assert game.pot == 250
        assert not game.is_player_turn()
        assert game.current_player_index == 1
        assert game.scheduler.pending_count == 1

    def test_action_as_string(self, three_player_game):
        three_player_game.start_hand()
        assert three_player_game.apply_player_action("call").success

    def test_unknown_action(self, three_player_game):
        three_player_game.start_hand()
        result = three_player_game.apply_player_action("bet")
        assert not result.success
        assert three_player_game.is_player_turn()

    def test_no_hand_in_progress(self, three_player_game):
        result = three_player_game.apply_player_action(ActionType.CALL)
        assert not result.success
        assert "No hand" in result.message

    def test_out_of_turn(self, three_player_game):
        game = three_player_game
        game.start_hand()
        game.apply_player_action(ActionType.CALL)
        pot = game.pot

        result = game.apply_player_action(ActionType.CALL)
        assert not result.success
        assert result.message == "Not your turn"
        assert game.pot == pot

    def test_fold_then_bots_finish(self, three_player_game):
        game = three_player_game
        game.start_hand()
        assert game.apply_player_action(ActionType.FOLD).success
        assert game.players[0].folded

        play_out(game)
        assert game.players[0].chips == 1000
        assert total_chips(game) == 3000

    def test_each_action_notifies_once(self, three_player_game, observer):
        game = three_player_game
        game.start_hand()
        before = observer.changes
        game.apply_player_action(ActionType.CALL)
        assert observer.changes == before + 1

        game.scheduler.run_next()
        assert observer.changes == before + 2

    def test_rejected_action_does_not_notify(self, three_player_game, observer):
        game = three_player_game
        game.start_hand()
        before = observer.changes
        game.apply_player_action(ActionType.RAISE, 5000)
        assert observer.changes == before


class TestHandLifecycle:
    """Tests for whole hands driven to the end."""

    def test_fold_out_awards_pot_without_showdown(self, make_game, observer):
        """Both bots fold to the human's call: the human takes the 250 pot."""
        game = make_game(agent_factory=lambda seat, seed: ScriptedAgent([BotDecision.fold()]))
        game.start_hand()
        game.apply_player_action(ActionType.CALL)
        game.scheduler.run_pending()

        assert not game.is_hand_running()
        assert game.end_reason == EndReason.HAND_COMPLETE
        assert game.pot == 250
        assert game.players[0].chips == 1150
        assert game.community_cards == []
        assert not game.last_result.showdown
        assert game.last_result.winners == [0]
        assert EventKind.WIN_BY_FOLD in observer.kinds()
        assert EventKind.SHOWDOWN not in observer.kinds()

    def test_checked_down_hand_reaches_showdown(self, three_player_game, observer):
        game = three_player_game
        game.start_hand()
        play_out(game)

        assert game.phase == GamePhase.SHOWDOWN
        assert len(game.community_cards) == 5
        assert game.last_result.showdown
        assert total_chips(game) == 3000
        kinds = observer.kinds()
        assert kinds.index(EventKind.FLOP) < kinds.index(EventKind.TURN) < kinds.index(EventKind.RIVER)
        assert kinds[-1] == EventKind.HAND_ENDED

    def test_burn_before_each_street(self, three_player_game):
        game = three_player_game
        game.start_hand()
        play_out(game)
        # 6 hole cards, 3 burns, 5 board cards
        assert game.deck.remaining == 52 - 14

    def test_dealer_rotates(self, three_player_game):
        game = three_player_game
        game.start_hand()
        play_out(game)
        assert game.dealer_position == 1

        game.start_hand()
        assert game.small_blind_position == 2
        assert game.big_blind_position == 0
        assert game.current_player_index == 1

    def test_dealer_skips_short_stacks(self, make_game):
        game = make_game(player_count=4, agent_factory=lambda seat, seed: ScriptedAgent([BotDecision.fold()]))
        game.start_hand()
        game.players[1].chips = 10
        # Seat 3 acts first and folds, then the human calls
        game.scheduler.run_pending()
        assert game.apply_player_action(ActionType.CALL).success
        game.scheduler.run_pending()
        assert game.last_result.winners == [0]
        assert game.dealer_position == 2

    def test_chips_conserved_over_many_hands(self, make_game):
        game = make_game(player_count=5)
        for _ in range(10):
            if not game.start_hand():
                break
            play_out(game)
            assert total_chips(game) == 5000


class TestConfigure:
    """Tests for reconfiguring the table."""

    def test_applied_at_next_hand(self, three_player_game):
        game = three_player_game
        game.configure(small_blind=25, big_blind=50, starting_chips=2000, player_count=4)
        assert game.num_players == 3

        game.start_hand()
        assert game.num_players == 4
        assert game.config.big_blind == 50
        assert game.pot == 75
        assert total_chips(game) == 8000

    def test_reset_stacks(self, three_player_game):
        game = three_player_game
        game.players[0].chips = 20
        assert not game.start_hand()

        game.configure(starting_chips=1000)
        assert game.start_hand()
        assert game.players[0].chips == 1000

    @pytest.mark.parametrize("settings", [
        {"small_blind": 200, "big_blind": 100},
        {"player_count": 1},
        {"player_count": 10},
        {"starting_chips": 50},
        {"small_blind": 0},
    ])
    def test_invalid_settings_rejected(self, three_player_game, settings):
        game = three_player_game
        with pytest.raises(ConfigurationError):
            game.configure(**settings)
        game.start_hand()
        assert game.num_players == 3
        assert game.config.big_blind == 100

    def test_shrinking_table_moves_human(self, make_game):
        game = make_game(player_count=5, human_seat=4)
        game.configure(player_count=3)
        game.start_hand()
        assert game.config.human_seat == 0

    def test_configure_abandons_running_hand(self, heads_up_game):
        game = heads_up_game
        game.start_hand()
        assert game.scheduler.pending_count == 1

        game.configure(player_count=3)
        assert not game.is_hand_running()
        assert game.scheduler.pending_count == 0
        assert game.start_hand()


class TestViewsAndTeardown:
    """Tests for read-only views, legal actions and shutdown."""

    def test_view_hides_other_hole_cards(self, three_player_game):
        game = three_player_game
        game.start_hand()
        view = game.view(for_player_id=0)

        assert view.player(0).hole_cards == tuple(game.players[0].hole_cards)
        assert view.player(1).hole_cards == ()
        assert view.call_amount(0) == 100
        assert view.current_player.player_id == 0
        assert game.view().player(0).hole_cards == ()

    def test_view_to_dict(self, three_player_game):
        game = three_player_game
        game.start_hand()
        data = game.view(for_player_id=0).to_dict()
        assert data["phase"] == "PREFLOP"
        assert data["pot"] == 150
        assert "cards" in data["players"][0]
        assert "cards" not in data["players"][1]

    def test_view_is_a_snapshot(self, three_player_game):
        game = three_player_game
        game.start_hand()
        view = game.view()
        game.apply_player_action(ActionType.CALL)
        assert view.pot == 150

    def test_legal_actions(self, three_player_game):
        game = three_player_game
        game.start_hand()
        assert game.legal_actions() == [
            {"type": "FOLD"},
            {"type": "CALL", "amount": 100},
            {"type": "RAISE", "min": 110, "max": 1000},
        ]

    def test_legal_actions_when_idle(self, three_player_game):
        assert three_player_game.legal_actions() == []

    def test_shutdown_cancels_pending_turns(self, heads_up_game):
        game = heads_up_game
        game.start_hand()
        assert game.scheduler.pending_count == 1

        game.shutdown()
        assert game.scheduler.pending_count == 0
        assert not game.scheduler.run_next()

    def test_stale_bot_turn_is_ignored(self, heads_up_game):
        game = heads_up_game
        game.start_hand()
        pot = game.pot

        game._run_bot_turn(hand_number=99, seat=1)
        game._run_bot_turn(hand_number=game.hand_number, seat=0)
        assert game.pot == pot
        assert game.players[1].bet == 50

    def test_bot_turn_uses_configured_delay(self, make_game):
        game = make_game(player_count=2, bot_delay=0.5)
        game.start_hand()
        assert game._pending_turn.delay == 0.5
