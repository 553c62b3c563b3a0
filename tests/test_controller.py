"""
Tests for the GameController.

Tests cover:
- Dealing sessions and rejecting unsupported rule sets
- Scoring, move counting and win detection through moves
- Exhaustive auto-play
- Running a Coronata run from start to summary
- Observer notification and the default logging observer
"""

import logging
import random

import pytest

from coronata.types import Rank, RunEventType, Suit
from coronata.models import AscensionState, Card, GameState, ScoreState, empty_layout
from coronata.events import (
    CardScoredEvent,
    CoinsSpentEvent,
    GameWonEvent,
    InvalidAscensionLevelEvent,
    LevelUnlockedEvent,
    MoveRejectedEvent,
    PurchaseRejectedEvent,
    StockDrawnEvent,
)
from coronata.controller import GameController, log_event
from coronata.progression import create_ascension_state
from coronata.run_flow import is_run_complete


def up(suit: Suit, rank: Rank) -> Card:
    """Helper to create a face-up card."""
    return Card(suit=suit, rank=rank, face_up=True)


def state_with(layout) -> GameState:
    """Helper to wrap a layout in a fresh session."""
    return GameState(layout=layout, score=ScoreState(), rule_set="klondike")


@pytest.fixture
def controller() -> GameController:
    """A controller that does not log."""
    return GameController(observer=None)


# =============================================================================
# Session Tests
# =============================================================================


class TestCreateGame:
    """Tests for dealing sessions."""

    def test_deals_full_deck(self, controller: GameController) -> None:
        state, _ = controller.create_game(random.Random(3))

        assert len(state.layout.all_cards()) == 52
        assert state.score.score == 0
        assert state.moves == 0
        assert not state.won
        assert state.rule_set == "klondike"

    def test_same_seed_same_deal(self, controller: GameController) -> None:
        first, _ = controller.create_game(random.Random(9))
        second, _ = controller.create_game(random.Random(9))

        assert first.layout == second.layout

    def test_coronata_rule_set_supported(self, controller: GameController) -> None:
        state, _ = controller.create_game(random.Random(3), rule_set="coronata")

        assert state.rule_set == "coronata"

    def test_unsupported_rule_set_raises(self, controller: GameController) -> None:
        with pytest.raises(ValueError, match="spider"):
            controller.create_game(random.Random(3), rule_set="spider")


class TestSessionMoves:
    """Tests for scoring and counting moves."""

    def test_foundation_move_scores_double(self, controller: GameController) -> None:
        state = state_with(empty_layout().with_waste((up(Suit.HEARTS, Rank.ACE),)))

        state, events = controller.move_waste_to_foundation(state)

        assert state.score.score == 2
        assert state.moves == 1
        assert any(isinstance(e, CardScoredEvent) for e in events)

    def test_play_scores_once(self, controller: GameController) -> None:
        layout = (
            empty_layout()
            .with_tableau_column(0, (up(Suit.SPADES, Rank.KING),))
            .with_tableau_column(1, (up(Suit.CLUBS, Rank.KING),))
            .with_waste((up(Suit.HEARTS, Rank.QUEEN),))
        )
        state = state_with(layout)

        state, _ = controller.move_waste_to_tableau(state, 0)
        assert state.score.score == 12

        state, _ = controller.move_tableau_to_tableau(state, 0, 1, 1)
        assert state.score.score == 12
        assert state.moves == 2

    def test_rejected_move_changes_nothing(self, controller: GameController) -> None:
        state = state_with(empty_layout())

        result, events = controller.draw_from_stock(state)

        assert result is state
        assert isinstance(events[0], MoveRejectedEvent)

    def test_draw_and_recycle_count_as_moves(self, controller: GameController) -> None:
        state = state_with(empty_layout().with_stock((Card(Suit.SPADES, Rank.FIVE),)))

        state, events = controller.draw_from_stock(state)
        assert isinstance(events[0], StockDrawnEvent)
        state, _ = controller.recycle_waste(state)

        assert state.moves == 2
        assert state.score.score == 0
        assert state.layout.stock == (Card(Suit.SPADES, Rank.FIVE),)

    def test_tableau_to_foundation(self, controller: GameController) -> None:
        state = state_with(empty_layout().with_tableau_column(4, (up(Suit.DIAMONDS, Rank.ACE),)))

        state, _ = controller.move_tableau_to_foundation(state, 4)

        assert state.layout.foundations[0] == (up(Suit.DIAMONDS, Rank.ACE),)
        assert state.score.score == 2


class TestAutoPlay:
    """Tests for exhaustive auto-play."""

    def test_runs_until_nothing_moves(self, controller: GameController) -> None:
        layout = (
            empty_layout()
            .with_tableau_column(0, (up(Suit.SPADES, Rank.TWO),))
            .with_tableau_column(1, (up(Suit.SPADES, Rank.ACE),))
        )

        state, _ = controller.auto_play(state_with(layout))

        assert state.layout.foundations[0] == (up(Suit.SPADES, Rank.ACE), up(Suit.SPADES, Rank.TWO))
        assert state.score.score == 2 * 1 + 2 * 2

    def test_nothing_to_move(self, controller: GameController) -> None:
        state = state_with(empty_layout())

        result, events = controller.auto_play(state)

        assert result is state
        assert events == []

    def test_finishing_the_foundations_wins(self, controller: GameController) -> None:
        foundations = tuple(tuple(up(suit, rank) for rank in list(Rank)[:-1]) for suit in Suit)
        layout = empty_layout()
        for index, pile in enumerate(foundations):
            layout = layout.with_foundation(index, pile)
        for col, suit in enumerate(Suit):
            layout = layout.with_tableau_column(col, (up(suit, Rank.KING),))

        state, events = controller.auto_play(state_with(layout))

        assert state.won
        assert sum(isinstance(e, GameWonEvent) for e in events) == 1


# =============================================================================
# Run Tests
# =============================================================================


class TestRuns:
    """Tests for driving a Coronata run."""

    def test_start_run_at_tier_zero(self, controller: GameController) -> None:
        run, events = controller.start_run(create_ascension_state())

        assert run.flow.coins == 50
        assert run.setup.ascension_level == 0
        assert run.items == ()
        assert events == []

    def test_start_run_uses_current_level(self, controller: GameController) -> None:
        state = AscensionState(current_level=2, unlocked_levels=frozenset({0, 1, 2}))

        run, events = controller.start_run(state)

        assert run.flow.ascension_level == 2
        assert run.flow.coins == 40
        assert len(events) > 0

    def test_complete_encounter_updates_run(self, controller: GameController) -> None:
        run, _ = controller.start_run(create_ascension_state())

        run, outcome = controller.complete_encounter(run, True, random.Random(4))

        assert run.flow is outcome.updated_flow
        assert run.flow.current_encounter == 2
        assert RunEventType.TRADE in run.flow.pending_events

    def test_purchases_at_one_trade(self, controller: GameController) -> None:
        run, _ = controller.start_run(create_ascension_state())
        run, _ = controller.complete_encounter(run, False, random.Random(4))

        run, config = controller.open_trade(run)
        assert config.exploit_slots == 3
        run, events = controller.purchase(run, "lucky_coin", 15)
        run, _ = controller.purchase(run, "whetstone", 8)

        assert run.flow.coins == 27
        assert run.items == ("lucky_coin", "whetstone")
        assert events == [CoinsSpentEvent(amount=15, balance=35)]
        assert RunEventType.TRADE in run.flow.pending_events

        run, _ = controller.close_trade(run)
        assert RunEventType.TRADE not in run.flow.pending_events
        assert run.flow.coins == 27

    def test_unaffordable_purchase_is_refused(self, controller: GameController) -> None:
        run, _ = controller.start_run(create_ascension_state())

        result, events = controller.purchase(run, "crown", 80)

        assert result is run
        assert events == [PurchaseRejectedEvent(item="crown", cost=80, balance=50)]

    def test_negative_cost_purchase_is_refused(self, controller: GameController) -> None:
        run, _ = controller.start_run(create_ascension_state())

        result, events = controller.purchase(run, "crown", -1000)

        assert result is run
        assert result.flow.coins == 50
        assert events == [PurchaseRejectedEvent(item="crown", cost=-1000, balance=50)]

    def test_rerolls_double_and_reset(self, controller: GameController) -> None:
        run, _ = controller.start_run(create_ascension_state())

        run, _ = controller.reroll_shop(run)
        run, _ = controller.reroll_shop(run)
        assert run.flow.coins == 50 - 5 - 10
        assert run.rerolls == 2

        run, _ = controller.open_trade(run)
        assert run.rerolls == 0

    def test_wander_and_fortune_swap(self, controller: GameController) -> None:
        run, _ = controller.start_run(create_ascension_state())

        run, _ = controller.wander(run, 6)
        run, _ = controller.fortune_swap(run)

        assert run.flow.coins == 56
        assert not run.flow.fortune_swap_due

    def test_full_run_to_summary(self, controller: GameController) -> None:
        rng = random.Random(21)
        ascension = create_ascension_state()
        run, _ = controller.start_run(ascension)
        while not is_run_complete(run.flow):
            run, _ = controller.complete_encounter(run, True, rng)

        ascension, summary, events = controller.finish_run(ascension, run, 4200, True, duration_seconds=61.5)

        assert summary.encounters_completed == 15
        assert summary.victory
        assert summary.score == 4200
        assert summary.duration_seconds == 61.5
        assert ascension.total_ascensions == 1
        assert 1 in ascension.unlocked_levels
        assert LevelUnlockedEvent(level=1) in events


# =============================================================================
# Observer Tests
# =============================================================================


class TestObserver:
    """Tests for event notification."""

    def test_observer_receives_events(self) -> None:
        seen = []
        controller = GameController(observer=seen.append)
        state = state_with(empty_layout().with_waste((up(Suit.HEARTS, Rank.ACE),)))

        _, events = controller.move_waste_to_foundation(state)

        assert seen == events

    def test_observer_sees_rejections(self) -> None:
        seen = []
        controller = GameController(observer=seen.append)

        controller.draw_from_stock(state_with(empty_layout()))

        assert len(seen) == 1
        assert isinstance(seen[0], MoveRejectedEvent)

    def test_problem_events_logged_as_warnings(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="coronata"):
            log_event(InvalidAscensionLevelEvent(level=12, operation="select_ascension_level"))

        assert caplog.records[0].levelno == logging.WARNING
        assert "invalid_ascension_level" in caplog.text

    def test_play_events_logged_at_debug(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="coronata"):
            log_event(StockDrawnEvent(card=up(Suit.CLUBS, Rank.NINE)))

        assert caplog.records[0].levelno == logging.DEBUG
