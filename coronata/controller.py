"""
Game Controller - orchestrates solitaire sessions and Coronata runs.

The controller holds no game state. It provides a clean interface for:
- Dealing and playing solitaire sessions (with scoring and win detection)
- Starting runs at an ascension level and advancing them
- Trading, wandering and closing runs into history records

All operations return new state snapshots and event logs. Every event is
also handed to the controller's observer, which by default writes it to
the ``coronata`` logger.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from coronata.types import (
    Coins,
    PileKind,
    RandomSource,
    Score,
    TOTAL_TRIALS,
)
from coronata.models import (
    AscensionState,
    GameState,
    RunState,
    RunSummary,
    ScoreState,
)
from coronata.events import (
    GameEvent,
    CardMovedEvent,
    GameWonEvent,
    PurchaseRejectedEvent,
    WARNING_EVENTS,
)
from coronata import solitaire
from coronata.solitaire import MoveResult
from coronata.ascension import create_ascension_setup
from coronata.economy import TradeShopConfig, get_reroll_cost, get_trade_shop_config
from coronata.profiles import is_supported_rule_set
from coronata.progression import record_ascension_completion
from coronata.run_flow import (
    EncounterOutcome,
    complete_encounter,
    initialize_run_flow,
    process_fortune_swap,
    process_trade,
    process_wander,
    spend_coins,
)

logger = logging.getLogger("coronata")

EventObserver = Callable[[GameEvent], None]


def log_event(event: GameEvent) -> None:
    """Default observer: configuration problems at WARNING, everything else at DEBUG."""
    if isinstance(event, WARNING_EVENTS):
        logger.warning("%s: %s", event.event_type, event)
    else:
        logger.debug("%s: %s", event.event_type, event)


class GameController:
    """
    Orchestrates sessions and runs and provides APIs for game interaction.

    The controller is stateless apart from its observer - all state is
    passed in and returned. Randomness is always passed in explicitly.

    Usage:
        controller = GameController()
        state, events = controller.create_game(random.Random(7))
        state, events = controller.draw_from_stock(state)
        run, events = controller.start_run(ascension_state)
        run, outcome = controller.complete_encounter(run, True, rng)
    """

    def __init__(self, observer: EventObserver | None = log_event) -> None:
        self.observer = observer

    def _notify(self, events: list[GameEvent] | tuple[GameEvent, ...]) -> None:
        if self.observer is None:
            return
        for event in events:
            self.observer(event)

    # =========================================================================
    # Solitaire Sessions
    # =========================================================================

    def create_game(self, rng: RandomSource, rule_set: str = "klondike") -> tuple[GameState, list[GameEvent]]:
        """
        Shuffle a fresh deck and deal a new session.

        Raises:
            ValueError: If this engine does not govern ``rule_set``
        """
        if not is_supported_rule_set(rule_set):
            raise ValueError(f"Unsupported rule set: {rule_set}")

        layout = solitaire.deal_solitaire(solitaire.shuffle(solitaire.create_deck(), rng))
        return GameState(layout=layout, score=ScoreState(), rule_set=rule_set), []

    def _apply_move(self, state: GameState, result: MoveResult) -> tuple[GameState, list[GameEvent]]:
        """Score the cards a successful move placed and check for a win."""
        events: list[GameEvent] = list(result.events)
        if not result.moved:
            self._notify(events)
            return state, events

        score = state.score
        for event in result.events:
            if not isinstance(event, CardMovedEvent):
                continue
            if event.destination == PileKind.TABLEAU:
                score, score_events = solitaire.update_score_for_play(event.card, score)
            elif event.destination == PileKind.FOUNDATION:
                score, score_events = solitaire.update_score_for_foundation(event.card, score)
            else:
                continue
            events.extend(score_events)

        won = solitaire.check_win(result.layout.foundations)
        if won and not state.won:
            events.append(GameWonEvent(score=score.score))

        state = replace(state, layout=result.layout, score=score, moves=state.moves + 1, won=won)
        self._notify(events)
        return state, events

    def move_tableau_to_tableau(
        self,
        state: GameState,
        from_col: int,
        card_index: int,
        to_col: int,
    ) -> tuple[GameState, list[GameEvent]]:
        result = solitaire.move_tableau_to_tableau(state.layout, from_col, card_index, to_col)
        return self._apply_move(state, result)

    def move_tableau_to_foundation(self, state: GameState, col: int) -> tuple[GameState, list[GameEvent]]:
        return self._apply_move(state, solitaire.move_tableau_to_foundation(state.layout, col))

    def move_waste_to_tableau(self, state: GameState, to_col: int) -> tuple[GameState, list[GameEvent]]:
        return self._apply_move(state, solitaire.move_waste_to_tableau(state.layout, to_col))

    def move_waste_to_foundation(self, state: GameState) -> tuple[GameState, list[GameEvent]]:
        return self._apply_move(state, solitaire.move_waste_to_foundation(state.layout))

    def draw_from_stock(self, state: GameState) -> tuple[GameState, list[GameEvent]]:
        return self._apply_move(state, solitaire.draw_from_stock(state.layout))

    def recycle_waste(self, state: GameState) -> tuple[GameState, list[GameEvent]]:
        return self._apply_move(state, solitaire.reset_stock_from_waste(state.layout))

    def auto_play(self, state: GameState) -> tuple[GameState, list[GameEvent]]:
        """Repeat the one-shot foundation pass until it stops moving cards."""
        all_events: list[GameEvent] = []
        while True:
            result = solitaire.auto_move_to_foundation(state.layout)
            if not result.moved:
                return state, all_events
            state, events = self._apply_move(state, result)
            all_events.extend(events)

    # =========================================================================
    # Coronata Runs
    # =========================================================================

    def start_run(self, ascension_state: AscensionState) -> tuple[RunState, list[GameEvent]]:
        """Start a run at the player's current ascension level."""
        setup, events = create_ascension_setup(ascension_state.current_level)
        flow = initialize_run_flow(setup.ascension_level, setup.coins)
        self._notify(events)
        return RunState(setup=setup, flow=flow), events

    def complete_encounter(
        self,
        run: RunState,
        success: bool,
        rng: RandomSource,
    ) -> tuple[RunState, EncounterOutcome]:
        """Finish the current encounter; the outcome carries the queued events."""
        outcome = complete_encounter(run.flow, success, rng)
        self._notify(outcome.events)
        return run.with_flow(outcome.updated_flow), outcome

    def fortune_swap(self, run: RunState) -> tuple[RunState, list[GameEvent]]:
        flow, events = process_fortune_swap(run.flow)
        self._notify(events)
        return run.with_flow(flow), events

    def open_trade(self, run: RunState) -> tuple[RunState, TradeShopConfig]:
        """Shop layout for the current trial; resets the reroll counter."""
        trade_number = min(run.flow.current_trial, TOTAL_TRIALS)
        return replace(run, rerolls=0), get_trade_shop_config(trade_number)

    def reroll_shop(self, run: RunState) -> tuple[RunState, list[GameEvent]]:
        """Pay for a shop reroll; each reroll at the same trade costs double."""
        cost = get_reroll_cost(run.rerolls, run.flow.ascension_level)
        if cost > run.flow.coins:
            events: list[GameEvent] = [
                PurchaseRejectedEvent(item="reroll", cost=Coins(cost), balance=run.flow.coins)
            ]
            self._notify(events)
            return run, events

        flow, events = spend_coins(run.flow, cost)
        self._notify(events)
        return replace(run, flow=flow, rerolls=run.rerolls + 1), events

    def purchase(self, run: RunState, item: str, cost: int) -> tuple[RunState, list[GameEvent]]:
        """Buy an item at a trade; negative costs and purchases the run cannot afford are refused."""
        if cost < 0 or cost > run.flow.coins:
            events: list[GameEvent] = [
                PurchaseRejectedEvent(item=item, cost=Coins(cost), balance=run.flow.coins)
            ]
            self._notify(events)
            return run, events

        flow, events = spend_coins(run.flow, cost)
        self._notify(events)
        return replace(run, flow=flow, items=(*run.items, item)), events

    def close_trade(self, run: RunState) -> tuple[RunState, list[GameEvent]]:
        """Leave the current Trade, consuming it from the pending queue."""
        flow, events = process_trade(run.flow, 0)
        self._notify(events)
        return replace(run, flow=flow, rerolls=0), events

    def wander(self, run: RunState, coin_reward: int) -> tuple[RunState, list[GameEvent]]:
        flow, events = process_wander(run.flow, coin_reward)
        self._notify(events)
        return run.with_flow(flow), events

    def finish_run(
        self,
        ascension_state: AscensionState,
        run: RunState,
        score: int,
        victory: bool,
        duration_seconds: float = 0.0,
    ) -> tuple[AscensionState, RunSummary, list[GameEvent]]:
        """
        Record a finished run against the player's ascension progress.

        Returns:
            Tuple of (new_ascension_state, run_summary, events)
        """
        ascension_state, events = record_ascension_completion(
            ascension_state, run.flow.ascension_level, score, victory
        )
        summary = RunSummary(
            score=Score(score),
            encounters_completed=len(run.flow.completed_encounters),
            duration_seconds=duration_seconds,
            items=run.items,
            ascension_level=run.flow.ascension_level,
            victory=victory,
        )
        self._notify(events)
        return ascension_state, summary, events
