"""
Run flow state machine: five trials of three encounters each.

Position is (trial, encounter). Encounters 1 and 2 of a trial are Fear,
encounter 3 is Danger. After a Fear the player gets one Trade and two
Wanders in random order; after a Danger a fortune swap is due and, half of
the time, a bonus Trade. Finishing the last encounter of the last trial
queues the final Trade and moves the run past its last trial, which is
what ``is_run_complete`` and ``is_usurper_due`` test for.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from coronata.types import (
    AscensionTier,
    Coins,
    EncounterNumber,
    EncounterType,
    RandomSource,
    RunEventType,
    Score,
    TrialNumber,
    DEFAULT_SCORE_GOAL,
    ENCOUNTERS_PER_TRIAL,
    STARTING_COINS,
)
from coronata.models import EncounterResult, RunFlow
from coronata.ascension import calculate_ascension_reward, calculate_ascension_score_goal
from coronata.economy import roll_encounter_reward
from coronata.solitaire import shuffle
from coronata.events import (
    GameEvent,
    CoinsGainedEvent,
    CoinsSpentEvent,
    EncounterCompletedEvent,
    FortuneSwapResolvedEvent,
    RunAlreadyCompleteEvent,
    RunCompletedEvent,
    RunEventsQueuedEvent,
)


# Base score goals for the 15 encounters of a run (5 trials x 3 encounters)
BASE_SCORE_GOALS: tuple[int, ...] = (
    112, 149, 224,  # Trial 1
    336, 392, 448,  # Trial 2
    672, 784, 896,  # Trial 3
    1344, 1568, 1792,  # Trial 4
    2688, 3136, 3584,  # Trial 5
)

BONUS_TRADE_CHANCE = 0.5


# =============================================================================
# Queries
# =============================================================================


def initialize_run_flow(ascension_level: int = 0, coins: int = STARTING_COINS) -> RunFlow:
    """A run positioned at trial 1, encounter 1."""
    return RunFlow(ascension_level=AscensionTier(ascension_level), coins=Coins(coins))


def get_current_encounter_type(flow: RunFlow) -> EncounterType:
    return EncounterType.DANGER if flow.current_encounter == flow.encounters_per_trial else EncounterType.FEAR


def get_total_encounters(flow: RunFlow) -> int:
    return flow.total_trials * flow.encounters_per_trial


def get_current_encounter_number(flow: RunFlow) -> int:
    """1-indexed encounter number across the whole run (1..15)."""
    return (flow.current_trial - 1) * flow.encounters_per_trial + flow.current_encounter


def get_scaled_score_goal(trial: int, encounter: int, ascension_level: int) -> int:
    """Base goal for the encounter, scaled by the tier's score multiplier."""
    encounter_number = (trial - 1) * ENCOUNTERS_PER_TRIAL + encounter
    if 1 <= encounter_number <= len(BASE_SCORE_GOALS):
        base_goal = BASE_SCORE_GOALS[encounter_number - 1]
    else:
        base_goal = DEFAULT_SCORE_GOAL
    return calculate_ascension_score_goal(base_goal, ascension_level)


def is_run_complete(flow: RunFlow) -> bool:
    return flow.current_trial > flow.total_trials


def is_usurper_due(flow: RunFlow) -> bool:
    """The final Usurper encounter follows the last trial."""
    return flow.current_trial > flow.total_trials


# =============================================================================
# Transitions
# =============================================================================


@dataclass(frozen=True, slots=True)
class EncounterOutcome:
    """Result of ``complete_encounter``."""

    updated_flow: RunFlow
    result: EncounterResult | None
    """None when the run had already ended."""

    next_events: tuple[RunEventType, ...]
    events: tuple[GameEvent, ...] = ()


def complete_encounter(flow: RunFlow, success: bool, rng: RandomSource) -> EncounterOutcome:
    """
    Finish the current encounter and advance the run.

    Args:
        flow: Current run flow
        success: Whether the player met the score goal
        rng: Source for the coin roll, event order and bonus-trade chance

    Returns:
        EncounterOutcome with the new flow, the encounter result and the
        Trade/Wander events now queued
    """
    if is_run_complete(flow):
        return EncounterOutcome(
            updated_flow=flow,
            result=None,
            next_events=(),
            events=(RunAlreadyCompleteEvent(),),
        )

    encounter_type = get_current_encounter_type(flow)
    coins_awarded = roll_encounter_reward(encounter_type, flow.ascension_level, rng) if success else Coins(0)

    result = EncounterResult(
        type=encounter_type,
        coins_awarded=coins_awarded,
        score_goal=Score(get_scaled_score_goal(flow.current_trial, flow.current_encounter, flow.ascension_level)),
        success=success,
    )
    events: list[GameEvent] = [
        EncounterCompletedEvent(
            trial=flow.current_trial,
            encounter=flow.current_encounter,
            encounter_type=encounter_type,
            success=success,
            coins_awarded=coins_awarded,
            score_goal=result.score_goal,
        )
    ]

    updated = replace(
        flow,
        coins=Coins(flow.coins + coins_awarded),
        completed_encounters=(*flow.completed_encounters, f"{flow.current_trial}-{flow.current_encounter}"),
    )
    if coins_awarded:
        events.append(CoinsGainedEvent(amount=coins_awarded, balance=updated.coins, source=encounter_type.value))

    next_events: tuple[RunEventType, ...] = ()
    if encounter_type == EncounterType.FEAR:
        next_events = shuffle((RunEventType.TRADE, RunEventType.WANDER, RunEventType.WANDER), rng)
    else:
        updated = replace(updated, fortune_swap_due=True)
        if rng.random() < BONUS_TRADE_CHANCE:
            updated = replace(updated, bonus_trade_available=True)
            next_events = (RunEventType.TRADE,)

    if updated.current_encounter < updated.encounters_per_trial:
        updated = replace(updated, current_encounter=EncounterNumber(updated.current_encounter + 1))
    elif updated.current_trial < updated.total_trials:
        updated = replace(
            updated,
            current_trial=TrialNumber(updated.current_trial + 1),
            current_encounter=EncounterNumber(1),
        )
    else:
        # Final Trade before the Usurper replaces any bonus Trade
        next_events = (RunEventType.TRADE,)
        updated = replace(
            updated,
            current_trial=TrialNumber(updated.total_trials + 1),
            current_encounter=EncounterNumber(1),
        )
        events.append(RunCompletedEvent(coins=updated.coins))

    if next_events:
        updated = replace(updated, pending_events=(*updated.pending_events, *next_events))
        events.append(RunEventsQueuedEvent(events=next_events))

    return EncounterOutcome(updated_flow=updated, result=result, next_events=next_events, events=tuple(events))


def _consume_pending(flow: RunFlow, event_type: RunEventType) -> tuple[RunEventType, ...]:
    """Pending events with the first occurrence of ``event_type`` removed."""
    pending = list(flow.pending_events)
    if event_type in pending:
        pending.remove(event_type)
    return tuple(pending)


def process_fortune_swap(flow: RunFlow) -> tuple[RunFlow, list[GameEvent]]:
    """Mark the post-Danger fortune swap as handled."""
    return replace(flow, fortune_swap_due=False), [FortuneSwapResolvedEvent()]


def spend_coins(flow: RunFlow, amount: int) -> tuple[RunFlow, list[GameEvent]]:
    """
    Deduct coins without leaving the current Trade.

    Negative amounts are treated as 0 and the balance never goes below 0.
    """
    coins = Coins(max(0, flow.coins - max(0, amount)))
    return replace(flow, coins=coins), [CoinsSpentEvent(amount=Coins(flow.coins - coins), balance=coins)]


def process_trade(flow: RunFlow, coins_spent: int) -> tuple[RunFlow, list[GameEvent]]:
    """Spend coins at a Trade (balance floored at 0) and close any bonus Trade."""
    updated, events = spend_coins(flow, coins_spent)
    updated = replace(
        updated,
        bonus_trade_available=False,
        pending_events=_consume_pending(flow, RunEventType.TRADE),
    )
    return updated, events


def process_wander(flow: RunFlow, coin_reward: int) -> tuple[RunFlow, list[GameEvent]]:
    """Grant a Wander's coin reward, scaled by the run's tier."""
    reward = Coins(calculate_ascension_reward(coin_reward, flow.ascension_level))
    updated = replace(
        flow,
        coins=Coins(flow.coins + reward),
        pending_events=_consume_pending(flow, RunEventType.WANDER),
    )
    return updated, [CoinsGainedEvent(amount=reward, balance=updated.coins, source=RunEventType.WANDER.value)]
