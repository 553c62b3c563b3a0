"""
Ascension progression for a player profile.

Levels unlock one at a time: the level above the current one becomes
available once the current level has been won at least once.
"""

from __future__ import annotations

from dataclasses import replace

from coronata.types import AscensionTier, Score
from coronata.models import AscensionState, LevelProgress
from coronata.ascension import get_ascension_level
from coronata.events import (
    GameEvent,
    AscensionRecordedEvent,
    InvalidAscensionLevelEvent,
    LevelLockedEvent,
    LevelUnlockedEvent,
)


def create_ascension_state() -> AscensionState:
    """A fresh profile: only level 0 unlocked, no attempts."""
    return AscensionState()


def is_level_unlocked(state: AscensionState, level: int) -> bool:
    return level in state.unlocked_levels


def can_unlock_next_level(state: AscensionState) -> bool:
    """
    True iff the next level exists, is still locked, and the current level
    has at least one victory.
    """
    next_level = state.current_level + 1
    if get_ascension_level(next_level) is None:
        return False
    if next_level in state.unlocked_levels:
        return False
    return state.progress_for(state.current_level).victories > 0


def unlock_next_level(state: AscensionState) -> tuple[AscensionState, list[GameEvent]]:
    """
    Unlock the level above the current one and seed its progress record.

    No-op when ``can_unlock_next_level`` is false.
    """
    if not can_unlock_next_level(state):
        return state, []

    next_level = AscensionTier(state.current_level + 1)
    state = replace(state, unlocked_levels=state.unlocked_levels | {next_level})
    if next_level not in state.level_progress:
        state = state.with_progress(next_level, LevelProgress())

    return state, [LevelUnlockedEvent(level=next_level)]


def select_ascension_level(state: AscensionState, level: int) -> tuple[AscensionState, list[GameEvent]]:
    """Make an unlocked level the current one; locked or unknown levels are refused."""
    if get_ascension_level(level) is None:
        return state, [InvalidAscensionLevelEvent(level=level, operation="select_ascension_level")]
    if not is_level_unlocked(state, level):
        return state, [LevelLockedEvent(level=AscensionTier(level))]
    return replace(state, current_level=AscensionTier(level)), []


def record_ascension_completion(
    state: AscensionState,
    level: int,
    score: int,
    victory: bool,
) -> tuple[AscensionState, list[GameEvent]]:
    """
    Record a finished run.

    Attempts always increase; victories and the global ascension count
    increase on a win. Best scores are updated per level and globally. A
    win also tries to unlock the next level.
    """
    if get_ascension_level(level) is None:
        return state, [InvalidAscensionLevelEvent(level=level, operation="record_ascension_completion")]

    tier = AscensionTier(level)
    progress = state.progress_for(tier)
    progress = LevelProgress(
        attempts=progress.attempts + 1,
        victories=progress.victories + (1 if victory else 0),
        best_score=Score(max(progress.best_score, score)),
    )

    state = state.with_progress(tier, progress)
    state = replace(
        state,
        total_ascensions=state.total_ascensions + (1 if victory else 0),
        highest_score=Score(max(state.highest_score, score)),
    )
    events: list[GameEvent] = [AscensionRecordedEvent(level=tier, score=Score(score), victory=victory)]

    if victory:
        state, unlock_events = unlock_next_level(state)
        events.extend(unlock_events)

    return state, events
