"""
JSON snapshots of engine state.

Snapshots are flat JSON documents with no schema version. Decoding an
encoded value yields a value equal to the original.
"""

from __future__ import annotations

import json
from typing import Any, Callable, TypeVar

from coronata.types import (
    AscensionTier,
    CardKey,
    Coins,
    CurseIntent,
    EncounterNumber,
    Rank,
    RunEventType,
    Score,
    Suit,
    TrialNumber,
)
from coronata.models import (
    AscensionSetup,
    AscensionState,
    Card,
    GameModifiers,
    GameSettings,
    GameState,
    LevelProgress,
    RunFlow,
    RunState,
    RunSummary,
    ScoreState,
    SolitaireLayout,
)

T = TypeVar("T")

ASCENSION_STORAGE_KEY = "coronata_ascension_progress"
"""Storage name hosts use for the serialized AscensionState."""

RUN_HISTORY_STORAGE_KEY = "coronata_run_history"
"""Storage name hosts use for the serialized run-summary array."""


# =============================================================================
# Cards and Layouts
# =============================================================================


def card_to_dict(card: Card) -> dict[str, Any]:
    return {"suit": card.suit.value, "rank": card.rank.value, "face_up": card.face_up}


def card_from_dict(data: dict[str, Any]) -> Card:
    return Card(suit=Suit(data["suit"]), rank=Rank(data["rank"]), face_up=bool(data["face_up"]))


def _pile_to_list(pile: tuple[Card, ...]) -> list[dict[str, Any]]:
    return [card_to_dict(card) for card in pile]


def _pile_from_list(data: list[dict[str, Any]]) -> tuple[Card, ...]:
    return tuple(card_from_dict(card) for card in data)


def layout_to_dict(layout: SolitaireLayout) -> dict[str, Any]:
    return {
        "tableau": [_pile_to_list(pile) for pile in layout.tableau],
        "stock": _pile_to_list(layout.stock),
        "waste": _pile_to_list(layout.waste),
        "foundations": [_pile_to_list(pile) for pile in layout.foundations],
    }


def layout_from_dict(data: dict[str, Any]) -> SolitaireLayout:
    return SolitaireLayout(
        tableau=tuple(_pile_from_list(pile) for pile in data["tableau"]),
        stock=_pile_from_list(data["stock"]),
        waste=_pile_from_list(data["waste"]),
        foundations=tuple(_pile_from_list(pile) for pile in data["foundations"]),
    )


def score_to_dict(score: ScoreState) -> dict[str, Any]:
    return {
        "score": score.score,
        "played_tableau": sorted(score.played_tableau),
        "played_foundation": sorted(score.played_foundation),
    }


def score_from_dict(data: dict[str, Any]) -> ScoreState:
    return ScoreState(
        score=Score(data["score"]),
        played_tableau=frozenset(CardKey(k) for k in data["played_tableau"]),
        played_foundation=frozenset(CardKey(k) for k in data["played_foundation"]),
    )


def game_state_to_dict(state: GameState) -> dict[str, Any]:
    return {
        "layout": layout_to_dict(state.layout),
        "score": score_to_dict(state.score),
        "rule_set": state.rule_set,
        "moves": state.moves,
        "won": state.won,
    }


def game_state_from_dict(data: dict[str, Any]) -> GameState:
    return GameState(
        layout=layout_from_dict(data["layout"]),
        score=score_from_dict(data["score"]),
        rule_set=data["rule_set"],
        moves=int(data["moves"]),
        won=bool(data["won"]),
    )


# =============================================================================
# Ascension
# =============================================================================


def ascension_state_to_dict(state: AscensionState) -> dict[str, Any]:
    return {
        "current_level": state.current_level,
        "unlocked_levels": sorted(state.unlocked_levels),
        "total_ascensions": state.total_ascensions,
        "highest_score": state.highest_score,
        "level_progress": {
            str(level): {
                "attempts": progress.attempts,
                "victories": progress.victories,
                "best_score": progress.best_score,
            }
            for level, progress in sorted(state.level_progress.items())
        },
    }


def ascension_state_from_dict(data: dict[str, Any]) -> AscensionState:
    return AscensionState(
        current_level=AscensionTier(data["current_level"]),
        unlocked_levels=frozenset(AscensionTier(level) for level in data["unlocked_levels"]),
        total_ascensions=int(data["total_ascensions"]),
        highest_score=Score(data["highest_score"]),
        level_progress={
            AscensionTier(int(level)): LevelProgress(
                attempts=int(progress["attempts"]),
                victories=int(progress["victories"]),
                best_score=Score(progress["best_score"]),
            )
            for level, progress in data["level_progress"].items()
        },
    )


def setup_to_dict(setup: AscensionSetup) -> dict[str, Any]:
    return {
        "ascension_level": setup.ascension_level,
        "modifiers": {
            "cost_multiplier": setup.modifiers.cost_multiplier,
            "score_multiplier": setup.modifiers.score_multiplier,
            "reward_multiplier": setup.modifiers.reward_multiplier,
        },
        "settings": {
            "hand_size": setup.settings.hand_size,
            "shuffles_per_encounter": setup.settings.shuffles_per_encounter,
            "draw_reduction": setup.settings.draw_reduction,
        },
        "coins": setup.coins,
        "starting_curse": setup.starting_curse.value if setup.starting_curse else None,
        "applied_challenges": list(setup.applied_challenges),
    }


def setup_from_dict(data: dict[str, Any]) -> AscensionSetup:
    curse = data.get("starting_curse")
    return AscensionSetup(
        ascension_level=AscensionTier(data["ascension_level"]),
        modifiers=GameModifiers(**data["modifiers"]),
        settings=GameSettings(**data["settings"]),
        coins=Coins(data["coins"]),
        starting_curse=CurseIntent(curse) if curse else None,
        applied_challenges=tuple(data["applied_challenges"]),
    )


# =============================================================================
# Runs
# =============================================================================


def run_flow_to_dict(flow: RunFlow) -> dict[str, Any]:
    return {
        "current_trial": flow.current_trial,
        "current_encounter": flow.current_encounter,
        "total_trials": flow.total_trials,
        "encounters_per_trial": flow.encounters_per_trial,
        "ascension_level": flow.ascension_level,
        "coins": flow.coins,
        "completed_encounters": list(flow.completed_encounters),
        "pending_events": [event.value for event in flow.pending_events],
        "fortune_swap_due": flow.fortune_swap_due,
        "bonus_trade_available": flow.bonus_trade_available,
    }


def run_flow_from_dict(data: dict[str, Any]) -> RunFlow:
    return RunFlow(
        current_trial=TrialNumber(data["current_trial"]),
        current_encounter=EncounterNumber(data["current_encounter"]),
        total_trials=int(data["total_trials"]),
        encounters_per_trial=int(data["encounters_per_trial"]),
        ascension_level=AscensionTier(data["ascension_level"]),
        coins=Coins(data["coins"]),
        completed_encounters=tuple(data["completed_encounters"]),
        pending_events=tuple(RunEventType(event) for event in data["pending_events"]),
        fortune_swap_due=bool(data["fortune_swap_due"]),
        bonus_trade_available=bool(data["bonus_trade_available"]),
    )


def run_state_to_dict(run: RunState) -> dict[str, Any]:
    return {
        "setup": setup_to_dict(run.setup),
        "flow": run_flow_to_dict(run.flow),
        "items": list(run.items),
        "rerolls": run.rerolls,
    }


def run_state_from_dict(data: dict[str, Any]) -> RunState:
    return RunState(
        setup=setup_from_dict(data["setup"]),
        flow=run_flow_from_dict(data["flow"]),
        items=tuple(data["items"]),
        rerolls=int(data["rerolls"]),
    )


def run_summary_to_dict(summary: RunSummary) -> dict[str, Any]:
    return {
        "score": summary.score,
        "encounters_completed": summary.encounters_completed,
        "duration_seconds": summary.duration_seconds,
        "items": list(summary.items),
        "ascension_level": summary.ascension_level,
        "victory": summary.victory,
    }


def run_summary_from_dict(data: dict[str, Any]) -> RunSummary:
    return RunSummary(
        score=Score(data["score"]),
        encounters_completed=int(data["encounters_completed"]),
        duration_seconds=float(data["duration_seconds"]),
        items=tuple(data["items"]),
        ascension_level=AscensionTier(data["ascension_level"]),
        victory=bool(data["victory"]),
    )


# =============================================================================
# JSON Text
# =============================================================================


def _dumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False)


def _loads(text: str, parse: Callable[[Any], T]) -> T:
    """
    Decode JSON text and parse it.

    Raises:
        ValueError: If the text is not valid JSON or lacks required fields
    """
    try:
        return parse(json.loads(text))
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed snapshot: {e}") from e


def serialize_game_state(state: GameState) -> str:
    return _dumps(game_state_to_dict(state))


def deserialize_game_state(text: str) -> GameState:
    return _loads(text, game_state_from_dict)


def serialize_ascension_state(state: AscensionState) -> str:
    return _dumps(ascension_state_to_dict(state))


def deserialize_ascension_state(text: str) -> AscensionState:
    return _loads(text, ascension_state_from_dict)


def serialize_run_flow(flow: RunFlow) -> str:
    return _dumps(run_flow_to_dict(flow))


def deserialize_run_flow(text: str) -> RunFlow:
    return _loads(text, run_flow_from_dict)


def serialize_run_state(run: RunState) -> str:
    return _dumps(run_state_to_dict(run))


def deserialize_run_state(text: str) -> RunState:
    return _loads(text, run_state_from_dict)


# =============================================================================
# Run History
# =============================================================================


def load_run_history(text: str | None) -> tuple[RunSummary, ...]:
    """Parse the persisted run-history array (empty when nothing is stored)."""
    if not text:
        return ()
    return _loads(text, lambda data: tuple(run_summary_from_dict(entry) for entry in data))


def append_run_summary(text: str | None, summary: RunSummary) -> str:
    """Return the history array with ``summary`` appended, as JSON text."""
    history = [run_summary_to_dict(entry) for entry in load_run_history(text)]
    history.append(run_summary_to_dict(summary))
    return _dumps(history)
