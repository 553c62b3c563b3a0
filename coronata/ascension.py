"""
Ascension difficulty table and scaling rules.

This module loads the ten ascension tiers from ascension.json, providing a
single source of truth for tier multipliers and challenges, and implements:
- Scaling of costs, score goals and coin rewards by tier
- Folding a tier's challenges into an ``AscensionSetup``
"""

from __future__ import annotations

import json
import math
from dataclasses import replace
from pathlib import Path
from typing import Any

from coronata.types import (
    AscensionTier,
    ChallengeType,
    MAX_ASCENSION,
)
from coronata.models import (
    AscensionChallenge,
    AscensionLevel,
    AscensionSetup,
    AscensionState,
)
from coronata.effects import (
    UnrecognizedEffect,
    parse_effect,
)
from coronata.events import (
    GameEvent,
    InvalidAscensionLevelEvent,
    UnknownChallengeEffectEvent,
)


# =============================================================================
# JSON Loading and Parsing
# =============================================================================

# Path to the ascension table (shipped inside the package)
ASCENSION_JSON_PATH = Path(__file__).parent / "ascension.json"

REWARD_GROWTH_PER_TIER = 0.1
"""Fraction added to coin rewards for each ascension tier."""


def _parse_challenge(challenge_data: dict[str, Any]) -> AscensionChallenge:
    """Parse a challenge dictionary into an AscensionChallenge."""
    return AscensionChallenge(
        id=challenge_data["id"],
        challenge_type=ChallengeType(challenge_data["type"]),
        effect=parse_effect(challenge_data["effect"]),
        description=challenge_data.get("description", ""),
    )


def _parse_level(level_data: dict[str, Any]) -> AscensionLevel:
    """Parse a tier dictionary into an AscensionLevel."""
    level = AscensionTier(level_data["level"])
    return AscensionLevel(
        level=level,
        name=level_data["name"],
        description=level_data.get("description", ""),
        cost_multiplier=float(level_data["cost_multiplier"]),
        score_multiplier=float(level_data["score_multiplier"]),
        challenges=tuple(_parse_challenge(c) for c in level_data.get("challenges", [])),
        unlocked=level == 0,
    )


def _load_levels_from_json() -> tuple[AscensionLevel, ...]:
    """
    Load the ascension table from the JSON file.

    Raises:
        ValueError: If the table does not define exactly levels 0..MAX_ASCENSION
    """
    with open(ASCENSION_JSON_PATH, "r", encoding="utf-8") as f:
        data = json.load(f)

    levels = tuple(sorted((_parse_level(d) for d in data["levels"]), key=lambda lv: lv.level))
    if [lv.level for lv in levels] != list(range(MAX_ASCENSION + 1)):
        raise ValueError(f"Ascension table must define levels 0..{MAX_ASCENSION}")
    return levels


# =============================================================================
# Ascension Table (loaded from JSON)
# =============================================================================

# Load the table once at module import time
ASCENSION_LEVELS: tuple[AscensionLevel, ...] = _load_levels_from_json()

# Registry for quick lookup by level number
ASCENSION_REGISTRY: dict[int, AscensionLevel] = {lv.level: lv for lv in ASCENSION_LEVELS}


def reload_ascension_table() -> None:
    """
    Reload the ascension table from the JSON file.

    Useful while iterating on balance numbers.
    """
    global ASCENSION_LEVELS, ASCENSION_REGISTRY

    ASCENSION_LEVELS = _load_levels_from_json()
    ASCENSION_REGISTRY = {lv.level: lv for lv in ASCENSION_LEVELS}


def get_ascension_level(level: int) -> AscensionLevel | None:
    """Get a tier by number, or None if it is outside the table."""
    return ASCENSION_REGISTRY.get(level)


def get_all_levels(state: AscensionState | None = None) -> tuple[AscensionLevel, ...]:
    """
    All tiers, with ``unlocked`` projected from a player's state.

    Without a state only level 0 is reported as unlocked.
    """
    if state is None:
        return ASCENSION_LEVELS
    return tuple(replace(lv, unlocked=lv.level in state.unlocked_levels) for lv in ASCENSION_LEVELS)


# =============================================================================
# Scaling
# =============================================================================


def _scale(base: float, multiplier: float) -> int:
    """floor(base * multiplier), ignoring binary floating point noise."""
    return math.floor(round(base * multiplier, 6))


def calculate_ascension_score_goal(base_goal: int, level: int) -> int:
    """Score goal scaled by the tier's score multiplier."""
    tier = get_ascension_level(level)
    if tier is None:
        return base_goal
    return _scale(base_goal, tier.score_multiplier)


def calculate_ascension_cost(base_cost: int, level: int) -> int:
    """Item cost scaled by the tier's cost multiplier."""
    tier = get_ascension_level(level)
    if tier is None:
        return base_cost
    return _scale(base_cost, tier.cost_multiplier)


def calculate_ascension_reward(base_reward: float, level: int) -> int:
    """
    Coin reward grown by 10% per tier, rounded half up.

    Out-of-range levels leave the reward unscaled. The tier's
    ``reward_multiplier`` challenge is not applied here; it is only recorded
    on ``AscensionSetup.modifiers``.
    """
    multiplier = 1.0 if get_ascension_level(level) is None else 1 + level * REWARD_GROWTH_PER_TIER
    return math.floor(round(base_reward * multiplier, 6) + 0.5)


# =============================================================================
# Challenge Application
# =============================================================================


def apply_challenge_effect(
    setup: AscensionSetup,
    challenge: AscensionChallenge,
) -> tuple[AscensionSetup, list[GameEvent]]:
    """
    Fold a single challenge into the setup.

    Unrecognized effect kinds leave the setup unchanged and produce an
    ``UnknownChallengeEffectEvent``.
    """
    match challenge.effect:
        case UnrecognizedEffect(kind=kind):
            return setup, [UnknownChallengeEffectEvent(challenge_id=challenge.id, kind=kind)]
        case effect:
            setup, events = effect.apply(setup, challenge.id)
            setup = replace(setup, applied_challenges=(*setup.applied_challenges, challenge.id))
            return setup, events


def apply_ascension_modifiers(
    setup: AscensionSetup,
    level: int,
) -> tuple[AscensionSetup, list[GameEvent]]:
    """
    Fold every challenge of a tier into the setup, in table order.

    Later challenges of the same kind overwrite earlier ones. An
    out-of-range level returns the setup unchanged with an
    ``InvalidAscensionLevelEvent``.
    """
    tier = get_ascension_level(level)
    if tier is None:
        return setup, [InvalidAscensionLevelEvent(level=level, operation="apply_ascension_modifiers")]

    events: list[GameEvent] = []
    setup = replace(setup, ascension_level=tier.level)
    for challenge in tier.challenges:
        setup, challenge_events = apply_challenge_effect(setup, challenge)
        events.extend(challenge_events)

    return setup, events


def create_ascension_setup(level: int) -> tuple[AscensionSetup, list[GameEvent]]:
    """Base setup with a tier's challenges applied."""
    return apply_ascension_modifiers(AscensionSetup(), level)
