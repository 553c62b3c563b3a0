"""
Challenge effect primitives for ascension levels.

Each ascension challenge carries exactly one effect. Effects form a closed
tagged union: one dataclass per known kind, each with its own typed payload,
plus ``UnrecognizedEffect`` for kinds this engine does not understand.
Known effects know how to fold themselves into an ``AscensionSetup`` and
return the new setup plus any events generated.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, ClassVar

from coronata.types import (
    Coins,
    CurseIntent,
    BASE_HAND_SIZE,
    BASE_SHUFFLES,
    STARTING_COINS,
)
from coronata.models import AscensionSetup
from coronata.events import (
    GameEvent,
    ChallengeAppliedEvent,
    CurseRequestedEvent,
)


# =============================================================================
# Multiplier Effects
# =============================================================================


@dataclass(frozen=True, slots=True)
class CostMultiplierEffect:
    """Set the shop cost multiplier (overwrites any earlier value)."""

    kind: ClassVar[str] = "cost_multiplier"

    multiplier: float

    def apply(self, setup: AscensionSetup, challenge_id: str) -> tuple[AscensionSetup, list[GameEvent]]:
        modifiers = replace(setup.modifiers, cost_multiplier=self.multiplier)
        return replace(setup, modifiers=modifiers), [ChallengeAppliedEvent(challenge_id, self.kind)]


@dataclass(frozen=True, slots=True)
class ScoreMultiplierEffect:
    """Set the score goal multiplier (overwrites any earlier value)."""

    kind: ClassVar[str] = "score_multiplier"

    multiplier: float

    def apply(self, setup: AscensionSetup, challenge_id: str) -> tuple[AscensionSetup, list[GameEvent]]:
        modifiers = replace(setup.modifiers, score_multiplier=self.multiplier)
        return replace(setup, modifiers=modifiers), [ChallengeAppliedEvent(challenge_id, self.kind)]


@dataclass(frozen=True, slots=True)
class RewardMultiplierEffect:
    """Set the coin reward multiplier (overwrites any earlier value)."""

    kind: ClassVar[str] = "reward_multiplier"

    multiplier: float

    def apply(self, setup: AscensionSetup, challenge_id: str) -> tuple[AscensionSetup, list[GameEvent]]:
        modifiers = replace(setup.modifiers, reward_multiplier=self.multiplier)
        return replace(setup, modifiers=modifiers), [ChallengeAppliedEvent(challenge_id, self.kind)]


# =============================================================================
# Settings Effects
# =============================================================================


@dataclass(frozen=True, slots=True)
class HandSizeEffect:
    """Hand size becomes the base hand size plus ``delta``."""

    kind: ClassVar[str] = "hand_size"

    delta: int

    def apply(self, setup: AscensionSetup, challenge_id: str) -> tuple[AscensionSetup, list[GameEvent]]:
        settings = replace(setup.settings, hand_size=BASE_HAND_SIZE + self.delta)
        return replace(setup, settings=settings), [ChallengeAppliedEvent(challenge_id, self.kind)]


@dataclass(frozen=True, slots=True)
class ShufflesEffect:
    """Shuffles per encounter become the base count plus ``delta``, never below 0."""

    kind: ClassVar[str] = "shuffles"

    delta: int

    def apply(self, setup: AscensionSetup, challenge_id: str) -> tuple[AscensionSetup, list[GameEvent]]:
        shuffles = max(0, BASE_SHUFFLES + self.delta)
        settings = replace(setup.settings, shuffles_per_encounter=shuffles)
        return replace(setup, settings=settings), [ChallengeAppliedEvent(challenge_id, self.kind)]


@dataclass(frozen=True, slots=True)
class DrawReductionEffect:
    """Reduce the number of cards drawn per turn."""

    kind: ClassVar[str] = "draw_reduction"

    amount: int

    def apply(self, setup: AscensionSetup, challenge_id: str) -> tuple[AscensionSetup, list[GameEvent]]:
        settings = replace(setup.settings, draw_reduction=self.amount)
        return replace(setup, settings=settings), [ChallengeAppliedEvent(challenge_id, self.kind)]


# =============================================================================
# Run Start Effects
# =============================================================================


@dataclass(frozen=True, slots=True)
class StartingCoinsEffect:
    """
    Start the run with fewer coins.

    The magnitude of ``delta`` is subtracted from the base starting coins;
    the result is floored at 0.
    """

    kind: ClassVar[str] = "starting_coins"

    delta: int

    def apply(self, setup: AscensionSetup, challenge_id: str) -> tuple[AscensionSetup, list[GameEvent]]:
        coins = Coins(max(0, STARTING_COINS - abs(self.delta)))
        return replace(setup, coins=coins), [ChallengeAppliedEvent(challenge_id, self.kind)]


@dataclass(frozen=True, slots=True)
class StartingCurseEffect:
    """
    Request starting curses from the curse subsystem.

    Only the request is recorded here; assigning actual curses happens
    outside the engine.
    """

    kind: ClassVar[str] = "starting_curse"

    intent: CurseIntent

    def apply(self, setup: AscensionSetup, challenge_id: str) -> tuple[AscensionSetup, list[GameEvent]]:
        events: list[GameEvent] = [
            ChallengeAppliedEvent(challenge_id, self.kind),
            CurseRequestedEvent(challenge_id, self.intent.value),
        ]
        return replace(setup, starting_curse=self.intent), events


# =============================================================================
# Unrecognized Effects
# =============================================================================


@dataclass(frozen=True, slots=True)
class UnrecognizedEffect:
    """
    An effect kind this engine does not know.

    It has no ``apply``; callers decide what to do with it.
    """

    kind: str
    value: Any = None


# =============================================================================
# Effect Union Type
# =============================================================================

ChallengeEffect = (
    CostMultiplierEffect
    | ScoreMultiplierEffect
    | RewardMultiplierEffect
    | HandSizeEffect
    | ShufflesEffect
    | DrawReductionEffect
    | StartingCoinsEffect
    | StartingCurseEffect
    | UnrecognizedEffect
)


def parse_effect(effect_data: dict[str, Any]) -> ChallengeEffect:
    """Parse an effect dictionary (``{"kind": ..., "value": ...}``) into an effect."""
    kind = effect_data["kind"]
    value = effect_data.get("value")

    match kind:
        case "cost_multiplier":
            return CostMultiplierEffect(multiplier=float(value))
        case "score_multiplier":
            return ScoreMultiplierEffect(multiplier=float(value))
        case "reward_multiplier":
            return RewardMultiplierEffect(multiplier=float(value))
        case "hand_size":
            return HandSizeEffect(delta=int(value))
        case "shuffles":
            return ShufflesEffect(delta=int(value))
        case "draw_reduction":
            return DrawReductionEffect(amount=int(value))
        case "starting_coins":
            return StartingCoinsEffect(delta=int(value))
        case "starting_curse":
            return StartingCurseEffect(intent=CurseIntent(value))
        case _:
            return UnrecognizedEffect(kind=str(kind), value=value)
