"""
Event types for the Coronata engine.

Events form a typed log of everything the engine does. Transitions return
them alongside the new state; hosts forward them to an observer (see
``coronata.controller.log_event``) for logging, animation or analytics.
"""

from dataclasses import dataclass

from coronata.models import Card
from coronata.types import (
    AscensionTier,
    Coins,
    EncounterNumber,
    EncounterType,
    PileKind,
    RunEventType,
    Score,
    TrialNumber,
)


# =============================================================================
# Card Events
# =============================================================================


@dataclass(frozen=True, slots=True)
class CardMovedEvent:
    """A card moved between piles."""

    card: Card
    """The card as it lies after the move."""

    source: PileKind
    source_index: int

    destination: PileKind
    destination_index: int

    @property
    def event_type(self) -> str:
        return "card_moved"


@dataclass(frozen=True, slots=True)
class CardFlippedEvent:
    """A face-down tableau card was exposed and turned face-up."""

    card: Card
    column: int

    @property
    def event_type(self) -> str:
        return "card_flipped"


@dataclass(frozen=True, slots=True)
class StockDrawnEvent:
    """The top stock card was turned onto the waste."""

    card: Card

    @property
    def event_type(self) -> str:
        return "stock_drawn"


@dataclass(frozen=True, slots=True)
class StockRecycledEvent:
    """The waste was turned back over into the stock."""

    card_count: int

    @property
    def event_type(self) -> str:
        return "stock_recycled"


@dataclass(frozen=True, slots=True)
class MoveRejectedEvent:
    """A move was illegal; nothing changed."""

    reason: str

    @property
    def event_type(self) -> str:
        return "move_rejected"


@dataclass(frozen=True, slots=True)
class CardScoredEvent:
    """A card scored for the first time in a tracking set."""

    card: Card
    points: int
    reason: str
    """'play' or 'foundation'."""

    total: Score

    @property
    def event_type(self) -> str:
        return "card_scored"


@dataclass(frozen=True, slots=True)
class GameWonEvent:
    """All four foundations are complete."""

    score: Score

    @property
    def event_type(self) -> str:
        return "game_won"


# =============================================================================
# Ascension Events
# =============================================================================


@dataclass(frozen=True, slots=True)
class ChallengeAppliedEvent:
    """A challenge was folded into the run setup."""

    challenge_id: str
    effect_kind: str

    @property
    def event_type(self) -> str:
        return "challenge_applied"


@dataclass(frozen=True, slots=True)
class CurseRequestedEvent:
    """A challenge asked the curse subsystem for starting curses."""

    challenge_id: str
    intent: str

    @property
    def event_type(self) -> str:
        return "curse_requested"


@dataclass(frozen=True, slots=True)
class InvalidAscensionLevelEvent:
    """An ascension level outside the table was requested."""

    level: int
    operation: str

    @property
    def event_type(self) -> str:
        return "invalid_ascension_level"


@dataclass(frozen=True, slots=True)
class UnknownChallengeEffectEvent:
    """A challenge carried an effect kind the engine does not know."""

    challenge_id: str
    kind: str

    @property
    def event_type(self) -> str:
        return "unknown_challenge_effect"


@dataclass(frozen=True, slots=True)
class LevelLockedEvent:
    """A locked ascension level was selected."""

    level: AscensionTier

    @property
    def event_type(self) -> str:
        return "level_locked"


@dataclass(frozen=True, slots=True)
class LevelUnlockedEvent:
    """A new ascension level became available."""

    level: AscensionTier

    @property
    def event_type(self) -> str:
        return "level_unlocked"


@dataclass(frozen=True, slots=True)
class AscensionRecordedEvent:
    """A finished run was recorded against an ascension level."""

    level: AscensionTier
    score: Score
    victory: bool

    @property
    def event_type(self) -> str:
        return "ascension_recorded"


# =============================================================================
# Run Events
# =============================================================================


@dataclass(frozen=True, slots=True)
class EncounterCompletedEvent:
    """An encounter finished."""

    trial: TrialNumber
    encounter: EncounterNumber
    encounter_type: EncounterType
    success: bool
    coins_awarded: Coins
    score_goal: Score

    @property
    def event_type(self) -> str:
        return "encounter_completed"


@dataclass(frozen=True, slots=True)
class RunEventsQueuedEvent:
    """Trade/Wander events were queued after an encounter."""

    events: tuple[RunEventType, ...]

    @property
    def event_type(self) -> str:
        return "run_events_queued"


@dataclass(frozen=True, slots=True)
class CoinsGainedEvent:
    """Coins were added to the run."""

    amount: Coins
    balance: Coins
    source: str

    @property
    def event_type(self) -> str:
        return "coins_gained"


@dataclass(frozen=True, slots=True)
class CoinsSpentEvent:
    """Coins were deducted at a trade."""

    amount: Coins
    balance: Coins

    @property
    def event_type(self) -> str:
        return "coins_spent"


@dataclass(frozen=True, slots=True)
class PurchaseRejectedEvent:
    """A purchase or reroll cost more than the run can pay."""

    item: str
    cost: Coins
    balance: Coins

    @property
    def event_type(self) -> str:
        return "purchase_rejected"


@dataclass(frozen=True, slots=True)
class FortuneSwapResolvedEvent:
    """The mandatory post-Danger fortune swap was handled."""

    @property
    def event_type(self) -> str:
        return "fortune_swap_resolved"


@dataclass(frozen=True, slots=True)
class RunCompletedEvent:
    """The last encounter of the last trial finished; the Usurper is due."""

    coins: Coins

    @property
    def event_type(self) -> str:
        return "run_completed"


@dataclass(frozen=True, slots=True)
class RunAlreadyCompleteEvent:
    """An encounter was completed on a run that has already ended."""

    @property
    def event_type(self) -> str:
        return "run_already_complete"


# =============================================================================
# Event Union Type
# =============================================================================

GameEvent = (
    CardMovedEvent
    | CardFlippedEvent
    | StockDrawnEvent
    | StockRecycledEvent
    | MoveRejectedEvent
    | CardScoredEvent
    | GameWonEvent
    | ChallengeAppliedEvent
    | CurseRequestedEvent
    | InvalidAscensionLevelEvent
    | UnknownChallengeEffectEvent
    | LevelLockedEvent
    | LevelUnlockedEvent
    | AscensionRecordedEvent
    | EncounterCompletedEvent
    | RunEventsQueuedEvent
    | CoinsGainedEvent
    | CoinsSpentEvent
    | PurchaseRejectedEvent
    | FortuneSwapResolvedEvent
    | RunCompletedEvent
    | RunAlreadyCompleteEvent
)

WARNING_EVENTS = (
    InvalidAscensionLevelEvent,
    UnknownChallengeEffectEvent,
    LevelLockedEvent,
    RunAlreadyCompleteEvent,
)
"""Events that report a configuration problem rather than normal play."""
