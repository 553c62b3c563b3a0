"""
Data models for the Coronata engine.

All models use frozen dataclasses for immutability.
State transitions create new objects rather than mutating existing ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Sequence, TYPE_CHECKING

from coronata.types import (
    AscensionTier,
    CardKey,
    ChallengeType,
    Coins,
    CurseIntent,
    EncounterNumber,
    EncounterType,
    Rank,
    RunEventType,
    Score,
    Suit,
    TrialNumber,
    BASE_HAND_SIZE,
    BASE_SHUFFLES,
    ENCOUNTERS_PER_TRIAL,
    FOUNDATION_COUNT,
    STARTING_COINS,
    TABLEAU_COLUMNS,
    TOTAL_TRIALS,
)

if TYPE_CHECKING:
    from coronata.effects import ChallengeEffect


_RANK_ORDER: tuple[Rank, ...] = tuple(Rank)


# =============================================================================
# Cards and Piles
# =============================================================================


@dataclass(frozen=True, slots=True)
class Card:
    """A playing card. Identity is suit + rank; face_up is presentation state."""

    suit: Suit
    rank: Rank
    face_up: bool = False

    @property
    def key(self) -> CardKey:
        """Identity key used by score tracking (e.g. '♥10')."""
        return CardKey(self.suit.value + self.rank.value)

    @property
    def is_red(self) -> bool:
        return self.suit.is_red

    @property
    def rank_index(self) -> int:
        """Position in the fixed rank order (A=0 ... K=12)."""
        return _RANK_ORDER.index(self.rank)

    def with_face_up(self, face_up: bool) -> Card:
        """Return a copy of this card turned face-up or face-down."""
        return Card(suit=self.suit, rank=self.rank, face_up=face_up)


Pile = tuple[Card, ...]
"""Ordered cards; the top card is the last element."""


@dataclass(frozen=True, slots=True)
class SolitaireLayout:
    """
    Immutable snapshot of a Klondike board.
    """

    tableau: tuple[Pile, ...]
    """Seven tableau columns."""

    stock: Pile
    """Face-down draw pile (top = last)."""

    waste: Pile
    """Face-up discard pile (top = last)."""

    foundations: tuple[Pile, ...]
    """Four foundation piles, each a single suit built up from Ace."""

    def with_tableau_column(self, index: int, pile: Sequence[Card]) -> SolitaireLayout:
        """Return a new layout with one tableau column replaced."""
        columns = list(self.tableau)
        columns[index] = tuple(pile)
        return replace(self, tableau=tuple(columns))

    def with_foundation(self, index: int, pile: Sequence[Card]) -> SolitaireLayout:
        """Return a new layout with one foundation replaced."""
        piles = list(self.foundations)
        piles[index] = tuple(pile)
        return replace(self, foundations=tuple(piles))

    def with_waste(self, pile: Sequence[Card]) -> SolitaireLayout:
        return replace(self, waste=tuple(pile))

    def with_stock(self, pile: Sequence[Card]) -> SolitaireLayout:
        return replace(self, stock=tuple(pile))

    def all_cards(self) -> tuple[Card, ...]:
        """Every card on the board, in no particular order."""
        cards: list[Card] = []
        for pile in self.tableau:
            cards.extend(pile)
        for pile in self.foundations:
            cards.extend(pile)
        cards.extend(self.stock)
        cards.extend(self.waste)
        return tuple(cards)


def empty_layout() -> SolitaireLayout:
    """A board with every pile empty."""
    return SolitaireLayout(
        tableau=tuple(() for _ in range(TABLEAU_COLUMNS)),
        stock=(),
        waste=(),
        foundations=tuple(() for _ in range(FOUNDATION_COUNT)),
    )


# =============================================================================
# Scoring
# =============================================================================


@dataclass(frozen=True, slots=True)
class ScoreState:
    """
    Session score plus the card keys that have already scored.

    A card contributes at most once to each set, so at most twice overall.
    """

    score: Score = Score(0)
    played_tableau: frozenset[CardKey] = frozenset()
    played_foundation: frozenset[CardKey] = frozenset()


@dataclass(frozen=True, slots=True)
class GameState:
    """
    A single solitaire session.
    """

    layout: SolitaireLayout
    """Current board."""

    score: ScoreState
    """Score and scoring history."""

    rule_set: str
    """Rule-set identifier from the game mode profile."""

    moves: int = 0
    """Number of successful moves (draws and recycles included)."""

    won: bool = False
    """Whether every foundation is complete."""


@dataclass(frozen=True, slots=True)
class GameHistory:
    """Win/loss tally across solitaire sessions."""

    wins: int = 0
    losses: int = 0
    best_score: Score = Score(0)


# =============================================================================
# Ascension
# =============================================================================


@dataclass(frozen=True, slots=True)
class AscensionChallenge:
    """A single difficulty rule attached to an ascension level."""

    id: str
    """Unique identifier (e.g. 'a3_short_hand')."""

    challenge_type: ChallengeType
    """How the challenge is presented."""

    effect: ChallengeEffect
    """Typed payload describing what the challenge changes."""

    description: str = ""


@dataclass(frozen=True, slots=True)
class AscensionLevel:
    """
    One row of the fixed ascension table.

    The table is reference data; only ``unlocked`` is projected per player.
    """

    level: AscensionTier
    name: str
    description: str
    cost_multiplier: float
    score_multiplier: float
    challenges: tuple[AscensionChallenge, ...] = ()
    unlocked: bool = False


@dataclass(frozen=True, slots=True)
class LevelProgress:
    """Per-level attempt record."""

    attempts: int = 0
    victories: int = 0
    best_score: Score = Score(0)


@dataclass(frozen=True, slots=True)
class AscensionState:
    """
    Per-player ascension progression.

    ``unlocked_levels`` never shrinks, and a level always has a progress
    record before the level above it is unlocked. ``level_progress`` is
    stored as a read-only mapping.
    """

    current_level: AscensionTier = AscensionTier(0)
    unlocked_levels: frozenset[AscensionTier] = frozenset({AscensionTier(0)})
    total_ascensions: int = 0
    highest_score: Score = Score(0)
    level_progress: Mapping[AscensionTier, LevelProgress] = field(
        default_factory=lambda: {AscensionTier(0): LevelProgress()}, hash=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "level_progress", MappingProxyType(dict(self.level_progress)))

    def progress_for(self, level: AscensionTier) -> LevelProgress:
        """Progress record for a level (an empty record if none exists)."""
        return self.level_progress.get(level, LevelProgress())

    def with_progress(self, level: AscensionTier, progress: LevelProgress) -> AscensionState:
        """Return a new state with one level's progress record replaced."""
        new_progress = dict(self.level_progress)
        new_progress[level] = progress
        return replace(self, level_progress=new_progress)


@dataclass(frozen=True, slots=True)
class GameModifiers:
    """Scalar multipliers set by ascension challenges."""

    cost_multiplier: float = 1.0
    score_multiplier: float = 1.0
    reward_multiplier: float = 1.0


@dataclass(frozen=True, slots=True)
class GameSettings:
    """Per-encounter settings adjusted by ascension challenges."""

    hand_size: int = BASE_HAND_SIZE
    shuffles_per_encounter: int = BASE_SHUFFLES
    draw_reduction: int = 0


@dataclass(frozen=True, slots=True)
class AscensionSetup:
    """
    Run settings produced by folding an ascension tier's challenges.
    """

    ascension_level: AscensionTier = AscensionTier(0)
    modifiers: GameModifiers = GameModifiers()
    settings: GameSettings = GameSettings()
    coins: Coins = Coins(STARTING_COINS)
    starting_curse: CurseIntent | None = None
    """Curse assignment requested from the curse subsystem (recorded only)."""

    applied_challenges: tuple[str, ...] = ()
    """Ids of the challenges folded into this setup, in order."""


# =============================================================================
# Run Flow
# =============================================================================


@dataclass(frozen=True, slots=True)
class RunFlow:
    """
    Position and economy of an active Coronata run.
    """

    current_trial: TrialNumber = TrialNumber(1)
    current_encounter: EncounterNumber = EncounterNumber(1)
    total_trials: int = TOTAL_TRIALS
    encounters_per_trial: int = ENCOUNTERS_PER_TRIAL
    ascension_level: AscensionTier = AscensionTier(0)
    coins: Coins = Coins(STARTING_COINS)
    completed_encounters: tuple[str, ...] = ()
    """Append-only log of 'trial-encounter' tags."""

    pending_events: tuple[RunEventType, ...] = ()
    """Queued Trade/Wander events, head first."""

    fortune_swap_due: bool = False
    bonus_trade_available: bool = False


@dataclass(frozen=True, slots=True)
class EncounterResult:
    """Outcome of completing one encounter."""

    type: EncounterType
    coins_awarded: Coins
    score_goal: Score
    success: bool


@dataclass(frozen=True, slots=True)
class RunState:
    """
    Everything the host keeps for an active run.
    """

    setup: AscensionSetup
    """Ascension-adjusted settings the run was started with."""

    flow: RunFlow
    """Trial/encounter position and coins."""

    items: tuple[str, ...] = ()
    """Names of purchased items, in purchase order."""

    rerolls: int = 0
    """Shop rerolls used at the current trade."""

    def with_flow(self, flow: RunFlow) -> RunState:
        return replace(self, flow=flow)


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Run-history record assembled when a run ends."""

    score: Score
    encounters_completed: int
    duration_seconds: float
    items: tuple[str, ...]
    ascension_level: AscensionTier
    victory: bool
