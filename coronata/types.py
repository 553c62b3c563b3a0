"""
Core type definitions for the Coronata engine.

This module defines:
- NewType IDs for strong typing of identifiers and quantities
- Enums for cards, encounters, challenges and shop categories
- The RandomSource protocol for injected randomness
- Fixed game constants
"""

from enum import Enum
from typing import NewType, Literal, Protocol

# =============================================================================
# Strong ID and Value Types
# =============================================================================

CardKey = NewType("CardKey", str)
"""Identity of a physical card: suit symbol followed by rank (e.g. '♠A')."""

AscensionTier = NewType("AscensionTier", int)
"""Ascension level number: 0 through 9."""

TrialNumber = NewType("TrialNumber", int)
"""Trial within a run: 1 through 5 (6 once the run is complete)."""

EncounterNumber = NewType("EncounterNumber", int)
"""Encounter within a trial: 1 through 3."""

Coins = NewType("Coins", int)
"""Amount of run currency."""

Score = NewType("Score", int)
"""Points accumulated during a solitaire session."""


# =============================================================================
# Card Enums
# =============================================================================


class Suit(Enum):
    """Card suits, in deck construction order."""

    SPADES = "♠"
    HEARTS = "♥"
    DIAMONDS = "♦"
    CLUBS = "♣"

    @property
    def is_red(self) -> bool:
        return self in (Suit.HEARTS, Suit.DIAMONDS)


class Rank(Enum):
    """Card ranks, in ascending order A < 2 < ... < K."""

    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"


class PileKind(Enum):
    """The four kinds of pile on a Klondike board."""

    TABLEAU = "tableau"
    FOUNDATION = "foundation"
    WASTE = "waste"
    STOCK = "stock"


# =============================================================================
# Run Enums
# =============================================================================


class EncounterType(Enum):
    """Encounter categories within a trial."""

    FEAR = "FEAR"
    """Encounters 1 and 2 of each trial."""

    DANGER = "DANGER"
    """Encounter 3 of each trial."""


class RunEventType(Enum):
    """Events offered to the player between encounters."""

    TRADE = "TRADE"
    """Shop where coins are spent."""

    WANDER = "WANDER"
    """Exploration granting a coin reward."""


# =============================================================================
# Ascension Enums
# =============================================================================


class ChallengeType(Enum):
    """How an ascension challenge is presented to the player."""

    RESTRICTION = "restriction"
    PENALTY = "penalty"
    MODIFIER = "modifier"


class CurseIntent(Enum):
    """Curse assignment requested by an ascension challenge."""

    RANDOM = "random"
    DOUBLE = "double"
    TRIPLE = "triple"


# =============================================================================
# Economy Enums
# =============================================================================


class ItemType(Enum):
    """Purchasable item families."""

    EXPLOIT = "EXPLOIT"
    """Permanent modifier."""

    BLESSING = "BLESSING"
    """Tactical modifier."""


class ItemTier(Enum):
    """Item quality tiers."""

    WEAK = "WEAK"
    DECENT = "DECENT"
    AMAZING = "AMAZING"


class UtilityUpgrade(Enum):
    """Utility purchases available at a trade."""

    HAND_SIZE = "HAND_SIZE"
    SHUFFLE = "SHUFFLE"
    DISCARD = "DISCARD"


# =============================================================================
# Protocols
# =============================================================================


class RandomSource(Protocol):
    """
    Injectable pseudo-random source.

    ``random.Random`` satisfies this protocol; tests may pass scripted
    sources to force specific branches.
    """

    def random(self) -> float:
        """Return a float in [0.0, 1.0)."""
        ...

    def randint(self, a: int, b: int) -> int:
        """Return an integer N such that a <= N <= b."""
        ...


# =============================================================================
# Constants
# =============================================================================

TABLEAU_COLUMNS: Literal[7] = 7
"""Number of tableau columns in Klondike."""

FOUNDATION_COUNT: Literal[4] = 4
"""Number of foundation piles."""

CARDS_PER_SUIT: Literal[13] = 13
"""A complete foundation holds this many cards."""

DEALT_CARD_COUNT: Literal[28] = 28
"""Cards dealt to the tableau (1 + 2 + ... + 7)."""

TOTAL_TRIALS: Literal[5] = 5
"""Trials per run."""

ENCOUNTERS_PER_TRIAL: Literal[3] = 3
"""Encounters per trial: Fear, Fear, Danger."""

STARTING_COINS: Literal[50] = 50
"""Coins a run starts with before ascension penalties."""

BASE_HAND_SIZE: Literal[5] = 5
"""Hand size before ascension modifiers."""

BASE_SHUFFLES: Literal[3] = 3
"""Shuffles per encounter before ascension modifiers."""

MAX_ASCENSION: Literal[9] = 9
"""Highest ascension level."""

DEFAULT_SCORE_GOAL: Literal[500] = 500
"""Score goal for encounter numbers outside the goal table."""
