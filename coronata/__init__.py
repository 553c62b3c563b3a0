"""
Coronata - Solitaire Rules and Progression Engine

A Klondike move/validation engine plus the roguelike run layer of Coronata
mode: ascension difficulty scaling, the coin economy and the
trial/encounter/event state machine.
This package contains pure game logic with no I/O dependencies.
"""

from coronata.types import (
    CardKey,
    AscensionTier,
    TrialNumber,
    EncounterNumber,
    Coins,
    Score,
    Suit,
    Rank,
    PileKind,
    EncounterType,
    RunEventType,
    ChallengeType,
    CurseIntent,
    ItemType,
    ItemTier,
    UtilityUpgrade,
    RandomSource,
)
from coronata.models import (
    Card,
    SolitaireLayout,
    ScoreState,
    GameState,
    GameHistory,
    AscensionChallenge,
    AscensionLevel,
    AscensionState,
    AscensionSetup,
    LevelProgress,
    GameModifiers,
    GameSettings,
    RunFlow,
    EncounterResult,
    RunState,
    RunSummary,
)
from coronata.effects import (
    ChallengeEffect,
    CostMultiplierEffect,
    ScoreMultiplierEffect,
    RewardMultiplierEffect,
    HandSizeEffect,
    ShufflesEffect,
    DrawReductionEffect,
    StartingCoinsEffect,
    StartingCurseEffect,
    UnrecognizedEffect,
)
from coronata.controller import GameController, log_event

__version__ = "0.1.0"

__all__ = [
    # Types
    "CardKey",
    "AscensionTier",
    "TrialNumber",
    "EncounterNumber",
    "Coins",
    "Score",
    "Suit",
    "Rank",
    "PileKind",
    "EncounterType",
    "RunEventType",
    "ChallengeType",
    "CurseIntent",
    "ItemType",
    "ItemTier",
    "UtilityUpgrade",
    "RandomSource",
    # Models
    "Card",
    "SolitaireLayout",
    "ScoreState",
    "GameState",
    "GameHistory",
    "AscensionChallenge",
    "AscensionLevel",
    "AscensionState",
    "AscensionSetup",
    "LevelProgress",
    "GameModifiers",
    "GameSettings",
    "RunFlow",
    "EncounterResult",
    "RunState",
    "RunSummary",
    # Effects
    "ChallengeEffect",
    "CostMultiplierEffect",
    "ScoreMultiplierEffect",
    "RewardMultiplierEffect",
    "HandSizeEffect",
    "ShufflesEffect",
    "DrawReductionEffect",
    "StartingCoinsEffect",
    "StartingCurseEffect",
    "UnrecognizedEffect",
    # Controller
    "GameController",
    "log_event",
]
