"""
Game mode profiles: board geometry plus the rule-set that governs a session.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GameModeProfile:
    """Layout hints for the host plus the rule-set identifier."""

    card_width: int
    card_height: int
    tableau_gap: int
    deck_waste_gap: int
    waste_foundation_gap: int
    foundation_count: int
    tableau_count: int
    deck_type: str
    rules: str


GAME_MODE_PROFILES: dict[str, GameModeProfile] = {
    # Solitaire roguelike with encounters
    "coronata": GameModeProfile(48, 72, 18, 18, 28, 4, 8, "standard", "coronata"),
    "klondike": GameModeProfile(48, 72, 16, 16, 24, 4, 7, "standard", "klondike"),
    "spider": GameModeProfile(48, 72, 12, 16, 24, 8, 10, "spider", "spider"),
    "freecell": GameModeProfile(48, 72, 16, 16, 24, 4, 8, "standard", "freecell"),
    "pyramid": GameModeProfile(48, 72, 14, 16, 24, 1, 7, "standard", "pyramid"),
    "tripeaks": GameModeProfile(48, 72, 14, 16, 24, 1, 10, "standard", "tripeaks"),
}

SUPPORTED_RULE_SETS: frozenset[str] = frozenset({"klondike", "coronata"})
"""Rule-sets whose moves this engine validates."""


def get_game_mode_profile(name: str) -> GameModeProfile | None:
    """Get a profile by mode name."""
    return GAME_MODE_PROFILES.get(name)


def is_supported_rule_set(rule_set: str) -> bool:
    return rule_set in SUPPORTED_RULE_SETS
