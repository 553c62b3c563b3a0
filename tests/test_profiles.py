"""
Tests for game mode profiles.
"""

from coronata.profiles import GAME_MODE_PROFILES, get_game_mode_profile, is_supported_rule_set


class TestProfiles:
    """Tests for the profile registry."""

    def test_known_modes(self) -> None:
        assert set(GAME_MODE_PROFILES) == {"coronata", "klondike", "spider", "freecell", "pyramid", "tripeaks"}

    def test_profile_names_its_rule_set(self) -> None:
        profile = get_game_mode_profile("klondike")

        assert profile is not None
        assert profile.rules == "klondike"
        assert profile.foundation_count == 4
        assert profile.tableau_count == 7

    def test_unknown_mode(self) -> None:
        assert get_game_mode_profile("golf") is None

    def test_supported_rule_sets(self) -> None:
        assert is_supported_rule_set("klondike")
        assert is_supported_rule_set("coronata")
        assert not is_supported_rule_set("freecell")
