"""
Coin economy: prices, rewards, shop layout and balance estimates.

Every price returned here has already been scaled by the ascension tier.
"""

from __future__ import annotations

from dataclasses import dataclass

from coronata.types import (
    Coins,
    EncounterType,
    ItemTier,
    ItemType,
    RandomSource,
    UtilityUpgrade,
    ENCOUNTERS_PER_TRIAL,
    TOTAL_TRIALS,
)
from coronata.ascension import (
    calculate_ascension_cost,
    calculate_ascension_reward,
    create_ascension_setup,
)


# =============================================================================
# Price Tables (before ascension scaling)
# =============================================================================

BASE_ITEM_COSTS: dict[tuple[ItemType, ItemTier], int] = {
    (ItemType.EXPLOIT, ItemTier.WEAK): 15,
    (ItemType.EXPLOIT, ItemTier.DECENT): 25,
    (ItemType.EXPLOIT, ItemTier.AMAZING): 40,
    (ItemType.BLESSING, ItemTier.WEAK): 8,
    (ItemType.BLESSING, ItemTier.DECENT): 15,
    (ItemType.BLESSING, ItemTier.AMAZING): 25,
}

BASE_UTILITY_COSTS: dict[UtilityUpgrade, int] = {
    UtilityUpgrade.HAND_SIZE: 20,
    UtilityUpgrade.SHUFFLE: 15,
    UtilityUpgrade.DISCARD: 15,
}

CURSE_REMOVAL_COST = 10

REROLL_BASE_COST = 5
REROLL_MULTIPLIER = 2  # 5, 10, 20, 40...


# =============================================================================
# Reward Tables (before ascension scaling)
# =============================================================================

ENCOUNTER_REWARDS: dict[EncounterType, tuple[int, int]] = {
    EncounterType.FEAR: (4, 6),
    EncounterType.DANGER: (7, 10),
}
"""Inclusive (min, max) coin reward per successful encounter."""

AVERAGE_FEAR_REWARD = 5.0
AVERAGE_DANGER_REWARD = 8.5
AVERAGE_WANDER_REWARD = 7.0

FEAR_ENCOUNTERS_PER_RUN = TOTAL_TRIALS * (ENCOUNTERS_PER_TRIAL - 1)
DANGER_ENCOUNTERS_PER_RUN = TOTAL_TRIALS
WANDER_EVENTS_PER_RUN = TOTAL_TRIALS * 2

AMAZING_BUILD_EFFICIENCY = 0.8
"""Share of total income a player is expected to convert into an amazing build."""


# =============================================================================
# Prices
# =============================================================================


def get_item_cost(item_type: ItemType, tier: ItemTier, ascension_level: int) -> int:
    """Cost of an Exploit or Blessing of a given tier."""
    return calculate_ascension_cost(BASE_ITEM_COSTS[(item_type, tier)], ascension_level)


def get_utility_cost(upgrade: UtilityUpgrade, ascension_level: int) -> int:
    """Cost of a utility upgrade."""
    return calculate_ascension_cost(BASE_UTILITY_COSTS[upgrade], ascension_level)


def get_curse_removal_cost(ascension_level: int) -> int:
    return calculate_ascension_cost(CURSE_REMOVAL_COST, ascension_level)


def get_reroll_cost(reroll_count: int, ascension_level: int) -> int:
    """Cost of the next shop reroll; doubles with every reroll already made."""
    base_cost = REROLL_BASE_COST * REROLL_MULTIPLIER**reroll_count
    return calculate_ascension_cost(base_cost, ascension_level)


# =============================================================================
# Rewards
# =============================================================================


def roll_encounter_reward(encounter_type: EncounterType, ascension_level: int, rng: RandomSource) -> Coins:
    """Random coin reward for a successful encounter, scaled by the tier."""
    low, high = ENCOUNTER_REWARDS[encounter_type]
    return Coins(calculate_ascension_reward(rng.randint(low, high), ascension_level))


# =============================================================================
# Trade Shop
# =============================================================================


@dataclass(frozen=True, slots=True)
class TradeShopConfig:
    """Slot counts and tiers offered at a trade."""

    exploit_slots: int
    blessing_slots: int
    curse_slots: int
    max_curse_removals: int
    available_tiers: tuple[ItemTier, ...]


def get_trade_shop_config(trade_number: int) -> TradeShopConfig:
    """
    Shop layout for the Nth trade of a run (1-5).

    Early trades offer WEAK/DECENT items, mid-run trades add AMAZING, and
    the final trade drops WEAK. Numbers past 5 use the final layout.
    """
    match trade_number:
        case 1 | 2:
            return TradeShopConfig(
                exploit_slots=3,
                blessing_slots=4,
                curse_slots=2,
                max_curse_removals=1,
                available_tiers=(ItemTier.WEAK, ItemTier.DECENT),
            )
        case 3 | 4:
            return TradeShopConfig(
                exploit_slots=4,
                blessing_slots=5,
                curse_slots=3,
                max_curse_removals=2,
                available_tiers=(ItemTier.WEAK, ItemTier.DECENT, ItemTier.AMAZING),
            )
        case _:
            return TradeShopConfig(
                exploit_slots=5,
                blessing_slots=6,
                curse_slots=3,
                max_curse_removals=3,
                available_tiers=(ItemTier.DECENT, ItemTier.AMAZING),
            )


# =============================================================================
# Balance Estimates
# =============================================================================


@dataclass(frozen=True, slots=True)
class IncomeEstimate:
    """Expected coins over a full run."""

    starting_coins: int
    fear_rewards: int
    danger_rewards: int
    wander_rewards: int

    @property
    def total_income(self) -> int:
        return self.starting_coins + self.fear_rewards + self.danger_rewards + self.wander_rewards


@dataclass(frozen=True, slots=True)
class EconomyBalance:
    """Affordability of reference builds against expected income."""

    total_income: int
    minimal_build_cost: int
    decent_build_cost: int
    amazing_build_cost: int
    is_balanced: bool
    recommendations: tuple[str, ...]


def calculate_expected_income(ascension_level: int) -> IncomeEstimate:
    """
    Deterministic income estimate for a full run at a tier.

    Uses fixed encounter counts (10 Fear, 5 Danger, 10 Wander) with scaled
    average rewards, plus the tier's starting coins.
    """
    setup, _ = create_ascension_setup(ascension_level)
    return IncomeEstimate(
        starting_coins=setup.coins,
        fear_rewards=FEAR_ENCOUNTERS_PER_RUN * calculate_ascension_reward(AVERAGE_FEAR_REWARD, ascension_level),
        danger_rewards=DANGER_ENCOUNTERS_PER_RUN * calculate_ascension_reward(AVERAGE_DANGER_REWARD, ascension_level),
        wander_rewards=WANDER_EVENTS_PER_RUN * calculate_ascension_reward(AVERAGE_WANDER_REWARD, ascension_level),
    )


def validate_economy_balance(ascension_level: int) -> EconomyBalance:
    """
    Compare three reference builds against expected income.

    - minimal: 2 weak Exploits + 3 weak Blessings
    - decent: 2 decent Exploits + 3 decent Blessings + a hand size upgrade
    - amazing: 1 amazing + 1 decent Exploit, 2 amazing Blessings, a hand size
      upgrade and 2 curse removals, against 80% of income
    """
    total_income = calculate_expected_income(ascension_level).total_income

    def item(item_type: ItemType, tier: ItemTier) -> int:
        return get_item_cost(item_type, tier, ascension_level)

    hand_size = get_utility_cost(UtilityUpgrade.HAND_SIZE, ascension_level)

    minimal_build_cost = item(ItemType.EXPLOIT, ItemTier.WEAK) * 2 + item(ItemType.BLESSING, ItemTier.WEAK) * 3
    decent_build_cost = (
        item(ItemType.EXPLOIT, ItemTier.DECENT) * 2
        + item(ItemType.BLESSING, ItemTier.DECENT) * 3
        + hand_size
    )
    amazing_build_cost = (
        item(ItemType.EXPLOIT, ItemTier.AMAZING)
        + item(ItemType.EXPLOIT, ItemTier.DECENT)
        + item(ItemType.BLESSING, ItemTier.AMAZING) * 2
        + hand_size
        + get_curse_removal_cost(ascension_level) * 2
    )

    minimal_affordable = total_income >= minimal_build_cost
    decent_affordable = total_income >= decent_build_cost
    amazing_possible = total_income * AMAZING_BUILD_EFFICIENCY >= amazing_build_cost

    recommendations: list[str] = []
    if not minimal_affordable:
        recommendations.append("Increase coin rewards - minimal builds not affordable")
    if not decent_affordable:
        recommendations.append("Increase mid-game coin rewards or reduce item costs")
    if not amazing_possible:
        recommendations.append("Amazing builds too expensive relative to income")

    return EconomyBalance(
        total_income=total_income,
        minimal_build_cost=minimal_build_cost,
        decent_build_cost=decent_build_cost,
        amazing_build_cost=amazing_build_cost,
        is_balanced=minimal_affordable and decent_affordable and amazing_possible,
        recommendations=tuple(recommendations),
    )
