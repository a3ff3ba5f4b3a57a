"""Talisman definitions - fragment cost curves, rewards, and rune coefficients.

Talismans are levelled with a basket of seven fragment kinds. Rarer
fragments only enter the cost vector past their threshold level, so the
basket widens as the talisman climbs.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

from runeforge.data.balance import BALANCE
from runeforge.data.runes import RuneKey
from runeforge.engine.economy import format_number, format_percent_increase


class FragmentKind(str, Enum):
    """The seven talisman crafting currencies, cheapest first."""

    SHARD = "shard"
    COMMON = "commonFragment"
    UNCOMMON = "uncommonFragment"
    RARE = "rareFragment"
    EPIC = "epicFragment"
    LEGENDARY = "legendaryFragment"
    MYTHICAL = "mythicalFragment"


class TalismanKey(str, Enum):
    """The closed talisman catalog."""

    EXEMPTION = "exemption"
    CHRONOS = "chronos"
    MIDAS = "midas"
    METAPHYSICS = "metaphysics"
    POLYMATH = "polymath"
    MORTUUS = "mortuus"
    PLASTIC = "plastic"
    ACHIEVEMENT = "achievement"


FragmentCosts = dict[FragmentKind, int]


def empty_fragments() -> dict[FragmentKind, int]:
    """A zeroed fragment mapping (fresh dict every call)."""
    return {kind: 0 for kind in FragmentKind}


# ── Cost curves ──────────────────────────────────────────────────

# (kind, threshold level, cubic coefficient)
REGULAR_CURVE: tuple[tuple[FragmentKind, int, float], ...] = (
    (FragmentKind.SHARD, 0, 1 / 8),
    (FragmentKind.COMMON, 30, 1 / 32),
    (FragmentKind.UNCOMMON, 60, 1 / 384),
    (FragmentKind.RARE, 90, 1 / 500),
    (FragmentKind.EPIC, 120, 1 / 375),
    (FragmentKind.LEGENDARY, 150, 1 / 192),
    (FragmentKind.MYTHICAL, 150, 1 / 1280),
)

# (kind, threshold level, scale)
EXPONENTIAL_CURVE: tuple[tuple[FragmentKind, int, float], ...] = (
    (FragmentKind.SHARD, 0, 100),
    (FragmentKind.COMMON, 30, 50),
    (FragmentKind.UNCOMMON, 60, 25),
    (FragmentKind.RARE, 90, 20),
    (FragmentKind.EPIC, 120, 15),
    (FragmentKind.LEGENDARY, 150, 10),
    (FragmentKind.MYTHICAL, 150, 5),
)
EXPONENTIAL_GROWTH = 1.12


def price_multiplier(base_mult: float, level: int) -> float:
    """Late-game cost cliff: extra linear factors past 120, 150 and 180."""
    mult = base_mult
    if level >= 120:
        mult *= (level - 90) / 30
    if level >= 150:
        mult *= (level - 120) / 30
    if level >= 180:
        mult *= (level - 170) / 10
    return mult


def regular_cost_progression(base_mult: float, level: int) -> FragmentCosts:
    """Cubic, tier-gated cost of buying level+1."""
    mult = price_multiplier(base_mult, level)
    costs: FragmentCosts = {}
    for kind, threshold, coefficient in REGULAR_CURVE:
        if level < threshold:
            costs[kind] = 0
            continue
        base = max(0, math.floor(1 + coefficient * (level - threshold) ** 3))
        costs[kind] = math.floor(mult * base)
    return costs


def exponential_cost_progression(base_mult: float, level: int) -> FragmentCosts:
    """Geometric cost of buying level+1, same thresholds as the cubic curve."""
    costs: FragmentCosts = {}
    for kind, threshold, scale in EXPONENTIAL_CURVE:
        if level < threshold:
            costs[kind] = 0
            continue
        costs[kind] = math.floor(base_mult * EXPONENTIAL_GROWTH ** (level - threshold) * scale)
    return costs


# ── Rewards ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class ExemptionReward:
    desc: str
    tax_reduction: float
    duplication_oom_bonus: float


@dataclass(frozen=True)
class ChronosReward:
    desc: str
    global_speed: float
    speed_oom_bonus: float


@dataclass(frozen=True)
class MidasReward:
    desc: str
    blessing_bonus: float
    thrift_oom_bonus: float


@dataclass(frozen=True)
class MetaphysicsReward:
    desc: str
    talisman_effect: float


@dataclass(frozen=True)
class PolymathReward:
    desc: str
    spirit_bonus: float
    si_oom_bonus: float


@dataclass(frozen=True)
class MortuusReward:
    desc: str
    ant_bonus: float
    prism_oom_bonus: float


@dataclass(frozen=True)
class PlasticReward:
    desc: str
    quark_bonus: float


@dataclass(frozen=True)
class AchievementReward:
    desc: str
    offering_bonus: float


TalismanReward = Union[
    ExemptionReward,
    ChronosReward,
    MidasReward,
    MetaphysicsReward,
    PolymathReward,
    MortuusReward,
    PlasticReward,
    AchievementReward,
]

# Rune levels-per-OOM gained per talisman level
OOM_BONUS_PER_LEVEL = 1 / 80


def _tier(rarity: int) -> int:
    """Rarity steps above Common (0 for Common or locked)."""
    return max(0, rarity - 1)


def exemption_rewards(level: int, rarity: int) -> ExemptionReward:
    tax_reduction = 0.1 * _tier(rarity)
    oom = OOM_BONUS_PER_LEVEL * level
    return ExemptionReward(
        desc=f"-{format_number(100 * tax_reduction)}% Taxes, +{format_number(oom)} Duplication levels/OOM",
        tax_reduction=tax_reduction,
        duplication_oom_bonus=oom,
    )


def chronos_rewards(level: int, rarity: int) -> ChronosReward:
    global_speed = 1 + 0.1 * _tier(rarity)
    oom = OOM_BONUS_PER_LEVEL * level
    return ChronosReward(
        desc=f"{format_percent_increase(global_speed)} Global Speed, +{format_number(oom)} Speed levels/OOM",
        global_speed=global_speed,
        speed_oom_bonus=oom,
    )


def midas_rewards(level: int, rarity: int) -> MidasReward:
    blessing_bonus = 0.1 * _tier(rarity)
    oom = OOM_BONUS_PER_LEVEL * level
    return MidasReward(
        desc=f"+{format_number(100 * blessing_bonus)}% Blessings, +{format_number(oom)} Thrift levels/OOM",
        blessing_bonus=blessing_bonus,
        thrift_oom_bonus=oom,
    )


def metaphysics_rewards(level: int, rarity: int) -> MetaphysicsReward:
    talisman_effect = 0.02 * _tier(rarity)
    return MetaphysicsReward(
        desc=f"+{format_number(100 * talisman_effect)}% to every Talisman's rune bonus",
        talisman_effect=talisman_effect,
    )


def polymath_rewards(level: int, rarity: int) -> PolymathReward:
    spirit_bonus = 0.01 * _tier(rarity)
    oom = OOM_BONUS_PER_LEVEL * level
    return PolymathReward(
        desc=f"+{format_number(100 * spirit_bonus)}% Spirits, +{format_number(oom)} Superior Intellect levels/OOM",
        spirit_bonus=spirit_bonus,
        si_oom_bonus=oom,
    )


def mortuus_rewards(level: int, rarity: int) -> MortuusReward:
    ant_bonus = 2 * _tier(rarity)
    oom = OOM_BONUS_PER_LEVEL * level
    return MortuusReward(
        desc=f"+{ant_bonus} Ant levels, +{format_number(oom)} Prism levels/OOM",
        ant_bonus=ant_bonus,
        prism_oom_bonus=oom,
    )


def plastic_rewards(level: int, rarity: int) -> PlasticReward:
    quark_bonus = level / 2000
    return PlasticReward(
        desc=f"+{format_number(100 * quark_bonus)}% Quarks",
        quark_bonus=quark_bonus,
    )


def achievement_rewards(level: int, rarity: int) -> AchievementReward:
    offering_bonus = 0.05 * _tier(rarity) + level / 3600
    return AchievementReward(
        desc=f"+{format_number(100 * offering_bonus)}% Offerings",
        offering_bonus=offering_bonus,
    )


# ── Definitions ──────────────────────────────────────────────────


@dataclass(frozen=True)
class TalismanDef:
    """Static definition of a single talisman."""

    key: TalismanKey
    name: str
    description: str
    base_mult: float
    costs: Callable[[float, int], FragmentCosts]
    rewards: Callable[[int, int], TalismanReward]
    # Bonus rune levels per talisman level at Common rarity
    rune_coefficients: dict[RuneKey, float]
    max_level: int = BALANCE.talismans.base_max_level


EXEMPTION = TalismanDef(
    key=TalismanKey.EXEMPTION,
    name="Exemption Talisman",
    description="The taxman looks the other way.",
    base_mult=1,
    costs=regular_cost_progression,
    rewards=exemption_rewards,
    rune_coefficients={RuneKey.DUPLICATION: 0.1, RuneKey.THRIFT: 0.05},
)

CHRONOS = TalismanDef(
    key=TalismanKey.CHRONOS,
    name="Chronos Talisman",
    description="Time bends around the bearer.",
    base_mult=4,
    costs=regular_cost_progression,
    rewards=chronos_rewards,
    rune_coefficients={RuneKey.SPEED: 0.1, RuneKey.PRISM: 0.05},
)

MIDAS = TalismanDef(
    key=TalismanKey.MIDAS,
    name="Midas Talisman",
    description="Everything it touches turns to blessings.",
    base_mult=1e4,
    costs=regular_cost_progression,
    rewards=midas_rewards,
    rune_coefficients={RuneKey.THRIFT: 0.1, RuneKey.SUPERIOR_INTELLECT: 0.05},
)

METAPHYSICS = TalismanDef(
    key=TalismanKey.METAPHYSICS,
    name="Metaphysics Talisman",
    description="Amplifies every other talisman, itself included.",
    base_mult=1e8,
    costs=regular_cost_progression,
    rewards=metaphysics_rewards,
    rune_coefficients={
        RuneKey.SPEED: 0.03,
        RuneKey.DUPLICATION: 0.03,
        RuneKey.PRISM: 0.03,
        RuneKey.THRIFT: 0.03,
        RuneKey.SUPERIOR_INTELLECT: 0.03,
    },
)

POLYMATH = TalismanDef(
    key=TalismanKey.POLYMATH,
    name="Polymath Talisman",
    description="Knows a little about everything.",
    base_mult=1e13,
    costs=regular_cost_progression,
    rewards=polymath_rewards,
    rune_coefficients={RuneKey.SUPERIOR_INTELLECT: 0.1, RuneKey.DUPLICATION: 0.05},
)

MORTUUS = TalismanDef(
    key=TalismanKey.MORTUUS,
    name="Mortuus Est Talisman",
    description="The ants remember.",
    base_mult=10,
    costs=regular_cost_progression,
    rewards=mortuus_rewards,
    rune_coefficients={RuneKey.PRISM: 0.1, RuneKey.SPEED: 0.05},
)

PLASTIC = TalismanDef(
    key=TalismanKey.PLASTIC,
    name="Plastic Talisman",
    description="Cheap, cheerful, and strangely quark-rich.",
    base_mult=100,
    costs=regular_cost_progression,
    rewards=plastic_rewards,
    rune_coefficients={RuneKey.INFINITE_ASCENT: 0.02, RuneKey.SPEED: 0.05},
)

ACHIEVEMENT = TalismanDef(
    key=TalismanKey.ACHIEVEMENT,
    name="Achievement Talisman",
    description="A trophy case that pays dividends.",
    base_mult=1,
    costs=exponential_cost_progression,
    rewards=achievement_rewards,
    rune_coefficients={
        RuneKey.SPEED: 0.02,
        RuneKey.DUPLICATION: 0.02,
        RuneKey.PRISM: 0.02,
        RuneKey.THRIFT: 0.02,
        RuneKey.SUPERIOR_INTELLECT: 0.02,
    },
)


# ── All talismans registry ───────────────────────────────────────

TALISMAN_DEFS: dict[TalismanKey, TalismanDef] = {
    t.key: t
    for t in [
        EXEMPTION,
        CHRONOS,
        MIDAS,
        METAPHYSICS,
        POLYMATH,
        MORTUUS,
        PLASTIC,
        ACHIEVEMENT,
    ]
}
