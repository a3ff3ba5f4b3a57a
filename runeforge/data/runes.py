"""Rune definitions - the seven experience tracks and their reward formulas.

Each rune turns invested experience into a level. The level (plus free
levels, times a global multiplier) feeds the reward function below.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Union

from runeforge.engine.economy import format_number, format_percent_increase


class ResetTier(IntEnum):
    """Reset events, ordered from smallest to largest."""

    PRESTIGE = 1
    TRANSCENSION = 2
    REINCARNATION = 3
    ASCENSION = 4
    SINGULARITY = 5


class RuneKey(str, Enum):
    """The closed rune catalog."""

    SPEED = "speed"
    DUPLICATION = "duplication"
    PRISM = "prism"
    THRIFT = "thrift"
    SUPERIOR_INTELLECT = "superiorIntellect"
    INFINITE_ASCENT = "infiniteAscent"
    ANTIQUITIES = "antiquities"


# Runes that talismans and the shared multipliers act on
FIRST_FIVE: tuple[RuneKey, ...] = (
    RuneKey.SPEED,
    RuneKey.DUPLICATION,
    RuneKey.PRISM,
    RuneKey.THRIFT,
    RuneKey.SUPERIOR_INTELLECT,
)


# ── Rewards ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class SpeedReward:
    desc: str
    accelerator_power: float
    multiplicative_accelerators: float
    global_speed: float


@dataclass(frozen=True)
class DuplicationReward:
    desc: str
    multiplier_boosts: float
    multiplicative_multipliers: float
    tax_reduction: float


@dataclass(frozen=True)
class PrismReward:
    desc: str
    production_log10: float
    cost_divisor_log10: float


@dataclass(frozen=True)
class ThriftReward:
    desc: str
    cost_delay: float
    recycle_chance: float
    tax_reduction: float


@dataclass(frozen=True)
class SuperiorIntellectReward:
    desc: str
    offering_mult: float
    obtainium_mult: float
    ant_speed: float


@dataclass(frozen=True)
class InfiniteAscentReward:
    desc: str
    quark_mult: float
    cube_mult: float


@dataclass(frozen=True)
class AntiquitiesReward:
    desc: str
    add_code_cooldown_reduction: float


RuneReward = Union[
    SpeedReward,
    DuplicationReward,
    PrismReward,
    ThriftReward,
    SuperiorIntellectReward,
    InfiniteAscentReward,
    AntiquitiesReward,
]


def speed_rewards(level: float) -> SpeedReward:
    accelerator_power = 0.0002 * level
    multiplicative_accelerators = 1 + level / 400
    global_speed = 2 - math.exp(-math.cbrt(level) / 100)
    return SpeedReward(
        desc=(
            f"+{format_number(100 * accelerator_power)}% Accelerator Power, "
            f"{format_percent_increase(multiplicative_accelerators)} Accelerators, "
            f"{format_percent_increase(global_speed)} Global Speed"
        ),
        accelerator_power=accelerator_power,
        multiplicative_accelerators=multiplicative_accelerators,
        global_speed=global_speed,
    )


def duplication_rewards(level: float) -> DuplicationReward:
    multiplier_boosts = level / 5
    multiplicative_multipliers = 1 + level / 400
    tax_reduction = 0.001 + 0.999 * math.exp(-math.cbrt(level) / 10)
    return DuplicationReward(
        desc=(
            f"+{format_number(multiplier_boosts)} Multiplier Boosts, "
            f"{format_percent_increase(multiplicative_multipliers)} Multipliers, "
            f"-{format_number(100 * (1 - tax_reduction))}% Taxes"
        ),
        multiplier_boosts=multiplier_boosts,
        multiplicative_multipliers=multiplicative_multipliers,
        tax_reduction=tax_reduction,
    )


def prism_rewards(level: float) -> PrismReward:
    production_log10 = max(
        0.0,
        2 * math.log10(1 + level / 2) + (level / 2) * math.log10(2) - math.log10(256),
    )
    cost_divisor_log10 = math.floor(level / 10)
    return PrismReward(
        desc=(
            f"x1e{format_number(production_log10)} Crystal Production, "
            f"/1e{cost_divisor_log10} Crystal Upgrade Costs"
        ),
        production_log10=production_log10,
        cost_divisor_log10=cost_divisor_log10,
    )


def thrift_rewards(level: float) -> ThriftReward:
    cost_delay = min(1e15, level / 125)
    recycle_chance = 0.25 * (1 - math.exp(-math.sqrt(level) / 100))
    tax_reduction = 0.01 + 0.99 * math.exp(-math.cbrt(level) / 20)
    return ThriftReward(
        desc=(
            f"Delay costs by {format_number(cost_delay)}, "
            f"+{format_number(100 * recycle_chance)}% Recycle Chance, "
            f"-{format_number(100 * (1 - tax_reduction))}% Taxes"
        ),
        cost_delay=cost_delay,
        recycle_chance=recycle_chance,
        tax_reduction=tax_reduction,
    )


def superior_intellect_rewards(level: float) -> SuperiorIntellectReward:
    offering_mult = 1 + level / 2000
    obtainium_mult = 1 + level / 200
    ant_speed = 1 + level ** 2 / 2500
    return SuperiorIntellectReward(
        desc=(
            f"x{offering_mult:.3f} Offerings, "
            f"x{obtainium_mult:.3f} Obtainium, "
            f"x{format_number(ant_speed)} Ant Speed"
        ),
        offering_mult=offering_mult,
        obtainium_mult=obtainium_mult,
        ant_speed=ant_speed,
    )


def infinite_ascent_rewards(level: float) -> InfiniteAscentReward:
    quark_mult = 1.1 + level / 500
    cube_mult = 1 + level / 100
    return InfiniteAscentReward(
        desc=(
            f"{format_percent_increase(quark_mult)} Quarks, "
            f"{format_percent_increase(cube_mult)} Cubes"
        ),
        quark_mult=quark_mult,
        cube_mult=cube_mult,
    )


def antiquities_rewards(level: float) -> AntiquitiesReward:
    if level > 0:
        reduction = 0.8 - 0.3 * (level - 1) / (level + 10)
    else:
        reduction = 1.0
    return AntiquitiesReward(
        desc=f"Add code cooldown x{format_number(100 * reduction)}%",
        add_code_cooldown_reduction=reduction,
    )


# ── Definitions ──────────────────────────────────────────────────


@dataclass(frozen=True)
class RuneDef:
    """Static definition of a single rune."""

    key: RuneKey
    name: str
    description: str
    cost_coefficient: float
    levels_per_oom: float
    minimal_reset_tier: ResetTier
    rewards: Callable[[float], RuneReward]


SPEED = RuneDef(
    key=RuneKey.SPEED,
    name="Rune of Speed",
    description="Accelerates everything. Boosts accelerators and global speed.",
    cost_coefficient=500,
    levels_per_oom=150,
    minimal_reset_tier=ResetTier.ASCENSION,
    rewards=speed_rewards,
)

DUPLICATION = RuneDef(
    key=RuneKey.DUPLICATION,
    name="Rune of Duplication",
    description="Multiplies multipliers and trims taxes.",
    cost_coefficient=5e3,
    levels_per_oom=150,
    minimal_reset_tier=ResetTier.ASCENSION,
    rewards=duplication_rewards,
)

PRISM = RuneDef(
    key=RuneKey.PRISM,
    name="Rune of Prism",
    description="Bends light into crystals. Boosts crystal production.",
    cost_coefficient=2.5e4,
    levels_per_oom=150,
    minimal_reset_tier=ResetTier.ASCENSION,
    rewards=prism_rewards,
)

THRIFT = RuneDef(
    key=RuneKey.THRIFT,
    name="Rune of Thrift",
    description="Delays costs and recycles offerings.",
    cost_coefficient=2.5e5,
    levels_per_oom=150,
    minimal_reset_tier=ResetTier.ASCENSION,
    rewards=thrift_rewards,
)

SUPERIOR_INTELLECT = RuneDef(
    key=RuneKey.SUPERIOR_INTELLECT,
    name="Rune of Superior Intellect",
    description="Sharper minds gather more offerings and obtainium.",
    cost_coefficient=2.5e7,
    levels_per_oom=150,
    minimal_reset_tier=ResetTier.ASCENSION,
    rewards=superior_intellect_rewards,
)

INFINITE_ASCENT = RuneDef(
    key=RuneKey.INFINITE_ASCENT,
    name="Rune of Infinite Ascent",
    description="Every ascension yields more quarks and cubes.",
    cost_coefficient=1e75,
    levels_per_oom=0.5,
    minimal_reset_tier=ResetTier.SINGULARITY,
    rewards=infinite_ascent_rewards,
)

ANTIQUITIES = RuneDef(
    key=RuneKey.ANTIQUITIES,
    name="Rune of Antiquities",
    description="Relics of a lost age shorten the add code cooldown.",
    cost_coefficient=1e206,
    levels_per_oom=1 / 50,
    minimal_reset_tier=ResetTier.SINGULARITY,
    rewards=antiquities_rewards,
)


# ── All runes registry ──────────────────────────────────────────

RUNE_DEFS: dict[RuneKey, RuneDef] = {
    r.key: r
    for r in [
        SPEED,
        DUPLICATION,
        PRISM,
        THRIFT,
        SUPERIOR_INTELLECT,
        INFINITE_ASCENT,
        ANTIQUITIES,
    ]
}
