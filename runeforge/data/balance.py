"""Balance constants - all tuning knobs in one place.

Rune costs follow: cost_coefficient * (10 ^ (level / levels_per_oom) - 1)
Talisman costs follow the cubic or exponential fragment curves in talismans.py.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RuneBalance:
    """Tuning for the rune engine."""

    # Offerings / experience above this are treated as unreachable
    numeric_ceiling: float = 1e300
    # Bulk and auto sacrifice never advance more than this many levels per call
    max_levels_per_call: int = 10_000
    # Significant digits used for experience arithmetic
    decimal_precision: int = 50
    # Reincarnation challenge that flattens every non-singularity rune
    debuff_challenge: int = 9
    # Levels requested by one manual sacrifice when nothing else is configured
    default_buy_amount: int = 1


@dataclass(frozen=True)
class TalismanBalance:
    """Tuning for the talisman engine and fragment shop."""

    # Multiplier on talisman rune bonuses for rarities 1..7
    rarity_multipliers: tuple[float, ...] = (1.0, 1.2, 1.5, 1.8, 2.1, 2.5, 3.0)
    rarity_bands: int = 6
    max_rarity: int = 7
    base_max_level: int = 180

    # Bulk purchases stop after this many levels
    max_levels_per_call: int = 10_000

    # Auto-buyer batch size: (ascensions, singularities) milestones
    autobuy_batch: int = 1
    autobuy_batch_ascended: int = 30
    autobuy_batch_singularity: int = 180

    # Fragment shop: (obtainium, offerings) per unit
    fragment_prices: tuple[tuple[str, float, float], ...] = (
        ("shard", 1e13, 1e2),
        ("commonFragment", 1e14, 1e4),
        ("uncommonFragment", 1e16, 1e5),
        ("rareFragment", 1e18, 1e6),
        ("epicFragment", 1e20, 1e7),
        ("legendaryFragment", 1e22, 1e8),
        ("mythicalFragment", 1e24, 1e9),
    )
    buy_percentages: tuple[int, ...] = (10, 25, 50, 100)

    # Achievement count that unlocks the Achievement talisman
    achievement_talisman_unlock: int = 200


@dataclass(frozen=True)
class EconomyBalance:
    """Tuning for currency pools and number formatting."""

    # Offerings pool never grows past this
    offering_cap: float = 1e300

    # Large number formatting thresholds
    suffixes: tuple[tuple[float, str], ...] = (
        (1e3, "K"),
        (1e6, "M"),
        (1e9, "B"),
        (1e12, "T"),
        (1e15, "Qa"),
        (1e18, "Qi"),
    )
    # Past the last suffix, switch to scientific notation
    scientific_threshold: float = 1e21


@dataclass(frozen=True)
class GameBalance:
    """Top-level container for all balance constants."""

    runes: RuneBalance = field(default_factory=RuneBalance)
    talismans: TalismanBalance = field(default_factory=TalismanBalance)
    economy: EconomyBalance = field(default_factory=EconomyBalance)


# Singleton - import this everywhere
BALANCE = GameBalance()
