"""Game state - the currency pools, ledgers and counters the engines read."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from runeforge.data.talismans import FragmentKind, empty_fragments


@dataclass
class GameState:
    """Mutable state owned by the wider game.

    The rune and talisman engines read the counters below as opaque numeric
    lookups and debit the currency pools directly. Missing counter entries
    read as 0.
    """

    # ── Currency pools ───────────────────────────────────
    offerings: float = 0.0
    research_points: float = 0.0  # obtainium
    fragments: dict[FragmentKind, float] = field(default_factory=empty_fragments)

    # ── Persisted investment ledgers ─────────────────────
    rune_experience: dict[str, Decimal] = field(default_factory=dict)
    talisman_fragments: dict[str, dict[str, int]] = field(default_factory=dict)

    # ── Progress counters: index → level/count ───────────
    achievements: dict[int, int] = field(default_factory=dict)
    researches: dict[int, int] = field(default_factory=dict)
    upgrades: dict[int, int] = field(default_factory=dict)
    cube_upgrades: dict[int, int] = field(default_factory=dict)
    constant_upgrades: dict[int, int] = field(default_factory=dict)
    platonic_upgrades: dict[int, int] = field(default_factory=dict)
    ant_upgrades: dict[int, int] = field(default_factory=dict)
    challenge_completions: dict[int, int] = field(default_factory=dict)
    highest_challenge_completions: dict[int, int] = field(default_factory=dict)
    shop_upgrades: dict[str, int] = field(default_factory=dict)
    pseudo_coin_upgrades: dict[str, int] = field(default_factory=dict)

    # ── Multipliers computed elsewhere in the game ───────
    # e.g. "cube_rune_exp", "challenge15_rune_exp", "challenge15_rune_bonus",
    # "cube_midas_tribute"; missing keys read as 1.0
    external_multipliers: dict[str, float] = field(default_factory=dict)
    # Corruption name → effect multiplier, e.g. "drought"
    corruption_effects: dict[str, float] = field(default_factory=dict)
    recycle_chance_bonus: float = 0.0

    # ── Coins (feed a few free-level formulas) ───────────
    coins: Decimal = field(default_factory=Decimal)
    owned_coin_buildings: int = 0
    campaign_rune_bonus: float = 0.0  # free Infinite Ascent levels

    # ── Reset counters ───────────────────────────────────
    ascension_count: int = 0
    ascension_counter: float = 0.0  # seconds in the current ascension
    highest_singularity_count: int = 0
    current_reincarnation_challenge: int = 0

    # ── Player purchase preferences ──────────────────────
    offering_buy_amount: int = 1
    buy_talisman_shard_percent: int = 10

    def external_multiplier(self, name: str) -> float:
        return self.external_multipliers.get(name, 1.0)

    def corruption_effect(self, name: str) -> float:
        return self.corruption_effects.get(name, 1.0)

    def achievement_count(self) -> int:
        """Number of achievements earned."""
        return sum(1 for v in self.achievements.values() if v > 0)
