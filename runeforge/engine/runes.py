"""Rune engine - experience ledgers, derived levels, and offering sacrifice.

A rune stores nothing but its experience. Level is the floor inverse of
the cost curve  cost_to_reach(L) = coefficient * (10 ^ (L / lpo) - 1),
recomputed on every access because levels-per-OOM moves with bonuses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_CEILING, ROUND_FLOOR, Context, Decimal, localcontext
from enum import Enum
from typing import TYPE_CHECKING, Callable

from runeforge.data.balance import BALANCE
from runeforge.data.runes import ResetTier, RuneDef, RuneKey, RuneReward
from runeforge.engine.economy import clamp_non_negative, debit

if TYPE_CHECKING:
    from runeforge.engine.game_state import GameState
    from runeforge.engine.session import Session

logger = logging.getLogger(__name__)

DECIMAL_CONTEXT = Context(prec=BALANCE.runes.decimal_precision)

ZERO = Decimal(0)
ONE = Decimal(1)


class LevelPolicy(Enum):
    """How a bulk sacrifice converts offerings into experience."""

    LUMP = "lump"            # one addition sized for the whole request
    PER_LEVEL = "per_level"  # one addition per level, rate re-read each step


@dataclass(frozen=True)
class RuneHooks:
    """Bonus functions a rune reads from the rest of the game."""

    levels_per_oom_increase: Callable[[Session], float]
    effective_level_mult: Callable[[Session], float]
    free_levels: Callable[[Session], float]
    # (session, purchased levels) -> experience per offering
    exp_per_offering: Callable[[Session, int], Decimal]
    is_unlocked: Callable[[Session], bool]


def to_decimal(value: float | int | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(value)


def ceil_decimal(value: Decimal) -> Decimal:
    return value.to_integral_value(rounding=ROUND_CEILING)


class Rune:
    """One experience track bound to a session."""

    def __init__(self, session: Session, definition: RuneDef, hooks: RuneHooks) -> None:
        self._session = session
        self.definition = definition
        self.hooks = hooks
        ledger = session.state.rune_experience
        self._experience = max(ZERO, to_decimal(ledger.get(self.key.value, ZERO)))
        self._write_through()

    def __repr__(self) -> str:
        return f"Rune({self.key.value!r}, experience={self._experience})"

    # ── Identity ─────────────────────────────────────────

    @property
    def key(self) -> RuneKey:
        return self.definition.key

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def cost_coefficient(self) -> Decimal:
        return to_decimal(self.definition.cost_coefficient)

    @property
    def minimal_reset_tier(self) -> ResetTier:
        return self.definition.minimal_reset_tier

    @property
    def experience(self) -> Decimal:
        return self._experience

    # ── Derived values ───────────────────────────────────

    @property
    def effective_levels_per_oom(self) -> float:
        return self.definition.levels_per_oom + self.hooks.levels_per_oom_increase(self._session)

    def cost_to_reach(self, level: int, levels_per_oom: float | None = None) -> Decimal:
        """Total experience needed to stand at `level`."""
        lpo = to_decimal(levels_per_oom if levels_per_oom is not None else self.effective_levels_per_oom)
        with localcontext(DECIMAL_CONTEXT):
            return self.cost_coefficient * (Decimal(10) ** (Decimal(level) / lpo) - ONE)

    @property
    def level(self) -> int:
        """Largest L with cost_to_reach(L) <= experience."""
        lpo = self.effective_levels_per_oom
        exp = self._experience
        with localcontext(DECIMAL_CONTEXT):
            estimate = to_decimal(lpo) * (exp / self.cost_coefficient + ONE).log10()
            level = int(estimate.to_integral_value(rounding=ROUND_FLOOR))

        # log10 rounding can land one off at an exact boundary
        while level > 0 and self.cost_to_reach(level, lpo) > exp:
            level -= 1
        while self.cost_to_reach(level + 1, lpo) <= exp:
            level += 1
        return level

    @property
    def free_levels(self) -> float:
        return self.hooks.free_levels(self._session)

    @property
    def effective_level(self) -> float:
        state = self._session.state
        if (
            state.current_reincarnation_challenge == BALANCE.runes.debuff_challenge
            and self.minimal_reset_tier < ResetTier.SINGULARITY
        ):
            return self._session.ruleset.reincarnation_debuff_level
        return (self.level + self.free_levels) * self.hooks.effective_level_mult(self._session)

    @property
    def is_unlocked(self) -> bool:
        return self.hooks.is_unlocked(self._session)

    @property
    def bonus(self) -> RuneReward:
        """Reward bundle; locked runes report their level-0 reward."""
        if not self.is_unlocked:
            return self.definition.rewards(0)
        return self.definition.rewards(self.effective_level)

    @property
    def reward_desc(self) -> str:
        return self.bonus.desc

    @property
    def exp_per_offering(self) -> Decimal:
        return self.hooks.exp_per_offering(self._session, self.level)

    @property
    def exp_to_next_level(self) -> Decimal:
        lookahead = self._session.ruleset.tnl_lookahead
        return self.exp_left_to_level(self.level + lookahead)

    @property
    def offerings_to_next_level(self) -> Decimal:
        return self._offerings_for(self.exp_to_next_level)

    def _offerings_for(self, exp: Decimal) -> Decimal:
        """Offerings buying `exp` at the current rate; the ceiling when the rate is zero."""
        rate = self.exp_per_offering
        if rate <= ZERO:
            return to_decimal(BALANCE.runes.numeric_ceiling)
        with localcontext(DECIMAL_CONTEXT):
            return ceil_decimal(exp / rate)

    def exp_left_to_level(self, level: int) -> Decimal:
        with localcontext(DECIMAL_CONTEXT):
            return max(ZERO, self.cost_to_reach(level) - self._experience)

    def offerings_to_level(self, level: int) -> Decimal:
        """Offerings needed to reach `level` at the current rate (at least 1)."""
        return max(ONE, self._offerings_for(self.exp_left_to_level(level)))

    # ── Mutations ────────────────────────────────────────

    def _write_through(self) -> None:
        self._session.state.rune_experience[self.key.value] = self._experience

    def set_experience(self, experience: float | Decimal) -> None:
        self._experience = max(ZERO, to_decimal(experience))
        self._write_through()

    def add_experience(self, offerings: float | Decimal) -> None:
        """Convert offerings to experience at the current per-offering rate."""
        with localcontext(DECIMAL_CONTEXT):
            gained = to_decimal(offerings) * self.exp_per_offering
            self._experience = self._experience + max(ZERO, gained)
        self._write_through()

    def reset_experience(self) -> None:
        self._experience = ZERO
        self._write_through()

    def level_up(self, levels: int, budget: float) -> float:
        """Spend up to `budget` offerings to gain `levels` levels.

        Debits the offerings pool and returns the amount spent. When the
        request is unaffordable (or past the numeric ceiling) the whole
        budget goes in as partial progress.
        """
        budget = clamp_non_negative(budget)
        if self._session.ruleset.level_policy == LevelPolicy.PER_LEVEL:
            spent = self._level_up_per_level(levels, budget)
        else:
            spent = self._level_up_lump(levels, budget)

        state = self._session.state
        state.offerings = debit(state.offerings, spent)
        logger.debug(
            "Rune %s: requested %d levels, spent %s offerings, now level %d",
            self.key.value, levels, spent, self.level,
        )
        return spent

    def _spend(self, required: Decimal, budget: float) -> float:
        """Add `required` offerings if affordable, else the whole budget."""
        ceiling = to_decimal(BALANCE.runes.numeric_ceiling)
        if required > to_decimal(budget) or required > ceiling:
            self.add_experience(budget)
            return budget
        self.add_experience(required)
        return float(required)

    def _level_up_lump(self, levels: int, budget: float) -> float:
        required = self.offerings_to_level(self.level + levels)
        return self._spend(required, budget)

    def _level_up_per_level(self, levels: int, budget: float) -> float:
        spent = 0.0
        target = self.level + levels
        for _ in range(min(levels, BALANCE.runes.max_levels_per_call)):
            level = self.level
            if level >= target or budget - spent <= 0:
                break
            remaining = budget - spent
            used = self._spend(self.offerings_to_level(level + 1), remaining)
            spent += used
            if used >= remaining:
                break
        return min(spent, budget)


# ── Module-level operations ──────────────────────────────────────


def sacrifice_offerings(session: Session, key: RuneKey | str, budget: float, auto: bool = False) -> float:
    """Spend offerings on a rune. Locked runes are a no-op.

    Manual sacrifices request `offering_buy_amount` levels; automated ones
    request the `offeringAuto` shop level, doubled by cube upgrade 20.
    Returns offerings spent.
    """
    rune = session.get_rune(key)
    if not rune.is_unlocked:
        return 0.0

    state = session.state
    levels = state.offering_buy_amount or BALANCE.runes.default_buy_amount
    if auto:
        levels = state.shop_upgrades.get("offeringAuto", 0)
        if state.cube_upgrades.get(20, 0) > 0:
            levels *= 2
    levels = min(levels, BALANCE.runes.max_levels_per_call)
    if levels <= 0:
        return 0.0

    spent = rune.level_up(levels, budget)
    state.offerings = clamp_non_negative(state.offerings)
    return spent


def grant_offerings(state: GameState, amount: float) -> float:
    """Credit offerings to the pool, capped at the economy ceiling."""
    state.offerings = min(BALANCE.economy.offering_cap, state.offerings + clamp_non_negative(amount))
    return state.offerings

