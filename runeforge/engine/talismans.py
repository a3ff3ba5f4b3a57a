"""Talisman engine - fragment ledgers, greedy level replay, rarity, and the fragment shop.

The ledger of fragments invested is the only persisted state. Level is
recovered by replaying the cost curve from level 0 against a copy of the
ledger, and re-derived whenever the effective level cap moves.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from runeforge.data.balance import BALANCE
from runeforge.data.runes import RuneKey
from runeforge.data.talismans import (
    FragmentCosts,
    FragmentKind,
    TalismanDef,
    TalismanKey,
    TalismanReward,
    empty_fragments,
)
from runeforge.engine.economy import debit

if TYPE_CHECKING:
    from runeforge.engine.game_state import GameState
    from runeforge.engine.session import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TalismanHooks:
    """Bonus functions a talisman reads from the rest of the game."""

    level_cap_increase: Callable[[Session], int]
    is_unlocked: Callable[[Session], bool]


def rarity_multiplier(rarity: int) -> float:
    """Rune-bonus scale for a rarity; 0 for locked (rarity 0)."""
    if rarity <= 0:
        return 0.0
    table = BALANCE.talismans.rarity_multipliers
    return table[min(rarity, len(table)) - 1]


def _ledger_from_state(raw: dict[str, int] | None) -> dict[FragmentKind, int]:
    ledger = empty_fragments()
    for kind in FragmentKind:
        ledger[kind] = max(0, int((raw or {}).get(kind.value, 0)))
    return ledger


class Talisman:
    """One fragment-ledger upgrade track bound to a session."""

    def __init__(self, session: Session, definition: TalismanDef, hooks: TalismanHooks) -> None:
        self._session = session
        self.definition = definition
        self.hooks = hooks
        self._invested = _ledger_from_state(session.state.talisman_fragments.get(self.key.value))
        self._level = 0
        self._replayed_cap: int | None = None
        self.update_level_from_invested()
        self._write_through()

    def __repr__(self) -> str:
        return f"Talisman({self.key.value!r}, level={self._level})"

    # ── Identity ─────────────────────────────────────────

    @property
    def key(self) -> TalismanKey:
        return self.definition.key

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def max_level(self) -> int:
        return self.definition.max_level

    @property
    def fragments_invested(self) -> dict[FragmentKind, int]:
        """Copy of the ledger."""
        return dict(self._invested)

    # ── Costs ────────────────────────────────────────────

    def costs_for_level(self, level: int) -> FragmentCosts:
        """Fragment vector that buys level+1 from `level`."""
        return self.definition.costs(self.definition.base_mult, level)

    @property
    def cost_tnl(self) -> FragmentCosts:
        return self.costs_for_level(self.level)

    def affordable(self, budget: dict[FragmentKind, float], level: int | None = None) -> bool:
        """True if every fragment cost at `level` fits in `budget` at once."""
        costs = self.costs_for_level(self.level if level is None else level)
        return all(cost <= budget.get(kind, 0) for kind, cost in costs.items())

    # ── Level and rarity ─────────────────────────────────

    @property
    def effective_level_cap(self) -> int:
        return self.max_level + self.hooks.level_cap_increase(self._session)

    @property
    def level(self) -> int:
        if self.effective_level_cap != self._replayed_cap:
            self.update_level_from_invested()
        return self._level

    def update_level_from_invested(self) -> int:
        """Greedy replay of the cost curve against a copy of the ledger."""
        cap = self.effective_level_cap
        working = dict(self._invested)
        level = 0
        while level < cap and self.affordable(working, level):
            for kind, cost in self.costs_for_level(level).items():
                working[kind] -= cost
            level += 1
        self._level = level
        self._replayed_cap = cap
        return level

    def _banded_rarity(self) -> int:
        bands = BALANCE.talismans.rarity_bands
        return 1 + min(bands, math.floor(bands * self.level / self.max_level))

    @property
    def rarity(self) -> int:
        """1..7 from the level banded over the base max level; 0 when locked."""
        if not self.is_unlocked:
            return 0
        return self._banded_rarity()

    @property
    def levels_until_rarity_increase(self) -> int:
        level = self.level
        if level >= self.max_level:
            return 0
        level_required = math.ceil(self.max_level * self._banded_rarity() / BALANCE.talismans.rarity_bands)
        return level_required - level

    @property
    def is_unlocked(self) -> bool:
        return self.hooks.is_unlocked(self._session)

    # ── Rewards ──────────────────────────────────────────

    @property
    def bonus(self) -> TalismanReward:
        if not self.is_unlocked:
            return self.definition.rewards(0, 0)
        return self.definition.rewards(self.level, self.rarity)

    @property
    def reward_desc(self) -> str:
        return self.bonus.desc

    @property
    def rune_bonuses(self) -> dict[RuneKey, float]:
        """Bonus rune levels this talisman grants to each rune."""
        bonuses = {key: 0.0 for key in RuneKey}
        if not self.is_unlocked or self.level == 0:
            return bonuses

        special = self._session.ruleset.talisman_special_multiplier(self._session)
        scale = rarity_multiplier(self.rarity) * self.level * special
        for key, coefficient in self.definition.rune_coefficients.items():
            if key == RuneKey.ANTIQUITIES:
                continue
            bonuses[key] = coefficient * scale
        return bonuses

    def rune_bonus(self, key: RuneKey) -> float:
        return self.rune_bonuses[RuneKey(key)]

    # ── Mutations ────────────────────────────────────────

    def _write_through(self) -> None:
        self._session.state.talisman_fragments[self.key.value] = {
            kind.value: amount for kind, amount in self._invested.items()
        }

    def set_level_ledger(self, level: int) -> None:
        """Rebuild the ledger as exactly what reaching `level` costs."""
        level = max(0, min(level, self.effective_level_cap))
        ledger = empty_fragments()
        for n in range(level):
            for kind, cost in self.costs_for_level(n).items():
                ledger[kind] += cost
        self._invested = ledger
        self.update_level_from_invested()
        self._write_through()

    def buy_level(self) -> bool:
        """Buy one level from fragment inventory. All seven costs or nothing."""
        if not self.is_unlocked:
            return False
        level = self.level
        if level >= self.effective_level_cap:
            return False

        state = self._session.state
        if not self.affordable(state.fragments, level):
            return False

        for kind, cost in self.costs_for_level(level).items():
            state.fragments[kind] = debit(state.fragments.get(kind, 0), cost)
            self._invested[kind] += cost
        self._level = level + 1
        self._write_through()
        logger.debug("Talisman %s: bought level %d", self.key.value, self._level)
        return True

    def buy_levels(self, levels: int) -> int:
        """Buy up to `levels` single levels, stopping at the first failure."""
        bought = 0
        for _ in range(min(levels, BALANCE.talismans.max_levels_per_call)):
            if not self.buy_level():
                break
            bought += 1
        return bought

    def buy_to_next_rarity(self) -> int:
        """Buy levels until the rarity band changes or funds run out."""
        return self.buy_levels(self.levels_until_rarity_increase)

    def buy_to_max(self) -> int:
        """Buy levels until the effective cap or funds run out."""
        return self.buy_levels(self.effective_level_cap - self.level)


# ── Fragment shop ────────────────────────────────────────────────


@dataclass(frozen=True)
class TalismanResourceQuote:
    """What a fragment purchase would buy and cost."""

    kind: FragmentKind
    amount: int
    obtainium_cost: float
    offering_cost: float
    can_buy: bool


def fragment_prices(kind: FragmentKind) -> tuple[float, float]:
    """(obtainium, offerings) per unit of `kind`."""
    for name, obtainium, offerings in BALANCE.talismans.fragment_prices:
        if name == FragmentKind(kind).value:
            return obtainium, offerings
    raise KeyError(kind)


def talisman_resource_quote(
    state: GameState,
    kind: FragmentKind,
    percentage: int | None = None,
) -> TalismanResourceQuote:
    kind = FragmentKind(kind)
    if percentage is None:
        percentage = state.buy_talisman_shard_percent
    obtainium_price, offering_price = fragment_prices(kind)

    max_by_obtainium = max(1, math.floor(state.research_points / obtainium_price))
    max_by_offerings = max(1, math.floor(state.offerings / offering_price))
    amount = max(1, math.floor(percentage / 100 * min(max_by_obtainium, max_by_offerings)))

    obtainium_cost = amount * obtainium_price
    offering_cost = amount * offering_price
    return TalismanResourceQuote(
        kind=kind,
        amount=amount,
        obtainium_cost=obtainium_cost,
        offering_cost=offering_cost,
        # Only the unit price gates the purchase; drift in the total is clamped on debit
        can_buy=obtainium_price <= state.research_points and offering_price <= state.offerings,
    )


def buy_talisman_resources(state: GameState, kind: FragmentKind, percentage: int | None = None) -> int:
    """Convert obtainium and offerings into fragments. Returns amount bought."""
    quote = talisman_resource_quote(state, kind, percentage)
    if not quote.can_buy:
        return 0

    state.fragments[quote.kind] = state.fragments.get(quote.kind, 0) + quote.amount
    # floor(x / p) * p can exceed x by an ulp at large magnitudes
    state.research_points = debit(state.research_points, quote.obtainium_cost)
    state.offerings = debit(state.offerings, quote.offering_cost)
    logger.debug("Bought %d %s", quote.amount, quote.kind.value)
    return quote.amount


def buy_all_talisman_resources(state: GameState, percentage: int | None = None) -> dict[FragmentKind, int]:
    """Buy every fragment kind, most expensive first."""
    bought = {}
    for kind in reversed(list(FragmentKind)):
        bought[kind] = buy_talisman_resources(state, kind, percentage)
    return bought


def autobuy_batch_size(state: GameState) -> int:
    tb = BALANCE.talismans
    if state.highest_singularity_count > 0:
        return tb.autobuy_batch_singularity
    if state.ascension_count > 0:
        return tb.autobuy_batch_ascended
    return tb.autobuy_batch


def autobuy_talisman_levels(session: Session, key: TalismanKey | str) -> int:
    """Auto-buyer tick: up to one batch of single-level purchases."""
    talisman = session.get_talisman(key)
    return talisman.buy_levels(autobuy_batch_size(session.state))
