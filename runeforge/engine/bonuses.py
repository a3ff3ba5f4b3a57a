"""Bonus calculators - free levels, multipliers and unlock gates.

Every function here is a pure read of the session: the game state counters
plus the current rune and talisman levels. Nothing is cached; callers may
evaluate the same function several times within one operation.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import TYPE_CHECKING, Callable

from runeforge.data.balance import BALANCE
from runeforge.data.runes import ResetTier, RuneKey
from runeforge.data.talismans import FragmentKind, TalismanKey
from runeforge.engine.runes import RuneHooks
from runeforge.engine.talismans import TalismanHooks

if TYPE_CHECKING:
    from runeforge.engine.game_state import GameState
    from runeforge.engine.session import Session


# ── Shared helpers ───────────────────────────────────────────────


def calc_ecc(tier: ResetTier, completions: int) -> float:
    """Effective challenge completions: diminishing returns past soft caps."""
    effective = 0.0
    if tier == ResetTier.TRANSCENSION:
        effective += min(100, completions)
        effective += 1 / 20 * (min(1000, max(100, completions)) - 100)
        effective += 1 / 100 * (max(1000, completions) - 1000)
    elif tier == ResetTier.REINCARNATION:
        effective += min(25, completions)
        effective += 1 / 2 * (min(75, max(25, completions)) - 25)
        effective += 1 / 10 * (max(75, completions) - 75)
    elif tier == ResetTier.ASCENSION:
        effective += min(10, completions)
        effective += 1 / 2 * (max(10, completions) - 10)
    return effective


def sigmoid_exponential(constant: float, coefficient: float) -> float:
    """Rises from 1 toward `constant` as coefficient grows."""
    return 1 + (constant - 1) * (1 - math.exp(-coefficient))


def _has(counters: dict[int, int], index: int) -> int:
    return 1 if counters.get(index, 0) > 0 else 0


def _coin_log(state: GameState, base_oom: int) -> float:
    """log base 10^base_oom of (coins + 1)."""
    return float((state.coins + 1).log10()) / base_oom


def _ascension_ecc(state: GameState, challenge: int) -> float:
    return calc_ecc(ResetTier.ASCENSION, state.challenge_completions.get(challenge, 0))


def _reincarnation_ecc(state: GameState, challenge: int) -> float:
    return calc_ecc(ResetTier.REINCARNATION, state.challenge_completions.get(challenge, 0))


# ── Free rune levels ─────────────────────────────────────────────


def first_five_free_levels(session: Session) -> float:
    state = session.state
    return sum([
        min(1e3, state.ant_upgrades.get(8, 0)),
        7 * min(state.constant_upgrades.get(7, 0), 1000),
    ])


def bonus_rune_levels_speed(session: Session) -> float:
    state = session.state
    buildings = state.owned_coin_buildings
    return sum([
        session.talismans.rune_bonus(RuneKey.SPEED),
        state.upgrades.get(27, 0) * (
            min(50, math.floor(_coin_log(state, 10)))
            + max(0, min(50, math.floor(_coin_log(state, 50)) - 10))
        ),
        state.upgrades.get(29, 0) * math.floor(min(100, buildings / 400)),
    ])


def bonus_rune_levels_duplication(session: Session) -> float:
    state = session.state
    buildings = state.owned_coin_buildings
    return sum([
        session.talismans.rune_bonus(RuneKey.DUPLICATION),
        state.upgrades.get(28, 0) * min(100, math.floor(buildings / 400)),
        state.upgrades.get(30, 0) * (
            min(50, math.floor(_coin_log(state, 30)))
            + min(50, math.floor(_coin_log(state, 300)))
        ),
    ])


def bonus_rune_levels_talisman_only(key: RuneKey) -> Callable[[Session], float]:
    def _bonus(session: Session) -> float:
        return session.talismans.rune_bonus(key)
    return _bonus


def bonus_rune_levels_infinite_ascent(session: Session) -> float:
    state = session.state
    return sum([
        6 if state.pseudo_coin_upgrades.get("INSTANT_UNLOCK_2", 0) > 0 else 0,
        state.cube_upgrades.get(73, 0),
        state.campaign_rune_bonus,
        session.talismans.rune_bonus(RuneKey.INFINITE_ASCENT),
    ])


def no_free_levels(session: Session) -> float:
    return 0


# ── Levels per order of magnitude ────────────────────────────────


def _shared_oom_terms(state: GameState) -> list[float]:
    return [
        _ascension_ecc(state, 11),
        1.5 * _ascension_ecc(state, 14),
    ]


def speed_oom_increase(session: Session) -> float:
    state = session.state
    return sum([
        state.researches.get(77, 0),
        state.researches.get(111, 0),
        *_shared_oom_terms(state),
        state.cube_upgrades.get(16, 0),
        session.get_talisman(TalismanKey.CHRONOS).bonus.speed_oom_bonus,
    ])


def duplication_oom_increase(session: Session) -> float:
    state = session.state
    return sum([
        0.75 * calc_ecc(ResetTier.TRANSCENSION, state.challenge_completions.get(1, 0)),
        state.researches.get(78, 0),
        state.researches.get(112, 0),
        *_shared_oom_terms(state),
        session.get_talisman(TalismanKey.EXEMPTION).bonus.duplication_oom_bonus,
    ])


def prism_oom_increase(session: Session) -> float:
    state = session.state
    return sum([
        state.researches.get(79, 0),
        state.researches.get(113, 0),
        *_shared_oom_terms(state),
        state.cube_upgrades.get(16, 0),
        session.get_talisman(TalismanKey.MORTUUS).bonus.prism_oom_bonus,
    ])


def thrift_oom_increase(session: Session) -> float:
    state = session.state
    return sum([
        state.researches.get(80, 0),
        state.researches.get(114, 0),
        *_shared_oom_terms(state),
        state.cube_upgrades.get(37, 0),
        session.get_talisman(TalismanKey.MIDAS).bonus.thrift_oom_bonus,
    ])


def superior_intellect_oom_increase(session: Session) -> float:
    state = session.state
    return sum([
        state.researches.get(115, 0),
        *_shared_oom_terms(state),
        state.cube_upgrades.get(37, 0),
        session.get_talisman(TalismanKey.POLYMATH).bonus.si_oom_bonus,
    ])


def no_oom_increase(session: Session) -> float:
    return 0


# ── Effective level multiplier ───────────────────────────────────


def first_five_effective_rune_level_mult(session: Session) -> float:
    state = session.state
    r = state.researches
    shards = state.fragments.get(FragmentKind.SHARD, 0)
    return math.prod([
        1 + r.get(4, 0) / 10 * _ascension_ecc(state, 14),
        1 + r.get(21, 0) / 100,
        1 + r.get(90, 0) / 100,
        1 + r.get(131, 0) / 200,
        1 + r.get(161, 0) / 200 * 3 / 5,
        1 + r.get(176, 0) / 200 * 2 / 5,
        1 + r.get(191, 0) / 200 * 1 / 5,
        1 + r.get(146, 0) / 200 * 4 / 5,
        1 + 0.01 * math.log(shards + 1) / math.log(4) * min(1, state.constant_upgrades.get(9, 0)),
        state.external_multiplier("challenge15_rune_bonus"),
        state.external_multiplier("cube_midas_tribute"),
    ])


def unit_level_mult(session: Session) -> float:
    return 1


# ── Experience per offering ──────────────────────────────────────


def recycle_multiplier(session: Session) -> Decimal:
    """Inverse of the chance that a spent offering is lost."""
    thrift = session.get_rune(RuneKey.THRIFT).bonus
    chance = min(0.99, thrift.recycle_chance + session.state.recycle_chance_bonus)
    return Decimal(1) / (Decimal(1) - Decimal(chance))


def universal_rune_exp_mult(session: Session, purchased_levels: int) -> Decimal:
    """Experience multiplier shared by every rune.

    The last additive term scales with the rune's own purchased levels, so
    the per-offering rate has to be re-read after every level gained.
    """
    state = session.state
    highest = state.highest_challenge_completions
    additive = sum([
        1,
        min(1, highest.get(1, 0)),
        0.4 / 10 * highest.get(1, 0),
        0.6 * state.researches.get(22, 0),
        0.3 * state.researches.get(23, 0),
        2 * state.upgrades.get(61, 0),
        state.upgrades.get(71, 0) * purchased_levels / 25,
    ])

    multipliers = [
        1 + state.researches.get(91, 0) / 20,
        1 + state.researches.get(92, 0) / 20,
        sigmoid_exponential(999, 1 / 10000 * state.ant_upgrades.get(7, 0) ** 1.1),
        state.external_multiplier("cube_rune_exp"),
        1 + state.ascension_counter / 1000 * state.cube_upgrades.get(32, 0),
        1 + 1 / 10 * state.constant_upgrades.get(8, 0),
        state.external_multiplier("challenge15_rune_exp"),
    ]
    product = Decimal(1)
    for m in multipliers:
        product *= Decimal(m)

    return product * Decimal(additive) * recycle_multiplier(session)


def _rune_exp_mult(challenge: int | None, divisor: float) -> Callable[[Session], Decimal]:
    def _mult(session: Session) -> Decimal:
        if challenge is None:
            return Decimal(1)
        state = session.state
        completions = 1 + _reincarnation_ecc(state, challenge) / divisor
        return Decimal(completions) * Decimal(state.corruption_effect("drought"))
    return _mult


speed_exp_mult = _rune_exp_mult(7, 10)
duplication_exp_mult = _rune_exp_mult(7, 10)
prism_exp_mult = _rune_exp_mult(8, 5)
thrift_exp_mult = _rune_exp_mult(6, 10)
superior_intellect_exp_mult = _rune_exp_mult(9, 5)
infinite_ascent_exp_mult = _rune_exp_mult(None, 1)
antiquities_exp_mult = _rune_exp_mult(None, 1)


def _exp_per_offering(rune_mult: Callable[[Session], Decimal]) -> Callable[[Session, int], Decimal]:
    def _rate(session: Session, purchased_levels: int) -> Decimal:
        return universal_rune_exp_mult(session, purchased_levels) * rune_mult(session)
    return _rate


# ── Unlock gates ─────────────────────────────────────────────────


def always_unlocked(session: Session) -> bool:
    return True


def achievement_unlock(index: int) -> Callable[[Session], bool]:
    def _unlocked(session: Session) -> bool:
        return session.state.achievements.get(index, 0) > 0
    return _unlocked


def superior_intellect_unlocked(session: Session) -> bool:
    return session.state.researches.get(82, 0) > 0


def infinite_ascent_unlocked(session: Session) -> bool:
    state = session.state
    return state.shop_upgrades.get("infiniteAscent", 0) > 0 or state.highest_singularity_count > 0


def antiquities_unlocked(session: Session) -> bool:
    return session.state.platonic_upgrades.get(20, 0) > 0


def mortuus_unlocked(session: Session) -> bool:
    return session.state.ant_upgrades.get(12, 0) > 0


def plastic_unlocked(session: Session) -> bool:
    return session.get_rune(RuneKey.INFINITE_ASCENT).is_unlocked


def achievement_talisman_unlocked(session: Session) -> bool:
    return session.state.achievement_count() >= BALANCE.talismans.achievement_talisman_unlock


# ── Talisman level caps ──────────────────────────────────────────


def base_level_cap_increase(session: Session) -> int:
    state = session.state
    return int(6 * _ascension_ecc(state, 13) + math.floor(state.researches.get(200, 0) / 400))


def metaphysics_level_cap_increase(session: Session) -> int:
    bonus = 1337 if session.state.cube_upgrades.get(67, 0) > 0 else 0
    return base_level_cap_increase(session) + bonus


def plastic_level_cap_increase(session: Session) -> int:
    bonus = 10 if session.state.pseudo_coin_upgrades.get("INSTANT_UNLOCK_1", 0) > 0 else 0
    return base_level_cap_increase(session) + bonus


# ── Talisman special multiplier ──────────────────────────────────


def talisman_special_multiplier(session: Session) -> float:
    """Shared multiplier on every talisman's rune bonus.

    Metaphysics contributes its own reward here, so it amplifies its own
    rune bonus too. Its reward depends only on its level and rarity, which
    makes a single pass exact.
    """
    state = session.state
    metaphysics = session.get_talisman(TalismanKey.METAPHYSICS).bonus
    return sum([
        1,
        0.05 * _has(state.achievements, 135),
        0.05 * _has(state.achievements, 136),
        0.05 * _has(state.achievements, 137),
        0.01 * state.researches.get(106, 0),
        0.01 * state.researches.get(107, 0),
        0.01 * state.researches.get(116, 0),
        0.01 * state.researches.get(117, 0),
        0.02 * state.cube_upgrades.get(9, 0),
        metaphysics.talisman_effect,
    ])


# ── Hook tables ──────────────────────────────────────────────────


def _first_five_hooks(
    oom: Callable[[Session], float],
    bonus_levels: Callable[[Session], float],
    rune_mult: Callable[[Session], Decimal],
    unlocked: Callable[[Session], bool],
) -> RuneHooks:
    return RuneHooks(
        levels_per_oom_increase=oom,
        effective_level_mult=first_five_effective_rune_level_mult,
        free_levels=lambda session: first_five_free_levels(session) + bonus_levels(session),
        exp_per_offering=_exp_per_offering(rune_mult),
        is_unlocked=unlocked,
    )


RUNE_HOOKS: dict[RuneKey, RuneHooks] = {
    RuneKey.SPEED: _first_five_hooks(
        speed_oom_increase,
        bonus_rune_levels_speed,
        speed_exp_mult,
        always_unlocked,
    ),
    RuneKey.DUPLICATION: _first_five_hooks(
        duplication_oom_increase,
        bonus_rune_levels_duplication,
        duplication_exp_mult,
        achievement_unlock(38),
    ),
    RuneKey.PRISM: _first_five_hooks(
        prism_oom_increase,
        bonus_rune_levels_talisman_only(RuneKey.PRISM),
        prism_exp_mult,
        achievement_unlock(44),
    ),
    RuneKey.THRIFT: _first_five_hooks(
        thrift_oom_increase,
        bonus_rune_levels_talisman_only(RuneKey.THRIFT),
        thrift_exp_mult,
        achievement_unlock(102),
    ),
    RuneKey.SUPERIOR_INTELLECT: _first_five_hooks(
        superior_intellect_oom_increase,
        bonus_rune_levels_talisman_only(RuneKey.SUPERIOR_INTELLECT),
        superior_intellect_exp_mult,
        superior_intellect_unlocked,
    ),
    RuneKey.INFINITE_ASCENT: RuneHooks(
        levels_per_oom_increase=no_oom_increase,
        effective_level_mult=unit_level_mult,
        free_levels=bonus_rune_levels_infinite_ascent,
        exp_per_offering=_exp_per_offering(infinite_ascent_exp_mult),
        is_unlocked=infinite_ascent_unlocked,
    ),
    RuneKey.ANTIQUITIES: RuneHooks(
        levels_per_oom_increase=no_oom_increase,
        effective_level_mult=unit_level_mult,
        free_levels=no_free_levels,
        exp_per_offering=_exp_per_offering(antiquities_exp_mult),
        is_unlocked=antiquities_unlocked,
    ),
}

TALISMAN_HOOKS: dict[TalismanKey, TalismanHooks] = {
    TalismanKey.EXEMPTION: TalismanHooks(base_level_cap_increase, achievement_unlock(119)),
    TalismanKey.CHRONOS: TalismanHooks(base_level_cap_increase, achievement_unlock(126)),
    TalismanKey.MIDAS: TalismanHooks(base_level_cap_increase, achievement_unlock(133)),
    TalismanKey.METAPHYSICS: TalismanHooks(metaphysics_level_cap_increase, achievement_unlock(140)),
    TalismanKey.POLYMATH: TalismanHooks(base_level_cap_increase, achievement_unlock(147)),
    TalismanKey.MORTUUS: TalismanHooks(base_level_cap_increase, mortuus_unlocked),
    TalismanKey.PLASTIC: TalismanHooks(plastic_level_cap_increase, plastic_unlocked),
    TalismanKey.ACHIEVEMENT: TalismanHooks(base_level_cap_increase, achievement_talisman_unlocked),
}
