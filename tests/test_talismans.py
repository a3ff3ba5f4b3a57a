"""Tests for the talisman engine and fragment shop."""

from dataclasses import replace

import pytest

from runeforge.data.balance import BALANCE
from runeforge.data.runes import RuneKey
from runeforge.data.talismans import FragmentKind, TalismanKey, exemption_rewards
from runeforge.engine.game_state import GameState
from runeforge.engine.session import Session
from runeforge.engine import talismans as talisman_engine
from runeforge.engine.talismans import (
    autobuy_talisman_levels,
    buy_all_talisman_resources,
    buy_talisman_resources,
    rarity_multiplier,
    talisman_resource_quote,
)


def make_session(**kwargs) -> Session:
    return Session.start(GameState(**kwargs))


def rich_fragments(amount: float = 1e30) -> dict:
    return {kind: amount for kind in FragmentKind}


# ── Rarity ───────────────────────────────────────────────────────


def test_rarity_multiplier_table():
    assert rarity_multiplier(0) == 0
    assert rarity_multiplier(1) == 1.0
    assert rarity_multiplier(7) == 3.0


def test_rarity_banding_boundaries():
    session = make_session(achievements={119: 1})
    exemption = session.get_talisman(TalismanKey.EXEMPTION)
    assert exemption.level == 0
    assert exemption.rarity == 1

    exemption.set_level_ledger(29)
    assert exemption.rarity == 1
    exemption.set_level_ledger(30)
    assert exemption.rarity == 2
    exemption.set_level_ledger(179)
    assert exemption.rarity == 6
    exemption.set_level_ledger(180)
    assert exemption.level == 180
    assert exemption.rarity == 7


def test_locked_talisman_rarity_zero():
    session = make_session()
    exemption = session.get_talisman(TalismanKey.EXEMPTION)
    exemption.set_level_ledger(90)
    assert not exemption.is_unlocked
    assert exemption.rarity == 0
    assert exemption.bonus == exemption_rewards(0, 0)


def test_levels_until_rarity_increase():
    session = make_session(achievements={119: 1})
    exemption = session.get_talisman(TalismanKey.EXEMPTION)
    assert exemption.levels_until_rarity_increase == 30
    exemption.set_level_ledger(29)
    assert exemption.levels_until_rarity_increase == 1
    exemption.set_level_ledger(180)
    assert exemption.levels_until_rarity_increase == 0


# ── Level reconstruction ─────────────────────────────────────────


def test_replay_is_idempotent():
    session = make_session()
    chronos = session.get_talisman(TalismanKey.CHRONOS)
    chronos.set_level_ledger(77)
    ledger = chronos.fragments_invested
    first = chronos.update_level_from_invested()
    second = chronos.update_level_from_invested()
    assert first == second == 77
    assert chronos.fragments_invested == ledger


def test_replay_monotonic_in_ledger():
    session = make_session()
    midas = session.get_talisman(TalismanKey.MIDAS)
    previous = 0
    for target in range(0, 181, 15):
        midas.set_level_ledger(target)
        assert midas.level >= previous
        previous = midas.level


def test_surplus_fragments_never_lower_level():
    session = make_session()
    exemption = session.get_talisman(TalismanKey.EXEMPTION)
    exemption.set_level_ledger(45)
    ledger = session.state.talisman_fragments["exemption"]
    ledger["shard"] += 10**12  # rarer fragments still missing for level 46+
    ledger["commonFragment"] += 1

    restored = Session.start(session.state).get_talisman(TalismanKey.EXEMPTION)
    assert restored.level >= 45


def test_level_rederived_when_cap_changes():
    session = make_session(researches={200: 400})
    exemption = session.get_talisman(TalismanKey.EXEMPTION)
    assert exemption.effective_level_cap == 181
    exemption.set_level_ledger(181)
    assert exemption.level == 181
    assert exemption.rarity == 0  # still locked

    session.state.researches[200] = 0
    assert exemption.level == 180

    session.state.researches[200] = 400
    assert exemption.level == 181


# ── Purchases ────────────────────────────────────────────────────


def test_buy_level_is_all_or_nothing():
    session = make_session(achievements={119: 1})
    exemption = session.get_talisman(TalismanKey.EXEMPTION)
    exemption.set_level_ledger(150)
    costs = exemption.cost_tnl
    assert all(cost > 0 for cost in costs.values())

    short = dict(costs)
    short[FragmentKind.MYTHICAL] -= 1
    session.state.fragments = dict(short)
    ledger_before = exemption.fragments_invested

    assert exemption.buy_level() is False
    assert exemption.level == 150
    assert exemption.fragments_invested == ledger_before
    assert session.state.fragments == short


def test_buy_level_debits_every_fragment():
    session = make_session(achievements={119: 1})
    exemption = session.get_talisman(TalismanKey.EXEMPTION)
    exemption.set_level_ledger(150)
    costs = exemption.cost_tnl
    ledger_before = exemption.fragments_invested
    session.state.fragments = dict(costs)

    assert exemption.buy_level() is True
    assert exemption.level == 151
    assert all(amount == 0 for amount in session.state.fragments.values())
    for kind, cost in costs.items():
        assert exemption.fragments_invested[kind] == ledger_before[kind] + cost
    assert session.state.talisman_fragments["exemption"]["mythicalFragment"] == (
        ledger_before[FragmentKind.MYTHICAL] + costs[FragmentKind.MYTHICAL]
    )


def test_buy_level_locked_fails():
    session = make_session(fragments=rich_fragments())
    exemption = session.get_talisman(TalismanKey.EXEMPTION)
    assert exemption.buy_level() is False
    assert exemption.level == 0


def test_buy_level_stops_at_cap():
    session = make_session(achievements={119: 1}, fragments=rich_fragments())
    exemption = session.get_talisman(TalismanKey.EXEMPTION)
    exemption.set_level_ledger(180)
    assert exemption.buy_level() is False
    assert exemption.level == 180


def test_buy_to_next_rarity():
    session = make_session(achievements={119: 1}, fragments=rich_fragments())
    exemption = session.get_talisman(TalismanKey.EXEMPTION)
    assert exemption.buy_to_next_rarity() == 30
    assert exemption.level == 30
    assert exemption.rarity == 2


def test_buy_to_max():
    session = make_session(achievements={119: 1}, fragments=rich_fragments())
    exemption = session.get_talisman(TalismanKey.EXEMPTION)
    assert exemption.buy_to_max() == 180
    assert exemption.level == 180
    assert exemption.rarity == 7
    assert exemption.buy_to_max() == 0


def test_bought_levels_survive_reload():
    session = make_session(achievements={119: 1}, fragments=rich_fragments())
    session.get_talisman(TalismanKey.EXEMPTION).buy_to_next_rarity()
    reloaded = Session.start(session.state)
    assert reloaded.get_talisman(TalismanKey.EXEMPTION).level == 30


@pytest.mark.parametrize(
    "ascensions, singularities, expected",
    [(0, 0, 1), (1, 0, 30), (1, 1, 180)],
)
def test_autobuy_batch_size(ascensions, singularities, expected):
    session = make_session(
        achievements={119: 1},
        fragments=rich_fragments(),
        ascension_count=ascensions,
        highest_singularity_count=singularities,
    )
    assert autobuy_talisman_levels(session, "exemption") == expected
    assert session.get_talisman(TalismanKey.EXEMPTION).level == expected


# ── Rune bonuses ─────────────────────────────────────────────────


def test_rune_bonus_emission():
    session = make_session(achievements={119: 1})
    exemption = session.get_talisman(TalismanKey.EXEMPTION)
    exemption.set_level_ledger(60)
    assert exemption.rarity == 3

    # coefficient * rarity multiplier (1.5) * level * special multiplier (1)
    assert exemption.rune_bonus(RuneKey.DUPLICATION) == pytest.approx(0.1 * 1.5 * 60)
    assert exemption.rune_bonus(RuneKey.THRIFT) == pytest.approx(0.05 * 1.5 * 60)
    assert exemption.rune_bonus(RuneKey.SPEED) == 0
    assert exemption.rune_bonus(RuneKey.ANTIQUITIES) == 0

    assert session.talismans.rune_bonus(RuneKey.DUPLICATION) == pytest.approx(9.0)
    assert session.get_rune(RuneKey.DUPLICATION).free_levels == pytest.approx(9.0)


def test_locked_talisman_grants_no_rune_bonus():
    session = make_session()
    exemption = session.get_talisman(TalismanKey.EXEMPTION)
    exemption.set_level_ledger(60)
    assert all(bonus == 0 for bonus in exemption.rune_bonuses.values())


def test_metaphysics_amplifies_its_own_bonus():
    session = make_session(achievements={140: 1})
    metaphysics = session.get_talisman(TalismanKey.METAPHYSICS)
    metaphysics.set_level_ledger(180)
    assert metaphysics.bonus.talisman_effect == pytest.approx(0.12)
    assert metaphysics.rune_bonus(RuneKey.SPEED) == pytest.approx(0.03 * 3.0 * 180 * 1.12)


# ── Fragment shop ────────────────────────────────────────────────


def test_resource_quote_percentage_of_max():
    state = GameState(research_points=1e15, offerings=1e6)
    quote = talisman_resource_quote(state, FragmentKind.SHARD, 10)
    assert quote.amount == 10
    assert quote.obtainium_cost == 1e14
    assert quote.offering_cost == 1e3
    assert quote.can_buy


def test_resource_quote_minimum_one():
    state = GameState()
    quote = talisman_resource_quote(state, FragmentKind.SHARD, 10)
    assert quote.amount == 1
    assert not quote.can_buy


def test_buy_talisman_resources_debits_both_pools():
    state = GameState(research_points=1e15, offerings=1e6, buy_talisman_shard_percent=10)
    assert buy_talisman_resources(state, FragmentKind.SHARD) == 10
    assert state.fragments[FragmentKind.SHARD] == 10
    assert state.research_points == pytest.approx(9e14)
    assert state.offerings == pytest.approx(999_000)


def test_buy_talisman_resources_unaffordable_is_noop():
    state = GameState(research_points=1.0, offerings=1.0)
    assert buy_talisman_resources(state, FragmentKind.MYTHICAL, 100) == 0
    assert state.fragments[FragmentKind.MYTHICAL] == 0
    assert state.research_points == 1.0
    assert state.offerings == 1.0


def test_buy_all_starts_with_mythical():
    state = GameState(research_points=1e24, offerings=1e9)
    bought = buy_all_talisman_resources(state, 100)
    assert bought[FragmentKind.MYTHICAL] == 1
    assert bought[FragmentKind.SHARD] == 0
    assert state.research_points == 0
    assert state.offerings == 0


def test_resource_pools_never_negative():
    state = GameState(research_points=2.9992198253874083e47, offerings=1e40)
    bought = buy_talisman_resources(state, FragmentKind.EPIC, 100)
    assert bought > 0
    assert state.fragments[FragmentKind.EPIC] == bought
    assert state.research_points >= 0
    assert state.offerings >= 0

    state = GameState(research_points=2.9992198253874083e47, offerings=7.77e31)
    for percentage in (100, 50, 25, 10, 100, 100):
        for kind in FragmentKind:
            buy_talisman_resources(state, kind, percentage)
            assert state.research_points >= 0
            assert state.offerings >= 0


def test_unit_price_gates_resource_quote():
    state = GameState(research_points=1e20, offerings=1e7)
    quote = talisman_resource_quote(state, FragmentKind.EPIC, 100)
    assert quote.amount == 1
    assert quote.can_buy

    state = GameState(research_points=1e20 - 1e5, offerings=1e7)
    assert not talisman_resource_quote(state, FragmentKind.EPIC, 100).can_buy
    assert buy_talisman_resources(state, FragmentKind.EPIC, 100) == 0


def test_buy_levels_capped_per_call(monkeypatch):
    capped = replace(BALANCE, talismans=replace(BALANCE.talismans, max_levels_per_call=3))
    monkeypatch.setattr(talisman_engine, "BALANCE", capped)
    session = make_session(achievements={119: 1}, fragments=rich_fragments())
    exemption = session.get_talisman(TalismanKey.EXEMPTION)
    assert exemption.buy_levels(50) == 3
    assert exemption.level == 3
