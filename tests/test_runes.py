"""Tests for the rune engine."""

from dataclasses import replace
from decimal import Decimal

import pytest

from runeforge.data.runes import ResetTier, RuneKey, duplication_rewards
from runeforge.engine.game_state import GameState
from runeforge.engine.ruleset import Ruleset
from runeforge.engine.runes import LevelPolicy, grant_offerings, sacrifice_offerings
from runeforge.engine.session import Session
from runeforge.engine.snapshots import snapshot_session
from runeforge.engine import runes as rune_engine
from runeforge.data.balance import BALANCE


def make_session(**kwargs) -> Session:
    return Session.start(GameState(**kwargs))


def test_default_speed_rate_is_one_exp_per_offering():
    session = make_session()
    assert session.get_rune(RuneKey.SPEED).exp_per_offering == Decimal(1)


def test_level_is_floor_inverse_of_cost_curve():
    session = make_session()
    speed = session.get_rune(RuneKey.SPEED)
    for exp in ["0", "1", "7.7", "7.8", "500", "123456.789", "1e6", "1e50", "1e200"]:
        speed.set_experience(Decimal(exp))
        level = speed.level
        assert speed.cost_to_reach(level) <= speed.experience
        assert speed.experience < speed.cost_to_reach(level + 1)


def test_level_exact_at_boundary():
    session = make_session()
    speed = session.get_rune(RuneKey.SPEED)
    for target in (1, 10, 150, 999):
        speed.set_experience(speed.cost_to_reach(target))
        assert speed.level == target


def test_level_floor_inverse_for_singularity_runes():
    session = make_session()
    antiquities = session.get_rune(RuneKey.ANTIQUITIES)
    for exp in ["0", "1e206", "1e260", "1e400"]:
        antiquities.set_experience(Decimal(exp))
        level = antiquities.level
        assert antiquities.cost_to_reach(level) <= antiquities.experience
        assert antiquities.experience < antiquities.cost_to_reach(level + 1)


def test_level_monotonic_in_experience():
    session = make_session()
    speed = session.get_rune(RuneKey.SPEED)
    previous = 0
    for exp in [0, 5, 8, 16, 100, 1_000, 10_000, 1e9, 1e30]:
        speed.set_experience(exp)
        assert speed.level >= previous
        previous = speed.level


def test_levels_per_oom_tracks_research():
    session = make_session()
    speed = session.get_rune(RuneKey.SPEED)
    assert speed.effective_levels_per_oom == 150
    session.state.researches[77] = 1
    assert speed.effective_levels_per_oom == 151


def test_budget_too_small_spends_whole_budget():
    session = make_session(offerings=5.0)
    speed = session.get_rune(RuneKey.SPEED)
    spent = speed.level_up(1, 5.0)
    assert spent == 5.0
    assert speed.experience == Decimal(5)
    assert session.state.offerings == 0
    assert speed.level == 0


def test_affordable_request_spends_exact_offerings():
    session = make_session(offerings=100.0)
    speed = session.get_rune(RuneKey.SPEED)
    spent = speed.level_up(1, 100.0)
    # cost_to_reach(1) = 500 * (10^(1/150) - 1) ≈ 7.73
    assert spent == 8
    assert speed.experience == Decimal(8)
    assert speed.level == 1
    assert session.state.offerings == 92


def test_request_past_ceiling_spends_budget():
    session = make_session(offerings=1e10)
    speed = session.get_rune(RuneKey.SPEED)
    spent = speed.level_up(1_000_000, 1e10)
    assert spent == 1e10
    assert session.state.offerings == 0
    assert speed.experience == Decimal(10) ** 10


def test_per_level_policy_steps_through_levels():
    ruleset = Ruleset(name="stepwise", level_policy=LevelPolicy.PER_LEVEL)
    session = Session.start(GameState(offerings=100.0), ruleset)
    speed = session.get_rune(RuneKey.SPEED)
    spent = speed.level_up(3, 100.0)
    assert speed.level == 3
    assert spent == 24
    assert session.state.offerings == 76


def test_per_level_policy_spends_remainder_when_short():
    ruleset = Ruleset(name="stepwise", level_policy=LevelPolicy.PER_LEVEL)
    session = Session.start(GameState(offerings=12.0), ruleset)
    speed = session.get_rune(RuneKey.SPEED)
    spent = speed.level_up(3, 12.0)
    assert spent == 12.0
    assert speed.level == 1
    assert session.state.offerings == 0


def test_locked_rune_reports_level_zero_reward():
    session = make_session()
    dup = session.get_rune(RuneKey.DUPLICATION)
    dup.set_experience(dup.cost_to_reach(50))
    assert not dup.is_unlocked
    assert dup.level == 50
    assert dup.bonus == duplication_rewards(0)

    session.state.achievements[38] = 1
    assert dup.is_unlocked
    assert dup.bonus == duplication_rewards(dup.effective_level)
    assert dup.bonus != duplication_rewards(0)


def test_reincarnation_debuff_pins_effective_level():
    session = make_session(current_reincarnation_challenge=BALANCE.runes.debuff_challenge)
    speed = session.get_rune(RuneKey.SPEED)
    speed.set_experience(speed.cost_to_reach(40))
    assert speed.effective_level == 1.0

    infinite = session.get_rune(RuneKey.INFINITE_ASCENT)
    assert infinite.effective_level == 0


def test_experience_to_next_level():
    session = make_session()
    speed = session.get_rune(RuneKey.SPEED)
    assert speed.exp_to_next_level == speed.cost_to_reach(1)
    assert speed.offerings_to_next_level == 8

    speed.set_experience(8)
    assert float(speed.exp_to_next_level) == pytest.approx(float(speed.cost_to_reach(2)) - 8)


def test_experience_writes_through_to_state():
    session = make_session()
    speed = session.get_rune(RuneKey.SPEED)
    speed.add_experience(42)
    assert session.state.rune_experience["speed"] == Decimal(42)
    speed.reset_experience()
    assert session.state.rune_experience["speed"] == Decimal(0)


def test_sacrifice_locked_rune_is_noop():
    session = make_session(offerings=100.0)
    assert sacrifice_offerings(session, RuneKey.DUPLICATION, 100.0) == 0
    assert session.state.offerings == 100.0
    assert session.get_rune(RuneKey.DUPLICATION).experience == 0


def test_sacrifice_uses_buy_amount():
    session = make_session(offerings=1000.0, offering_buy_amount=1)
    spent = sacrifice_offerings(session, "speed", 1000.0)
    assert spent == 8
    assert session.get_rune(RuneKey.SPEED).level == 1


def test_auto_sacrifice_doubled_by_cube_upgrade():
    session = make_session(
        offerings=1000.0,
        shop_upgrades={"offeringAuto": 2},
        cube_upgrades={20: 1},
    )
    spent = sacrifice_offerings(session, RuneKey.SPEED, 1000.0, auto=True)
    assert session.get_rune(RuneKey.SPEED).level == 4
    assert spent == 32


def test_auto_sacrifice_without_shop_upgrade_does_nothing():
    session = make_session(offerings=1000.0)
    assert sacrifice_offerings(session, RuneKey.SPEED, 1000.0, auto=True) == 0
    assert session.state.offerings == 1000.0


def test_reset_respects_minimal_tier():
    session = make_session()
    for rune in session.runes:
        rune.set_experience(1000)

    assert session.reset(ResetTier.REINCARNATION) == []
    assert all(rune.experience == 1000 for rune in session.runes)

    cleared = session.reset(ResetTier.ASCENSION)
    assert set(cleared) == {
        RuneKey.SPEED,
        RuneKey.DUPLICATION,
        RuneKey.PRISM,
        RuneKey.THRIFT,
        RuneKey.SUPERIOR_INTELLECT,
    }
    assert session.get_rune(RuneKey.INFINITE_ASCENT).experience == 1000
    assert session.get_rune(RuneKey.ANTIQUITIES).experience == 1000

    session.reset(ResetTier.SINGULARITY)
    assert all(rune.experience == 0 for rune in session.runes)


def test_grant_offerings_capped():
    state = GameState(offerings=1e300)
    grant_offerings(state, 1e300)
    assert state.offerings == 1e300
    grant_offerings(state, -50)
    assert state.offerings == 1e300


@pytest.mark.parametrize("budget", [-10.0, 0.0])
def test_non_positive_budget_adds_nothing(budget):
    session = make_session(offerings=50.0)
    speed = session.get_rune(RuneKey.SPEED)
    assert speed.level_up(1, budget) == 0
    assert speed.experience == 0
    assert session.state.offerings == 50.0


def _cap_rune_levels(monkeypatch, cap: int) -> None:
    capped = replace(BALANCE, runes=replace(BALANCE.runes, max_levels_per_call=cap))
    monkeypatch.setattr(rune_engine, "BALANCE", capped)


def test_sacrifice_request_capped_per_call(monkeypatch):
    _cap_rune_levels(monkeypatch, 5)
    session = make_session(offerings=1e6, offering_buy_amount=50)
    sacrifice_offerings(session, RuneKey.SPEED, 1e6)
    assert session.get_rune(RuneKey.SPEED).level == 5


def test_per_level_policy_bounded_by_cap(monkeypatch):
    _cap_rune_levels(monkeypatch, 5)
    calls = []
    original = rune_engine.Rune._spend

    def counting_spend(self, required, budget):
        calls.append(required)
        return original(self, required, budget)

    monkeypatch.setattr(rune_engine.Rune, "_spend", counting_spend)
    ruleset = Ruleset(name="stepwise", level_policy=LevelPolicy.PER_LEVEL)
    session = Session.start(GameState(offerings=1e6), ruleset)
    speed = session.get_rune(RuneKey.SPEED)
    speed.level_up(50, 1e6)
    assert len(calls) == 5
    assert speed.level == 5


def test_zero_exp_rate_never_divides():
    session = make_session(offerings=50.0, corruption_effects={"drought": 0.0})
    speed = session.get_rune(RuneKey.SPEED)
    assert speed.exp_per_offering == 0
    assert speed.offerings_to_next_level == Decimal(BALANCE.runes.numeric_ceiling)
    assert speed.offerings_to_level(3) == Decimal(BALANCE.runes.numeric_ceiling)
    assert snapshot_session(session)["runes"]

    spent = speed.level_up(1, 50.0)
    assert spent == 50.0
    assert speed.experience == 0
    assert session.state.offerings == 0
