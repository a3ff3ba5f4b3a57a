"""Read-only views of runes and talismans for the presentation layers."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from runeforge.engine.runes import Rune
from runeforge.engine.session import Session
from runeforge.engine.talismans import Talisman


@dataclass(frozen=True)
class RuneSnapshot:
    key: str
    name: str
    is_unlocked: bool
    level: int
    free_levels: float
    effective_level: float
    experience: str
    exp_to_next_level: str
    exp_per_offering: str
    offerings_to_next_level: str
    reward_desc: str
    reward: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TalismanSnapshot:
    key: str
    name: str
    is_unlocked: bool
    level: int
    effective_level_cap: int
    rarity: int
    levels_until_rarity_increase: int
    cost_tnl: dict[str, int]
    fragments_invested: dict[str, int]
    rune_bonuses: dict[str, float]
    reward_desc: str
    reward: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def snapshot_rune(rune: Rune) -> RuneSnapshot:
    bonus = rune.bonus
    return RuneSnapshot(
        key=rune.key.value,
        name=rune.name,
        is_unlocked=rune.is_unlocked,
        level=rune.level,
        free_levels=rune.free_levels,
        effective_level=rune.effective_level,
        experience=str(rune.experience),
        exp_to_next_level=str(rune.exp_to_next_level),
        exp_per_offering=str(rune.exp_per_offering),
        offerings_to_next_level=str(rune.offerings_to_next_level),
        reward_desc=bonus.desc,
        reward=asdict(bonus),
    )


def snapshot_talisman(talisman: Talisman) -> TalismanSnapshot:
    bonus = talisman.bonus
    return TalismanSnapshot(
        key=talisman.key.value,
        name=talisman.name,
        is_unlocked=talisman.is_unlocked,
        level=talisman.level,
        effective_level_cap=talisman.effective_level_cap,
        rarity=talisman.rarity,
        levels_until_rarity_increase=talisman.levels_until_rarity_increase,
        cost_tnl={kind.value: n for kind, n in talisman.cost_tnl.items()},
        fragments_invested={kind.value: n for kind, n in talisman.fragments_invested.items()},
        rune_bonuses={key.value: n for key, n in talisman.rune_bonuses.items()},
        reward_desc=bonus.desc,
        reward=asdict(bonus),
    )


def snapshot_session(session: Session) -> dict[str, Any]:
    """Whole-session view: currency pools plus every rune and talisman."""
    state = session.state
    return {
        "ruleset": session.ruleset.name,
        "offerings": state.offerings,
        "research_points": state.research_points,
        "fragments": {str(getattr(k, "value", k)): v for k, v in state.fragments.items()},
        "runes": [snapshot_rune(r).to_dict() for r in session.runes],
        "talismans": [snapshot_talisman(t).to_dict() for t in session.talismans],
    }
