"""Rulesets - versioned formula tables the engines are built from."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from runeforge.data.runes import RUNE_DEFS, RuneDef, RuneKey
from runeforge.data.talismans import TALISMAN_DEFS, TalismanDef, TalismanKey
from runeforge.engine import bonuses
from runeforge.engine.runes import LevelPolicy, RuneHooks
from runeforge.engine.talismans import TalismanHooks

if TYPE_CHECKING:
    from runeforge.engine.session import Session


@dataclass(frozen=True)
class Ruleset:
    """Everything that differs between formula versions of the game."""

    name: str
    rune_defs: dict[RuneKey, RuneDef] = field(default_factory=lambda: dict(RUNE_DEFS))
    rune_hooks: dict[RuneKey, RuneHooks] = field(default_factory=lambda: dict(bonuses.RUNE_HOOKS))
    talisman_defs: dict[TalismanKey, TalismanDef] = field(default_factory=lambda: dict(TALISMAN_DEFS))
    talisman_hooks: dict[TalismanKey, TalismanHooks] = field(
        default_factory=lambda: dict(bonuses.TALISMAN_HOOKS)
    )
    talisman_special_multiplier: Callable[[Session], float] = bonuses.talisman_special_multiplier
    level_policy: LevelPolicy = LevelPolicy.LUMP
    # Levels ahead that "experience to next level" measures against
    tnl_lookahead: int = 1
    # Effective level every non-singularity rune is pinned to in the debuff challenge
    reincarnation_debuff_level: float = 1.0


CANONICAL_RULESET = Ruleset(name="greater_reimagining")
