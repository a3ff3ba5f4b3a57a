"""Closed-catalog containers for the live runes and talismans."""

from __future__ import annotations

import logging
from typing import Iterator

from runeforge.data.runes import ResetTier, RuneKey
from runeforge.data.talismans import TalismanKey
from runeforge.engine.errors import UnknownKeyError
from runeforge.engine.runes import Rune
from runeforge.engine.talismans import Talisman

logger = logging.getLogger(__name__)


class RuneRegistry:
    def __init__(self, runes: dict[RuneKey, Rune]) -> None:
        self._runes = runes

    def __iter__(self) -> Iterator[Rune]:
        return iter(self._runes.values())

    def __len__(self) -> int:
        return len(self._runes)

    def get(self, key: RuneKey | str) -> Rune:
        try:
            return self._runes[RuneKey(key)]
        except (ValueError, KeyError):
            raise UnknownKeyError("rune", key) from None

    def reset(self, tier: ResetTier) -> list[RuneKey]:
        """Zero every rune gated at or below `tier`. Returns the keys reset."""
        cleared = []
        for rune in self._runes.values():
            if rune.minimal_reset_tier <= tier:
                rune.reset_experience()
                cleared.append(rune.key)
        logger.debug("Reset tier %s cleared runes: %s", ResetTier(tier).name, [k.value for k in cleared])
        return cleared

    def sum_of_levels(self) -> float:
        """Purchased plus free levels across all runes."""
        return sum(rune.level + rune.free_levels for rune in self._runes.values())

    def number_unlocked(self) -> int:
        return sum(1 for rune in self._runes.values() if rune.is_unlocked)


class TalismanRegistry:
    def __init__(self, talismans: dict[TalismanKey, Talisman]) -> None:
        self._talismans = talismans

    def __iter__(self) -> Iterator[Talisman]:
        return iter(self._talismans.values())

    def __len__(self) -> int:
        return len(self._talismans)

    def get(self, key: TalismanKey | str) -> Talisman:
        try:
            return self._talismans[TalismanKey(key)]
        except (ValueError, KeyError):
            raise UnknownKeyError("talisman", key) from None

    def rune_bonus(self, rune_key: RuneKey) -> float:
        """Total bonus levels every talisman grants to one rune."""
        return sum(t.rune_bonus(rune_key) for t in self._talismans.values())
