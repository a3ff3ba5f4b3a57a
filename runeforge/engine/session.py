"""Session - the handle that ties game state, ruleset and both registries together.

Nothing here is global: every engine call receives the session it works on.
Both registries are absent until their init call, and reading one before
that raises NotInitializedError.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional

from runeforge.data.runes import ResetTier, RuneKey
from runeforge.data.talismans import TalismanKey
from runeforge.engine.errors import NotInitializedError
from runeforge.engine.game_state import GameState
from runeforge.engine.registry import RuneRegistry, TalismanRegistry
from runeforge.engine.ruleset import CANONICAL_RULESET, Ruleset
from runeforge.engine.runes import Rune
from runeforge.engine.talismans import Talisman

logger = logging.getLogger(__name__)


class Session:
    def __init__(self, state: GameState, ruleset: Ruleset = CANONICAL_RULESET) -> None:
        self.state = state
        self.ruleset = ruleset
        self._runes: Optional[RuneRegistry] = None
        self._talismans: Optional[TalismanRegistry] = None

    @classmethod
    def start(cls, state: GameState, ruleset: Ruleset = CANONICAL_RULESET) -> Session:
        """Build a session with both registries initialised from the state's ledgers."""
        session = cls(state, ruleset)
        session.init_runes()
        session.init_talismans()
        return session

    # ── Initialisation ───────────────────────────────────

    def init_runes(self, ledger: Optional[dict[str, Any]] = None) -> RuneRegistry:
        """Construct every rune from `ledger` (or the state's own ledger)."""
        if ledger is not None:
            self.state.rune_experience = {str(k): Decimal(str(v)) for k, v in ledger.items()}
        runes = {
            key: Rune(self, definition, self.ruleset.rune_hooks[key])
            for key, definition in self.ruleset.rune_defs.items()
        }
        self._runes = RuneRegistry(runes)
        logger.info("Initialised %d runes (ruleset %s)", len(runes), self.ruleset.name)
        return self._runes

    def init_talismans(self, ledger: Optional[dict[str, dict[str, int]]] = None) -> TalismanRegistry:
        """Construct every talisman and replay its fragment ledger."""
        if ledger is not None:
            self.state.talisman_fragments = {
                str(k): {str(kind): int(n) for kind, n in fragments.items()}
                for k, fragments in ledger.items()
            }
        talismans = {
            key: Talisman(self, definition, self.ruleset.talisman_hooks[key])
            for key, definition in self.ruleset.talisman_defs.items()
        }
        self._talismans = TalismanRegistry(talismans)
        logger.info("Initialised %d talismans (ruleset %s)", len(talismans), self.ruleset.name)
        return self._talismans

    # ── Access ───────────────────────────────────────────

    @property
    def runes(self) -> RuneRegistry:
        if self._runes is None:
            raise NotInitializedError("Runes")
        return self._runes

    @property
    def talismans(self) -> TalismanRegistry:
        if self._talismans is None:
            raise NotInitializedError("Talismans")
        return self._talismans

    def get_rune(self, key: RuneKey | str) -> Rune:
        return self.runes.get(key)

    def get_talisman(self, key: TalismanKey | str) -> Talisman:
        return self.talismans.get(key)

    # ── Lifecycle ────────────────────────────────────────

    def reset(self, tier: ResetTier) -> list[RuneKey]:
        """Apply a reset event. Talisman ledgers survive every tier."""
        cleared = self.runes.reset(ResetTier(tier))
        logger.info("Reset at tier %s", ResetTier(tier).name)
        return cleared

    def ledgers(self) -> dict[str, dict]:
        """Persisted shape: rune experience as decimal strings, talisman ledgers as ints."""
        return {
            "runes": {rune.key.value: str(rune.experience) for rune in self.runes},
            "talismans": {
                t.key.value: {kind.value: n for kind, n in t.fragments_invested.items()}
                for t in self.talismans
            },
        }
