"""Game save/load - persists currency pools, counters and ledgers to disk."""

from __future__ import annotations

import json
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path

from runeforge.data.talismans import FragmentKind, empty_fragments
from runeforge.engine.game_state import GameState

logger = logging.getLogger(__name__)

SAVE_DIR = Path.home() / ".runeforge"
SAVE_FILE = SAVE_DIR / "save.json"

# Counter dicts keyed by integer index; JSON turns the keys into strings
_INDEXED_COUNTERS = (
    "achievements",
    "researches",
    "upgrades",
    "cube_upgrades",
    "constant_upgrades",
    "platonic_upgrades",
    "ant_upgrades",
    "challenge_completions",
    "highest_challenge_completions",
)
_NAMED_COUNTERS = (
    "shop_upgrades",
    "pseudo_coin_upgrades",
    "external_multipliers",
    "corruption_effects",
)
_SCALARS = (
    "offerings",
    "research_points",
    "recycle_chance_bonus",
    "owned_coin_buildings",
    "campaign_rune_bonus",
    "ascension_count",
    "ascension_counter",
    "highest_singularity_count",
    "current_reincarnation_challenge",
    "offering_buy_amount",
    "buy_talisman_shard_percent",
)


# ── Serialisation helpers ────────────────────────────────────────


def _state_to_dict(state: GameState) -> dict:
    s = state
    d: dict = {name: getattr(s, name) for name in _SCALARS}
    d["coins"] = str(s.coins)
    d["fragments"] = {FragmentKind(k).value: v for k, v in s.fragments.items()}
    d["ledgers"] = {
        "runes": {key: str(exp) for key, exp in s.rune_experience.items()},
        "talismans": {key: dict(fragments) for key, fragments in s.talisman_fragments.items()},
    }
    for name in _INDEXED_COUNTERS + _NAMED_COUNTERS:
        d[name] = dict(getattr(s, name))
    return d


def _decimal(value: object) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"not a decimal: {value!r}") from None


def _dict_to_state(d: dict) -> GameState:
    state = GameState()
    for name in _SCALARS:
        if name in d:
            setattr(state, name, d[name])
    state.coins = _decimal(d.get("coins", "0"))

    fragments = empty_fragments()
    for kind, amount in d.get("fragments", {}).items():
        fragments[FragmentKind(kind)] = amount
    state.fragments = fragments

    ledgers = d.get("ledgers", {})
    state.rune_experience = {key: _decimal(exp) for key, exp in ledgers.get("runes", {}).items()}
    state.talisman_fragments = {
        key: {kind: int(n) for kind, n in fragments.items()}
        for key, fragments in ledgers.get("talismans", {}).items()
    }

    for name in _INDEXED_COUNTERS:
        setattr(state, name, {int(k): v for k, v in d.get(name, {}).items()})
    for name in _NAMED_COUNTERS:
        setattr(state, name, dict(d.get(name, {})))
    return state


# ── Public API ───────────────────────────────────────────────────


def save_state(state: GameState, path: Path | None = None) -> Path:
    """Persist the game state to disk. Returns the file written."""
    target = Path(path) if path is not None else SAVE_FILE
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(_state_to_dict(state), indent=2))
    logger.info("Saved game to %s", target)
    return target


def load_state(path: Path | None = None) -> GameState | None:
    """Load a saved game. Returns None if no save exists or it is corrupt."""
    source = Path(path) if path is not None else SAVE_FILE
    if not source.exists():
        return None
    try:
        data = json.loads(source.read_text())
        return _dict_to_state(data)
    except (ValueError, TypeError, AttributeError, KeyError) as exc:
        logger.warning("Corrupt save %s (%s); starting fresh", source, exc)
        return None


def delete_save(path: Path | None = None) -> None:
    """Remove the save file."""
    target = Path(path) if path is not None else SAVE_FILE
    target.unlink(missing_ok=True)
