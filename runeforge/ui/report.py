"""Terminal report - rune and talisman tables rendered with rich."""

from __future__ import annotations

from decimal import Decimal

from rich.console import Group
from rich.table import Table
from rich.text import Text

from runeforge.data.talismans import FragmentKind
from runeforge.engine.economy import format_number
from runeforge.engine.session import Session
from runeforge.engine.snapshots import RuneSnapshot, TalismanSnapshot, snapshot_rune, snapshot_talisman

RARITY_STYLES = {
    0: "dim",
    1: "white",
    2: "green",
    3: "cyan",
    4: "blue",
    5: "magenta",
    6: "yellow",
    7: "bold red",
}


def _fmt(value: str | float) -> str:
    if isinstance(value, str):
        return format_number(Decimal(value))
    return format_number(value)


def currency_table(session: Session) -> Table:
    state = session.state
    table = Table(title="Currencies", show_header=False)
    table.add_column("Currency", style="dim")
    table.add_column("Amount", justify="right", style="bold green")
    table.add_row("Offerings", format_number(state.offerings))
    table.add_row("Obtainium", format_number(state.research_points))
    for kind in FragmentKind:
        table.add_row(kind.value, format_number(state.fragments.get(kind, 0)))
    return table


def rune_table(snapshots: list[RuneSnapshot]) -> Table:
    table = Table(title="Runes")
    table.add_column("Rune")
    table.add_column("Level", justify="right")
    table.add_column("Free", justify="right")
    table.add_column("EXP", justify="right")
    table.add_column("To next", justify="right")
    table.add_column("Effect")
    for snap in snapshots:
        if not snap.is_unlocked:
            table.add_row(Text(snap.name, style="dim"), "-", "-", "-", "-", Text("Locked", style="dim"))
            continue
        table.add_row(
            snap.name,
            str(snap.level),
            format_number(snap.free_levels),
            _fmt(snap.experience),
            _fmt(snap.offerings_to_next_level),
            snap.reward_desc,
        )
    return table


def talisman_table(snapshots: list[TalismanSnapshot]) -> Table:
    table = Table(title="Talismans")
    table.add_column("Talisman")
    table.add_column("Level", justify="right")
    table.add_column("Rarity", justify="center")
    table.add_column("To rarity", justify="right")
    table.add_column("Effect")
    for snap in snapshots:
        style = RARITY_STYLES.get(snap.rarity, "white")
        if not snap.is_unlocked:
            table.add_row(Text(snap.name, style="dim"), "-", Text("0", style=style), "-", Text("Locked", style="dim"))
            continue
        table.add_row(
            snap.name,
            f"{snap.level}/{snap.effective_level_cap}",
            Text(str(snap.rarity), style=style),
            str(snap.levels_until_rarity_increase),
            snap.reward_desc,
        )
    return table


def render_report(session: Session) -> Group:
    """All report tables for one session, ready for Console.print."""
    runes = [snapshot_rune(r) for r in session.runes]
    talismans = [snapshot_talisman(t) for t in session.talismans]
    return Group(currency_table(session), rune_table(runes), talisman_table(talismans))
