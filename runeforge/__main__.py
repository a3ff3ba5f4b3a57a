"""Entry point for the terminal report: python -m runeforge"""

import argparse
from pathlib import Path

from rich.console import Console

from runeforge.engine.game_state import GameState
from runeforge.engine.save import load_state
from runeforge.engine.session import Session
from runeforge.log import configure_logging
from runeforge.ui.report import render_report


def main() -> None:
    parser = argparse.ArgumentParser(description="Runeforge - rune and talisman report")
    parser.add_argument("--save", type=Path, default=None, help="Save file (default: ~/.runeforge/save.json)")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    args = parser.parse_args()

    configure_logging(args.log_level)
    state = load_state(args.save) or GameState()
    Console().print(render_report(Session.start(state)))


if __name__ == "__main__":
    main()
