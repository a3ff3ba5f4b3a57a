"""Entry point for the JSON API: python -m runeforge.web"""

import argparse
from pathlib import Path

from runeforge.log import configure_logging
from runeforge.web.server import run_server


def main() -> None:
    parser = argparse.ArgumentParser(description="Runeforge - JSON API")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=5000, help="Port (default: 5000)")
    parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    parser.add_argument("--save", type=Path, default=None, help="Save file (default: ~/.runeforge/save.json)")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    args = parser.parse_args()

    configure_logging(args.log_level)
    run_server(host=args.host, port=args.port, debug=args.debug, save_path=args.save)


if __name__ == "__main__":
    main()
