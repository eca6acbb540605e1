"""CLI entrypoint for lingua-chat."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
from importlib import metadata
from pathlib import Path

from .app import LinguaChatApp
from .config import ensure_config_dir


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lingua-chat", description="Translation chat TUI"
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help="Read configuration from PATH instead of ~/.config/linguaterm/config.toml",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Ensure configuration exists, handle CLI flags, and run the TUI."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("lingua-chat-tui")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"lingua-chat {version}")
        return

    if args.config is None:
        ensure_config_dir()
    app = LinguaChatApp(config_path=args.config)
    app.run()


if __name__ == "__main__":
    main()
