"""Command-line launcher: ``assistant-chat [--config PATH] [--version]``."""

from __future__ import annotations

import argparse
from importlib import metadata
from pathlib import Path
from typing import Sequence

from .app import AssistantChatApp
from .config import CONFIG_PATH, ensure_config_dir

DISTRIBUTION = "assistant-chat-tui"


def _installed_version() -> str:
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return "0.0.0"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assistant-chat",
        description="Chat with an OpenAI-compatible completion endpoint in the terminal.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help=f"TOML config file to read instead of {CONFIG_PATH}",
    )
    parser.add_argument(
        "--version", action="store_true", help="show the installed version and exit"
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Start the chat app.

    Without ``--config`` the default config directory is created first, so
    a config file can be dropped there later; the file itself is optional.
    The API key may come from that file or from the environment.
    """
    args = _build_parser().parse_args(None if argv is None else list(argv))
    if args.version:
        print(f"assistant-chat {_installed_version()}")
        return
    if args.config is None:
        ensure_config_dir()
    AssistantChatApp(config_path=args.config).run()


if __name__ == "__main__":
    main()
