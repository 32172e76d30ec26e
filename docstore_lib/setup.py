"""Server setup helper for DocStore.

Provides CLI parsing for the entry point and helpers to write a server
configuration template. Storage of documents is not touched here.
"""
from __future__ import annotations
import argparse
import sys
from pathlib import Path
from typing import Iterable, Optional, Tuple

from docstore_lib.config.config import DEFAULT_CONFIG_PATH, ServerConfig, YamlConfigStore
from docstore_lib.errors import ConfigurationError


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(add_help=False)
    p.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="Path to the server config YAML")
    p.add_argument("--print-template", action="store_true", help="Write the default YAML template and exit")
    p.add_argument("--host", default="0.0.0.0", help="Address to bind")
    p.add_argument("--port", type=int, default=8000, help="Port to bind")
    p.add_argument("--help", action="store_true", help="Show setup help")
    return p


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    """Parse setup-related args from argv, ignoring unknown ones."""
    parser = get_parser()
    if argv is not None:
        argv = list(argv)
    args, _ = parser.parse_known_args(argv)
    return args


def create_template(store: YamlConfigStore) -> Tuple[bool, str]:
    if store.exists():
        return False, f"Server config already exists at {store.path}"
    store.save(ServerConfig())
    return True, f"Wrote template server config to {store.path}"


def setup(argv: Optional[Iterable[str]]) -> Tuple[int, Optional[ServerConfig]]:
    """High-level helper used by the application entry point.

    - `--print-template` writes the default config if missing and returns
      rc 0 with no config (the caller should exit).
    - Otherwise the config is loaded; a missing file yields the defaults.
    - Returns rc 1 when the config exists but is invalid.
    """
    args = parse_args(argv)
    store = YamlConfigStore(Path(args.config))

    if args.print_template:
        created, message = create_template(store)
        sys.stdout.write(message + "\n")
        return (0 if created else 1), None

    if not store.exists():
        return 0, ServerConfig()
    try:
        return 0, store.load()
    except ConfigurationError as e:
        print("Failed to load server config:", e)
        return 1, None
