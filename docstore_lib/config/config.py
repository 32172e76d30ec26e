"""Server configuration for DocStore.

The configuration lives in a human-editable YAML file
(`data/config/server_config.yml` by default). Secrets are never written to
it: the Drive access token and the codec password come from the
environment.
"""
from __future__ import annotations
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, List, Optional
import logging
import os

import yaml

from docstore_lib.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("data/config/server_config.yml")
BACKENDS = ("memory", "drive")
CODECS = ("json", "yaml", "encrypted")


@dataclass
class ServerConfig:
    server_name: str = "docstore"
    log_level: str = "WARNING"
    backend: str = "memory"
    spaces: List[str] = field(default_factory=lambda: ["appDataFolder", "drive"])
    codec: str = "json"
    verbose: bool = False
    cache_folders: bool = True
    max_concurrency: int = 4

    def access_token(self) -> str:
        return os.environ.get("DOCSTORE_ACCESS_TOKEN", "")

    def validate(self) -> "ServerConfig":
        if self.backend not in BACKENDS:
            raise ConfigurationError(f"invalid config: backend must be one of {', '.join(BACKENDS)}")
        if self.codec not in CODECS:
            raise ConfigurationError(f"invalid config: codec must be one of {', '.join(CODECS)}")
        if int(self.max_concurrency) < 1:
            raise ConfigurationError("invalid config: max_concurrency must be at least 1")
        return self


class YamlConfigStore:
    """Read and write ServerConfig as YAML at a fixed file path."""

    def __init__(self, path: Optional[Path | str] = None):
        self.path = Path(path) if path else DEFAULT_CONFIG_PATH

    def exists(self) -> bool:
        return self.path.exists()

    def save(self, cfg: ServerConfig) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            yaml.safe_dump(asdict(cfg), f, sort_keys=False)
        tmp.replace(self.path)

    def load(self) -> ServerConfig:
        if not self.path.exists():
            raise KeyError(str(self.path))
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data: Any = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError("invalid config format: parse error") from e
        if not isinstance(data, dict):
            raise ConfigurationError("invalid config format: expected mapping")

        defaults = ServerConfig()
        spaces = data.get("spaces", defaults.spaces)
        if isinstance(spaces, str):
            spaces = [s.strip() for s in spaces.split(",") if s.strip()]
        cfg = ServerConfig(
            server_name=str(data.get("server_name", defaults.server_name)),
            log_level=str(data.get("log_level", defaults.log_level)),
            backend=str(data.get("backend", defaults.backend)),
            spaces=list(spaces),
            codec=str(data.get("codec", defaults.codec)),
            verbose=bool(data.get("verbose", defaults.verbose)),
            cache_folders=bool(data.get("cache_folders", defaults.cache_folders)),
            max_concurrency=int(data.get("max_concurrency", defaults.max_concurrency)),
        )
        logger.debug("Loaded server config from %s", self.path)
        return cfg.validate()


def load_server_config(path: Optional[Path | str] = None) -> ServerConfig:
    """Load the server config, falling back to defaults when the file is missing."""
    store = YamlConfigStore(path)
    try:
        return store.load()
    except KeyError:
        logger.info("No server config at %s; using defaults", store.path)
        return ServerConfig()
