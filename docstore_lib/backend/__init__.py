"""Public backend module.

Exposes the backend capability types and a `get_client` factory. Concrete
clients are imported lazily so the in-memory client can be used without
pulling in the HTTP stack.
"""
from __future__ import annotations
from typing import Iterable, Optional
import os

import logging

logger = logging.getLogger(__name__)

from .interfaces import (
    MIME_TYPE_FOLDER,
    BackendClientProtocol,
    ChildPage,
    Resource,
    ResourceKind,
    RootKind,
)


def get_client(
    kind: str = "memory",
    *,
    access_token: Optional[str] = None,
    spaces: Optional[Iterable[str]] = None,
    page_size: Optional[int] = None,
) -> BackendClientProtocol:
    """Return a backend client of the given kind (`memory` or `drive`)."""
    if kind == "memory":
        from .memory_client import MemoryBackendClient
        return MemoryBackendClient(page_size=page_size or 100)
    if kind == "drive":
        from .drive_client import DriveBackendClient
        token = access_token or os.environ.get("DOCSTORE_ACCESS_TOKEN", "")
        return DriveBackendClient(token, spaces=spaces, page_size=page_size or 1000)
    raise ValueError(f"Unknown backend kind: {kind}")


__all__ = [
    "MIME_TYPE_FOLDER",
    "BackendClientProtocol",
    "ChildPage",
    "Resource",
    "ResourceKind",
    "RootKind",
    "get_client",
]
