"""Folder identity caching for path resolution.

Resolving a path costs one backend list call per segment. Caching the
identity of folders that were already resolved collapses repeated writes
under the same folder to zero lookups for the folder portion of the path.
Only folders are cached: a file's content changes on every save while
folder ids stay stable.
"""
from __future__ import annotations
from typing import Dict, Optional, Protocol, runtime_checkable
import logging

from docstore_lib.backend.interfaces import Resource

logger = logging.getLogger(__name__)


@runtime_checkable
class FolderCacheProtocol(Protocol):
    """Cache of resolved folders keyed by scoped path prefix.

    Implementations are not required to be thread-safe; the owning store
    serializes access.
    """

    def get(self, key: str) -> Optional[Resource]: ...

    def put(self, key: str, resource: Resource) -> None: ...

    def remove(self, key: str) -> None: ...

    def remove_prefix(self, key: str) -> None: ...

    def clear(self) -> None: ...


class FolderCache:
    """In-memory folder cache.

    Entries never expire on their own. They are removed when the folder's
    path is deleted or when the whole cache is cleared.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Resource] = {}

    def get(self, key: str) -> Optional[Resource]:
        """Return the cached folder for `key` or None on a miss."""
        return self._entries.get(key)

    def put(self, key: str, resource: Resource) -> None:
        """Cache `resource` under `key`.

        Args:
            key: Scoped path prefix the folder was resolved at
            resource: Resolved resource; files are ignored
        """
        if not resource.is_folder:
            logger.debug("Not caching file %s", resource.identify())
            return
        self._entries[key] = resource

    def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    def remove_prefix(self, key: str) -> None:
        """Remove `key` and every entry below it.

        Deleting a folder deletes its subtree, so cached descendants would
        point at ids that no longer exist.
        """
        prefix = key.rstrip("/") + "/"
        stale = [k for k in self._entries if k == key or k.startswith(prefix)]
        for k in stale:
            del self._entries[k]
        if stale:
            logger.debug("Evicted %d cached folder(s) under %s", len(stale), key)

    def clear(self) -> None:
        count = len(self._entries)
        self._entries.clear()
        logger.debug("Cleared folder cache: %d entries removed", count)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries


class NoOpFolderCache:
    """Does nothing. Every lookup misses."""

    def get(self, key: str) -> Optional[Resource]:
        return None

    def put(self, key: str, resource: Resource) -> None:
        return None

    def remove(self, key: str) -> None:
        return None

    def remove_prefix(self, key: str) -> None:
        return None

    def clear(self) -> None:
        return None

    def __len__(self) -> int:
        return 0
