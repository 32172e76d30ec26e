"""Path resolution: logical path -> backend resource.

Walks a path segment by segment from the backend root, consulting the
folder cache before asking the backend, and creates missing folders on the
way. The caller's lock must be held for the whole walk; two unguarded
walks over the same missing folder would both create it.
"""
from __future__ import annotations
from typing import Dict, Optional
import logging
import threading

from docstore_lib.backend.interfaces import (
    BackendClientProtocol,
    Resource,
    ResourceKind,
    RootKind,
    name_query,
)
from docstore_lib.errors import NotFoundError
from .cache import FolderCacheProtocol
from .paths import StorePath
from .result import Result

logger = logging.getLogger(__name__)


class PathResolver:
    def __init__(
        self,
        client: BackendClientProtocol,
        cache: FolderCacheProtocol,
        lock: threading.Lock,
        *,
        verbose: bool = False,
    ):
        self.client = client
        self.cache = cache
        self.lock = lock
        self.verbose = verbose
        self._roots: Dict[RootKind, Resource] = {}

    def _log(self, msg: str, *args) -> None:
        if self.verbose:
            logger.debug(msg, *args)

    def _root(self, kind: RootKind) -> Resource:
        root = self._roots.get(kind)
        if root is None:
            root = self.client.get_root_resource(kind)
            self._roots[kind] = root
            self._log("Resolved root %s to %s", kind.value, root.identify())
        return root

    def _find_child(self, parent: Resource, name: str) -> Optional[Resource]:
        page = self.client.list_children(parent.id, name_query(name))
        if not page.items:
            return None
        if len(page.items) > 1:
            # Sibling names are not unique on the backend; first match wins.
            logger.warning("Found %d resources named %r under %s, using the first", len(page.items), name, parent.identify())
        return page.items[0]

    def resolve(self, path: StorePath | str, create_terminal: bool = False) -> Result[Resource]:
        """Resolve `path` to a resource.

        With `create_terminal` set, missing intermediate folders are created
        and a missing last segment is created as a file. Without it, any
        missing segment yields an absent result and nothing is created.

        Args:
            path: Logical path (string or StorePath)
            create_terminal: Create the last segment as a file if missing

        Returns:
            Result holding the terminal resource, or absent

        Raises:
            ConfigurationError: If the path or its scheme is malformed
            BackendError: If a backend call fails
        """
        path = StorePath.parse(path)
        with self.lock:
            return self._resolve_locked(path, create_terminal)

    def _resolve_locked(self, path: StorePath, create_terminal: bool) -> Result[Resource]:
        current = self._root(path.root)
        last = len(path) - 1
        for index, segment in enumerate(path.segments):
            key = path.key(index + 1)
            cached = self.cache.get(key)
            if cached is not None:
                self._log("Cache hit for %s -> %s", key, cached.identify())
                current = cached
                continue

            found = self._find_child(current, segment)
            if found is not None:
                self._log("Found %s under %s", found.identify(), current.identify())
                if found.is_folder:
                    self.cache.put(key, found)
                current = found
                continue

            if not create_terminal:
                # A missing segment means nothing can exist at the full path
                self._log("Nothing at %s (missing %s)", path, key)
                return Result.absent()
            if index == last:
                current = self.client.create_resource(current.id, segment, ResourceKind.FILE)
                logger.info("Created file %s at %s", current.identify(), path)
            else:
                current = self.client.create_resource(current.id, segment, ResourceKind.FOLDER)
                self.cache.put(key, current)
                logger.info("Created folder %s at %s", current.identify(), key)

        self._log("Returning result for %s: %s", path, current.identify())
        return Result.of(current)

    def delete(self, path: StorePath | str) -> Resource:
        """Delete the resource at `path` and evict it from the cache.

        Resolution, the delete call and the eviction happen under one lock
        hold so no other walk can pick up the deleted id from the cache.

        Raises:
            NotFoundError: If nothing exists at `path`
        """
        path = StorePath.parse(path)
        with self.lock:
            found = self._resolve_locked(path, False)
            if not found.present:
                raise NotFoundError("Nothing to delete", path=str(path))
            resource = found.get()
            self.client.delete_resource(resource.id)
            self.cache.remove_prefix(path.key())
        logger.info("Deleted %s at %s", resource.identify(), path)
        return resource

    def clear(self) -> None:
        with self.lock:
            self.cache.clear()
            self._roots.clear()
