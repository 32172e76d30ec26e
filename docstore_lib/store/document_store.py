"""Path-addressable document store over a remote hierarchical backend.

Callers address documents with slash-delimited paths such as
``"journals/p/entry1.json"``. Missing folders are created on save, values
are encoded with the configured codec and folder lookups are cached.

All calls block on backend round trips. Callers that need non-blocking
behaviour run them on their own worker threads.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, List, Optional, Union
import logging
import threading

from docstore_lib.backend.interfaces import BackendClientProtocol, Resource, ResourceKind
from docstore_lib.errors import ConfigurationError, ContentNotReadyError
from .batch import DEFAULT_MAX_CONCURRENCY, BatchWriter
from .cache import FolderCache, FolderCacheProtocol, NoOpFolderCache
from .codec import Codec, JSONCodec
from .paths import StorePath
from .resolver import PathResolver
from .result import Result
from .save_requests import Document, MetadataOnly, RawBytes, SaveRequest, Text, to_payload

logger = logging.getLogger(__name__)


@dataclass
class StoreConfig:
    codec: Codec = field(default_factory=JSONCodec)
    verbose: bool = False
    cache_folders: bool = True


class DocumentStore:
    """Get, list, save and delete documents by path.

    Each instance owns its folder cache and the lock that serializes path
    resolution. Do not share an instance across backend accounts; call
    `clear_cache()` after switching accounts.
    """

    def __init__(self, client: BackendClientProtocol, config: Optional[StoreConfig] = None):
        self.config = config or StoreConfig()
        self.client = client
        self.codec = self.config.codec
        self.verbose = self.config.verbose
        self.cache: FolderCacheProtocol = FolderCache() if self.config.cache_folders else NoOpFolderCache()
        self._lock = threading.Lock()
        self.resolver = PathResolver(client, self.cache, self._lock, verbose=self.verbose)
        self._batch = BatchWriter(self)

    def _log(self, msg: str, *args) -> None:
        if self.verbose:
            logger.debug(msg, *args)

    def _read(self, path: StorePath) -> Result[bytes]:
        found = self.resolver.resolve(path, create_terminal=False)
        if not found.present:
            return Result.absent()
        resource = found.get()
        if resource.is_folder:
            raise ConfigurationError("Path addresses a folder, not a document", path=str(path))
        return self._content(resource)

    def _content(self, resource: Resource) -> Result[bytes]:
        try:
            data = self.client.get_content(resource.id)
        except ContentNotReadyError:
            self._log("Content of %s is not downloadable yet", resource.identify())
            return Result.absent()
        return Result.of(data)

    def resource(self, path: StorePath | str) -> Result[Resource]:
        """Return the resource at `path` without creating anything."""
        return self.resolver.resolve(path, create_terminal=False)

    def get(self, path: StorePath | str, type: Any = None) -> Result[Any]:
        """Fetch and decode the document at `path`.

        A file that exists but holds no bytes yet (freshly created, content
        not propagated) and a file whose content is not downloadable yet are
        both reported as absent. Malformed content raises DecodeError.
        """
        path = StorePath.parse(path)
        content = self._read(path)
        if not content.present:
            return Result.absent()
        data = content.get()
        if not data:
            self._log("Document at %s has no content yet", path)
            return Result.absent()
        self._log("Attempting to turn %s into a document", path)
        return Result.of(self.codec.decode(data, type))

    def string(self, path: StorePath | str) -> Result[str]:
        """Fetch the content at `path` as UTF-8 text."""
        path = StorePath.parse(path)
        return self._read(path).map(lambda data: data.decode("utf-8"))

    def list(self, folder_path: StorePath | str, query: str = "") -> List[Resource]:
        """Return every child of `folder_path` matching `query`.

        A missing folder yields an empty list. All pages are fetched before
        returning; a failure on any page fails the whole call.
        """
        folder = self.resolver.resolve(folder_path, create_terminal=False)
        if not folder.present:
            return []
        parent = folder.get()
        self._log("Listing %s with query %r", parent.identify(), query)
        items: List[Resource] = []
        token: Optional[str] = None
        while True:
            page = self.client.list_children(parent.id, query or None, token)
            items.extend(page.items)
            token = page.next_page_token
            if not token:
                break
        return items

    def search(self, folder_path: StorePath | str, query: str) -> List[Resource]:
        """List children of `folder_path` matching a backend query, e.g. ``name contains 'spike'``."""
        return self.list(folder_path, query)

    def files(self, folder_path: StorePath | str) -> List[Resource]:
        return self.list(folder_path)

    def documents(self, folder_path: StorePath | str, type: Any = None, query: str = "") -> List[Any]:
        """Decode every document in `folder_path`.

        Sub-folders are skipped, as are files without content yet. A decode
        failure on any file aborts the whole call.
        """
        out = []
        for resource in self.list(folder_path, query):
            if resource.kind is not ResourceKind.FILE:
                continue
            content = self._content(resource)
            if not content.present or not content.get():
                continue
            out.append(self.codec.decode(content.get(), type))
        return out

    def save_one(self, folder_path: StorePath | str, request: SaveRequest) -> Resource:
        """Save a single request under `folder_path` and return the file resource."""
        folder = StorePath.parse(folder_path)
        target = folder.child(request.title)
        payload = to_payload(request, self.codec)
        resource = self.resolver.resolve(target, create_terminal=True).get()
        if resource.is_folder:
            raise ConfigurationError("Cannot save content over a folder", path=str(target))
        if payload is None:
            self._log("Touched %s", target)
            return resource
        data, media_type = payload
        self.client.update_content(resource.id, data, media_type)
        self._log("Saved %d bytes to %s", len(data), target)
        return resource

    def save(
        self,
        folder_path: StorePath | str,
        request: Union[SaveRequest, Iterable[SaveRequest]],
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        """Save one request, or any iterable of them concurrently.

        The file is named by the request's title inside `folder_path`; an
        existing file with the same title is overwritten.
        """
        if isinstance(request, (RawBytes, Text, Document, MetadataOnly)):
            self.save_one(folder_path, request)
            return
        self._batch.save_all(folder_path, request, max_concurrency)

    def delete(self, path: StorePath | str) -> None:
        """Delete the file or folder at `path`. Raises NotFoundError if missing."""
        self.resolver.delete(path)

    def clear_cache(self) -> None:
        self.resolver.clear()


def create_store(client: BackendClientProtocol, config: Optional[StoreConfig] = None, **overrides) -> DocumentStore:
    """Create a store, optionally overriding individual config fields."""
    cfg = config or StoreConfig()
    if overrides:
        unknown = set(overrides) - {"codec", "verbose", "cache_folders"}
        if unknown:
            raise ConfigurationError(f"Unknown store options: {', '.join(sorted(unknown))}")
        cfg = replace(cfg, **overrides)
    return DocumentStore(client, cfg)
