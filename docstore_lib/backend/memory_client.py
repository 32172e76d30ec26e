"""Simple memory-backed backend client

This client keeps folders and files in memory as a flat map of
`id -> node`. Like the remote service it stands in for, it does not enforce
unique names among siblings and it paginates listings.
"""
from __future__ import annotations
import itertools
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from threading import RLock
from typing import Dict, Iterable, Optional, Set

from docstore_lib.errors import BackendError, ContentNotReadyError
from .interfaces import (
    MIME_TYPE_FOLDER,
    ChildPage,
    Resource,
    ResourceKind,
    RootKind,
    parse_query,
)

logger = logging.getLogger(__name__)


@dataclass
class _Node:
    resource: Resource
    content: bytes = b""
    children: list = field(default_factory=list)


class MemoryBackendClient:
    def __init__(self, page_size: int = 100):
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.page_size = page_size
        self._lock = RLock()
        self._ids = itertools.count(1)
        self._nodes: Dict[str, _Node] = {}
        self._not_ready: Set[str] = set()
        self._roots: Dict[RootKind, str] = {}
        for kind in RootKind:
            root = Resource(id=kind.value, name=kind.value, kind=ResourceKind.FOLDER)
            self._nodes[root.id] = _Node(resource=root)
            self._roots[kind] = root.id

    def _now(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    def _node(self, resource_id: str) -> _Node:
        node = self._nodes.get(resource_id)
        if node is None:
            raise BackendError(f"File not found: {resource_id}", status=404)
        return node

    def _matches(self, resource: Resource, clauses) -> bool:
        for fld, op, value in clauses:
            if fld == "name":
                actual = resource.name
            else:
                actual = MIME_TYPE_FOLDER if resource.is_folder else (resource.media_type or "")
            if op == "=" and actual != value:
                return False
            if op == "!=" and actual == value:
                return False
            if op == "contains" and value not in actual:
                return False
        return True

    def get_root_resource(self, kind: RootKind) -> Resource:
        with self._lock:
            return self._nodes[self._roots[kind]].resource

    def list_children(self, parent_id: str, query: Optional[str] = None, page_token: Optional[str] = None) -> ChildPage:
        try:
            clauses = parse_query(query)
        except ValueError as e:
            raise BackendError(f"Invalid query: {query}", status=400, cause=e) from e
        with self._lock:
            parent = self._node(parent_id)
            matches = [
                self._nodes[cid].resource
                for cid in parent.children
                if self._matches(self._nodes[cid].resource, clauses)
            ]
        start = int(page_token) if page_token else 0
        end = start + self.page_size
        next_token = str(end) if end < len(matches) else None
        return ChildPage(items=tuple(matches[start:end]), next_page_token=next_token)

    def create_resource(self, parent_id: str, name: str, kind: ResourceKind) -> Resource:
        with self._lock:
            parent = self._node(parent_id)
            if not parent.resource.is_folder:
                raise BackendError(f"Parent {parent_id} is not a folder", status=400)
            resource = Resource(
                id=f"r{next(self._ids)}",
                name=name,
                kind=kind,
                parent_id=parent_id,
                media_type=MIME_TYPE_FOLDER if kind is ResourceKind.FOLDER else None,
                size=None if kind is ResourceKind.FOLDER else 0,
                modified_time=self._now(),
            )
            self._nodes[resource.id] = _Node(resource=resource)
            parent.children.append(resource.id)
            logger.debug("Created %s %s under %s", kind.value, resource.identify(), parent_id)
            return resource

    def get_content(self, resource_id: str) -> bytes:
        with self._lock:
            node = self._node(resource_id)
            if node.resource.is_folder:
                raise BackendError(f"Cannot download folder {resource_id}", status=403)
            if resource_id in self._not_ready:
                raise ContentNotReadyError(status=403)
            return node.content

    def update_content(self, resource_id: str, data: bytes, media_type: str = "application/octet-stream") -> None:
        with self._lock:
            node = self._node(resource_id)
            if node.resource.is_folder:
                raise BackendError(f"Cannot upload content to folder {resource_id}", status=400)
            node.content = bytes(data)
            node.resource = replace(
                node.resource,
                media_type=media_type,
                size=len(node.content),
                modified_time=self._now(),
            )

    def delete_resource(self, resource_id: str) -> None:
        with self._lock:
            node = self._node(resource_id)
            if resource_id in self._roots.values():
                raise BackendError("Cannot delete a root folder", status=403)
            parent = self._nodes.get(node.resource.parent_id or "")
            if parent is not None:
                parent.children.remove(resource_id)
            # Deleting a folder removes its whole subtree
            stack = [resource_id]
            while stack:
                rid = stack.pop()
                removed = self._nodes.pop(rid, None)
                self._not_ready.discard(rid)
                if removed is not None:
                    stack.extend(removed.children)

    # Helpers for tests and the development server

    def mark_not_ready(self, resource_id: str, not_ready: bool = True) -> None:
        with self._lock:
            self._node(resource_id)
            if not_ready:
                self._not_ready.add(resource_id)
            else:
                self._not_ready.discard(resource_id)

    def children_named(self, parent_id: str, name: str) -> Iterable[Resource]:
        with self._lock:
            parent = self._node(parent_id)
            return [self._nodes[c].resource for c in parent.children if self._nodes[c].resource.name == name]

    def resource_count(self) -> int:
        with self._lock:
            return len(self._nodes) - len(self._roots)
