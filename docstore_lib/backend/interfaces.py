from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol, Sequence, runtime_checkable

MIME_TYPE_FOLDER = "application/vnd.google-apps.folder"


class ResourceKind(str, Enum):
    FOLDER = "folder"
    FILE = "file"


class RootKind(str, Enum):
    """Roots a path can start from. Values are the backend's root aliases."""

    APP_DATA = "appDataFolder"
    DRIVE = "root"


@dataclass(frozen=True)
class Resource:
    """A backend object (folder or file) identified by an opaque id."""

    id: str
    name: str
    kind: ResourceKind
    parent_id: Optional[str] = None
    media_type: Optional[str] = None
    size: Optional[int] = None
    modified_time: Optional[str] = None

    @property
    def is_folder(self) -> bool:
        return self.kind is ResourceKind.FOLDER

    def identify(self) -> str:
        return f"{self.name}:{self.id}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "parent_id": self.parent_id,
            "media_type": self.media_type,
            "size": self.size,
            "modified_time": self.modified_time,
        }


@dataclass(frozen=True)
class ChildPage:
    items: Sequence[Resource] = field(default_factory=tuple)
    next_page_token: Optional[str] = None


@runtime_checkable
class BackendClientProtocol(Protocol):
    """Capabilities the store needs from a remote hierarchical backend.

    All calls are blocking. Implementations raise
    `docstore_lib.errors.BackendError` for transport/API failures and
    `ContentNotReadyError` from `get_content` while a file's content is not
    downloadable yet.
    """

    def list_children(self, parent_id: str, query: Optional[str] = None, page_token: Optional[str] = None) -> ChildPage:
        """Return one page of children of `parent_id` matching `query`."""
        ...

    def create_resource(self, parent_id: str, name: str, kind: ResourceKind) -> Resource: ...

    def get_content(self, resource_id: str) -> bytes: ...

    def update_content(self, resource_id: str, data: bytes, media_type: str = "application/octet-stream") -> None: ...

    def delete_resource(self, resource_id: str) -> None: ...

    def get_root_resource(self, kind: RootKind) -> Resource: ...


# Query helpers. The store speaks the Drive query subset below to every
# backend: clauses of `name`/`mimeType` comparisons joined by `and`.

def quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def name_query(name: str) -> str:
    return f"name = {quote(name)}"


def combine(*clauses: Optional[str]) -> Optional[str]:
    parts = [c.strip() for c in clauses if c and c.strip()]
    if not parts:
        return None
    return " and ".join(parts)


_CLAUSE = re.compile(r"""^\s*(name|mimeType)\s*(=|!=|contains)\s*'((?:[^'\\]|\\.)*)'\s*$""")
_SPLIT_AND = re.compile(r"""\s+and\s+(?=(?:[^'\\]|\\.|'(?:[^'\\]|\\.)*')*$)""")


def parse_query(query: Optional[str]) -> list[tuple[str, str, str]]:
    """Parse a query into (field, operator, value) clauses.

    Raises ValueError for anything outside the supported subset.
    """
    if not query or not query.strip():
        return []
    clauses = []
    for part in _SPLIT_AND.split(query.strip()):
        m = _CLAUSE.match(part)
        if not m:
            raise ValueError(f"Unsupported query clause: {part!r}")
        fld, op, raw = m.groups()
        value = re.sub(r"\\(.)", r"\1", raw)
        clauses.append((fld, op, value))
    return clauses
