"""Logical, slash-delimited store paths.

A path such as ``"journals/p/entry1.json"`` addresses a chain of backend
resources by display name. An optional scheme selects the root the chain
starts from: ``app://`` (the application-data folder, also the default)
or ``root://`` (the user's visible drive root).
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple

from docstore_lib.backend.interfaces import RootKind
from docstore_lib.errors import ConfigurationError

SCHEME_APP = "app"
SCHEME_ROOT = "root"

_SCHEMES = {
    SCHEME_APP: RootKind.APP_DATA,
    SCHEME_ROOT: RootKind.DRIVE,
}


@dataclass(frozen=True)
class StorePath:
    segments: Tuple[str, ...]
    root: RootKind = RootKind.APP_DATA

    def __post_init__(self) -> None:
        if not self.segments:
            raise ConfigurationError("A path needs at least one segment")
        for seg in self.segments:
            if not isinstance(seg, str) or not seg or "/" in seg:
                raise ConfigurationError(f"Invalid path segment {seg!r}", path="/".join(map(str, self.segments)))

    @classmethod
    def parse(cls, text: "str | StorePath") -> "StorePath":
        """Parse ``[scheme://]seg/seg/...`` into a path.

        Raises ConfigurationError for an unknown scheme, an empty path or an
        empty segment.
        """
        if isinstance(text, StorePath):
            return text
        if not isinstance(text, str):
            raise ConfigurationError(f"Expected a path string, got {type(text).__name__}")
        root = RootKind.APP_DATA
        rest = text
        if "://" in text:
            scheme, rest = text.split("://", 1)
            if scheme not in _SCHEMES:
                raise ConfigurationError(
                    f"The scheme must be one of {', '.join(sorted(_SCHEMES))}", path=text
                )
            root = _SCHEMES[scheme]
        if not rest:
            raise ConfigurationError("Empty path", path=text)
        segments = tuple(rest.split("/"))
        if any(not s for s in segments):
            raise ConfigurationError("Empty path segment", path=text)
        return cls(segments, root)

    @property
    def name(self) -> str:
        return self.segments[-1]

    @property
    def parent(self) -> "StorePath | None":
        if len(self.segments) == 1:
            return None
        return StorePath(self.segments[:-1], self.root)

    def child(self, title: str) -> "StorePath":
        if not isinstance(title, str) or not title or "/" in title:
            raise ConfigurationError(f"Invalid title {title!r}", path=str(self))
        return StorePath(self.segments + (title,), self.root)

    def key(self, depth: int | None = None) -> str:
        """Cache key for the prefix of the first `depth` segments.

        Keys carry the root so the same names under different roots never
        collide.
        """
        segs = self.segments if depth is None else self.segments[:depth]
        return f"{self.root.value}:/" + "/".join(segs)

    def __len__(self) -> int:
        return len(self.segments)

    def __str__(self) -> str:
        scheme = SCHEME_APP if self.root is RootKind.APP_DATA else SCHEME_ROOT
        return f"{scheme}://" + "/".join(self.segments)
