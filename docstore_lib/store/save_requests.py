"""Save requests.

A save carries one of four kinds of content. All of them have a `title`,
the name of the file created (or overwritten) inside the target folder.
Titles are the identity of a document: saving the same title again
replaces that file's content.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

from docstore_lib.errors import ConfigurationError
from .codec import Codec

MEDIA_TYPE_TEXT = "text/plain"


def _check_title(title: str) -> None:
    if not isinstance(title, str) or not title or "/" in title:
        raise ConfigurationError(f"Invalid title {title!r}: must be a single non-empty path segment")


@dataclass(frozen=True)
class RawBytes:
    title: str
    media_type: str
    data: bytes

    def __post_init__(self) -> None:
        _check_title(self.title)


@dataclass(frozen=True)
class Text:
    title: str
    content: str

    def __post_init__(self) -> None:
        _check_title(self.title)


@dataclass(frozen=True)
class Document:
    """A typed value encoded with `codec`, or the store's codec when None."""

    title: str
    value: Any
    codec: Optional[Codec] = None

    def __post_init__(self) -> None:
        _check_title(self.title)


@dataclass(frozen=True)
class MetadataOnly:
    """Create the file if missing without writing any content."""

    title: str

    def __post_init__(self) -> None:
        _check_title(self.title)


SaveRequest = Union[RawBytes, Text, Document, MetadataOnly]


def to_payload(request: SaveRequest, default_codec: Codec) -> Optional[Tuple[bytes, str]]:
    """Turn a request into `(content, media_type)`, or None for MetadataOnly."""
    if isinstance(request, RawBytes):
        return bytes(request.data), request.media_type
    if isinstance(request, Text):
        return request.content.encode("utf-8"), MEDIA_TYPE_TEXT
    if isinstance(request, Document):
        codec = request.codec or default_codec
        return codec.encode(request.value), codec.media_type
    if isinstance(request, MetadataOnly):
        return None
    raise TypeError(f"Unsupported save request: {type(request).__name__}")
