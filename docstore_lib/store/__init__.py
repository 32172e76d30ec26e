"""Document store package for DocStore."""

from .cache import FolderCache, NoOpFolderCache
from .codec import Codec, EncryptedCodec, JSONCodec, YAMLCodec, get_codec
from .document_store import DocumentStore, StoreConfig, create_store
from .paths import StorePath
from .result import Result
from .save_requests import Document, MetadataOnly, RawBytes, SaveRequest, Text

__all__ = [
    "Codec",
    "Document",
    "DocumentStore",
    "EncryptedCodec",
    "FolderCache",
    "JSONCodec",
    "MetadataOnly",
    "NoOpFolderCache",
    "RawBytes",
    "Result",
    "SaveRequest",
    "StoreConfig",
    "StorePath",
    "Text",
    "YAMLCodec",
    "create_store",
    "get_codec",
]
