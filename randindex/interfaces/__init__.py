"""Interfaces for engine adapters and diagnostic sinks."""

from .engine import Document, IndexEngine, IndexWriterInterface, WriterConfig
from .info_stream import InfoStream, NullInfoStream

__all__ = [
    "Document",
    "IndexEngine",
    "IndexWriterInterface",
    "InfoStream",
    "NullInfoStream",
    "WriterConfig",
]
