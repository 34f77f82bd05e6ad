"""Engine contract consumed by the randomized writer.

The harness never indexes, merges or stores anything itself. Concrete engines
adapt their writer, reader and configuration objects to the interfaces below;
documents, terms, queries and readers stay opaque to the harness.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from .info_stream import InfoStream

Document = Iterable[Any]
"""One document, usually an iterable of engine field objects."""


@runtime_checkable
class WriterConfig(Protocol):
    """Writer configuration surface the harness reads and instruments."""

    info_stream: InfoStream | None
    codec_name: str
    merge_policy: Any


class IndexWriterInterface(ABC):
    """Abstract interface for an engine's index writer."""

    # Mutations

    @abstractmethod
    def add_document(self, doc: Document, analyzer: Any | None = None) -> None:
        """Add a single document."""

    @abstractmethod
    def add_documents(
        self, docs: Iterable[Document], analyzer: Any | None = None
    ) -> None:
        """Add a block of documents atomically."""

    @abstractmethod
    def update_document(self, term: Any, doc: Document) -> None:
        """Delete documents matching ``term`` and add ``doc``."""

    @abstractmethod
    def update_documents(self, term: Any, docs: Iterable[Document]) -> None:
        """Delete documents matching ``term`` and add the block ``docs``."""

    @abstractmethod
    def delete_documents(self, term_or_query: Any) -> None:
        """Delete documents matching a term or a query."""

    @abstractmethod
    def update_numeric_doc_value(
        self, term: Any, field: str, value: int | None
    ) -> None:
        """Update a numeric doc-value field on documents matching ``term``."""

    @abstractmethod
    def update_binary_doc_value(
        self, term: Any, field: str, value: bytes | None
    ) -> None:
        """Update a binary doc-value field on documents matching ``term``."""

    @abstractmethod
    def add_indexes(self, *sources: Any) -> None:
        """Import the contents of other indexes (directories or readers)."""

    @abstractmethod
    def delete_all(self) -> None:
        """Delete every document in the index."""

    # Durability and merging

    @abstractmethod
    def commit(self) -> None:
        """Make all pending changes durable and visible to new readers."""

    @abstractmethod
    def force_merge(self, max_segments: int, do_wait: bool = True) -> None:
        """Merge until at most ``max_segments`` segments remain."""

    @abstractmethod
    def force_merge_deletes(self, do_wait: bool = True) -> None:
        """Merge away segments carrying deleted documents."""

    # Readers and introspection

    @abstractmethod
    def get_reader(self, apply_deletions: bool = True) -> Any:
        """Return a near-real-time reader bound to this writer."""

    @property
    @abstractmethod
    def num_docs(self) -> int:
        """Number of live documents, including buffered ones."""

    @property
    @abstractmethod
    def max_doc(self) -> int:
        """Number of documents including deleted ones not yet merged away."""

    @property
    @abstractmethod
    def segment_count(self) -> int:
        """Number of flushed segments currently in the index."""

    @property
    @abstractmethod
    def directory(self) -> Any:
        """Backing storage location of the index."""

    @property
    @abstractmethod
    def config(self) -> WriterConfig:
        """Configuration the writer was opened with."""

    @abstractmethod
    def close(self) -> None:
        """Close the writer and release its resources."""


class IndexEngine(ABC):
    """Factory surface of an indexing engine."""

    @abstractmethod
    def open_writer(self, directory: Any, config: WriterConfig) -> IndexWriterInterface:
        """Open a writer on ``directory`` with ``config``.

        Args:
            directory: Backing storage location
            config: Writer configuration, already instrumented by the caller

        Returns:
            An open index writer
        """

    @abstractmethod
    def open_reader(self, directory: Any, thread_hint: int) -> Any:
        """Open a standalone reader on the last commit in ``directory``.

        Args:
            directory: Backing storage location
            thread_hint: Suggested number of internal reader threads

        Returns:
            A reader over the committed index
        """

    def is_no_merge_policy(self, merge_policy: Any) -> bool:
        """Report whether ``merge_policy`` disables merging entirely.

        Engines without such a policy can rely on the default.
        """
        del merge_policy
        return False
