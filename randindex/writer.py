"""Randomized wrapper around an engine index writer.

``RandomIndexWriter`` randomizes the indexing experience of a test: it may
route a single document through the batch entry point, commits periodically
at randomized and slowly widening intervals, may force-merge before handing
out a reader or before closing, and varies how readers are acquired. Every
choice is one the test itself could have made, so randomization never
invents a failure mode the engine does not already have.

Usage:
    with RandomIndexWriter(random, engine, directory, config) as writer:
        writer.add_document(doc)
        reader = writer.get_reader()
"""

from __future__ import annotations

from collections.abc import Iterable
from types import TracebackType
from typing import Any

from loguru import logger

from randindex.config import RandomizationConfig, settings
from randindex.control_point import mock_index_writer
from randindex.exceptions import AlreadyClosedError, MergeContractViolationError
from randindex.interfaces import (
    Document,
    IndexEngine,
    IndexWriterInterface,
    WriterConfig,
)
from randindex.policy import RandomPolicy, RandomSource

__all__ = ["RandomIndexWriter"]


class RandomIndexWriter:
    """Index writer wrapper that randomizes commit, merge and reader paths.

    Not thread-safe: use one instance from one thread at a time. The wrapped
    engine may still run background work on its own threads.

    Args:
        random: Caller's random source. The writer derives its own substream
            from it and also draws its construction-time choices from it.
        engine: Engine used to open the writer and standalone readers
        directory: Backing storage location for the index
        config: Writer configuration; its info stream gets instrumented
        randomization: Per-instance override of ``settings.randomization``
    """

    def __init__(
        self,
        random: RandomSource,
        engine: IndexEngine,
        directory: Any,
        config: WriterConfig,
        *,
        randomization: RandomizationConfig | None = None,
    ) -> None:
        """Open the engine writer and draw the initial randomized state."""
        caller = RandomPolicy.coerce(random)
        self._cfg = randomization or settings.randomization
        self._policy = caller.spawn()
        self._engine = engine
        self.index_writer: IndexWriterInterface = mock_index_writer(
            engine, directory, config, caller, randomization=self._cfg
        )
        self._doc_count = 0
        self._flush_at = caller.next_int(
            self._cfg.commit_threshold_min, self._cfg.commit_threshold_max
        )
        self._flush_at_factor = 1.0
        self._get_reader_called = False
        self._closed = False
        self._codec_name = config.codec_name
        if settings.verbose:
            logger.info("RIW dir={} config={}", directory, config)
            logger.info("codec default={}", self._codec_name)

        # Make sure some sessions never see forced merges
        self.do_random_force_merge = (
            not engine.is_no_merge_policy(config.merge_policy) and caller.next_bool()
        )
        self.do_random_force_merge_assert = True

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def doc_count(self) -> int:
        """Number of mutating operations counted toward auto-commit."""
        return self._doc_count

    @property
    def flush_at(self) -> int:
        """Counter value at which the next auto-commit happens."""
        return self._flush_at

    @property
    def flush_at_factor(self) -> float:
        """Current widening factor of the auto-commit interval."""
        return self._flush_at_factor

    @property
    def reader_was_requested(self) -> bool:
        """True once :meth:`get_reader` has been called."""
        return self._get_reader_called

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def num_docs(self) -> int:
        return self.index_writer.num_docs

    @property
    def max_doc(self) -> int:
        return self.index_writer.max_doc

    @property
    def segment_count(self) -> int:
        return self.index_writer.segment_count

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_document(self, doc: Document, analyzer: Any | None = None) -> None:
        """Add a document, sometimes through the batch entry point.

        Args:
            doc: Document to add
            analyzer: Optional per-call analyzer; None uses the writer's
        """
        self._ensure_open()
        if self._policy.one_in(self._cfg.batch_reroute_one_in):
            # TODO: buffer added docs and flush them as one block on
            # get_reader/commit to cover larger batches.
            self.index_writer.add_documents([doc], analyzer=analyzer)
        else:
            self.index_writer.add_document(doc, analyzer=analyzer)
        self._maybe_commit()

    def add_documents(self, docs: Iterable[Document]) -> None:
        """Add a block of documents."""
        self._ensure_open()
        self.index_writer.add_documents(docs)
        self._maybe_commit()

    def update_documents(self, term: Any, docs: Iterable[Document]) -> None:
        """Replace documents matching ``term`` with the block ``docs``."""
        self._ensure_open()
        self.index_writer.update_documents(term, docs)
        self._maybe_commit()

    def update_document(self, term: Any, doc: Document) -> None:
        """Replace documents matching ``term``, sometimes via the batch path."""
        self._ensure_open()
        if self._policy.one_in(self._cfg.batch_reroute_one_in):
            self.index_writer.update_documents(term, [doc])
        else:
            self.index_writer.update_document(term, doc)
        self._maybe_commit()

    def add_indexes(self, *sources: Any) -> None:
        self._ensure_open()
        self.index_writer.add_indexes(*sources)

    def update_numeric_doc_value(
        self, term: Any, field: str, value: int | None
    ) -> None:
        self._ensure_open()
        self.index_writer.update_numeric_doc_value(term, field, value)

    def update_binary_doc_value(
        self, term: Any, field: str, value: bytes | None
    ) -> None:
        self._ensure_open()
        self.index_writer.update_binary_doc_value(term, field, value)

    def delete_documents(self, term_or_query: Any) -> None:
        self._ensure_open()
        self.index_writer.delete_documents(term_or_query)

    def delete_all(self) -> None:
        self._ensure_open()
        self.index_writer.delete_all()

    def commit(self) -> None:
        self._ensure_open()
        self.index_writer.commit()

    def force_merge(self, max_segments: int) -> None:
        """Force-merge down to ``max_segments``.

        Avoid this in tests unless necessary; it reduces coverage.
        """
        self._ensure_open()
        self.index_writer.force_merge(max_segments)

    def force_merge_deletes(self, do_wait: bool = True) -> None:
        self._ensure_open()
        self.index_writer.force_merge_deletes(do_wait)

    def _maybe_commit(self) -> None:
        """Count one mutation and commit when the threshold is reached."""
        self._doc_count += 1
        if self._doc_count != self._flush_at:
            return
        logger.debug(
            "RIW.add/updateDocument: now doing a commit at docCount={}",
            self._doc_count,
        )
        self.index_writer.commit()
        factor = self._flush_at_factor
        self._flush_at += self._policy.next_int(
            int(factor * self._cfg.commit_threshold_min),
            int(factor * self._cfg.commit_threshold_max),
        )
        if factor < self._cfg.threshold_growth_cap:
            # gradually but exponentially increase time between commits
            self._flush_at_factor = factor * self._cfg.threshold_growth

    # ------------------------------------------------------------------
    # Readers and merging
    # ------------------------------------------------------------------

    def get_reader(self, apply_deletions: bool = True) -> Any:
        """Return a reader over the index, acquired along a random path.

        Args:
            apply_deletions: Whether buffered deletions must be visible

        Returns:
            Either the writer's near-real-time reader or a freshly opened
            reader over the latest commit
        """
        self._ensure_open()
        self._get_reader_called = True
        if self._policy.one_in(self._cfg.reader_force_merge_one_in):
            self._do_random_force_merge()

        # The legacy codec needs a freshly opened reader so terms are read
        # back in codepoint order.
        if not apply_deletions or (
            self._codec_name != self._cfg.legacy_codec_name
            and self._policy.next_bool()
        ):
            logger.debug("RIW.get_reader: use NRT reader")
            if self._policy.one_in(self._cfg.nrt_commit_one_in):
                self.index_writer.commit()
            return self.index_writer.get_reader(apply_deletions)

        logger.debug("RIW.get_reader: open new reader")
        self.index_writer.commit()
        if self._policy.next_bool():
            thread_hint = self._policy.next_int(1, self._cfg.reader_threads_max)
            return self._engine.open_reader(self.index_writer.directory, thread_hint)
        return self.index_writer.get_reader(apply_deletions)

    def _do_random_force_merge(self) -> None:
        if not self.do_random_force_merge:
            return
        seg_count = self.index_writer.segment_count
        if self._policy.next_bool() or seg_count == 0:
            logger.debug("RIW: doRandomForceMerge(1)")
            self.index_writer.force_merge(1)
            return

        limit = self._policy.next_int(1, seg_count)
        logger.debug("RIW: doRandomForceMerge({})", limit)
        self.index_writer.force_merge(limit)
        if self.do_random_force_merge_assert:
            actual = self.index_writer.segment_count
            if actual > limit:
                logger.error(
                    "Partial force merge left {} segments, limit was {}", actual, limit
                )
                raise MergeContractViolationError(limit, actual)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the wrapped writer, sometimes force-merging first.

        Tests that never asked for a reader may still open one on the
        directory afterwards, so they occasionally get a forced merge here.
        Only the first call has any effect.
        """
        if self._closed:
            logger.warning("RandomIndexWriter.close() called more than once")
            return
        try:
            if not self._get_reader_called and self._policy.one_in(
                self._cfg.close_force_merge_one_in
            ):
                self._do_random_force_merge()
        finally:
            self._closed = True
            self.index_writer.close()

    def __enter__(self) -> RandomIndexWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        del exc_type, exc, traceback
        self.close()

    def _ensure_open(self) -> None:
        if self._closed:
            raise AlreadyClosedError("this RandomIndexWriter is closed")

    def __repr__(self) -> str:
        return (
            f"RandomIndexWriter(doc_count={self._doc_count}, "
            f"flush_at={self._flush_at}, closed={self._closed})"
        )
