"""Top-level pytest configuration for shared fixtures.

Every test gets a fresh in-memory engine, directory and writer config, plus a
factory for randomized writers that are closed at teardown when a test does
not close them itself.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from randindex import RandomIndexWriter
from randindex.config import RandomizationConfig
from tests._mocks import (
    MemoryDirectory,
    MemoryEngine,
    MemoryWriterConfig,
    RecordingInfoStream,
)


@pytest.fixture
def engine() -> MemoryEngine:
    """Fresh in-memory engine."""
    return MemoryEngine()


@pytest.fixture
def directory() -> MemoryDirectory:
    """Empty in-memory directory."""
    return MemoryDirectory()


@pytest.fixture
def recording_stream() -> RecordingInfoStream:
    """Info stream that records every channel the engine emits on."""
    return RecordingInfoStream(enabled={"TP", "IW"})


@pytest.fixture
def writer_config(recording_stream: RecordingInfoStream) -> MemoryWriterConfig:
    """Writer config with a recording info stream attached."""
    return MemoryWriterConfig(info_stream=recording_stream)


@pytest.fixture
def make_writer(
    engine: MemoryEngine,
    directory: MemoryDirectory,
    writer_config: MemoryWriterConfig,
) -> Iterator[Callable[..., RandomIndexWriter]]:
    """Factory for RandomIndexWriter instances bound to the shared engine."""
    created: list[RandomIndexWriter] = []

    def _make(
        seed: Any = 42,
        *,
        config: MemoryWriterConfig | None = None,
        randomization: RandomizationConfig | None = None,
    ) -> RandomIndexWriter:
        writer = RandomIndexWriter(
            seed,
            engine,
            directory,
            config or writer_config,
            randomization=randomization,
        )
        created.append(writer)
        return writer

    yield _make

    # Close the engine writers directly; the randomized close path may consult
    # a scripted policy that has run out of answers.
    for writer in created:
        if not writer.closed and not writer.index_writer.closed:
            writer.index_writer.close()
