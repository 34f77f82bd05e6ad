"""Mock engine and policy objects for testing."""

from .engine import (
    NO_MERGE_POLICY,
    TIERED_MERGE_POLICY,
    MemoryDirectory,
    MemoryEngine,
    MemoryIndexWriter,
    MemoryReader,
    MemoryWriterConfig,
    PredicateQuery,
    RecordingInfoStream,
    Term,
)
from .policy import RecordingPolicy, ScriptedPolicy

__all__ = [
    "NO_MERGE_POLICY",
    "TIERED_MERGE_POLICY",
    "MemoryDirectory",
    "MemoryEngine",
    "MemoryIndexWriter",
    "MemoryReader",
    "MemoryWriterConfig",
    "PredicateQuery",
    "RecordingInfoStream",
    "RecordingPolicy",
    "ScriptedPolicy",
    "Term",
]
