"""randindex - randomized index writer harness for engine tests.

Wraps an indexing engine's writer and varies commit timing, batch routing,
forced merges, reader acquisition and engine thread interleavings from a
seeded random source, so repeated test runs cover rarely-taken paths.
"""

__version__ = "0.1.0"

from .config import settings
from .control_point import (
    ControlPoint,
    ControlPointInterceptor,
    YieldingControlPoint,
    mock_index_writer,
)
from .exceptions import (
    AlreadyClosedError,
    MergeContractViolationError,
    RandomIndexWriterError,
)
from .policy import RandomPolicy
from .writer import RandomIndexWriter

__all__ = [
    "AlreadyClosedError",
    "ControlPoint",
    "ControlPointInterceptor",
    "MergeContractViolationError",
    "RandomIndexWriter",
    "RandomIndexWriterError",
    "RandomPolicy",
    "YieldingControlPoint",
    "mock_index_writer",
    "settings",
]
