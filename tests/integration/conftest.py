"""Integration-tier pytest fixtures.

Routes loguru output through a per-test file sink so decision logs from the
test thread and engine threads can be inspected after a session.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from randindex.utils import reset_logging, setup_logging


@pytest.fixture
def harness_log(tmp_path: Path) -> Iterator[Path]:
    """Capture DEBUG logs of one test into a file."""
    log_file = tmp_path / "harness.log"
    setup_logging(log_level="DEBUG", log_file=log_file)
    try:
        yield log_file
    finally:
        reset_logging()
