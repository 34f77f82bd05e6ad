"""Unified configuration interface for randindex.

Usage:
    from randindex.config import settings
"""

from .settings import HarnessSettings, RandomizationConfig, settings

__all__ = [
    "HarnessSettings",
    "RandomizationConfig",
    "settings",
]
