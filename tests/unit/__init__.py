"""Unit tests for randindex.

Covers the random policy, control-point interception, settings, logging setup
and every randomized branch of the writer. Branch tests replace the writer's
policy with a scripted one from ``tests._mocks``.

Usage:
    Run all unit tests::

        pytest tests/unit/ -m unit
"""
