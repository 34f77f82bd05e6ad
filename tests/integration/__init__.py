"""Integration tests for the randomized writer against the in-memory engine.

These tests drive whole writer sessions end to end: construction, randomized
writes, commits, merges on engine threads, reader acquisition and disposal.
"""
