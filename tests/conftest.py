# tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Settings forced to the test environment (before the engine is imported)
- A fresh snapshot cache per test

Builders for domain records live in tests/factories.py.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

import pytest

from income_engine.services.portfolio.service import SnapshotCache


@pytest.fixture
def snapshot_cache() -> SnapshotCache:
    """Fresh cache per test (never the shared one)."""
    return SnapshotCache(ttl_seconds=3600, max_size=16)
