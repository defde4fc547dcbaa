"""Pytest configuration for test isolation.

The CLI and ``load_config`` read ``NC_*`` variables and ``DATABASE_URL`` from
the environment. A developer shell (or a ``.env`` loaded by an earlier CLI
test) must not leak into other tests, so every test starts with those
variables removed.
"""

from __future__ import annotations

import os

import pytest

from db.client import dispose_engines


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("NC_") or name == "DATABASE_URL":
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _dispose_db_engines():
    """Release SQLite file handles held by cached engines after each test."""

    yield
    dispose_engines()
