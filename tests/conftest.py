from __future__ import annotations

import logging
import os

import pytest


@pytest.fixture(autouse=True)
def restore_root_logger():
    """setup_logging reconfigures the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Keep local config files and GAZELLE_ variables out of the tests."""
    for key in list(os.environ):
        if key.startswith("GAZELLE_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
