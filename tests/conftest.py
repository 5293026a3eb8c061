# tests/conftest.py
from __future__ import annotations

import os

import pytest


@pytest.fixture(autouse=True)
def _isolated_config_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """
    Keep the developer's environment out of tests: drop SEGWRITER_* variables
    (config path and property overrides) and point XDG config lookup at an empty dir.
    """
    for name in list(os.environ):
        if name.startswith("SEGWRITER_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-empty"))
    yield
