"""Pytest configuration — ensures the project root is importable."""

import os
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent))

from mls_validator.config import Settings, get_settings  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    """Keep a developer's MLS_* environment and .env out of the suite; rebuild cached settings."""
    for name in [key for key in os.environ if key.startswith("MLS_")]:
        monkeypatch.delenv(name)
    monkeypatch.setitem(Settings.model_config, "env_file", None)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
