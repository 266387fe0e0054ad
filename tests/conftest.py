"""Shared test fixtures: isolated configuration.

Every test starts from default settings: ``SCENELINK_*`` variables from the
developer's shell are removed and the settings cache is cleared, so
``get_settings()`` re-reads whatever the test sets with ``monkeypatch``.
"""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from scenelink.scene_server.settings import _get_settings_cached

# ---------------------------------------------------------------------------
# Function-scoped: clean environment and settings cache
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Drop SCENELINK_* env vars and run from an empty directory (no ``.env``)."""
    for key in list(os.environ):
        if key.upper().startswith("SCENELINK_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    _get_settings_cached.cache_clear()
    yield
    _get_settings_cached.cache_clear()
