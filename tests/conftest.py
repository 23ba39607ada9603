from __future__ import annotations

import os

import pytest

from settings import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    for key in list(os.environ):
        if key.startswith("WEIGHT_EDITOR_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
