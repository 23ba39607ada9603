from __future__ import annotations

import pytest
from pydantic import ValidationError

from settings import EditorSettings, get_settings


def test_defaults() -> None:
    settings = EditorSettings()
    assert settings.page_title == "Creatives"
    assert settings.item_label == "Creative"
    assert settings.initial_weights == [50, 25, 21, 4]
    assert settings.deviation_tolerance == 1
    assert settings.repair_proportional_rounding is True
    assert settings.random_seed is None


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WEIGHT_EDITOR_INITIAL_WEIGHTS", "[10, 90]")
    monkeypatch.setenv("WEIGHT_EDITOR_ITEM_LABEL", "Banner")
    monkeypatch.setenv("WEIGHT_EDITOR_REPAIR_PROPORTIONAL_ROUNDING", "false")
    settings = get_settings()
    assert settings.initial_weights == [10, 90]
    assert settings.item_label == "Banner"
    assert settings.repair_proportional_rounding is False


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()


@pytest.mark.parametrize("weights", [[], [50, 120], [-1, 101]])
def test_invalid_initial_weights_rejected(weights) -> None:
    with pytest.raises(ValidationError):
        EditorSettings(initial_weights=weights)


def test_negative_tolerance_rejected() -> None:
    with pytest.raises(ValidationError):
        EditorSettings(deviation_tolerance=-1)
