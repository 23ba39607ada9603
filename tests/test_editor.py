from __future__ import annotations

import logging
import random
import threading

import pytest

from editor import WeightEditor, default_items
from engine import Strategy
from helpers import make_items, weights_of
from settings import EditorSettings


def _editor(weights=(50, 25, 21, 4), locked=(), seed: int = 11) -> WeightEditor:
    return WeightEditor(make_items(list(weights), locked=list(locked)), rng=random.Random(seed))


def test_from_settings_seeds_default_creatives() -> None:
    editor = WeightEditor.from_settings(EditorSettings())
    assert [i.name for i in editor.items] == ["Creative 1", "Creative 2", "Creative 3", "Creative 4"]
    assert weights_of(editor.items) == [50, 25, 21, 4]
    assert editor.total == 100
    assert not editor.has_significant_deviation


def test_from_settings_uses_label_and_seed() -> None:
    settings = EditorSettings(item_label="Banner", initial_weights=[30, 70], random_seed=5)
    first = WeightEditor.from_settings(settings)
    second = WeightEditor.from_settings(settings)
    assert first.items[0].name == "Banner 1"
    assert first.apply_strategy("random") == second.apply_strategy("random")


def test_default_items_ids_are_sequential() -> None:
    assert [i.id for i in default_items([1, 2, 3])] == [1, 2, 3]


def test_editor_requires_an_item() -> None:
    with pytest.raises(ValueError):
        WeightEditor([])


def test_set_weight_parses_text_input() -> None:
    editor = _editor(weights=(25, 25, 25, 25))
    result = editor.set_weight(1, "80")
    assert result[0].weight == 80
    assert editor.total == 100


def test_set_weight_ignores_non_numeric_input() -> None:
    editor = _editor()
    before = editor.items
    assert editor.set_weight(1, "lots") == before
    assert editor.items == before


def test_set_weight_clamps() -> None:
    editor = _editor(weights=(25, 25, 25, 25))
    assert weights_of(editor.set_weight(2, "250")) == [0, 100, 0, 0]


def test_remove_last_item_is_rejected() -> None:
    editor = _editor(weights=(100,))
    editor.remove_item(1)
    assert len(editor.items) == 1


def test_add_then_remove_keeps_total() -> None:
    editor = _editor()
    editor.add_item()
    assert editor.items[-1].name == "Creative 5"
    assert editor.total == 100
    editor.remove_item(1)
    assert editor.total == 100
    assert editor.get(1) is None


def test_rename_and_reorder_do_not_touch_weights() -> None:
    editor = _editor()
    editor.rename_item(3, "Video")
    editor.reorder(4, 1)
    assert [i.id for i in editor.items] == [4, 1, 2, 3]
    assert editor.get(3).name == "Video"
    assert weights_of(editor.items) == [4, 50, 25, 21]


def test_lock_disables_full_availability_strategies() -> None:
    editor = _editor(weights=(25, 25, 25, 25))
    editor.toggle_lock(2)
    assert editor.has_locked_items
    assert not editor.strategy_allowed(Strategy.BELL)
    before = editor.items
    assert editor.apply_strategy("bell") == before
    assert editor.strategy_allowed(Strategy.RANDOM)


def test_locked_item_cannot_be_edited() -> None:
    editor = _editor(weights=(25, 25, 25, 25), locked=(1,))
    editor.set_weight(1, 90)
    assert editor.get(1).weight == 25


def test_all_locked_over_100_surfaces_deviation() -> None:
    editor = _editor(weights=(70, 40), locked=(1, 2))
    assert editor.total == 110
    assert editor.has_significant_deviation
    editor.apply_strategy(Strategy.EVEN)
    assert editor.total == 110


def test_deviation_tolerance_is_configurable() -> None:
    editor = WeightEditor(make_items([49, 49]), deviation_tolerance=2)
    assert not editor.has_significant_deviation


def test_items_snapshot_is_a_copy() -> None:
    editor = _editor()
    snapshot = editor.items
    snapshot.clear()
    assert len(editor.items) == 4


def test_applied_commands_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    editor = _editor()
    with caplog.at_level(logging.DEBUG, logger="editor"):
        editor.apply_strategy(Strategy.EVEN)
        editor.reorder(2, 2)
    messages = [record.getMessage() for record in caplog.records]
    assert "apply_strategy applied" in messages
    assert "reorder left the snapshot unchanged" in messages
    applied = next(r for r in caplog.records if r.getMessage() == "apply_strategy applied")
    assert applied.strategy == "even"
    assert applied.total == 100


def test_concurrent_edits_keep_invariants() -> None:
    editor = _editor(weights=(20, 20, 20, 20, 20), locked=(3,))

    def worker(seed: int) -> None:
        rng = random.Random(seed)
        for _ in range(50):
            editor.set_weight(rng.choice([1, 2, 4, 5]), rng.randint(0, 100))

    threads = [threading.Thread(target=worker, args=(seed,)) for seed in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert editor.get(3).weight == 20
    assert editor.total == 100
