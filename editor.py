"""
Stateful command/query facade over the distribution engine.

The editor owns the single item-list state cell. Each command reads the
current snapshot, builds a new one with the pure engine functions and swaps
it in under a lock, so callers only ever see whole snapshots.
"""
from __future__ import annotations

import logging
import random
import threading
from typing import Callable, List, Optional, Sequence, Union

import engine
from engine import Item, Strategy
from settings import EditorSettings

logger = logging.getLogger(__name__)


def default_items(weights: Sequence[int], label: str = engine.DEFAULT_ITEM_LABEL) -> List[Item]:
    """Seed snapshot: one unlocked item per weight, named "<label> <n>"."""
    return [Item(id=i + 1, name=f"{label} {i + 1}", weight=int(w)) for i, w in enumerate(weights)]


class WeightEditor:
    def __init__(
        self,
        items: Sequence[Item],
        *,
        item_label: str = engine.DEFAULT_ITEM_LABEL,
        deviation_tolerance: int = engine.DEVIATION_TOLERANCE,
        repair_rounding: bool = True,
        rng: Optional[random.Random] = None,
    ) -> None:
        if not items:
            raise ValueError("editor needs at least one item")
        self._items: List[Item] = list(items)
        self._lock = threading.Lock()
        self.item_label = item_label
        self.deviation_tolerance = deviation_tolerance
        self.repair_rounding = repair_rounding
        self.rng = rng or random.Random()

    @classmethod
    def from_settings(cls, settings: EditorSettings) -> "WeightEditor":
        rng = random.Random(settings.random_seed)
        return cls(
            default_items(settings.initial_weights, settings.item_label),
            item_label=settings.item_label,
            deviation_tolerance=settings.deviation_tolerance,
            repair_rounding=settings.repair_proportional_rounding,
            rng=rng,
        )

    # --------------------------- Queries ---------------------------

    @property
    def items(self) -> List[Item]:
        return list(self._items)

    @property
    def total(self) -> int:
        return engine.total_weight(self._items)

    @property
    def has_locked_items(self) -> bool:
        return engine.has_locked_items(self._items)

    @property
    def has_significant_deviation(self) -> bool:
        return engine.has_significant_deviation(self._items, self.deviation_tolerance)

    def strategy_allowed(self, kind: Union[Strategy, str]) -> bool:
        return engine.strategy_allowed(self._items, kind)

    def get(self, item_id: int) -> Optional[Item]:
        pos = engine.index_of(self._items, item_id)
        return None if pos is None else self._items[pos]

    # --------------------------- Commands ---------------------------

    def _apply(self, command: str, transform: Callable[[List[Item]], List[Item]], **context) -> List[Item]:
        with self._lock:
            current = self._items
            updated = transform(list(current))
            changed = updated != current
            if changed:
                self._items = updated
        extra = {"command": command, "total": engine.total_weight(updated), **context}
        if changed:
            logger.info("%s applied", command, extra=extra)
        else:
            logger.debug("%s left the snapshot unchanged", command, extra=extra)
        return list(updated)

    def add_item(self, name: Optional[str] = None) -> List[Item]:
        return self._apply(
            "add_item",
            lambda items: engine.add_item(
                items, name=name, label=self.item_label, repair_rounding=self.repair_rounding
            ),
        )

    def remove_item(self, item_id: int) -> List[Item]:
        return self._apply(
            "remove_item",
            lambda items: engine.remove_item(items, item_id, repair_rounding=self.repair_rounding),
            item_id=item_id,
        )

    def rename_item(self, item_id: int, name: str) -> List[Item]:
        return self._apply(
            "rename_item",
            lambda items: engine.rename_item(items, item_id, name),
            item_id=item_id,
        )

    def set_weight(self, item_id: int, value: object) -> List[Item]:
        """Set an item's weight from raw input; non-numeric input is ignored."""
        weight = engine.parse_weight(value)
        if weight is None:
            logger.debug("ignoring non-numeric weight %r", value, extra={"item_id": item_id})
            return self.items
        return self._apply(
            "set_weight",
            lambda items: engine.set_weight(items, item_id, weight, repair_rounding=self.repair_rounding),
            item_id=item_id,
        )

    def toggle_lock(self, item_id: int) -> List[Item]:
        return self._apply(
            "toggle_lock",
            lambda items: engine.toggle_lock(items, item_id, repair_rounding=self.repair_rounding),
            item_id=item_id,
        )

    def reorder(self, source_id: int, target_id: int) -> List[Item]:
        return self._apply(
            "reorder",
            lambda items: engine.reorder(items, source_id, target_id),
            item_id=source_id,
        )

    def apply_strategy(self, kind: Union[Strategy, str]) -> List[Item]:
        kind = Strategy(kind)
        return self._apply(
            "apply_strategy",
            lambda items: engine.apply_strategy(items, kind, rng=self.rng),
            strategy=kind.value,
        )
