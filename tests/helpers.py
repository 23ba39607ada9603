from __future__ import annotations

from typing import List, Sequence

from engine import Item


def make_items(weights: Sequence[int], locked: Sequence[int] = ()) -> List[Item]:
    """Items with ids 1..n; ``locked`` lists the ids to lock."""
    return [
        Item(id=i + 1, name=f"Creative {i + 1}", weight=w, locked=(i + 1) in locked)
        for i, w in enumerate(weights)
    ]


def weights_of(items: Sequence[Item]) -> List[int]:
    return [item.weight for item in items]
