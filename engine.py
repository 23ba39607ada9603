"""
Core distribution engine for the Weight Distribution Editor.

This module contains pure, UI-agnostic functions used by the Streamlit app.
Every operation takes an ordered snapshot of items and returns a new list;
inputs are never mutated. Keep all math and redistribution logic here so it
can be tested or reused independently of the UI layer.
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Union

TOTAL_WEIGHT = 100
DEVIATION_TOLERANCE = 1
DEFAULT_ITEM_LABEL = "Creative"


@dataclass(frozen=True)
class Item:
    """A named entry holding an integer percentage weight."""

    id: int
    name: str
    weight: int = 0
    locked: bool = False


class Strategy(str, Enum):
    EVEN = "even"
    BELL = "bell"
    EXPONENTIAL = "exponential"
    RANDOM = "random"


# Strategies that need every item unlocked before they can run
FULL_AVAILABILITY_STRATEGIES = frozenset({Strategy.BELL, Strategy.EXPONENTIAL})


# --------------------------- Queries ---------------------------

def total_weight(items: Iterable[Item]) -> int:
    return sum(item.weight for item in items)


def locked_weight(items: Iterable[Item]) -> int:
    return sum(item.weight for item in items if item.locked)


def has_locked_items(items: Iterable[Item]) -> bool:
    return any(item.locked for item in items)


def has_significant_deviation(items: Iterable[Item], tolerance: int = DEVIATION_TOLERANCE) -> bool:
    """Return True when the total differs from 100 by more than ``tolerance``."""
    return abs(total_weight(items) - TOTAL_WEIGHT) > tolerance


def strategy_allowed(items: Sequence[Item], kind: Union[Strategy, str]) -> bool:
    """
    Return whether ``kind`` would change anything for this snapshot.

    Bell curve and exponential need full availability, so any lock disables
    them. Even and random only need at least one unlocked item and some
    weight left to hand out.
    """
    kind = Strategy(kind)
    if not items:
        return False
    if kind in FULL_AVAILABILITY_STRATEGIES:
        return not has_locked_items(items)
    return any(not item.locked for item in items) and locked_weight(items) < TOTAL_WEIGHT


def index_of(items: Sequence[Item], item_id: int) -> Optional[int]:
    for i, item in enumerate(items):
        if item.id == item_id:
            return i
    return None


# --------------------------- Rounding helpers ---------------------------

def round_half_up(value: float) -> int:
    """Round halves away from zero for non-negative values (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def clamp_weight(value: int) -> int:
    return max(0, min(TOTAL_WEIGHT, int(value)))


def parse_weight(raw: object) -> Optional[int]:
    """
    Parse user input into an integer weight.

    Strings are read like an integer prefix parse would: "42" and "42.9"
    both give 42. Anything non-numeric (or non-finite) gives None so the
    caller can ignore the edit. Clamping is left to ``set_weight``.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else None
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return int(number) if math.isfinite(number) else None
    return None


def repair_remainder(values: Sequence[int], target: int) -> List[int]:
    """
    Force a list of rounded values to sum exactly to ``target``.

    Walks the positions in order (wrapping around), adding 1 while the sum is
    short and subtracting 1 while it is over. A subtraction skips positions
    already at 0, so the result never contains negative values.
    """
    if target < 0:
        raise ValueError(f"target must be non-negative, got {target}")
    repaired = list(values)
    n = len(repaired)
    if n == 0:
        return repaired
    remainder = target - sum(repaired)
    index = 0
    while remainder != 0:
        pos = index % n
        if remainder > 0:
            repaired[pos] += 1
            remainder -= 1
        elif repaired[pos] > 0:
            repaired[pos] -= 1
            remainder += 1
        index += 1
    return repaired


def even_shares(available: int, count: int) -> List[int]:
    """Split ``available`` into ``count`` floor shares, +1 to the first items for the remainder."""
    if count <= 0:
        return []
    equal_share = available // count
    remainder = available - equal_share * count
    return [equal_share + (1 if i < remainder else 0) for i in range(count)]


def scale_to_available(raw_values: Sequence[float], available: int) -> List[int]:
    """
    Scale raw curve values so they sum exactly to ``available``.

    Each value becomes round(value / sum * available), then the remainder
    repair pass fixes the rounding error. A zero sum falls back to an even
    split.
    """
    raw_sum = sum(raw_values)
    if raw_sum <= 0:
        return even_shares(available, len(raw_values))
    rounded = [round_half_up(value / raw_sum * available) for value in raw_values]
    return repair_remainder(rounded, available)


def proportional_shares(weights: Sequence[int], available: int, repair_rounding: bool = True) -> List[int]:
    """
    Redistribute ``available`` over ``weights`` preserving their ratios.

    Without ``repair_rounding`` the independently rounded shares may drift a
    point or two away from ``available``.
    """
    if len(weights) == 1:
        return [available]
    weight_sum = sum(weights)
    if weight_sum == 0:
        return even_shares(available, len(weights))
    shares = [round_half_up(available * w / weight_sum) for w in weights]
    if repair_rounding:
        shares = repair_remainder(shares, available)
    return shares


def _with_unlocked_weights(items: Sequence[Item], positions: Sequence[int], weights: Sequence[int]) -> List[Item]:
    updated = list(items)
    for pos, weight in zip(positions, weights):
        updated[pos] = replace(updated[pos], weight=weight)
    return updated


def _unlocked_positions(items: Sequence[Item]) -> List[int]:
    return [i for i, item in enumerate(items) if not item.locked]


# --------------------------- Normalization ---------------------------

def normalize(
    items: Sequence[Item],
    pinned_id: Optional[int] = None,
    repair_rounding: bool = True,
) -> List[Item]:
    """
    Redistribute unlocked weights so the whole snapshot sums to 100.

    Parameters
    - items: current snapshot, possibly just mutated (weight edit, lock toggle,
      add or remove)
    - pinned_id: an unlocked item whose weight should be kept (clamped to the
      available pool) while the other unlocked items absorb the difference
    - repair_rounding: run the remainder repair pass after proportional
      rounding so the sum is exact

    Returns
    - a new list with the same order and identities; locked weights unchanged

    Notes
    - A zero total is passed through untouched: there is nothing to scale.
    - When every item is locked, or locked weight is already 100 or more, the
      snapshot is returned as is and the total may diverge from 100. Callers
      surface this through ``has_significant_deviation``.
    """
    items = list(items)
    if total_weight(items) == 0:
        return items

    locked = locked_weight(items)
    unlocked_positions = _unlocked_positions(items)
    if not unlocked_positions or locked >= TOTAL_WEIGHT:
        return items

    available = TOTAL_WEIGHT - locked

    pinned_pos = index_of(items, pinned_id) if pinned_id is not None else None
    if pinned_pos is not None and items[pinned_pos].locked:
        pinned_pos = None

    if pinned_pos is not None:
        free_positions = [i for i in unlocked_positions if i != pinned_pos]
        if not free_positions:
            return _with_unlocked_weights(items, [pinned_pos], [available])
        pinned_weight = min(items[pinned_pos].weight, available)
        items[pinned_pos] = replace(items[pinned_pos], weight=pinned_weight)
        available -= pinned_weight
    else:
        free_positions = unlocked_positions

    if len(free_positions) == 1:
        return _with_unlocked_weights(items, free_positions, [available])

    shares = proportional_shares(
        [items[i].weight for i in free_positions],
        available,
        repair_rounding=repair_rounding,
    )
    return _with_unlocked_weights(items, free_positions, shares)


# --------------------------- Strategies ---------------------------

def _strategy_pool(items: Sequence[Item]) -> Optional[int]:
    """Return the weight available to unlocked items, or None when nothing can move."""
    if not _unlocked_positions(items):
        return None
    available = TOTAL_WEIGHT - locked_weight(items)
    if available < 0:
        return None
    return available


def apply_even(items: Sequence[Item]) -> List[Item]:
    items = list(items)
    available = _strategy_pool(items)
    if available is None:
        return items
    positions = _unlocked_positions(items)
    return _with_unlocked_weights(items, positions, even_shares(available, len(positions)))


def bell_curve_values(count: int) -> List[float]:
    """Gaussian bump centred on the middle position, stdDev = count / 2.5."""
    center = (count - 1) / 2
    std_dev = count / 2.5
    return [math.exp(-0.5 * ((i - center) / std_dev) ** 2) for i in range(count)]


def exponential_values(count: int) -> List[float]:
    """Decay from 1 at the first position to 0.1 at the last."""
    base = 0.1 ** (1 / ((count - 1) or 1))
    return [base ** i for i in range(count)]


def _apply_curve(items: Sequence[Item], raw_values_for) -> List[Item]:
    items = list(items)
    if has_locked_items(items):
        return items
    available = _strategy_pool(items)
    if available is None:
        return items
    positions = _unlocked_positions(items)
    shares = scale_to_available(raw_values_for(len(positions)), available)
    return _with_unlocked_weights(items, positions, shares)


def apply_bell_curve(items: Sequence[Item]) -> List[Item]:
    """Bell-shaped weights; rejected (unchanged) while any item is locked."""
    return _apply_curve(items, bell_curve_values)


def apply_exponential(items: Sequence[Item]) -> List[Item]:
    """Exponentially decreasing weights; rejected (unchanged) while any item is locked."""
    return _apply_curve(items, exponential_values)


def apply_random(items: Sequence[Item], rng: Optional[random.Random] = None) -> List[Item]:
    """
    Random weights for the unlocked items.

    ``rng`` is any object with a ``random()`` method returning floats in
    [0, 1). Pass a seeded ``random.Random`` for reproducible results.
    """
    items = list(items)
    available = _strategy_pool(items)
    if available is None:
        return items
    rng = rng or random.Random()
    positions = _unlocked_positions(items)
    raw_values = [rng.random() for _ in positions]
    return _with_unlocked_weights(items, positions, scale_to_available(raw_values, available))


def apply_strategy(
    items: Sequence[Item],
    kind: Union[Strategy, str],
    rng: Optional[random.Random] = None,
) -> List[Item]:
    """Dispatch to the named strategy. Unknown names raise ValueError."""
    kind = Strategy(kind)
    if kind is Strategy.EVEN:
        return apply_even(items)
    if kind is Strategy.BELL:
        return apply_bell_curve(items)
    if kind is Strategy.EXPONENTIAL:
        return apply_exponential(items)
    return apply_random(items, rng=rng)


# --------------------------- Item commands ---------------------------

def set_weight(
    items: Sequence[Item],
    item_id: int,
    value: int,
    repair_rounding: bool = True,
) -> List[Item]:
    """
    Set one item's weight directly and rebalance the others.

    The value is clamped to [0, 100]. Locked or unknown items are left alone.
    The edited item keeps its value (up to what the locks leave available)
    and the remaining unlocked items share the rest.
    """
    items = list(items)
    pos = index_of(items, item_id)
    if pos is None or items[pos].locked:
        return items
    items[pos] = replace(items[pos], weight=clamp_weight(value))
    return normalize(items, pinned_id=item_id, repair_rounding=repair_rounding)


def next_item_id(items: Sequence[Item]) -> int:
    return max((item.id for item in items), default=0) + 1


def add_item(
    items: Sequence[Item],
    name: Optional[str] = None,
    label: str = DEFAULT_ITEM_LABEL,
    repair_rounding: bool = True,
) -> List[Item]:
    new_id = next_item_id(items)
    new_item = Item(id=new_id, name=name if name is not None else f"{label} {new_id}")
    return normalize([*items, new_item], repair_rounding=repair_rounding)


def remove_item(items: Sequence[Item], item_id: int, repair_rounding: bool = True) -> List[Item]:
    """Remove an item and rebalance. The last remaining item cannot be removed."""
    items = list(items)
    if len(items) <= 1 or index_of(items, item_id) is None:
        return items
    remaining = [item for item in items if item.id != item_id]
    return normalize(remaining, repair_rounding=repair_rounding)


def rename_item(items: Sequence[Item], item_id: int, name: str) -> List[Item]:
    return [replace(item, name=name) if item.id == item_id else item for item in items]


def toggle_lock(items: Sequence[Item], item_id: int, repair_rounding: bool = True) -> List[Item]:
    items = list(items)
    if index_of(items, item_id) is None:
        return items
    toggled = [replace(item, locked=not item.locked) if item.id == item_id else item for item in items]
    return normalize(toggled, repair_rounding=repair_rounding)


def reorder(items: Sequence[Item], source_id: int, target_id: int) -> List[Item]:
    """Move ``source_id`` into the position held by ``target_id``. Weights are untouched."""
    items = list(items)
    if source_id == target_id:
        return items
    source_pos = index_of(items, source_id)
    target_pos = index_of(items, target_id)
    if source_pos is None or target_pos is None:
        return items
    moved = items.pop(source_pos)
    items.insert(target_pos, moved)
    return items
