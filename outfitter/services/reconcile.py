"""Resolution of model-returned item descriptions to inventory identifiers.

The suggestion model reasons over human readable attributes and never sees
identifiers, so every candidate has to be grounded in the caller's inventory
again before it can be saved. A reference matches an inventory item when both
``type`` and ``color`` are equal; the first match in inventory order wins and
references without a match are dropped.

``exact`` mode compares the raw strings. ``normalized`` mode compares trimmed,
case-folded values and only the first shade of a comma separated colour.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol, Sequence

from outfitter.ai.schemas import ItemReference


class MatchMode(str, Enum):
    """Attribute comparison policy used during reconciliation."""

    EXACT = "exact"
    NORMALIZED = "normalized"


class InventoryEntry(Protocol):
    id: str
    type: str
    color: str


def _normalize_type(value: str) -> str:
    return value.strip().casefold()


def _normalize_color(value: str) -> str:
    return value.split(",")[0].strip().casefold()


def _key(type_: str, color: str, mode: MatchMode) -> tuple[str, str]:
    if mode is MatchMode.NORMALIZED:
        return _normalize_type(type_), _normalize_color(color)
    return type_, color


def reconcile_items(
    references: Sequence[ItemReference],
    inventory: Sequence[InventoryEntry],
    mode: MatchMode = MatchMode.EXACT,
) -> list[str]:
    """Map references to inventory ids in input order, dropping unresolved ones."""

    index: dict[tuple[str, str], str] = {}
    for item in inventory:
        index.setdefault(_key(item.type, item.color, mode), item.id)

    resolved: list[str] = []
    for reference in references:
        item_id = index.get(_key(reference.type, reference.color, mode))
        if item_id is not None:
            resolved.append(item_id)
    return resolved
