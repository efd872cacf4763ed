"""Pruning and renumbering of the budget tree.

Rows reference their position through dot-separated ids ("2.1.3"); the
parent of a row is its id without the last segment.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable, List, Sequence

from presupuestos.models import BudgetTreeItem
from presupuestos.parsing.money import parse_number

log = logging.getLogger(__name__)


def parent_id(item_id: str) -> str:
    """Return the parent path of ``item_id`` (``""`` for top level rows)."""
    return item_id.rpartition(".")[0]


def ancestor_ids(item_id: str) -> list[str]:
    """Return every proper prefix of ``item_id``, shortest first."""
    parts = item_id.split(".")
    return [".".join(parts[:i]) for i in range(1, len(parts))]


def prune(
    items: Sequence[BudgetTreeItem], *, strict: bool | None = None
) -> list[BudgetTreeItem]:
    """Drop zero-amount rows that have no surviving descendant.

    A row survives when its ``amount`` is strictly positive or when it is an
    ancestor of such a row. Positive rows are kept even if their ancestors
    are missing from ``items``. Original order is preserved.
    """
    keep: set[str] = set()
    for item in items:
        if parse_number(item.get("amount"), field="amount", strict=strict) > 0:
            keep.add(str(item["id"]))
            keep.update(ancestor_ids(str(item["id"])))

    pruned = [item for item in items if str(item["id"]) in keep]
    log.info(
        "Pruned to %s rows (%s removed)",
        len(pruned),
        len(items) - len(pruned),
    )
    return pruned


@dataclass
class _Node:
    item: BudgetTreeItem
    original_id: str
    assigned_id: str = ""
    children: List["_Node"] = field(default_factory=list)


def _build_forest(items: Iterable[BudgetTreeItem]) -> tuple[list[_Node], list[_Node]]:
    """Link rows into nodes. Returns ``(roots, all_nodes)``."""
    nodes = [_Node(item=item, original_id=str(item["id"])) for item in items]

    by_parent: dict[str, list[_Node]] = defaultdict(list)
    for node in nodes:
        by_parent[parent_id(node.original_id)].append(node)

    claimed: set[str] = {""}
    for node in nodes:
        if node.original_id in claimed:
            if node.original_id:
                log.warning("Duplicate id %s; children kept under first occurrence", node.original_id)
            continue
        claimed.add(node.original_id)
        node.children = by_parent.get(node.original_id, [])

    return by_parent.get("", []), nodes


def renumber(items: Sequence[BudgetTreeItem]) -> list[BudgetTreeItem]:
    """Assign dense, 1-based ids to ``items`` keeping sibling order.

    Children are found through the row's original id while the emitted id is
    built from the parent's new id, so ``1, 3, 4`` become ``1, 2, 3`` and
    former ``3.2`` becomes ``2.1`` when ``3.1`` was removed.

    Rows whose parent is not in ``items`` cannot be placed and are dropped.
    """
    roots, nodes = _build_forest(items)
    renumbered: list[BudgetTreeItem] = []

    def _walk(children: list[_Node], new_parent: str) -> None:
        for number, node in enumerate(children, start=1):
            node.assigned_id = f"{new_parent}.{number}" if new_parent else str(number)
            renumbered.append({**node.item, "id": node.assigned_id})
            _walk(node.children, node.assigned_id)

    _walk(roots, "")

    orphans = [n.original_id for n in nodes if not n.assigned_id]
    if orphans:
        log.warning("Dropping %s rows without parent: %s", len(orphans), ", ".join(orphans))
    log.info("Renumbered %s rows", len(renumbered))
    return renumbered


def check_tree(items: Sequence[BudgetTreeItem]) -> list[str]:
    """Return a list of prefix/density violations (empty when well formed)."""
    problems: list[str] = []
    ids = [str(item["id"]) for item in items]
    present = set(ids)

    if len(present) != len(ids):
        seen: set[str] = set()
        for i in ids:
            if i in seen:
                problems.append(f"duplicate id {i}")
            seen.add(i)

    siblings: dict[str, list[int]] = defaultdict(list)
    for i in ids:
        parent = parent_id(i)
        if parent and parent not in present:
            problems.append(f"{i}: missing parent {parent}")
        last = i.rpartition(".")[2]
        if not last.isdigit():
            problems.append(f"{i}: non-numeric segment {last!r}")
            continue
        siblings[parent].append(int(last))

    for parent, numbers in siblings.items():
        if sorted(numbers) != list(range(1, len(numbers) + 1)):
            problems.append(f"{parent or 'root'}: sibling numbers {numbers} are not 1..{len(numbers)}")

    return problems
