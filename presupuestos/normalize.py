"""Canonical number formatting for budget rows.

Stored rows use display formatting ("1.234,56"); the payload carries
machine decimals ("1234.56") and the renderer localizes them again.
"""
from __future__ import annotations

import logging
from typing import Sequence

from presupuestos.models import BudgetTreeItem
from presupuestos.parsing.money import canonical

log = logging.getLogger(__name__)

ITEM_NUMERIC_FIELDS = ("pvp", "quantity", "iva_percentage")


def _present(value) -> bool:
    return value is not None and value != ""


def normalize_numbers(
    items: Sequence[BudgetTreeItem], *, strict: bool | None = None
) -> list[BudgetTreeItem]:
    """Return copies of ``items`` with numeric fields as 2-decimal strings.

    ``amount`` is converted on every level; ``pvp``, ``quantity`` and
    ``iva_percentage`` only on ``item`` rows. Missing or empty fields are
    left as they are.
    """
    result: list[BudgetTreeItem] = []
    for item in items:
        row = dict(item)
        if _present(item.get("amount")):
            row["amount"] = canonical(item["amount"], field="amount", strict=strict)
        if item.get("level") == "item":
            for name in ITEM_NUMERIC_FIELDS:
                if _present(item.get(name)):
                    row[name] = canonical(item[name], field=name, strict=strict)
        result.append(row)
    log.debug("Normalized numbers of %s rows", len(result))
    return result
