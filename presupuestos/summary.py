from __future__ import annotations

from typing import Sequence

from presupuestos.models import BudgetTreeItem, SummaryLevel
from presupuestos.parsing.money import canonical


def extract_chapters(items: Sequence[BudgetTreeItem]) -> list[SummaryLevel]:
    """Return the chapter rows for the summary page.

    Chapter amounts are taken as stored; they are not recomputed from the
    rows below them.
    """
    return [
        {
            "level": item["level"],
            "id": item["id"],
            "name": item.get("name", ""),
            "amount": canonical(item.get("amount"), field="amount"),
        }
        for item in items
        if item.get("level") == "chapter"
    ]
