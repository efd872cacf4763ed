"""Tax totals for the summary page.

Line amounts are gross (IVA included), so the IVA share of a line is
extracted with ``amount * rate / (100 + rate)``. IRPF is withheld from the
payable total and the recargo de equivalencia (RE) is added on top of it.
"""
from __future__ import annotations

import logging
import re
from decimal import Decimal
from typing import Mapping, Sequence

import pandas as pd

from presupuestos.models import BudgetTreeItem, TotalLine, Totals
from presupuestos.parsing.money import parse_number, to_canonical

log = logging.getLogger(__name__)

_RE_IVA_RX = re.compile(r"IVA\s+([\d.]+)%")


def extract_vat(amount: Decimal, rate: Decimal) -> Decimal:
    """Return the IVA contained in the gross ``amount`` for ``rate`` percent."""
    divisor = Decimal("100") + rate
    if not divisor:
        return Decimal("0")
    return amount * rate / divisor


def _dec_sum(values) -> Decimal:
    return sum(values, Decimal("0"))


def vat_groups(
    items: Sequence[BudgetTreeItem], *, strict: bool | None = None
) -> tuple[Decimal, dict[Decimal, Decimal]]:
    """Return ``(gross_total, {rate: vat})`` over the ``item`` rows.

    Chapters, subchapters and sections only repeat the amounts of their
    items and are skipped.
    """
    rows = []
    for item in items:
        if item.get("level") != "item":
            continue
        amount = parse_number(item.get("amount"), field="amount", strict=strict)
        rate = parse_number(item.get("iva_percentage"), field="iva_percentage", strict=strict)
        rows.append({"iva": rate, "amount": amount, "vat": extract_vat(amount, rate)})

    if not rows:
        return Decimal("0"), {}

    df = pd.DataFrame(rows, dtype=object)
    gross = _dec_sum(df["amount"])
    grouped = df.groupby("iva", sort=True)["vat"].agg(_dec_sum)
    return gross, {Decimal(rate): vat for rate, vat in grouped.items()}


def _rate_from_name(name: str) -> Decimal:
    return parse_number(name.split("%", 1)[0])


def _re_rate_from_name(name: str) -> Decimal:
    m = _RE_IVA_RX.search(name)
    return Decimal(m.group(1)) if m else Decimal("0")


def _line(name: str, amount: Decimal) -> TotalLine:
    return {"name": name, "amount": to_canonical(amount)}


def irpf_line(
    budget: Mapping, *, strict: bool | None = None
) -> tuple[TotalLine, Decimal] | None:
    """Return the IRPF withholding line and its amount, if it applies."""
    irpf = parse_number(budget.get("irpf"), field="irpf", strict=strict)
    pct = parse_number(budget.get("irpf_percentage"), field="irpf_percentage", strict=strict)
    if irpf > 0 and pct:
        return _line(f"{to_canonical(pct)}% IRPF", -irpf), irpf
    return None


def recargo_lines(
    budget: Mapping,
    vat_by_rate: Mapping[Decimal, Decimal],
    *,
    strict: bool | None = None,
) -> tuple[list[TotalLine], Decimal]:
    """Return the RE lines (sorted by IVA rate) and their sum.

    The effective RE percentage is recovered from the IVA bracket's base,
    ``vat / (rate / 100)``.
    """
    data = budget.get("json_budget_data")
    recargo = data.get("recargo") if isinstance(data, Mapping) else None
    if not recargo or not recargo.get("aplica") or not recargo.get("reByIVA"):
        return [], Decimal("0")

    lines: list[TotalLine] = []
    added = Decimal("0")
    for iva_key, re_amount in recargo["reByIVA"].items():
        rate = parse_number(iva_key, field="reByIVA", strict=strict)
        amount = parse_number(re_amount, field="reByIVA", strict=strict)
        vat = vat_by_rate.get(rate, Decimal("0"))
        base = vat / (rate / Decimal("100")) if rate else Decimal("0")
        pct = amount / base * Decimal("100") if base > 0 else Decimal("0")
        lines.append(
            _line(f"{to_canonical(pct)}% RE (IVA {to_canonical(rate)}%)", amount)
        )
        added += amount

    lines.sort(key=lambda line: _re_rate_from_name(line["name"]))
    return lines, added


def calculate_totals(
    items: Sequence[BudgetTreeItem], budget: Mapping, *, strict: bool | None = None
) -> Totals:
    """Compute the totals block of the payload.

    ``subtotal`` is only present when IRPF or RE changed the payable total.
    """
    gross, vat_by_rate = vat_groups(items, strict=strict)
    base = gross - _dec_sum(vat_by_rate.values())

    ivas = [
        _line(f"{to_canonical(rate)}% IVA", vat) for rate, vat in vat_by_rate.items()
    ]
    ivas.sort(key=lambda line: _rate_from_name(line["name"]))

    result: Totals = {
        "base": _line("Base Imponible", base),
        "ivas": ivas,
    }

    payable = gross
    adjusted = False

    irpf = irpf_line(budget, strict=strict)
    if irpf is not None:
        result["irpf"], withheld = irpf
        payable -= withheld
        adjusted = True

    re_lines, re_total = recargo_lines(budget, vat_by_rate, strict=strict)
    if re_lines:
        result["re"] = re_lines
        payable += re_total
        adjusted = True

    if adjusted:
        result = {"subtotal": _line("Subtotal", gross), **result}

    result["total"] = _line("TOTAL PRESUPUESTO", payable)
    log.info(
        "Totals: base=%s, %s IVA rates, total=%s",
        result["base"]["amount"],
        len(ivas),
        result["total"]["amount"],
    )
    return result
