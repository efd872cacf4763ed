"""IRPF and recargo de equivalencia (RE) helpers.

These produce the values stored on a budget (``irpf``, ``reByIVA``) that
:mod:`presupuestos.totals` later turns into payload lines.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Literal, Mapping, Sequence

from presupuestos.models import BudgetTreeItem
from presupuestos.parsing.money import parse_number, q2

log = logging.getLogger(__name__)

IssuerType = Literal["empresa", "autonomo"]
ClientType = Literal["particular", "autonomo", "empresa"]

DEFAULT_IRPF_AUTONOMO = Decimal("15")


def should_apply_irpf(issuer_type: str, client_type: str) -> bool:
    """IRPF is withheld only when a freelancer bills a company or freelancer."""
    if issuer_type != "autonomo":
        return False
    return client_type in ("empresa", "autonomo")


def calculate_irpf(base: Decimal, irpf_percentage: Decimal) -> Decimal:
    """Return the amount withheld from ``base`` (positive value)."""
    if not irpf_percentage or not base:
        return Decimal("0")
    return base * irpf_percentage / Decimal("100")


def default_irpf_percentage(issuer_type: str) -> Decimal:
    return DEFAULT_IRPF_AUTONOMO if issuer_type == "autonomo" else Decimal("0")


def total_with_irpf(total_with_vat: Decimal, irpf_amount: Decimal) -> Decimal:
    return total_with_vat - irpf_amount


def is_valid_percentage(value) -> bool:
    """Return ``True`` for percentages in ``[0, 100]``."""
    pct = parse_number(value)
    return Decimal("0") <= pct <= Decimal("100")


def calculate_recargo(
    items: Sequence[BudgetTreeItem], recargos: Mapping
) -> dict[Decimal, Decimal]:
    """Return the RE amount for each IVA rate, rounded to cents.

    ``recargos`` maps IVA percent to RE percent (``{21: 5.2, 10: 1.4}``).
    A line's ``pvp * quantity`` is gross of IVA and RE, so its base is
    ``gross / (1 + iva% + re%)`` and its RE is ``base * re%``.
    """
    re_pct = {q2(parse_number(k)): parse_number(v) for k, v in recargos.items()}
    by_iva: dict[Decimal, Decimal] = {}

    for item in items:
        if item.get("level") != "item":
            continue
        iva = q2(parse_number(item.get("iva_percentage"), field="iva_percentage"))
        pct = re_pct.get(iva, Decimal("0"))
        if pct <= 0:
            continue
        gross = parse_number(item.get("pvp"), field="pvp") * parse_number(
            item.get("quantity"), field="quantity"
        )
        divisor = Decimal("1") + iva / Decimal("100") + pct / Decimal("100")
        base = gross / divisor
        by_iva[iva] = by_iva.get(iva, Decimal("0")) + base * pct / Decimal("100")

    return {iva: q2(amount) for iva, amount in by_iva.items()}


def total_recargo(re_by_iva: Mapping) -> Decimal:
    return q2(sum((parse_number(v) for v in re_by_iva.values()), Decimal("0")))


def validate_recargo_percentages(recargos: Mapping) -> bool:
    return all(is_valid_percentage(v) for v in recargos.values())


def recargo_config(re_by_iva: Mapping[Decimal, Decimal], aplica: bool = True) -> dict:
    """Return a ``recargo`` block for ``json_budget_data`` (JSON friendly)."""
    return {
        "aplica": aplica,
        "reByIVA": {format(iva.normalize(), "f"): float(amount) for iva, amount in re_by_iva.items()},
    }
