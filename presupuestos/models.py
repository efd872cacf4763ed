from __future__ import annotations

from typing import Dict, List, Literal, NotRequired, TypedDict


Level = Literal["chapter", "subchapter", "section", "item"]


# =========================
# Rows of the budget tree
# =========================
class BudgetTreeItem(TypedDict):
    """
    One row of a hierarchical budget. The tree is encoded by the ``id``
    path ("2.1.3" = chapter 2, subchapter 1, section 3), not by parent links.
    Numeric fields arrive Spanish-formatted ("1.234,56") and leave the
    pipeline in canonical form ("1234.56").
    """
    level: Level
    id: str
    name: str
    description: NotRequired[str]
    # Only on ``item`` rows
    unit: NotRequired[str]
    quantity: NotRequired[str]
    iva_percentage: NotRequired[str]
    pvp: NotRequired[str]
    # Gross (tax-inclusive) amount, stored on every level
    amount: NotRequired[str]


class RecargoConfig(TypedDict):
    aplica: bool
    # IVA rate ("21") -> RE amount already computed for that bracket
    reByIVA: Dict[str, float]


class BudgetData(TypedDict):
    items: List[BudgetTreeItem]
    recargo: NotRequired[RecargoConfig]


# =========================
# Payload
# =========================
class SummaryLevel(TypedDict):
    level: str
    id: str
    name: str
    amount: str


class TotalLine(TypedDict):
    name: str
    amount: str


class Totals(TypedDict):
    subtotal: NotRequired[TotalLine]
    base: TotalLine
    ivas: List[TotalLine]
    irpf: NotRequired[TotalLine]
    re: NotRequired[List[TotalLine]]
    total: TotalLine


class Company(TypedDict):
    logo: str
    name: str
    nif: str
    address: str
    contact: str
    template: str
    styles: List[Dict[str, str | None]]


class PdfMeta(TypedDict):
    title: str
    author: str
    subject: str
    creator: str
    keywords: str


class Client(TypedDict):
    name: str
    nif_nie: str
    address: str
    contact: str
    budget_date: str
    validity: str


class Summary(TypedDict):
    budget_number: str
    client: Client
    title: str
    note: str
    levels: List[SummaryLevel]
    totals: Totals


class BudgetSection(TypedDict):
    title: str
    levels: List[BudgetTreeItem]


class Conditions(TypedDict):
    title: str
    note: str


class PDFPayload(TypedDict):
    company: Company
    pdf: PdfMeta
    summary: Summary
    budget: BudgetSection
    conditions: Conditions
    mode: str


__all__ = [
    "Level",
    "BudgetTreeItem",
    "RecargoConfig",
    "BudgetData",
    "SummaryLevel",
    "TotalLine",
    "Totals",
    "Company",
    "PdfMeta",
    "Client",
    "Summary",
    "BudgetSection",
    "Conditions",
    "PDFPayload",
]
