"""Assembly of the payload sent to the PDF rendering service."""
from __future__ import annotations

import logging
from typing import Mapping

from presupuestos import constants
from presupuestos.models import BudgetTreeItem, Client, Company, PDFPayload
from presupuestos.normalize import normalize_numbers
from presupuestos.parsing.utils import digits_only, format_date
from presupuestos.summary import extract_chapters
from presupuestos.totals import calculate_totals
from presupuestos.trace import NullTraceSink, TraceSink
from presupuestos.tree import prune, renumber

log = logging.getLogger(__name__)


def budget_items(budget: Mapping) -> list[BudgetTreeItem]:
    """Return the rows of ``json_budget_data``.

    The field holds either the bare list of rows or
    ``{"items": [...], "recargo": {...}}``.
    """
    data = budget.get("json_budget_data")
    if isinstance(data, list):
        return list(data)
    if isinstance(data, Mapping):
        return list(data.get("items") or [])
    return []


def resolve_logo_url(logo: str | None, base_url: str | None = None) -> str:
    """Turn a relative logo path into an absolute URL."""
    if not logo:
        return ""
    if logo.startswith("http"):
        return logo
    base = (base_url if base_url is not None else constants.BASE_URL).rstrip("/")
    return f"{base}/{logo.lstrip('/')}"


def format_client_address(budget: Mapping) -> str:
    postal = budget.get("client_postal_code")
    locality = budget.get("client_locality")
    town = f"{postal} {locality}" if postal and locality else postal or locality
    parts = [budget.get("client_address"), town, budget.get("client_province")]
    return ", ".join(str(p) for p in parts if p)


def format_client_contact(budget: Mapping) -> str:
    parts = [budget.get("client_phone"), budget.get("client_email")]
    return " - ".join(str(p) for p in parts if p)


def _emit(sink: TraceSink, name: str, data) -> None:
    try:
        sink.write(name, data)
    except Exception as exc:
        log.error("Trace sink failed on %s: %s", name, exc)


def _note(budget: Mapping, tariff: Mapping, key: str) -> str:
    return budget.get(key) or tariff.get(key) or ""


def build_company(tariff: Mapping, base_url: str | None = None) -> Company:
    return {
        "logo": resolve_logo_url(tariff.get("logo_url"), base_url),
        "name": tariff.get("name") or "",
        "nif": tariff.get("nif") or "",
        "address": tariff.get("address") or "",
        "contact": tariff.get("contact") or "",
        "template": tariff.get("template") or constants.DEFAULT_TEMPLATE,
        "styles": [
            {"primary_color": tariff.get("primary_color")},
            {"secondary_color": tariff.get("secondary_color")},
        ],
    }


def build_client(budget: Mapping, tariff: Mapping) -> Client:
    validity = digits_only(tariff.get("validity")) if tariff.get("validity") else "0"
    return {
        "name": budget.get("client_name") or "",
        "nif_nie": budget.get("client_nif_nie") or "",
        "address": format_client_address(budget),
        "contact": format_client_contact(budget),
        "budget_date": format_date(budget.get("created_at")),
        "validity": validity,
    }


def build_pdf_payload(
    budget: Mapping,
    tariff: Mapping,
    *,
    base_url: str | None = None,
    trace: TraceSink | None = None,
    strict: bool | None = None,
) -> PDFPayload:
    """Build the rendering payload for ``budget`` using ``tariff`` branding.

    Stages run in order: prune, renumber, normalize, then chapters and
    totals on the normalized rows. Neither input is modified.

    Parameters
    ----------
    budget, tariff:
        Records as read from the database.
    base_url:
        Prefix for a relative ``logo_url``; defaults to
        :data:`presupuestos.constants.BASE_URL`.
    trace:
        Receives each intermediate stage (``payload-step*.json``).
    strict:
        Raise :class:`~presupuestos.parsing.money.NumberParseError` on
        malformed numbers instead of reading them as zero.
    """
    sink = trace or NullTraceSink()

    raw = budget_items(budget)
    log.info("Building payload for budget %s: %s rows", budget.get("budget_number"), len(raw))
    _emit(sink, "payload-step1-raw-data.json", {"totalItems": len(raw), "data": raw})

    filtered = prune(raw, strict=strict)
    _emit(
        sink,
        "payload-step2-filtered.json",
        {
            "totalItems": len(filtered),
            "removedItems": len(raw) - len(filtered),
            "data": filtered,
        },
    )

    renumbered = renumber(filtered)
    _emit(sink, "payload-step3-renumbered.json", {"totalItems": len(renumbered), "data": renumbered})

    levels = normalize_numbers(renumbered, strict=strict)
    _emit(sink, "payload-step4-formatted.json", {"totalItems": len(levels), "data": levels})

    chapters = extract_chapters(levels)
    _emit(sink, "payload-step5-chapters.json", {"totalChapters": len(chapters), "data": chapters})

    totals = calculate_totals(levels, budget, strict=strict)
    _emit(sink, "payload-step6-totals.json", {"data": totals})

    client_name = budget.get("client_name") or ""
    company = build_company(tariff, base_url)

    return {
        "company": company,
        "pdf": {
            "title": f"Presupuesto - {client_name} ({budget.get('client_nif_nie') or ''})",
            "author": company["name"],
            "subject": "Documento de Presupuesto",
            "creator": "app server rapidPDF",
            "keywords": "presupuesto",
        },
        "summary": {
            "budget_number": budget.get("budget_number") or "",
            "client": build_client(budget, tariff),
            "title": "Resumen del Presupuesto",
            "note": _note(budget, tariff, "summary_note"),
            "levels": chapters,
            "totals": totals,
        },
        "budget": {
            "title": "Detalles del Presupuesto",
            "levels": levels,
        },
        "conditions": {
            "title": "Condiciones del Presupuesto",
            "note": _note(budget, tariff, "conditions_note"),
        },
        "mode": constants.PAYLOAD_MODE,
    }
