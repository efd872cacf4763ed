"""End-to-end checks of the payload builder on small budgets."""
from decimal import Decimal

from presupuestos.payload import build_pdf_payload
from presupuestos.tree import prune


def _budget(items, **extra):
    budget = {
        "budget_number": "P-2025-001",
        "client_name": "Ana López",
        "client_nif_nie": "12345678Z",
        "created_at": "2025-03-07T10:15:00+00:00",
        "json_budget_data": items,
    }
    budget.update(extra)
    return budget


def _scenario_a_items():
    return [
        {"level": "chapter", "id": "1", "name": "Reforma", "amount": "0,00"},
        {"level": "item", "id": "1.1", "name": "Pintura", "amount": "121,00", "iva_percentage": "21,00"},
    ]


def test_scenario_a_chapter_kept_as_ancestor():
    items = _scenario_a_items()
    assert prune(items) == items

    payload = build_pdf_payload(_budget(items), {})
    totals = payload["summary"]["totals"]
    assert totals["ivas"] == [{"name": "21.00% IVA", "amount": "21.00"}]
    assert totals["base"]["amount"] == "100.00"
    assert totals["total"]["amount"] == "121.00"
    assert "subtotal" not in totals
    assert "irpf" not in totals
    assert "re" not in totals


def test_scenario_b_second_chapter_becomes_first():
    items = [
        {"level": "chapter", "id": "1", "name": "Demolición", "amount": "0,00"},
        {"level": "item", "id": "1.1", "name": "Retirada", "amount": "0,00", "iva_percentage": "21,00"},
        {"level": "chapter", "id": "2", "name": "Albañilería", "amount": "242,00"},
        {"level": "subchapter", "id": "2.1", "name": "Tabiques", "amount": "242,00"},
        {"level": "item", "id": "2.1.1", "name": "Ladrillo", "amount": "242,00", "iva_percentage": "21,00"},
    ]
    payload = build_pdf_payload(_budget(items), {})

    assert payload["summary"]["levels"] == [
        {"level": "chapter", "id": "1", "name": "Albañilería", "amount": "242.00"}
    ]
    assert [(r["id"], r["name"]) for r in payload["budget"]["levels"]] == [
        ("1", "Albañilería"),
        ("1.1", "Tabiques"),
        ("1.1.1", "Ladrillo"),
    ]


def test_scenario_c_irpf_withholding():
    budget = _budget(_scenario_a_items(), irpf=15.5, irpf_percentage=15)
    totals = build_pdf_payload(budget, {})["summary"]["totals"]

    assert totals["subtotal"] == {"name": "Subtotal", "amount": "121.00"}
    assert totals["irpf"] == {"name": "15.00% IRPF", "amount": "-15.50"}
    assert totals["total"]["amount"] == "105.50"
    assert Decimal(totals["total"]["amount"]) == Decimal(totals["subtotal"]["amount"]) - Decimal("15.50")


def test_scenario_d_recargo_de_equivalencia():
    data = {"items": _scenario_a_items(), "recargo": {"aplica": True, "reByIVA": {"21": 5.2}}}
    with_re = build_pdf_payload(_budget(data), {})["summary"]["totals"]
    without_re = build_pdf_payload(_budget(_scenario_a_items()), {})["summary"]["totals"]

    assert len(with_re["re"]) == 1
    line = with_re["re"][0]
    assert line["amount"] == "5.20"
    # bracket base = 21.00 / 0.21 = 100.00, so 5.20 is 5.20 %
    assert line["name"] == "5.20% RE (IVA 21.00%)"
    assert with_re["subtotal"]["amount"] == "121.00"
    assert Decimal(with_re["total"]["amount"]) - Decimal(without_re["total"]["amount"]) == Decimal("5.20")


def test_irpf_and_recargo_together():
    data = {"items": _scenario_a_items(), "recargo": {"aplica": True, "reByIVA": {"21": 5.2}}}
    totals = build_pdf_payload(_budget(data, irpf=15, irpf_percentage=15), {})["summary"]["totals"]
    assert list(totals) == ["subtotal", "base", "ivas", "irpf", "re", "total"]
    assert totals["total"]["amount"] == "111.20"


def test_empty_budget_produces_empty_document():
    items = [{"level": "chapter", "id": "1", "name": "Vacío", "amount": "0,00"}]
    payload = build_pdf_payload(_budget(items), {})

    assert payload["summary"]["levels"] == []
    assert payload["budget"]["levels"] == []
    assert payload["summary"]["totals"] == {
        "base": {"name": "Base Imponible", "amount": "0.00"},
        "ivas": [],
        "total": {"name": "TOTAL PRESUPUESTO", "amount": "0.00"},
    }


def test_missing_budget_data():
    payload = build_pdf_payload(_budget(None), {})
    assert payload["budget"]["levels"] == []
    assert payload["summary"]["totals"]["total"]["amount"] == "0.00"
