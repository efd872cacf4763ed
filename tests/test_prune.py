from presupuestos.tree import ancestor_ids, parent_id, prune


def _row(level, id_, amount):
    return {"level": level, "id": id_, "name": f"{level} {id_}", "amount": amount}


def test_parent_and_ancestors():
    assert parent_id("2.1.3") == "2.1"
    assert parent_id("2") == ""
    assert ancestor_ids("2.1.3") == ["2", "2.1"]
    assert ancestor_ids("2") == []


def test_prune_keeps_ancestors_of_positive_items():
    items = [
        _row("chapter", "1", "0,00"),
        _row("subchapter", "1.1", "0,00"),
        _row("item", "1.1.1", "10,00"),
        _row("item", "1.1.2", "0,00"),
    ]
    result = prune(items)
    assert [r["id"] for r in result] == ["1", "1.1", "1.1.1"]


def test_prune_removes_empty_branches():
    items = [
        _row("chapter", "1", "0,00"),
        _row("item", "1.1", "0,00"),
        _row("chapter", "2", "50,00"),
        _row("item", "2.1", "50,00"),
    ]
    result = prune(items)
    assert [r["id"] for r in result] == ["2", "2.1"]


def test_prune_keeps_positive_parent_without_children():
    items = [_row("chapter", "1", "5,00"), _row("item", "1.1", "0")]
    assert [r["id"] for r in prune(items)] == ["1"]


def test_prune_keeps_positive_row_with_missing_ancestors():
    items = [_row("item", "3.2.1", "7,50")]
    assert prune(items) == items


def test_prune_negative_amount_is_not_kept():
    items = [_row("chapter", "1", "-3,00")]
    assert prune(items) == []


def test_prune_empty_input():
    assert prune([]) == []


def test_prune_does_not_mutate_input():
    items = [_row("chapter", "1", "0,00"), _row("item", "1.1", "1,00")]
    snapshot = [dict(r) for r in items]
    prune(items)
    assert items == snapshot


def test_zero_row_survives_iff_positive_descendant():
    items = [
        _row("chapter", "1", "0,00"),
        _row("subchapter", "1.1", "0,00"),
        _row("item", "1.1.1", "0,00"),
        _row("subchapter", "1.2", "0,00"),
        _row("item", "1.2.1", "3,00"),
        _row("chapter", "2", "0,00"),
    ]
    kept = {r["id"] for r in prune(items)}
    assert kept == {"1", "1.2", "1.2.1"}
