"""
Tests for the column selection reducer and preview helpers.

Covers:
  - toggle_field adds at the end / removes, rejects unknown tables and columns
  - clear_entity only touches the named entity
  - checked_for / tables_in selectors
  - build_preview_columns / rekey_rows
"""

import pytest

from fieldsales.builder import selection as sel
from fieldsales.builder.preview import build_preview_columns, rekey_rows
from fieldsales.services.report_catalog import ColumnRef


def _select(*keys):
    state = sel.reset()
    for key in keys:
        table, column = key.split(".", 1)
        state = sel.toggle_field(state, table, column)
    return state


# ── Reducer ─────────────────────────────────────────────────────────────────


def test_toggle_appends_in_click_order():
    state = _select("dealers.name", "salesOrders.orderTotal", "dealers.region")
    assert [c.key for c in state] == ["dealers.name", "salesOrders.orderTotal", "dealers.region"]


def test_toggle_twice_removes():
    state = _select("dealers.name", "dealers.region", "dealers.name")
    assert list(state) == [ColumnRef("dealers", "region")]


def test_toggle_returns_new_state():
    before = sel.reset()
    after = sel.toggle_field(before, "dealers", "name")
    assert len(before) == 0
    assert len(after) == 1
    assert ColumnRef("dealers", "name") in after


@pytest.mark.parametrize("table,column", [("dealerz", "name"), ("dealers", "shoeSize")])
def test_toggle_rejects_unknown(table, column):
    with pytest.raises(ValueError):
        sel.toggle_field(sel.reset(), table, column)


def test_clear_entity_keeps_other_entities():
    state = _select("dealers.name", "salesOrders.orderTotal", "dealers.region")
    state = sel.clear_entity(state, "dealers")
    assert [c.key for c in state] == ["salesOrders.orderTotal"]


def test_reset_is_empty():
    assert not sel.reset()
    assert sel.reset().to_payload() == []


# ── Selectors ───────────────────────────────────────────────────────────────


def test_checked_for_and_tables_in():
    state = _select("salesOrders.orderTotal", "dealers.name", "salesOrders.id")
    assert sel.checked_for(state, "salesOrders") == ["orderTotal", "id"]
    assert sel.checked_for(state, "users") == []
    assert sel.tables_in(state) == ["salesOrders", "dealers"]


def test_to_payload():
    assert _select("dealers.name").to_payload() == [{"table": "dealers", "column": "name"}]


# ── Preview helpers ─────────────────────────────────────────────────────────


def test_build_preview_columns_for_active_table_only():
    state = _select("dealers.totalPotential", "users.email", "dealers.name")
    columns = build_preview_columns(state, "dealers")
    assert [c.id for c in columns] == ["dealers.totalPotential", "dealers.name"]
    assert columns[0].header == "Total Potential"
    assert columns[0].table_label == "Dealers"


def test_rekey_rows_fills_missing_and_caps():
    columns = build_preview_columns(_select("dealers.name", "dealers.area"), "dealers")
    rows = [{"name": f"D{i}"} for i in range(15)]
    keyed = rekey_rows(columns, rows)
    assert len(keyed) == 10
    assert keyed[0] == {"dealers.name": "D0", "dealers.area": None}
