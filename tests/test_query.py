import pytest

from mezanino.domain.models import InventoryRecord
from mezanino.domain.query import (
    SortSpec,
    clear_selection,
    compare_values,
    display_value,
    filter_by_columns,
    is_selected,
    run_query,
    search_records,
    select_all,
    sort_records,
    toggle_value,
    unique_values,
)


def rec(id, material="Fibra", quantity=0, **kw):
    return InventoryRecord(id=id, category=kw.pop("category", "FIBER"), material=material, quantity=quantity, **kw)


@pytest.fixture
def items():
    return [
        rec("a", "Tinta Azul Royal", 10, status="EM ESTOQUE", room="S1"),
        rec("b", "Tinta Vermelha", 5, status="PAGO", room="S2"),
        rec("c", "Solvente Universal", 20, status="EM ESTOQUE", room=None),
    ]


def test_sort_by_quantity_ascending(items):
    out = run_query(items, "", None, SortSpec("quantity", "asc"))
    assert [r.quantity for r in out] == [5, 10, 20]


def test_sort_descending(items):
    out = sort_records(items, SortSpec("quantity", "desc"))
    assert [r.quantity for r in out] == [20, 10, 5]


def test_search_is_case_insensitive(items):
    out = search_records(items, "azul")
    assert out == [items[0]]


def test_search_matches_numbers_and_ids(items):
    assert search_records(items, "20") == [items[2]]
    assert search_records(items, "pago") == [items[1]]


def test_search_ignores_missing_values():
    r = rec("x", "Kevlar 49", 1)
    assert search_records([r], "none") == []


def test_empty_search_keeps_all(items):
    assert search_records(items, "") == items


def test_column_filter_with_placeholder(items):
    out = filter_by_columns(items, {"room": {"-", "S2"}})
    assert [r.id for r in out] == ["b", "c"]


def test_empty_allow_set_hides_everything(items):
    assert filter_by_columns(items, {"status": set()}) == []


@pytest.mark.parametrize(
    "filters",
    [
        {"nope": {"x"}},
        {"room": None},
        {"room": "S1"},
        {"room": 5},
        "room=S1",
    ],
)
def test_malformed_filters_are_ignored(items, filters):
    assert filter_by_columns(items, filters) == items


@pytest.mark.parametrize(
    "sort",
    [SortSpec("nope", "asc"), SortSpec("quantity", "sideways"), None, "quantity"],
)
def test_malformed_sort_is_ignored(items, sort):
    assert sort_records(items, sort) == items


def test_query_is_repeatable_and_does_not_copy(items):
    args = (items, "tinta", {"status": {"EM ESTOQUE", "PAGO"}}, SortSpec("material", "desc"))
    first = run_query(*args)
    second = run_query(*args)
    assert first == second
    assert all(a is b for a, b in zip(first, second))
    assert [r.id for r in items] == ["a", "b", "c"]


def test_sort_falls_back_to_text_for_dates():
    rs = [rec("1", exit_date="2024-01-12"), rec("2", exit_date="2024-01-05"), rec("3", exit_date=None)]
    out = sort_records(rs, SortSpec("exit_date", "asc"))
    assert [r.id for r in out] == ["3", "2", "1"]


def test_sort_ties_keep_previous_order():
    rs = [rec("1", "Kevlar"), rec("2", "kevlar"), rec("3", "Aramida")]
    out = sort_records(rs, SortSpec("material", "asc"))
    assert [r.id for r in out] == ["3", "1", "2"]


def test_compare_values():
    assert compare_values("9", "10") < 0
    assert compare_values("b", "A") > 0
    assert compare_values("-", "5") < 0
    assert compare_values("Ext 6", "ext 6") == 0


def test_underscore_digits_sort_as_text():
    rs = [rec("1", code="1_000"), rec("2", code="20"), rec("3", code="3")]
    out = sort_records(rs, SortSpec("code", "asc"))
    assert [r.id for r in out] == ["1", "3", "2"]
    assert compare_values("1_000", "20") < 0


def test_display_value():
    r = rec("1", "Kevlar", 0, lot="  ")
    assert display_value(r, "lot") == "-"
    assert display_value(r, "room") == "-"
    assert display_value(r, "quantity") == "0"


def test_unique_values(items):
    assert unique_values(items, "room") == ["-", "S1", "S2"]
    assert unique_values(items, "nope") == []


class TestFilterMenu:

    def test_select_all_removes_entry(self, items):
        filters = {"room": {"S1"}, "status": {"PAGO"}}
        out = select_all(filters, "room")
        assert "room" not in out
        assert out["status"] == {"PAGO"}
        assert filters["room"] == {"S1"}

    def test_toggle_from_all_starts_with_universe(self, items):
        out = toggle_value({}, "room", "S1", items)
        assert out == {"room": {"-", "S2"}}
        assert not is_selected(out, "room", "S1")
        assert is_selected(out, "status", "PAGO")

    def test_toggle_back_to_full_set_clears_entry(self, items):
        out = toggle_value({}, "room", "S1", items)
        out = toggle_value(out, "room", "S1", items)
        assert out == {}

    def test_clear_selection(self, items):
        out = clear_selection({}, "status")
        assert out == {"status": set()}
        assert filter_by_columns(items, out) == []
