import pytest

from column_registry import Column
from derivation import derive
from sorting import ASC, DESC, SORT_CYCLE_TOGGLE, SORT_CYCLE_TRI, SortConfig, next_sort


COLUMNS = [
    Column(id="name", sortable=True),
    Column(id="totalValue", type="number", sortable=True),
    Column(id="issued", type="date", sortable=True),
    Column(id="active", type="boolean", sortable=True),
]


def _ids(rows):
    return [row["id"] for row in rows]


def test_descending_ties_keep_input_order():
    rows = [
        {"id": "a", "totalValue": 100},
        {"id": "b", "totalValue": 100},
        {"id": "c", "totalValue": 50},
    ]
    result = derive(rows, COLUMNS, sort_config=SortConfig("totalValue", DESC), paginated=False)
    assert _ids(result.rows) == ["a", "b", "c"]


def test_ascending_ties_keep_input_order():
    rows = [
        {"id": "a", "totalValue": 100},
        {"id": "b", "totalValue": 50},
        {"id": "c", "totalValue": 100},
        {"id": "d", "totalValue": 50},
    ]
    result = derive(rows, COLUMNS, sort_config=SortConfig("totalValue", ASC), paginated=False)
    assert _ids(result.rows) == ["b", "d", "a", "c"]


def test_numbers_compare_by_value_not_text():
    rows = [
        {"id": "a", "totalValue": "9"},
        {"id": "b", "totalValue": 10},
        {"id": "c", "totalValue": 1.5},
    ]
    result = derive(rows, COLUMNS, sort_config=SortConfig("totalValue"), paginated=False)
    assert _ids(result.rows) == ["c", "a", "b"]


def test_text_sort_is_case_insensitive():
    rows = [
        {"id": "a", "name": "beta"},
        {"id": "b", "name": "Alpha"},
        {"id": "c", "name": "alpha"},
        {"id": "d", "name": "Gamma"},
    ]
    result = derive(rows, COLUMNS, sort_config=SortConfig("name"), paginated=False)
    assert _ids(result.rows) == ["b", "c", "a", "d"]


def test_dates_compare_chronologically():
    rows = [
        {"id": "a", "issued": "2024-03-01"},
        {"id": "b", "issued": "2023-12-31"},
        {"id": "c", "issued": "2024-01-15T08:00:00"},
    ]
    result = derive(rows, COLUMNS, sort_config=SortConfig("issued", DESC), paginated=False)
    assert _ids(result.rows) == ["a", "c", "b"]


@pytest.mark.parametrize("direction", [ASC, DESC])
def test_missing_values_sort_last(direction):
    rows = [
        {"id": "a", "totalValue": None},
        {"id": "b", "totalValue": 3},
        {"id": "c"},
        {"id": "d", "totalValue": "n/a"},
        {"id": "e", "totalValue": 1},
    ]
    result = derive(rows, COLUMNS, sort_config=SortConfig("totalValue", direction), paginated=False)
    ids = _ids(result.rows)
    assert ids[-3:] == ["a", "c", "d"]
    assert ids[:2] == (["e", "b"] if direction == ASC else ["b", "e"])


def test_booleans_sort_as_numbers():
    rows = [{"id": "a", "active": True}, {"id": "b", "active": False}]
    result = derive(rows, COLUMNS, sort_config=SortConfig("active"), paginated=False)
    assert _ids(result.rows) == ["b", "a"]


def test_no_sort_config_keeps_input_order():
    rows = [{"id": "b", "name": "z"}, {"id": "a", "name": "a"}]
    assert _ids(derive(rows, COLUMNS, paginated=False).rows) == ["b", "a"]


def test_sort_on_unknown_column_is_ignored():
    rows = [{"id": "b"}, {"id": "a"}]
    assert _ids(derive(rows, COLUMNS, sort_config=SortConfig("ghost"), paginated=False).rows) == ["b", "a"]


def test_tri_state_cycle():
    first = next_sort(None, "name", SORT_CYCLE_TRI)
    assert first == SortConfig("name", ASC)
    second = next_sort(first, "name", SORT_CYCLE_TRI)
    assert second == SortConfig("name", DESC)
    assert next_sort(second, "name", SORT_CYCLE_TRI) is None


def test_toggle_cycle_never_returns_to_unsorted():
    config = SortConfig("name", DESC)
    assert next_sort(config, "name", SORT_CYCLE_TOGGLE) == SortConfig("name", ASC)


def test_clicking_other_column_starts_ascending():
    assert next_sort(SortConfig("name", DESC), "totalValue") == SortConfig("totalValue", ASC)


def test_sort_config_parse_and_validation():
    assert SortConfig.parse("amount:desc") == SortConfig("amount", DESC)
    assert SortConfig.parse("amount") == SortConfig("amount", ASC)
    with pytest.raises(ValueError):
        SortConfig("amount", "sideways")
