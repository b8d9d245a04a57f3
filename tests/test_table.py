"""Tabular view engine: search, filter, sort and pagination."""
from datetime import date, datetime
from decimal import Decimal

from werkzeug.datastructures import MultiDict

from app.relife.table import (
    ColumnDescriptor,
    MAX_PAGE_SIZE,
    ViewState,
    display_string,
    render,
    sort_key,
    total_pages_for,
    view_state_from_args,
)

COLUMNS = [
    ColumnDescriptor("name", "Name", sortable=True, filterable=True),
    ColumnDescriptor("status", "Status", sortable=True, filterable=True),
    ColumnDescriptor("votes", "Votes", sortable=True),
]


def _people(n):
    return [{"id": i, "name": f"Person {i:02d}", "status": "Pending" if i % 2 else "Passed", "votes": i} for i in range(1, n + 1)]


def test_pagination_splits_and_clamps():
    rows = _people(25)

    r = render(rows, COLUMNS, ViewState(page_size=10))
    assert [row["id"] for row in r.rows] == list(range(1, 11))
    assert r.total_count == 25
    assert r.total_pages == 3

    r = render(rows, COLUMNS, ViewState(current_page=3, page_size=10))
    assert [row["id"] for row in r.rows] == list(range(21, 26))
    assert not r.has_next and r.has_prev

    # Out of range pages land on the last page, never an empty one.
    r = render(rows, COLUMNS, ViewState(current_page=99, page_size=10))
    assert r.page == 3
    assert len(r.rows) == 5

    r = render(rows, COLUMNS, ViewState(current_page=0, page_size=10))
    assert r.page == 1


def test_empty_collection_has_one_page():
    r = render([], COLUMNS, ViewState(current_page=4))
    assert r.rows == []
    assert r.total_count == 0
    assert r.total_pages == 1
    assert r.page == 1
    assert r.first_index == 0 and r.last_index == 0


def test_total_pages_floor_is_one():
    assert total_pages_for(0, 10) == 1
    assert total_pages_for(10, 10) == 1
    assert total_pages_for(11, 10) == 2


def test_search_is_case_insensitive_over_all_fields():
    rows = [
        {"id": 1, "title": "Budget review", "note": None},
        {"id": 2, "title": "Campus tour", "note": "BUDGET overflow"},
        {"id": 3, "title": "Elections", "note": ""},
    ]
    r = render(rows, [], ViewState(search_term="budget"))
    assert [row["id"] for row in r.rows] == [1, 2]


def test_search_ignores_null_fields():
    rows = [{"id": 1, "location": None}, {"id": 2, "location": "Rangsit"}]
    r = render(rows, [], ViewState(search_term="none"))
    assert r.rows == []


def test_filters_are_anded_and_substring_matched():
    rows = _people(6)
    r = render(rows, COLUMNS, ViewState(column_filters={"status": "pend"}))
    assert {row["status"] for row in r.rows} == {"Pending"}
    assert r.total_count == 3

    r = render(rows, COLUMNS, ViewState(column_filters={"status": "pending", "name": "05"}))
    assert [row["id"] for row in r.rows] == [5]

    # Empty filter values are ignored.
    r = render(rows, COLUMNS, ViewState(column_filters={"status": ""}))
    assert r.total_count == 6


def test_motion_status_filter():
    motions = [
        {"id": 1, "title": "Raise dues", "voting_status": "Pending"},
        {"id": 2, "title": "New logo", "voting_status": "Passed"},
        {"id": 3, "title": "Merge committees", "voting_status": "Pending"},
        {"id": 4, "title": "Budget cut", "voting_status": "Failed"},
    ]
    cols = [ColumnDescriptor("voting_status", "Status", filterable=True)]
    r = render(motions, cols, ViewState(column_filters={"voting_status": "pending"}))
    assert [m["id"] for m in r.rows] == [1, 3]


def test_sort_by_raw_value_both_directions():
    rows = [{"id": 1, "votes": 10}, {"id": 2, "votes": 2}, {"id": 3, "votes": 33}]
    asc = render(rows, COLUMNS, ViewState(sort_column="votes", sort_direction="asc"))
    desc = render(rows, COLUMNS, ViewState(sort_column="votes", sort_direction="desc"))
    # Numeric, not lexicographic ("10" < "2" as strings).
    assert [r["id"] for r in asc.rows] == [2, 1, 3]
    assert [r["id"] for r in desc.rows] == [3, 1, 2]


def test_sort_is_stable_for_ties():
    rows = [
        {"id": 1, "status": "Pending"},
        {"id": 2, "status": "Passed"},
        {"id": 3, "status": "Pending"},
        {"id": 4, "status": "Passed"},
    ]
    asc = render(rows, COLUMNS, ViewState(sort_column="status"))
    assert [r["id"] for r in asc.rows] == [2, 4, 1, 3]
    desc = render(rows, COLUMNS, ViewState(sort_column="status", sort_direction="desc"))
    assert [r["id"] for r in desc.rows] == [1, 3, 2, 4]


def test_sort_handles_nulls_and_mixed_dates():
    rows = [
        {"id": 1, "when": date(2025, 3, 1)},
        {"id": 2, "when": None},
        {"id": 3, "when": datetime(2024, 12, 31, 23, 0)},
    ]
    r = render(rows, [], ViewState(sort_column="when"))
    assert [row["id"] for row in r.rows] == [2, 3, 1]


def test_sort_key_orders_kinds():
    values = ["b", 3, None, date(2025, 1, 1), True]
    ordered = sorted(values, key=sort_key)
    assert ordered == [None, True, 3, date(2025, 1, 1), "b"]


def test_render_is_pure_and_idempotent():
    rows = _people(12)
    snapshot = [dict(r) for r in rows]
    state = ViewState(search_term="person", sort_column="votes", sort_direction="desc", current_page=2, page_size=5)
    first = render(rows, COLUMNS, state)
    second = render(rows, COLUMNS, state)
    assert first == second
    assert rows == snapshot


def test_display_string():
    assert display_string(None) == ""
    assert display_string(True) == "true"
    assert display_string(3.0) == "3"
    assert display_string(2.5) == "2.5"
    assert display_string(date(2025, 3, 5)) == "2025-03-05"
    assert display_string(["a", 1]) == "a 1"


def test_column_render_overrides_display():
    col = ColumnDescriptor("location", render=lambda v, row: v or "TBA")
    assert col.display({"location": None}) == "TBA"
    assert col.label == "Location"


def test_toggled_sort_resets_page_and_flips_direction():
    state = ViewState(current_page=3)
    s1 = state.toggled_sort("name")
    assert (s1.sort_column, s1.sort_direction, s1.current_page) == ("name", "asc", 1)
    s2 = s1.toggled_sort("name")
    assert s2.sort_direction == "desc"
    s3 = s2.toggled_sort("status")
    assert (s3.sort_column, s3.sort_direction) == ("status", "asc")


def test_view_state_from_args():
    args = MultiDict(
        {
            "q": " budget ",
            "f_status": "pending",
            "f_votes": "3",  # not filterable
            "sort": "name",
            "dir": "DESC",
            "page": "2",
            "per_page": "500",
        }
    )
    state = view_state_from_args(args, COLUMNS)
    assert state.search_term == "budget"
    assert dict(state.column_filters) == {"status": "pending"}
    assert state.sort_column == "name"
    assert state.sort_direction == "desc"
    assert state.current_page == 2
    assert state.page_size == MAX_PAGE_SIZE


def test_view_state_from_args_rejects_bad_values():
    args = MultiDict({"sort": "bogus", "dir": "sideways", "page": "abc", "per_page": "-3"})
    state = view_state_from_args(args, COLUMNS, default_page_size=20)
    assert state.sort_column is None
    assert state.sort_direction == "asc"
    assert state.current_page == 1
    assert state.page_size == 20


def test_to_args_round_trips_through_query_args():
    state = ViewState(search_term="x", column_filters={"status": "passed"}, sort_column="votes", sort_direction="desc", current_page=2)
    args = state.to_args()
    assert args == {"q": "x", "f_status": "passed", "sort": "votes", "dir": "desc", "page": 2}
    assert view_state_from_args(MultiDict({k: str(v) for k, v in args.items()}), COLUMNS) == state


def test_string_sort_is_case_sensitive():
    rows = [{"id": 1, "n": "alpha"}, {"id": 2, "n": "Zeta"}]
    r = render(rows, [], ViewState(sort_column="n"))
    assert [row["id"] for row in r.rows] == [2, 1]


def test_booleans_sort_false_before_true():
    rows = [{"id": 1, "flag": True}, {"id": 2, "flag": False}, {"id": 3, "flag": True}]
    asc = render(rows, [], ViewState(sort_column="flag"))
    assert [row["id"] for row in asc.rows] == [2, 1, 3]
    desc = render(rows, [], ViewState(sort_column="flag", sort_direction="desc"))
    assert [row["id"] for row in desc.rows] == [1, 3, 2]


def test_status_filter_matches_mixed_case_in_input_order():
    rows = [
        {"id": 0, "status": "Pending"},
        {"id": 1, "status": "Passed"},
        {"id": 2, "status": "pending"},
    ]
    r = render(rows, COLUMNS, ViewState(column_filters={"status": "pending"}))
    assert [row["id"] for row in r.rows] == [0, 2]


def test_nan_sorts_after_numbers():
    rows = [{"id": 1, "v": 3.0}, {"id": 2, "v": float("nan")}, {"id": 3, "v": 1.0}, {"id": 4, "v": Decimal("NaN")}]
    asc = render(rows, [], ViewState(sort_column="v"))
    assert [row["id"] for row in asc.rows] == [3, 1, 2, 4]
    desc = render(rows, [], ViewState(sort_column="v", sort_direction="desc"))
    assert [row["id"] for row in desc.rows] == [2, 4, 1, 3]
