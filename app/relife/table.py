"""
Tabular view engine shared by every list screen.

render() takes an in-memory collection of row mappings, the column
descriptors of a screen and the screen's view state, and returns the visible
page plus pagination metadata:

1. search: keep rows where any field's display string contains the term
2. filter: AND of per-column substring filters
3. sort: stable, by raw value, optional
4. paginate: clamp the requested page into range

Search and filters are case-insensitive. Sorting compares raw values, so
strings sort case-sensitively ("Zeta" before "alpha").
"""
from __future__ import annotations

import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Generic, TypeVar

R = TypeVar("R", bound=Mapping[str, Any])

SORT_ASC = "asc"
SORT_DESC = "desc"

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def display_string(value: Any) -> str:
    """Canonical display string used for search and filter matching."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (date, datetime, time)):
        return value.isoformat()
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return " ".join(display_string(v) for v in value.values())
    if isinstance(value, (list, tuple, set, frozenset)):
        return " ".join(display_string(v) for v in value)
    return str(value)


@dataclass(frozen=True)
class ColumnDescriptor(Generic[R]):
    key: str
    title: str = ""
    sortable: bool = False
    filterable: bool = False
    render: Callable[[Any, R], Any] | None = None

    @property
    def label(self) -> str:
        return self.title or self.key.replace("_", " ").title()

    def value(self, row: R) -> Any:
        return row.get(self.key)

    def display(self, row: R) -> Any:
        value = self.value(row)
        if self.render is not None:
            return self.render(value, row)
        return display_string(value)


@dataclass(frozen=True)
class ViewState:
    search_term: str = ""
    column_filters: Mapping[str, str] = field(default_factory=dict)
    sort_column: str | None = None
    sort_direction: str = SORT_ASC
    current_page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def descending(self) -> bool:
        return self.sort_direction == SORT_DESC

    def with_page(self, page: int) -> ViewState:
        return replace(self, current_page=page)

    def toggled_sort(self, key: str) -> ViewState:
        """Clicking a header: new column sorts ascending, same column flips."""
        if self.sort_column == key:
            direction = SORT_ASC if self.descending else SORT_DESC
        else:
            direction = SORT_ASC
        return replace(self, sort_column=key, sort_direction=direction, current_page=1)

    def to_args(self) -> dict[str, Any]:
        """Query-string arguments that reproduce this state (defaults omitted)."""
        args: dict[str, Any] = {}
        if self.search_term:
            args["q"] = self.search_term
        for key, value in self.column_filters.items():
            if value:
                args[f"f_{key}"] = value
        if self.sort_column:
            args["sort"] = self.sort_column
            args["dir"] = self.sort_direction
        if self.current_page != 1:
            args["page"] = self.current_page
        if self.page_size != DEFAULT_PAGE_SIZE:
            args["per_page"] = self.page_size
        return args


@dataclass(frozen=True)
class TableResult(Generic[R]):
    rows: list[R]
    total_count: int
    total_pages: int
    page: int
    page_size: int

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def first_index(self) -> int:
        """1-based index of the first visible row (0 when empty)."""
        if not self.rows:
            return 0
        return (self.page - 1) * self.page_size + 1

    @property
    def last_index(self) -> int:
        if not self.rows:
            return 0
        return self.first_index + len(self.rows) - 1


def _matches_search(row: Mapping[str, Any], needle: str) -> bool:
    for value in row.values():
        if needle in display_string(value).lower():
            return True
    return False


def _matches_filters(row: Mapping[str, Any], filters: list[tuple[str, str]]) -> bool:
    for key, needle in filters:
        if needle not in display_string(row.get(key)).lower():
            return False
    return True


def _as_naive_datetime(value: date) -> datetime:
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _is_nan(value: Any) -> bool:
    if isinstance(value, Decimal):
        return value.is_nan()
    return isinstance(value, float) and math.isnan(value)


def sort_key(value: Any) -> tuple[int, Any]:
    """Total order over mixed raw values: (kind rank, comparable value). NaN sorts after all numbers."""
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, int(value))
    if isinstance(value, (int, float, Decimal)):
        if _is_nan(value):
            return (3, 0)
        return (2, value)
    if isinstance(value, date):
        return (4, _as_naive_datetime(value))
    if isinstance(value, time):
        return (5, value.replace(tzinfo=None))
    if isinstance(value, str):
        return (6, value)
    return (7, display_string(value))


def _sorted(rows: list[R], key: str, descending: bool) -> list[R]:
    # list.sort is stable with reverse=True too: ties keep input order.
    return sorted(rows, key=lambda row: sort_key(row.get(key)), reverse=descending)


def total_pages_for(count: int, page_size: int) -> int:
    return max(1, math.ceil(count / page_size))


def render(collection: Sequence[R], columns: Sequence[ColumnDescriptor[R]], state: ViewState) -> TableResult[R]:
    """
    Apply search, filters, sort and pagination to `collection`.

    Pure: the same inputs always give the same result and nothing is
    mutated. Out-of-range pages are clamped, never an error. `columns` is
    accepted for the call contract; matching itself works on row keys so
    filters on synthetic keys work as long as the row carries them.
    """
    rows: list[R] = list(collection)

    needle = (state.search_term or "").lower()
    if needle:
        rows = [r for r in rows if _matches_search(r, needle)]

    active = [(k, v.lower()) for k, v in (state.column_filters or {}).items() if v]
    if active:
        rows = [r for r in rows if _matches_filters(r, active)]

    if state.sort_column:
        rows = _sorted(rows, state.sort_column, state.descending)

    page_size = state.page_size if state.page_size > 0 else DEFAULT_PAGE_SIZE
    total_count = len(rows)
    total_pages = total_pages_for(total_count, page_size)
    page = min(max(state.current_page, 1), total_pages)
    start = (page - 1) * page_size
    end = min(total_count, page * page_size)

    return TableResult(
        rows=rows[start:end],
        total_count=total_count,
        total_pages=total_pages,
        page=page,
        page_size=page_size,
    )


def _parse_positive_int(raw: str | None, default: int) -> int:
    try:
        value = int((raw or "").strip())
    except ValueError:
        return default
    return value if value > 0 else default


def view_state_from_args(
    args: Mapping[str, str],
    columns: Sequence[ColumnDescriptor[Any]],
    default_page_size: int = DEFAULT_PAGE_SIZE,
) -> ViewState:
    """Build a ViewState from request query args (q, f_<key>, sort, dir, page, per_page)."""
    filters = {}
    for col in columns:
        if col.filterable:
            value = (args.get(f"f_{col.key}") or "").strip()
            if value:
                filters[col.key] = value

    sortable = {c.key for c in columns if c.sortable}
    sort_column = (args.get("sort") or "").strip() or None
    if sort_column not in sortable:
        sort_column = None
    direction = (args.get("dir") or "").strip().lower()
    if direction not in (SORT_ASC, SORT_DESC):
        direction = SORT_ASC

    page_size = min(_parse_positive_int(args.get("per_page"), default_page_size), MAX_PAGE_SIZE)

    return ViewState(
        search_term=(args.get("q") or "").strip(),
        column_filters=filters,
        sort_column=sort_column,
        sort_direction=direction,
        current_page=_parse_positive_int(args.get("page"), 1),
        page_size=page_size,
    )
