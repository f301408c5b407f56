"""Stateful data table engine.

``DataTable`` owns six state slices (selection, sort, filters, search,
pagination, column layout). Each one is either controlled by the host
through its prop or kept internally, and every mutation reports through the
matching ``on_*`` callback. ``view()`` runs the derivation pipeline over the
current state and returns what a renderer needs.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

from column_registry import ColumnRegistry, ResizeSession
from config_paths import TableSettings
from controlled import UNSET, StateSlice
from derivation import derive, row_value
from filtering import active_filters
from pagination import PaginationConfig, validate_page, validate_page_size
from selection import (
    SelectionState,
    header_checkbox_state,
    select_page,
    set_row,
    toggle_row,
)
from sorting import SortConfig, next_sort
from value_coercion import is_blank

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("csv", "excel", "pdf")

# props whose change can move the filtered row count
TOTAL_PROPS = frozenset(
    {
        "data",
        "columns",
        "column_state",
        "filter_config",
        "filterable",
        "search_query",
        "searchable",
        "search_keys",
    }
)


@dataclass
class TableProps:
    columns: list = field(default_factory=list)
    data: list = field(default_factory=list)

    selectable: bool = False
    selected_rows: Any = UNSET
    default_selected_rows: list = field(default_factory=list)

    sortable: bool = True
    sort_config: Any = UNSET
    default_sort_config: Optional[SortConfig] = None

    filterable: bool = True
    filter_config: Any = UNSET
    default_filter_config: dict = field(default_factory=dict)

    searchable: bool = True
    search_query: Any = UNSET
    default_search_query: str = ""
    # column ids searched by the free-text query; None means visible text columns
    search_keys: Optional[list] = None

    paginated: bool = True
    pagination: Any = UNSET
    default_pagination: Optional[PaginationConfig] = None

    column_toggle: bool = True
    column_state: Any = UNSET
    resizable: bool = True
    reorderable: bool = False

    loading: bool = False
    empty_message: Optional[str] = None

    on_row_select: Optional[Callable[[list], Any]] = None
    on_sort_change: Optional[Callable[[Optional[SortConfig]], Any]] = None
    on_filter_change: Optional[Callable[[dict], Any]] = None
    on_search_change: Optional[Callable[[str], Any]] = None
    on_pagination_change: Optional[Callable[[PaginationConfig], Any]] = None
    on_columns_change: Optional[Callable[[list], Any]] = None
    on_export: Optional[Callable[[str, list], Any]] = None
    on_row_click: Optional[Callable[[Any], Any]] = None


@dataclass(frozen=True)
class TableView:
    rows: list
    columns: list
    all_columns: list
    total: int
    page: int
    page_size: int
    page_count: int
    can_prev: bool
    can_next: bool
    page_window: list
    range_label: str
    selected_rows: list
    checkbox_state: str
    sort_config: Optional[SortConfig]
    filter_config: dict
    search_query: str
    column_widths: dict
    paginated: bool = True
    selectable: bool = False
    loading: bool = False
    empty_message: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.rows

    @property
    def has_selection(self) -> bool:
        return self.selectable and bool(self.selected_rows)

    @property
    def selected_count(self) -> int:
        return len(self.selected_rows)

    @property
    def row_ids(self) -> list:
        return [row_value(row, "id") for row in self.rows]

    def is_selected(self, row_id) -> bool:
        return row_id in self.selected_rows


class DataTable:
    def __init__(self, props: Optional[TableProps] = None, settings: Optional[TableSettings] = None, **kwargs):
        if props is None:
            props = TableProps(**kwargs)
        elif kwargs:
            props = replace(props, **kwargs)
        self.props = props
        self.settings = settings or TableSettings()
        # raises on duplicate column ids
        ColumnRegistry(props.columns)

        default_pagination = props.default_pagination or PaginationConfig(
            page=1, page_size=self.settings.page_size
        )
        self._selection = StateSlice("selection", list(props.default_selected_rows))
        self._sort = StateSlice("sort", props.default_sort_config)
        self._filters = StateSlice(
            "filters", active_filters(ColumnRegistry(props.columns), props.default_filter_config)
        )
        self._search = StateSlice("search", props.default_search_query or "")
        self._pagination = StateSlice("pagination", default_pagination)
        self._columns = StateSlice("columns", list(props.columns))
        self._resize: Optional[ResizeSession] = None
        self._sync_slices()
        if not self._pagination.controlled:
            self._pagination.reset(replace(default_pagination, total=len(self.processed_rows())))

    # ---------- props ----------
    def _sync_slices(self):
        p = self.props
        self._selection.sync(p.selected_rows, p.on_row_select)
        self._sort.sync(p.sort_config, p.on_sort_change)
        self._filters.sync(p.filter_config, p.on_filter_change)
        self._search.sync(p.search_query, p.on_search_change)
        self._pagination.sync(p.pagination, p.on_pagination_change)
        self._columns.sync(p.column_state, p.on_columns_change)

    def rerender(self, **changes):
        """Apply new props, e.g. refreshed ``data`` or a new controlled value."""
        self.props = replace(self.props, **changes)
        self._sync_slices()
        if TOTAL_PROPS.intersection(changes):
            self._sync_total()
        return self

    def _sync_total(self):
        """Report the filtered row count when it no longer matches the pagination state."""
        config = self.pagination
        total = len(self.processed_rows())
        if config.total != total:
            self._pagination.commit(replace(config, total=total))

    # ---------- current state ----------
    @property
    def selected_rows(self) -> list:
        return list(self._selection.value or [])

    @property
    def selection(self) -> SelectionState:
        return SelectionState(self.selected_rows)

    @property
    def sort_config(self) -> Optional[SortConfig]:
        return self._sort.value

    @property
    def filter_config(self) -> dict:
        return dict(self._filters.value or {})

    @property
    def search_query(self) -> str:
        value = self._search.value
        return "" if value is None else str(value)

    @property
    def pagination(self) -> PaginationConfig:
        return self._pagination.value

    @property
    def columns(self) -> list:
        return list(self._columns.value)

    @property
    def registry(self) -> ColumnRegistry:
        return ColumnRegistry(self._columns.value)

    def visible_columns(self) -> list:
        return self.registry.visible()

    # ---------- derivation ----------
    def _derive(self):
        p = self.props
        config = self.pagination
        return derive(
            p.data,
            self.registry,
            search_query=self.search_query if p.searchable else None,
            search_keys=p.search_keys,
            filter_config=self.filter_config if p.filterable else None,
            sort_config=self.sort_config if p.sortable else None,
            page=config.page,
            page_size=config.page_size,
            paginated=p.paginated,
        )

    def processed_rows(self) -> list:
        """Filtered, searched and sorted rows, before pagination."""
        return self._derive().processed

    def page_rows(self) -> list:
        return self._derive().rows

    def view(self) -> TableView:
        result = self._derive()
        registry = self.registry
        config = self.pagination
        selected = self.selected_rows
        page_ids = [row_value(row, "id") for row in result.rows]
        paginator = result.paginator

        widths = {}
        for col in registry:
            if isinstance(col.width, (int, float)) and not isinstance(col.width, bool):
                widths[col.id] = col.width
        if self._resize is not None:
            widths[self._resize.column_id] = self._resize.preview_width

        return TableView(
            rows=result.rows,
            columns=registry.visible(),
            all_columns=list(registry),
            total=result.total,
            page=config.page if paginator else 1,
            page_size=config.page_size if paginator else max(1, result.total),
            page_count=paginator.page_count if paginator else (1 if result.total else 0),
            can_prev=paginator.can_prev if paginator else False,
            can_next=paginator.can_next if paginator else False,
            page_window=paginator.page_window(self.settings.page_window) if paginator else [],
            range_label=paginator.range_label() if paginator else f"Showing {result.total} of {result.total}",
            selected_rows=selected,
            checkbox_state=header_checkbox_state(selected, page_ids),
            sort_config=self.sort_config,
            filter_config=self.filter_config,
            search_query=self.search_query,
            column_widths=widths,
            paginated=self.props.paginated,
            selectable=self.props.selectable,
            loading=self.props.loading,
            empty_message=self.props.empty_message or self.settings.empty_message,
        )

    # ---------- sort ----------
    def toggle_sort(self, column_id):
        """Header click on ``column_id``; ignored for non-sortable columns."""
        if not self.props.sortable:
            return self.sort_config
        col = self.registry.get(column_id)
        if not col.sortable:
            logger.debug("Column '%s' is not sortable", column_id)
            return self.sort_config
        new_sort = next_sort(self.sort_config, column_id, self.settings.sort_cycle)
        return self._sort.commit(new_sort)

    def set_sort(self, sort_config: Optional[SortConfig]):
        """Replace the sort config; ignored while the table is not sortable."""
        if not self.props.sortable:
            logger.debug("Sort ignored; table is not sortable")
            return self.sort_config
        if sort_config is not None:
            self.registry.get(sort_config.key)
        return self._sort.commit(sort_config)

    # ---------- filters & search ----------
    def _commit_filters(self, filters):
        result = self._filters.commit(active_filters(self.registry, filters))
        self._sync_total()
        return result

    def set_filter(self, column_id, value):
        """Set one column filter; a blank value removes it.

        Ignored while the table is not filterable. Raises ValueError for
        unknown or non-filterable columns.
        """
        col = self.registry.get(column_id)
        if not col.filterable:
            raise ValueError(f"Column '{column_id}' is not filterable")
        if not self.props.filterable:
            logger.debug("Filter ignored; table is not filterable")
            return self.filter_config
        filters = self.filter_config
        if is_blank(value):
            filters.pop(column_id, None)
        else:
            filters[column_id] = value
        return self._commit_filters(filters)

    def clear_filter(self, column_id):
        return self.set_filter(column_id, None)

    def clear_filters(self):
        if not self.props.filterable:
            return self.filter_config
        return self._commit_filters({})

    def set_search(self, query):
        """Set the free-text query; ignored while the table is not searchable."""
        if not self.props.searchable:
            logger.debug("Search ignored; table is not searchable")
            return self.search_query
        result = self._search.commit("" if query is None else str(query))
        self._sync_total()
        return result

    # ---------- pagination ----------
    def _commit_page(self, page: int, page_size: int):
        validate_page(page)
        validate_page_size(page_size)
        total = len(self.processed_rows())
        return self._pagination.commit(PaginationConfig(page=page, page_size=page_size, total=total))

    def set_page(self, page: int):
        return self._commit_page(page, self.pagination.page_size)

    def next_page(self):
        return self.set_page(self.pagination.page + 1)

    def prev_page(self):
        return self.set_page(self.pagination.page - 1)

    def set_page_size(self, page_size: int):
        return self._commit_page(1, page_size)

    # ---------- selection ----------
    def _commit_selection(self, selected):
        if not self.props.selectable:
            logger.debug("Selection ignored; table is not selectable")
            return self.selected_rows
        return self._selection.commit(selected)

    def is_selected(self, row_id) -> bool:
        return row_id in self.selected_rows

    def toggle_row(self, row_id):
        return self._commit_selection(toggle_row(self.selected_rows, row_id))

    def set_row_selected(self, row_id, checked: bool):
        return self._commit_selection(set_row(self.selected_rows, row_id, checked))

    def toggle_select_all(self, checked: bool):
        """Select or deselect every row of the displayed page (not the whole filtered set)."""
        page_ids = [row_value(row, "id") for row in self.page_rows()]
        return self._commit_selection(select_page(self.selected_rows, page_ids, checked))

    def clear_selection(self):
        return self._commit_selection([])

    # ---------- column layout ----------
    def toggle_column_visibility(self, column_id):
        if not self.props.column_toggle:
            return self.columns
        result = self._columns.commit(self.registry.toggle_visibility(column_id))
        # hidden columns leave the search scope
        self._sync_total()
        return result

    def column_toggle_options(self) -> list:
        return self.registry.toggle_options()

    def begin_resize(self, column_id) -> ResizeSession:
        registry = self.registry
        col = registry.get(column_id)
        if not (self.props.resizable and col.resizable):
            raise ValueError(f"Column '{column_id}' is not resizable")
        if self._resize is not None:
            self._resize.cancel()
        self._resize = ResizeSession(
            registry,
            column_id,
            registry.start_width(column_id, self.settings.default_column_width),
            self.settings.min_column_width,
            on_commit=self._commit_width,
            on_close=self._close_resize,
        )
        return self._resize

    def _close_resize(self, session):
        if self._resize is session:
            self._resize = None

    def _commit_width(self, column_id, width):
        self._columns.commit(self.registry.with_width(column_id, width))

    def resize_column(self, column_id, delta) -> float:
        session = self.begin_resize(column_id)
        session.move(delta)
        return session.commit()

    def move_column(self, column_id, index: int):
        if not self.props.reorderable:
            raise ValueError("Column reordering is disabled")
        return self._columns.commit(self.registry.moved(column_id, index))

    def reorder_columns(self, ordered_ids):
        if not self.props.reorderable:
            raise ValueError("Column reordering is disabled")
        return self._columns.commit(self.registry.reordered(ordered_ids))

    # ---------- side effects ----------
    def export(self, fmt: str):
        """Hand the filtered + sorted rows (never just the current page) to ``on_export``."""
        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format '{fmt}' (use csv, excel or pdf)")
        rows = self.processed_rows()
        logger.debug("Export requested: %s (%d rows)", fmt, len(rows))
        if self.props.on_export is not None:
            self.props.on_export(fmt, rows)
        return rows

    def click_row(self, row_id):
        for row in self.props.data:
            if row_value(row, "id") == row_id:
                if self.props.on_row_click is not None:
                    self.props.on_row_click(row)
                return row
        return None
