import logging
import math
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

COLUMN_TYPES = {"text", "number", "date", "boolean", "custom"}
FILTER_TYPES = {"text", "select", "date", "number", "range"}
ALIGNMENTS = {"left", "center", "right"}

DEFAULT_COLUMN_WIDTH = 150
MIN_COLUMN_WIDTH = 50


@dataclass(frozen=True)
class FilterSpec:
    type: str = "text"
    # select options as (value, label) pairs
    options: tuple = ()

    def __post_init__(self):
        if self.type not in FILTER_TYPES:
            raise ValueError(
                f"Unknown filter type '{self.type}' (expected one of {sorted(FILTER_TYPES)})"
            )
        normalized = []
        for option in self.options or ():
            if isinstance(option, dict):
                value = option.get("value")
                normalized.append((value, str(option.get("label", value))))
            elif isinstance(option, (list, tuple)) and len(option) == 2:
                normalized.append((option[0], str(option[1])))
            else:
                normalized.append((option, str(option)))
        object.__setattr__(self, "options", tuple(normalized))

    @property
    def option_values(self) -> list:
        return [value for value, _ in self.options]


@dataclass(frozen=True)
class Column:
    id: str
    key: Optional[str] = None
    title: Optional[str] = None
    subtitle: Optional[str] = None
    width: Any = None
    min_width: Optional[float] = None
    max_width: Optional[float] = None
    sortable: bool = False
    filterable: bool = False
    resizable: bool = True
    align: str = "left"
    type: str = "text"
    format: Optional[Callable[[Any, dict], Any]] = field(default=None, compare=False)
    filter: Optional[FilterSpec] = None
    hidden: bool = False
    group: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("Column requires an 'id'")
        if self.key is None:
            object.__setattr__(self, "key", self.id)
        if self.title is None:
            object.__setattr__(self, "title", str(self.id))
        if self.type not in COLUMN_TYPES:
            raise ValueError(
                f"Unknown column type '{self.type}' for column '{self.id}'"
            )
        if self.align not in ALIGNMENTS:
            raise ValueError(f"Unknown alignment '{self.align}' for column '{self.id}'")
        if isinstance(self.filter, dict):
            object.__setattr__(self, "filter", FilterSpec(**self.filter))

    @property
    def filter_type(self) -> str:
        if self.filter is not None:
            return self.filter.type
        if self.type in {"number", "date"}:
            return self.type
        return "text"


class ColumnRegistry:
    """Ordered, id-unique column collection.

    Layout operations never mutate in place; they return the updated column
    list so the result can be handed to a host as-is.
    """

    def __init__(self, columns):
        self.columns: list[Column] = list(columns)
        seen = set()
        for col in self.columns:
            if col.id in seen:
                raise ValueError(f"Duplicate column id '{col.id}'")
            seen.add(col.id)
        self._by_id = {col.id: col for col in self.columns}

    def __iter__(self):
        return iter(self.columns)

    def __len__(self):
        return len(self.columns)

    def __contains__(self, column_id):
        return column_id in self._by_id

    @property
    def ids(self) -> list[str]:
        return [col.id for col in self.columns]

    def get(self, column_id) -> Column:
        try:
            return self._by_id[column_id]
        except KeyError:
            raise ValueError(f"Unknown column '{column_id}'") from None

    def find(self, column_id) -> Optional[Column]:
        return self._by_id.get(column_id)

    def visible(self) -> list[Column]:
        return [col for col in self.columns if not col.hidden]

    def _replaced(self, column_id, **changes) -> list[Column]:
        self.get(column_id)
        return [
            replace(col, **changes) if col.id == column_id else col
            for col in self.columns
        ]

    def toggle_visibility(self, column_id) -> list[Column]:
        col = self.get(column_id)
        return self._replaced(column_id, hidden=not col.hidden)

    def with_width(self, column_id, width) -> list[Column]:
        return self._replaced(column_id, width=width)

    def start_width(self, column_id, default_width=DEFAULT_COLUMN_WIDTH) -> float:
        width = self.get(column_id).width
        if isinstance(width, (int, float)) and not isinstance(width, bool):
            return float(width)
        return float(default_width)

    def clamp_width(self, column_id, width, min_width=MIN_COLUMN_WIDTH) -> float:
        col = self.get(column_id)
        low = col.min_width if col.min_width is not None else min_width
        high = col.max_width if col.max_width is not None else math.inf
        return float(max(low, min(high, width)))

    def moved(self, column_id, index: int) -> list[Column]:
        col = self.get(column_id)
        remaining = [c for c in self.columns if c.id != column_id]
        index = max(0, min(index, len(remaining)))
        remaining.insert(index, col)
        return remaining

    def reordered(self, ordered_ids) -> list[Column]:
        ordered_ids = list(ordered_ids)
        if sorted(ordered_ids) != sorted(self.ids) or len(set(ordered_ids)) != len(ordered_ids):
            raise ValueError("Column order must contain every column id exactly once")
        return [self._by_id[column_id] for column_id in ordered_ids]

    def toggle_options(self) -> list[tuple[str, str, bool]]:
        return [(col.id, col.title, not col.hidden) for col in self.columns]


class ResizeSession:
    """One pointer-down -> move -> pointer-up resize interaction.

    The start width is frozen when the session opens; moves only update the
    preview width and nothing is persisted until ``commit``.
    """

    def __init__(self, registry, column_id, start_width, min_width, on_commit, on_close=None):
        self.registry = registry
        self.column_id = column_id
        self.start_width = start_width
        self.min_width = min_width
        self.preview_width = start_width
        self.active = True
        self._on_commit = on_commit
        self._on_close = on_close

    def move(self, delta) -> float:
        if not self.active:
            raise ValueError("Resize session already closed")
        self.preview_width = self.registry.clamp_width(
            self.column_id, self.start_width + delta, min_width=self.min_width
        )
        return self.preview_width

    def commit(self) -> float:
        if not self.active:
            raise ValueError("Resize session already closed")
        self.active = False
        width = self.preview_width
        if self._on_close:
            self._on_close(self)
        logger.debug("Column %s resized %s -> %s", self.column_id, self.start_width, width)
        self._on_commit(self.column_id, width)
        return width

    def cancel(self):
        if not self.active:
            return
        self.active = False
        self.preview_width = self.start_width
        if self._on_close:
            self._on_close(self)
