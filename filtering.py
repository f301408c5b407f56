"""Search and per-column filter stage.

Both stages produce boolean masks over the row frame so they compose with a
plain AND regardless of the order they are applied in. Nothing here raises on
bad data: a filter value that cannot be read for its column type leaves that
column unfiltered.
"""

import logging

import numpy as np
import pandas as pd

from value_coercion import (
    cell_text,
    coerce_bounds,
    coerce_number,
    coerce_timestamp,
    is_blank,
)

logger = logging.getLogger(__name__)


def _mask(values, predicate) -> np.ndarray:
    return np.fromiter((bool(predicate(v)) for v in values), dtype=bool, count=len(values))


def column_values(frame: pd.DataFrame, column) -> pd.Series:
    if column.key in frame.columns:
        return frame[column.key]
    return pd.Series([None] * len(frame.index), index=frame.index, dtype=object)


# ---------- free-text search ----------
def search_scope(registry, search_keys=None) -> list:
    """Columns searched by the free-text query; hidden columns never take part."""
    if search_keys is None:
        return [col for col in registry.visible() if col.type == "text"]
    scope = []
    for column_id in search_keys:
        col = registry.find(column_id)
        if col is None:
            logger.warning("Ignoring unknown search column '%s'", column_id)
            continue
        if not col.hidden:
            scope.append(col)
    return scope


def search_mask(frame, registry, query, search_keys=None):
    """Mask of rows whose text matches ``query`` in any scoped column, or None for a blank query."""
    if is_blank(query):
        return None
    needle = str(query).strip().casefold()
    mask = np.zeros(len(frame.index), dtype=bool)
    for col in search_scope(registry, search_keys):
        values = column_values(frame, col)
        mask |= _mask(values, lambda v: needle in cell_text(v).casefold())
    return mask


# ---------- per-column filters ----------
def active_filters(registry, filter_config) -> dict:
    """Entries of ``filter_config`` that can narrow the result."""
    active = {}
    for column_id, value in (filter_config or {}).items():
        if is_blank(value):
            continue
        col = registry.find(column_id)
        if col is None:
            logger.warning("Ignoring filter for unknown column '%s'", column_id)
            continue
        if not col.filterable:
            logger.warning("Ignoring filter for non-filterable column '%s'", column_id)
            continue
        active[column_id] = value
    return active


def _text_mask(values, value):
    needle = str(value).strip().casefold()
    if needle == "":
        return None
    return _mask(values, lambda v: needle in cell_text(v).casefold())


def _number_mask(values, value):
    bounds = coerce_bounds(value, coerce_number)
    if bounds is not None:
        low, high = bounds
        numbers = [coerce_number(v) for v in values]

        def _in_range(n):
            if n is None:
                return False
            if low is not None and n < low:
                return False
            if high is not None and n > high:
                return False
            return True

        return _mask(numbers, _in_range)
    if isinstance(value, (dict, list, tuple)):
        return None
    target = coerce_number(value)
    if target is None:
        return None
    numbers = [coerce_number(v) for v in values]
    return _mask(numbers, lambda n: n is not None and n == target)


def _end_of_day(ts):
    if ts is not None and ts == ts.normalize():
        return ts + pd.Timedelta(days=1) - pd.Timedelta(1, unit="ns")
    return ts


def _date_mask(values, value):
    bounds = coerce_bounds(value, coerce_timestamp)
    stamps = [coerce_timestamp(v) for v in values]
    if bounds is not None:
        low, high = bounds
        high = _end_of_day(high)

        def _in_range(ts):
            if ts is None or pd.isna(ts):
                return False
            if low is not None and ts < low:
                return False
            if high is not None and ts > high:
                return False
            return True

        return _mask(stamps, _in_range)
    if isinstance(value, (dict, list, tuple)):
        return None
    target = coerce_timestamp(value)
    if target is None:
        return None
    day = target.normalize()
    return _mask(stamps, lambda ts: ts is not None and not pd.isna(ts) and ts.normalize() == day)


def _select_mask(values, value, column):
    wanted = list(value) if isinstance(value, (list, tuple, set)) else [value]
    wanted = [v for v in wanted if not is_blank(v)]
    if column.filter is not None and column.filter.options:
        allowed = column.filter.option_values
        wanted = [v for v in wanted if v in allowed]
    if not wanted:
        return None
    texts = {cell_text(v) for v in wanted}

    def _matches(cell):
        for candidate in wanted:
            try:
                if cell == candidate:
                    return True
            except (TypeError, ValueError):
                continue
        return cell_text(cell) in texts

    return _mask(values, _matches)


def column_mask(frame, column, value):
    """Mask for one column filter, or None when the value does not narrow."""
    values = column_values(frame, column)
    kind = column.filter_type
    if kind == "select":
        return _select_mask(values, value, column)
    if kind == "number":
        return _number_mask(values, value)
    if kind == "date":
        return _date_mask(values, value)
    if kind == "range":
        if column.type == "date":
            return _date_mask(values, value)
        return _number_mask(values, value)
    if isinstance(value, (dict, list, tuple, set)):
        return None
    return _text_mask(values, value)


def filter_mask(frame, registry, filter_config):
    """AND of every active column filter, or None when nothing narrows."""
    mask = None
    for column_id, value in active_filters(registry, filter_config).items():
        col_mask = column_mask(frame, registry.get(column_id), value)
        if col_mask is None:
            logger.debug("Filter on '%s' not applicable to %r; column left unfiltered", column_id, value)
            continue
        mask = col_mask if mask is None else (mask & col_mask)
    return mask


def apply_mask(positions, mask):
    if mask is None:
        return list(positions)
    return [pos for pos in positions if mask[pos]]
