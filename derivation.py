"""The table derivation pipeline: rows -> filtered -> searched -> sorted -> paginated.

``derive`` is a pure function of its inputs and never raises on row data.
Rows are handled by position; the frame built here only serves as the column
store the stages read from, the row objects handed back are the caller's own.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd

from column_registry import ColumnRegistry
from filtering import apply_mask, filter_mask, search_mask
from pagination import DEFAULT_PAGE_SIZE, Paginator
from sorting import sort_positions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Derivation:
    rows: list
    # filtered + searched + sorted, before pagination
    processed: list
    total: int
    paginator: Optional[Paginator] = field(default=None, compare=False)


def row_value(row, key):
    try:
        return row.get(key)
    except AttributeError:
        return getattr(row, key, None)


def build_frame(rows, registry) -> pd.DataFrame:
    index = pd.RangeIndex(len(rows))
    data = {}
    for col in registry:
        if col.key in data:
            continue
        # object dtype keeps ints as ints when a column has gaps
        data[col.key] = pd.Series([row_value(row, col.key) for row in rows], index=index, dtype=object)
    return pd.DataFrame(data, index=index)


def filtered_positions(frame, registry, *, search_query=None, search_keys=None, filter_config=None):
    positions = range(len(frame.index))
    positions = apply_mask(positions, filter_mask(frame, registry, filter_config))
    positions = apply_mask(positions, search_mask(frame, registry, search_query, search_keys))
    return positions


def derive(
    data,
    columns,
    *,
    search_query=None,
    search_keys=None,
    filter_config=None,
    sort_config=None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    paginated: bool = True,
) -> Derivation:
    rows = list(data or [])
    registry = columns if isinstance(columns, ColumnRegistry) else ColumnRegistry(columns)
    frame = build_frame(rows, registry)

    positions = filtered_positions(
        frame,
        registry,
        search_query=search_query,
        search_keys=search_keys,
        filter_config=filter_config,
    )

    if sort_config is not None:
        column = registry.find(sort_config.key)
        if column is None:
            logger.warning("Ignoring sort on unknown column '%s'", sort_config.key)
        else:
            positions = sort_positions(frame, positions, column, sort_config.direction)

    processed = [rows[pos] for pos in positions]
    total = len(processed)
    if not paginated:
        return Derivation(rows=list(processed), processed=processed, total=total)

    paginator = Paginator(total, page_size=page_size, page=page)
    return Derivation(
        rows=paginator.slice(processed),
        processed=processed,
        total=total,
        paginator=paginator,
    )
