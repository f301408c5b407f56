import logging
from dataclasses import dataclass
from typing import Optional

from value_coercion import sort_key_for

logger = logging.getLogger(__name__)

ASC = "asc"
DESC = "desc"

# header click cycles
SORT_CYCLE_TRI = "tri"  # unsorted -> asc -> desc -> unsorted
SORT_CYCLE_TOGGLE = "toggle"  # asc <-> desc, never back to unsorted
SORT_CYCLES = {SORT_CYCLE_TRI, SORT_CYCLE_TOGGLE}


@dataclass(frozen=True)
class SortConfig:
    key: str
    direction: str = ASC

    def __post_init__(self):
        if self.direction not in (ASC, DESC):
            raise ValueError(f"Sort direction must be 'asc' or 'desc', got '{self.direction}'")

    @classmethod
    def parse(cls, text: str) -> "SortConfig":
        """Parse ``column`` or ``column:desc``."""
        key, _, direction = text.partition(":")
        return cls(key=key.strip(), direction=(direction.strip().lower() or ASC))


def next_sort(current: Optional[SortConfig], column_id: str, cycle: str = SORT_CYCLE_TRI):
    """Sort config after a header click on ``column_id``."""
    if current is None or current.key != column_id:
        return SortConfig(column_id, ASC)
    if current.direction == ASC:
        return SortConfig(column_id, DESC)
    if cycle == SORT_CYCLE_TOGGLE:
        return SortConfig(column_id, ASC)
    return None


def sort_positions(frame, positions, column, direction=ASC) -> list:
    """Stable ordering of ``positions`` by ``column``.

    Ties keep their input order in both directions and values that cannot be
    read for the column type go last.
    """
    positions = list(positions)
    if column is None:
        return positions
    key_fn = sort_key_for(column.type)
    if column.key in frame.columns:
        raw = frame[column.key].tolist()
    else:
        raw = [None] * len(frame.index)

    present = []
    missing = []
    for pos in positions:
        key = key_fn(raw[pos])
        if key is None:
            missing.append(pos)
        else:
            present.append((key, pos))

    try:
        ordered = sorted(present, key=lambda item: item[0], reverse=(direction == DESC))
    except TypeError:
        # incomparable keys; compare their text instead
        logger.debug("Mixed value types in column '%s'; sorting as text", column.id)
        ordered = sorted(
            present, key=lambda item: str(item[0]).casefold(), reverse=(direction == DESC)
        )
    return [pos for _, pos in ordered] + missing
