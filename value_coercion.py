import math

import numpy as np
import pandas as pd


def is_missing(value) -> bool:
    if value is None:
        return True
    try:
        missing = pd.isna(value)
    except (TypeError, ValueError):
        return False
    # pd.isna on list-likes returns an array
    if isinstance(missing, (bool, np.bool_)):
        return bool(missing)
    return False


def is_blank(value) -> bool:
    """True for values that mean "no filter": None, NaN, blank text, empty containers."""
    if is_missing(value):
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def cell_text(value) -> str:
    if is_missing(value):
        return ""
    return str(value)


def coerce_number(value):
    if is_missing(value):
        return None
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
        return None if math.isnan(number) else number
    if isinstance(value, str):
        stripped = value.strip().replace(",", "")
        if stripped == "":
            return None
        try:
            number = float(stripped)
        except ValueError:
            return None
        return None if math.isnan(number) else number
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def coerce_timestamp(value):
    if is_missing(value):
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and value.strip() == "":
        return None
    try:
        ts = pd.to_datetime(value, utc=True)
    except (TypeError, ValueError, OverflowError):
        return None
    if not isinstance(ts, pd.Timestamp) or pd.isna(ts):
        return None
    return ts


def coerce_bool(value):
    if is_missing(value):
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    lowered = str(value).strip().lower()
    if lowered in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if lowered in {"0", "false", "f", "no", "n", "off"}:
        return False
    return None


def coerce_bounds(value, coerce):
    """Split an interval filter value into coerced (low, high) bounds.

    Accepts ``{"min": .., "max": ..}``, ``{"start": .., "end": ..}`` or a
    two-item sequence. Either bound may be missing. Returns None when the value
    is not interval-shaped or neither bound survives coercion.
    """
    if isinstance(value, dict):
        low = value.get("min", value.get("start"))
        high = value.get("max", value.get("end"))
    elif isinstance(value, (list, tuple)) and len(value) == 2:
        low, high = value
    else:
        return None
    low = None if is_blank(low) else coerce(low)
    high = None if is_blank(high) else coerce(high)
    if low is None and high is None:
        return None
    return low, high


def sort_key_for(column_type: str):
    """Return a function mapping a raw cell to a comparable key, or None when missing."""
    if column_type == "number":
        return coerce_number
    if column_type == "date":
        return coerce_timestamp
    if column_type == "boolean":
        def _bool_key(value):
            flag = coerce_bool(value)
            return None if flag is None else int(flag)

        return _bool_key

    def _text_key(value):
        if is_missing(value):
            return None
        return str(value).casefold()

    return _text_key
