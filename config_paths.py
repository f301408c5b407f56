import json
import os
from dataclasses import dataclass

from column_registry import DEFAULT_COLUMN_WIDTH, MIN_COLUMN_WIDTH
from pagination import DEFAULT_PAGE_SIZE, DEFAULT_PAGE_WINDOW
from sorting import SORT_CYCLE_TRI, SORT_CYCLES

HOME = os.path.expanduser("~")
XDG_CONFIG_HOME = os.environ.get("XDG_CONFIG_HOME")
CONFIG_HOME = XDG_CONFIG_HOME if XDG_CONFIG_HOME else os.path.join(HOME, ".config")
CONFIG_DIR = os.path.join(CONFIG_HOME, "gridkit")
CONFIG_JSON = os.path.join(CONFIG_DIR, "config.json")

# default settings
PAGE_SIZE_DEFAULT = DEFAULT_PAGE_SIZE
SORT_CYCLE_DEFAULT = SORT_CYCLE_TRI
DEFAULT_COLUMN_WIDTH_DEFAULT = DEFAULT_COLUMN_WIDTH
MIN_COLUMN_WIDTH_DEFAULT = MIN_COLUMN_WIDTH
PAGE_WINDOW_DEFAULT = DEFAULT_PAGE_WINDOW
EMPTY_MESSAGE_DEFAULT = "No data"


@dataclass(frozen=True)
class TableSettings:
    page_size: int = PAGE_SIZE_DEFAULT
    sort_cycle: str = SORT_CYCLE_DEFAULT
    default_column_width: float = DEFAULT_COLUMN_WIDTH_DEFAULT
    min_column_width: float = MIN_COLUMN_WIDTH_DEFAULT
    page_window: int = PAGE_WINDOW_DEFAULT
    empty_message: str = EMPTY_MESSAGE_DEFAULT

    @classmethod
    def from_config(cls, cfg) -> "TableSettings":
        return cls(
            page_size=cfg.get("PAGE_SIZE", PAGE_SIZE_DEFAULT),
            sort_cycle=cfg.get("SORT_CYCLE", SORT_CYCLE_DEFAULT),
            default_column_width=cfg.get("DEFAULT_COLUMN_WIDTH", DEFAULT_COLUMN_WIDTH_DEFAULT),
            min_column_width=cfg.get("MIN_COLUMN_WIDTH", MIN_COLUMN_WIDTH_DEFAULT),
            page_window=cfg.get("PAGE_WINDOW", PAGE_WINDOW_DEFAULT),
            empty_message=cfg.get("EMPTY_MESSAGE", EMPTY_MESSAGE_DEFAULT),
        )


def ensure_config_dirs():
    os.makedirs(CONFIG_DIR, exist_ok=True)


def _positive_int(value):
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _positive_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def load_config():
    cfg = {
        "PAGE_SIZE": PAGE_SIZE_DEFAULT,
        "SORT_CYCLE": SORT_CYCLE_DEFAULT,
        "DEFAULT_COLUMN_WIDTH": DEFAULT_COLUMN_WIDTH_DEFAULT,
        "MIN_COLUMN_WIDTH": MIN_COLUMN_WIDTH_DEFAULT,
        "PAGE_WINDOW": PAGE_WINDOW_DEFAULT,
        "EMPTY_MESSAGE": EMPTY_MESSAGE_DEFAULT,
    }

    if os.path.exists(CONFIG_JSON):
        try:
            with open(CONFIG_JSON, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            return cfg
        if not isinstance(data, dict):
            return cfg

        table = data.get("table")
        if not isinstance(table, dict):
            table = {}

        page_size = table.get("page_size")
        if _positive_int(page_size):
            cfg["PAGE_SIZE"] = page_size

        cycle = table.get("sort_cycle")
        if isinstance(cycle, str) and cycle in SORT_CYCLES:
            cfg["SORT_CYCLE"] = cycle

        columns = data.get("columns")
        if isinstance(columns, dict):
            width = columns.get("default_width")
            if _positive_number(width):
                cfg["DEFAULT_COLUMN_WIDTH"] = width
            min_width = columns.get("min_width")
            if _positive_number(min_width):
                cfg["MIN_COLUMN_WIDTH"] = min_width

        window = table.get("page_window")
        if _positive_int(window):
            cfg["PAGE_WINDOW"] = window

        message = table.get("empty_message")
        if isinstance(message, str) and message.strip():
            cfg["EMPTY_MESSAGE"] = message

    return cfg
