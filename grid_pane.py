import curses
import datetime

from derivation import row_value
from selection import CHECKED, INDETERMINATE
from sorting import ASC
from value_coercion import coerce_number, coerce_timestamp, is_missing

PLACEHOLDER = "-"


def format_cell(column, row) -> str:
    value = row_value(row, column.key)

    if column.format is not None:
        rendered = column.format(value, row)
        return "" if rendered is None else str(rendered)

    if column.type == "boolean":
        return "Yes" if (not is_missing(value) and bool(value)) else "No"

    if column.type == "date":
        if is_missing(value) or value == "":
            return PLACEHOLDER
        if isinstance(value, datetime.date) and not isinstance(value, datetime.datetime):
            return value.isoformat()
        ts = coerce_timestamp(value)
        return ts.date().isoformat() if ts is not None else PLACEHOLDER

    if column.type == "number":
        if isinstance(value, bool) or coerce_number(value) is None:
            return PLACEHOLDER
        if isinstance(value, str):
            value = coerce_number(value)
        if isinstance(value, float) and value.is_integer():
            return f"{int(value):,}"
        return f"{value:,}"

    if is_missing(value) or value == "":
        return PLACEHOLDER
    return str(value)


class GridPane:
    PAIR_CELL_TEXT = 1
    PAIR_SELECTED = 2
    MAX_COL_WIDTH = 40

    def __init__(self):
        try:
            curses.start_color()
            curses.use_default_colors()
            curses.init_pair(self.PAIR_CELL_TEXT, curses.COLOR_WHITE, -1)
            curses.init_pair(self.PAIR_SELECTED, curses.COLOR_BLACK, curses.COLOR_WHITE)
        except curses.error:
            pass

    @staticmethod
    def _title(column, view) -> str:
        title = str(column.title)
        sort = view.sort_config
        if sort is not None and sort.key == column.id:
            title += " ^" if sort.direction == ASC else " v"
        return title

    def get_col_width(self, column, view) -> int:
        max_len = len(self._title(column, view))
        for row in view.rows:
            max_len = max(max_len, len(format_cell(column, row)))
        return min(self.MAX_COL_WIDTH, max_len + 2)

    @staticmethod
    def _fit(text: str, width: int, align: str) -> str:
        text = text.replace("\n", " ")
        if len(text) > width:
            text = text[: max(0, width - 1)] + "~" if width > 1 else text[:width]
        if align == "right":
            return text.rjust(width)
        if align == "center":
            return text.center(width)
        return text.ljust(width)

    @staticmethod
    def _checkbox(state) -> str:
        if state == CHECKED or state is True:
            return "[x]"
        if state == INDETERMINATE:
            return "[-]"
        return "[ ]"

    def render_lines(self, view) -> list[str]:
        if view.loading:
            return ["Loading data..."]

        columns = view.columns
        widths = [self.get_col_width(col, view) for col in columns]

        header_cells = []
        if view.selectable:
            header_cells.append(self._checkbox(view.checkbox_state))
        for col, cw in zip(columns, widths):
            header_cells.append(self._fit(self._title(col, view), cw, col.align))
        header = " ".join(header_cells).rstrip()
        lines = [header, "-" * max(len(header), 1)]

        if view.is_empty:
            lines.append(view.empty_message)
        else:
            for row in view.rows:
                cells = []
                if view.selectable:
                    cells.append(self._checkbox(view.is_selected(row_value(row, "id"))))
                for col, cw in zip(columns, widths):
                    cells.append(self._fit(format_cell(col, row), cw, col.align))
                lines.append(" ".join(cells).rstrip())

        footer = []
        if view.paginated:
            footer.append(view.range_label)
            if view.page_count:
                pages = " ".join(
                    f"[{p}]" if p == view.page else str(p) for p in view.page_window
                )
                footer.append(f"page {view.page}/{view.page_count}  {pages}")
        if view.has_selection:
            footer.append(f"{view.selected_count} selected")
        if footer:
            lines.append(" | ".join(footer))
        return lines

    # ---------- rendering ----------
    def draw(self, win, view):
        win.erase()
        h, w = win.getmaxyx()
        lines = self.render_lines(view)
        selected = set(view.selected_rows)
        row_ids = view.row_ids
        body_start = 2
        for y, line in enumerate(lines[: max(0, h - 1)]):
            attr = curses.A_NORMAL
            if y == 0:
                attr = curses.A_BOLD
            elif body_start <= y < body_start + len(view.rows) and not view.is_empty:
                if row_ids[y - body_start] in selected:
                    attr = curses.A_REVERSE
            try:
                win.addnstr(y, 0, line, max(1, w - 1), attr)
            except curses.error:
                pass
        win.refresh()
