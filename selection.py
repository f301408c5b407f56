CHECKED = "checked"
UNCHECKED = "unchecked"
INDETERMINATE = "indeterminate"


def toggle_row(selected, row_id) -> list:
    """Add ``row_id`` when absent, remove it when present."""
    if row_id in selected:
        return [rid for rid in selected if rid != row_id]
    return list(selected) + [row_id]


def set_row(selected, row_id, checked: bool) -> list:
    if checked:
        return list(selected) if row_id in selected else list(selected) + [row_id]
    return [rid for rid in selected if rid != row_id]


def select_page(selected, page_ids, checked: bool) -> list:
    """Select-all over the current page only.

    Checking adds every id on the page; unchecking removes every id on the
    page. Ids selected on other pages are untouched.
    """
    if checked:
        result = list(selected)
        present = set(result)
        for row_id in page_ids:
            if row_id not in present:
                result.append(row_id)
                present.add(row_id)
        return result
    on_page = set(page_ids)
    return [rid for rid in selected if rid not in on_page]


def header_checkbox_state(selected, page_ids) -> str:
    chosen = set(selected)
    page_ids = list(page_ids)
    count = sum(1 for row_id in page_ids if row_id in chosen)
    if page_ids and count == len(page_ids):
        return CHECKED
    if count > 0:
        return INDETERMINATE
    return UNCHECKED


class SelectionState:
    """Read-only view over a selection list keyed by row id."""

    def __init__(self, selected=None):
        self._selected = list(selected or [])
        self._lookup = set(self._selected)

    def __contains__(self, row_id):
        return row_id in self._lookup

    def __len__(self):
        return len(self._selected)

    def __iter__(self):
        return iter(self._selected)

    def __repr__(self):
        return f"SelectionState(rows={len(self._selected)})"

    @property
    def ids(self) -> list:
        return list(self._selected)

    def is_selected(self, row_id) -> bool:
        return row_id in self._lookup

    def checkbox_state(self, page_ids) -> str:
        return header_checkbox_state(self._selected, page_ids)
