from dataclasses import dataclass

DEFAULT_PAGE_SIZE = 10
DEFAULT_PAGE_WINDOW = 5


@dataclass(frozen=True)
class PaginationConfig:
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total: int = 0

    def __post_init__(self):
        validate_page(self.page)
        validate_page_size(self.page_size)


def validate_page(page: int):
    if not isinstance(page, int) or isinstance(page, bool) or page < 1:
        raise ValueError(f"Page must be an integer >= 1, got {page!r}")


def validate_page_size(page_size: int):
    if not isinstance(page_size, int) or isinstance(page_size, bool) or page_size < 1:
        raise ValueError(f"Page size must be an integer >= 1, got {page_size!r}")


class Paginator:
    """Page math over a row count.

    Pages are 1-based and never clamped: a page past the end yields an empty
    slice, and ``can_next`` is how a host knows to stop.
    """

    def __init__(self, total_rows: int, page_size: int = DEFAULT_PAGE_SIZE, page: int = 1):
        validate_page(page)
        validate_page_size(page_size)
        self.page_size = page_size
        self.page = page
        self.total_rows = max(0, total_rows)

    @property
    def page_start(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def page_end(self) -> int:
        return min(self.total_rows, self.page_start + self.page_size)

    @property
    def page_count(self) -> int:
        if self.total_rows == 0:
            return 0
        return (self.total_rows - 1) // self.page_size + 1

    @property
    def can_prev(self) -> bool:
        return self.page > 1

    @property
    def can_next(self) -> bool:
        return self.page < self.page_count

    def slice(self, rows):
        return list(rows[self.page_start : self.page_start + self.page_size])

    def page_window(self, width: int = DEFAULT_PAGE_WINDOW) -> list[int]:
        """Page numbers to offer as buttons, centred on the current page."""
        count = self.page_count
        if count == 0 or width < 1:
            return []
        width = min(width, count)
        first = self.page - width // 2
        first = max(1, min(first, count - width + 1))
        return list(range(first, first + width))

    def range_label(self) -> str:
        if self.total_rows == 0:
            return "Showing 0 of 0"
        if self.page_start >= self.total_rows:
            return f"Showing 0 of {self.total_rows}"
        return f"Showing {self.page_start + 1}-{self.page_end} of {self.total_rows}"
