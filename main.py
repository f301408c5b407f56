import argparse
import logging
import os
import sys

from config_paths import TableSettings, load_config
from file_type_handler import EXPORT_EXTENSIONS, FileTypeHandler, TableExporter
from grid_pane import GridPane
from logging_setup import configure_logging
from pagination import PaginationConfig
from sorting import SortConfig
from table_engine import DataTable

try:
    from _version import __version__
except ImportError:
    __version__ = "0.0.0"

logger = logging.getLogger(__name__)

USAGE = (
    "gridkit - filter, sort and page through tabular files\n\n"
    "Usage:\n"
    "  gridkit PATH [--search Q] [--filter COL=VALUE ...] [--sort COL[:desc]]\n"
    "               [--page N] [--page-size N] [--hide COL ...] [--export OUT]\n"
    "  gridkit -v\n"
)


def parse_filter(text: str):
    """Split ``COL=VALUE`` into (column, value); ``COL=LOW..HIGH`` becomes a range."""
    column, sep, value = text.partition("=")
    if not sep or not column.strip():
        raise ValueError(f"Filter must look like COL=VALUE, got '{text}'")
    value = value.strip()
    if ".." in value:
        low, _, high = value.partition("..")
        return column.strip(), {"min": low.strip() or None, "max": high.strip() or None}
    return column.strip(), value


def filter_value_for(column, value):
    """Comma-separated values are alternatives only on select filters."""
    if column.filter_type == "select" and isinstance(value, str) and "," in value:
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


def export_format_for(path: str) -> str:
    _, ext = os.path.splitext(path)
    for fmt, fmt_ext in EXPORT_EXTENSIONS.items():
        if ext.lower() == fmt_ext:
            return fmt
    raise ValueError(f"Cannot export to '{path}' (use .csv or .xlsx)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gridkit", add_help=False)
    parser.add_argument("path", nargs="?")
    parser.add_argument("-h", "--help", action="store_true")
    parser.add_argument("-v", "--version", action="store_true")
    parser.add_argument("--search")
    parser.add_argument("--filter", action="append", default=[])
    parser.add_argument("--sort")
    parser.add_argument("--page", type=int, default=1)
    parser.add_argument("--page-size", type=int)
    parser.add_argument("--hide", action="append", default=[])
    parser.add_argument("--export")
    parser.add_argument("--debug", action="store_true")
    return parser


def build_table(args, columns, rows, settings) -> DataTable:
    page_size = args.page_size or settings.page_size
    table = DataTable(
        columns=columns,
        data=rows,
        settings=settings,
        default_pagination=PaginationConfig(page=1, page_size=page_size),
    )
    for column_id in args.hide:
        table.toggle_column_visibility(column_id)
    for text in args.filter:
        column_id, value = parse_filter(text)
        table.set_filter(column_id, filter_value_for(table.registry.get(column_id), value))
    if args.search:
        table.set_search(args.search)
    if args.sort:
        table.set_sort(SortConfig.parse(args.sort))
    if args.page != 1:
        table.set_page(args.page)
    return table


def run(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.version:
        print(__version__)
        return 0
    if args.help or not args.path:
        print(USAGE)
        return 0

    configure_logging(debug=args.debug)
    settings = TableSettings.from_config(load_config())

    handler = FileTypeHandler(args.path)
    columns, rows = handler.load()
    logger.debug("Table built from %s with %d columns", args.path, len(columns))

    try:
        export_fmt = export_format_for(args.export) if args.export else None
        table = build_table(args, columns, rows, settings)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for line in GridPane().render_lines(table.view()):
        print(line)

    if export_fmt is not None:
        stem, _ = os.path.splitext(args.export)
        exporter = TableExporter(stem, table.visible_columns)
        table.rerender(on_export=exporter)
        exported = table.export(export_fmt)
        print(f"Exported {len(exported)} rows to {exporter.written[-1]}")
    return 0


def main():
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
