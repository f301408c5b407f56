import logging
import os
import sys

import pandas as pd

from column_registry import Column
from derivation import row_value

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".csv", ".parquet", ".xlsx"}
EXPORT_EXTENSIONS = {"csv": ".csv", "excel": ".xlsx"}


def _column_type(dtype) -> str:
    if pd.api.types.is_bool_dtype(dtype):
        return "boolean"
    if pd.api.types.is_numeric_dtype(dtype):
        return "number"
    if pd.api.types.is_datetime64_any_dtype(dtype):
        return "date"
    return "text"


def columns_from_frame(df: pd.DataFrame) -> list[Column]:
    columns = []
    for name, dtype in df.dtypes.items():
        kind = _column_type(dtype)
        columns.append(
            Column(
                id=str(name),
                key=str(name),
                title=str(name),
                type=kind,
                sortable=True,
                filterable=True,
                align="right" if kind == "number" else "left",
            )
        )
    return columns


def rows_from_frame(df: pd.DataFrame) -> list[dict]:
    """Row dicts with missing cells as None and an ``id`` on every row."""
    clean = df.astype(object).where(pd.notna(df), None)
    rows = clean.to_dict("records")
    if "id" not in df.columns:
        for pos, row in enumerate(rows):
            row["id"] = str(pos + 1)
    return rows


def rows_to_frame(rows, columns) -> pd.DataFrame:
    data = {
        str(col.title): [row_value(row, col.key) for row in rows]
        for col in columns
    }
    return pd.DataFrame(data, columns=[str(col.title) for col in columns])


class FileTypeHandler:
    def __init__(self, path: str):
        self.path = path
        _, ext = os.path.splitext(path)
        self.ext = ext.lower()

        if self.ext not in SUPPORTED_EXTENSIONS:
            print("Unsupported file type (use .csv, .parquet, or .xlsx)", file=sys.stderr)
            sys.exit(1)

    def load_frame(self) -> pd.DataFrame:
        if not os.path.exists(self.path) or os.path.getsize(self.path) == 0:
            return pd.DataFrame()

        if self.ext == ".csv":
            try:
                return pd.read_csv(self.path)
            except pd.errors.EmptyDataError:
                return pd.DataFrame()
        if self.ext == ".parquet":
            self._ensure_parquet_engine()
            return pd.read_parquet(self.path)
        self._ensure_excel_engine()
        return pd.read_excel(self.path)

    def load(self) -> tuple[list[Column], list[dict]]:
        df = self.load_frame()
        logger.debug("Loaded %s: %d rows, %d columns", self.path, len(df), df.shape[1])
        return columns_from_frame(df), rows_from_frame(df)

    def save_rows(self, rows, columns) -> None:
        df = rows_to_frame(rows, columns)
        if self.ext == ".csv":
            df.to_csv(self.path, index=False)
        elif self.ext == ".parquet":
            self._ensure_parquet_engine()
            df.to_parquet(self.path)
        else:
            self._ensure_excel_engine()
            with pd.ExcelWriter(self.path) as writer:
                df.to_excel(writer, index=False, sheet_name="Sheet1")
        logger.debug("Wrote %d rows to %s", len(df), self.path)

    def _ensure_parquet_engine(self):
        try:
            import pyarrow  # noqa: F401

            return
        except ImportError:
            pass
        print("Parquet support requires pyarrow. Install via: pip install pyarrow", file=sys.stderr)
        sys.exit(1)

    def _ensure_excel_engine(self):
        try:
            import openpyxl  # noqa: F401

            return
        except ImportError:
            pass
        print("XLSX support requires openpyxl. Install via: pip install openpyxl", file=sys.stderr)
        sys.exit(1)


class TableExporter:
    """``on_export`` handler writing the exported rows next to ``stem``.

    ``columns`` is called at export time so the file follows the columns that
    are visible then.
    """

    def __init__(self, stem: str, columns):
        self.stem = stem
        self.columns = columns
        self.written: list[str] = []

    def path_for(self, fmt: str) -> str:
        try:
            return self.stem + EXPORT_EXTENSIONS[fmt]
        except KeyError:
            raise ValueError(f"Export format '{fmt}' is not supported (use csv or excel)") from None

    def __call__(self, fmt: str, rows) -> str:
        path = self.path_for(fmt)
        FileTypeHandler(path).save_rows(rows, self.columns())
        self.written.append(path)
        return path
