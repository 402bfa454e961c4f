"""Excel input helpers."""

# Module responsibilities:
# - Provide a thin wrapper around pandas.ExcelFile that returns text-only sheet tables.
# - Emit structured logs for traceability.

from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd
from openpyxl import load_workbook

from .schema import ABSENT, Row, SheetTable
from .utils.log import get_logger

logger = get_logger("excel_reader")

ZERO_PAD_FORMAT = re.compile(r"^0+$")
CellPos = Tuple[int, int]


def _as_text(value: object) -> str:
    if value is None:
        return ABSENT
    try:
        if pd.isna(value):
            return ABSENT
    except (TypeError, ValueError):
        pass
    return str(value)


def _zero_padded_cells(path: Path, sheet: str) -> Dict[CellPos, str]:
    """Text of whole-number cells formatted like ``000000``, keyed by 0-based (row, column).

    pandas only sees the stored number; a JMBG typed as a number keeps its
    leading zeros only through the cell format.
    """

    padded: Dict[CellPos, str] = {}
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        for cells in workbook[sheet].iter_rows():
            for cell in cells:
                value = cell.value
                if isinstance(value, float) and value.is_integer():
                    value = int(value)
                if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                    continue
                fmt = cell.number_format or ""
                if ZERO_PAD_FORMAT.match(fmt) and len(fmt) > len(str(value)):
                    padded[(cell.row - 1, cell.column - 1)] = str(value).zfill(len(fmt))
    finally:
        workbook.close()
    return padded


def _trim_header(cells: Sequence[object]) -> List[str]:
    header = [_as_text(value) for value in cells]
    while header and not header[-1].strip():
        header.pop()
    return header


def _row_to_mapping(header: Sequence[str], cells: Sequence[object]) -> Row:
    row: Row = {}
    for idx, name in enumerate(header):
        row[name] = _as_text(cells[idx]) if idx < len(cells) else ABSENT
    return row


def read_table(
    path: Path,
    sheet: Optional[str] = None,
    *,
    skip_blank_rows: bool = True,
) -> SheetTable:
    """Load a sheet as a header row plus text-only row mappings.

    Args:
        path: Path to the workbook.
        sheet: Sheet name; defaults to the first sheet.
        skip_blank_rows: Drop rows whose cells are all empty.

    Returns:
        ``SheetTable``; empty when the sheet is missing or has no rows.

    Raises:
        FileNotFoundError: When the Excel file does not exist.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Source workbook not found: {path}")

    logger.info("Reading Excel workbook %s (sheet=%s)", path, sheet or "<first>")

    with pd.ExcelFile(path) as workbook:
        names = list(workbook.sheet_names)
        target = sheet if sheet is not None else (names[0] if names else None)
        if target is None or target not in names:
            logger.warning("Sheet %r not found in %s; available: %s", sheet, path.name, names)
            return SheetTable()
        df = workbook.parse(target, header=None, dtype=str, keep_default_na=False)

    if df.empty:
        logger.warning("Sheet %r in %s has no rows", target, path.name)
        return SheetTable()

    records = df.to_numpy(dtype=object).tolist()
    for (row_idx, col_idx), text in _zero_padded_cells(path, target).items():
        if row_idx < len(records) and col_idx < len(records[row_idx]):
            records[row_idx][col_idx] = text
    header = _trim_header(records[0])
    rows: List[Row] = []
    for cells in records[1:]:
        row = _row_to_mapping(header, cells)
        if skip_blank_rows and not any(value.strip() for value in row.values()):
            continue
        rows.append(row)

    logger.info("Excel sheet %r loaded: %s rows, columns=%s", target, len(rows), header)
    return SheetTable(header=tuple(header), rows=tuple(rows))
