"""Shared schemas for spreadsheet data structures."""

# Module responsibilities:
# - Provide the immutable sheet container returned by the Excel reader.
# - Keep the "absent cell" convention explicit: always the empty string.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

Row = Dict[str, str]
ColumnMap = Dict[str, Optional[str]]

ABSENT = ""


@dataclass(frozen=True)
class SheetTable:
    """Header row plus data rows keyed by header name.

    Every cell value is a ``str``; missing cells are ``ABSENT`` (``""``).
    """

    header: Tuple[str, ...] = ()
    rows: Tuple[Row, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        """True when the sheet was missing or had no rows at all."""

        return not self.header

    def __len__(self) -> int:
        return len(self.rows)


def cell(row: Mapping[str, str], column: Optional[str]) -> str:
    """Return the cell under ``column`` or ``ABSENT`` when unmapped/missing."""

    if column is None:
        return ABSENT
    return row.get(column, ABSENT)
