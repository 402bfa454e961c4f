"""`docmerge_io` top-level package exports the IO helpers for Excel and DOCX flows."""

# Module responsibilities:
# - Re-export spreadsheet reading, header mapping and DOCX rendering so consumers have a stable API surface.

from __future__ import annotations

from .docx_renderer import DocumentTemplate, render
from .excel_reader import read_table
from .mapping import require_columns, resolve_columns
from .schema import ABSENT, SheetTable, cell

__all__ = [
    "read_table",
    "resolve_columns",
    "require_columns",
    "SheetTable",
    "ABSENT",
    "cell",
    "DocumentTemplate",
    "render",
]

__version__ = "0.1.0"
