"""Header alias matching for roster and code-book sheets."""

# Module responsibilities:
# - Map logical column names to the physical headers present in a sheet.
# - Fail early, with the header row attached, when required columns are absent.

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from docmerge.core.errors import ConfigurationError
from docmerge.core.text import fold_key

from .schema import ColumnMap


def resolve_columns(header: Sequence[str], aliases: Mapping[str, Iterable[str]]) -> ColumnMap:
    """Pick the first header whose folded key matches one of each field's aliases.

    Matching is exact after :func:`fold_key`; logical fields with no match map
    to ``None``.
    """

    folded_header = [(name, fold_key(name)) for name in header]
    mapping: ColumnMap = {}
    for logical, candidates in aliases.items():
        targets = {fold_key(alias) for alias in candidates}
        mapping[logical] = next((name for name, key in folded_header if key in targets), None)
    return mapping


def require_columns(
    mapping: ColumnMap,
    required: Iterable[str],
    header: Sequence[str],
    source: str,
) -> None:
    """Raise ``ConfigurationError`` listing every required field left unmapped."""

    missing = [name for name in required if mapping.get(name) is None]
    if missing:
        raise ConfigurationError(
            f"Required columns not found in {source}: {', '.join(missing)}",
            header=header,
        )
