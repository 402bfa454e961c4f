"""Code-book index construction and numeric padding fallback."""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, Iterable, Mapping

from docmerge.core.text import normalize
from docmerge_io.schema import cell

LOGGER = logging.getLogger(__name__)

_DIGITS = re.compile(r"\d+", re.ASCII)

Padder = Callable[[str], str]


def build_index(rows: Iterable[Mapping[str, str]], code_column: str, description_column: str) -> Dict[str, str]:
    """Map normalized job code -> normalized description.

    Rows with an empty code are skipped; a repeated code overwrites the earlier
    entry.
    """

    index: Dict[str, str] = {}
    overwritten = 0
    for row in rows:
        code = normalize(cell(row, code_column))
        if not code:
            continue
        if code in index:
            overwritten += 1
        index[code] = normalize(cell(row, description_column))
    if overwritten:
        LOGGER.debug("Code book contains %s duplicate code(s); last occurrence kept", overwritten)
    return index


def derive_padder(index: Mapping[str, str]) -> Padder:
    """Return a function left-padding all-digit codes with ``0`` to the longest key length."""

    max_len = max((len(normalize(key)) for key in index), default=0)

    def pad(value: str) -> str:
        text = normalize(value)
        if len(text) >= max_len or not _DIGITS.fullmatch(text):
            return text
        return text.rjust(max_len, "0")

    return pad
