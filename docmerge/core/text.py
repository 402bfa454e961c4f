"""Text normalization used for header matching and code lookups."""

from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")

# Serbian/Croatian letters folded to plain ASCII for comparison keys.
_FOLD_TABLE = str.maketrans(
    {
        "š": "s",
        "đ": "d",
        "ž": "z",
        "č": "c",
        "ć": "c",
        "Š": "s",
        "Đ": "d",
        "Ž": "z",
        "Č": "c",
        "Ć": "c",
    }
)


def normalize(value: object) -> str:
    """Return ``value`` as a single-spaced, trimmed string (``None`` -> ``""``)."""

    if value is None:
        return ""
    text = str(value).replace("\u00a0", " ")
    return _WHITESPACE.sub(" ", text).strip()


def fold_key(value: object) -> str:
    """Case- and diacritic-insensitive key; never used for display."""

    return normalize(value).translate(_FOLD_TABLE).lower()


__all__ = ["normalize", "fold_key"]
