"""Filesystem helpers for generated documents."""

# Module responsibilities:
# - Turn employee names into safe output file names.
# - Create the output directory on demand and build final output paths.

from __future__ import annotations

import re
from pathlib import Path

INVALID_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|]+')
UNNAMED_FIRST_NAME = "BezImena"
FALLBACK_STEM = "Zaposleni"
DEFAULT_SUFFIX = " - generisano.docx"


def sanitize_filename(name: str) -> str:
    """Replace each run of characters illegal on common filesystems with one ``_`` and trim."""

    return INVALID_FILENAME_CHARS.sub("_", str(name)).strip()


def output_filename(first_name: str, last_name: str, suffix: str = DEFAULT_SUFFIX) -> str:
    """Build ``"<First> <Last><suffix>"`` with a fixed label for empty names.

    Args:
        first_name: Employee first name; ``BezImena`` is used when empty.
        last_name: Employee last name, may be empty.
        suffix: Appended after the sanitized stem, extension included.

    Returns:
        A file name that is never just the suffix.
    """

    stem = sanitize_filename(f"{first_name or UNNAMED_FIRST_NAME} {last_name or ''}")
    return f"{stem or FALLBACK_STEM}{suffix}"


def ensure_output_dir(path: Path) -> Path:
    """Create ``path`` (and parents) if missing and return it."""

    path.mkdir(parents=True, exist_ok=True)
    return path


def prepare_output_path(out_dir: Path, first_name: str, last_name: str, suffix: str = DEFAULT_SUFFIX) -> Path:
    """Return the output path for one employee inside ``out_dir``.

    Existing files are not checked; a later write replaces them.
    """

    return ensure_output_dir(out_dir) / output_filename(first_name, last_name, suffix)
