"""Per-row job description resolution."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Mapping, Optional

from docmerge.core.text import normalize

from .index import Padder
from .models import EmployeeRecord, LookupMiss, RenderContext, Resolution

DEFAULT_DATE_FORMAT = "%d.%m.%Y."

# Native Excel dates come back from the reader as ISO timestamps.
_ISO_DATE = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[ T]00:00:00)?$")


def resolve_description(record: EmployeeRecord, index: Mapping[str, str], padder: Padder) -> Resolution:
    """Pick the job description for ``record``.

    A non-empty direct description wins without any lookup. Otherwise the
    raw code is looked up first, then its zero-padded form.
    """

    if record.description:
        return Resolution(description=record.description, matched=True)

    raw_key = normalize(record.job_code)
    padded_key = padder(raw_key)
    description = index.get(raw_key) or index.get(padded_key) or ""
    return Resolution(
        description=description,
        matched=bool(description),
        raw_key=raw_key,
        padded_key=padded_key,
    )


def lookup_miss(record: EmployeeRecord, resolution: Resolution) -> Optional[LookupMiss]:
    if resolution.matched:
        return None
    return LookupMiss(
        first_name=record.first_name,
        last_name=record.last_name,
        raw_key=resolution.raw_key,
        padded_key=resolution.padded_key,
    )


def resolve_date(value: str, today: date, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """Return the row's date text, or ``today`` formatted when the cell is empty."""

    text = normalize(value)
    if not text:
        return today.strftime(date_format)
    match = _ISO_DATE.match(text)
    if match:
        try:
            return datetime.strptime(match.group(1), "%Y-%m-%d").strftime(date_format)
        except ValueError:
            return text
    return text


def build_context(record: EmployeeRecord, resolution: Resolution, date_text: str) -> RenderContext:
    return RenderContext(
        first_name=record.first_name,
        last_name=record.last_name,
        national_id=record.national_id,
        description=resolution.description,
        date=date_text,
    )
