"""Data models used by the code-book resolution service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional

from docmerge.core.text import normalize
from docmerge_io.schema import cell

# Placeholder names understood by document templates.
PLACEHOLDERS = ("Ime", "Prezime", "JMBG", "OpisRadnogMesta", "OpisRM", "Datum")


@dataclass(frozen=True, slots=True)
class EmployeeRecord:
    """One roster row after column mapping and normalization."""

    first_name: str
    last_name: str
    national_id: str
    job_code: str
    description: str = ""
    date: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, str], columns: Mapping[str, Optional[str]]) -> "EmployeeRecord":
        """Build a record from a sheet row using a logical -> header column map."""

        def value(logical: str) -> str:
            return normalize(cell(row, columns.get(logical)))

        return cls(
            first_name=value("first_name"),
            last_name=value("last_name"),
            national_id=value("national_id"),
            job_code=value("job_code"),
            description=value("description"),
            date=value("date"),
        )


@dataclass(frozen=True, slots=True)
class Resolution:
    """Outcome of resolving one record's job description."""

    description: str
    matched: bool
    raw_key: str = ""
    padded_key: str = ""


@dataclass(frozen=True, slots=True)
class LookupMiss:
    """A code that matched neither in raw nor in padded form."""

    first_name: str
    last_name: str
    raw_key: str
    padded_key: str

    @property
    def message(self) -> str:
        return (
            f"[MISS] {self.first_name} {self.last_name} | code={self.raw_key!r} "
            f"(padded={self.padded_key!r}) not found in code book"
        )


@dataclass(frozen=True, slots=True)
class RunTally:
    """Resolved vs. unresolved description counts for one run."""

    hits: int = 0
    misses: int = 0

    def record(self, matched: bool) -> "RunTally":
        if matched:
            return RunTally(hits=self.hits + 1, misses=self.misses)
        return RunTally(hits=self.hits, misses=self.misses + 1)

    @property
    def total(self) -> int:
        return self.hits + self.misses


@dataclass(frozen=True, slots=True)
class RenderContext:
    """Final values substituted into the template for one employee."""

    first_name: str
    last_name: str
    national_id: str
    description: str
    date: str

    def to_fields(self) -> Dict[str, str]:
        return {
            "Ime": self.first_name,
            "Prezime": self.last_name,
            "JMBG": self.national_id,
            "OpisRadnogMesta": self.description,
            "OpisRM": self.description,
            "Datum": self.date,
        }


__all__ = [
    "PLACEHOLDERS",
    "EmployeeRecord",
    "Resolution",
    "LookupMiss",
    "RunTally",
    "RenderContext",
]
