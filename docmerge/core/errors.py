"""Custom exceptions used across docmerge."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


class DocMergeError(Exception):
    """Base error for the application."""


class ConfigurationError(DocMergeError):
    """Missing workbook, sheet or required columns, or invalid settings."""

    def __init__(self, message: str, *, header: Sequence[str] | None = None) -> None:
        super().__init__(message)
        self.header = list(header) if header is not None else None


@dataclass(frozen=True)
class TemplateIssue:
    """A single offending placeholder found in a template."""

    tag: str
    explanation: str
    location: str = ""

    def __str__(self) -> str:
        where = f" ({self.location})" if self.location else ""
        return f"{self.tag}: {self.explanation}{where}"


class TemplateError(DocMergeError):
    """Raised when a template references unknown fields or has malformed tags."""

    def __init__(self, message: str, issues: Sequence[TemplateIssue] = ()) -> None:
        super().__init__(message)
        self.issues = list(issues)

    def __str__(self) -> str:
        base = super().__str__()
        if not self.issues:
            return base
        return f"{base} ({len(self.issues)} issue(s))"
