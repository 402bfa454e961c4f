"""DOCX placeholder rendering.

Templates mark fields with ``[[FieldName]]``. Word frequently splits such a
tag across several runs (spell-check marks, partial formatting, revision
history), so tags are located on the concatenated text of each paragraph and
the replacement is written back into the runs that held the tag. The value
takes the formatting of the run where the tag starts.

Public API
----------
- DocumentTemplate: compile once (validating every tag), render many times.
- render(template_bytes, fields, out_path): one-shot helper.
"""

from __future__ import annotations

import re
import zipfile
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Iterable, Iterator, List, Mapping, Optional, Tuple

from docx import Document
from docx.opc.exceptions import PackageNotFoundError
from docx.oxml.ns import qn
from docx.text.paragraph import Paragraph
from docx.text.run import Run

from docmerge.core.errors import TemplateError, TemplateIssue

from .utils.log import get_logger

logger = get_logger("docx_renderer")

W_P = qn("w:p")
W_R = qn("w:r")
_HIDDEN_WRAPPERS = frozenset({qn("w:del"), qn("w:moveFrom")})

OPEN = "[["
CLOSE = "]]"
TAG_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
BAD_XML = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_SNIPPET = 30


@dataclass(frozen=True)
class _Tag:
    name: str
    start: int
    end: int


def _scan(text: str) -> Tuple[List[_Tag], List[Tuple[str, str]]]:
    """Return well-formed tags and ``(raw, explanation)`` pairs for malformed ones."""

    tags: List[_Tag] = []
    problems: List[Tuple[str, str]] = []
    pos = 0
    while True:
        open_idx = text.find(OPEN, pos)
        close_idx = text.find(CLOSE, pos)
        if open_idx == -1 and close_idx == -1:
            break
        if close_idx != -1 and (open_idx == -1 or close_idx < open_idx):
            raw = text[max(pos, close_idx - _SNIPPET) : close_idx + len(CLOSE)]
            problems.append((raw, f"closing '{CLOSE}' without a matching '{OPEN}'"))
            pos = close_idx + len(CLOSE)
            continue

        body_start = open_idx + len(OPEN)
        close_idx = text.find(CLOSE, body_start)
        if close_idx == -1:
            problems.append((text[open_idx : open_idx + _SNIPPET], f"unclosed tag, '{CLOSE}' is missing"))
            break
        nested = text.find(OPEN, body_start, close_idx)
        if nested != -1:
            problems.append((text[open_idx:nested], f"unclosed tag, a new '{OPEN}' starts before '{CLOSE}'"))
            pos = nested
            continue

        end = close_idx + len(CLOSE)
        name = text[body_start:close_idx].strip()
        if not name:
            problems.append((text[open_idx:end], "empty tag"))
        elif not TAG_NAME.match(name):
            problems.append((text[open_idx:end], f"invalid tag name {name!r}"))
        else:
            tags.append(_Tag(name=name, start=open_idx, end=end))
        pos = end
    return tags, problems


def _iter_paragraphs(document) -> Iterator[Tuple[str, Paragraph]]:
    """Yield ``(location, paragraph)`` for every ``w:p`` in the body, headers and footers.

    Walking the XML reaches paragraphs that python-docx's ``.paragraphs`` does
    not expose: table cells at any depth, text boxes and block content controls.
    """

    parts: List[Tuple[str, object]] = [("body", document)]
    for idx, section in enumerate(document.sections, start=1):
        for label in (
            "header",
            "footer",
            "first_page_header",
            "first_page_footer",
            "even_page_header",
            "even_page_footer",
        ):
            part = getattr(section, label)
            # Linked parts have no definition of their own; touching them would add one.
            if not part.is_linked_to_previous:
                parts.append((f"section {idx} {label.replace('_', ' ')}", part))

    for label, part in parts:
        counter = 0
        for p in part.part.element.iter(W_P):
            counter += 1
            yield f"{label} paragraph {counter}", Paragraph(p, part)


def _paragraph_runs(paragraph: Paragraph) -> List[Run]:
    """Runs that belong to ``paragraph`` itself, in document order.

    Includes runs wrapped in insertions, hyperlinks, smart tags, fields and
    inline content controls. Runs of a nested text-box paragraph belong to that
    paragraph; deleted runs are not part of the visible text.
    """

    p = paragraph._p
    runs: List[Run] = []
    for r in p.iter(W_R):
        for ancestor in r.iterancestors():
            if ancestor is p:
                runs.append(Run(r, paragraph))
                break
            if ancestor.tag == W_P or ancestor.tag in _HIDDEN_WRAPPERS:
                break
    return runs


def _paragraph_text(paragraph: Paragraph) -> Tuple[List[Run], List[str]]:
    runs = _paragraph_runs(paragraph)
    return runs, [run.text for run in runs]


def _replace_span(texts: List[str], start: int, end: int, value: str) -> None:
    pos = 0
    placed = False
    for idx, text in enumerate(texts):
        run_start, run_end = pos, pos + len(text)
        pos = run_end
        if run_end <= start or run_start >= end:
            continue
        lo = max(start, run_start) - run_start
        hi = min(end, run_end) - run_start
        if not placed:
            texts[idx] = text[:lo] + value + text[hi:]
            placed = True
        else:
            texts[idx] = text[:lo] + text[hi:]


def _fill_paragraph(paragraph, values: Mapping[str, str]) -> int:
    runs, texts = _paragraph_text(paragraph)
    tags, _ = _scan("".join(texts))
    if not tags:
        return 0
    original = list(texts)
    for tag in reversed(tags):
        _replace_span(texts, tag.start, tag.end, values[tag.name])
    for run, before, after in zip(runs, original, texts):
        if before != after:
            run.text = after
    return len(tags)


def _xml_safe(value: object) -> str:
    text = "" if value is None else str(value)
    return BAD_XML.sub("", text.replace("\r\n", "\n").replace("\r", "\n"))


def _load_document(data: bytes, name: str):
    try:
        return Document(BytesIO(data))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as exc:
        raise TemplateError(f"Template {name} is not a readable DOCX document: {exc}") from exc


class DocumentTemplate:
    """A validated DOCX template that renders one document per field mapping."""

    def __init__(
        self,
        data: bytes,
        allowed_fields: Optional[Iterable[str]] = None,
        *,
        name: str = "template",
    ) -> None:
        self._data = bytes(data)
        self.name = name
        self.allowed_fields = frozenset(allowed_fields) if allowed_fields is not None else None
        self.fields = self._compile()

    @classmethod
    def from_path(cls, path: Path, allowed_fields: Optional[Iterable[str]] = None) -> "DocumentTemplate":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Template not found: {path}")
        return cls(path.read_bytes(), allowed_fields, name=path.name)

    def _compile(self) -> Tuple[str, ...]:
        document = _load_document(self._data, self.name)
        issues: List[TemplateIssue] = []
        found: List[str] = []
        for location, paragraph in _iter_paragraphs(document):
            _, texts = _paragraph_text(paragraph)
            tags, problems = _scan("".join(texts))
            for raw, explanation in problems:
                issues.append(TemplateIssue(tag=raw, explanation=explanation, location=location))
            for tag in tags:
                if self.allowed_fields is not None and tag.name not in self.allowed_fields:
                    issues.append(
                        TemplateIssue(
                            tag=f"{OPEN}{tag.name}{CLOSE}",
                            explanation=f"unknown field {tag.name!r}",
                            location=location,
                        )
                    )
                elif tag.name not in found:
                    found.append(tag.name)
        if issues:
            raise TemplateError(f"Template {self.name} contains invalid placeholders", issues)
        logger.debug("Template %s compiled with fields %s", self.name, found)
        return tuple(found)

    def render(self, fields: Mapping[str, object], out_path: Path) -> Path:
        """Fill every placeholder from ``fields`` and write the result to ``out_path``.

        Raises:
            TemplateError: When a placeholder has no value in ``fields``.
        """

        missing = [name for name in self.fields if name not in fields]
        if missing:
            raise TemplateError(
                f"No value supplied for template fields of {self.name}",
                [
                    TemplateIssue(tag=f"{OPEN}{name}{CLOSE}", explanation=f"undefined field {name!r}")
                    for name in missing
                ],
            )
        values = {name: _xml_safe(fields[name]) for name in self.fields}
        document = _load_document(self._data, self.name)
        replaced = 0
        for _, paragraph in _iter_paragraphs(document):
            replaced += _fill_paragraph(paragraph, values)

        out_path = Path(out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        document.save(str(out_path))
        logger.debug("Rendered %s placeholders into %s", replaced, out_path)
        return out_path


def render(template_bytes: bytes, fields: Mapping[str, object], out_path: Path) -> Path:
    """Validate ``template_bytes`` against ``fields`` and write one document."""

    return DocumentTemplate(template_bytes, allowed_fields=fields.keys()).render(fields, out_path)
