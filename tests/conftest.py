from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Iterable, Sequence, Union

import pytest
from docx import Document
from openpyxl import Workbook

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from docmerge.core import logger as core_logger

Paragraph = Union[str, Sequence[str]]


@pytest.fixture(autouse=True)
def _isolated_logging(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep log files inside the test's temp directory."""

    core_logger.reset_logger()
    monkeypatch.setenv("DOCMERGE_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.delenv("DOCMERGE_ROOT", raising=False)
    yield
    core_logger.reset_logger()


@pytest.fixture()
def write_workbook() -> Callable[..., Path]:
    def _write(path: Path, sheet: str, rows: Iterable[Sequence[object]]) -> Path:
        wb = Workbook()
        ws = wb.active
        ws.title = sheet
        for row in rows:
            ws.append(list(row))
        path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(path)
        return path

    return _write


@pytest.fixture()
def write_template() -> Callable[..., Path]:
    """Build a DOCX whose paragraphs are given as strings or lists of run texts."""

    def _write(path: Path, paragraphs: Iterable[Paragraph]) -> Path:
        doc = Document()
        for para in paragraphs:
            paragraph = doc.add_paragraph()
            chunks = [para] if isinstance(para, str) else list(para)
            for chunk in chunks:
                paragraph.add_run(chunk)
        path.parent.mkdir(parents=True, exist_ok=True)
        doc.save(str(path))
        return path

    return _write
