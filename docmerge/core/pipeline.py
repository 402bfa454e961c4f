from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple
import logging
import zipfile

from docmerge.config import AliasTable, Settings
from docmerge.services.codebook import (
    PLACEHOLDERS,
    EmployeeRecord,
    LookupMiss,
    RunTally,
    build_context,
    build_index,
    derive_padder,
    lookup_miss,
    resolve_date,
    resolve_description,
)
from docmerge.services.codebook.index import Padder
from docmerge_io import DocumentTemplate, SheetTable, read_table, require_columns, resolve_columns
from docmerge_io.utils.paths import ensure_output_dir, prepare_output_path

from .errors import ConfigurationError
from .logger import get_logger


ProgressCB = Callable[[str, str], None]
ColumnMap = Dict[str, Optional[str]]


@dataclass(frozen=True)
class RunSummary:
    tally: RunTally
    output_dir: Path
    written: Tuple[Path, ...] = ()
    misses: Tuple[LookupMiss, ...] = ()


@dataclass(frozen=True)
class CheckReport:
    """Result of validating inputs without rendering any document."""

    codebook_columns: ColumnMap
    roster_columns: ColumnMap
    codebook_entries: int
    roster_rows: int
    template_fields: Tuple[str, ...]


class Pipeline:
    """Coordinates Code book -> Roster -> Template -> Render steps."""

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger | None = None,
        today: date | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger or get_logger(settings.log_path)
        self.today = today

    def _read_sheet(self, path: Path, sheet: str | None, label: str) -> SheetTable:
        if not path.exists():
            raise ConfigurationError(f"{label} workbook not found: {path}")
        try:
            table = read_table(path, sheet)
        except (ValueError, OSError, zipfile.BadZipFile) as exc:
            raise ConfigurationError(f"{label} workbook {path.name} could not be read: {exc}") from exc
        if table.is_empty:
            raise ConfigurationError(f"{path.name} is empty or sheet {sheet or '<first>'!r} does not exist")
        return table

    def _map_columns(self, table: SheetTable, aliases: AliasTable, source: str) -> ColumnMap:
        columns = resolve_columns(table.header, aliases.columns)
        try:
            require_columns(columns, aliases.required, table.header, source)
        except ConfigurationError:
            self.logger.warning("%s header: %s", source, list(table.header))
            raise
        return columns

    def load_codebook(self) -> Tuple[Dict[str, str], Padder, ColumnMap]:
        path = self.settings.codebook_file
        table = self._read_sheet(path, self.settings.codebook_sheet, "Code book")
        if not table.rows:
            raise ConfigurationError(f"{path.name} has no code-book rows", header=table.header)
        columns = self._map_columns(table, self.settings.codebook_aliases, path.name)
        index = build_index(table.rows, columns["code"], columns["description"])
        self.logger.info("Code book loaded: %s codes from %s", len(index), path.name)
        return index, derive_padder(index), columns

    def load_roster(self) -> Tuple[SheetTable, ColumnMap]:
        path = self.settings.roster_file
        table = self._read_sheet(path, self.settings.roster_sheet, "Roster")
        columns = self._map_columns(table, self.settings.roster_aliases, path.name)
        return table, columns

    def compile_template(self) -> DocumentTemplate:
        path = self.settings.template_file
        if not path.exists():
            raise ConfigurationError(f"Template not found: {path}")
        return DocumentTemplate.from_path(path, allowed_fields=PLACEHOLDERS)

    def check(self) -> CheckReport:
        index, _, codebook_columns = self.load_codebook()
        table, roster_columns = self.load_roster()
        template = self.compile_template()
        return CheckReport(
            codebook_columns=codebook_columns,
            roster_columns=roster_columns,
            codebook_entries=len(index),
            roster_rows=len(table.rows),
            template_fields=template.fields,
        )

    def run(self, progress_cb: ProgressCB | None = None) -> RunSummary:
        def progress(stage: str, detail: str = "") -> None:
            if progress_cb:
                progress_cb(stage, detail)
            self.logger.debug("%s - %s", stage, detail)

        settings = self.settings
        today = self.today or date.today()
        out_dir = ensure_output_dir(settings.output_path)

        progress("1/3 code book", str(settings.codebook_file))
        index, padder, _ = self.load_codebook()

        progress("2/3 roster", str(settings.roster_file))
        table, columns = self.load_roster()
        template = self.compile_template()

        progress("3/3 render", f"{len(table.rows)} row(s)")
        tally = RunTally()
        written: List[Path] = []
        misses: List[LookupMiss] = []
        for row in table.rows:
            record = EmployeeRecord.from_row(row, columns)
            resolution = resolve_description(record, index, padder)
            miss = lookup_miss(record, resolution)
            if miss is not None:
                self.logger.warning(miss.message)
                misses.append(miss)
            tally = tally.record(resolution.matched)

            context = build_context(record, resolution, resolve_date(record.date, today, settings.date_format))
            out_path = prepare_output_path(out_dir, record.first_name, record.last_name, settings.filename_suffix)
            template.render(context.to_fields(), out_path)
            written.append(out_path)
            self.logger.info("✔ %s | OpisRM: %s", out_path, resolution.description or "(empty)")

        self.logger.info(
            "Done. Descriptions resolved: %s, missing: %s. Output: %s",
            tally.hits,
            tally.misses,
            out_dir,
        )
        return RunSummary(tally=tally, output_dir=out_dir, written=tuple(written), misses=tuple(misses))


def generate_documents(settings: Settings, *, today: date | None = None) -> RunSummary:
    """Run the full merge for ``settings`` and return the summary."""

    return Pipeline(settings, today=today).run()
