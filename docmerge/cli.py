"""Typer based command line entry points for docmerge."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from docmerge.config import Settings, load_settings
from docmerge.core.errors import ConfigurationError, DocMergeError, TemplateError
from docmerge.core.logger import get_logger
from docmerge.core.pipeline import Pipeline

EXIT_FAILURE = 1
EXIT_CONFIGURATION = 2

app = typer.Typer(help="Generate one DOCX document per employee from a roster and a job code book.")


def _parse_log_level(value: str) -> int:
    level_value = getattr(logging, value.upper(), None)
    if not isinstance(level_value, int):
        raise typer.BadParameter(f"Unknown log level: {value}")
    return level_value


@app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        help="Set global logging level (e.g. DEBUG/INFO/WARNING).",
    ),
) -> None:
    """Configure global CLI behaviour before executing commands."""

    ctx.obj = {"log_level": _parse_log_level(log_level)}


def _settings_from_options(
    base_dir: Optional[Path],
    config: Optional[Path],
    **overrides: object,
) -> Settings:
    try:
        return load_settings(config, base_dir=base_dir, **overrides)
    except ConfigurationError as exc:
        typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=EXIT_CONFIGURATION) from exc


def _init_logger(ctx: typer.Context, settings: Settings) -> logging.Logger:
    logger = get_logger(settings.log_path)
    level = (ctx.obj or {}).get("log_level", logging.INFO)
    logger.setLevel(level)
    return logger


def _report_failure(logger: logging.Logger, exc: DocMergeError) -> int:
    if isinstance(exc, TemplateError):
        for issue in exc.issues:
            logger.error("TEMPLATE: %s", issue)
            typer.secho(f"TEMPLATE: {issue}", fg=typer.colors.RED, err=True)
    if isinstance(exc, ConfigurationError) and exc.header is not None:
        logger.error("Header read: %s", exc.header)
        typer.secho(f"Header read: {exc.header}", fg=typer.colors.YELLOW, err=True)
    logger.error("docmerge failed: %s", exc)
    typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
    return EXIT_CONFIGURATION if isinstance(exc, ConfigurationError) else EXIT_FAILURE


@app.command("generate")
def generate(
    ctx: typer.Context,
    base_dir: Optional[Path] = typer.Option(None, "--base-dir", help="Directory relative paths resolve against."),
    config: Optional[Path] = typer.Option(None, "--config", exists=True, dir_okay=False, help="YAML settings file."),
    roster: Optional[Path] = typer.Option(None, "--roster", help="Roster workbook (default Ulaz.xlsx)."),
    roster_sheet: Optional[str] = typer.Option(None, "--roster-sheet", help="Roster sheet name (default Podaci)."),
    codebook: Optional[Path] = typer.Option(None, "--codebook", help="Code book workbook (default Sifarnik.xlsx)."),
    codebook_sheet: Optional[str] = typer.Option(None, "--codebook-sheet", help="Code book sheet name (default RM)."),
    template: Optional[Path] = typer.Option(None, "--template", help="DOCX template (default Template.docx)."),
    out_dir: Optional[Path] = typer.Option(None, "--out-dir", help="Output directory (default out)."),
) -> None:
    """Render one document per roster row."""

    settings = _settings_from_options(
        base_dir,
        config,
        roster_path=roster,
        roster_sheet=roster_sheet,
        codebook_path=codebook,
        codebook_sheet=codebook_sheet,
        template_path=template,
        output_dir=out_dir,
    )
    logger = _init_logger(ctx, settings)
    try:
        summary = Pipeline(settings, logger=logger).run()
    except DocMergeError as exc:
        raise typer.Exit(code=_report_failure(logger, exc)) from exc

    typer.echo(
        f"Generated {len(summary.written)} document(s): "
        f"{summary.tally.hits} resolved, {summary.tally.misses} missing. Output: {summary.output_dir}"
    )


@app.command("check")
def check(
    ctx: typer.Context,
    base_dir: Optional[Path] = typer.Option(None, "--base-dir", help="Directory relative paths resolve against."),
    config: Optional[Path] = typer.Option(None, "--config", exists=True, dir_okay=False, help="YAML settings file."),
) -> None:
    """Validate workbooks, column headers and template placeholders without rendering."""

    settings = _settings_from_options(base_dir, config)
    logger = _init_logger(ctx, settings)
    try:
        report = Pipeline(settings, logger=logger).check()
    except DocMergeError as exc:
        raise typer.Exit(code=_report_failure(logger, exc)) from exc

    typer.echo(f"Code book: {report.codebook_entries} code(s), columns {report.codebook_columns}")
    typer.echo(f"Roster: {report.roster_rows} row(s), columns {report.roster_columns}")
    typer.echo(f"Template fields: {', '.join(report.template_fields) or '(none)'}")


def main() -> None:  # pragma: no cover - console script entry
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
