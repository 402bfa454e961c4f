"""End-to-end tests for the generation pipeline."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest
from docx import Document

from docmerge.config import load_settings
from docmerge.core.errors import ConfigurationError, TemplateError
from docmerge.core.pipeline import Pipeline, generate_documents

TEMPLATE_LINES = [
    "Ime i prezime: [[Ime]] [[Prezime]]",
    "JMBG: [[JMBG]]",
    ["Radno mesto: [[Opis", "RadnogMesta]]"],
    "Kratko: [[OpisRM]]",
    "Datum: [[Datum]]",
]
TODAY = date(2024, 3, 5)


@pytest.fixture()
def workspace(tmp_path: Path, write_workbook, write_template) -> Path:
    write_workbook(tmp_path / "Sifarnik.xlsx", "RM", [["SifraRM", "OpisRM"], ["01", "Vozač"], ["15", "Magacioner"]])
    write_template(tmp_path / "Template.docx", TEMPLATE_LINES)
    return tmp_path


def _texts(path: Path) -> list[str]:
    return [p.text for p in Document(str(path)).paragraphs]


def test_padded_code_end_to_end(workspace: Path, write_workbook) -> None:
    write_workbook(
        workspace / "Ulaz.xlsx",
        "Podaci",
        [["Ime", "Prezime", "JMBG", "SifraRM"], ["Petar", "Petrović", "0101990123456", "1"]],
    )

    summary = generate_documents(load_settings(base_dir=workspace), today=TODAY)

    assert (summary.tally.hits, summary.tally.misses) == (1, 0)
    expected = workspace / "out" / "Petar Petrović - generisano.docx"
    assert summary.written == (expected,)
    assert _texts(expected) == [
        "Ime i prezime: Petar Petrović",
        "JMBG: 0101990123456",
        "Radno mesto: Vozač",
        "Kratko: Vozač",
        "Datum: 05.03.2024.",
    ]


def test_zero_data_rows_still_creates_output_dir(workspace: Path, write_workbook) -> None:
    write_workbook(workspace / "Ulaz.xlsx", "Podaci", [["Ime", "Prezime", "JMBG", "SifraRM"]])

    summary = generate_documents(load_settings(base_dir=workspace), today=TODAY)

    assert (workspace / "out").is_dir()
    assert (summary.tally.hits, summary.tally.misses) == (0, 0)
    assert summary.written == ()


def test_misses_and_direct_descriptions(workspace: Path, write_workbook) -> None:
    write_workbook(
        workspace / "Ulaz.xlsx",
        "Podaci",
        [
            ["ime", "PREZIME", "Jmbg", "Šifra RM", "Opis posla", "Datum"],
            ["Ana", "Marić", "1", "99", "", "1. jun 2023."],
            ["Jovan", "Jović", "2", "15", "Direktor", ""],
            ["", "", "3", "15", "", ""],
        ],
    )

    summary = Pipeline(load_settings(base_dir=workspace), today=TODAY).run()

    assert (summary.tally.hits, summary.tally.misses) == (2, 1)
    assert [(m.first_name, m.raw_key, m.padded_key) for m in summary.misses] == [("Ana", "99", "99")]
    names = sorted(path.name for path in summary.written)
    assert names == [
        "Ana Marić - generisano.docx",
        "BezImena - generisano.docx",
        "Jovan Jović - generisano.docx",
    ]
    ana = _texts(workspace / "out" / "Ana Marić - generisano.docx")
    assert ana[2] == "Radno mesto: "
    assert ana[4] == "Datum: 1. jun 2023."
    jovan = _texts(workspace / "out" / "Jovan Jović - generisano.docx")
    assert jovan[2] == "Radno mesto: Direktor"
    unnamed = _texts(workspace / "out" / "BezImena - generisano.docx")
    assert unnamed[3] == "Kratko: Magacioner"


def test_same_name_overwrites_previous_output(workspace: Path, write_workbook) -> None:
    write_workbook(
        workspace / "Ulaz.xlsx",
        "Podaci",
        [["Ime", "Prezime", "JMBG", "SifraRM"], ["Ana", "Marić", "1", "1"], ["Ana", "Marić", "2", "15"]],
    )

    summary = generate_documents(load_settings(base_dir=workspace), today=TODAY)

    assert len(summary.written) == 2
    assert len(list((workspace / "out").iterdir())) == 1
    assert _texts(summary.written[-1])[1] == "JMBG: 2"


def test_missing_required_column_aborts_before_rendering(workspace: Path, write_workbook) -> None:
    write_workbook(workspace / "Ulaz.xlsx", "Podaci", [["Ime", "Prezime", "Kod"], ["Ana", "Marić", "1"]])

    with pytest.raises(ConfigurationError) as excinfo:
        generate_documents(load_settings(base_dir=workspace), today=TODAY)

    assert excinfo.value.header == ["Ime", "Prezime", "Kod"]
    assert "national_id" in str(excinfo.value)
    assert list((workspace / "out").iterdir()) == []


def test_missing_codebook_sheet_is_configuration_error(workspace: Path, write_workbook) -> None:
    write_workbook(workspace / "Ulaz.xlsx", "Podaci", [["Ime", "Prezime", "JMBG", "SifraRM"]])
    settings = load_settings(base_dir=workspace, codebook_sheet="Nema")

    with pytest.raises(ConfigurationError, match="empty or sheet"):
        generate_documents(settings, today=TODAY)


def test_missing_roster_file(workspace: Path) -> None:
    with pytest.raises(ConfigurationError, match="Roster workbook not found"):
        generate_documents(load_settings(base_dir=workspace), today=TODAY)


def test_template_with_unknown_field_aborts_run(workspace: Path, write_workbook, write_template) -> None:
    write_workbook(
        workspace / "Ulaz.xlsx",
        "Podaci",
        [["Ime", "Prezime", "JMBG", "SifraRM"], ["Ana", "Marić", "1", "1"]],
    )
    write_template(workspace / "Template.docx", ["[[Ime]] [[Adresa]] [[Grad]]"])

    with pytest.raises(TemplateError) as excinfo:
        generate_documents(load_settings(base_dir=workspace), today=TODAY)

    assert [issue.tag for issue in excinfo.value.issues] == ["[[Adresa]]", "[[Grad]]"]
    assert list((workspace / "out").iterdir()) == []


def test_check_reports_columns_and_fields(workspace: Path, write_workbook) -> None:
    write_workbook(
        workspace / "Ulaz.xlsx",
        "Podaci",
        [["Ime", "Prezime", "JMBG", "SifraRM"], ["Ana", "Marić", "1", "1"]],
    )

    report = Pipeline(load_settings(base_dir=workspace)).check()

    assert report.codebook_entries == 2
    assert report.roster_rows == 1
    assert report.roster_columns["job_code"] == "SifraRM"
    assert report.roster_columns["date"] is None
    assert report.template_fields == ("Ime", "Prezime", "JMBG", "OpisRadnogMesta", "OpisRM", "Datum")
