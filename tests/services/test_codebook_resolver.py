"""Unit tests for per-row description resolution."""

from __future__ import annotations

from datetime import date

from docmerge.services.codebook import (
    EmployeeRecord,
    RunTally,
    build_context,
    derive_padder,
    lookup_miss,
    resolve_date,
    resolve_description,
)


def _record(code: str = "", description: str = "", when: str = "") -> EmployeeRecord:
    return EmployeeRecord(
        first_name="Petar",
        last_name="Petrović",
        national_id="0101990123456",
        job_code=code,
        description=description,
        date=when,
    )


class _CountingIndex(dict):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.lookups = 0

    def get(self, key, default=None):  # type: ignore[override]
        self.lookups += 1
        return super().get(key, default)


def test_direct_description_wins_without_lookup() -> None:
    index = _CountingIndex({"7": "Iz šifarnika"})

    resolution = resolve_description(_record(code="7", description="Direktan opis"), index, derive_padder(index))

    assert resolution.description == "Direktan opis"
    assert resolution.matched is True
    assert index.lookups == 0


def test_raw_code_hit() -> None:
    index = {"7": "Vozač", "007": "Inženjer"}

    resolution = resolve_description(_record(code="7"), index, derive_padder(index))

    assert resolution.description == "Vozač"
    assert resolution.matched


def test_padded_code_hit() -> None:
    index = {"007": "Inženjer"}

    resolution = resolve_description(_record(code="7"), index, derive_padder(index))

    assert resolution.description == "Inženjer"
    assert resolution.matched
    assert (resolution.raw_key, resolution.padded_key) == ("7", "007")
    assert lookup_miss(_record(code="7"), resolution) is None


def test_miss_yields_empty_description_and_miss_record() -> None:
    index = {"007": "Inženjer"}
    record = _record(code="9")

    resolution = resolve_description(record, index, derive_padder(index))
    miss = lookup_miss(record, resolution)

    assert resolution.description == ""
    assert resolution.matched is False
    assert miss is not None
    assert (miss.raw_key, miss.padded_key) == ("9", "009")
    assert "Petar Petrović" in miss.message


def test_tally_counts_hits_and_misses_independently() -> None:
    tally = RunTally().record(True).record(True)

    after_miss = tally.record(False)

    assert (tally.hits, tally.misses) == (2, 0)
    assert (after_miss.hits, after_miss.misses) == (2, 1)
    assert after_miss.total == 3


def test_resolve_date_uses_today_when_empty() -> None:
    assert resolve_date("", date(2024, 3, 5)) == "05.03.2024."


def test_resolve_date_keeps_text_and_formats_native_dates() -> None:
    today = date(2024, 3, 5)
    assert resolve_date(" 1. jun 2023. ", today) == "1. jun 2023."
    assert resolve_date("2023-06-01 00:00:00", today) == "01.06.2023."
    assert resolve_date("2023-06-01", today, "%Y/%m/%d") == "2023/06/01"


def test_context_exposes_description_under_both_names() -> None:
    record = _record(code="7")
    index = {"007": "Inženjer"}
    resolution = resolve_description(record, index, derive_padder(index))

    fields = build_context(record, resolution, "05.03.2024.").to_fields()

    assert fields == {
        "Ime": "Petar",
        "Prezime": "Petrović",
        "JMBG": "0101990123456",
        "OpisRadnogMesta": "Inženjer",
        "OpisRM": "Inženjer",
        "Datum": "05.03.2024.",
    }


def test_employee_record_from_row_uses_column_map() -> None:
    row = {"Ime": " Ana ", "Prezime": "Marić", "JMBG": "123", "Šifra RM": "7"}
    columns = {
        "first_name": "Ime",
        "last_name": "Prezime",
        "national_id": "JMBG",
        "job_code": "Šifra RM",
        "description": None,
        "date": None,
    }

    record = EmployeeRecord.from_row(row, columns)

    assert record == EmployeeRecord("Ana", "Marić", "123", "7", "", "")
