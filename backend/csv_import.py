"""Bulk import of hearings from CSV text.

Rows are isolated from each other: a bad or unsaveable row is counted as a
failure and the import moves on. Only a header without the required columns
(or an empty file) aborts the whole import.
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime

from hearings import hearing_fields
from normalizer import normalize_text
from store import HearingStore

logger = logging.getLogger(__name__)

DATE_BR = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")
DATE_ISO = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
TIME_HM = re.compile(r"^(\d{1,2}):(\d{2})$")

# column -> (display name, accepted header spellings)
REQUIRED_COLUMNS = {
    "date": ("Data", ("data", "data audiencia", "data da audiencia")),
    "time": ("Horário", ("horario", "horário", "hora", "hora audiencia")),
    "location": ("Local", ("local",)),
    "officer": (
        "Posto/Nome Policial",
        ("posto/nome policial", "posto nome policial", "policial", "nome policial", "posto"),
    ),
    "modality": ("Modalidade", ("modalidade",)),
}
OPTIONAL_COLUMNS = {
    "case_ref": ("SEI", ("sei", "n sei", "numero sei", "nº sei")),
}


class CsvImportError(Exception):
    """Raised when a CSV file cannot be imported at all."""


class EmptyCsvError(CsvImportError):
    def __init__(self):
        super().__init__("CSV is empty or invalid")


class MissingColumnsError(CsvImportError):
    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Missing CSV headers: {', '.join(missing)}")


@dataclass
class ImportResult:
    created: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f"Import finished: {self.created} created, {self.failed} failed"

    def fail(self, row_number: int, reason: str):
        self.failed += 1
        self.errors.append(f"Row {row_number}: {reason}")


def detect_delimiter(text: str) -> str:
    """Pick ';' or ',' by counting them on the first line; ties go to ';'."""
    first_line = re.split(r"\r?\n", text, maxsplit=1)[0] if text else ""
    return ";" if first_line.count(";") >= first_line.count(",") else ","


def parse_csv(text: str, delimiter: str | None = None) -> list[list[str]]:
    """Split CSV text into rows of trimmed fields.

    Double quotes wrap fields that may contain the delimiter or newlines; a
    doubled quote inside them is a literal quote. Rows whose fields are all
    empty are dropped.
    """
    delimiter = delimiter or detect_delimiter(text)
    rows = []
    row = []
    cell = []
    quoted = False
    i = 0
    length = len(text)

    while i < length:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < length else ""

        if ch == '"':
            if quoted and nxt == '"':
                cell.append('"')
                i += 1
            else:
                quoted = not quoted
        elif ch == delimiter and not quoted:
            row.append("".join(cell))
            cell = []
        elif (ch == "\n" or (ch == "\r" and nxt == "\n")) and not quoted:
            row.append("".join(cell))
            rows.append(row)
            row = []
            cell = []
            if ch == "\r":
                i += 1
        else:
            cell.append(ch)
        i += 1

    if cell or row:
        row.append("".join(cell))
        rows.append(row)

    rows = [[value.strip() for value in r] for r in rows]
    return [r for r in rows if r and any(r)]


def map_headers(headers: list[str]) -> dict[str, int | None]:
    """Locate each known column in the header row (case and accent insensitive)."""
    normalized = [normalize_text(h) for h in headers]

    def find(spellings):
        targets = {normalize_text(s) for s in spellings}
        for index, header in enumerate(normalized):
            if header in targets:
                return index
        return None

    columns = {name: find(spellings) for name, (_, spellings) in REQUIRED_COLUMNS.items()}
    columns.update({name: find(spellings) for name, (_, spellings) in OPTIONAL_COLUMNS.items()})
    return columns


def missing_columns(columns: dict[str, int | None]) -> list[str]:
    return [label for name, (label, _) in REQUIRED_COLUMNS.items() if columns.get(name) is None]


def parse_date_and_time(date_value: str, time_value: str) -> datetime | None:
    """Parse DD/MM/YYYY or YYYY-MM-DD plus H:MM/HH:MM into a local datetime.

    Returns None for any other format and for impossible dates or times.
    """
    date_value = (date_value or "").strip()
    time_value = (time_value or "").strip()

    br_match = DATE_BR.match(date_value)
    iso_match = DATE_ISO.match(date_value)
    if br_match:
        day, month, year = (int(g) for g in br_match.groups())
    elif iso_match:
        year, month, day = (int(g) for g in iso_match.groups())
    else:
        return None

    match = TIME_HM.match(time_value)
    if not match:
        return None
    hour, minute = (int(g) for g in match.groups())

    try:
        return datetime(year, month, day, hour, minute)
    except ValueError:
        return None


def _cell(row: list[str], index: int | None) -> str:
    if index is None or index >= len(row):
        return ""
    return row[index]


def import_csv(
    text: str,
    store: HearingStore,
    created_by: str | None,
    delimiter: str | None = None,
) -> ImportResult:
    """Create one hearing per valid data row and tally the failures.

    Raises EmptyCsvError when no row survives parsing and MissingColumnsError
    when the header lacks a required column; nothing is written in either case.
    """
    rows = parse_csv(text, delimiter)
    if not rows:
        raise EmptyCsvError()

    columns = map_headers(rows[0])
    missing = missing_columns(columns)
    if missing:
        raise MissingColumnsError(missing)

    result = ImportResult()
    for row_number, row in enumerate(rows[1:], start=2):
        values = {name: _cell(row, index) for name, index in columns.items()}

        empty = [name for name in REQUIRED_COLUMNS if not values[name]]
        if empty:
            result.fail(row_number, f"empty required field(s): {', '.join(empty)}")
            continue

        starts_at = parse_date_and_time(values["date"], values["time"])
        if starts_at is None:
            result.fail(row_number, f"invalid date/time {values['date']!r} {values['time']!r}")
            continue

        fields = hearing_fields(
            starts_at,
            values["location"],
            values["officer"],
            values["modality"],
            values["case_ref"],
            created_by=created_by,
        )
        try:
            store.create(fields)
        except Exception as e:
            logger.error(f"Error saving CSV row {row_number}: {str(e)}")
            result.fail(row_number, "could not be saved")
            continue
        result.created += 1

    if result.errors:
        logger.warning(f"CSV import rejected {result.failed} row(s): {result.errors[:5]}")
    logger.info(result.message)
    return result
