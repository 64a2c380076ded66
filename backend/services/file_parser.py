from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import PurePath

import pandas as pd

from ..errors import ValidationError

UPLOAD_COLUMNS = [
    "AADHAR_NO",
    "NAME",
    "AGE",
    "GENDER",
    "ADDRESS",
    "PHONE",
    "DEPARTMENT_VISITED",
]
REQUIRED_COLUMNS = ["AADHAR_NO", "NAME", "DEPARTMENT_VISITED"]

FILE_FORMATS = {".csv": "csv", ".txt": "text"}

# Upper bound on fields per line; wider lines are rejected by pandas.
_MAX_FIELDS = 64


@dataclass
class RawRecord:
    line: int
    fields: dict[str, str]


@dataclass
class ParsedFile:
    records: list[RawRecord] = field(default_factory=list)
    parse_errors: list[dict] = field(default_factory=list)

    @property
    def summary(self) -> dict:
        return {
            "totalLines": len(self.records) + len(self.parse_errors),
            "validLines": len(self.records),
            "invalidLines": len(self.parse_errors),
        }


def file_format_for(filename: str | None) -> str:
    suffix = PurePath(filename or "").suffix.lower()
    if suffix not in FILE_FORMATS:
        raise ValidationError(
            "Unsupported file format. Only .csv and .txt files are allowed"
        )
    return FILE_FORMATS[suffix]


def parse_visit_file(content: bytes, file_format: str) -> ParsedFile:
    """
    Parse an uploaded visit file into raw records.

    CSV files need a header row naming at least AADHAR_NO, NAME and
    DEPARTMENT_VISITED. Text files hold one record per line in upload column
    order, delimited by ``|``, tab or comma, with an optional header line.
    Values are kept as text; identifiers are not validated here.
    """
    if file_format not in ("csv", "text"):
        raise ValidationError(f"Unsupported file format: {file_format}")

    text = _decode(content)
    sep = "," if file_format == "csv" else _detect_delimiter(text)
    grid = _read_grid(text, sep)
    rows = [
        (idx + 1, [str(cell).strip() for cell in cells])
        for idx, *cells in grid.itertuples(index=True, name=None)
    ]
    rows = [(line, cells) for line, cells in rows if any(cells)]
    if not rows:
        raise ValidationError("Uploaded file contains no records")

    first_line, first_cells = rows[0]
    if file_format == "csv" or first_cells[0].upper() == "AADHAR_NO":
        columns, width = _header_columns(first_line, first_cells)
        rows = rows[1:]
    else:
        columns = {name: idx for idx, name in enumerate(UPLOAD_COLUMNS)}
        width = len(UPLOAD_COLUMNS)

    parsed = ParsedFile()
    for line, cells in rows:
        if any(cells[width:]):
            found = max(idx for idx, cell in enumerate(cells) if cell) + 1
            parsed.parse_errors.append(
                {"line": line, "message": f"Expected at most {width} fields, found {found}"}
            )
            continue
        parsed.records.append(
            RawRecord(line=line, fields={name: cells[idx] for name, idx in columns.items()})
        )
    return parsed


def _decode(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def _detect_delimiter(text: str) -> str:
    first = next((line for line in text.splitlines() if line.strip()), "")
    for candidate in ("|", "\t", ","):
        if candidate in first:
            return candidate
    return ","


def _read_grid(text: str, sep: str) -> pd.DataFrame:
    try:
        grid = pd.read_csv(
            io.StringIO(text),
            sep=sep,
            header=None,
            names=list(range(_MAX_FIELDS)),
            index_col=False,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
            engine="python",
        )
    except pd.errors.EmptyDataError:
        raise ValidationError("Uploaded file is empty")
    except pd.errors.ParserError as exc:
        raise ValidationError(f"File could not be parsed: {exc}")
    return grid.fillna("")


def _header_columns(line: int, cells: list[str]) -> tuple[dict[str, int], int]:
    header = [cell.upper() for cell in cells]
    width = max(idx for idx, cell in enumerate(header) if cell) + 1
    columns = {name: header.index(name) for name in UPLOAD_COLUMNS if name in header}
    missing = [name for name in REQUIRED_COLUMNS if name not in columns]
    if missing:
        raise ValidationError(
            f"Missing required columns: {', '.join(missing)}",
            errors=[{"line": line, "message": f"Missing required column {name}"} for name in missing],
        )
    return columns, width
