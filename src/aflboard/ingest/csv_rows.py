"""Header-row CSV parsing with value type inference."""

from __future__ import annotations

import csv
import re
from dataclasses import asdict, dataclass
from io import StringIO
from typing import Any, Dict, List, Tuple


_FLOAT_PATTERN = re.compile(r"^\s*-?(\d+\.?|\.\d+|\d+\.\d+)([eE][-+]?\d+)?\s*$")
_INT_PATTERN = re.compile(r"^\s*-?\d+\s*$")


@dataclass(frozen=True)
class CsvParseIssue:
    type: str
    code: str
    message: str
    row: int

    def to_dict(self) -> dict:
        return asdict(self)


def infer_value(text: str) -> Any:
    if text in ("true", "TRUE"):
        return True
    if text in ("false", "FALSE"):
        return False
    if _INT_PATTERN.match(text):
        return int(text)
    if _FLOAT_PATTERN.match(text):
        return float(text)
    return None if text == "" else text


def parse_csv_rows(text: str) -> Tuple[List[Dict[str, Any]], List[CsvParseIssue]]:
    """Parse CSV text into row dicts keyed by the header row.

    Blank lines are skipped. Rows whose field count differs from the header are
    reported as issues; callers treat any issue as a failed parse.
    """

    rows: List[Dict[str, Any]] = []
    issues: List[CsvParseIssue] = []
    reader = csv.reader(StringIO(text))
    header: List[str] | None = None
    index = 0
    try:
        for record in reader:
            if not record or (len(record) == 1 and not record[0].strip()):
                continue
            if header is None:
                header = list(record)
                continue
            if len(record) != len(header):
                code = "TooFewFields" if len(record) < len(header) else "TooManyFields"
                issues.append(
                    CsvParseIssue(
                        type="FieldMismatch",
                        code=code,
                        message=f"Expected {len(header)} fields but parsed {len(record)}",
                        row=index,
                    )
                )
            rows.append({key: infer_value(value) for key, value in zip(header, record)})
            index += 1
    except csv.Error as exc:
        issues.append(CsvParseIssue(type="Quotes", code="InvalidQuotes", message=str(exc), row=index))
    return rows, issues
