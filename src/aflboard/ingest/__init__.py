"""Input adapters that normalize raw dataset rows."""

from .csv_rows import CsvParseIssue, parse_csv_rows
from .normalize import (
    DATASET_KINDS,
    SCHEMAS,
    DatasetSchema,
    FieldSpec,
    NormalizeReport,
    canonical_club,
    canonical_player_id,
    coerce_team_id,
    get_schema,
    normalize,
    normalize_rows,
    to_number_or_none,
    to_trimmed_string,
)

__all__ = [
    "CsvParseIssue",
    "DATASET_KINDS",
    "DatasetSchema",
    "FieldSpec",
    "NormalizeReport",
    "SCHEMAS",
    "canonical_club",
    "canonical_player_id",
    "coerce_team_id",
    "get_schema",
    "normalize",
    "normalize_rows",
    "parse_csv_rows",
    "to_number_or_none",
    "to_trimmed_string",
]
