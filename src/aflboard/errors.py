"""Exceptions raised while serving and loading dashboard datasets."""

from __future__ import annotations

from typing import Sequence


class DataLoadError(RuntimeError):
    """Base class for failures that abort a dataset load."""


class DatasetLoadError(DataLoadError):
    def __init__(self, message: str, *, filename: str, status_code: int | None = None):
        super().__init__(message)
        self.filename = filename
        self.status_code = status_code


class UnauthorizedError(DatasetLoadError):
    pass


class StorageNotConfigured(DataLoadError):
    pass


class BlobNotFound(DataLoadError):
    def __init__(self, name: str):
        super().__init__(f"Blob {name!r} not found")
        self.name = name


class CsvParseError(DataLoadError):
    def __init__(self, filename: str, errors: Sequence[dict]):
        super().__init__(f"CSV parse error in {filename} ({len(errors)} issue(s))")
        self.filename = filename
        self.errors = list(errors)
