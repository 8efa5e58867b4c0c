"""Places the loader can read raw dataset rows from."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Protocol

import httpx

from aflboard.errors import CsvParseError, DatasetLoadError, UnauthorizedError
from aflboard.ingest import parse_csv_rows
from aflboard.storage import BlobStore


logger = logging.getLogger(__name__)

DATA_KEY_HEADER = "x-data-key"
DATA_PATH = "/api/data"


class DataSource(Protocol):
    async def fetch(self, filename: str) -> List[Dict[str, Any]]:
        ...


class ApiDataSource:
    """Reads datasets through the authenticated ``/api/data`` endpoint."""

    def __init__(
        self,
        base_url: str,
        *,
        client_key: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client_key = client_key
        self._client = httpx.AsyncClient(base_url=base_url, transport=transport)

    async def __aenter__(self) -> "ApiDataSource":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(self, filename: str) -> List[Dict[str, Any]]:
        url = f"{DATA_PATH}?file={filename}"
        headers = {DATA_KEY_HEADER: self.client_key} if self.client_key else {}
        try:
            resp = await self._client.get(DATA_PATH, params={"file": filename}, headers=headers)
        except httpx.HTTPError as exc:
            raise DatasetLoadError(f"Failed to load {filename} via API ({exc})", filename=filename) from exc

        if resp.status_code == 401:
            if self.client_key:
                hint = "check DATA_CLIENT_KEY matches DATA_API_KEY on the server"
            else:
                hint = "no DATA_CLIENT_KEY set for this client"
            raise UnauthorizedError(f"Unauthorized calling {url} ({hint})", filename=filename, status_code=401)
        if not resp.is_success:
            raise DatasetLoadError(
                f"Failed to load {filename} via API ({resp.status_code})",
                filename=filename,
                status_code=resp.status_code,
            )

        try:
            payload = resp.json()
        except ValueError as exc:
            raise DatasetLoadError(
                f"Failed to load {filename} via API (invalid JSON)",
                filename=filename,
                status_code=resp.status_code,
            ) from exc
        if not isinstance(payload, list):
            logger.debug("Non-list payload for %s; treating as empty", filename)
            return []
        return [row if isinstance(row, dict) else {} for row in payload]


class BlobDataSource:
    """Reads datasets straight from the blob store, bypassing HTTP."""

    def __init__(self, store: BlobStore):
        self.store = store

    async def fetch(self, filename: str) -> List[Dict[str, Any]]:
        # Blocking file I/O and parsing run off the event loop.
        return await asyncio.to_thread(self._read, filename)

    def _read(self, filename: str) -> List[Dict[str, Any]]:
        text = self.store.read_text(filename)
        rows, issues = parse_csv_rows(text)
        if issues:
            raise CsvParseError(filename, [issue.to_dict() for issue in issues])
        return rows
