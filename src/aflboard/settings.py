"""Environment-driven configuration for the data endpoint and loaders."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


DEFAULT_CONTAINER = "data"
DEFAULT_API_URL = "http://localhost:8000"


@dataclass(frozen=True)
class Settings:
    data_api_key: Optional[str] = None
    storage_root: Optional[str] = None
    container: str = DEFAULT_CONTAINER
    client_key: Optional[str] = None
    api_url: str = DEFAULT_API_URL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ

        def read(name: str) -> Optional[str]:
            value = (env.get(name) or "").strip()
            return value or None

        return cls(
            data_api_key=read("DATA_API_KEY"),
            storage_root=read("DATA_STORAGE_ROOT"),
            container=read("DATA_CONTAINER") or DEFAULT_CONTAINER,
            client_key=read("DATA_CLIENT_KEY"),
            api_url=read("DATA_API_URL") or DEFAULT_API_URL,
        )
