"""Dataset loading: sources, orchestration and the published view store."""

from .orchestrator import BUNDLE_FIELDS, LoadResult, ViewStore, load_all, load_dataset
from .sources import ApiDataSource, BlobDataSource, DataSource

__all__ = [
    "ApiDataSource",
    "BUNDLE_FIELDS",
    "BlobDataSource",
    "DataSource",
    "LoadResult",
    "ViewStore",
    "load_all",
    "load_dataset",
]
