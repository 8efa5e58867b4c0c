"""Pydantic models for API I/O."""

from .views import CsvParseErrorResponse, PlayerViewResponse, SelectionResponse, TeamViewResponse

__all__ = [
    "CsvParseErrorResponse",
    "PlayerViewResponse",
    "SelectionResponse",
    "TeamViewResponse",
]
