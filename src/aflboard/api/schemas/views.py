from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class SelectionResponse(BaseModel):
    team_id: str
    season: int
    page: Literal["team", "career"]
    player_id: str = ""
    compare_team_id: str = ""
    compare_player_id: str = ""
    outlook: Literal["neutral", "optimistic", "pessimistic"] = "neutral"
    player_team_resolved: bool = False


class TeamViewResponse(BaseModel):
    url: str
    selection: SelectionResponse
    view: dict[str, Any]


class PlayerViewResponse(BaseModel):
    url: str | None
    selection: SelectionResponse
    view: dict[str, Any]


class CsvParseErrorResponse(BaseModel):
    message: str = "CSV parse error"
    errors: list[dict[str, Any]] = Field(default_factory=list)
