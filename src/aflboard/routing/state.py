"""Selection state, URL parsing and the one-way URL sync loop."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Literal, Mapping, Sequence, Union
from urllib.parse import parse_qs, quote, unquote, urlsplit

from aflboard.ingest import canonical_club, canonical_player_id, coerce_team_id, to_number_or_none
from aflboard.models import RosterPlayer
from aflboard.reference import DEFAULT_SEASON, DEFAULT_TEAM_ID, TEAMS


logger = logging.getLogger(__name__)

Page = Literal["team", "career"]
OUTLOOKS = ("neutral", "optimistic", "pessimistic")
DEFAULT_LOCATION = f"/team/{DEFAULT_TEAM_ID}"


@dataclass(frozen=True)
class Selection:
    team_id: str = DEFAULT_TEAM_ID
    season: int = DEFAULT_SEASON
    page: Page = "team"
    player_id: str = ""
    compare_team_id: str = ""
    compare_player_id: str = ""
    outlook: str = "neutral"
    player_team_resolved: bool = False


@dataclass(frozen=True)
class Route:
    """A recognised location. ``season`` is ``None`` when the query value is unusable."""

    page: Page
    team_id: str
    season: int | None
    player_id: str = ""
    explicit_team: bool = False


@dataclass(frozen=True)
class Redirect:
    location: str


# Actions. Each one changes a single aspect of the selection.


@dataclass(frozen=True)
class Navigate:
    route: Route


@dataclass(frozen=True)
class SetPage:
    page: Page


@dataclass(frozen=True)
class SetSeason:
    season: int


@dataclass(frozen=True)
class SelectTeam:
    team_id: str


@dataclass(frozen=True)
class ResetSelection:
    pass


@dataclass(frozen=True)
class SelectPlayer:
    player_id: str


@dataclass(frozen=True)
class SelectCompareTeam:
    team_id: str


@dataclass(frozen=True)
class SelectComparePlayer:
    player_id: str


@dataclass(frozen=True)
class SetOutlook:
    outlook: str


@dataclass(frozen=True)
class InferPlayerTeam:
    team_id: str


Action = Union[
    Navigate,
    SetPage,
    SetSeason,
    SelectTeam,
    ResetSelection,
    SelectPlayer,
    SelectCompareTeam,
    SelectComparePlayer,
    SetOutlook,
    InferPlayerTeam,
]


def _query_params(query: Mapping[str, str] | str | None) -> dict[str, str]:
    if query is None:
        return {}
    if isinstance(query, str):
        parsed = parse_qs(query.lstrip("?"), keep_blank_values=True)
        return {key: values[0] for key, values in parsed.items() if values}
    return {key: str(value) for key, value in query.items() if value is not None}


def _season_param(params: Mapping[str, str]) -> int | None:
    raw = params.get("season", "").strip()
    if not raw:
        return DEFAULT_SEASON
    number = to_number_or_none(raw)
    if number is None or not number.is_integer():
        return None
    return int(number)


def parse_location(path: str, query: Mapping[str, str] | str | None = None) -> Route | Redirect:
    """Map a path and query onto a route, or redirect unknown paths to the default team."""

    params = _query_params(query)
    parts = [unquote(part) for part in path.strip("/").split("/") if part]
    season = _season_param(params)

    if len(parts) == 2 and parts[0] == "team":
        team_id = coerce_team_id(parts[1] or params.get("team") or DEFAULT_TEAM_ID)
        return Route(page="team", team_id=team_id or DEFAULT_TEAM_ID, season=season)

    if len(parts) == 2 and parts[0] == "player":
        player_id = canonical_player_id(parts[1])
        if player_id:
            query_team = coerce_team_id(params.get("team", ""))
            return Route(
                page="career",
                team_id=query_team,
                season=season,
                player_id=player_id,
                explicit_team=bool(query_team),
            )

    return Redirect(DEFAULT_LOCATION)


def _with_team(selection: Selection, team_id: str) -> Selection:
    if not team_id or team_id == selection.team_id:
        return selection
    return replace(selection, team_id=team_id, compare_team_id="")


def _with_player(selection: Selection, player_id: str, explicit_team: bool) -> Selection:
    if player_id == selection.player_id:
        return selection
    compare = "" if selection.compare_player_id == player_id else selection.compare_player_id
    resolved = selection.player_team_resolved if explicit_team else False
    return replace(selection, player_id=player_id, compare_player_id=compare, player_team_resolved=resolved)


def _navigate(selection: Selection, route: Route) -> Selection:
    if route.season is not None and route.season != selection.season:
        selection = replace(selection, season=route.season)

    if route.page == "team":
        selection = _with_team(selection, route.team_id)
        return selection if selection.page == "team" else replace(selection, page="team")

    if selection.page != "career":
        selection = replace(selection, page="career")
    if route.explicit_team:
        selection = _with_team(selection, route.team_id)
        if not selection.player_team_resolved:
            selection = replace(selection, player_team_resolved=True)
    if route.player_id:
        selection = _with_player(selection, route.player_id, route.explicit_team)
        if not route.explicit_team and selection.player_team_resolved:
            selection = replace(selection, player_team_resolved=False)
    return selection


def reduce(selection: Selection, action: Action, *, explicit_team: bool = False) -> Selection:
    """Apply one action. ``explicit_team`` tells whether the current URL pins the team."""

    if isinstance(action, Navigate):
        return _navigate(selection, action.route)
    if isinstance(action, SetPage):
        return selection if action.page == selection.page else replace(selection, page=action.page)
    if isinstance(action, SetSeason):
        return selection if action.season == selection.season else replace(selection, season=action.season)
    if isinstance(action, SelectTeam):
        return _with_team(selection, coerce_team_id(action.team_id))
    if isinstance(action, ResetSelection):
        selection = _with_team(selection, DEFAULT_TEAM_ID)
        return selection if selection.season == DEFAULT_SEASON else replace(selection, season=DEFAULT_SEASON)
    if isinstance(action, SelectPlayer):
        return _with_player(selection, canonical_player_id(action.player_id), explicit_team)
    if isinstance(action, SelectCompareTeam):
        team_id = coerce_team_id(action.team_id)
        if team_id == selection.team_id:
            team_id = ""
        return replace(selection, compare_team_id=team_id)
    if isinstance(action, SelectComparePlayer):
        player_id = canonical_player_id(action.player_id)
        if player_id == selection.player_id:
            player_id = ""
        return replace(selection, compare_player_id=player_id)
    if isinstance(action, SetOutlook):
        if action.outlook not in OUTLOOKS:
            raise ValueError(f"Unknown outlook: {action.outlook}")
        return replace(selection, outlook=action.outlook)
    if isinstance(action, InferPlayerTeam):
        if selection.page != "career" or not action.team_id:
            return selection
        selection = _with_team(selection, action.team_id)
        return selection if selection.player_team_resolved else replace(selection, player_team_resolved=True)
    raise TypeError(f"Unsupported action: {action!r}")


def canonical_url(selection: Selection, explicit_team: bool = False) -> str | None:
    """The URL mirroring the selection; ``None`` while no player is chosen on the career page."""

    season = quote(str(selection.season))
    if selection.page == "team":
        return f"/team/{quote(selection.team_id or DEFAULT_TEAM_ID)}?season={season}"

    player_id = canonical_player_id(selection.player_id)
    if not player_id:
        return None
    path = f"/player/{quote(player_id)}"
    if selection.player_team_resolved or explicit_team:
        return f"{path}?team={quote(selection.team_id or '')}&season={season}"
    return f"{path}?season={season}"


def infer_player_team(selection: Selection, roster_rows: Sequence[RosterPlayer]) -> str | None:
    """Team id of the selected player's roster entry for the active season."""

    if selection.page != "career" or not selection.player_id:
        return None
    row = next(
        (
            row
            for row in roster_rows
            if row.provider_id == selection.player_id and row.season == selection.season
        ),
        None,
    )
    if row is None or not row.team:
        return None
    club = canonical_club(row.team)
    return next((team.id for team in TEAMS if canonical_club(team.name) == club), None)


def _split_url(url: str) -> tuple[str, str]:
    parts = urlsplit(url)
    return parts.path or "/", parts.query


class SelectionStore:
    """Owns the selection and mirrors it into the URL.

    URL changes come in through :meth:`navigate`; every state change computes
    the canonical URL and hands it to ``replace_url`` only when it differs.
    Navigations raised while that replacement is in progress are ignored.
    """

    def __init__(self, url: str = "/", replace_url: Callable[[str], None] | None = None):
        self.selection = Selection()
        self.url = ""
        self._replace_url = replace_url
        self._syncing = False
        self.navigate(url)

    @property
    def explicit_team(self) -> bool:
        _, query = _split_url(self.url)
        return bool(_query_params(query).get("team", "").strip())

    def navigate(self, url: str) -> Selection:
        if self._syncing:
            logger.debug("Ignoring navigation to %s during URL sync", url)
            return self.selection
        parsed = parse_location(*_split_url(url))
        if isinstance(parsed, Redirect):
            self._replace(parsed.location)
            parsed = parse_location(*_split_url(parsed.location))
        else:
            self.url = url
        if not isinstance(parsed, Route):
            raise ValueError(f"Location {url!r} does not resolve to a route")
        return self.dispatch(Navigate(parsed))

    def dispatch(self, action: Action) -> Selection:
        self.selection = reduce(self.selection, action, explicit_team=self.explicit_team)
        target = canonical_url(self.selection, self.explicit_team)
        if target is not None and target != self.url:
            self._replace(target)
        return self.selection

    def infer_team(self, roster_rows: Sequence[RosterPlayer]) -> Selection:
        team_id = infer_player_team(self.selection, roster_rows)
        if team_id is None:
            return self.selection
        return self.dispatch(InferPlayerTeam(team_id))

    def _replace(self, url: str) -> None:
        self.url = url
        if self._replace_url is None:
            return
        self._syncing = True
        try:
            self._replace_url(url)
        finally:
            self._syncing = False
