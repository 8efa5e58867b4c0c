"""Static club, colour and category reference tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class TeamOption:
    id: str
    name: str


TEAMS: Tuple[TeamOption, ...] = (
    TeamOption("10", "Adelaide"),
    TeamOption("20", "Brisbane Lions"),
    TeamOption("30", "Carlton"),
    TeamOption("40", "Collingwood"),
    TeamOption("50", "Essendon"),
    TeamOption("60", "Fremantle"),
    TeamOption("70", "Geelong Cats"),
    TeamOption("1000", "Gold Coast SUNS"),
    TeamOption("1010", "GWS GIANTS"),
    TeamOption("80", "Hawthorn"),
    TeamOption("90", "Melbourne"),
    TeamOption("100", "North Melbourne"),
    TeamOption("110", "Port Adelaide"),
    TeamOption("120", "Richmond"),
    TeamOption("130", "St Kilda"),
    TeamOption("140", "Sydney"),
    TeamOption("150", "West Coast"),
    TeamOption("160", "Western Bulldogs"),
)

DEFAULT_TEAM_ID = "40"
DEFAULT_SEASON = 2025

# Older deep links carried abbreviation-style codes (/team/COLL).
LEGACY_TEAM_CODES: Mapping[str, str] = {
    "ADE": "10",
    "BRI": "20",
    "CARL": "30",
    "COLL": "40",
    "ESS": "50",
    "FRE": "60",
    "GEE": "70",
    "GC": "1000",
    "GWS": "1010",
    "HAW": "80",
    "MELB": "90",
    "NM": "100",
    "PORT": "110",
    "RICH": "120",
    "STK": "130",
    "SYD": "140",
    "WCE": "150",
    "WB": "160",
}

CLUB_ALIASES: Mapping[str, str] = {
    "Adelaide Crows": "Adelaide",
    "Brisbane": "Brisbane Lions",
    "Geelong": "Geelong Cats",
    "Gold Coast": "Gold Coast SUNS",
    "Gold Coast Suns": "Gold Coast SUNS",
    "GWS": "GWS GIANTS",
    "Greater Western Sydney": "GWS GIANTS",
    "Kangaroos": "North Melbourne",
    "Port": "Port Adelaide",
    "Sydney Swans": "Sydney",
    "West Coast Eagles": "West Coast",
}

TEAM_PRIMARY_COLOR: Mapping[str, str] = {
    "Adelaide": "#002B5C",
    "Brisbane Lions": "#7C003E",
    "Carlton": "#001F5B",
    "Collingwood": "#111111",
    "Essendon": "#CC0000",
    "Fremantle": "#4B1F6F",
    "Geelong Cats": "#002B5C",
    "Gold Coast SUNS": "#B5121B",
    "GWS GIANTS": "#F05A28",
    "Hawthorn": "#5A2A00",
    "Melbourne": "#001B3A",
    "North Melbourne": "#003DA5",
    "Port Adelaide": "#008AAB",
    "Richmond": "#F5B301",
    "St Kilda": "#111111",
    "Sydney": "#D71920",
    "West Coast": "#002B5C",
    "Western Bulldogs": "#1E3A8A",
}
DEFAULT_TEAM_COLOR = "#111111"

AGE_CATEGORY_ORDER: Tuple[str, ...] = (
    "Rising Stars",
    "Established Youth",
    "Prime",
    "Veterans",
    "Old Timers",
)

AGE_CATEGORY_COLOR: Mapping[str, str] = {
    "Rising Stars": "#2563EB",
    "Established Youth": "#7C3AED",
    "Prime": "#059669",
    "Veterans": "#F59E0B",
    "Old Timers": "#EF4444",
}

PIE_COLORS: Tuple[str, ...] = (
    "#2563EB",
    "#7C3AED",
    "#059669",
    "#F59E0B",
    "#EF4444",
    "#14B8A6",
    "#64748B",
    "#EC4899",
)

ACQUISITION_COLOR: Mapping[str, str] = {
    "National Draft": "#7C3AED",
    "Rookie Draft": "#2563EB",
    "Mid-Season Draft": "#14B8A6",
    "Trade": "#F59E0B",
    "Free Agent": "#EF4444",
    "Pre-Listing": "#059669",
    "Category B": "#EC4899",
    "SSP": "#64748B",
}

PLAYER_STAT_CATEGORY_ORDER: Tuple[str, ...] = (
    "Ball Use",
    "Ball Winning",
    "Defence",
    "Pressure",
    "Stoppage",
    "Scoreboard Impact",
    "Ruck",
)

_TEAMS_BY_ID: Dict[str, TeamOption] = {team.id: team for team in TEAMS}


def team_by_id(team_id: str) -> Optional[TeamOption]:
    return _TEAMS_BY_ID.get(team_id)


def team_name(team_id: str) -> str:
    """Return the club name for an id, or the id itself when unknown."""

    team = _TEAMS_BY_ID.get(team_id)
    return team.name if team else team_id


def team_color(club_key: str) -> str:
    return TEAM_PRIMARY_COLOR.get(club_key, DEFAULT_TEAM_COLOR)


def stable_color_for_key(key: str) -> str:
    """Colour for an acquisition category; unknown keys hash onto the palette."""

    text = str(key if key is not None else "").strip()
    if text in ACQUISITION_COLOR:
        return ACQUISITION_COLOR[text]
    h = 0
    for char in text:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    return PIE_COLORS[h % len(PIE_COLORS)]


def category_sort_key(category: str, order: Tuple[str, ...]) -> tuple[int, int]:
    """Sort key placing known categories first in their preferred order."""

    try:
        return (0, order.index(category))
    except ValueError:
        return (1, 0)
