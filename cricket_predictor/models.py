from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, is_dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class MatchFormat(str, Enum):
    ODI = "odi"
    T20 = "t20"
    TEST = "test"


class WeatherCondition(str, Enum):
    SUNNY = "Sunny"
    CLOUDY = "Cloudy"
    RAINY = "Rainy"
    OVERCAST = "Overcast"
    PARTLY_CLOUDY = "PartlyCloudy"
    THUNDERSTORM = "Thunderstorm"
    FOGGY = "Foggy"
    SNOW = "Snow"
    DRIZZLE = "Drizzle"


class InvalidPredictionInput(ValueError):
    pass


@dataclass(frozen=True)
class TeamStats:
    recent_wins: int
    batting_avg: float
    bowling_avg: float


@dataclass(frozen=True)
class Weather:
    temperature: float
    humidity: float
    condition: WeatherCondition


@dataclass(frozen=True)
class VenueProfile:
    name: str
    country: str
    width_meters: float
    height_meters: float
    is_odi_only: bool = False
    short_name: Optional[str] = None
    city: Optional[str] = None
    batting_record: Optional[str] = None
    bowling_record: Optional[str] = None
    notes: Optional[str] = None

    @property
    def area(self) -> float:
        return self.width_meters * self.height_meters


@dataclass(frozen=True)
class Bonus:
    team1_bonus: int = 0
    team2_bonus: int = 0

    def __add__(self, other: "Bonus") -> "Bonus":
        return Bonus(self.team1_bonus + other.team1_bonus, self.team2_bonus + other.team2_bonus)


@dataclass(frozen=True)
class HeadToHead:
    team_a_wins: int
    team_b_wins: int
    no_result: int
    total: int


@dataclass(frozen=True)
class FormRecord:
    matches_won: int
    total_matches: int

    @property
    def win_rate(self) -> float:
        if self.total_matches == 0:
            return 0.0
        return self.matches_won / self.total_matches


@dataclass(frozen=True)
class KeyPlayer:
    name: str
    recent_form_rating: float
    role: Optional[str] = None


@dataclass(frozen=True)
class LiveMatchStats:
    head_to_head: HeadToHead
    recent_form: Dict[str, FormRecord] = field(default_factory=dict)
    key_players: Dict[str, List[KeyPlayer]] = field(default_factory=dict)
    match_id: Optional[str] = None
    team_a: Optional[str] = None
    team_b: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LiveMatchStats":
        """Build from the snake_case shape produced by ``to_dict``."""
        h2h = data.get("head_to_head") or {}
        return cls(
            head_to_head=HeadToHead(
                team_a_wins=int(h2h.get("team_a_wins", 0)),
                team_b_wins=int(h2h.get("team_b_wins", 0)),
                no_result=int(h2h.get("no_result", 0)),
                total=int(h2h.get("total", 0)),
            ),
            recent_form={
                team: FormRecord(matches_won=int(rec["matches_won"]), total_matches=int(rec["total_matches"]))
                for team, rec in (data.get("recent_form") or {}).items()
            },
            key_players={
                team: [
                    KeyPlayer(name=p["name"], recent_form_rating=float(p["recent_form_rating"]), role=p.get("role"))
                    for p in players
                ]
                for team, players in (data.get("key_players") or {}).items()
            },
            match_id=data.get("match_id"),
            team_a=data.get("team_a"),
            team_b=data.get("team_b"),
        )

    def head_to_head_wins(self, team1: str, team2: str) -> tuple[int, int]:
        """Head-to-head wins as (team1, team2).

        Sides are matched by name when the feed names them, otherwise team1 reads
        the team A count and team2 the team B count.
        """
        h2h = self.head_to_head

        def wins_for(team: str, positional: int) -> int:
            if self.team_a is not None and team == self.team_a:
                return h2h.team_a_wins
            if self.team_b is not None and team == self.team_b:
                return h2h.team_b_wins
            return positional

        return wins_for(team1, h2h.team_a_wins), wins_for(team2, h2h.team_b_wins)


@dataclass(frozen=True)
class PredictionInput:
    team1: str
    team2: str
    venue: str
    match_format: MatchFormat
    weather: Weather
    team1_stats: TeamStats
    team2_stats: TeamStats
    venue_details: Optional[VenueProfile] = None
    use_sentiment: bool = False
    match_id: Optional[str] = None


@dataclass(frozen=True)
class PredictionFactor:
    label: str
    weight: int
    description: Optional[str] = None


@dataclass
class PredictionResult:
    winner: str
    probability: int
    team1: str
    team2: str
    venue: str
    match_format: MatchFormat
    factors: List[PredictionFactor]
    venue_details: Optional[VenueProfile]
    weather: Weather
    team1_stats: TeamStats
    team2_stats: TeamStats
    sentiment_used: bool = False
    live_stats_used: bool = False
    live_data: Optional[LiveMatchStats] = None
    score_breakdown: Dict[str, Dict[str, float]] = field(default_factory=dict)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upward. Used for every bonus and share."""
    return int(math.floor(value + 0.5))


def validate_prediction_input(data: PredictionInput) -> PredictionInput:
    if not data.team1 or not data.team1.strip() or not data.team2 or not data.team2.strip():
        raise InvalidPredictionInput("Both teams are required.")
    if data.team1.strip().lower() == data.team2.strip().lower():
        raise InvalidPredictionInput("Team 1 and Team 2 must be different.")
    if not data.venue or not data.venue.strip():
        raise InvalidPredictionInput("Venue is required.")
    if not isinstance(data.match_format, MatchFormat):
        raise InvalidPredictionInput(f"Unsupported match format: {data.match_format!r}")
    for label, stats in (("team1_stats", data.team1_stats), ("team2_stats", data.team2_stats)):
        if not 0 <= stats.recent_wins <= 5:
            raise InvalidPredictionInput(f"{label}.recent_wins must be between 0 and 5.")
        if stats.batting_avg < 0 or stats.bowling_avg < 0:
            raise InvalidPredictionInput(f"{label} averages must be non-negative.")
    return data


def to_dict(obj: Any) -> Any:
    """JSON-ready representation of dataclasses, enums and containers of them."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_dict(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, dict):
        return {k: to_dict(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_dict(v) for v in obj]
    return obj
