from __future__ import annotations

from cricket_predictor.models import TeamStats, Weather, WeatherCondition

MIN_STRENGTH = 30.0
MAX_STRENGTH = 100.0

# Country codes as they appear in the venue directory
TEAM_COUNTRIES = {
    "India": "Ind",
    "Australia": "Aus",
    "England": "UK",
    "South Africa": "SA",
    "New Zealand": "NZ",
    "Pakistan": "Pak",
    "Sri Lanka": "SL",
    "West Indies": "WI",
    "Bangladesh": "Ban",
    "Afghanistan": "Afg",
    "Zimbabwe": "Zim",
}

BOWLING_WEATHER = {WeatherCondition.RAINY, WeatherCondition.OVERCAST}


def team_country(team: str) -> str:
    return TEAM_COUNTRIES.get(team, "")


def estimate_strength(stats: TeamStats, weather: Weather) -> float:
    """Scalar strength from season stats and match-day weather, clamped to [30, 100]."""
    strength = stats.batting_avg * 1.5 - stats.bowling_avg * 0.8
    strength += stats.recent_wins * 5

    if weather.condition in BOWLING_WEATHER:
        if stats.bowling_avg < 25:
            strength += 5
    elif weather.condition == WeatherCondition.SUNNY:
        if stats.batting_avg > 30:
            strength += 5

    return max(MIN_STRENGTH, min(strength, MAX_STRENGTH))
