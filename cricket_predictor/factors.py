from __future__ import annotations

from typing import List

from cricket_predictor.models import MatchFormat, PredictionFactor, PredictionInput, WeatherCondition
from cricket_predictor.venue_advantage import DEFAULT_VENUE_RULES, VenueRules, is_home_venue, named_venue_advantage

MAX_FACTORS = 5
MIN_RULE_FACTORS = 3

# Distinct weights keep the ranked list strictly ordered
RECENT_FORM_WEIGHT = 25
BATTING_WEIGHT = 20
BOWLING_WEIGHT = 18
HOME_ADVANTAGE_WEIGHT = 17
T20_FIT_WEIGHT = 16
NAMED_VENUE_WEIGHT = 15
TEST_FIT_WEIGHT = 14
GROUND_SIZE_WEIGHT = 13
BOWLING_WEATHER_WEIGHT = 12
BATTING_WEATHER_WEIGHT = 11
FALLBACK_WEIGHT = 10


def explain(
    team1: str,
    team2: str,
    data: PredictionInput,
    winner: str,
    rules: VenueRules = DEFAULT_VENUE_RULES,
) -> List[PredictionFactor]:
    """Ranked reasons the winner is favoured, at most five, strongest first."""
    winner_stats = data.team1_stats if winner == team1 else data.team2_stats
    loser_stats = data.team2_stats if winner == team1 else data.team1_stats
    venue_details = data.venue_details
    condition = data.weather.condition
    factors: List[PredictionFactor] = []

    if winner_stats.recent_wins > loser_stats.recent_wins:
        factors.append(PredictionFactor(
            f"{winner} has better recent form ({winner_stats.recent_wins} vs {loser_stats.recent_wins} wins)",
            RECENT_FORM_WEIGHT,
        ))

    if winner_stats.batting_avg > loser_stats.batting_avg:
        factors.append(PredictionFactor(f"{winner} has stronger batting lineup", BATTING_WEIGHT))

    if winner_stats.bowling_avg < loser_stats.bowling_avg:
        factors.append(PredictionFactor(f"{winner} has more effective bowling attack", BOWLING_WEIGHT))

    if named_venue_advantage(data.venue, team1, team2, rules) == winner:
        factors.append(PredictionFactor(f"{data.venue} historically favors {winner}", NAMED_VENUE_WEIGHT))

    if venue_details is not None:
        if is_home_venue(winner, venue_details):
            factors.append(PredictionFactor(f"Home advantage at {venue_details.name}", HOME_ADVANTAGE_WEIGHT))

        if rules.ground_size_favours(winner, venue_details.area):
            factors.append(PredictionFactor(
                f"{venue_details.name}'s dimensions ({venue_details.width_meters:g}m × "
                f"{venue_details.height_meters:g}m) favor {winner}'s playing style",
                GROUND_SIZE_WEIGHT,
            ))

    if condition in (WeatherCondition.RAINY, WeatherCondition.OVERCAST):
        if winner_stats.bowling_avg < 28:
            factors.append(PredictionFactor(
                f"{condition.value} conditions favor {winner}'s bowling attack", BOWLING_WEATHER_WEIGHT,
            ))
    elif condition == WeatherCondition.SUNNY and winner_stats.batting_avg > 32:
        factors.append(PredictionFactor(
            f"{condition.value} conditions favor {winner}'s batting lineup", BATTING_WEATHER_WEIGHT,
        ))

    if data.match_format == MatchFormat.TEST and winner_stats.bowling_avg < 30:
        factors.append(PredictionFactor(
            f"{winner}'s bowling strength is well-suited for Test matches", TEST_FIT_WEIGHT,
        ))
    elif data.match_format == MatchFormat.T20 and winner_stats.batting_avg > 30:
        factors.append(PredictionFactor(
            f"{winner}'s batting aggression is ideal for T20 format", T20_FIT_WEIGHT,
        ))

    if len(factors) < MIN_RULE_FACTORS:
        factors.append(PredictionFactor(f"Historical matchup statistics favor {winner}", FALLBACK_WEIGHT))

    factors.sort(key=lambda f: f.weight, reverse=True)
    return factors[:MAX_FACTORS]
