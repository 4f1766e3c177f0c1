"""
Tests for factors.py

Rule-based explanation of a prediction: which rules fire, their ordering, the
fallback factor and the five-factor cap.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from cricket_predictor.factors import explain
from cricket_predictor.models import (
    MatchFormat,
    PredictionInput,
    TeamStats,
    VenueProfile,
    Weather,
    WeatherCondition,
)

INDIA = TeamStats(recent_wins=4, batting_avg=36.8, bowling_avg=26.2)
AUSTRALIA = TeamStats(recent_wins=3, batting_avg=33.5, bowling_avg=27.4)


def _make_input(
    team1_stats: TeamStats = INDIA,
    team2_stats: TeamStats = AUSTRALIA,
    venue: str = "Some Park",
    match_format: MatchFormat = MatchFormat.ODI,
    condition: WeatherCondition = WeatherCondition.SUNNY,
    venue_details: Optional[VenueProfile] = None,
) -> PredictionInput:
    return PredictionInput(
        team1="India",
        team2="Australia",
        venue=venue,
        match_format=match_format,
        weather=Weather(temperature=28.0, humidity=55.0, condition=condition),
        team1_stats=team1_stats,
        team2_stats=team2_stats,
        venue_details=venue_details,
    )


def test_stat_advantages_and_sunny_batting():
    factors = explain("India", "Australia", _make_input(), "India")

    assert [f.weight for f in factors] == [25, 20, 18, 11]
    assert factors[0].label == "India has better recent form (4 vs 3 wins)"
    assert factors[1].label == "India has stronger batting lineup"
    assert factors[2].label == "India has more effective bowling attack"
    assert factors[3].label == "Sunny conditions favor India's batting lineup"


def test_fallback_added_when_few_rules_fire():
    data = _make_input(
        team1_stats=TeamStats(recent_wins=4, batting_avg=30.0, bowling_avg=30.0),
        team2_stats=TeamStats(recent_wins=3, batting_avg=31.0, bowling_avg=28.0),
        condition=WeatherCondition.CLOUDY,
    )
    factors = explain("India", "Australia", data, "India")

    assert [f.weight for f in factors] == [25, 10]
    assert factors[-1].label == "Historical matchup statistics favor India"


def test_capped_at_five_strongest():
    eden = VenueProfile(
        name="Eden Gardens, Kolkata", country="Ind", width_meters=128, height_meters=134, city="Kolkata",
    )
    data = _make_input(
        team1_stats=TeamStats(recent_wins=5, batting_avg=40.0, bowling_avg=20.0),
        team2_stats=TeamStats(recent_wins=2, batting_avg=30.0, bowling_avg=30.0),
        venue="Eden Gardens, Kolkata",
        match_format=MatchFormat.T20,
        venue_details=eden,
    )
    factors = explain("India", "Australia", data, "India")

    assert [f.weight for f in factors] == [25, 20, 18, 17, 16]
    assert factors[3].label == "Home advantage at Eden Gardens, Kolkata"
    assert factors[4].label == "India's batting aggression is ideal for T20 format"


def test_rain_favours_strong_bowling_winner():
    data = _make_input(
        team1_stats=TeamStats(recent_wins=3, batting_avg=30.0, bowling_avg=25.0),
        team2_stats=TeamStats(recent_wins=2, batting_avg=30.0, bowling_avg=30.0),
        condition=WeatherCondition.RAINY,
    )
    factors = explain("India", "Australia", data, "India")

    assert [f.weight for f in factors] == [25, 18, 12]
    assert factors[-1].label == "Rainy conditions favor India's bowling attack"


def test_test_match_bowling_fit():
    data = _make_input(
        team1_stats=TeamStats(recent_wins=3, batting_avg=30.0, bowling_avg=25.0),
        team2_stats=TeamStats(recent_wins=2, batting_avg=30.0, bowling_avg=30.0),
        match_format=MatchFormat.TEST,
        condition=WeatherCondition.CLOUDY,
    )
    factors = explain("India", "Australia", data, "India")

    assert [f.weight for f in factors] == [25, 18, 14]
    assert factors[-1].label == "India's bowling strength is well-suited for Test matches"


def test_explains_from_team2_perspective():
    data = _make_input(team1_stats=AUSTRALIA, team2_stats=INDIA, condition=WeatherCondition.CLOUDY)
    data = replace(data, team1="Australia", team2="India")
    factors = explain("Australia", "India", data, "India")

    assert [f.weight for f in factors] == [25, 20, 18]
    assert all("India" in f.label for f in factors)


def test_named_venue_and_ground_size_factors():
    mcg = VenueProfile(name="Melbourne Cricket Ground", country="Aus", width_meters=173, height_meters=148)
    data = PredictionInput(
        team1="Australia",
        team2="India",
        venue="Melbourne Cricket Ground",
        match_format=MatchFormat.ODI,
        weather=Weather(temperature=20.0, humidity=70.0, condition=WeatherCondition.CLOUDY),
        team1_stats=TeamStats(recent_wins=3, batting_avg=30.0, bowling_avg=30.0),
        team2_stats=TeamStats(recent_wins=3, batting_avg=30.0, bowling_avg=30.0),
        venue_details=mcg,
    )
    factors = explain("Australia", "India", data, "Australia")

    assert [f.weight for f in factors] == [17, 15, 13]
    assert factors[1].label == "Melbourne Cricket Ground historically favors Australia"
    assert factors[2].label == (
        "Melbourne Cricket Ground's dimensions (173m × 148m) favor Australia's playing style"
    )


def test_weights_strictly_descending():
    eden = VenueProfile(name="Eden Gardens, Kolkata", country="Ind", width_meters=128, height_meters=134)
    for fmt in MatchFormat:
        for condition in WeatherCondition:
            data = _make_input(
                team1_stats=TeamStats(recent_wins=5, batting_avg=40.0, bowling_avg=20.0),
                team2_stats=TeamStats(recent_wins=2, batting_avg=30.0, bowling_avg=30.0),
                venue="Eden Gardens, Kolkata",
                match_format=fmt,
                condition=condition,
                venue_details=eden,
            )
            weights = [f.weight for f in explain("India", "Australia", data, "India")]
            assert 1 <= len(weights) <= 5
            assert all(a > b for a, b in zip(weights, weights[1:]))
