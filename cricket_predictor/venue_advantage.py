from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Mapping, Optional

from cricket_predictor.models import Bonus, MatchFormat, VenueProfile
from cricket_predictor.team_strength import team_country


@dataclass(frozen=True)
class VenueRules:
    """Affinity tables and thresholds behind every venue-driven bonus and factor."""

    named_venue_advantages: Mapping[str, str] = field(default_factory=lambda: {
        "Melbourne Cricket Ground": "Australia",
        "Eden Gardens, Kolkata": "India",
        "Lord's, London": "England",
        "Wankhede Stadium, Mumbai": "India",
        "Wanderers Stadium, Johannesburg": "South Africa",
    })
    named_venue_bonus: int = 10

    home_country_bonus: int = 3

    odi_strong_teams: FrozenSet[str] = frozenset({"New Zealand", "England"})
    odi_only_bonus: int = 2

    # Large grounds reward strong bowling attacks, small ones aggressive batting
    big_ground_teams: FrozenSet[str] = frozenset({"Australia", "South Africa"})
    big_ground_min_area: float = 22000.0
    small_ground_teams: FrozenSet[str] = frozenset({"West Indies", "India"})
    small_ground_max_area: float = 18000.0
    ground_size_bonus: int = 2

    def ground_size_favours(self, team: str, area: float) -> bool:
        if area > self.big_ground_min_area:
            return team in self.big_ground_teams
        if area < self.small_ground_max_area:
            return team in self.small_ground_teams
        return False


DEFAULT_VENUE_RULES = VenueRules()


def is_home_venue(team: str, profile: VenueProfile) -> bool:
    country = team_country(team)
    return bool(country) and country == profile.country


def named_venue_advantage(
    venue_name: str, team1: str, team2: str, rules: VenueRules = DEFAULT_VENUE_RULES,
) -> Optional[str]:
    favoured = rules.named_venue_advantages.get(venue_name)
    if favoured is None:
        return None
    if favoured == team1:
        return team1
    if favoured == team2:
        return team2
    return None


def venue_factors(
    profile: VenueProfile,
    team1: str,
    team2: str,
    match_format: MatchFormat,
    rules: VenueRules = DEFAULT_VENUE_RULES,
) -> Bonus:
    def bonus_for(team: str) -> int:
        bonus = 0
        if is_home_venue(team, profile):
            bonus += rules.home_country_bonus
        if match_format == MatchFormat.ODI and profile.is_odi_only and team in rules.odi_strong_teams:
            bonus += rules.odi_only_bonus
        if rules.ground_size_favours(team, profile.area):
            bonus += rules.ground_size_bonus
        return bonus

    return Bonus(team1_bonus=bonus_for(team1), team2_bonus=bonus_for(team2))
