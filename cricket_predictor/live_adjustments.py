from __future__ import annotations

from statistics import mean
from typing import List, Optional, Tuple

from cricket_predictor.models import Bonus, FormRecord, KeyPlayer, LiveMatchStats, PredictionFactor, round_half_up

HEAD_TO_HEAD_SCALE = 10
RECENT_FORM_SCALE = 15
KEY_PLAYER_SCALE = 0.8

HEAD_TO_HEAD_IMPACT = 7
RECENT_FORM_IMPACT = 8
KEY_PLAYER_IMPACT = 6

RECENT_FORM_MARGIN = 0.2
STANDOUT_RATING = 8


def head_to_head_bonus(stats: LiveMatchStats, team1: str, team2: str) -> Bonus:
    total = stats.head_to_head.total
    if total == 0:
        return Bonus(0, 0)
    team1_wins, team2_wins = stats.head_to_head_wins(team1, team2)
    return Bonus(
        team1_bonus=round_half_up(team1_wins / total * HEAD_TO_HEAD_SCALE),
        team2_bonus=round_half_up(team2_wins / total * HEAD_TO_HEAD_SCALE),
    )


def recent_form_bonus(stats: LiveMatchStats, team1: str, team2: str) -> Bonus:
    def bonus_for(team: str) -> int:
        form = stats.recent_form.get(team)
        if form is None or form.total_matches == 0:
            return 0
        return round_half_up(form.win_rate * RECENT_FORM_SCALE)

    return Bonus(team1_bonus=bonus_for(team1), team2_bonus=bonus_for(team2))


def key_player_bonus(stats: LiveMatchStats, team1: str, team2: str) -> Bonus:
    def bonus_for(team: str) -> int:
        players = stats.key_players.get(team) or []
        if not players:
            return 0
        return round_half_up(mean(p.recent_form_rating for p in players) * KEY_PLAYER_SCALE)

    return Bonus(team1_bonus=bonus_for(team1), team2_bonus=bonus_for(team2))


def live_bonus(stats: LiveMatchStats, team1: str, team2: str) -> Bonus:
    """Sum of the head-to-head, recent form and key player bonuses. Not clamped."""
    return (
        head_to_head_bonus(stats, team1, team2)
        + recent_form_bonus(stats, team1, team2)
        + key_player_bonus(stats, team1, team2)
    )


def _best_player(players: List[KeyPlayer]) -> Optional[KeyPlayer]:
    best = None
    for player in players:
        if best is None or player.recent_form_rating > best.recent_form_rating:
            best = player
    return best


def live_factors(stats: LiveMatchStats, team1: str, team2: str) -> List[PredictionFactor]:
    """Up to three explanations drawn from live data: head-to-head, recent form, standout player."""
    factors: List[PredictionFactor] = []

    total = stats.head_to_head.total
    if total > 0:
        team1_wins, team2_wins = stats.head_to_head_wins(team1, team2)
        if team1_wins != team2_wins:
            leader, wins, other = (team1, team1_wins, team2) if team1_wins > team2_wins else (team2, team2_wins, team1)
            factors.append(PredictionFactor(
                label="Head-to-Head Record",
                weight=HEAD_TO_HEAD_IMPACT,
                description=f"{leader} has won {wins} out of {total} matches against {other}",
            ))

    form1 = stats.recent_form.get(team1)
    form2 = stats.recent_form.get(team2)
    if form1 is not None and form2 is not None:
        leader_form: Optional[Tuple[str, FormRecord]] = None
        if form1.win_rate > form2.win_rate + RECENT_FORM_MARGIN:
            leader_form = (team1, form1)
        elif form2.win_rate > form1.win_rate + RECENT_FORM_MARGIN:
            leader_form = (team2, form2)
        if leader_form is not None:
            team, form = leader_form
            factors.append(PredictionFactor(
                label="Recent Form",
                weight=RECENT_FORM_IMPACT,
                description=(
                    f"{team} has won {form.matches_won} of their last {form.total_matches} matches "
                    f"({round_half_up(form.win_rate * 100)}%)"
                ),
            ))

    standout = None
    for team in (team1, team2):
        best = _best_player(stats.key_players.get(team) or [])
        if best is not None and (standout is None or best.recent_form_rating > standout[1].recent_form_rating):
            standout = (team, best)
    if standout is not None and standout[1].recent_form_rating >= STANDOUT_RATING:
        team, player = standout
        factors.append(PredictionFactor(
            label="Key Player Form",
            weight=KEY_PLAYER_IMPACT,
            description=f"{player.name} from {team} is in exceptional form ({player.recent_form_rating:g}/10)",
        ))

    return factors
