"""
Tests for live_adjustments.py

Head-to-head, recent form and key player bonuses, and the live factor list.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from cricket_predictor.live_adjustments import (
    head_to_head_bonus,
    key_player_bonus,
    live_bonus,
    live_factors,
    recent_form_bonus,
)
from cricket_predictor.models import Bonus, FormRecord, HeadToHead, KeyPlayer, LiveMatchStats


def _make_stats(
    h2h: Tuple[int, int, int, int] = (5, 3, 1, 9),
    form: Optional[Dict[str, Tuple[int, int]]] = None,
    players: Optional[Dict[str, List[Tuple[str, float]]]] = None,
    team_a: Optional[str] = "Team A",
    team_b: Optional[str] = "Team B",
) -> LiveMatchStats:
    """Defaults mirror a typical feed: Team A leads the head-to-head 5-3."""
    if form is None:
        form = {"Team A": (7, 10), "Team B": (6, 10)}
    if players is None:
        players = {"Team A": [("Player 1", 8), ("Player 2", 7)], "Team B": [("Player 3", 9)]}
    return LiveMatchStats(
        head_to_head=HeadToHead(*h2h),
        recent_form={team: FormRecord(won, total) for team, (won, total) in form.items()},
        key_players={
            team: [KeyPlayer(name=name, recent_form_rating=rating) for name, rating in roster]
            for team, roster in players.items()
        },
        match_id="m1",
        team_a=team_a,
        team_b=team_b,
    )


# ---------------------------------------------------------------------------
# Head-to-head
# ---------------------------------------------------------------------------

def test_head_to_head_no_matches_gives_zero():
    stats = _make_stats(h2h=(0, 0, 0, 0))
    assert head_to_head_bonus(stats, "Team A", "Team B") == Bonus(0, 0)


def test_head_to_head_scales_win_rate_to_ten():
    stats = _make_stats()
    # 5/9 -> 5.56 -> 6, 3/9 -> 3.33 -> 3
    assert head_to_head_bonus(stats, "Team A", "Team B") == Bonus(6, 3)


def test_head_to_head_matches_sides_by_name():
    stats = _make_stats()
    assert head_to_head_bonus(stats, "Team B", "Team A") == Bonus(3, 6)


def test_head_to_head_positional_when_sides_unnamed():
    stats = _make_stats(team_a=None, team_b=None)
    assert head_to_head_bonus(stats, "India", "Australia") == Bonus(6, 3)


# ---------------------------------------------------------------------------
# Recent form and key players
# ---------------------------------------------------------------------------

def test_recent_form_scales_to_fifteen():
    stats = _make_stats(form={"Team A": (8, 10), "Team B": (6, 10)})
    assert recent_form_bonus(stats, "Team A", "Team B") == Bonus(12, 9)


def test_recent_form_missing_or_empty_entries_give_zero():
    stats = _make_stats(form={"Team A": (0, 0)})
    assert recent_form_bonus(stats, "Team A", "Team B") == Bonus(0, 0)


def test_key_player_bonus_uses_mean_rating():
    stats = _make_stats()
    # mean(8, 7) * 0.8 = 6.0, 9 * 0.8 = 7.2
    assert key_player_bonus(stats, "Team A", "Team B") == Bonus(6, 7)


def test_key_player_bonus_zero_without_players():
    stats = _make_stats(players={"Team A": []})
    assert key_player_bonus(stats, "Team A", "Team B") == Bonus(0, 0)


def test_live_bonus_sums_all_three_unclamped():
    stats = _make_stats(form={"Team A": (8, 10), "Team B": (6, 10)})
    assert live_bonus(stats, "Team A", "Team B") == Bonus(6 + 12 + 6, 3 + 9 + 7)


# ---------------------------------------------------------------------------
# Live factors
# ---------------------------------------------------------------------------

def test_live_factors_head_to_head_and_standout_player():
    factors = live_factors(_make_stats(), "Team A", "Team B")

    assert [f.label for f in factors] == ["Head-to-Head Record", "Key Player Form"]
    assert [f.weight for f in factors] == [7, 6]
    assert factors[0].description == "Team A has won 5 out of 9 matches against Team B"
    assert factors[1].description == "Player 3 from Team B is in exceptional form (9/10)"


def test_live_factors_recent_form_needs_clear_margin():
    close = live_factors(_make_stats(form={"Team A": (7, 10), "Team B": (6, 10)}), "Team A", "Team B")
    clear = live_factors(_make_stats(form={"Team A": (8, 10), "Team B": (5, 10)}), "Team A", "Team B")

    assert "Recent Form" not in [f.label for f in close]
    form_factor = next(f for f in clear if f.label == "Recent Form")
    assert form_factor.weight == 8
    assert form_factor.description == "Team A has won 8 of their last 10 matches (80%)"


def test_live_factors_capped_at_three():
    stats = _make_stats(form={"Team A": (9, 10), "Team B": (2, 10)})
    factors = live_factors(stats, "Team A", "Team B")
    assert len(factors) == 3


def test_live_factors_empty_for_level_record_and_ordinary_players():
    stats = _make_stats(
        h2h=(4, 4, 0, 8),
        form={},
        players={"Team A": [("Player 1", 6)], "Team B": [("Player 3", 7.5)]},
    )
    assert live_factors(stats, "Team A", "Team B") == []
