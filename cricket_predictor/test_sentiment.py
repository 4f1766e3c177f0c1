"""
Tests for sentiment.py

The OpenAI client is mocked -- no network or API key needed.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from cricket_predictor.models import TeamStats
from cricket_predictor.sentiment import (
    OpenAISentimentScorer,
    ScorerNotReady,
    ScorerStatus,
    SentimentScore,
    describe_team,
    team_confidence,
)


def _make_client(content: str = '{"label": "POSITIVE", "score": 0.92}') -> MagicMock:
    client = MagicMock()
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    client.chat.completions.create.return_value.choices = [choice]
    return client


def _loaded_scorer(client: MagicMock) -> OpenAISentimentScorer:
    scorer = OpenAISentimentScorer(model="test-model", client_factory=lambda: client)
    scorer.initialize()
    return scorer


# ---------------------------------------------------------------------------
# Team descriptions
# ---------------------------------------------------------------------------

def test_describe_strong_team():
    text = describe_team("India", 4, 10, 36.8, 22.0)
    assert text == (
        "India has won 4 out of their last 10 matches, with a win rate of 40.0%. "
        "They have a batting average of 36.8 and bowling average of 22. "
        "Their batting is strong. Their bowling is excellent."
    )


def test_describe_weak_team():
    text = describe_team("Team B", 1, 10, 25.0, 33.5)
    assert "Their batting needs improvement." in text
    assert "Their bowling could be better." in text


def test_confidence_from_label():
    assert SentimentScore("POSITIVE", 0.8).confidence == pytest.approx(0.8)
    assert SentimentScore("NEGATIVE", 0.8).confidence == pytest.approx(0.2)


# ---------------------------------------------------------------------------
# Readiness lifecycle
# ---------------------------------------------------------------------------

def test_starts_unloaded_and_refuses_to_score():
    scorer = OpenAISentimentScorer(model="test-model", client_factory=MagicMock())

    assert scorer.status() == ScorerStatus.UNLOADED
    with pytest.raises(ScorerNotReady):
        scorer.score("anything")


def test_initialize_loads_once():
    client = _make_client()
    factory = MagicMock(return_value=client)
    scorer = OpenAISentimentScorer(model="test-model", client_factory=factory)

    scorer.initialize()
    scorer.initialize()

    assert scorer.status() == ScorerStatus.LOADED
    assert scorer.error is None
    factory.assert_called_once()
    client.models.retrieve.assert_called_once_with("test-model")


def test_initialize_failure_sets_error_and_can_retry():
    client = _make_client()
    client.models.retrieve.side_effect = [OpenAIError("model not found"), MagicMock()]
    scorer = OpenAISentimentScorer(model="test-model", client_factory=lambda: client)

    scorer.initialize()
    assert scorer.status() == ScorerStatus.ERROR
    assert scorer.error == "model not found"
    with pytest.raises(ScorerNotReady):
        scorer.score("anything")

    scorer.initialize()
    assert scorer.status() == ScorerStatus.LOADED
    assert scorer.error is None


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def test_score_parses_json_reply():
    client = _make_client('{"label": "NEGATIVE", "score": 0.7}')
    result = _loaded_scorer(client).score("Team B has won 1 out of their last 10 matches")

    assert result == SentimentScore(label="NEGATIVE", score=0.7)
    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["temperature"] == 0
    assert kwargs["messages"][-1] == {"role": "user", "content": "Team B has won 1 out of their last 10 matches"}


def test_score_extracts_json_from_surrounding_text():
    client = _make_client('Sure:\n{"label": "POSITIVE", "score": 0.66}\n')
    assert _loaded_scorer(client).score("text").score == pytest.approx(0.66)


@pytest.mark.parametrize("content", [
    "no json here",
    '{"label": "NEUTRAL", "score": 0.5}',
    '{"label": "POSITIVE", "score": 1.5}',
    '{"label": "POSITIVE", "score": }',
])
def test_malformed_reply_raises(content):
    scorer = _loaded_scorer(_make_client(content))
    with pytest.raises(ValueError):
        scorer.score("text")


def test_team_confidence_uses_stats_description():
    scorer = MagicMock()
    scorer.score.return_value = SentimentScore("NEGATIVE", 0.75)
    stats = TeamStats(recent_wins=2, batting_avg=28.5, bowling_avg=30.2)

    assert team_confidence(scorer, "Pakistan", stats) == pytest.approx(0.25)
    text = scorer.score.call_args.args[0]
    assert text.startswith("Pakistan has won 2 out of their last 10 matches, with a win rate of 20.0%.")
