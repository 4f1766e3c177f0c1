from __future__ import annotations

import json
import logging
import re
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Literal, Optional, Protocol

from openai import OpenAI, OpenAIError
from pydantic import BaseModel, Field, ValidationError

from cricket_predictor.config import OPENAI_SENTIMENT_MODEL
from cricket_predictor.models import TeamStats

logger = logging.getLogger(__name__)

SENTIMENT_SCALE = 20
DEFAULT_MATCH_WINDOW = 10


class ScorerStatus(str, Enum):
    UNLOADED = "unloaded"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class ScorerNotReady(RuntimeError):
    pass


@dataclass(frozen=True)
class SentimentScore:
    label: str
    score: float

    @property
    def confidence(self) -> float:
        return self.score if self.label == "POSITIVE" else 1 - self.score


class SentimentScorer(Protocol):
    """Capability interface the engine depends on.

    Implementations own their readiness: ``unloaded -> loading -> loaded | error``.
    """

    def status(self) -> ScorerStatus:
        ...

    def initialize(self) -> None:
        ...

    def score(self, text: str) -> SentimentScore:
        ...


def describe_team(
    team_name: str,
    recent_wins: int,
    total_matches: int = DEFAULT_MATCH_WINDOW,
    batting_avg: float = 0.0,
    bowling_avg: float = 0.0,
) -> str:
    win_rate = recent_wins / total_matches * 100 if total_matches else 0.0
    batting = "Their batting is strong." if batting_avg > 35 else "Their batting needs improvement."
    bowling = "Their bowling is excellent." if bowling_avg < 25 else "Their bowling could be better."
    return (
        f"{team_name} has won {recent_wins} out of their last {total_matches} matches, "
        f"with a win rate of {win_rate:.1f}%. "
        f"They have a batting average of {batting_avg:g} and bowling average of {bowling_avg:g}. "
        f"{batting} {bowling}"
    )


def team_confidence(scorer: SentimentScorer, team_name: str, stats: TeamStats) -> float:
    """Scorer confidence in [0, 1] that the team's recent record reads positively."""
    description = describe_team(
        team_name, stats.recent_wins, DEFAULT_MATCH_WINDOW, stats.batting_avg, stats.bowling_avg,
    )
    result = scorer.score(description)
    logger.info("Sentiment for %s: label=%s score=%.3f", team_name, result.label, result.score)
    return result.confidence


class _SentimentVerdict(BaseModel):
    label: Literal["POSITIVE", "NEGATIVE"]
    score: float = Field(ge=0.0, le=1.0)


SYSTEM_PROMPT = (
    "You are a sentiment classifier for cricket team performance summaries. "
    "Classify the overall polarity of the user's text. Reply with JSON only, shaped as "
    '{"label": "POSITIVE" or "NEGATIVE", "score": <probability of that label between 0 and 1>}.'
)


class OpenAISentimentScorer:
    """Polarity scorer backed by the OpenAI chat completions API."""

    def __init__(self, model: str = OPENAI_SENTIMENT_MODEL, client_factory: Callable[[], OpenAI] = OpenAI):
        self.model = model
        self._client_factory = client_factory
        self._client: Optional[OpenAI] = None
        self._status = ScorerStatus.UNLOADED
        self._error: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def error(self) -> Optional[str]:
        return self._error

    def status(self) -> ScorerStatus:
        return self._status

    def initialize(self) -> None:
        with self._lock:
            if self._status in (ScorerStatus.LOADED, ScorerStatus.LOADING):
                return
            self._status = ScorerStatus.LOADING
            self._error = None

        logger.info("Loading sentiment scorer (model=%s)...", self.model)
        try:
            client = self._client_factory()
            client.models.retrieve(self.model)
        except OpenAIError as e:
            logger.error("Sentiment scorer failed to load: %s", e)
            with self._lock:
                self._error = str(e)
                self._status = ScorerStatus.ERROR
            return

        with self._lock:
            self._client = client
            self._status = ScorerStatus.LOADED
        logger.info("Sentiment scorer ready")

    def score(self, text: str) -> SentimentScore:
        if self._status != ScorerStatus.LOADED or self._client is None:
            raise ScorerNotReady("Sentiment scorer not loaded yet")

        response = self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": text},
            ],
            temperature=0,
            response_format={"type": "json_object"},
        )
        content = response.choices[0].message.content or ""

        match = re.search(r"\{.*\}", content, re.DOTALL)
        if not match:
            raise ValueError(f"No JSON object in sentiment response: {content!r}")
        try:
            verdict = _SentimentVerdict.model_validate(json.loads(match.group(0)))
        except (json.JSONDecodeError, ValidationError) as e:
            raise ValueError(f"Malformed sentiment response: {content!r}") from e
        return SentimentScore(label=verdict.label, score=verdict.score)
