# prediction_engine.py

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Dict, Optional, Protocol, Tuple

from cricket_predictor.config import ENRICHMENT_TIMEOUT, ENRICHMENT_WORKERS
from cricket_predictor.factors import explain
from cricket_predictor.live_adjustments import live_bonus, live_factors
from cricket_predictor.models import (
    Bonus,
    LiveMatchStats,
    MatchFormat,
    PredictionInput,
    PredictionResult,
    round_half_up,
)
from cricket_predictor.sentiment import SENTIMENT_SCALE, ScorerStatus, SentimentScorer, team_confidence
from cricket_predictor.team_strength import estimate_strength
from cricket_predictor.venue_advantage import DEFAULT_VENUE_RULES, VenueRules, named_venue_advantage, venue_factors

logger = logging.getLogger(__name__)

FORMAT_BONUS = 5
T20_BATTING_THRESHOLD = 35


class LiveStatsSource(Protocol):
    def get_live_stats(self, match_id: str) -> Optional[LiveMatchStats]:
        ...


def format_bonus(data: PredictionInput) -> Bonus:
    """+5 per team for format fit: Test rewards the lower bowling average, T20 a batting average over 35."""
    s1, s2 = data.team1_stats, data.team2_stats
    if data.match_format == MatchFormat.TEST:
        return Bonus(
            team1_bonus=FORMAT_BONUS if s1.bowling_avg < s2.bowling_avg else 0,
            team2_bonus=FORMAT_BONUS if s2.bowling_avg < s1.bowling_avg else 0,
        )
    if data.match_format == MatchFormat.T20:
        return Bonus(
            team1_bonus=FORMAT_BONUS if s1.batting_avg > T20_BATTING_THRESHOLD else 0,
            team2_bonus=FORMAT_BONUS if s2.batting_avg > T20_BATTING_THRESHOLD else 0,
        )
    return Bonus()


def team1_share(team1_score: float, team2_score: float) -> int:
    total = team1_score + team2_score
    if total == 0:
        return 50
    return round_half_up(team1_score / total * 100)


def pick_winner(team1: str, team2: str, share: int) -> Tuple[str, int]:
    # Strictly greater: an exact 50 goes to team2
    if share > 50:
        return team1, share
    return team2, 100 - share


class PredictionEngine:
    def __init__(
        self,
        live_source: Optional[LiveStatsSource] = None,
        sentiment_scorer: Optional[SentimentScorer] = None,
        rules: VenueRules = DEFAULT_VENUE_RULES,
        enrichment_timeout: float = ENRICHMENT_TIMEOUT,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self.live_source = live_source
        self.sentiment_scorer = sentiment_scorer
        self.rules = rules
        self.enrichment_timeout = enrichment_timeout
        # Shared by all predictions; workers start on first use
        self._executor = executor or ThreadPoolExecutor(
            max_workers=ENRICHMENT_WORKERS, thread_name_prefix="enrichment",
        )

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def predict(self, data: PredictionInput) -> PredictionResult:
        team1, team2 = data.team1, data.team2

        strength1 = estimate_strength(data.team1_stats, data.weather)
        strength2 = estimate_strength(data.team2_stats, data.weather)

        advantage = named_venue_advantage(data.venue, team1, team2, self.rules)
        named = Bonus(
            team1_bonus=self.rules.named_venue_bonus if advantage == team1 else 0,
            team2_bonus=self.rules.named_venue_bonus if advantage == team2 else 0,
        )

        venue = Bonus()
        if data.venue_details is not None:
            venue = venue_factors(data.venue_details, team1, team2, data.match_format, self.rules)

        fmt = format_bonus(data)

        live_stats, confidences = self._run_enrichments(data)

        live = Bonus()
        extra_factors = []
        if live_stats is not None:
            live = live_bonus(live_stats, team1, team2)
            extra_factors = live_factors(live_stats, team1, team2)

        sentiment1 = sentiment2 = 0.0
        if confidences is not None:
            sentiment1 = confidences[0] * SENTIMENT_SCALE
            sentiment2 = confidences[1] * SENTIMENT_SCALE

        team1_score = strength1 + named.team1_bonus + venue.team1_bonus + fmt.team1_bonus + live.team1_bonus + sentiment1
        team2_score = strength2 + named.team2_bonus + venue.team2_bonus + fmt.team2_bonus + live.team2_bonus + sentiment2

        share = team1_share(team1_score, team2_score)
        winner, probability = pick_winner(team1, team2, share)
        logger.info(
            "Prediction %s vs %s at %s: scores=%.2f/%.2f share=%d winner=%s (%d%%)",
            team1, team2, data.venue, team1_score, team2_score, share, winner, probability,
        )

        factors = explain(team1, team2, data, winner, self.rules) + extra_factors

        return PredictionResult(
            winner=winner,
            probability=probability,
            team1=team1,
            team2=team2,
            venue=data.venue,
            match_format=data.match_format,
            factors=factors,
            venue_details=data.venue_details,
            weather=data.weather,
            team1_stats=data.team1_stats,
            team2_stats=data.team2_stats,
            sentiment_used=confidences is not None,
            live_stats_used=live_stats is not None,
            live_data=live_stats,
            score_breakdown={
                team1: _breakdown(strength1, named.team1_bonus, venue.team1_bonus, fmt.team1_bonus,
                                  live.team1_bonus, sentiment1, team1_score),
                team2: _breakdown(strength2, named.team2_bonus, venue.team2_bonus, fmt.team2_bonus,
                                  live.team2_bonus, sentiment2, team2_score),
            },
        )

    def _sentiment_ready(self, data: PredictionInput) -> bool:
        if not data.use_sentiment or self.sentiment_scorer is None:
            return False
        status = self.sentiment_scorer.status()
        if status != ScorerStatus.LOADED:
            logger.warning("Sentiment requested but scorer is %s; skipping", status.value)
            return False
        return True

    def _run_enrichments(
        self, data: PredictionInput,
    ) -> Tuple[Optional[LiveMatchStats], Optional[Tuple[float, float]]]:
        """Fetch live stats and score sentiment concurrently; any failure or timeout yields None for that source."""
        want_live = data.match_id is not None and self.live_source is not None
        want_sentiment = self._sentiment_ready(data)
        if not want_live and not want_sentiment:
            return None, None

        deadline = time.monotonic() + self.enrichment_timeout
        live_future = self._executor.submit(self.live_source.get_live_stats, data.match_id) if want_live else None
        sentiment_future = self._executor.submit(self._score_sentiment, data) if want_sentiment else None
        live_stats = self._await(live_future, "live stats", deadline)
        confidences = self._await(sentiment_future, "sentiment", deadline)

        if want_live and live_stats is None:
            logger.warning("Live stats unavailable for match %s; continuing without them", data.match_id)
        return live_stats, confidences

    def _score_sentiment(self, data: PredictionInput) -> Tuple[float, float]:
        return (
            team_confidence(self.sentiment_scorer, data.team1, data.team1_stats),
            team_confidence(self.sentiment_scorer, data.team2, data.team2_stats),
        )

    @staticmethod
    def _await(future: Optional[Future], label: str, deadline: float):
        if future is None:
            return None
        try:
            return future.result(timeout=max(0.0, deadline - time.monotonic()))
        except FutureTimeout:
            # Drops it if still queued behind busy workers
            future.cancel()
            logger.warning("%s enrichment timed out; skipping", label)
        except Exception as e:
            logger.warning("%s enrichment failed; skipping: %s", label, e)
        return None


def _breakdown(strength, named, venue, fmt, live, sentiment, total) -> Dict[str, float]:
    return {
        "strength": round(strength, 2),
        "named_venue": named,
        "venue_factors": venue,
        "format": fmt,
        "live": live,
        "sentiment": round(sentiment, 2),
        "total": round(total, 2),
    }
