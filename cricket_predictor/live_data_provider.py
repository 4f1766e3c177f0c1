import logging
from typing import Any, Dict, List, Optional

import requests

from cricket_predictor.cache import CacheClient, cache
from cricket_predictor.config import (
    CRICKET_API_BASE_URL,
    CRICKET_API_KEY,
    CURRENT_MATCHES_TTL,
    HTTP_TIMEOUT,
    LIVE_STATS_TTL,
)
from cricket_predictor.models import LiveMatchStats, to_dict

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    pass


def parse_match_stats(match_id: str, data: Dict[str, Any]) -> LiveMatchStats:
    """Convert the API's camelCase match stats payload into ``LiveMatchStats``."""
    h2h = data.get("h2h") or {}
    return LiveMatchStats.from_dict({
        "match_id": str(data.get("matchId") or match_id),
        "team_a": data.get("teamHomeName"),
        "team_b": data.get("teamAwayName"),
        "head_to_head": {
            "team_a_wins": h2h.get("teamHomeWins", 0),
            "team_b_wins": h2h.get("teamAwayWins", 0),
            "no_result": h2h.get("noResult", 0),
            "total": h2h.get("total", 0),
        },
        "recent_form": {
            team: {"matches_won": form.get("matchesWon", 0), "total_matches": form.get("totalMatches", 0)}
            for team, form in (data.get("recentForm") or {}).items()
        },
        "key_players": {
            team: [
                {"name": p["name"], "recent_form_rating": p.get("recentForm", 0), "role": p.get("role")}
                for p in players
            ]
            for team, players in (data.get("keyPlayers") or {}).items()
        },
    })


class LiveMatchDataSource:
    def __init__(
        self,
        base_url: str = CRICKET_API_BASE_URL,
        api_key: str = CRICKET_API_KEY,
        timeout: float = HTTP_TIMEOUT,
        cache_client: CacheClient = cache,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.cache = cache_client
        self.session = session or requests.Session()

    def _get(self, endpoint: str, **params) -> Any:
        url = f"{self.base_url}/{endpoint}"
        if self.api_key:
            params["apikey"] = self.api_key
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamError(f"Request to {endpoint} failed: {e}") from e

        if response.status_code != 200:
            raise UpstreamError(f"Error fetching {endpoint}: {response.status_code}")

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError(f"Invalid JSON from {endpoint}") from e

        data = payload.get("data") if isinstance(payload, dict) else None
        if data is None:
            status = payload.get("status") if isinstance(payload, dict) else None
            raise UpstreamError(f"No data in {endpoint} response (status={status})")
        return data

    def get_live_stats(self, match_id: str) -> Optional[LiveMatchStats]:
        """Head-to-head, recent form and key players for a match; None on any failure."""
        cache_key = f"live:stats:{match_id}"
        cached = self.cache.get(cache_key)
        if cached:
            return LiveMatchStats.from_dict(cached)

        try:
            data = self._get("match_stats", id=match_id)
            stats = parse_match_stats(match_id, data)
        except UpstreamError as e:
            logger.error("Live stats fetch failed for match %s: %s", match_id, e)
            return None
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Malformed live stats for match %s: %s", match_id, e)
            return None

        self.cache.set(cache_key, to_dict(stats), LIVE_STATS_TTL)
        logger.info("Live stats loaded for match %s", match_id)
        return stats

    def get_current_matches(self) -> List[Dict[str, Any]]:
        cached = self.cache.get("live:current_matches")
        if cached is not None:
            return cached

        try:
            data = self._get("currentMatches", offset=0)
        except UpstreamError as e:
            logger.error("Error fetching current matches: %s", e)
            return []

        matches = []
        for match in data:
            teams = match.get("teams") or []
            matches.append({
                "id": str(match.get("id", "")),
                "name": match.get("name") or " vs ".join(teams),
                "status": match.get("status", "In Progress"),
                "venue": match.get("venue", "Unknown Venue"),
                "date": match.get("date"),
                "teams": teams,
                "match_type": (match.get("matchType") or "").lower(),
                "match_started": bool(match.get("matchStarted", False)),
                "match_ended": bool(match.get("matchEnded", False)),
            })

        logger.info("Found %d current matches", len(matches))
        self.cache.set("live:current_matches", matches, CURRENT_MATCHES_TTL)
        return matches
