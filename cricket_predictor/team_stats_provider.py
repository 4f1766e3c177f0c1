import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

import pytz
import requests

from cricket_predictor.cache import CacheClient, cache
from cricket_predictor.config import HTTP_TIMEOUT, TEAM_STATS_TTL, TEAM_STATS_URL
from cricket_predictor.models import TeamStats

logger = logging.getLogger(__name__)

DEFAULT_TEAM_STATS = TeamStats(recent_wins=2, batting_avg=28.5, bowling_avg=30.2)

DEFAULT_TEAMS = [
    "India", "Australia", "England", "South Africa",
    "New Zealand", "Pakistan", "West Indies", "Sri Lanka",
    "Bangladesh", "Afghanistan",
]

# Season snapshot used when no remote stats service is configured
BASELINE_TEAM_STATS = {
    "India": TeamStats(recent_wins=4, batting_avg=36.8, bowling_avg=26.2),
    "Australia": TeamStats(recent_wins=3, batting_avg=33.5, bowling_avg=27.4),
    "England": TeamStats(recent_wins=2, batting_avg=31.2, bowling_avg=29.8),
    "South Africa": TeamStats(recent_wins=3, batting_avg=30.5, bowling_avg=28.1),
    "New Zealand": TeamStats(recent_wins=3, batting_avg=32.7, bowling_avg=26.9),
    "Pakistan": TeamStats(recent_wins=2, batting_avg=29.8, bowling_avg=31.2),
    "West Indies": TeamStats(recent_wins=1, batting_avg=27.3, bowling_avg=33.5),
    "Sri Lanka": TeamStats(recent_wins=2, batting_avg=28.6, bowling_avg=32.7),
    "Bangladesh": TeamStats(recent_wins=1, batting_avg=26.4, bowling_avg=34.8),
    "Afghanistan": TeamStats(recent_wins=2, batting_avg=25.9, bowling_avg=30.2),
}


@dataclass(frozen=True)
class TeamStatsSnapshot:
    team: str
    stats: TeamStats
    last_updated: datetime
    data_source: str


def _utcnow() -> datetime:
    return datetime.now(pytz.UTC)


def _parse_timestamp(value: Optional[str]) -> datetime:
    if not value:
        return _utcnow()
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = pytz.UTC.localize(parsed)
    return parsed.astimezone(pytz.UTC)


class TeamStatsSource:
    def __init__(
        self,
        url: str = TEAM_STATS_URL,
        timeout: float = HTTP_TIMEOUT,
        cache_client: CacheClient = cache,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.cache = cache_client
        self.session = session or requests.Session()

    def fetch(self, team: str) -> TeamStatsSnapshot:
        """Latest stats for a team; falls back to baseline, then to default stats."""
        if not self.url:
            stats = BASELINE_TEAM_STATS.get(team)
            if stats is None:
                logger.warning("No baseline stats for %s; using defaults", team)
                return TeamStatsSnapshot(team, DEFAULT_TEAM_STATS, _utcnow(), "default")
            return TeamStatsSnapshot(team, stats, _utcnow(), "baseline")

        cache_key = f"team:stats:{team.lower()}"
        cached = self.cache.get(cache_key)
        if cached:
            return self._from_payload(team, cached)

        try:
            response = self.session.post(self.url, json={"team": team}, timeout=self.timeout)
            if response.status_code != 200:
                logger.error("Error fetching team stats for %s: %s", team, response.status_code)
                return TeamStatsSnapshot(team, DEFAULT_TEAM_STATS, _utcnow(), "default")
            payload = response.json()
            snapshot = self._from_payload(team, payload)
        except requests.RequestException as e:
            logger.error("Failed to fetch stats for %s: %s", team, e)
            return TeamStatsSnapshot(team, DEFAULT_TEAM_STATS, _utcnow(), "default")
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Malformed stats payload for %s: %s", team, e)
            return TeamStatsSnapshot(team, DEFAULT_TEAM_STATS, _utcnow(), "default")

        self.cache.set(cache_key, payload, TEAM_STATS_TTL)
        logger.info("Received team stats for %s from %s", team, snapshot.data_source)
        return snapshot

    @staticmethod
    def _from_payload(team: str, payload: dict) -> TeamStatsSnapshot:
        stats = payload["stats"]
        return TeamStatsSnapshot(
            team=payload.get("team", team),
            stats=TeamStats(
                recent_wins=int(stats["recentWins"]),
                batting_avg=float(stats["battingAvg"]),
                bowling_avg=float(stats["bowlingAvg"]),
            ),
            last_updated=_parse_timestamp(stats.get("lastUpdated")),
            data_source=payload.get("dataSource", "remote"),
        )

    def list_teams(self) -> List[str]:
        if not self.url:
            return list(DEFAULT_TEAMS)
        try:
            response = self.session.get(self.url, timeout=self.timeout)
            if response.status_code != 200:
                logger.error("Error fetching teams list: %s", response.status_code)
                return list(DEFAULT_TEAMS)
            teams = response.json().get("teams")
        except (requests.RequestException, ValueError, AttributeError) as e:
            logger.error("Failed to fetch teams list: %s", e)
            return list(DEFAULT_TEAMS)
        return [str(t) for t in teams] if teams else list(DEFAULT_TEAMS)
