import logging
import threading
from typing import List, Optional

from fastapi import BackgroundTasks, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, field_validator, model_validator

from cricket_predictor.config import CORS_ORIGINS, SENTIMENT_AUTOLOAD
from cricket_predictor.live_data_provider import LiveMatchDataSource
from cricket_predictor.models import (
    InvalidPredictionInput,
    MatchFormat,
    PredictionInput,
    TeamStats,
    VenueProfile,
    Weather,
    WeatherCondition,
    to_dict,
    validate_prediction_input,
)
from cricket_predictor.prediction_engine import PredictionEngine
from cricket_predictor.sentiment import OpenAISentimentScorer, ScorerStatus
from cricket_predictor.team_stats_provider import TeamStatsSource
from cricket_predictor.venue_directory import VenueDirectory
from cricket_predictor.weather_provider import WeatherSource

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

venue_directory = VenueDirectory()
live_source = LiveMatchDataSource()
weather_source = WeatherSource()
team_stats_source = TeamStatsSource()
sentiment_scorer = OpenAISentimentScorer()
engine = PredictionEngine(live_source=live_source, sentiment_scorer=sentiment_scorer)

app = FastAPI(title="Cricket Win Predictor", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup():
    if SENTIMENT_AUTOLOAD:
        threading.Thread(target=sentiment_scorer.initialize, name="sentiment-init", daemon=True).start()


@app.on_event("shutdown")
def on_shutdown():
    engine.close()


class WeatherModel(BaseModel):
    temperature: float
    humidity: float = Field(ge=0, le=100)
    condition: WeatherCondition

    def to_weather(self) -> Weather:
        return Weather(temperature=self.temperature, humidity=self.humidity, condition=self.condition)


class TeamStatsModel(BaseModel):
    recent_wins: int = Field(ge=0, le=5)
    batting_avg: float = Field(ge=0)
    bowling_avg: float = Field(ge=0)

    def to_stats(self) -> TeamStats:
        return TeamStats(recent_wins=self.recent_wins, batting_avg=self.batting_avg, bowling_avg=self.bowling_avg)


class VenueModel(BaseModel):
    name: str
    country: str
    width_meters: float = Field(gt=0)
    height_meters: float = Field(gt=0)
    is_odi_only: bool = False
    short_name: Optional[str] = None
    city: Optional[str] = None
    batting_record: Optional[str] = None
    bowling_record: Optional[str] = None
    notes: Optional[str] = None

    def to_profile(self) -> VenueProfile:
        return VenueProfile(**self.model_dump())


class PredictionRequest(BaseModel):
    team1: str = Field(min_length=1)
    team2: str = Field(min_length=1)
    venue: str = Field(min_length=1)
    match_format: MatchFormat
    weather: Optional[WeatherModel] = None
    team1_stats: Optional[TeamStatsModel] = None
    team2_stats: Optional[TeamStatsModel] = None
    venue_details: Optional[VenueModel] = None
    use_sentiment: bool = False
    match_id: Optional[str] = None

    @field_validator("team1", "team2", "venue")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @model_validator(mode="after")
    def teams_differ(self):
        if self.team1.lower() == self.team2.lower():
            raise ValueError("Team 1 and Team 2 must be different")
        return self


@app.post("/predict")
def predict(request: PredictionRequest, background_tasks: BackgroundTasks):
    venue_details = request.venue_details.to_profile() if request.venue_details else venue_directory.lookup(request.venue)

    if request.weather is not None:
        weather = request.weather.to_weather()
    elif venue_details is not None:
        weather = weather_source.get_weather(venue_details.city or venue_details.name, venue_details.country)
    else:
        weather = weather_source.get_weather(request.venue)

    team1_stats = request.team1_stats.to_stats() if request.team1_stats else team_stats_source.fetch(request.team1).stats
    team2_stats = request.team2_stats.to_stats() if request.team2_stats else team_stats_source.fetch(request.team2).stats

    if request.use_sentiment and sentiment_scorer.status() == ScorerStatus.UNLOADED:
        # Loads for later requests; this one goes ahead without sentiment
        background_tasks.add_task(sentiment_scorer.initialize)

    try:
        data = validate_prediction_input(PredictionInput(
            team1=request.team1,
            team2=request.team2,
            venue=request.venue,
            match_format=request.match_format,
            weather=weather,
            team1_stats=team1_stats,
            team2_stats=team2_stats,
            venue_details=venue_details,
            use_sentiment=request.use_sentiment,
            match_id=request.match_id,
        ))
    except InvalidPredictionInput as e:
        raise HTTPException(status_code=422, detail=str(e))

    return to_dict(engine.predict(data))


@app.get("/venues")
def list_venues(country: Optional[str] = None, q: Optional[str] = None) -> List[dict]:
    venues = venue_directory.search(q, country) if q else venue_directory.list(country)
    return to_dict(venues)


@app.get("/venues/countries")
def venue_countries() -> List[str]:
    return venue_directory.countries()


@app.get("/venues/{name}")
def get_venue(name: str):
    venue = venue_directory.lookup(name)
    if venue is None:
        raise HTTPException(status_code=404, detail=f"Unknown venue: {name}")
    return to_dict(venue)


@app.get("/teams")
def list_teams() -> List[str]:
    return team_stats_source.list_teams()


@app.get("/teams/{team}/stats")
def team_stats(team: str):
    snapshot = team_stats_source.fetch(team)
    return {
        "team": snapshot.team,
        "stats": to_dict(snapshot.stats),
        "last_updated": snapshot.last_updated.isoformat(),
        "data_source": snapshot.data_source,
    }


@app.get("/weather")
def weather(location: str = Query(..., min_length=1), country: str = ""):
    return to_dict(weather_source.get_weather(location, country))


@app.get("/matches/current")
def current_matches():
    return live_source.get_current_matches()


@app.get("/sentiment/status")
def sentiment_status():
    return {"status": sentiment_scorer.status().value, "error": sentiment_scorer.error}


@app.post("/sentiment/initialize")
def initialize_sentiment(background_tasks: BackgroundTasks):
    if sentiment_scorer.status() in (ScorerStatus.UNLOADED, ScorerStatus.ERROR):
        background_tasks.add_task(sentiment_scorer.initialize)
    return {"status": sentiment_scorer.status().value}
