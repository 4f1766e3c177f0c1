import os

from dotenv import load_dotenv

load_dotenv()

CACHE_ENABLED = os.getenv("CACHE_ENABLED", "true").lower() in {"1", "true", "yes"}
REDIS_URL = os.getenv("REDIS_URL")
CACHE_NAMESPACE = os.getenv("CACHE_NAMESPACE", "cricketpredictor")
CACHE_VERSION = os.getenv("CACHE_VERSION", "v1")
# In-memory fallback limits
CACHE_MAX_ENTRIES = int(os.getenv("CACHE_MAX_ENTRIES", "5000"))
CACHE_SWEEP_INTERVAL = float(os.getenv("CACHE_SWEEP_INTERVAL", "60"))

LIVE_STATS_TTL = 30
CURRENT_MATCHES_TTL = 60
WEATHER_TTL = 900
TEAM_STATS_TTL = 3600

CRICKET_API_BASE_URL = os.getenv("CRICKET_API_BASE_URL", "https://api.cricapi.com/v1")
CRICKET_API_KEY = os.getenv("CRICKET_API_KEY", "")

OPENWEATHER_URL = os.getenv("OPENWEATHER_URL", "https://api.openweathermap.org/data/2.5/weather")
OPENWEATHER_API_KEY = os.getenv("OPENWEATHER_API_KEY", "")

# Remote team stats endpoint; the bundled baseline table is used when unset
TEAM_STATS_URL = os.getenv("TEAM_STATS_URL", "")

OPENAI_SENTIMENT_MODEL = os.getenv("OPENAI_SENTIMENT_MODEL", "gpt-4o-mini")
SENTIMENT_AUTOLOAD = os.getenv("SENTIMENT_AUTOLOAD", "false").lower() in {"1", "true", "yes"}

HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))
# Upper bound on each optional enrichment (live stats, sentiment) inside one prediction
ENRICHMENT_TIMEOUT = float(os.getenv("ENRICHMENT_TIMEOUT", "15"))
ENRICHMENT_WORKERS = int(os.getenv("ENRICHMENT_WORKERS", "8"))

VENUES_CSV_PATH = os.getenv(
    "VENUES_CSV_PATH",
    os.path.join(os.path.dirname(__file__), "data", "cricket_grounds.csv"),
)

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]
