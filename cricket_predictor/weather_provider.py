import logging
from typing import Optional

import requests

from cricket_predictor.cache import CacheClient, cache
from cricket_predictor.config import HTTP_TIMEOUT, OPENWEATHER_API_KEY, OPENWEATHER_URL, WEATHER_TTL
from cricket_predictor.models import Weather, WeatherCondition

logger = logging.getLogger(__name__)

DEFAULT_WEATHER = Weather(temperature=25.0, humidity=50.0, condition=WeatherCondition.SUNNY)

# Venue directory country codes to ISO 3166 codes understood by OpenWeatherMap
COUNTRY_ISO_CODES = {
    "Aus": "AU", "Ind": "IN", "UK": "GB", "SA": "ZA", "NZ": "NZ", "Pak": "PK",
    "SL": "LK", "Ban": "BD", "Afg": "AF", "Zim": "ZW", "UAE": "AE",
}


def map_weather_condition(weather_id: int) -> WeatherCondition:
    """OpenWeatherMap condition code to the simplified condition set."""
    if 200 <= weather_id < 300:
        return WeatherCondition.THUNDERSTORM
    if 300 <= weather_id < 400:
        return WeatherCondition.DRIZZLE
    if 500 <= weather_id < 600:
        return WeatherCondition.RAINY
    if 600 <= weather_id < 700:
        return WeatherCondition.SNOW
    if 700 <= weather_id < 800:
        return WeatherCondition.FOGGY
    if weather_id == 800:
        return WeatherCondition.SUNNY
    if weather_id in (801, 802):
        return WeatherCondition.PARTLY_CLOUDY
    if weather_id == 803:
        return WeatherCondition.CLOUDY
    if weather_id == 804:
        return WeatherCondition.OVERCAST
    return WeatherCondition.SUNNY


class WeatherSource:
    def __init__(
        self,
        api_key: str = OPENWEATHER_API_KEY,
        url: str = OPENWEATHER_URL,
        timeout: float = HTTP_TIMEOUT,
        cache_client: CacheClient = cache,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.url = url
        self.timeout = timeout
        self.cache = cache_client
        self.session = session or requests.Session()

    def get_weather(self, location: str, country: str = "") -> Weather:
        """Current weather at a location; never raises, falls back to ``DEFAULT_WEATHER``."""
        if not location:
            logger.info("No location provided for weather data")
            return DEFAULT_WEATHER
        if not self.api_key:
            logger.warning("OPENWEATHER_API_KEY not set; using default weather")
            return DEFAULT_WEATHER

        country_code = COUNTRY_ISO_CODES.get(country, country) if country else ""
        query = f"{location},{country_code}" if country_code else location
        cache_key = f"weather:{query.lower()}"
        cached = self.cache.get(cache_key)
        if cached:
            return Weather(
                temperature=cached["temperature"],
                humidity=cached["humidity"],
                condition=WeatherCondition(cached["condition"]),
            )

        try:
            response = self.session.get(
                self.url,
                params={"q": query, "units": "metric", "appid": self.api_key},
                timeout=self.timeout,
            )
            if response.status_code != 200:
                logger.error("Weather API error for %s: %s", query, response.status_code)
                return DEFAULT_WEATHER
            data = response.json()
            weather = Weather(
                temperature=float(round(data["main"]["temp"])),
                humidity=float(data["main"]["humidity"]),
                condition=map_weather_condition(int(data["weather"][0]["id"])),
            )
        except requests.RequestException as e:
            logger.error("Error fetching weather for %s: %s", query, e)
            return DEFAULT_WEATHER
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error("Malformed weather payload for %s: %s", query, e)
            return DEFAULT_WEATHER

        self.cache.set(
            cache_key,
            {"temperature": weather.temperature, "humidity": weather.humidity, "condition": weather.condition.value},
            WEATHER_TTL,
        )
        return weather
