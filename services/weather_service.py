"""
PlantCare AI - Weather Service (OpenWeatherMap)
Current conditions by city name, used by the weather advisor and regional outlook.

Lookups never raise: failures come back as {"error": "..."} with distinct
messages for a bad key and an unknown city.
"""

import json
import logging
import os

import requests

logger = logging.getLogger(__name__)

OWM_BASE_URL    = "https://api.openweathermap.org/data/2.5"
OWM_WEATHER_URL = f"{OWM_BASE_URL}/weather"
OWM_ICON_URL    = "https://openweathermap.org/img/wn/{icon}@2x.png"


def fetch_current_weather(city: str) -> dict:
    """
    Fetch current weather for a city.

    Returns a dict with the keys the front end expects:
        city, temperature, humidity, description, iconUrl,
        rain (mm in the last hour, only when reported),
        coordinates {lat, lon} (only when reported)
    or {"error": message}.
    """
    api_key = os.getenv("OPENWEATHER_API_KEY")
    if not api_key:
        logger.warning("OPENWEATHER_API_KEY not set.")
        return {"error": "Weather API Key not configured."}

    try:
        params = {"q": city, "appid": api_key, "units": "metric"}
        response = requests.get(OWM_WEATHER_URL, params=params, timeout=10)

        if response.status_code == 401:
            return {"error": "Invalid Weather API Key. Please contact support."}
        if response.status_code == 404:
            return {"error": f'City "{city}" not found. Please check the spelling.'}
        if not response.ok:
            try:
                message = response.json().get("message")
            except ValueError:
                message = None
            return {"error": message or f"HTTP error! status: {response.status_code}"}

        return _parse_current(response.json())

    except requests.exceptions.Timeout:
        logger.error("OpenWeatherMap API request timed out.")
        return {"error": "Weather API timed out."}
    except (requests.exceptions.RequestException, KeyError, IndexError, ValueError) as e:
        logger.error(f"Weather API error: {e}")
        return {"error": str(e) or "Failed to fetch weather data."}


def _parse_current(data: dict) -> dict:
    """Map the OWM current-weather payload onto the front end's field names."""
    condition = data["weather"][0]
    weather = {
        "city":        data.get("name", ""),
        "temperature": data["main"]["temp"],
        "humidity":    data["main"]["humidity"],
        "description": condition.get("description", ""),
        "iconUrl":     OWM_ICON_URL.format(icon=condition.get("icon", "")),
    }

    rain = (data.get("rain") or {}).get("1h")
    if rain is not None:
        weather["rain"] = rain

    coord = data.get("coord")
    if coord:
        weather["coordinates"] = {"lat": coord["lat"], "lon": coord["lon"]}

    return weather


def weather_snapshot(weather: dict) -> str:
    """JSON summary handed to the advice prompt."""
    return json.dumps({
        "temperature":       weather.get("temperature"),
        "humidity":          weather.get("humidity"),
        "description":       weather.get("description"),
        "rain_last_hour_mm": weather.get("rain") or 0,
    })
