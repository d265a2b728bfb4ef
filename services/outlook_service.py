"""
PlantCare AI - Regional Outlook
Weather and crop insight for a district, fetched side by side.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor

from services.ai_service import get_crop_insights
from services.weather_service import fetch_current_weather

logger = logging.getLogger(__name__)


def city_for_district(district: str) -> str:
    """'Ballari (Bellary)' -> 'Ballari'; OpenWeatherMap knows the plain name."""
    return re.sub(r"\s*\(.*?\)\s*", " ", district).strip()


def get_regional_outlook(district: str, month: str) -> dict:
    """
    Issue the weather lookup and the crop-insight call concurrently and join both.
    If either fails the whole outlook fails: {"error": ...} with no partial data.
    """
    with ThreadPoolExecutor(max_workers=2) as pool:
        weather_future = pool.submit(fetch_current_weather, city_for_district(district))
        insight_future = pool.submit(get_crop_insights, district, month)
        weather = weather_future.result()
        insight = insight_future.result()

    if "error" in weather:
        logger.warning(f"⚠️  Outlook for {district} failed on weather: {weather['error']}")
        return {"error": weather["error"]}
    if insight.error:
        logger.warning(f"⚠️  Outlook for {district} failed on crop insight: {insight.error}")
        return {"error": insight.error}

    return {"weather": weather, "cropInsight": insight.to_dict()}
