"""
PlantCare AI - Video Service
Related YouTube videos for a diagnosed plant or disease.
"""

import logging
import os

import requests

logger = logging.getLogger(__name__)

YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"


def fetch_related_videos(query: str, max_results: int = 2) -> list:
    """Returns [{title, thumbnail, videoId}]; empty when unconfigured or on failure."""
    api_key = os.getenv("YOUTUBE_API_KEY")
    if not api_key or not query.strip():
        return []

    params = {
        "part":            "snippet",
        "type":            "video",
        "videoEmbeddable": "true",
        "q":               query,
        "maxResults":      max_results,
        "key":             api_key,
    }
    try:
        response = requests.get(YOUTUBE_SEARCH_URL, params=params, timeout=10)
        response.raise_for_status()
        items = response.json().get("items", [])
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning(f"⚠️  YouTube search failed for {query!r}: {e}")
        return []

    videos = []
    for item in items:
        snippet = item.get("snippet", {})
        video_id = item.get("id", {}).get("videoId")
        if not video_id:
            continue
        videos.append({
            "title":     snippet.get("title", ""),
            "thumbnail": snippet.get("thumbnails", {}).get("medium", {}).get("url", ""),
            "videoId":   video_id,
        })
    return videos


def video_query(plant_name: str, disease_name: str) -> str:
    """Search phrase for a diagnosis; healthy plants get a care query instead."""
    disease = (disease_name or "").strip()
    if disease and disease.upper() != "N/A":
        return f"{plant_name} {disease} treatment".strip()
    return f"{plant_name} plant care".strip()
