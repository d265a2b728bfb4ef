"""
PlantCare AI - Community Service
Seeds the community feed with stock plant photos from Pexels when it is empty.
"""

import logging
import os
import random
from datetime import datetime, timezone

import requests

from constants import DEFAULT_CAPTIONS
from models import CommunityPost

logger = logging.getLogger(__name__)

PEXELS_SEARCH_URL = "https://api.pexels.com/v1/search"
SEED_POST_COUNT = 20


def fetch_plant_posts_from_pexels() -> list:
    """
    Fetch plant photos from Pexels and dress them up as community posts.
    Raises on HTTP failure; returns [] when PEXELS_API_KEY is unset.
    """
    api_key = os.getenv("PEXELS_API_KEY")
    if not api_key:
        logger.warning("PEXELS_API_KEY not set. No stock posts available.")
        return []

    response = requests.get(
        PEXELS_SEARCH_URL,
        params={"query": "plants", "per_page": 40},
        headers={"Authorization": api_key},
        timeout=10,
    )
    response.raise_for_status()
    photos = response.json().get("photos", [])

    selected = random.sample(photos, min(SEED_POST_COUNT, len(photos)))
    now_ms = int(datetime.now(timezone.utc).timestamp() * 1000)

    return [
        CommunityPost(
            id=f"pexels-{photo['id']}",
            image_url=photo["src"].get("large") or photo["src"]["original"],
            caption=DEFAULT_CAPTIONS[idx % len(DEFAULT_CAPTIONS)],
            # spread over the last ~11 days so the feed looks lived-in
            timestamp=now_ms - random.randint(0, 1_000_000_000),
        )
        for idx, photo in enumerate(selected)
    ]


def seed_posts_if_empty(feed) -> list:
    """Fill an empty feed from Pexels. Returns the feed contents afterwards."""
    posts = feed.get_all()
    if posts:
        return posts

    try:
        stock = fetch_plant_posts_from_pexels()
    except (requests.exceptions.RequestException, KeyError, ValueError) as e:
        logger.warning(f"⚠️  Pexels fallback failed: {e}")
        return []

    # add() prepends, so insert oldest first to end up newest-first
    for post in sorted(stock, key=lambda p: p.timestamp):
        feed.add(post)
    return feed.get_all()
