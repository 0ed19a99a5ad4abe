"""
Aggregated payloads for the public home page and the admin dashboard.

Payloads are cached by page path and rebuilt on the next request after a
content write invalidates them.
"""

from __future__ import annotations

import logging
from typing import Callable

from fastapi.encoders import jsonable_encoder

from backend.actions import biography, fan_comments, galleries, music, tour_dates
from backend.dependencies import Services
from shared.constants import ADMIN_PATH, HOME_PATH
from shared.types import CommentStatus

logger = logging.getLogger(__name__)


def _content(services: Services, comment_status: CommentStatus | None) -> dict:
    return {
        "tour_dates": tour_dates.list_tour_dates(services),
        "songs": music.list_songs(services),
        "band_media": galleries.list_band_media(services),
        "fan_media": galleries.list_fan_media(services),
        "biography": biography.get_band_bio(services),
        "fan_comments": fan_comments.list_fan_comments(services, comment_status),
    }


def build_home_payload(services: Services) -> dict:
    return jsonable_encoder(_content(services, CommentStatus.APPROVED))


def build_admin_payload(services: Services) -> dict:
    return jsonable_encoder(_content(services, None))


def cached_page(
    services: Services, path: str, build: Callable[[Services], dict]
) -> dict:
    payload = services.cache.get(path)
    if payload is not None:
        return payload
    logger.info("Rebuilding page payload for %s", path)
    generation = services.cache.generation(path)
    payload = build(services)
    if not services.cache.set(path, payload, generation):
        logger.info("%s was invalidated while rebuilding; not caching it.", path)
    return payload


def home_page(services: Services) -> dict:
    return cached_page(services, HOME_PATH, build_home_payload)


def admin_page(services: Services) -> dict:
    return cached_page(services, ADMIN_PATH, build_admin_payload)
