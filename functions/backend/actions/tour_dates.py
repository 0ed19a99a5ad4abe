"""
Tour dates. Each date is a link to the social media post announcing it.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from backend.actions.common import is_http_url, require_id, utc_now
from backend.dependencies import Services
from backend.errors import ValidationError
from backend.repository import ContentRepository, EntitySpec
from backend.store import DESCENDING, Query
from shared.firebase_constants import TOUR_DATES_COLLECTION
from shared.types import TourDate

logger = logging.getLogger(__name__)


def _read_legacy_schema(data: dict) -> dict:
    # Early documents stored eventName/venue/city/date/time/venueUrl.
    if not data.get("post_url"):
        data["post_url"] = data.get("venue_url") or ""
    return data


TOUR_DATE_SPEC = EntitySpec(
    collection=TOUR_DATES_COLLECTION,
    entity_type=TourDate,
    default_query=Query().order_by("createdAt", DESCENDING),
    normalize=_read_legacy_schema,
)


def tour_dates(services: Services) -> ContentRepository[TourDate]:
    return ContentRepository(services.store, services.cache, TOUR_DATE_SPEC)


def add_tour_date(services: Services, post_url: Optional[str]) -> str:
    post_url = (post_url or "").strip()
    if not post_url:
        raise ValidationError("Post URL is required.")
    if not is_http_url(post_url):
        raise ValidationError("Por favor, introduce una URL válida.")
    return tour_dates(services).add({"post_url": post_url, "created_at": utc_now()})


def list_tour_dates(services: Services) -> List[TourDate]:
    return tour_dates(services).list()


def delete_tour_date(services: Services, date_id: Optional[str]) -> None:
    date_id = require_id(date_id, "Date ID not provided.")
    tour_dates(services).delete(date_id)
