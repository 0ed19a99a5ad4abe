"""
The band biography, a singleton document.
"""

from __future__ import annotations

from typing import Optional

from backend.actions.common import utc_now
from backend.dependencies import Services
from backend.errors import ValidationError
from backend.repository import ContentRepository, EntitySpec
from shared.firebase_constants import BAND_INFO_COLLECTION, BIO_DOC_ID
from shared.types import Biography

BIOGRAPHY_SPEC = EntitySpec(collection=BAND_INFO_COLLECTION, entity_type=Biography)


def _repository(services: Services) -> ContentRepository[Biography]:
    return ContentRepository(services.store, services.cache, BIOGRAPHY_SPEC)


def save_band_bio(services: Services, text: Optional[str]) -> None:
    if text is None:
        raise ValidationError("Biography text not provided.")
    _repository(services).set(
        BIO_DOC_ID, {"text": text, "updated_at": utc_now()}, merge=True
    )


def get_band_bio(services: Services) -> Optional[str]:
    biography = _repository(services).get(BIO_DOC_ID)
    return biography.text if biography else None
