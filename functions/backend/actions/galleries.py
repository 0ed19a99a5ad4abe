"""
Band and fan galleries. Both hold `MediaItem`s; uploaded images go to the
blob store while linked images and videos are stored as URLs.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional
from urllib.parse import urlparse

from backend.actions.common import has_content, is_http_url, require_id, utc_now
from backend.dependencies import Services
from backend.errors import ValidationError
from backend.repository import ContentRepository, EntitySpec
from backend.storage import delete_quietly, upload_file
from backend.store import DESCENDING, Query
from shared.api import UploadedFile
from shared.constants import MAX_GALLERY_IMAGE_SIZE
from shared.firebase_constants import (
    BAND_GALLERY_COLLECTION,
    BAND_GALLERY_STORAGE_PATH,
    FAN_GALLERY_COLLECTION,
    FAN_GALLERY_STORAGE_PATH,
)
from shared.types import MediaItem, MediaType

logger = logging.getLogger(__name__)

ITEM_ID_MISSING = "Item ID not provided."

_YOUTUBE_SPLIT = re.compile(r"(vi/|v%3D|v=|/v/|youtu\.be/|/embed/)")
_FACEBOOK_HOSTS = ("facebook.com", "fb.com", "fb.watch")

BAND_MEDIA_SPEC = EntitySpec(
    collection=BAND_GALLERY_COLLECTION,
    entity_type=MediaItem,
    default_query=Query().order_by("createdAt", DESCENDING),
)

FAN_MEDIA_SPEC = EntitySpec(
    collection=FAN_GALLERY_COLLECTION,
    entity_type=MediaItem,
    default_query=Query().order_by("createdAt", DESCENDING),
)


def band_media(services: Services) -> ContentRepository[MediaItem]:
    return ContentRepository(services.store, services.cache, BAND_MEDIA_SPEC)


def fan_media(services: Services) -> ContentRepository[MediaItem]:
    return ContentRepository(services.store, services.cache, FAN_MEDIA_SPEC)


def youtube_video_id(url: str) -> Optional[str]:
    """Extracts the video id from watch, short, embed and /v/ YouTube URLs."""
    parts = _YOUTUBE_SPLIT.split(url)
    if len(parts) < 3:
        return None
    video_id = re.split(r"[?&]", parts[2])[0]
    return video_id or None


def is_facebook_url(url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    return any(host == h or host.endswith("." + h) for h in _FACEBOOK_HOSTS)


def _add_item(
    repo: ContentRepository[MediaItem],
    name: str,
    url: str,
    media_type: MediaType,
    storage_path: Optional[str] = None,
) -> MediaItem:
    data = {"name": name, "url": url, "type": media_type.value, "created_at": utc_now()}
    if storage_path:
        data["storage_path"] = storage_path
    doc_id = repo.add(data)
    return MediaItem(
        id=doc_id,
        name=name,
        url=url,
        type=media_type,
        storage_path=storage_path,
        created_at=data["created_at"],
    )


def _upload_image(
    services: Services, repo: ContentRepository[MediaItem], upload: UploadedFile, prefix: str
) -> MediaItem:
    if not upload.content_type.startswith("image/"):
        raise ValidationError("Only image files are allowed.")
    if upload.size > MAX_GALLERY_IMAGE_SIZE:
        raise ValidationError("El tamaño máximo es de 10MB.")
    result = upload_file(services.require_blob_store(), upload, prefix)
    return _add_item(repo, upload.filename, result.download_url, MediaType.IMAGE, result.path)


def _require_image_url(url: str) -> str:
    url = url.strip()
    if not is_http_url(url):
        raise ValidationError("Por favor, introduce una URL de imagen válida.")
    return url


def upload_band_media(
    services: Services,
    file: Optional[UploadedFile] = None,
    image_url: Optional[str] = None,
    video_url: Optional[str] = None,
) -> MediaItem:
    """
    Adds one item to the band gallery from, in order of precedence, an
    uploaded image, an image URL or a YouTube/Facebook video URL.
    """
    repo = band_media(services)
    if has_content(file):
        return _upload_image(services, repo, file, BAND_GALLERY_STORAGE_PATH)
    if image_url:
        return _add_item(repo, "Band Image", _require_image_url(image_url), MediaType.IMAGE)
    if video_url:
        video_url = video_url.strip()
        if is_facebook_url(video_url):
            return _add_item(repo, "Facebook Video", video_url, MediaType.FACEBOOK)
        video_id = youtube_video_id(video_url)
        if not video_id:
            raise ValidationError("Invalid YouTube URL provided.")
        embed_url = f"https://www.youtube.com/embed/{video_id}"
        return _add_item(repo, "YouTube Video", embed_url, MediaType.VIDEO)
    raise ValidationError("No image or video URL provided.")


def add_fan_media(
    services: Services,
    file: Optional[UploadedFile] = None,
    url: Optional[str] = None,
) -> MediaItem:
    repo = fan_media(services)
    if has_content(file):
        return _upload_image(services, repo, file, FAN_GALLERY_STORAGE_PATH)
    if not url:
        raise ValidationError("No URL provided.")
    return _add_item(repo, "Fan Image", _require_image_url(url), MediaType.IMAGE)


def list_band_media(services: Services) -> List[MediaItem]:
    return band_media(services).list()


def list_fan_media(services: Services) -> List[MediaItem]:
    return fan_media(services).list()


def _delete_item(services: Services, repo: ContentRepository[MediaItem], item_id: Optional[str]) -> None:
    item_id = require_id(item_id, ITEM_ID_MISSING)
    item = repo.get(item_id)
    if item is not None and item.storage_path:
        delete_quietly(services.require_blob_store(), item.storage_path, "gallery")
    repo.delete(item_id)


def delete_band_media(services: Services, item_id: Optional[str]) -> None:
    _delete_item(services, band_media(services), item_id)


def delete_fan_media(services: Services, item_id: Optional[str]) -> None:
    _delete_item(services, fan_media(services), item_id)
