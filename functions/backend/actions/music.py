"""
Songs: audio file plus cover art in the blob store, metadata in the content
store. Songs are displayed in ascending `order`; songs created before manual
ordering existed have no `order` and follow, newest first.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from backend.actions.common import has_content, require_id, utc_now
from backend.dependencies import Services
from backend.errors import DocumentNotFound, ValidationError
from backend.repository import ContentRepository, EntitySpec
from backend.storage import delete_quietly, upload_file
from backend.store import DESCENDING, Query
from shared.api import ActionResult, SongOrderItem, UploadedFile
from shared.constants import (
    ACCEPTED_AUDIO_TYPES,
    ACCEPTED_IMAGE_TYPES,
    MAX_AUDIO_FILE_SIZE,
    MAX_COVER_FILE_SIZE,
)
from shared.firebase_constants import MUSIC_COLLECTION, MUSIC_STORAGE_PATH
from shared.types import Song

logger = logging.getLogger(__name__)

AUDIO_PREFIX = f"{MUSIC_STORAGE_PATH}/audio"
COVER_PREFIX = f"{MUSIC_STORAGE_PATH}/covers"

SONG_SPEC = EntitySpec(
    collection=MUSIC_COLLECTION,
    entity_type=Song,
    default_query=Query().order_by("createdAt", DESCENDING),
)


def songs(services: Services) -> ContentRepository[Song]:
    return ContentRepository(services.store, services.cache, SONG_SPEC)


def _validate_audio(upload: UploadedFile) -> None:
    if upload.size > MAX_AUDIO_FILE_SIZE:
        raise ValidationError("El tamaño máximo es de 50MB.")
    if upload.content_type not in ACCEPTED_AUDIO_TYPES:
        raise ValidationError("Solo se aceptan formatos .mp3, .wav y .ogg")


def _validate_cover(upload: UploadedFile) -> None:
    if upload.size > MAX_COVER_FILE_SIZE:
        raise ValidationError("El tamaño máximo es de 5MB.")
    if upload.content_type not in ACCEPTED_IMAGE_TYPES:
        raise ValidationError("Solo se aceptan formatos .jpg, .jpeg, .png y .webp")


def add_song(
    services: Services,
    title: Optional[str],
    artist: Optional[str],
    audio_file: Optional[UploadedFile],
    cover_file: Optional[UploadedFile],
) -> str:
    """
    Uploads the audio and cover files concurrently, then records the song at
    the end of the current ordering.

    If one upload fails the action fails; the other upload is not removed.
    """
    title = (title or "").strip()
    artist = (artist or "").strip()
    if not title or not artist or not has_content(audio_file) or not has_content(cover_file):
        raise ValidationError("Missing required fields.")
    _validate_audio(audio_file)
    _validate_cover(cover_file)
    blob_store = services.require_blob_store()

    with ThreadPoolExecutor(max_workers=2) as executor:
        audio_future = executor.submit(upload_file, blob_store, audio_file, AUDIO_PREFIX)
        cover_future = executor.submit(upload_file, blob_store, cover_file, COVER_PREFIX)
    audio_upload = audio_future.result()
    cover_upload = cover_future.result()

    repo = songs(services)
    return repo.add(
        {
            "title": title,
            "artist": artist,
            "audio_url": audio_upload.download_url,
            "cover_url": cover_upload.download_url,
            "audio_path": audio_upload.path,
            "cover_path": cover_upload.path,
            "order": repo.count(),
            "created_at": utc_now(),
        }
    )


def list_songs(services: Services) -> List[Song]:
    # Ordering by `order` in the store would drop songs that lack the field.
    newest_first = songs(services).list()
    return sorted(
        newest_first,
        key=lambda song: (song.order is None, song.order if song.order is not None else 0),
    )


def delete_song(services: Services, song: Optional[Song]) -> None:
    """
    Deletes the song document and both of its files concurrently. File
    deletion failures are logged and never block removing the document.
    """
    require_id(song.id if song else None, "Song ID not provided.")
    blob_store = services.require_blob_store()
    repo = songs(services)

    with ThreadPoolExecutor(max_workers=3) as executor:
        executor.submit(delete_quietly, blob_store, song.audio_path, "audio")
        executor.submit(delete_quietly, blob_store, song.cover_path, "cover")
        document = executor.submit(repo.store.delete, repo.collection, song.id)
    document.result()
    logger.info("Deleted song %s", song.id)
    repo.revalidate()


def delete_song_by_id(services: Services, song_id: Optional[str]) -> None:
    song_id = require_id(song_id, "Song ID not provided.")
    song = songs(services).get(song_id)
    if song is None:
        raise DocumentNotFound(MUSIC_COLLECTION, song_id)
    delete_song(services, song)


def update_song_order(
    services: Services, items: Sequence[SongOrderItem]
) -> ActionResult:
    """
    Applies a complete ordering in one atomic batch. Concurrent submissions
    are not reconciled: the last committed batch wins.
    """
    try:
        songs(services).batch_update((item.id, {"order": item.order}) for item in items)
    except Exception as e:
        logger.error("Failed to update song order: %s", e)
        return ActionResult(success=False, error=str(e))
    return ActionResult(success=True)
