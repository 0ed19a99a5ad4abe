# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

# Cloud functions for the band site backend - content management callables.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Standard library imports
import base64
import binascii
from dataclasses import asdict, is_dataclass
from datetime import datetime
from functools import lru_cache
from typing import Any, Callable, Optional

# Third-party library imports
from firebase_functions import https_fn, logger, options

# Local application imports
from backend.actions import ai, biography, booking, fan_comments, galleries, music, tour_dates
from backend.config import get_settings
from backend.dependencies import Services, build_services
from backend.errors import (
    ConfigurationError,
    DocumentNotFound,
    IndexRequired,
    ValidationError,
)
from shared.api import BookingInquiry, SongOrderItem, UploadedFile
from shared.constants import DEFAULT_COMMENTS_PAGE_SIZE
from shared.json_utils import convert_keys
from shared.types import CommentStatus

UPLOAD_MEMORY = options.MemoryOption.GB_1


@lru_cache(maxsize=1)
def _get_services() -> Services:
    return build_services(get_settings())


def _request_data(req: https_fn.CallableRequest) -> dict:
    return convert_keys(req.data or {}, "camel_to_snake")


def _require_admin(req: https_fn.CallableRequest) -> None:
    if req.auth is None:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.UNAUTHENTICATED,
            "Authentication required.",
        )


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_encode(v) for v in value]
    return value


def _to_json(value: Any) -> Any:
    """Dataclasses (or lists of them) to camelCase JSON-compatible dicts."""
    if isinstance(value, list):
        return [_to_json(v) for v in value]
    if is_dataclass(value):
        value = asdict(value)
    return convert_keys(_encode(value), "snake_to_camel")


def _decode_upload(payload: Optional[dict]) -> Optional[UploadedFile]:
    """
    Files are sent to callables as `{name, dataUri}` where `dataUri` is a
    base64 `data:<mime>;base64,...` URI.
    """
    if not payload:
        return None
    data_uri = payload.get("data_uri") or ""
    header, _, encoded = data_uri.partition(",")
    if not header.startswith("data:") or not header.endswith(";base64"):
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT, "Invalid file encoding."
        )
    try:
        data = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT, "Invalid file encoding."
        ) from e
    return UploadedFile(
        filename=payload.get("name") or "file",
        content_type=header[len("data:") : -len(";base64")],
        data=data,
    )


def _run(action: Callable[..., Any], *args, **kwargs) -> Any:
    """Runs a server action, mapping its errors to callable error codes."""
    try:
        return action(*args, **kwargs)
    except ValidationError as e:
        raise https_fn.HttpsError(https_fn.FunctionsErrorCode.INVALID_ARGUMENT, str(e))
    except DocumentNotFound as e:
        raise https_fn.HttpsError(https_fn.FunctionsErrorCode.NOT_FOUND, str(e))
    except (ConfigurationError, IndexRequired) as e:
        logger.error(f"{action.__name__} failed: {e}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.FAILED_PRECONDITION, str(e)
        )


# ---------------------------------------------------------------------------
# Tour dates
# ---------------------------------------------------------------------------


@https_fn.on_call()
def add_tour_date(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    date_id = _run(tour_dates.add_tour_date, _get_services(), data.get("post_url"))
    return {"id": date_id}


@https_fn.on_call()
def get_tour_dates(req: https_fn.CallableRequest) -> list:
    return _to_json(_run(tour_dates.list_tour_dates, _get_services()))


@https_fn.on_call()
def delete_tour_date(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    _run(tour_dates.delete_tour_date, _get_services(), data.get("date_id"))
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Music
# ---------------------------------------------------------------------------


@https_fn.on_call(memory=UPLOAD_MEMORY, timeout_sec=300)
def add_song(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    song_id = _run(
        music.add_song,
        _get_services(),
        data.get("title"),
        data.get("artist"),
        _decode_upload(data.get("audio_file")),
        _decode_upload(data.get("cover_file")),
    )
    return {"id": song_id}


@https_fn.on_call()
def get_songs(req: https_fn.CallableRequest) -> list:
    return _to_json(_run(music.list_songs, _get_services()))


@https_fn.on_call()
def delete_song(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    _run(music.delete_song_by_id, _get_services(), data.get("song_id"))
    return {"status": "ok"}


@https_fn.on_call()
def update_song_order(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    try:
        items = [
            SongOrderItem(id=str(item["id"]), order=int(item["order"]))
            for item in data.get("items") or []
        ]
    except (KeyError, TypeError, ValueError) as e:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT, "Invalid song order."
        ) from e
    return _to_json(music.update_song_order(_get_services(), items))


# ---------------------------------------------------------------------------
# Fan comments
# ---------------------------------------------------------------------------


@https_fn.on_call()
def add_fan_comment(req: https_fn.CallableRequest) -> dict:
    data = _request_data(req)
    comment_id = _run(
        fan_comments.add_fan_comment,
        _get_services(),
        data.get("name"),
        data.get("comment"),
    )
    return {"id": comment_id}


@https_fn.on_call()
def get_fan_comments(req: https_fn.CallableRequest) -> dict:
    """
    Returns one page of comments. Anonymous callers only see approved
    comments; admins may pass `status` or omit it to see every comment.
    """
    data = _request_data(req)
    status: Optional[CommentStatus] = CommentStatus.APPROVED
    try:
        if req.auth is not None:
            status = CommentStatus(data["status"]) if data.get("status") else None
        limit = int(data.get("limit") or DEFAULT_COMMENTS_PAGE_SIZE)
    except (TypeError, ValueError) as e:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.INVALID_ARGUMENT, "Invalid status or limit."
        ) from e
    page = _run(
        fan_comments.list_fan_comments_page,
        _get_services(),
        status,
        limit,
        data.get("cursor"),
    )
    return _to_json(page)


@https_fn.on_call()
def approve_fan_comment(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    _run(fan_comments.approve_fan_comment, _get_services(), data.get("comment_id"))
    return {"status": "ok"}


@https_fn.on_call()
def delete_fan_comment(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    _run(fan_comments.delete_fan_comment, _get_services(), data.get("comment_id"))
    return {"status": "ok"}


@https_fn.on_call()
def approve_fan_comments(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    count = _run(
        fan_comments.approve_fan_comments, _get_services(), data.get("comment_ids") or []
    )
    return {"count": count}


@https_fn.on_call()
def delete_fan_comments(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    count = _run(
        fan_comments.delete_fan_comments, _get_services(), data.get("comment_ids") or []
    )
    return {"count": count}


# ---------------------------------------------------------------------------
# Galleries
# ---------------------------------------------------------------------------


@https_fn.on_call(memory=UPLOAD_MEMORY)
def upload_band_media(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    item = _run(
        galleries.upload_band_media,
        _get_services(),
        _decode_upload(data.get("file")),
        data.get("image_url"),
        data.get("video_url"),
    )
    return _to_json(item)


@https_fn.on_call()
def get_band_media(req: https_fn.CallableRequest) -> list:
    return _to_json(_run(galleries.list_band_media, _get_services()))


@https_fn.on_call()
def delete_band_media(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    _run(galleries.delete_band_media, _get_services(), data.get("item_id"))
    return {"status": "ok"}


@https_fn.on_call(memory=UPLOAD_MEMORY)
def add_fan_media(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    item = _run(
        galleries.add_fan_media,
        _get_services(),
        _decode_upload(data.get("file")),
        data.get("url"),
    )
    return _to_json(item)


@https_fn.on_call()
def get_fan_media(req: https_fn.CallableRequest) -> list:
    return _to_json(_run(galleries.list_fan_media, _get_services()))


@https_fn.on_call()
def delete_fan_media(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    _run(galleries.delete_fan_media, _get_services(), data.get("item_id"))
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Biography and booking
# ---------------------------------------------------------------------------


@https_fn.on_call()
def save_band_bio(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    _run(biography.save_band_bio, _get_services(), data.get("text"))
    return {"status": "ok"}


@https_fn.on_call()
def get_band_bio(req: https_fn.CallableRequest) -> dict:
    return {"text": _run(biography.get_band_bio, _get_services())}


@https_fn.on_call()
def send_booking_inquiry(req: https_fn.CallableRequest) -> dict:
    data = _request_data(req)
    inquiry = BookingInquiry(
        name=str(data.get("name") or ""),
        email=str(data.get("email") or ""),
        phone=data.get("phone") or None,
        event_type=str(data.get("event_type") or ""),
        event_date=str(data.get("event_date") or ""),
        message=str(data.get("message") or ""),
    )
    result = _run(booking.send_booking_inquiry, _get_services(), inquiry)
    return _to_json(result)


# ---------------------------------------------------------------------------
# AI helpers
# ---------------------------------------------------------------------------


@https_fn.on_call(timeout_sec=120, memory=options.MemoryOption.MB_512)
def get_bio(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    result = ai.get_bio(
        _get_services(),
        data.get("band_name"),
        data.get("key_points") or [],
        data.get("tone") or "",
    )
    return _to_json(result)


@https_fn.on_call(timeout_sec=120, memory=options.MemoryOption.MB_512)
def get_logo_suggestion(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    return _to_json(ai.get_logo_suggestion(_get_services(), data.get("prompt") or ""))


@https_fn.on_call(timeout_sec=120, memory=UPLOAD_MEMORY)
def get_social_post_suggestion(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    result = ai.get_social_post_suggestion(
        _get_services(),
        data.get("topic") or "",
        data.get("platform") or "",
        _decode_upload(data.get("flyer")),
        data.get("band_name"),
    )
    return _to_json(result)


@https_fn.on_call(timeout_sec=120, memory=options.MemoryOption.MB_512)
def get_hashtag_suggestions(req: https_fn.CallableRequest) -> dict:
    _require_admin(req)
    data = _request_data(req)
    result = ai.get_hashtag_suggestions(
        _get_services(),
        data.get("content_description") or "",
        data.get("media_type") or "",
        data.get("band_name"),
    )
    return _to_json(result)
