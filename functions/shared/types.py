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

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Optional


class CommentStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"


class MediaType(StrEnum):
    IMAGE = "image"
    VIDEO = "video"
    FACEBOOK = "facebook"


@dataclass
class TourDate:
    """A promoted event, linked through the social media post announcing it."""

    id: str
    post_url: str
    created_at: Optional[datetime] = None


@dataclass
class Song:
    id: str
    title: str
    artist: str
    audio_url: str
    cover_url: str
    # Storage paths are kept so the blobs can be removed with the song.
    audio_path: str
    cover_path: str
    order: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass
class FanComment:
    id: str
    name: str
    comment: str
    status: CommentStatus = CommentStatus.APPROVED
    created_at: Optional[datetime] = None


@dataclass
class MediaItem:
    """An entry of the band or fan gallery."""

    id: str
    name: str
    url: str
    type: MediaType
    storage_path: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class Biography:
    text: str
    updated_at: Optional[datetime] = None
