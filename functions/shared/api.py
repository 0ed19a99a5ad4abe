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

from dataclasses import dataclass, field
from typing import Generic, List, Optional, TypeVar

from shared.types import FanComment

T = TypeVar("T")


@dataclass
class UploadedFile:
    """A file received from a form, independent of the web framework."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class UploadResult:
    download_url: str
    path: str


@dataclass
class SongOrderItem:
    id: str
    order: int


@dataclass
class ActionResult:
    """Result for actions whose failures are reported instead of raised."""

    success: bool
    error: Optional[str] = None


@dataclass
class AiResult(Generic[T]):
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None


@dataclass
class Page(Generic[T]):
    """One page of a cursor-paginated listing."""

    items: List[T] = field(default_factory=list)
    has_more: bool = False
    next_cursor: Optional[str] = None


CommentPage = Page[FanComment]


@dataclass
class BookingInquiry:
    name: str
    email: str
    event_type: str
    event_date: str
    message: str
    phone: Optional[str] = None


@dataclass
class BioSuggestion:
    biography: str


@dataclass
class LogoSuggestion:
    image_data_uri: str


@dataclass
class SocialPostSuggestion:
    post_text: str


@dataclass
class HashtagSuggestion:
    hashtags: List[str]
