"""
Pydantic schemas for the band site HTTP API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

from shared.types import CommentStatus, MediaType


class CreatedResponse(BaseModel):
    id: str


class CountResponse(BaseModel):
    count: int


class StatusResponse(BaseModel):
    status: Literal["ok"]


class ActionResultResponse(BaseModel):
    success: bool
    error: Optional[str] = None


class TourDateRequest(BaseModel):
    post_url: str = Field(..., max_length=2048)


class TourDateResponse(BaseModel):
    id: str
    post_url: str
    created_at: Optional[datetime] = None


class SongResponse(BaseModel):
    id: str
    title: str
    artist: str
    audio_url: str
    cover_url: str
    audio_path: str
    cover_path: str
    order: Optional[int] = None
    created_at: Optional[datetime] = None


class SongOrderItemPayload(BaseModel):
    id: str
    order: int = Field(..., ge=0)


class SongOrderRequest(BaseModel):
    items: List[SongOrderItemPayload]


class FanCommentRequest(BaseModel):
    name: str = Field(..., max_length=200)
    comment: str = Field(..., max_length=2000)


class FanCommentResponse(BaseModel):
    id: str
    name: str
    comment: str
    status: CommentStatus
    created_at: Optional[datetime] = None


class FanCommentPageResponse(BaseModel):
    items: List[FanCommentResponse]
    has_more: bool
    next_cursor: Optional[str] = None


class CommentIdsRequest(BaseModel):
    ids: List[str] = Field(..., min_length=1, max_length=500)


class MediaItemResponse(BaseModel):
    id: str
    name: str
    url: str
    type: MediaType
    storage_path: Optional[str] = None
    created_at: Optional[datetime] = None


class BiographyRequest(BaseModel):
    text: str = Field(..., max_length=20000)


class BiographyResponse(BaseModel):
    text: Optional[str] = None


class BookingRequest(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None
    event_type: str
    event_date: str
    message: str


class BioGenerationRequest(BaseModel):
    band_name: Optional[str] = None
    key_points: List[str]
    tone: str


class LogoGenerationRequest(BaseModel):
    prompt: str


class HashtagRequest(BaseModel):
    content_description: str
    media_type: str
    band_name: Optional[str] = None


class AiResultResponse(BaseModel):
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None


class SessionRequest(BaseModel):
    id_token: str


class HomeResponse(BaseModel):
    tour_dates: List[TourDateResponse]
    songs: List[SongResponse]
    band_media: List[MediaItemResponse]
    fan_media: List[MediaItemResponse]
    biography: Optional[str] = None
    fan_comments: List[FanCommentResponse]


class AdminDashboardResponse(HomeResponse):
    admin_email: Optional[str] = None
