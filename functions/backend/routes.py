"""
HTTP routes for the band site API.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, Response, UploadFile
from fastapi.responses import RedirectResponse

from backend import pages
from backend.actions import ai, biography, booking, fan_comments, galleries, music, tour_dates
from backend.auth import AdminUser, AuthError
from backend.dependencies import Services, get_current_admin, get_services, require_admin
from backend.schemas import (
    ActionResultResponse,
    AdminDashboardResponse,
    AiResultResponse,
    BioGenerationRequest,
    BiographyRequest,
    BiographyResponse,
    BookingRequest,
    CommentIdsRequest,
    CountResponse,
    CreatedResponse,
    FanCommentPageResponse,
    FanCommentRequest,
    FanCommentResponse,
    HashtagRequest,
    HomeResponse,
    LogoGenerationRequest,
    MediaItemResponse,
    SessionRequest,
    SongOrderRequest,
    SongResponse,
    StatusResponse,
    TourDateRequest,
    TourDateResponse,
)
from shared.api import BookingInquiry, SongOrderItem, UploadedFile
from shared.constants import DEFAULT_COMMENTS_PAGE_SIZE, MAX_COMMENTS_PAGE_SIZE
from shared.types import CommentStatus

logger = logging.getLogger(__name__)

router = APIRouter()
admin_router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])
pages_router = APIRouter()


async def _to_upload(file: Optional[UploadFile]) -> Optional[UploadedFile]:
    if file is None:
        return None
    data = await file.read()
    return UploadedFile(
        filename=file.filename or "file",
        content_type=file.content_type or "application/octet-stream",
        data=data,
    )


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


@router.get("/home", response_model=HomeResponse)
def get_home(services: Services = Depends(get_services)):
    return pages.home_page(services)


@router.get("/tour-dates", response_model=list[TourDateResponse])
def get_tour_dates(services: Services = Depends(get_services)):
    return [asdict(d) for d in tour_dates.list_tour_dates(services)]


@router.get("/songs", response_model=list[SongResponse])
def get_songs(services: Services = Depends(get_services)):
    return [asdict(s) for s in music.list_songs(services)]


@router.get("/band-media", response_model=list[MediaItemResponse])
def get_band_media(services: Services = Depends(get_services)):
    return [asdict(m) for m in galleries.list_band_media(services)]


@router.get("/fan-media", response_model=list[MediaItemResponse])
def get_fan_media(services: Services = Depends(get_services)):
    return [asdict(m) for m in galleries.list_fan_media(services)]


@router.get("/bio", response_model=BiographyResponse)
def get_bio(services: Services = Depends(get_services)):
    return BiographyResponse(text=biography.get_band_bio(services))


@router.get("/fan-comments", response_model=FanCommentPageResponse)
def get_approved_fan_comments(
    limit: int = Query(DEFAULT_COMMENTS_PAGE_SIZE, ge=1, le=MAX_COMMENTS_PAGE_SIZE),
    cursor: Optional[str] = None,
    services: Services = Depends(get_services),
):
    page = fan_comments.list_fan_comments_page(
        services, CommentStatus.APPROVED, limit, cursor
    )
    return asdict(page)


@router.post("/fan-comments", response_model=CreatedResponse, status_code=201)
def post_fan_comment(
    payload: FanCommentRequest, services: Services = Depends(get_services)
):
    comment_id = fan_comments.add_fan_comment(services, payload.name, payload.comment)
    return CreatedResponse(id=comment_id)


@router.post("/booking", response_model=ActionResultResponse)
def post_booking(payload: BookingRequest, services: Services = Depends(get_services)):
    inquiry = BookingInquiry(**payload.model_dump())
    return asdict(booking.send_booking_inquiry(services, inquiry))


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


@router.post("/session", response_model=StatusResponse)
def create_session(
    payload: SessionRequest,
    response: Response,
    services: Services = Depends(get_services),
):
    """Exchanges a Firebase ID token for an HTTP-only session cookie."""
    settings = services.settings
    expires_in = timedelta(days=settings.session_cookie_days)
    try:
        cookie = services.auth.create_session_cookie(payload.id_token, expires_in)
    except AuthError as e:
        raise HTTPException(status_code=401, detail="Invalid ID token") from e
    response.set_cookie(
        settings.session_cookie_name,
        cookie,
        max_age=int(expires_in.total_seconds()),
        httponly=True,
        secure=True,
        samesite="lax",
    )
    return StatusResponse(status="ok")


@router.post("/logout", response_model=StatusResponse)
def logout(response: Response, services: Services = Depends(get_services)):
    response.delete_cookie(services.settings.session_cookie_name)
    return StatusResponse(status="ok")


# ---------------------------------------------------------------------------
# Admin: content
# ---------------------------------------------------------------------------


@admin_router.post("/tour-dates", response_model=CreatedResponse, status_code=201)
def post_tour_date(payload: TourDateRequest, services: Services = Depends(get_services)):
    return CreatedResponse(id=tour_dates.add_tour_date(services, payload.post_url))


@admin_router.delete("/tour-dates/{date_id}", status_code=204)
def remove_tour_date(date_id: str, services: Services = Depends(get_services)):
    tour_dates.delete_tour_date(services, date_id)
    return Response(status_code=204)


@admin_router.post("/songs", response_model=CreatedResponse, status_code=201)
async def post_song(
    title: str = Form(""),
    artist: str = Form(""),
    audio_file: Optional[UploadFile] = File(None),
    cover_file: Optional[UploadFile] = File(None),
    services: Services = Depends(get_services),
):
    song_id = music.add_song(
        services,
        title,
        artist,
        await _to_upload(audio_file),
        await _to_upload(cover_file),
    )
    return CreatedResponse(id=song_id)


@admin_router.delete("/songs/{song_id}", status_code=204)
def remove_song(song_id: str, services: Services = Depends(get_services)):
    music.delete_song_by_id(services, song_id)
    return Response(status_code=204)


@admin_router.put("/songs/order", response_model=ActionResultResponse)
def put_song_order(payload: SongOrderRequest, services: Services = Depends(get_services)):
    items = [SongOrderItem(id=item.id, order=item.order) for item in payload.items]
    return asdict(music.update_song_order(services, items))


@admin_router.get("/fan-comments", response_model=FanCommentPageResponse)
def get_all_fan_comments(
    status: Optional[CommentStatus] = None,
    limit: int = Query(DEFAULT_COMMENTS_PAGE_SIZE, ge=1, le=MAX_COMMENTS_PAGE_SIZE),
    cursor: Optional[str] = None,
    services: Services = Depends(get_services),
):
    return asdict(fan_comments.list_fan_comments_page(services, status, limit, cursor))


@admin_router.post("/fan-comments/approve", response_model=CountResponse)
def approve_comments(
    payload: CommentIdsRequest, services: Services = Depends(get_services)
):
    return CountResponse(count=fan_comments.approve_fan_comments(services, payload.ids))


@admin_router.post("/fan-comments/delete", response_model=CountResponse)
def delete_comments(
    payload: CommentIdsRequest, services: Services = Depends(get_services)
):
    return CountResponse(count=fan_comments.delete_fan_comments(services, payload.ids))


@admin_router.post("/fan-comments/{comment_id}/approve", response_model=StatusResponse)
def approve_comment(comment_id: str, services: Services = Depends(get_services)):
    fan_comments.approve_fan_comment(services, comment_id)
    return StatusResponse(status="ok")


@admin_router.delete("/fan-comments/{comment_id}", status_code=204)
def remove_comment(comment_id: str, services: Services = Depends(get_services)):
    fan_comments.delete_fan_comment(services, comment_id)
    return Response(status_code=204)


@admin_router.post("/band-media", response_model=MediaItemResponse, status_code=201)
async def post_band_media(
    file: Optional[UploadFile] = File(None),
    image_url: Optional[str] = Form(None),
    video_url: Optional[str] = Form(None),
    services: Services = Depends(get_services),
):
    item = galleries.upload_band_media(
        services, await _to_upload(file), image_url, video_url
    )
    return asdict(item)


@admin_router.delete("/band-media/{item_id}", status_code=204)
def remove_band_media(item_id: str, services: Services = Depends(get_services)):
    galleries.delete_band_media(services, item_id)
    return Response(status_code=204)


@admin_router.post("/fan-media", response_model=MediaItemResponse, status_code=201)
async def post_fan_media(
    file: Optional[UploadFile] = File(None),
    url: Optional[str] = Form(None),
    services: Services = Depends(get_services),
):
    item = galleries.add_fan_media(services, await _to_upload(file), url)
    return asdict(item)


@admin_router.delete("/fan-media/{item_id}", status_code=204)
def remove_fan_media(item_id: str, services: Services = Depends(get_services)):
    galleries.delete_fan_media(services, item_id)
    return Response(status_code=204)


@admin_router.put("/bio", response_model=StatusResponse)
def put_bio(payload: BiographyRequest, services: Services = Depends(get_services)):
    biography.save_band_bio(services, payload.text)
    return StatusResponse(status="ok")


# ---------------------------------------------------------------------------
# Admin: AI helpers
# ---------------------------------------------------------------------------


@admin_router.post("/ai/bio", response_model=AiResultResponse)
def generate_bio(
    payload: BioGenerationRequest, services: Services = Depends(get_services)
):
    result = ai.get_bio(services, payload.band_name, payload.key_points, payload.tone)
    return asdict(result)


@admin_router.post("/ai/logo", response_model=AiResultResponse)
def generate_logo(
    payload: LogoGenerationRequest, services: Services = Depends(get_services)
):
    return asdict(ai.get_logo_suggestion(services, payload.prompt))


@admin_router.post("/ai/social-post", response_model=AiResultResponse)
async def generate_social_post(
    topic: str = Form(""),
    platform: str = Form(""),
    band_name: Optional[str] = Form(None),
    flyer: Optional[UploadFile] = File(None),
    services: Services = Depends(get_services),
):
    result = ai.get_social_post_suggestion(
        services, topic, platform, await _to_upload(flyer), band_name
    )
    return asdict(result)


@admin_router.post("/ai/hashtags", response_model=AiResultResponse)
def generate_hashtags(payload: HashtagRequest, services: Services = Depends(get_services)):
    result = ai.get_hashtag_suggestions(
        services, payload.content_description, payload.media_type, payload.band_name
    )
    return asdict(result)


router.include_router(admin_router)


# ---------------------------------------------------------------------------
# Pages outside the API prefix
# ---------------------------------------------------------------------------


@pages_router.get("/admin", response_model=AdminDashboardResponse)
def admin_dashboard(
    admin: Optional[AdminUser] = Depends(get_current_admin),
    services: Services = Depends(get_services),
):
    if admin is None:
        return RedirectResponse("/login", status_code=303)
    return {**pages.admin_page(services), "admin_email": admin.email}
