"""
Dependency wiring for the FastAPI app and the Firebase callables.

All clients are constructed explicitly by `build_services` and handed to the
server actions, so tests can swap in the in-memory implementations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import firebase_admin
from fastapi import Depends, HTTPException, Request

from backend.auth import AdminUser, AuthVerifier, FirebaseAuthVerifier
from backend.auth import InMemoryAuthVerifier, authenticate_request
from backend.cache import InMemoryPageCache, PageCache, RedisPageCache
from backend.config import Settings, get_settings
from backend.errors import ConfigurationError
from backend.mailer import InMemoryMailer, Mailer, SmtpMailer
from backend.storage import BlobStore, CosBlobStore, GcsBlobStore, InMemoryBlobStore
from backend.store import (
    ContentStore,
    FirestoreContentStore,
    InMemoryContentStore,
    SqlContentStore,
)

logger = logging.getLogger(__name__)

STORAGE_NOT_CONFIGURED = "Firebase Storage bucket name is not configured."


@dataclass
class Services:
    """The collaborators every server action works against."""

    store: ContentStore
    cache: PageCache
    auth: AuthVerifier
    mailer: Mailer
    settings: Settings = field(default_factory=get_settings)
    blob_store: Optional[BlobStore] = None

    def require_blob_store(self) -> BlobStore:
        if self.blob_store is None:
            raise ConfigurationError(STORAGE_NOT_CONFIGURED)
        return self.blob_store

    @classmethod
    def in_memory(cls, settings: Optional[Settings] = None) -> "Services":
        return cls(
            store=InMemoryContentStore(),
            cache=InMemoryPageCache(),
            auth=InMemoryAuthVerifier(),
            mailer=InMemoryMailer(),
            settings=settings or get_settings(),
            blob_store=InMemoryBlobStore(),
        )


def ensure_firebase_app(settings: Settings) -> None:
    """Initializes the default firebase_admin app once per process."""
    try:
        firebase_admin.get_app()
    except ValueError:
        options = {}
        if settings.firebase_project_id:
            options["projectId"] = settings.firebase_project_id
        if settings.storage_bucket:
            options["storageBucket"] = settings.storage_bucket
        firebase_admin.initialize_app(options=options or None)
        logger.info("Firebase Admin SDK initialized.")


def _build_blob_store(settings: Settings) -> Optional[BlobStore]:
    if settings.cos_bucket:
        return CosBlobStore(
            bucket=settings.cos_bucket,
            region=settings.cos_region or "",
            endpoint=settings.cos_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
        )
    if settings.storage_bucket:
        return GcsBlobStore(bucket_name=settings.storage_bucket)
    logger.warning("No storage bucket configured; uploads will be rejected.")
    return None


def build_services(settings: Optional[Settings] = None) -> Services:
    settings = settings or get_settings()
    if settings.use_in_memory_backends:
        return Services.in_memory(settings)

    ensure_firebase_app(settings)
    if settings.database_url:
        store: ContentStore = SqlContentStore(settings.database_url)
    else:
        store = FirestoreContentStore()

    if settings.redis_url:
        cache: PageCache = RedisPageCache(
            url=settings.redis_url, ttl_seconds=settings.page_cache_ttl_seconds
        )
    else:
        cache = InMemoryPageCache()

    return Services(
        store=store,
        cache=cache,
        auth=FirebaseAuthVerifier(),
        mailer=SmtpMailer(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            recipient=settings.booking_email_to,
        ),
        settings=settings,
        blob_store=_build_blob_store(settings),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_current_admin(
    request: Request, services: Services = Depends(get_services)
) -> Optional[AdminUser]:
    return authenticate_request(
        request, services.auth, services.settings.session_cookie_name
    )


def require_admin(
    admin: Optional[AdminUser] = Depends(get_current_admin),
) -> AdminUser:
    if admin is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return admin
