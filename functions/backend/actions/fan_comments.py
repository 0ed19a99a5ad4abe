"""
Fan comments with moderation.

New comments always start as pending and only show on the public page once an
admin approves them. Comments written before moderation existed have no
status and are read as approved.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from backend.actions.common import require_id, utc_now
from backend.dependencies import Services
from backend.errors import ValidationError
from backend.repository import ContentRepository, EntitySpec
from backend.store import DESCENDING, Query
from shared.api import CommentPage
from shared.constants import (
    DEFAULT_COMMENTS_PAGE_SIZE,
    MAX_COMMENT_LENGTH,
    MAX_COMMENT_NAME_LENGTH,
    MAX_COMMENTS_PAGE_SIZE,
    MIN_COMMENT_LENGTH,
    MIN_COMMENT_NAME_LENGTH,
)
from shared.firebase_constants import FAN_COMMENTS_COLLECTION
from shared.types import CommentStatus, FanComment

logger = logging.getLogger(__name__)

COMMENT_ID_MISSING = "Comment ID not provided."

FAN_COMMENT_SPEC = EntitySpec(
    collection=FAN_COMMENTS_COLLECTION,
    entity_type=FanComment,
    default_query=Query().order_by("createdAt", DESCENDING),
    defaults={"status": CommentStatus.APPROVED.value},
)


def fan_comments(services: Services) -> ContentRepository[FanComment]:
    return ContentRepository(services.store, services.cache, FAN_COMMENT_SPEC)


def _status_query(status: Optional[CommentStatus]) -> Query:
    query = Query()
    if status is not None:
        query = query.where("status", "==", CommentStatus(status).value)
    return query.order_by("createdAt", DESCENDING)


def add_fan_comment(services: Services, name: Optional[str], comment: Optional[str]) -> str:
    name = (name or "").strip()
    comment = (comment or "").strip()
    if len(name) < MIN_COMMENT_NAME_LENGTH:
        raise ValidationError("El nombre debe tener al menos 2 caracteres.")
    if len(name) > MAX_COMMENT_NAME_LENGTH:
        raise ValidationError("El nombre no puede exceder los 50 caracteres.")
    if len(comment) < MIN_COMMENT_LENGTH:
        raise ValidationError("El comentario debe tener al menos 5 caracteres.")
    if len(comment) > MAX_COMMENT_LENGTH:
        raise ValidationError("El comentario no puede exceder los 500 caracteres.")

    return fan_comments(services).add(
        {
            "name": name,
            "comment": comment,
            "status": CommentStatus.PENDING.value,
            "created_at": utc_now(),
        }
    )


def list_fan_comments(
    services: Services, status: Optional[CommentStatus] = None
) -> List[FanComment]:
    """Lists comments newest first, optionally filtered by status."""
    repo = fan_comments(services)
    if status is None:
        return repo.list()
    # Legacy comments without a status field are approved but invisible to a
    # status filter until backfilled, so filter after reading.
    return [c for c in repo.list() if c.status == CommentStatus(status)]


def list_fan_comments_page(
    services: Services,
    status: Optional[CommentStatus] = None,
    limit: int = DEFAULT_COMMENTS_PAGE_SIZE,
    cursor: Optional[str] = None,
) -> CommentPage:
    """
    Returns one page of comments, newest first.

    `cursor` is the id of the last comment of the previous page. A cursor
    whose comment no longer exists restarts from the first page. Comments
    deleted between two fetches may shift items across pages.
    """
    limit = max(1, min(int(limit), MAX_COMMENTS_PAGE_SIZE))
    return fan_comments(services).page(_status_query(status), limit, cursor)


def approve_fan_comment(services: Services, comment_id: Optional[str]) -> None:
    comment_id = require_id(comment_id, COMMENT_ID_MISSING)
    fan_comments(services).update(comment_id, {"status": CommentStatus.APPROVED.value})


def delete_fan_comment(services: Services, comment_id: Optional[str]) -> None:
    comment_id = require_id(comment_id, COMMENT_ID_MISSING)
    fan_comments(services).delete(comment_id)


def _require_ids(comment_ids: Iterable[Optional[str]]) -> List[str]:
    ids = [require_id(comment_id, COMMENT_ID_MISSING) for comment_id in comment_ids]
    if not ids:
        raise ValidationError(COMMENT_ID_MISSING)
    return ids


def approve_fan_comments(services: Services, comment_ids: Iterable[Optional[str]]) -> int:
    """Approves all comments in one atomic batch."""
    ids = _require_ids(comment_ids)
    return fan_comments(services).batch_update(
        (comment_id, {"status": CommentStatus.APPROVED.value}) for comment_id in ids
    )


def delete_fan_comments(services: Services, comment_ids: Iterable[Optional[str]]) -> int:
    """Deletes all comments in one atomic batch."""
    return fan_comments(services).batch_delete(_require_ids(comment_ids))
