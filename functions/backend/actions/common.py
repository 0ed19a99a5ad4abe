"""
Helpers shared by the server actions.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

from backend.errors import ValidationError
from shared.api import UploadedFile

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def require_id(value: Optional[str], message: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(message)
    return str(value).strip()


def is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_email(value: str) -> bool:
    return bool(_EMAIL_PATTERN.match(value))


def has_content(upload: Optional[UploadedFile]) -> bool:
    return upload is not None and upload.size > 0
