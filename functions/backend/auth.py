"""
Admin authentication backed by Firebase Auth.

Admins sign in on the client with email/password. The server only verifies
the resulting ID tokens (``Authorization: Bearer <token>``) or the session
cookie minted from one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, Optional, Protocol

from fastapi import Request
from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Raised when a token or session cookie cannot be verified."""


@dataclass
class AdminUser:
    uid: str
    email: Optional[str] = None


class AuthVerifier(Protocol):
    def verify_id_token(self, id_token: str) -> AdminUser:
        ...

    def verify_session_cookie(self, cookie: str) -> AdminUser:
        ...

    def create_session_cookie(self, id_token: str, expires_in: timedelta) -> str:
        ...


class FirebaseAuthVerifier:
    """Verifies credentials with the firebase_admin auth module."""

    def verify_id_token(self, id_token: str) -> AdminUser:
        try:
            claims = firebase_auth.verify_id_token(id_token, check_revoked=True)
        except (
            firebase_auth.InvalidIdTokenError,
            firebase_auth.UserDisabledError,
            ValueError,
        ) as e:
            raise AuthError(str(e)) from e
        return AdminUser(uid=claims["uid"], email=claims.get("email"))

    def verify_session_cookie(self, cookie: str) -> AdminUser:
        try:
            claims = firebase_auth.verify_session_cookie(cookie, check_revoked=True)
        except (
            firebase_auth.InvalidSessionCookieError,
            firebase_auth.UserDisabledError,
            ValueError,
        ) as e:
            raise AuthError(str(e)) from e
        return AdminUser(uid=claims["uid"], email=claims.get("email"))

    def create_session_cookie(self, id_token: str, expires_in: timedelta) -> str:
        try:
            return firebase_auth.create_session_cookie(id_token, expires_in=expires_in)
        except (firebase_exceptions.FirebaseError, ValueError) as e:
            raise AuthError(str(e)) from e


@dataclass
class InMemoryAuthVerifier:
    """Test double mapping known tokens to users."""

    users_by_token: Dict[str, AdminUser] = field(default_factory=dict)
    sessions: Dict[str, AdminUser] = field(default_factory=dict)

    def verify_id_token(self, id_token: str) -> AdminUser:
        user = self.users_by_token.get(id_token)
        if user is None:
            raise AuthError("Unknown ID token")
        return user

    def verify_session_cookie(self, cookie: str) -> AdminUser:
        user = self.sessions.get(cookie)
        if user is None:
            raise AuthError("Unknown session cookie")
        return user

    def create_session_cookie(self, id_token: str, expires_in: timedelta) -> str:
        user = self.verify_id_token(id_token)
        cookie = f"session-{user.uid}-{int(expires_in.total_seconds())}"
        self.sessions[cookie] = user
        return cookie


def _bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def authenticate_request(
    request: Request, verifier: AuthVerifier, cookie_name: str
) -> Optional[AdminUser]:
    """Returns the signed-in admin, or None when the request is anonymous."""
    token = _bearer_token(request)
    cookie = request.cookies.get(cookie_name)
    try:
        if token:
            return verifier.verify_id_token(token)
        if cookie:
            return verifier.verify_session_cookie(cookie)
    except AuthError as e:
        logger.info("Rejected admin credentials: %s", e)
    return None
