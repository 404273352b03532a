"""Signed cookie sessions.

The session cookie holds the signed-in user and the backend access token
as an HS256 JWT, so no server-side session store is needed.
"""

from datetime import UTC, datetime, timedelta

import jwt
from fastapi import Request
from starlette.responses import Response

from app.core.config import settings
from app.schemas.user import CurrentUser, SessionUser

SESSION_TOKEN_TYPE = "session"


def create_session_token(user: SessionUser, access_token: str) -> str:
    payload = {
        "sub": user.identifier,
        "user": user.model_dump(),
        "access_token": access_token,
        "type": SESSION_TOKEN_TYPE,
        "exp": datetime.now(UTC) + timedelta(seconds=settings.SESSION_MAX_AGE_SECONDS),
    }
    return jwt.encode(payload, settings.SESSION_SECRET, algorithm="HS256")


def decode_session_token(token: str) -> CurrentUser:
    """Decode a session cookie value.

    Raises jwt.ExpiredSignatureError or jwt.InvalidTokenError on failure.
    """
    payload = jwt.decode(token, settings.SESSION_SECRET, algorithms=["HS256"])
    if payload.get("type") != SESSION_TOKEN_TYPE:
        raise jwt.InvalidTokenError("Invalid token type")
    if not payload.get("access_token") or not payload.get("user"):
        raise jwt.InvalidTokenError("Incomplete session")
    return CurrentUser(
        user=SessionUser.model_validate(payload["user"]),
        access_token=payload["access_token"],
    )


def read_session(request: Request) -> CurrentUser | None:
    """Return the session carried by the request, or None when absent or invalid."""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None
    try:
        return decode_session_token(token)
    except (jwt.InvalidTokenError, ValueError):
        return None


def commit_session(response: Response, user: SessionUser, access_token: str) -> Response:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=create_session_token(user, access_token),
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    return response


def destroy_session(response: Response) -> Response:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )
    return response
