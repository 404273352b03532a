import logging

from fastapi import Depends, Request

from app.core.session import read_session
from app.schemas.user import CurrentUser
from app.services.backend_client import ApiServerError, BackendClient, get_backend_client

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"


class NotAuthenticatedError(Exception):
    """Raised by page dependencies when the caller has no valid session.

    Handled in ``app.main`` by redirecting to the login page and destroying
    the session cookie.
    """

    def __init__(self, redirect_to: str = LOGIN_PATH):
        super().__init__(redirect_to)
        self.redirect_to = redirect_to


async def get_optional_user(
    request: Request,
    client: BackendClient = Depends(get_backend_client),
) -> CurrentUser | None:
    """Resolve the session and confirm its access token with the backend.

    Returns None when there is no session or the backend no longer accepts
    the token.
    """
    session = read_session(request)
    if session is None:
        return None
    try:
        await client.get_current_user(session.access_token)
    except ApiServerError as exc:
        logger.info("Session for %s rejected by backend: %s", session.user.identifier, exc.code)
        return None
    return session


async def require_user(
    current_user: CurrentUser | None = Depends(get_optional_user),
) -> CurrentUser:
    """Dependency for every data-bearing page."""
    if current_user is None:
        raise NotAuthenticatedError()
    return current_user
