"""Sign-in, sign-out and registration routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.responses import Response

from app.core.auth import LOGIN_PATH, get_optional_user
from app.core.config import settings
from app.core.rate_limiter import RateLimiter
from app.core.session import commit_session, destroy_session
from app.schemas.auth import (
    LoginErrorResponse,
    LoginPageResponse,
    LoginRequest,
    RegisterPageResponse,
    RegistrationRequest,
    RegistrationResponse,
)
from app.schemas.user import CurrentUser
from app.services.auth_service import AuthService, LoginError
from app.services.backend_client import ApiServerError, BackendClient, get_backend_client

logger = logging.getLogger(__name__)

router = APIRouter()

DASHBOARD_PATH = "/dashboard"
COMPANIES_UNAVAILABLE = "No se pudieron cargar las empresas. Intente más tarde."

# Module-level rate limiter instance for sign-in attempts
login_rate_limiter = RateLimiter(
    max_requests=settings.RATE_LIMIT_LOGIN_PER_MINUTE,
    window_seconds=60,
)


def _check_login_rate_limit(request: Request) -> None:
    """Dependency that limits sign-in attempts per client address."""
    key = request.client.host if request.client else "unknown"
    if not login_rate_limiter.is_allowed(key):
        raise HTTPException(
            status_code=429,
            detail="Rate limit exceeded. Maximum "
            f"{settings.RATE_LIMIT_LOGIN_PER_MINUTE} login attempts per minute.",
        )


async def _load_companies(client: BackendClient) -> list[str]:
    try:
        return await client.fetch_companies()
    except ApiServerError as exc:
        logger.warning("Could not load companies: %s", exc.message)
        return []


@router.get("/", summary="Entry point", status_code=303)
async def index(current_user: CurrentUser | None = Depends(get_optional_user)) -> Response:
    """Send signed-in users to the dashboard and everyone else to the login page."""
    target = DASHBOARD_PATH if current_user else LOGIN_PATH
    return RedirectResponse(url=target, status_code=303)


@router.get(
    "/login",
    response_model=LoginPageResponse,
    summary="Login page data",
)
async def login_page(
    client: BackendClient = Depends(get_backend_client),
) -> LoginPageResponse:
    return LoginPageResponse(companies=await _load_companies(client))


@router.post(
    "/login",
    summary="Sign in",
    status_code=303,
    responses={
        400: {"model": LoginErrorResponse, "description": "Missing fields"},
        401: {"model": LoginErrorResponse, "description": "Invalid credentials"},
        403: {"model": LoginErrorResponse, "description": "User awaiting approval"},
        429: {"description": "Too many sign-in attempts"},
    },
)
async def login(
    data: LoginRequest,
    _: None = Depends(_check_login_rate_limit),
    client: BackendClient = Depends(get_backend_client),
) -> Response:
    try:
        user, access_token = await AuthService(client).login(data)
    except LoginError as exc:
        return JSONResponse(
            status_code=exc.status_code,
            content=LoginErrorResponse(error=exc.message).model_dump(),
        )

    response = RedirectResponse(url=DASHBOARD_PATH, status_code=303)
    return commit_session(response, user, access_token)


@router.api_route("/logout", methods=["GET", "POST"], summary="Sign out", status_code=303)
async def logout() -> Response:
    response = RedirectResponse(url=LOGIN_PATH, status_code=303)
    return destroy_session(response)


@router.get(
    "/register",
    response_model=RegisterPageResponse,
    summary="Registration page data",
    responses={303: {"description": "Already signed in"}},
)
async def register_page(
    current_user: CurrentUser | None = Depends(get_optional_user),
    client: BackendClient = Depends(get_backend_client),
) -> Response | RegisterPageResponse:
    if current_user is not None:
        return RedirectResponse(url=DASHBOARD_PATH, status_code=303)
    try:
        companies = await client.fetch_companies()
    except ApiServerError as exc:
        logger.warning("Could not load companies for registration: %s", exc.message)
        return RegisterPageResponse(companies=[], server_error=COMPANIES_UNAVAILABLE)
    return RegisterPageResponse(companies=companies)


@router.post(
    "/register",
    response_model=RegistrationResponse,
    status_code=201,
    summary="Register a client company or a provider",
    responses={
        400: {"model": LoginErrorResponse, "description": "Rejected by the backend"},
        502: {"model": LoginErrorResponse, "description": "Backend unavailable"},
    },
)
async def register(
    data: RegistrationRequest,
    client: BackendClient = Depends(get_backend_client),
) -> Response | RegistrationResponse:
    try:
        message = await AuthService(client).register(data)
    except ApiServerError as exc:
        logger.warning("Registration for %s failed: %s", data.company, exc.message)
        status_code = 502 if exc.status == 0 or exc.status >= 500 else 400
        return JSONResponse(
            status_code=status_code,
            content=LoginErrorResponse(error=exc.message).model_dump(),
        )
    return RegistrationResponse(success=message)
