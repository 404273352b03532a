import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.responses import Response

from app.core.auth import NotAuthenticatedError
from app.core.config import settings
from app.core.session import destroy_session
from app.routers import auth, dashboard, invoices, payments, providers, reports, users
from app.services.backend_client import ApiServerError

logging.basicConfig(level=logging.DEBUG if settings.DEBUG else logging.INFO)

logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {"name": "Auth", "description": "Sign in, sign out and registration."},
    {"name": "Dashboard", "description": "Invoice, provider and balance overview."},
    {"name": "Invoices", "description": "List, inspect and delete invoices."},
    {"name": "Payments", "description": "Distribute one payment across several invoices."},
    {"name": "Providers", "description": "Search the company's providers."},
    {"name": "Reports", "description": "Reporting landing page."},
    {"name": "Users", "description": "Company user accounts."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Invoice and vendor management for industrial companies. "
        "Every data-bearing route requires a signed-in session."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def options_handler(request: Request, call_next):  # type: ignore[no-untyped-def]
    if request.method == "OPTIONS":
        origin = request.headers.get("origin", "*")
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": "*",
                "Access-Control-Allow-Headers": "*",
                "Access-Control-Allow-Credentials": "true",
                "Access-Control-Max-Age": "86400",
            },
        )
    return await call_next(request)


@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError) -> Response:
    response = RedirectResponse(url=exc.redirect_to, status_code=303)
    return destroy_session(response)


@app.exception_handler(ApiServerError)
async def api_server_error_handler(request: Request, exc: ApiServerError) -> Response:
    # Transport failures carry status 0.
    status_code = exc.status if exc.status >= 400 else 503
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code},
    )


app.include_router(auth.router, tags=["Auth"])
app.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
app.include_router(invoices.router, prefix="/invoices", tags=["Invoices"])
app.include_router(payments.router, prefix="/payments", tags=["Payments"])
app.include_router(providers.router, prefix="/providers", tags=["Providers"])
app.include_router(reports.router, prefix="/reports", tags=["Reports"])
app.include_router(users.router, prefix="/users", tags=["Users"])


@app.get("/health")
async def health() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "status": "running",
    }
