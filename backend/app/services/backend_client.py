"""HTTP client for the remote FabriFlow REST backend."""

import logging
from typing import Any

import httpx

from app.core.config import settings
from app.schemas.dashboard import CurrencyBalance
from app.schemas.invoice import Invoice, InvoiceFilters
from app.schemas.payment import PaymentBatch
from app.schemas.provider import Provider
from app.schemas.user import BackendUser, CompanyUser

logger = logging.getLogger(__name__)

# User-facing messages for backend failures, keyed by HTTP status.
STATUS_ERRORS: dict[int, tuple[str, str]] = {
    401: ("Credenciales inválidas", "UNAUTHORIZED"),
    403: ("Acceso denegado", "FORBIDDEN"),
    404: ("Recurso no encontrado", "NOT_FOUND"),
    500: ("Error interno del servidor", "INTERNAL_ERROR"),
    502: ("El servidor no está disponible. Intente más tarde.", "SERVER_UNAVAILABLE"),
    503: ("El servidor no está disponible. Intente más tarde.", "SERVER_UNAVAILABLE"),
    504: ("El servidor no está disponible. Intente más tarde.", "SERVER_UNAVAILABLE"),
}

NETWORK_ERROR_MESSAGE = "No se pudo conectar al servidor. Verifique su conexión a internet."


class ApiServerError(Exception):
    """Raised when the backend answers with an error or cannot be reached."""

    def __init__(self, message: str, status: int = 500, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code


def _error_from_response(response: httpx.Response) -> ApiServerError:
    if response.status_code in STATUS_ERRORS:
        message, code = STATUS_ERRORS[response.status_code]
        return ApiServerError(message, response.status_code, code)

    message = f"HTTP {response.status_code}: {response.reason_phrase}"
    if "application/json" in response.headers.get("content-type", ""):
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error") or message
    return ApiServerError(message, response.status_code)


class BackendClient:
    """Thin async wrapper around the backend endpoints used by the pages.

    ``transport`` lets tests plug in an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.API_TIMEOUT_SECONDS
        self.transport = transport

    async def request(
        self,
        method: str,
        endpoint: str,
        token: str | None = None,
        json: Any = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        """Call ``endpoint`` and return its decoded body.

        204 responses decode to ``{}`` and non-JSON bodies are returned as
        text. Raises ApiServerError for any non-2xx status or transport
        failure.
        """
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug("Backend request %s %s", method, endpoint)
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self.transport,
            ) as client:
                response = await client.request(
                    method, endpoint, headers=headers, json=json, params=params
                )
        except httpx.HTTPError as exc:
            logger.warning("Backend request %s %s failed: %s", method, endpoint, exc)
            raise ApiServerError(NETWORK_ERROR_MESSAGE, 0, "NETWORK_ERROR") from exc

        if response.is_error:
            error = _error_from_response(response)
            logger.warning(
                "Backend request %s %s returned %d: %s",
                method,
                endpoint,
                response.status_code,
                error.message,
            )
            raise error

        if response.status_code == 204:
            return {}
        if "application/json" in response.headers.get("content-type", ""):
            return response.json()
        return response.text

    # -- auth ------------------------------------------------------------

    async def login(self, email: str, password: str, company: str) -> dict[str, Any]:
        """Return the backend login envelope ``{success, data: {token, user}, error}``."""
        return await self.request(
            "POST",
            "/api/auth/login",
            json={"email": email, "password": password, "company": company},
        )

    async def get_current_user(self, token: str) -> BackendUser:
        data = await self.request("GET", "/api/auth/me", token=token)
        return BackendUser.model_validate(data)

    async def fetch_companies(self) -> list[str]:
        data = await self.request("GET", "/api/auth/companies")
        if isinstance(data, dict) and data.get("success") and data.get("data"):
            return [str(company) for company in data["data"]]
        return []

    async def register_company(self, payload: dict[str, Any]) -> Any:
        return await self.request("POST", "/company/register", json=payload)

    async def register_vendor(self, payload: dict[str, Any]) -> Any:
        return await self.request("POST", "/api/auth/register-vendor", json=payload)

    # -- invoices --------------------------------------------------------

    async def fetch_invoices(
        self, token: str, filters: InvoiceFilters | None = None
    ) -> list[Invoice]:
        params = filters.to_params() if filters else None
        data = await self.request("GET", "/api/invoices", token=token, params=params)
        raw_invoices = data.get("invoices") if isinstance(data, dict) else None
        return [Invoice.model_validate(raw) for raw in raw_invoices or []]

    async def fetch_invoice(self, token: str, invoice_id: str) -> Invoice:
        data = await self.request("GET", f"/api/invoices/{invoice_id}", token=token)
        if isinstance(data, dict) and "invoice" in data:
            data = data["invoice"]
        return Invoice.model_validate(data)

    async def delete_invoice(self, token: str, invoice_id: str) -> dict[str, Any]:
        data = await self.request("DELETE", f"/api/invoices/{invoice_id}", token=token)
        return data if isinstance(data, dict) else {}

    async def fetch_balances(
        self, token: str, filters: InvoiceFilters | None = None
    ) -> list[CurrencyBalance]:
        params = filters.to_params() if filters else None
        data = await self.request("GET", "/api/invoices/balances", token=token, params=params)
        return [CurrencyBalance.model_validate(raw) for raw in data or []]

    # -- vendors and users -----------------------------------------------

    async def fetch_providers(self, token: str) -> list[Provider]:
        data = await self.request("GET", "/api/vendors", token=token)
        return [Provider.model_validate(raw) for raw in data or []]

    async def fetch_users(self, token: str) -> list[CompanyUser]:
        data = await self.request("GET", "/api/users", token=token)
        raw_users = data.get("users") if isinstance(data, dict) else data
        return [CompanyUser.model_validate(raw) for raw in raw_users or []]

    # -- payments --------------------------------------------------------

    async def submit_payment_batch(self, token: str, batch: PaymentBatch) -> Any:
        return await self.request(
            "POST",
            "/api/payments/multi",
            token=token,
            json=batch.model_dump(mode="json"),
        )


def get_backend_client() -> BackendClient:
    """FastAPI dependency; overridden in tests."""
    return BackendClient()
