"""Login and registration against the backend's auth endpoints."""

import logging

from app.schemas.auth import LoginRequest, RegistrationRequest
from app.schemas.user import AWAITING_APPROVAL_STATUSES, BackendUser, SessionUser
from app.services.backend_client import ApiServerError, BackendClient

logger = logging.getLogger(__name__)

MISSING_CREDENTIALS = "Email y contraseña son requeridos"
MISSING_COMPANY = "Por favor selecciona una empresa"
INVALID_CREDENTIALS = "Credenciales inválidas"
AWAITING_APPROVAL = (
    "Este usuario sigue pendiente de aprobación, favor de contactarse con el administrador"
)
CLIENT_REGISTERED = (
    "¡Registro exitoso! Tu cuenta está pendiente de autorización. "
    "En breve recibirás un correo con la confirmación."
)


class LoginError(Exception):
    """Login refused; ``message`` is shown to the user as is."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthService:
    def __init__(self, client: BackendClient):
        self.client = client

    async def login(self, data: LoginRequest) -> tuple[SessionUser, str]:
        """Authenticate and return the session user and backend access token.

        Users still awaiting approval (or rejected) never get a session.
        """
        if not data.email or not data.password:
            raise LoginError(MISSING_CREDENTIALS)
        if not data.company:
            raise LoginError(MISSING_COMPANY)

        try:
            envelope = await self.client.login(data.email, data.password, data.company)
        except ApiServerError as exc:
            raise LoginError(exc.message, 401 if exc.status == 401 else 502) from None

        if not isinstance(envelope, dict):
            envelope = {}
        payload = envelope.get("data")
        if not envelope.get("success") or not isinstance(payload, dict) or not payload.get("token"):
            raise LoginError(envelope.get("error") or INVALID_CREDENTIALS, 401)

        backend_user = BackendUser.model_validate(payload.get("user") or {})
        if (backend_user.status or "").lower() in AWAITING_APPROVAL_STATUSES:
            logger.info("Login refused for %s: status %s", backend_user.identifier, backend_user.status)
            raise LoginError(AWAITING_APPROVAL, 403)

        user = SessionUser.from_backend(backend_user, company=data.company)
        logger.info("User %s signed in for %s", user.identifier, data.company)
        return user, payload["token"]

    async def register(self, data: RegistrationRequest) -> str:
        """Register a client company or a provider; returns the success message."""
        if data.company_type == "provider":
            await self.client.register_vendor(data.to_vendor_payload())
            kind = "proveedor individual" if data.provider_type == "personal" else "empresa proveedora"
            return (
                f"Registro de {kind} exitoso. "
                f"Tu solicitud será enviada a {data.company} para aprobación."
            )

        await self.client.register_company(data.to_company_payload())
        return CLIENT_REGISTERED
