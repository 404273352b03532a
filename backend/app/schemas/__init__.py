from app.schemas.auth import (
    LoginRequest,
    RegistrationRequest,
    RegistrationResponse,
)
from app.schemas.dashboard import DashboardMetrics, DashboardResponse
from app.schemas.invoice import (
    Currency,
    Invoice,
    InvoiceFilters,
    InvoiceListResponse,
    parse_complement,
)
from app.schemas.payment import (
    PaymentBatch,
    PaymentDialogOpen,
    PaymentDialogResponse,
    PaymentMethod,
    PaymentSubmitResponse,
)
from app.schemas.provider import Provider, ProviderListResponse
from app.schemas.user import BackendUser, CompanyUser, SessionUser

__all__ = [
    "BackendUser",
    "CompanyUser",
    "Currency",
    "DashboardMetrics",
    "DashboardResponse",
    "Invoice",
    "InvoiceFilters",
    "InvoiceListResponse",
    "LoginRequest",
    "PaymentBatch",
    "PaymentDialogOpen",
    "PaymentDialogResponse",
    "PaymentMethod",
    "PaymentSubmitResponse",
    "Provider",
    "ProviderListResponse",
    "RegistrationRequest",
    "RegistrationResponse",
    "SessionUser",
    "parse_complement",
]
