"""Dashboard metrics computed from the backend's invoices, providers and balances."""

from app.core.money import ZERO
from app.schemas.dashboard import CurrencyBalance, DashboardMetrics, RecentActivity
from app.schemas.invoice import Invoice
from app.schemas.provider import Provider
from app.schemas.user import CurrentUser
from app.services.backend_client import BackendClient

RECENT_ACTIVITY_LIMIT = 3


def _recent_activity(invoices: list[Invoice]) -> list[RecentActivity]:
    return [
        RecentActivity(
            description=f"Nueva factura recibida de {invoice.issuer_name}",
            amount=invoice.total,
            time=invoice.entry_date.isoformat() if invoice.entry_date else "",
        )
        for invoice in invoices[:RECENT_ACTIVITY_LIMIT]
    ]


def build_metrics(
    invoices: list[Invoice],
    providers: list[Provider],
    balances: list[CurrencyBalance],
) -> DashboardMetrics:
    total_revenue = sum((invoice.total for invoice in invoices), ZERO)
    return DashboardMetrics(
        total_revenue=total_revenue,
        total_invoices=len(invoices),
        active_providers=sum(1 for provider in providers if provider.status == "activo"),
        balances=balances,
        recent_activity=_recent_activity(invoices),
    )


class DashboardService:
    def __init__(self, client: BackendClient):
        self.client = client

    async def get_metrics(self, current_user: CurrentUser) -> DashboardMetrics:
        """Load everything the dashboard shows; raises ApiServerError on backend failure."""
        token = current_user.access_token
        invoices = await self.client.fetch_invoices(token)
        providers = await self.client.fetch_providers(token)
        balances = await self.client.fetch_balances(token)
        return build_metrics(invoices, providers, balances)
