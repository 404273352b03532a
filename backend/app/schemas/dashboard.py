from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class CurrencyBalance(BaseModel):
    """Per-currency balance as reported by ``/api/invoices/balances``."""

    model_config = ConfigDict(extra="ignore")

    currency: str
    total_balance: Decimal = Decimal("0")
    pending_balance: Decimal = Decimal("0")
    paid_balance: Decimal = Decimal("0")
    invoice_count: int = 0


class RecentActivity(BaseModel):
    description: str
    amount: Decimal
    time: str


class DashboardMetrics(BaseModel):
    total_revenue: Decimal
    total_invoices: int
    active_providers: int
    balances: list[CurrencyBalance] = Field(default_factory=list)
    recent_activity: list[RecentActivity] = Field(default_factory=list)


class DashboardResponse(BaseModel):
    metrics: DashboardMetrics | None
    error: str | None = None
