"""Provider (vendor) schemas."""

from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.money import parse_amount

ProviderStatus = Literal["activo", "pendiente", "rechazado", "revisar"]
KNOWN_PROVIDER_STATUSES = ("activo", "pendiente", "rechazado")


class Provider(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    rfc: str
    name: str = Field(default="", validation_alias="nombre")
    email: str = ""
    currency: str = Field(default="MXN", validation_alias="moneda")
    mxn_total: Decimal = Field(default=Decimal("0"), validation_alias="total_mxn")
    usd_total: Decimal = Field(default=Decimal("0"), validation_alias="total_usd")
    status: ProviderStatus = "revisar"
    key: str = Field(default="", validation_alias="clave")

    @field_validator("mxn_total", "usd_total", mode="before")
    @classmethod
    def _parse_totals(cls, value: Any) -> Decimal:
        return parse_amount(value)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> str:
        # Anything the backend reports outside the known set needs manual review.
        return value if value in KNOWN_PROVIDER_STATUSES else "revisar"

    def matches(self, term: str) -> bool:
        needle = term.lower()
        return (
            needle in self.name.lower()
            or needle in self.rfc.lower()
            or needle in self.email.lower()
        )


class ProviderListResponse(BaseModel):
    providers: list[Provider]
    error: str | None = None
