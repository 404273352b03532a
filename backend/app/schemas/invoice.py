"""Invoice schemas.

The backend serialises invoices with Spanish keys (``nombre_emisor``,
``moneda``, ``complementos`` ...). Those keys are accepted as validation
aliases while every response uses the snake_case field names.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.money import parse_amount

PENDING_STATUSES = frozenset({"pending", "pendiente"})


class Currency(str, Enum):
    MXN = "MXN"
    USD = "USD"


class DocumentType(str, Enum):
    PAYMENT = "pago"
    INVOICE = "factura"
    CREDIT_NOTE = "nota"
    CANCELLATION = "cancelacion"
    PAYMENT_COMPLEMENT = "complemento"
    RECEIPT = "recepcion"
    MULTI_PAYMENT = "multipago"
    MULTI_COMPLEMENT = "multicomp"
    GENERIC = "generica"


class _BackendModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class InvoiceDetail(_BackendModel):
    description: str = Field(default="", validation_alias="descripcion")
    unit: str = Field(default="", validation_alias="unidad")


class _ComplementBase(_BackendModel):
    document_type: str = Field(validation_alias="tipo_documento")
    entry_date: str = ""
    id_pdf: str = ""


class _AmountComplement(_ComplementBase):
    total: Decimal = Decimal("0")
    date: str = Field(default="", validation_alias="fecha")

    @field_validator("total", mode="before")
    @classmethod
    def _parse_total(cls, value: Any) -> Decimal:
        return parse_amount(value)


class CreditNote(_AmountComplement):
    kind: Literal["credit_note"] = "credit_note"
    folio: str = ""
    uuid: str = ""
    currency: str = Field(default="", validation_alias="moneda")
    id_xml: str = ""


class Payment(_AmountComplement):
    kind: Literal["payment"] = "payment"
    reference: str = Field(default="", validation_alias="referencia")
    exchange_rate: str = Field(default="", validation_alias="tipo_cambio")


class PaymentComplement(_AmountComplement):
    kind: Literal["payment_complement"] = "payment_complement"
    folio: str = ""
    uuid: str = ""
    operation_number: str = Field(default="", validation_alias="numero_operacion")
    currency: str = Field(default="", validation_alias="moneda")
    id_xml: str = ""


class MultiPayment(_AmountComplement):
    kind: Literal["multi_payment"] = "multi_payment"
    reference: str = Field(default="", validation_alias="referencia")
    exchange_rate: str = Field(default="", validation_alias="tipo_cambio")


class MultiComplement(_AmountComplement):
    kind: Literal["multi_complement"] = "multi_complement"
    folio: str = ""
    uuid: str = ""
    currency: str = Field(default="", validation_alias="moneda")
    id_xml: str = ""


class Cancellation(_ComplementBase):
    kind: Literal["cancellation"] = "cancellation"
    date: str = Field(default="", validation_alias="fecha")
    id_xml: str = ""


class Receipt(_ComplementBase):
    kind: Literal["receipt"] = "receipt"
    num: int = 0


class GenericComplement(_ComplementBase):
    kind: Literal["generic"] = "generic"


Complement = (
    CreditNote
    | Payment
    | PaymentComplement
    | MultiPayment
    | MultiComplement
    | Cancellation
    | Receipt
    | GenericComplement
)

COMPLEMENT_TYPES: dict[str, type[_ComplementBase]] = {
    DocumentType.CREDIT_NOTE.value: CreditNote,
    DocumentType.PAYMENT.value: Payment,
    DocumentType.PAYMENT_COMPLEMENT.value: PaymentComplement,
    DocumentType.MULTI_PAYMENT.value: MultiPayment,
    DocumentType.MULTI_COMPLEMENT.value: MultiComplement,
    DocumentType.CANCELLATION.value: Cancellation,
    DocumentType.RECEIPT.value: Receipt,
}


def parse_complement(raw: Any) -> Complement:
    """Build the complement variant named by ``tipo_documento``.

    Unknown document types become a ``GenericComplement`` instead of being
    guessed from whichever fields happen to be present.
    """
    if isinstance(raw, _ComplementBase):
        return raw  # type: ignore[return-value]
    data = dict(raw or {})
    document_type = str(data.get("tipo_documento") or data.get("document_type") or "generica")
    data["tipo_documento"] = document_type
    model = COMPLEMENT_TYPES.get(document_type.lower(), GenericComplement)
    return model.model_validate(data)  # type: ignore[return-value]


class Invoice(_BackendModel):
    """An invoice as shown in the invoice table and the payment dialog."""

    uuid: str
    folio: str = ""
    company: str = ""
    issuer_name: str = Field(default="", validation_alias="nombre_emisor")
    invoice_date: date | None = None
    entry_date: date | None = None
    total: Decimal = Decimal("0")
    subtotal: Decimal = Decimal("0")
    currency: str = Field(default=Currency.MXN.value, validation_alias="moneda")
    status: str = ""
    payment_conditions: str = Field(default="", validation_alias="condiciones_pago")
    payment_method: str = Field(default="", validation_alias="metodo_pago")
    use_cfdi: str = Field(default="", validation_alias="uso_cfdi")
    user: str = ""
    url_pdf_file: str = ""
    url_xml_file: str = ""
    balance: Decimal = Field(default=Decimal("0"), validation_alias="saldo")
    exchange_rate: str = Field(default="1", validation_alias="tipo_cambio")
    details: list[InvoiceDetail] = Field(default_factory=list, validation_alias="detalle")
    complements: list[Complement] = Field(default_factory=list, validation_alias="complementos")

    @field_validator("total", "subtotal", "balance", mode="before")
    @classmethod
    def _parse_amounts(cls, value: Any) -> Decimal:
        return parse_amount(value)

    @field_validator("invoice_date", "entry_date", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        if value in (None, ""):
            return None
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value

    @field_validator("currency", mode="before")
    @classmethod
    def _normalize_currency(cls, value: Any) -> Any:
        # Currencies other than MXN and USD pass through upper-cased.
        if value in (None, ""):
            return Currency.MXN.value
        return str(value).upper()

    @field_validator("complements", mode="before")
    @classmethod
    def _parse_complements(cls, value: Any) -> list[Any]:
        return [parse_complement(item) for item in value or []]

    @property
    def is_pending(self) -> bool:
        return self.status in PENDING_STATUSES


class InvoiceFilters(BaseModel):
    """Query filters forwarded to the backend invoice listing."""

    user: str | None = None
    name: str | None = None
    company: str | None = None
    folio: str | None = None
    status: str | None = None
    uuid: str | None = None
    invoice_date: date | None = None
    entry_date: date | None = None
    limit: int | None = Field(default=None, ge=1, le=1000)
    date_sort: Literal["asc", "desc"] | None = None
    entry_date_sort: Literal["asc", "desc"] | None = None

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        for key, value in self.model_dump(exclude_none=True).items():
            key = "date" if key == "invoice_date" else key
            params[key] = value.isoformat() if isinstance(value, date) else str(value)
        return params


class InvoiceListResponse(BaseModel):
    invoices: list[Invoice]
    error: str | None = None


class InvoiceDeleteResponse(BaseModel):
    success: bool
    message: str = ""
