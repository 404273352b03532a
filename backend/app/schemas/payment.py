"""Schemas for the multi-invoice payment dialog."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from app.schemas.invoice import Invoice


class PaymentMethod(str, Enum):
    TRANSFER = "transfer"
    CHECK = "check"
    CASH = "cash"
    CARD = "card"


class PaymentDialogOpen(BaseModel):
    """Optional backend filters used to load the invoices offered in the dialog."""

    company: str | None = None
    limit: int | None = Field(default=None, ge=1, le=1000)


class SearchUpdate(BaseModel):
    search_term: str = ""


class ToggleRequest(BaseModel):
    invoice_id: str = Field(..., min_length=1)


class SelectAllRequest(BaseModel):
    """``invoice_ids`` omitted means every invoice currently visible."""

    invoice_ids: list[str] | None = None


class PaymentDetailsUpdate(BaseModel):
    payment_amount: str | None = None
    payment_method: PaymentMethod | None = None
    payment_reference: str | None = None
    attachment: str | None = None


class AllocationUpdate(BaseModel):
    value: str = ""


class ReconciliationResponse(BaseModel):
    selected_total: Decimal
    payment_amount: Decimal
    total_allocated: Decimal
    remaining_amount: Decimal
    outstanding_balance: Decimal
    is_fully_allocated: bool
    over_allocated_invoice_ids: list[str]
    is_valid: bool


class PaymentDialogResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    invoices: list[Invoice]
    pending_count: int
    selected_invoice_ids: list[str]
    allocations: dict[str, Decimal]
    payment_amount: str
    payment_method: str
    payment_reference: str
    attachment: str | None = None
    search_term: str
    summary: ReconciliationResponse
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PaymentBatch(BaseModel):
    """The submittable record handed to the backend."""

    selected_invoice_ids: list[str]
    payment_amount: Decimal
    payment_method: PaymentMethod
    payment_reference: str
    allocations: dict[str, Decimal]
    attachment: str | None = None

    @field_serializer("payment_amount")
    def _serialize_amount(self, value: Decimal) -> str:
        return str(value)

    @field_serializer("allocations")
    def _serialize_allocations(self, value: dict[str, Decimal]) -> dict[str, str]:
        return {invoice_id: str(amount) for invoice_id, amount in value.items()}


class PaymentSubmitResponse(BaseModel):
    submitted: bool
    closed: bool
    batch: PaymentBatch
    result: dict[str, Any] | None = None
    error: str | None = None
    dialog: PaymentDialogResponse | None = None
