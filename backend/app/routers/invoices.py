import logging
from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from app.core.auth import require_user
from app.schemas.invoice import Invoice, InvoiceDeleteResponse, InvoiceFilters, InvoiceListResponse
from app.schemas.user import CurrentUser
from app.services.backend_client import ApiServerError, BackendClient, get_backend_client

logger = logging.getLogger(__name__)

router = APIRouter()

INVOICES_LOAD_ERROR = "Error al cargar facturas. Por favor intenta de nuevo más tarde."
INVOICE_NOT_FOUND = "Factura no encontrada"


@router.get(
    "",
    response_model=InvoiceListResponse,
    summary="List invoices",
    responses={303: {"description": "No valid session, redirected to /login"}},
)
async def list_invoices(
    user: str | None = Query(default=None),
    name: str | None = Query(default=None),
    company: str | None = Query(default=None),
    folio: str | None = Query(default=None),
    status: str | None = Query(default=None),
    uuid: str | None = Query(default=None),
    invoice_date: date | None = Query(default=None, alias="date"),
    entry_date: date | None = Query(default=None),
    limit: int | None = Query(default=None, ge=1, le=1000),
    date_sort: Literal["asc", "desc"] | None = Query(default=None),
    entry_date_sort: Literal["asc", "desc"] | None = Query(default=None),
    current_user: CurrentUser = Depends(require_user),
    client: BackendClient = Depends(get_backend_client),
) -> InvoiceListResponse:
    filters = InvoiceFilters(
        user=user,
        name=name,
        company=company,
        folio=folio,
        status=status,
        uuid=uuid,
        invoice_date=invoice_date,
        entry_date=entry_date,
        limit=limit,
        date_sort=date_sort,
        entry_date_sort=entry_date_sort,
    )
    try:
        invoices = await client.fetch_invoices(current_user.access_token, filters)
    except ApiServerError as exc:
        logger.warning("Invoice list failed for %s: %s", current_user.user.identifier, exc.message)
        return InvoiceListResponse(invoices=[], error=INVOICES_LOAD_ERROR)
    return InvoiceListResponse(invoices=invoices)


@router.get(
    "/{invoice_id}",
    response_model=Invoice,
    summary="Get invoice",
    responses={404: {"description": "Invoice not found"}},
)
async def get_invoice(
    invoice_id: str,
    current_user: CurrentUser = Depends(require_user),
    client: BackendClient = Depends(get_backend_client),
) -> Invoice:
    try:
        return await client.fetch_invoice(current_user.access_token, invoice_id)
    except ApiServerError as exc:
        if exc.status == 404:
            raise HTTPException(status_code=404, detail=INVOICE_NOT_FOUND) from None
        raise


@router.delete(
    "/{invoice_id}",
    response_model=InvoiceDeleteResponse,
    summary="Delete invoice",
    responses={404: {"description": "Invoice not found"}},
)
async def delete_invoice(
    invoice_id: str,
    current_user: CurrentUser = Depends(require_user),
    client: BackendClient = Depends(get_backend_client),
) -> InvoiceDeleteResponse:
    try:
        result = await client.delete_invoice(current_user.access_token, invoice_id)
    except ApiServerError as exc:
        if exc.status == 404:
            raise HTTPException(status_code=404, detail=INVOICE_NOT_FOUND) from None
        raise
    logger.info("Invoice %s deleted by %s", invoice_id, current_user.user.identifier)
    return InvoiceDeleteResponse(success=True, message=str(result.get("message", "")))
