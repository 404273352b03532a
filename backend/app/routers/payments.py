"""Multi-invoice payment dialog endpoints.

Every mutation returns the refreshed dialog: the visible invoice list
(search applied, selected first), the allocation state and the
reconciliation summary.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.core.auth import require_user
from app.core.database import get_db
from app.models.payment_dialog import PaymentDialog
from app.schemas.invoice import InvoiceFilters
from app.schemas.payment import (
    AllocationUpdate,
    PaymentDetailsUpdate,
    PaymentDialogOpen,
    PaymentDialogResponse,
    PaymentSubmitResponse,
    SearchUpdate,
    SelectAllRequest,
    ToggleRequest,
)
from app.schemas.user import CurrentUser
from app.services.backend_client import BackendClient, get_backend_client
from app.services.payment_dialog_service import PaymentDialogService

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND_RESPONSE = {404: {"description": "Payment dialog not found"}}


def _get_dialog(
    dialog_id: UUID,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_user),
) -> PaymentDialog:
    try:
        return PaymentDialogService(db).get_dialog(dialog_id, current_user.user.identifier)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None


@router.post(
    "/dialog",
    response_model=PaymentDialogResponse,
    status_code=201,
    summary="Open payment dialog",
    responses={303: {"description": "No valid session, redirected to /login"}},
)
async def open_dialog(
    data: PaymentDialogOpen | None = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_user),
    client: BackendClient = Depends(get_backend_client),
) -> PaymentDialogResponse:
    """Load the caller's invoices and start a fresh dialog over the pending ones."""
    data = data or PaymentDialogOpen()
    filters = InvoiceFilters(company=data.company, limit=data.limit)
    invoices = await client.fetch_invoices(current_user.access_token, filters)

    service = PaymentDialogService(db)
    dialog = service.open_dialog(
        owner=current_user.user.identifier,
        invoices=invoices,
        company=data.company or current_user.user.company,
    )
    logger.info(
        "Opened payment dialog %s for %s with %d pending invoice(s)",
        dialog.id,
        current_user.user.identifier,
        len(dialog.invoices or []),
    )
    return service.to_response(dialog)


@router.get(
    "/dialog/{dialog_id}",
    response_model=PaymentDialogResponse,
    summary="Get payment dialog",
    responses=NOT_FOUND_RESPONSE,
)
async def get_dialog(
    dialog: PaymentDialog = Depends(_get_dialog),
    db: Session = Depends(get_db),
) -> PaymentDialogResponse:
    return PaymentDialogService(db).to_response(dialog)


@router.put(
    "/dialog/{dialog_id}/search",
    response_model=PaymentDialogResponse,
    summary="Filter the invoice list",
    responses=NOT_FOUND_RESPONSE,
)
async def set_search(
    data: SearchUpdate,
    dialog: PaymentDialog = Depends(_get_dialog),
    db: Session = Depends(get_db),
) -> PaymentDialogResponse:
    service = PaymentDialogService(db)
    return service.to_response(service.set_search(dialog, data.search_term))


@router.post(
    "/dialog/{dialog_id}/toggle",
    response_model=PaymentDialogResponse,
    summary="Select or deselect one invoice",
    responses={400: {"description": "Invoice not offered in this dialog"}, **NOT_FOUND_RESPONSE},
)
async def toggle_invoice(
    data: ToggleRequest,
    dialog: PaymentDialog = Depends(_get_dialog),
    db: Session = Depends(get_db),
) -> PaymentDialogResponse:
    service = PaymentDialogService(db)
    try:
        dialog = service.toggle(dialog, data.invoice_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    return service.to_response(dialog)


@router.post(
    "/dialog/{dialog_id}/select-all",
    response_model=PaymentDialogResponse,
    summary="Select all visible (or the given) invoices",
    responses={400: {"description": "Invoice not offered in this dialog"}, **NOT_FOUND_RESPONSE},
)
async def select_all(
    data: SelectAllRequest | None = None,
    dialog: PaymentDialog = Depends(_get_dialog),
    db: Session = Depends(get_db),
) -> PaymentDialogResponse:
    service = PaymentDialogService(db)
    invoice_ids = data.invoice_ids if data else None
    try:
        dialog = service.select_all(dialog, invoice_ids)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    return service.to_response(dialog)


@router.post(
    "/dialog/{dialog_id}/clear",
    response_model=PaymentDialogResponse,
    summary="Clear selection and allocations",
    responses=NOT_FOUND_RESPONSE,
)
async def clear_selection(
    dialog: PaymentDialog = Depends(_get_dialog),
    db: Session = Depends(get_db),
) -> PaymentDialogResponse:
    service = PaymentDialogService(db)
    return service.to_response(service.clear(dialog))


@router.put(
    "/dialog/{dialog_id}/details",
    response_model=PaymentDialogResponse,
    summary="Update amount, method, reference or attachment",
    responses=NOT_FOUND_RESPONSE,
)
async def update_details(
    data: PaymentDetailsUpdate,
    dialog: PaymentDialog = Depends(_get_dialog),
    db: Session = Depends(get_db),
) -> PaymentDialogResponse:
    service = PaymentDialogService(db)
    dialog = service.update_details(
        dialog,
        payment_amount=data.payment_amount,
        payment_method=data.payment_method,
        payment_reference=data.payment_reference,
        attachment=data.attachment,
    )
    return service.to_response(dialog)


@router.post(
    "/dialog/{dialog_id}/auto-allocate",
    response_model=PaymentDialogResponse,
    summary="Distribute the payment in selection order",
    responses=NOT_FOUND_RESPONSE,
)
async def auto_allocate(
    dialog: PaymentDialog = Depends(_get_dialog),
    db: Session = Depends(get_db),
) -> PaymentDialogResponse:
    service = PaymentDialogService(db)
    return service.to_response(service.auto_allocate(dialog))


@router.put(
    "/dialog/{dialog_id}/allocations/{invoice_id}",
    response_model=PaymentDialogResponse,
    summary="Set the amount allocated to one invoice",
    responses={400: {"description": "Invoice is not selected"}, **NOT_FOUND_RESPONSE},
)
async def set_allocation(
    invoice_id: str,
    data: AllocationUpdate,
    dialog: PaymentDialog = Depends(_get_dialog),
    db: Session = Depends(get_db),
) -> PaymentDialogResponse:
    service = PaymentDialogService(db)
    try:
        dialog = service.set_allocation(dialog, invoice_id, data.value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    return service.to_response(dialog)


@router.post(
    "/dialog/{dialog_id}/submit",
    response_model=PaymentSubmitResponse,
    summary="Submit the payment batch",
    responses={
        409: {"description": "Batch not ready: see the reconciliation summary"},
        502: {"model": PaymentSubmitResponse, "description": "Backend rejected the batch"},
        **NOT_FOUND_RESPONSE,
    },
)
async def submit(
    dialog: PaymentDialog = Depends(_get_dialog),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_user),
    client: BackendClient = Depends(get_backend_client),
) -> Response | PaymentSubmitResponse:
    service = PaymentDialogService(db)
    summary = service.to_response(dialog).summary
    if not summary.is_valid:
        raise HTTPException(
            status_code=409,
            detail={
                "message": "Payment batch is not ready for submission",
                "summary": summary.model_dump(mode="json"),
            },
        )

    outcome = await service.submit(dialog, client, current_user.access_token)
    response = PaymentSubmitResponse(
        submitted=outcome.submitted,
        closed=outcome.closed,
        batch=outcome.batch,
        result=outcome.result,
        error=outcome.error,
        dialog=None if outcome.closed else service.to_response(dialog),
    )
    if not outcome.submitted:
        return JSONResponse(status_code=502, content=response.model_dump(mode="json"))
    return response


@router.delete(
    "/dialog/{dialog_id}",
    status_code=204,
    summary="Close payment dialog",
    responses=NOT_FOUND_RESPONSE,
)
async def close_dialog(
    dialog: PaymentDialog = Depends(_get_dialog),
    db: Session = Depends(get_db),
) -> Response:
    PaymentDialogService(db).close(dialog)
    return Response(status_code=204)
