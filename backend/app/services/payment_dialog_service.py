"""Payment dialog service: persists the allocation state between requests."""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.money import parse_amount
from app.models.payment_dialog import PaymentDialog
from app.repositories.payment_dialog_repository import PaymentDialogRepository
from app.schemas.invoice import Invoice
from app.schemas.payment import (
    PaymentBatch,
    PaymentDialogResponse,
    PaymentMethod,
    ReconciliationResponse,
)
from app.services import payment_allocation as allocation
from app.services.backend_client import ApiServerError, BackendClient

logger = logging.getLogger(__name__)


@dataclass
class SubmissionOutcome:
    """Result of handing a payment batch to the backend."""

    batch: PaymentBatch
    submitted: bool
    closed: bool
    result: dict[str, Any] | None = None
    error: str | None = None


class PaymentDialogService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = PaymentDialogRepository(db)

    def open_dialog(
        self,
        owner: str,
        invoices: list[Invoice],
        company: str | None = None,
    ) -> PaymentDialog:
        """Start a fresh dialog over the pending subset of ``invoices``.

        Any dialog the same user left open is discarded first.
        """
        discarded = self.repo.delete_for_owner(owner)
        if discarded:
            logger.info("Discarded %d stale payment dialog(s) for %s", discarded, owner)
        pending = allocation.filter_eligible(invoices)
        snapshot = [invoice.model_dump(mode="json") for invoice in pending]
        return self.repo.create(owner=owner, invoices=snapshot, company=company)

    def get_dialog(self, dialog_id: UUID, owner: str) -> PaymentDialog:
        dialog = self.repo.get_by_id(dialog_id, owner)
        if dialog is None:
            raise LookupError("Payment dialog not found")
        return dialog

    # -- state conversion ------------------------------------------------

    @staticmethod
    def invoices_of(dialog: PaymentDialog) -> list[Invoice]:
        return [Invoice.model_validate(raw) for raw in dialog.invoices or []]

    @staticmethod
    def state_of(dialog: PaymentDialog) -> allocation.AllocationState:
        return allocation.AllocationState(
            selected_invoice_ids=tuple(dialog.selected_invoice_ids or ()),
            allocations={k: parse_amount(v) for k, v in (dialog.allocations or {}).items()},
            payment_amount=str(dialog.payment_amount or ""),
            payment_method=str(dialog.payment_method or ""),
            payment_reference=str(dialog.payment_reference or ""),
            attachment=dialog.attachment,  # type: ignore[arg-type]
            search_term=str(dialog.search_term or ""),
        )

    def _save(self, dialog: PaymentDialog, state: allocation.AllocationState) -> PaymentDialog:
        return self.repo.save_state(
            dialog,
            selected_invoice_ids=list(state.selected_invoice_ids),
            allocations={k: str(v) for k, v in state.allocations.items()},
            payment_amount=state.payment_amount,
            payment_method=state.payment_method,
            payment_reference=state.payment_reference,
            attachment=state.attachment,
            search_term=state.search_term,
        )

    def _totals(self, dialog: PaymentDialog) -> dict[str, Decimal]:
        return allocation.totals_by_id(self.invoices_of(dialog))

    def _require_known(self, dialog: PaymentDialog, invoice_ids: list[str]) -> None:
        known = self._totals(dialog)
        unknown = [invoice_id for invoice_id in invoice_ids if invoice_id not in known]
        if unknown:
            raise ValueError(f"Invoices not available for payment: {', '.join(unknown)}")

    # -- operations ------------------------------------------------------

    def visible_invoices(self, dialog: PaymentDialog) -> list[Invoice]:
        """Invoices matching the search term, selected ones first."""
        state = self.state_of(dialog)
        matches = allocation.search_invoices(self.invoices_of(dialog), state.search_term)
        return allocation.order_selected_first(matches, state)

    def set_search(self, dialog: PaymentDialog, term: str) -> PaymentDialog:
        state = self.state_of(dialog)
        return self._save(dialog, replace(state, search_term=term))

    def toggle(self, dialog: PaymentDialog, invoice_id: str) -> PaymentDialog:
        state = self.state_of(dialog)
        if not state.is_selected(invoice_id):
            self._require_known(dialog, [invoice_id])
        return self._save(dialog, allocation.toggle(state, invoice_id))

    def select_all(self, dialog: PaymentDialog, invoice_ids: list[str] | None = None) -> PaymentDialog:
        if invoice_ids is None:
            state = self.state_of(dialog)
            matches = allocation.search_invoices(self.invoices_of(dialog), state.search_term)
            invoice_ids = [invoice.uuid for invoice in matches]
        else:
            self._require_known(dialog, invoice_ids)
        return self._save(dialog, allocation.select_all(self.state_of(dialog), invoice_ids))

    def clear(self, dialog: PaymentDialog) -> PaymentDialog:
        return self._save(dialog, allocation.clear(self.state_of(dialog)))

    def update_details(
        self,
        dialog: PaymentDialog,
        payment_amount: str | None = None,
        payment_method: PaymentMethod | None = None,
        payment_reference: str | None = None,
        attachment: str | None = None,
    ) -> PaymentDialog:
        state = allocation.update_details(
            self.state_of(dialog),
            payment_amount=payment_amount,
            payment_method=payment_method.value if payment_method else None,
            payment_reference=payment_reference,
            attachment=attachment,
        )
        return self._save(dialog, state)

    def auto_allocate(self, dialog: PaymentDialog) -> PaymentDialog:
        state = allocation.auto_allocate(self.state_of(dialog), self._totals(dialog))
        return self._save(dialog, state)

    def set_allocation(self, dialog: PaymentDialog, invoice_id: str, raw_value: str) -> PaymentDialog:
        state = allocation.set_allocation(self.state_of(dialog), invoice_id, raw_value)
        return self._save(dialog, state)

    def reconcile(self, dialog: PaymentDialog) -> allocation.Reconciliation:
        return allocation.reconcile(
            self.state_of(dialog),
            self._totals(dialog),
            tolerance=settings.PAYMENT_ALLOCATION_TOLERANCE,
            enforce_invoice_cap=settings.PAYMENT_ENFORCE_INVOICE_CAP,
        )

    def close(self, dialog: PaymentDialog) -> None:
        """Discard the dialog and all of its state."""
        self.repo.delete(dialog)

    # -- submission ------------------------------------------------------

    def build_batch(self, dialog: PaymentDialog) -> PaymentBatch:
        """Assemble the submittable batch; raises ValueError when it is not valid yet."""
        summary = self.reconcile(dialog)
        if not summary.is_valid:
            raise ValueError("Payment batch is not ready for submission")
        state = self.state_of(dialog)
        return PaymentBatch(
            selected_invoice_ids=list(state.selected_invoice_ids),
            payment_amount=summary.payment_amount,
            payment_method=PaymentMethod(state.payment_method),
            payment_reference=state.payment_reference,
            allocations=dict(state.allocations),
            attachment=state.attachment,
        )

    async def submit(
        self,
        dialog: PaymentDialog,
        client: BackendClient,
        access_token: str,
    ) -> SubmissionOutcome:
        """Send the batch to the backend and close the dialog per the close policy.

        With ``PAYMENT_CLOSE_POLICY=always`` the dialog closes whatever the
        outcome; with ``on_success`` it stays open after a failure so the
        user can retry.
        """
        batch = self.build_batch(dialog)
        try:
            result = await client.submit_payment_batch(access_token, batch)
        except ApiServerError as exc:
            logger.warning(
                "Payment batch submission failed for dialog %s: %s (%s)",
                dialog.id,
                exc.message,
                exc.code,
            )
            closed = settings.close_on_failure
            if closed:
                self.close(dialog)
            return SubmissionOutcome(batch=batch, submitted=False, closed=closed, error=exc.message)

        logger.info(
            "Submitted payment batch of %s across %d invoice(s)",
            batch.payment_amount,
            len(batch.selected_invoice_ids),
        )
        self.close(dialog)
        return SubmissionOutcome(
            batch=batch,
            submitted=True,
            closed=True,
            result=result if isinstance(result, dict) else None,
        )

    # -- presentation ----------------------------------------------------

    def to_response(self, dialog: PaymentDialog) -> PaymentDialogResponse:
        state = self.state_of(dialog)
        summary = self.reconcile(dialog)
        return PaymentDialogResponse(
            id=dialog.id,  # type: ignore[arg-type]
            invoices=self.visible_invoices(dialog),
            pending_count=len(dialog.invoices or []),
            selected_invoice_ids=list(state.selected_invoice_ids),
            allocations=dict(state.allocations),
            payment_amount=state.payment_amount,
            payment_method=state.payment_method,
            payment_reference=state.payment_reference,
            attachment=state.attachment,
            search_term=state.search_term,
            summary=ReconciliationResponse(
                selected_total=summary.selected_total,
                payment_amount=summary.payment_amount,
                total_allocated=summary.total_allocated,
                remaining_amount=summary.remaining_amount,
                outstanding_balance=summary.outstanding_balance,
                is_fully_allocated=summary.is_fully_allocated,
                over_allocated_invoice_ids=list(summary.over_allocated_invoice_ids),
                is_valid=summary.is_valid,
            ),
            created_at=dialog.created_at,  # type: ignore[arg-type]
            updated_at=dialog.updated_at,  # type: ignore[arg-type]
        )
