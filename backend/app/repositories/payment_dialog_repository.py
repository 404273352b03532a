"""PaymentDialog repository for data access."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from app.models.payment_dialog import PaymentDialog


class PaymentDialogRepository:
    """Repository for PaymentDialog model."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, dialog_id: UUID, owner: str) -> PaymentDialog | None:
        """Get an open dialog belonging to ``owner``."""
        return (
            self.db.query(PaymentDialog)
            .filter(PaymentDialog.id == dialog_id, PaymentDialog.owner == owner)
            .first()
        )

    def create(
        self,
        owner: str,
        invoices: list[dict[str, Any]],
        company: str | None = None,
    ) -> PaymentDialog:
        dialog = PaymentDialog(
            owner=owner,
            company=company,
            invoices=invoices,
            selected_invoice_ids=[],
            allocations={},
            payment_amount="",
            payment_method="",
            payment_reference="",
            attachment=None,
            search_term="",
        )
        self.db.add(dialog)
        self.db.commit()
        self.db.refresh(dialog)
        return dialog

    def save_state(self, dialog: PaymentDialog, **fields: Any) -> PaymentDialog:
        """Overwrite the given state columns of a dialog."""
        for key, value in fields.items():
            setattr(dialog, key, value)
        self.db.commit()
        self.db.refresh(dialog)
        return dialog

    def delete(self, dialog: PaymentDialog) -> None:
        self.db.delete(dialog)
        self.db.commit()

    def delete_for_owner(self, owner: str) -> int:
        """Discard every dialog left open by ``owner``."""
        count = self.db.query(PaymentDialog).filter(PaymentDialog.owner == owner).delete()
        self.db.commit()
        return count

    def delete_stale(self, older_than: datetime) -> int:
        """Discard dialogs not touched since ``older_than``."""
        count = (
            self.db.query(PaymentDialog)
            .filter(PaymentDialog.updated_at < older_than)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return count
