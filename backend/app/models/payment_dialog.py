"""PaymentDialog model holding the state of an open multi-invoice payment dialog."""

from sqlalchemy import JSON, Column, DateTime, String, func

from app.core.database import Base
from app.models.shared import UUIDType, generate_uuid, utc_now


class PaymentDialog(Base):
    """One open payment dialog per user; the row is deleted when the dialog closes.

    ``invoices`` is the snapshot of pending invoices handed over when the
    dialog opened. ``allocations`` maps invoice uuid to a decimal string.
    """

    __tablename__ = "payment_dialogs"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    owner = Column(String(255), nullable=False, index=True)
    company = Column(String(255), nullable=True)
    invoices = Column(JSON, nullable=False, default=list)
    selected_invoice_ids = Column(JSON, nullable=False, default=list)
    allocations = Column(JSON, nullable=False, default=dict)
    payment_amount = Column(String(50), nullable=False, default="")
    payment_method = Column(String(20), nullable=False, default="")
    payment_reference = Column(String(255), nullable=False, default="")
    attachment = Column(String(500), nullable=True)
    search_term = Column(String(255), nullable=False, default="")

    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
        index=True,
    )
