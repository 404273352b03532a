from app.repositories.payment_dialog_repository import PaymentDialogRepository

__all__ = [
    "PaymentDialogRepository",
]
