from app.models.payment_dialog import PaymentDialog

__all__ = ["PaymentDialog"]
