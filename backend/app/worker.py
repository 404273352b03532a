import logging
from datetime import timedelta
from typing import Any

from arq import cron

from app.core.config import settings
from app.core.database import SessionLocal
from app.models.shared import utc_now
from app.repositories.payment_dialog_repository import PaymentDialogRepository
from app.tasks import redis_settings

logger = logging.getLogger(__name__)


async def purge_stale_payment_dialogs_task(ctx: dict[str, Any]) -> int:
    """Background task: delete payment dialogs nobody has touched for a while.

    A browser closed mid-payment never sends the close request, so its
    dialog row would otherwise linger. Runs every 15 minutes.
    """
    db = SessionLocal()
    try:
        cutoff = utc_now() - timedelta(minutes=settings.PAYMENT_DIALOG_TTL_MINUTES)
        count = PaymentDialogRepository(db).delete_stale(older_than=cutoff)
        if count > 0:
            logger.info("Purged %d stale payment dialogs", count)
        return count
    finally:
        db.close()


class WorkerSettings:
    functions = [
        purge_stale_payment_dialogs_task,
    ]
    cron_jobs = [
        cron(purge_stale_payment_dialogs_task, minute={0, 15, 30, 45}),
    ]
    redis_settings = redis_settings
