import asyncio
import logging

from celery import Celery
from freightdesk.core.config import settings

logger = logging.getLogger(__name__)

celery_app = Celery(
    "worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_BACKEND,
)
celery_app.conf.task_routes = {
    "freightdesk.services.tasks.notify_note_completed": {"queue": "notices"}
}


@celery_app.task(bind=True, max_retries=3)
def notify_note_completed(self, note_id: int):
    from freightdesk.services.tasks_internal import notify_note_completed_async

    try:
        delivered = asyncio.run(notify_note_completed_async(note_id))
    except Exception as e:
        raise self.retry(exc=e, countdown=2 ** self.request.retries)
    if delivered is False:
        raise self.retry(countdown=2 ** self.request.retries)


def enqueue_completion_notice(note_id: int) -> None:
    """Queue the invoicing notice; a broker outage never fails the request."""
    if not settings.WEBHOOK_URL:
        return
    try:
        notify_note_completed.delay(note_id)
    except Exception as e:
        logger.error(f"Could not enqueue completion notice for note {note_id}: {e}")
