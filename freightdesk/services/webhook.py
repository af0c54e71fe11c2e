import httpx
import asyncio
import logging
import time
from typing import Optional
from freightdesk.core.config import settings
from freightdesk.core.metrics import webhook_deliveries, webhook_duration

logger = logging.getLogger(__name__)


async def send_webhook(
    payload: dict,
    retries: Optional[int] = None,
    url: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    backoff: float = 1.0,
) -> bool:
    """POST ``payload`` to the invoicing collaborator, retrying with doubling backoff."""
    if retries is None:
        retries = settings.WEBHOOK_RETRIES
    url = url or settings.WEBHOOK_URL
    note_number = payload.get("noteNumber")

    if not url:
        logger.warning(f"WEBHOOK_URL not configured, dropping notice for note {note_number}")
        return False

    for attempt in range(1, retries + 1):
        start_time = time.time()
        try:
            async with httpx.AsyncClient(
                timeout=settings.WEBHOOK_TIMEOUT, transport=transport
            ) as client:
                response = await client.post(url, json=payload)

            if 200 <= response.status_code < 300:
                webhook_deliveries.labels(status="success").inc()
                webhook_duration.labels(status="success").observe(time.time() - start_time)
                logger.info(f"Webhook delivery succeeded for note {note_number}")
                return True

            webhook_deliveries.labels(status="failed").inc()
            logger.warning(
                f"Webhook delivery failed (attempt {attempt}/{retries}): "
                f"Status {response.status_code} for note {note_number}"
            )
        except httpx.TimeoutException:
            webhook_deliveries.labels(status="timeout").inc()
            logger.warning(f"Webhook timeout (attempt {attempt}/{retries}) for note {note_number}")
        except httpx.HTTPError as e:
            webhook_deliveries.labels(status="error").inc()
            logger.warning(
                f"Webhook delivery error (attempt {attempt}/{retries}): {e} "
                f"for note {note_number}"
            )
        webhook_duration.labels(status="failed").observe(time.time() - start_time)

        if attempt < retries:
            await asyncio.sleep(backoff)
            backoff *= 2.0

    logger.error(f"Webhook delivery failed after {retries} attempts for note {note_number}")
    return False
