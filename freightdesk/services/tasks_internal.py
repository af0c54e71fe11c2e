import logging
from typing import Optional

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from freightdesk.core.config import settings
from freightdesk.db.stores import DeliveryNoteStore
from freightdesk.models.delivery_note import DeliveryNote
from freightdesk.services.delivery_notes import DeliveryNoteStateMachine
from freightdesk.services.webhook import send_webhook

logger = logging.getLogger(__name__)

engine_worker = create_async_engine(settings.DATABASE_URL, future=True, echo=False)
AsyncSessionWorker = sessionmaker(engine_worker, class_=AsyncSession, expire_on_commit=False)


def completion_notice(note: DeliveryNote, machine: DeliveryNoteStateMachine) -> dict:
    completion = machine.completion_status(note)
    return {
        "event": "delivery_note.completed",
        "noteId": note.id,
        "noteNumber": note.note_number,
        "quoteId": note.quote_id,
        "shape": str(note.shape),
        "status": str(machine.status(note)),
        "clientName": note.client_name,
        "pendingCount": completion.pending_count,
        "completedCount": completion.completed_count,
        "problemCount": completion.problem_count,
    }


async def notify_note_completed_async(note_id: int, session_factory=None) -> Optional[bool]:
    """Send the completion notice; None when there is nothing to send."""
    session_factory = session_factory or AsyncSessionWorker
    machine = DeliveryNoteStateMachine()

    async with session_factory() as db:
        note = await DeliveryNoteStore(db).get(note_id)
        if note is None or note.deleted_at is not None:
            logger.info(f"Delivery note {note_id} gone before its completion notice")
            return None
        if not machine.completion_status(note).is_complete:
            logger.warning(f"Delivery note {note_id} is no longer complete, notice skipped")
            return None
        payload = completion_notice(note, machine)

    return await send_webhook(payload)
