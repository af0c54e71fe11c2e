import logging
from typing import Optional

from freightdesk.core.errors import AlreadyDeleted, NotDeleted, PurgeNotAllowed
from freightdesk.models.delivery_note import DeliveryNote
from freightdesk.utils.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class DeletionLedger:
    """Soft-delete bookkeeping for delivery notes.

    Active -> soft_delete -> SoftDeleted -> restore -> Active
                                         -> purge   -> Gone

    ``purge`` only validates; the hard delete belongs to the store. Whether
    the tenant's retention policy allows purging is decided outside and
    passed in as ``purge_allowed``.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or SystemClock()

    @staticmethod
    def is_deleted(note: DeliveryNote) -> bool:
        return note.deleted_at is not None

    def soft_delete(self, note: DeliveryNote) -> DeliveryNote:
        if self.is_deleted(note):
            raise AlreadyDeleted(f"Delivery note {note.note_number} is already deleted")
        note.deleted_at = self.clock.now()
        logger.info(f"Delivery note {note.note_number} soft-deleted")
        return note

    def restore(self, note: DeliveryNote) -> DeliveryNote:
        if not self.is_deleted(note):
            raise NotDeleted(f"Delivery note {note.note_number} is not deleted")
        note.deleted_at = None
        logger.info(f"Delivery note {note.note_number} restored")
        return note

    def purge(self, note: DeliveryNote, purge_allowed: bool) -> None:
        if not self.is_deleted(note):
            raise NotDeleted(
                f"Delivery note {note.note_number} must be soft-deleted before purging"
            )
        if not purge_allowed:
            raise PurgeNotAllowed(f"Delivery note {note.note_number} cannot be purged yet")
        logger.info(f"Delivery note {note.note_number} cleared for purge")
