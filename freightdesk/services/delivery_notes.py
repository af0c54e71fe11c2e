"""Delivery-note completion state machine.

Completion is never stored: it is recomputed from the note's legs and
signature fields on every read, so it cannot drift from the proof itself.

Three shapes are supported:

* ``single`` - one combined proof; complete when both photo and signature
  are present.
* ``origin_destination`` - origin and destination signatures, each with an
  identity document, collected before creation; the note is born signed.
* ``multi_pickup`` - complete when no pickup leg is pending and, if the note
  requires it, the destination signature has been recorded.
"""
import logging
from typing import Optional

from freightdesk.core.config import settings
from freightdesk.core.enums import LegStatus, NoteShape, NoteStatus, QuoteStatus
from freightdesk.core.errors import (
    AlreadySigned,
    InvalidNoteShape,
    InvalidSignatureDocument,
    MissingProof,
    MissingSignature,
    NoteDeleted,
    QuoteNotApproved,
    UnknownLeg,
)
from freightdesk.models.delivery_note import DeliveryNote
from freightdesk.models.quote import Quote
from freightdesk.schemas.delivery_note import (
    CompletionStatus,
    DeliveryNoteCreate,
    PickupOrigin,
    ProofPayload,
    SignatureEntry,
    SignLegPayload,
)
from freightdesk.services.pickup_legs import clean_text, dump_legs, load_legs, new_leg, sign_pickup
from freightdesk.utils.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class DeliveryNoteStateMachine:

    def __init__(
        self,
        clock: Optional[Clock] = None,
        document_min_length: Optional[int] = None,
        require_destination_signature: Optional[bool] = None,
    ):
        self.clock = clock or SystemClock()
        self.document_min_length = (
            document_min_length
            if document_min_length is not None
            else settings.SIGNATURE_DOCUMENT_MIN_LENGTH
        )
        self.require_destination_signature = (
            require_destination_signature
            if require_destination_signature is not None
            else settings.REQUIRE_DESTINATION_SIGNATURE
        )

    def _signature_pair(self, signature: Optional[str], document: Optional[str], side: str):
        signature = clean_text(signature)
        if not signature:
            raise MissingSignature(f"The {side} signature is required")
        document = clean_text(document)
        if not document or len(document) < self.document_min_length:
            raise InvalidSignatureDocument(
                f"The {side} signer document needs at least "
                f"{self.document_min_length} characters"
            )
        return signature, document.upper()

    @staticmethod
    def _ensure_active(note: DeliveryNote) -> None:
        if note.deleted_at is not None:
            raise NoteDeleted(f"Delivery note {note.note_number} is deleted")

    def create(self, quote: Quote, payload: DeliveryNoteCreate, note_number: int) -> DeliveryNote:
        if quote.status != QuoteStatus.APPROVED:
            raise QuoteNotApproved(f"Quote {quote.id} is {quote.status}, not approved")

        shape = payload.shape
        legs = [new_leg(item) for item in payload.pickup_origins]
        if shape == NoteShape.MULTI_PICKUP and not legs:
            raise InvalidNoteShape("A multi-pickup note needs at least one pickup")

        pair_fields = (
            payload.origin_signature,
            payload.origin_signature_document,
            payload.destination_signature,
            payload.destination_signature_document,
        )
        if shape != NoteShape.ORIGIN_DESTINATION and any(pair_fields):
            raise InvalidNoteShape(
                "Origin/destination signatures only apply to origin_destination notes"
            )
        if shape != NoteShape.SINGLE and (payload.photo or payload.signature):
            raise InvalidNoteShape("Combined photo/signature only applies to single notes")

        now = self.clock.now()
        require_destination = (
            payload.require_destination_signature
            if payload.require_destination_signature is not None
            else self.require_destination_signature
        )
        note = DeliveryNote(
            note_number=note_number,
            quote_id=quote.id,
            shape=shape,
            client_name=clean_text(payload.client_name) or quote.customer_name,
            destination=clean_text(payload.destination) or quote.destination,
            vehicle_type=quote.vehicle_type_name,
            distance=quote.distance,
            observations=clean_text(payload.observations),
            pickup_origins=dump_legs(legs),
            require_destination_signature=(
                shape == NoteShape.MULTI_PICKUP and bool(require_destination)
            ),
        )

        if shape == NoteShape.ORIGIN_DESTINATION:
            origin_signature, origin_document = self._signature_pair(
                payload.origin_signature, payload.origin_signature_document, "origin"
            )
            destination_signature, destination_document = self._signature_pair(
                payload.destination_signature,
                payload.destination_signature_document,
                "destination",
            )
            note.origin_signature = origin_signature
            note.origin_signature_document = origin_document
            note.origin_signed_at = now
            note.destination_signature = destination_signature
            note.destination_signature_document = destination_document
            note.destination_signed_at = now
        elif shape == NoteShape.SINGLE:
            note.photo = clean_text(payload.photo)
            note.signature = clean_text(payload.signature)
            if note.signature:
                note.signed_at = now

        logger.info(
            f"Delivery note {note_number} created from quote {quote.id} "
            f"({shape}, {len(legs)} pickups)"
        )
        return note

    def sign_leg(self, note: DeliveryNote, leg_index: int, payload: SignLegPayload) -> PickupOrigin:
        self._ensure_active(note)
        legs = load_legs(note.pickup_origins)
        if leg_index < 0 or leg_index >= len(legs):
            raise UnknownLeg(f"Delivery note {note.note_number} has no pickup {leg_index}")

        signed = sign_pickup(legs[leg_index], payload, self.clock.now())
        legs[leg_index] = signed
        note.pickup_origins = dump_legs(legs)

        logger.info(
            f"Pickup {leg_index} of delivery note {note.note_number} signed as {signed.status}"
        )
        return signed

    def record_proof(self, note: DeliveryNote, payload: ProofPayload) -> DeliveryNote:
        self._ensure_active(note)
        if note.shape != NoteShape.SINGLE:
            raise InvalidNoteShape(f"Delivery note {note.note_number} is {note.shape}")

        photo = clean_text(payload.photo)
        signature = clean_text(payload.signature)
        if not photo and not signature:
            raise MissingProof()
        if signature and note.signature:
            raise AlreadySigned(f"Delivery note {note.note_number} is already signed")

        if photo:
            note.photo = photo
        if signature:
            note.signature = signature
            note.signed_at = self.clock.now()
        return note

    def sign_destination(self, note: DeliveryNote, payload: SignatureEntry) -> DeliveryNote:
        self._ensure_active(note)
        if note.shape != NoteShape.MULTI_PICKUP:
            raise InvalidNoteShape(f"Delivery note {note.note_number} is {note.shape}")
        if note.destination_signature:
            raise AlreadySigned(
                f"Destination of delivery note {note.note_number} is already signed"
            )

        signature, document = self._signature_pair(
            payload.signature, payload.document, "destination"
        )
        note.destination_signature = signature
        note.destination_signature_document = document
        note.destination_signed_at = self.clock.now()
        return note

    def completion_status(self, note: DeliveryNote) -> CompletionStatus:
        legs = load_legs(note.pickup_origins)
        pending = sum(1 for leg in legs if leg.status == LegStatus.PENDING)
        completed = sum(1 for leg in legs if leg.status == LegStatus.COMPLETED)
        problem = sum(1 for leg in legs if leg.status == LegStatus.PROBLEM)

        if note.shape == NoteShape.ORIGIN_DESTINATION:
            is_complete = (
                bool(note.origin_signature)
                and bool(note.origin_signature_document)
                and bool(note.destination_signature)
                and bool(note.destination_signature_document)
            )
        elif note.shape == NoteShape.MULTI_PICKUP:
            is_complete = bool(legs) and pending == 0
            if note.require_destination_signature:
                is_complete = (
                    is_complete
                    and bool(note.destination_signature)
                    and bool(note.destination_signature_document)
                )
        else:
            is_complete = bool(note.photo) and bool(note.signature)

        return CompletionStatus(
            is_complete=is_complete,
            pending_count=pending,
            completed_count=completed,
            problem_count=problem,
        )

    def status(self, note: DeliveryNote) -> NoteStatus:
        if self.completion_status(note).is_complete:
            return NoteStatus.SIGNED
        return NoteStatus.PENDING

    @staticmethod
    def has_any_proof(note: DeliveryNote) -> bool:
        """Loose card-view hint: photo or signature present. Not a completion check."""
        return bool(note.photo) or bool(note.signature)
