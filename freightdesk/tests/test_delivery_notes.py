"""
State machine tests for the three delivery-note shapes.
No database: notes are transient ORM objects.
"""
import pytest

from freightdesk.services.delivery_notes import DeliveryNoteStateMachine
from freightdesk.models.quote import Quote
from freightdesk.schemas.delivery_note import (
    DeliveryNoteCreate,
    PickupOriginCreate,
    ProofPayload,
    SignatureEntry,
    SignLegPayload,
)
from freightdesk.core.enums import LegStatus, NoteShape, NoteStatus, QuoteStatus
from freightdesk.core.errors import (
    AlreadySigned,
    InvalidNoteShape,
    InvalidSignatureDocument,
    MissingProof,
    MissingSignature,
    NoteDeleted,
    QuoteNotApproved,
    StateError,
    UnknownLeg,
    ValidationError,
)


@pytest.fixture
def machine(frozen_clock):
    return DeliveryNoteStateMachine(clock=frozen_clock, document_min_length=8,
                                    require_destination_signature=False)


@pytest.fixture
def quote():
    return Quote(id=11, status=QuoteStatus.APPROVED, destination="Toledo",
                 vehicle_type_name="Furgoneta", distance=72.5)


def multi_pickup(machine, quote, count=3, **kwargs):
    payload = DeliveryNoteCreate(
        quote_id=quote.id,
        shape=NoteShape.MULTI_PICKUP,
        pickup_origins=[PickupOriginCreate(name=f"Almacen {i}") for i in range(count)],
        **kwargs,
    )
    return machine.create(quote, payload, note_number=1)


class TestMultiPickup:

    def test_partial_signing_is_incomplete(self, machine, quote):
        note = multi_pickup(machine, quote)
        machine.sign_leg(note, 0, SignLegPayload(signature="sig-0"))
        machine.sign_leg(note, 1, SignLegPayload(signature="sig-1"))

        status = machine.completion_status(note)
        assert status.pending_count == 1
        assert status.completed_count == 2
        assert status.is_complete is False
        assert machine.status(note) == NoteStatus.PENDING

    def test_problem_leg_still_completes_note(self, machine, quote):
        note = multi_pickup(machine, quote)
        machine.sign_leg(note, 0, SignLegPayload(signature="sig-0"))
        machine.sign_leg(note, 1, SignLegPayload(signature="sig-1"))

        leg = machine.sign_leg(note, 2, SignLegPayload(signature="sig-2", incidence="dañado"))

        assert leg.status == LegStatus.PROBLEM
        status = machine.completion_status(note)
        assert status.pending_count == 0
        assert status.problem_count == 1
        assert status.is_complete is True
        assert machine.status(note) == NoteStatus.SIGNED

    def test_completion_read_is_idempotent(self, machine, quote):
        note = multi_pickup(machine, quote)
        machine.sign_leg(note, 1, SignLegPayload(signature="sig-1"))
        before = dict(note.pickup_origins[1])

        assert machine.completion_status(note) == machine.completion_status(note)
        assert note.pickup_origins[1] == before

    def test_complete_iff_no_pending(self, machine, quote):
        note = multi_pickup(machine, quote, count=4)
        for index in range(4):
            status = machine.completion_status(note)
            assert status.is_complete == (status.pending_count == 0)
            machine.sign_leg(note, index, SignLegPayload(signature=f"sig-{index}"))
        status = machine.completion_status(note)
        assert status.is_complete and status.pending_count == 0

    def test_signed_leg_cannot_be_resigned(self, machine, quote):
        note = multi_pickup(machine, quote)
        machine.sign_leg(note, 0, SignLegPayload(signature="sig-0"))
        with pytest.raises(AlreadySigned):
            machine.sign_leg(note, 0, SignLegPayload(signature="sig-again"))

    def test_sign_stamps_clock_time(self, machine, quote, frozen_clock):
        note = multi_pickup(machine, quote)
        leg = machine.sign_leg(note, 0, SignLegPayload(signature="sig-0"))
        assert leg.signed_at == frozen_clock.now()

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_unknown_leg(self, machine, quote, index):
        note = multi_pickup(machine, quote)
        with pytest.raises(UnknownLeg):
            machine.sign_leg(note, index, SignLegPayload(signature="sig"))

    def test_missing_signature_leaves_leg_pending(self, machine, quote):
        note = multi_pickup(machine, quote)
        with pytest.raises(MissingSignature):
            machine.sign_leg(note, 0, SignLegPayload(signature=" "))
        assert machine.completion_status(note).pending_count == 3

    def test_needs_at_least_one_pickup(self, machine, quote):
        with pytest.raises(InvalidNoteShape):
            multi_pickup(machine, quote, count=0)

    def test_destination_signature_gate(self, machine, quote):
        note = multi_pickup(machine, quote, count=1, require_destination_signature=True)
        machine.sign_leg(note, 0, SignLegPayload(signature="sig-0"))
        assert machine.completion_status(note).is_complete is False

        machine.sign_destination(note, SignatureEntry(signature="dest-sig", document="12345678z"))

        assert machine.completion_status(note).is_complete is True
        assert note.destination_signature_document == "12345678Z"

    def test_destination_signature_survives_stricter_document_rule(self, machine, quote, frozen_clock):
        note = multi_pickup(machine, quote, count=1, require_destination_signature=True)
        machine.sign_leg(note, 0, SignLegPayload(signature="sig"))
        machine.sign_destination(note, SignatureEntry(signature="dest-sig", document="12345678Z"))

        stricter = DeliveryNoteStateMachine(clock=frozen_clock, document_min_length=12)
        assert stricter.completion_status(note).is_complete is True

    def test_destination_signed_once(self, machine, quote):
        note = multi_pickup(machine, quote, count=1)
        machine.sign_destination(note, SignatureEntry(signature="a", document="12345678Z"))
        with pytest.raises(AlreadySigned):
            machine.sign_destination(note, SignatureEntry(signature="b", document="12345678Z"))

    def test_deleted_note_rejects_mutation(self, machine, quote, frozen_clock):
        note = multi_pickup(machine, quote)
        note.deleted_at = frozen_clock.now()
        with pytest.raises(NoteDeleted) as exc:
            machine.sign_leg(note, 0, SignLegPayload(signature="sig"))
        assert isinstance(exc.value, StateError)


class TestSingleProof:

    def test_needs_photo_and_signature(self, machine, quote):
        note = machine.create(quote, DeliveryNoteCreate(quote_id=quote.id), note_number=2)
        assert machine.completion_status(note).is_complete is False

        machine.record_proof(note, ProofPayload(photo="photo-1"))
        assert machine.completion_status(note).is_complete is False
        assert machine.has_any_proof(note) is True

        machine.record_proof(note, ProofPayload(signature="sig"))
        assert machine.completion_status(note).is_complete is True
        assert machine.status(note) == NoteStatus.SIGNED

    def test_photo_replaceable_signature_is_not(self, machine, quote):
        payload = DeliveryNoteCreate(quote_id=quote.id, photo="photo-1", signature="sig")
        note = machine.create(quote, payload, note_number=2)

        machine.record_proof(note, ProofPayload(photo="photo-2"))
        assert note.photo == "photo-2"

        with pytest.raises(AlreadySigned):
            machine.record_proof(note, ProofPayload(signature="sig-2"))

    def test_empty_proof_rejected(self, machine, quote):
        note = machine.create(quote, DeliveryNoteCreate(quote_id=quote.id), note_number=2)
        with pytest.raises(MissingProof):
            machine.record_proof(note, ProofPayload(photo="  "))

    def test_proof_on_other_shapes_rejected(self, machine, quote):
        note = multi_pickup(machine, quote)
        with pytest.raises(InvalidNoteShape):
            machine.record_proof(note, ProofPayload(photo="p"))


class TestOriginDestination:

    def payload(self, quote, **kwargs):
        data = {
            "quote_id": quote.id,
            "shape": NoteShape.ORIGIN_DESTINATION,
            "origin_signature": "origin-sig",
            "origin_signature_document": " x1234567l ",
            "destination_signature": "dest-sig",
            "destination_signature_document": "87654321B",
        }
        data.update(kwargs)
        return DeliveryNoteCreate(**data)

    def test_born_signed(self, machine, quote, frozen_clock):
        note = machine.create(quote, self.payload(quote), note_number=3)

        assert note.origin_signature_document == "X1234567L"
        assert note.origin_signed_at == frozen_clock.now()
        assert note.destination_signed_at == frozen_clock.now()
        assert machine.completion_status(note).is_complete is True
        assert machine.status(note) == NoteStatus.SIGNED

    def test_stays_signed_when_document_rule_tightens(self, machine, quote, frozen_clock):
        note = machine.create(quote, self.payload(quote), note_number=3)
        stricter = DeliveryNoteStateMachine(clock=frozen_clock, document_min_length=12)

        assert stricter.completion_status(note).is_complete is True
        assert stricter.status(note) == NoteStatus.SIGNED

    def test_short_document_rejected(self, machine, quote):
        with pytest.raises(InvalidSignatureDocument):
            machine.create(quote, self.payload(quote, destination_signature_document="1234567"), note_number=3)

    def test_missing_signature_rejected(self, machine, quote):
        with pytest.raises(MissingSignature):
            machine.create(quote, self.payload(quote, origin_signature=None), note_number=3)

    def test_signature_fields_need_matching_shape(self, machine, quote):
        with pytest.raises(InvalidNoteShape):
            machine.create(quote, self.payload(quote, shape=NoteShape.SINGLE), note_number=3)


class TestCreation:

    @pytest.mark.parametrize("status", [QuoteStatus.PENDING, QuoteStatus.REJECTED])
    def test_quote_must_be_approved(self, machine, quote, status):
        quote.status = status
        with pytest.raises(QuoteNotApproved):
            machine.create(quote, DeliveryNoteCreate(quote_id=quote.id), note_number=1)

    def test_copies_quote_details(self, machine, quote):
        note = machine.create(quote, DeliveryNoteCreate(quote_id=quote.id, client_name=" ACME "), note_number=9)
        assert note.note_number == 9
        assert note.client_name == "ACME"
        assert note.destination == "Toledo"
        assert note.vehicle_type == "Furgoneta"
        assert note.distance == 72.5

    def test_errors_share_validation_family(self):
        assert issubclass(InvalidNoteShape, ValidationError)
        assert issubclass(UnknownLeg, ValidationError)
