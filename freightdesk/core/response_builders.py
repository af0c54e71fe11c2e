from freightdesk.models.delivery_note import DeliveryNote
from freightdesk.models.quote import Quote
from freightdesk.schemas.delivery_note import DeliveryNoteOut
from freightdesk.schemas.pricing import PriceBreakdown
from freightdesk.schemas.quote import QuoteOut
from freightdesk.services.delivery_notes import DeliveryNoteStateMachine
from freightdesk.services.pickup_legs import load_legs


def build_breakdown(quote: Quote) -> PriceBreakdown:
    return PriceBreakdown(
        base_price=quote.base_price,
        distance_cost=quote.distance_cost,
        toll_cost=quote.toll_cost or 0.0,
        urgency_surcharge=quote.urgency_surcharge or 0.0,
        extras_cost=quote.extras_cost or 0.0,
        total_price=quote.total_price,
        min_price=quote.min_price or 0.0,
        source=quote.pricing_source,
        pricing_rule_id=quote.pricing_rule_id,
        zone_name=quote.zone_name,
    )


def build_quote_response(quote: Quote) -> QuoteOut:
    return QuoteOut(
        id=quote.id,
        origin=quote.origin,
        destination=quote.destination,
        origin_coords=quote.origin_coords,
        destination_coords=quote.destination_coords,
        distance=quote.distance,
        duration=quote.duration,
        vehicle_type_id=quote.vehicle_type_id,
        vehicle_type_name=quote.vehicle_type_name,
        is_urgent=quote.is_urgent,
        extras=quote.extras or [],
        customer_name=quote.customer_name,
        phone_number=quote.phone_number,
        pickup_time=quote.pickup_time,
        observations=quote.observations,
        breakdown=build_breakdown(quote),
        total_price=quote.total_price,
        status=quote.status,
        created_at=quote.created_at,
        updated_at=quote.updated_at,
    )


def build_note_response(note: DeliveryNote, machine: DeliveryNoteStateMachine) -> DeliveryNoteOut:
    completion = machine.completion_status(note)
    return DeliveryNoteOut(
        id=note.id,
        note_number=note.note_number,
        quote_id=note.quote_id,
        shape=note.shape,
        status=machine.status(note),
        client_name=note.client_name,
        destination=note.destination,
        vehicle_type=note.vehicle_type,
        distance=note.distance,
        observations=note.observations,
        pickup_origins=load_legs(note.pickup_origins),
        photo=note.photo,
        signature=note.signature,
        signed_at=note.signed_at,
        origin_signature=note.origin_signature,
        origin_signature_document=note.origin_signature_document,
        origin_signed_at=note.origin_signed_at,
        destination_signature=note.destination_signature,
        destination_signature_document=note.destination_signature_document,
        destination_signed_at=note.destination_signed_at,
        require_destination_signature=bool(note.require_destination_signature),
        has_any_proof=machine.has_any_proof(note),
        completion=completion,
        deleted_at=note.deleted_at,
        created_at=note.created_at,
        updated_at=note.updated_at,
    )


def build_quote_response_list(quotes: list) -> list:
    return [build_quote_response(quote) for quote in quotes]


def build_note_response_list(notes: list, machine: DeliveryNoteStateMachine) -> list:
    return [build_note_response(note, machine) for note in notes]
