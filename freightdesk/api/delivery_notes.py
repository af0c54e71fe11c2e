import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from freightdesk.core.audit_decorator import audit_log
from freightdesk.core.dependencies import get_deletion_ledger, get_state_machine, purge_allowed
from freightdesk.core.enums import AuditAction
from freightdesk.core.errors import QuoteAlreadyUsed
from freightdesk.core.lookup import check_not_found
from freightdesk.core.metrics import notes_completed, pickups_signed
from freightdesk.core.rate_limit import check_rate_limit
from freightdesk.core.response_builders import build_note_response, build_note_response_list
from freightdesk.db.session import get_db
from freightdesk.db.stores import DeliveryNoteStore, QuoteStore
from freightdesk.models.delivery_note import DeliveryNote
from freightdesk.schemas.delivery_note import (
    CompletionStatus,
    DeliveryNoteCreate,
    DeliveryNoteOut,
    PickupOrigin,
    ProofPayload,
    SignatureEntry,
    SignLegPayload,
)
from freightdesk.services.deletion import DeletionLedger
from freightdesk.services.delivery_notes import DeliveryNoteStateMachine
from freightdesk.services.tasks import enqueue_completion_notice
from freightdesk.utils.idempotency import get_idempotent, set_idempotent

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/delivery-notes", tags=["delivery-notes"])


async def _load_for_update(store: DeliveryNoteStore, note_id: int) -> DeliveryNote:
    note = await store.get(note_id, for_update=True)
    check_not_found(note, "Delivery note", note_id)
    return note


def _announce_completion(note: DeliveryNote, was_complete: bool, machine: DeliveryNoteStateMachine) -> None:
    if was_complete or not machine.completion_status(note).is_complete:
        return
    notes_completed.labels(shape=str(note.shape)).inc()
    logger.info(f"Delivery note {note.note_number} completed")
    enqueue_completion_notice(note.id)


@router.post("/", response_model=DeliveryNoteOut, status_code=201, dependencies=[Depends(check_rate_limit)])
@audit_log(AuditAction.CREATE_DELIVERY_NOTE)
async def create_delivery_note(
    payload: DeliveryNoteCreate,
    idempotency_key: Optional[str] = Header(None),
    x_actor: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    machine: DeliveryNoteStateMachine = Depends(get_state_machine),
):
    if idempotency_key:
        prev = await get_idempotent(idempotency_key)
        if prev:
            return prev

    quote = await QuoteStore(db).get(payload.quote_id)
    check_not_found(quote, "Quote", payload.quote_id)

    store = DeliveryNoteStore(db)
    if await store.quote_in_use(quote.id):
        raise QuoteAlreadyUsed(f"Quote {quote.id} already has a delivery note")

    note = machine.create(quote, payload, await store.next_note_number())
    note = await store.add(note)
    _announce_completion(note, False, machine)

    out = build_note_response(note, machine)
    if idempotency_key:
        await set_idempotent(idempotency_key, out.model_dump(mode="json", by_alias=True))
    return out


@router.get("/", response_model=List[DeliveryNoteOut])
async def list_delivery_notes(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    machine: DeliveryNoteStateMachine = Depends(get_state_machine),
):
    notes = await DeliveryNoteStore(db).list(deleted=False, limit=limit, offset=offset)
    return build_note_response_list(notes, machine)


@router.get("/deleted", response_model=List[DeliveryNoteOut])
async def list_deleted_delivery_notes(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    machine: DeliveryNoteStateMachine = Depends(get_state_machine),
):
    notes = await DeliveryNoteStore(db).list(deleted=True, limit=limit, offset=offset)
    return build_note_response_list(notes, machine)


@router.get("/{note_id}", response_model=DeliveryNoteOut)
async def get_delivery_note(
    note_id: int,
    db: AsyncSession = Depends(get_db),
    machine: DeliveryNoteStateMachine = Depends(get_state_machine),
):
    note = await DeliveryNoteStore(db).get(note_id)
    check_not_found(note, "Delivery note", note_id)
    return build_note_response(note, machine)


@router.get("/{note_id}/completion", response_model=CompletionStatus)
async def get_completion_status(
    note_id: int,
    db: AsyncSession = Depends(get_db),
    machine: DeliveryNoteStateMachine = Depends(get_state_machine),
):
    note = await DeliveryNoteStore(db).get(note_id)
    check_not_found(note, "Delivery note", note_id)
    return machine.completion_status(note)


@router.post("/{note_id}/pickups/{leg_index}/sign", response_model=PickupOrigin)
@audit_log(AuditAction.SIGN_PICKUP)
async def sign_pickup_leg(
    note_id: int,
    leg_index: int,
    payload: SignLegPayload,
    x_actor: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    machine: DeliveryNoteStateMachine = Depends(get_state_machine),
):
    store = DeliveryNoteStore(db)
    note = await _load_for_update(store, note_id)
    was_complete = machine.completion_status(note).is_complete

    leg = machine.sign_leg(note, leg_index, payload)
    note = await store.save(note)
    pickups_signed.labels(status=str(leg.status)).inc()
    _announce_completion(note, was_complete, machine)
    return leg


@router.post("/{note_id}/proof", response_model=DeliveryNoteOut)
@audit_log(AuditAction.RECORD_PROOF)
async def record_proof(
    note_id: int,
    payload: ProofPayload,
    x_actor: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    machine: DeliveryNoteStateMachine = Depends(get_state_machine),
):
    store = DeliveryNoteStore(db)
    note = await _load_for_update(store, note_id)
    was_complete = machine.completion_status(note).is_complete

    machine.record_proof(note, payload)
    note = await store.save(note)
    _announce_completion(note, was_complete, machine)
    return build_note_response(note, machine)


@router.post("/{note_id}/destination-signature", response_model=DeliveryNoteOut)
@audit_log(AuditAction.SIGN_DESTINATION)
async def sign_destination(
    note_id: int,
    payload: SignatureEntry,
    x_actor: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    machine: DeliveryNoteStateMachine = Depends(get_state_machine),
):
    store = DeliveryNoteStore(db)
    note = await _load_for_update(store, note_id)
    was_complete = machine.completion_status(note).is_complete

    machine.sign_destination(note, payload)
    note = await store.save(note)
    _announce_completion(note, was_complete, machine)
    return build_note_response(note, machine)


@router.delete("/{note_id}")
@audit_log(AuditAction.SOFT_DELETE_NOTE)
async def soft_delete_delivery_note(
    note_id: int,
    x_actor: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    ledger: DeletionLedger = Depends(get_deletion_ledger),
):
    store = DeliveryNoteStore(db)
    note = await _load_for_update(store, note_id)
    ledger.soft_delete(note)
    await store.save(note)
    return {"deleted": True}


@router.post("/{note_id}/restore", response_model=DeliveryNoteOut)
@audit_log(AuditAction.RESTORE_NOTE)
async def restore_delivery_note(
    note_id: int,
    x_actor: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    ledger: DeletionLedger = Depends(get_deletion_ledger),
    machine: DeliveryNoteStateMachine = Depends(get_state_machine),
):
    store = DeliveryNoteStore(db)
    note = await _load_for_update(store, note_id)
    ledger.restore(note)
    note = await store.save(note)
    return build_note_response(note, machine)


@router.delete("/{note_id}/permanent")
@audit_log(AuditAction.PURGE_NOTE)
async def purge_delivery_note(
    note_id: int,
    x_actor: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    ledger: DeletionLedger = Depends(get_deletion_ledger),
    allowed: bool = Depends(purge_allowed),
):
    store = DeliveryNoteStore(db)
    note = await _load_for_update(store, note_id)
    ledger.purge(note, allowed)
    await store.purge(note)
    return {"purged": True}
