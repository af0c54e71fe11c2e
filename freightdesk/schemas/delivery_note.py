from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, Field

from freightdesk.core.enums import LegStatus, NoteShape, NoteStatus
from freightdesk.schemas.base import CamelModel


class GeoLocation(CamelModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class PickupOrigin(CamelModel):
    name: str
    address: Optional[str] = None
    status: LegStatus = LegStatus.PENDING
    signer_name: Optional[str] = None
    quantity: Optional[str] = None
    observations: Optional[str] = None
    incidence: Optional[str] = None
    signature: Optional[str] = None
    signed_at: Optional[datetime] = None
    geo_location: Optional[GeoLocation] = None


class PickupOriginCreate(CamelModel):
    name: str = Field(min_length=1)
    address: Optional[str] = None


class SignLegPayload(CamelModel):
    signature: Optional[str] = None
    signer_name: Optional[str] = None
    quantity: Optional[str] = None
    observations: Optional[str] = None
    incidence: Optional[str] = None
    geo_location: Optional[GeoLocation] = None


class ProofPayload(CamelModel):
    photo: Optional[str] = None
    signature: Optional[str] = None


class SignatureEntry(CamelModel):
    signature: Optional[str] = None
    document: Optional[str] = None


class DeliveryNoteCreate(CamelModel):
    quote_id: int
    shape: NoteShape = NoteShape.SINGLE
    client_name: Optional[str] = None
    destination: Optional[str] = None
    observations: Optional[str] = None
    pickup_origins: List[PickupOriginCreate] = []
    photo: Optional[str] = None
    signature: Optional[str] = None
    origin_signature: Optional[str] = None
    origin_signature_document: Optional[str] = None
    destination_signature: Optional[str] = None
    destination_signature_document: Optional[str] = None
    require_destination_signature: Optional[bool] = None


class CompletionStatus(CamelModel):
    model_config = ConfigDict(frozen=True)

    is_complete: bool
    pending_count: int
    completed_count: int
    problem_count: int


class DeliveryNoteOut(CamelModel):
    id: int
    note_number: int
    quote_id: int
    shape: NoteShape
    status: NoteStatus
    client_name: Optional[str] = None
    destination: Optional[str] = None
    vehicle_type: Optional[str] = None
    distance: Optional[float] = None
    observations: Optional[str] = None
    pickup_origins: List[PickupOrigin] = []
    photo: Optional[str] = None
    signature: Optional[str] = None
    signed_at: Optional[datetime] = None
    origin_signature: Optional[str] = None
    origin_signature_document: Optional[str] = None
    origin_signed_at: Optional[datetime] = None
    destination_signature: Optional[str] = None
    destination_signature_document: Optional[str] = None
    destination_signed_at: Optional[datetime] = None
    require_destination_signature: bool = False
    has_any_proof: bool = False
    completion: CompletionStatus
    deleted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
