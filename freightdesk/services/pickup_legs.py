"""Pickup leg sub-state: pending -> completed | problem, signed exactly once."""
from datetime import datetime
from typing import Iterable, List, Optional

from freightdesk.core.enums import LegStatus
from freightdesk.core.errors import AlreadySigned, MissingSignature
from freightdesk.schemas.delivery_note import PickupOrigin, PickupOriginCreate, SignLegPayload


def clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def new_leg(data: PickupOriginCreate) -> PickupOrigin:
    return PickupOrigin(name=data.name.strip(), address=clean_text(data.address))


def load_legs(raw: Optional[Iterable[dict]]) -> List[PickupOrigin]:
    return [PickupOrigin.model_validate(item) for item in (raw or [])]


def dump_legs(legs: Iterable[PickupOrigin]) -> List[dict]:
    return [leg.model_dump(mode="json", by_alias=True, exclude_none=True) for leg in legs]


def is_terminal(leg: PickupOrigin) -> bool:
    return leg.status != LegStatus.PENDING


def sign_pickup(leg: PickupOrigin, payload: SignLegPayload, now: datetime) -> PickupOrigin:
    """Return the signed copy of ``leg``; ``leg`` itself is left untouched."""
    if is_terminal(leg):
        raise AlreadySigned(f"Pickup '{leg.name}' is already {leg.status}")

    signature = clean_text(payload.signature)
    if not signature:
        raise MissingSignature(f"Pickup '{leg.name}' needs a signature")

    incidence = clean_text(payload.incidence)
    status = LegStatus.PROBLEM if incidence else LegStatus.COMPLETED

    return leg.model_copy(
        update={
            "status": status,
            "signature": signature,
            "signed_at": now,
            "signer_name": clean_text(payload.signer_name),
            "quantity": clean_text(payload.quantity),
            "observations": clean_text(payload.observations),
            "incidence": incidence,
            "geo_location": payload.geo_location,
        }
    )
