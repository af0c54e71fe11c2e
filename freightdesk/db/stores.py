"""Storage collaborators: read snapshots for the core, persist its results."""
import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm.exc import StaleDataError

from freightdesk.core.enums import QuoteStatus
from freightdesk.core.errors import ConcurrentModification, QuoteAlreadyUsed
from freightdesk.models.delivery_note import DeliveryNote
from freightdesk.models.pricing_rule import PricingRule
from freightdesk.models.quote import Quote
from freightdesk.models.vehicle_type import VehicleType
from freightdesk.schemas.pricing import VehicleRate, ZoneRule

logger = logging.getLogger(__name__)


class VehicleCatalogStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_all(self) -> List[VehicleType]:
        res = await self.db.execute(select(VehicleType).order_by(VehicleType.id))
        return list(res.scalars().all())

    async def list_active(self) -> List[VehicleRate]:
        res = await self.db.execute(
            select(VehicleType).where(VehicleType.is_active.is_(True)).order_by(VehicleType.id)
        )
        return [VehicleRate.model_validate(row) for row in res.scalars().all()]

    async def get(self, vehicle_id: int) -> Optional[VehicleType]:
        res = await self.db.execute(select(VehicleType).where(VehicleType.id == vehicle_id))
        return res.scalars().first()


class ZoneRuleStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_all(self) -> List[PricingRule]:
        res = await self.db.execute(
            select(PricingRule).order_by(PricingRule.zone, PricingRule.min_km, PricingRule.id)
        )
        return list(res.scalars().all())

    async def list_active(self, country: Optional[str] = None) -> List[ZoneRule]:
        q = select(PricingRule).where(PricingRule.is_active.is_(True))
        if country:
            q = q.where(func.lower(func.trim(PricingRule.country)) == country.strip().lower())
        res = await self.db.execute(q)
        return [ZoneRule.model_validate(row) for row in res.scalars().all()]

    async def get(self, rule_id: int) -> Optional[PricingRule]:
        res = await self.db.execute(select(PricingRule).where(PricingRule.id == rule_id))
        return res.scalars().first()


class QuoteStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, quote_id: int) -> Optional[Quote]:
        res = await self.db.execute(select(Quote).where(Quote.id == quote_id))
        return res.scalars().first()

    async def list(
        self, status: Optional[QuoteStatus] = None, limit: int = 20, offset: int = 0
    ) -> List[Quote]:
        q = select(Quote).order_by(Quote.created_at.desc(), Quote.id.desc())
        if status:
            q = q.where(Quote.status == status)
        res = await self.db.execute(q.limit(limit).offset(offset))
        return list(res.scalars().all())


class DeliveryNoteStore:
    """Persists delivery notes.

    Rows are loaded ``FOR UPDATE`` before a mutation and carry a version
    counter, so two writers racing on the same note cannot both commit.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, note_id: int, for_update: bool = False) -> Optional[DeliveryNote]:
        q = select(DeliveryNote).where(DeliveryNote.id == note_id)
        if for_update:
            q = q.with_for_update()
        res = await self.db.execute(q)
        return res.scalars().first()

    async def list(
        self, deleted: bool = False, limit: int = 20, offset: int = 0
    ) -> List[DeliveryNote]:
        q = select(DeliveryNote)
        if deleted:
            q = q.where(DeliveryNote.deleted_at.is_not(None)).order_by(DeliveryNote.deleted_at.desc())
        else:
            q = q.where(DeliveryNote.deleted_at.is_(None)).order_by(DeliveryNote.note_number.desc())
        res = await self.db.execute(q.limit(limit).offset(offset))
        return list(res.scalars().all())

    async def quote_in_use(self, quote_id: int) -> bool:
        res = await self.db.execute(
            select(DeliveryNote.id).where(DeliveryNote.quote_id == quote_id)
        )
        return res.first() is not None

    async def next_note_number(self) -> int:
        res = await self.db.execute(select(func.max(DeliveryNote.note_number)))
        current = res.scalar()
        return (current or 0) + 1

    async def add(self, note: DeliveryNote) -> DeliveryNote:
        self.db.add(note)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if await self.quote_in_use(note.quote_id):
                raise QuoteAlreadyUsed(f"Quote {note.quote_id} already has a delivery note") from e
            raise ConcurrentModification("Delivery note number already taken, retry") from e
        await self.db.refresh(note)
        return note

    async def save(self, note: DeliveryNote) -> DeliveryNote:
        # rollback expires the instance; read the id while it is still loaded
        note_id = note.id
        self.db.add(note)
        try:
            await self.db.commit()
        except StaleDataError as e:
            await self.db.rollback()
            logger.warning(f"Concurrent update on delivery note {note_id}")
            raise ConcurrentModification() from e
        await self.db.refresh(note)
        return note

    async def purge(self, note: DeliveryNote) -> None:
        await self.db.delete(note)
        await self.db.commit()
