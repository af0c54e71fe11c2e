from datetime import datetime
from typing import List, Optional

from pydantic import Field

from freightdesk.core.enums import QuoteStatus
from freightdesk.schemas.base import CamelModel
from freightdesk.schemas.pricing import GeoPoint, PriceBreakdown


class QuoteRequest(CamelModel):
    origin: str = Field(min_length=1)
    destination: str = Field(min_length=1)
    vehicle_type_id: int
    is_urgent: bool = False
    extras: List[str] = []
    extras_cost: float = Field(0.0, allow_inf_nan=False)
    customer_name: Optional[str] = Field(None, max_length=200)
    phone_number: Optional[str] = Field(None, max_length=40)
    pickup_time: Optional[datetime] = None
    observations: Optional[str] = None


class QuoteStatusUpdate(CamelModel):
    status: QuoteStatus


class QuoteOut(CamelModel):
    id: int
    origin: str
    destination: str
    origin_coords: Optional[GeoPoint] = None
    destination_coords: Optional[GeoPoint] = None
    distance: float
    duration: Optional[float] = None
    vehicle_type_id: Optional[int] = None
    vehicle_type_name: Optional[str] = None
    is_urgent: bool
    extras: List[str] = []
    customer_name: Optional[str] = None
    phone_number: Optional[str] = None
    pickup_time: Optional[datetime] = None
    observations: Optional[str] = None
    breakdown: PriceBreakdown
    total_price: float
    status: QuoteStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
