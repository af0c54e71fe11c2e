from typing import Optional

from pydantic import Field

from freightdesk.schemas.base import CamelModel
from freightdesk.schemas.pricing import VehicleRate


class VehicleTypeCreate(CamelModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    capacity: Optional[str] = None
    price_per_km: float = Field(ge=0, allow_inf_nan=False)
    direction_price: float = Field(0.0, ge=0, allow_inf_nan=False)
    minimum_price: float = Field(0.0, ge=0, allow_inf_nan=False)
    is_active: bool = True


class VehicleTypeUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    capacity: Optional[str] = None
    price_per_km: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    direction_price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    minimum_price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    is_active: Optional[bool] = None


class VehicleTypeOut(VehicleRate):
    description: Optional[str] = None
    capacity: Optional[str] = None
