from typing import Optional

from pydantic import Field, model_validator

from freightdesk.schemas.base import CamelModel
from freightdesk.schemas.pricing import ZoneRule


class PricingRuleCreate(CamelModel):
    zone: int
    name: str = Field(min_length=1)
    country: str = Field(min_length=1)
    min_km: float = Field(ge=0, allow_inf_nan=False)
    max_km: float = Field(ge=0, allow_inf_nan=False)
    base_price: float = Field(ge=0, allow_inf_nan=False)
    price_per_km: float = Field(ge=0, allow_inf_nan=False)
    toll_surcharge_pct: float = Field(0.0, ge=0, allow_inf_nan=False)
    min_price: float = Field(0.0, ge=0, allow_inf_nan=False)
    is_active: bool = True

    @model_validator(mode="after")
    def _check_range(self):
        if self.min_km >= self.max_km:
            raise ValueError("min_km must be lower than max_km")
        return self


class PricingRuleUpdate(CamelModel):
    zone: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1)
    country: Optional[str] = Field(None, min_length=1)
    min_km: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    max_km: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    base_price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    price_per_km: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    toll_surcharge_pct: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    min_price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    is_active: Optional[bool] = None


PricingRuleOut = ZoneRule


class RuleOverlap(CamelModel):
    country: str
    first: PricingRuleOut
    second: PricingRuleOut
