"""Immutable pricing snapshots handed to the pricing engine."""
from typing import Optional

from pydantic import ConfigDict, Field, model_validator

from freightdesk.core.enums import PricingSource
from freightdesk.schemas.base import CamelModel


class VehicleRate(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    price_per_km: float = Field(ge=0, allow_inf_nan=False)
    direction_price: float = Field(0.0, ge=0, allow_inf_nan=False)
    minimum_price: float = Field(0.0, ge=0, allow_inf_nan=False)
    is_active: bool = True


class ZoneRule(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: int
    zone: int
    name: str
    country: str
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

    def contains(self, distance_km: float) -> bool:
        return self.min_km <= distance_km < self.max_km


class GeoPoint(CamelModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class GeocodeResult(CamelModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float
    label: str
    country: str


class RouteMeasurement(CamelModel):
    model_config = ConfigDict(frozen=True)

    distance_km: float
    duration_min: float = Field(0.0, ge=0, allow_inf_nan=False)
    origin_country: str
    destination_country: str
    origin_label: Optional[str] = None
    destination_label: Optional[str] = None
    origin_coords: Optional[GeoPoint] = None
    destination_coords: Optional[GeoPoint] = None


class QuoteFlags(CamelModel):
    model_config = ConfigDict(frozen=True)

    is_urgent: bool = False
    extras_cost: float = Field(0.0, allow_inf_nan=False)


class RateCard(CamelModel):
    """The tariff a quote is priced with: a matched zone rule or a vehicle's flat rate."""

    model_config = ConfigDict(frozen=True)

    source: PricingSource
    base_price: float
    price_per_km: float
    toll_surcharge_pct: float = 0.0
    min_price: float = 0.0
    pricing_rule_id: Optional[int] = None
    zone_name: Optional[str] = None

    @classmethod
    def from_rule(cls, rule: ZoneRule) -> "RateCard":
        return cls(
            source=PricingSource.ZONE_RULE,
            base_price=rule.base_price,
            price_per_km=rule.price_per_km,
            toll_surcharge_pct=rule.toll_surcharge_pct,
            min_price=rule.min_price,
            pricing_rule_id=rule.id,
            zone_name=rule.name,
        )

    @classmethod
    def from_vehicle(cls, vehicle: VehicleRate) -> "RateCard":
        return cls(
            source=PricingSource.VEHICLE_RATE,
            base_price=vehicle.direction_price,
            price_per_km=vehicle.price_per_km,
            toll_surcharge_pct=0.0,
            min_price=vehicle.minimum_price,
        )


class PriceBreakdown(CamelModel):
    model_config = ConfigDict(frozen=True)

    base_price: float
    distance_cost: float
    toll_cost: float
    urgency_surcharge: float
    extras_cost: float
    total_price: float
    min_price: float
    source: PricingSource
    pricing_rule_id: Optional[int] = None
    zone_name: Optional[str] = None
