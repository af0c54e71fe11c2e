import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Union

from freightdesk.core.errors import InvalidDistance, InvalidExtras, NoActiveVehicle
from freightdesk.schemas.pricing import (
    PriceBreakdown,
    QuoteFlags,
    RateCard,
    RouteMeasurement,
    VehicleRate,
    ZoneRule,
)
from freightdesk.services.vehicle_catalog import VehicleRateCatalog
from freightdesk.services.zone_rules import ZoneRuleTable

logger = logging.getLogger(__name__)

URGENCY_RATE = Decimal("0.25")
CENT = Decimal("0.01")


def _dec(value: float) -> Decimal:
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def select_rate(
    measurement: RouteMeasurement,
    vehicle: VehicleRate,
    rules: Union[ZoneRuleTable, Iterable[ZoneRule]],
) -> RateCard:
    table = rules if isinstance(rules, ZoneRuleTable) else ZoneRuleTable(rules)
    distance = measurement.distance_km
    destination = measurement.destination_country
    origin = measurement.origin_country

    rule = table.match(distance, destination, origin)
    if rule is None:
        logger.info(
            f"No zone rule for {distance:.2f} km ({origin} -> {destination}), "
            f"using flat rate of vehicle {vehicle.id}"
        )
        return VehicleRateCatalog.fallback_rate(vehicle)

    shadowed = table.shadowed(rule, distance, destination, origin)
    if shadowed:
        logger.warning(
            f"Zone rule {rule.id} overlaps rules {[r.id for r in shadowed]} "
            f"at {distance:.2f} km; using {rule.id}"
        )
    return RateCard.from_rule(rule)


def compute_quote(
    measurement: RouteMeasurement,
    vehicle: Optional[VehicleRate],
    rules: Union[ZoneRuleTable, Iterable[ZoneRule]],
    flags: Optional[QuoteFlags] = None,
) -> PriceBreakdown:
    flags = flags or QuoteFlags()

    if vehicle is None or not vehicle.is_active:
        raise NoActiveVehicle()
    if not (measurement.distance_km > 0) or math.isinf(measurement.distance_km):
        raise InvalidDistance(f"Invalid distance: {measurement.distance_km}")
    if not math.isfinite(flags.extras_cost) or flags.extras_cost < 0:
        raise InvalidExtras()

    rate = select_rate(measurement, vehicle, rules)

    base_price = _dec(rate.base_price)
    min_price = _dec(rate.min_price)
    distance_cost = _dec(measurement.distance_km) * _dec(rate.price_per_km)
    floored_subtotal = max(base_price + distance_cost, min_price)
    toll_cost = floored_subtotal * _dec(rate.toll_surcharge_pct) / Decimal(100)
    urgency_surcharge = (
        URGENCY_RATE * (floored_subtotal + toll_cost) if flags.is_urgent else Decimal(0)
    )
    extras_cost = _dec(flags.extras_cost)
    total_price = round_money(floored_subtotal + toll_cost + urgency_surcharge + extras_cost)

    return PriceBreakdown(
        base_price=float(base_price),
        distance_cost=float(distance_cost),
        toll_cost=float(toll_cost),
        urgency_surcharge=float(urgency_surcharge),
        extras_cost=float(extras_cost),
        total_price=float(total_price),
        min_price=float(min_price),
        source=rate.source,
        pricing_rule_id=rate.pricing_rule_id,
        zone_name=rate.zone_name,
    )
