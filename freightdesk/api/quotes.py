"""Pricing quote endpoints with a Redis route cache"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.ext.asyncio import AsyncSession

from freightdesk.core.audit_decorator import audit_log
from freightdesk.core.config import settings
from freightdesk.core.dependencies import get_route_provider
from freightdesk.core.enums import AuditAction, QuoteStatus
from freightdesk.core.errors import DependencyError, QuoteAlreadyUsed
from freightdesk.core.lookup import check_not_found
from freightdesk.core.metrics import cache_hits, cache_misses, quotes_computed, route_measurements
from freightdesk.core.rate_limit import check_rate_limit
from freightdesk.core.redis import get_redis
from freightdesk.core.response_builders import build_quote_response, build_quote_response_list
from freightdesk.db.session import get_db
from freightdesk.db.stores import DeliveryNoteStore, QuoteStore, VehicleCatalogStore, ZoneRuleStore
from freightdesk.models.quote import Quote
from freightdesk.schemas.pricing import QuoteFlags, RouteMeasurement
from freightdesk.schemas.quote import QuoteOut, QuoteRequest, QuoteStatusUpdate
from freightdesk.services.pickup_legs import clean_text
from freightdesk.services.pricing import compute_quote
from freightdesk.services.route_provider import RouteMeasurementProvider
from freightdesk.services.vehicle_catalog import VehicleRateCatalog
from freightdesk.utils.hashing import cache_key

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])


def _route_cache_key(origin: str, destination: str) -> str:
    return cache_key(
        "route",
        {"origin": origin.strip().casefold(), "destination": destination.strip().casefold()},
    )


async def _measure(
    provider: RouteMeasurementProvider, origin: str, destination: str
) -> RouteMeasurement:
    key = _route_cache_key(origin, destination)
    redis = get_redis()

    if redis is not None:
        try:
            cached = await redis.get(key)
            if cached:
                cache_hits.labels(cache="route").inc()
                return RouteMeasurement.model_validate_json(cached)
        except Exception as e:
            logger.warning(f"Cache retrieval failed: {e}")
    cache_misses.labels(cache="route").inc()

    try:
        measurement = await provider.measure(origin, destination)
    except DependencyError:
        route_measurements.labels(status="failed").inc()
        raise
    route_measurements.labels(status="ok").inc()

    if redis is not None:
        try:
            await redis.set(key, measurement.model_dump_json(), ex=settings.ROUTE_CACHE_TTL)
        except Exception as e:
            logger.warning(f"Cache write failed: {e}")

    return measurement


@router.post("/calc", response_model=QuoteOut, dependencies=[Depends(check_rate_limit)])
@audit_log(AuditAction.CALCULATE_QUOTE)
async def calc_quote(
    payload: QuoteRequest,
    db: AsyncSession = Depends(get_db),
    provider: RouteMeasurementProvider = Depends(get_route_provider),
    x_actor: Optional[str] = Header(None),
):
    catalog = VehicleRateCatalog(await VehicleCatalogStore(db).list_active())
    vehicle = catalog.get(payload.vehicle_type_id)

    measurement = await _measure(provider, payload.origin, payload.destination)
    rules = await ZoneRuleStore(db).list_active()
    breakdown = compute_quote(
        measurement,
        vehicle,
        rules,
        QuoteFlags(is_urgent=payload.is_urgent, extras_cost=payload.extras_cost),
    )
    quotes_computed.labels(source=str(breakdown.source), urgent=str(payload.is_urgent).lower()).inc()

    quote = Quote(
        origin=measurement.origin_label or payload.origin,
        destination=measurement.destination_label or payload.destination,
        origin_coords=(
            measurement.origin_coords.model_dump() if measurement.origin_coords else None
        ),
        destination_coords=(
            measurement.destination_coords.model_dump()
            if measurement.destination_coords
            else None
        ),
        distance=measurement.distance_km,
        duration=measurement.duration_min,
        vehicle_type_id=vehicle.id,
        vehicle_type_name=vehicle.name,
        pricing_rule_id=breakdown.pricing_rule_id,
        zone_name=breakdown.zone_name,
        pricing_source=breakdown.source,
        is_urgent=payload.is_urgent,
        extras=payload.extras,
        customer_name=clean_text(payload.customer_name),
        phone_number=clean_text(payload.phone_number),
        pickup_time=payload.pickup_time,
        observations=clean_text(payload.observations),
        base_price=breakdown.base_price,
        distance_cost=breakdown.distance_cost,
        toll_cost=breakdown.toll_cost,
        urgency_surcharge=breakdown.urgency_surcharge,
        extras_cost=breakdown.extras_cost,
        min_price=breakdown.min_price,
        total_price=breakdown.total_price,
        status=QuoteStatus.PENDING,
    )
    db.add(quote)
    await db.commit()
    await db.refresh(quote)

    logger.info(
        f"Quote {quote.id}: {quote.distance} km with {vehicle.name} "
        f"via {breakdown.source} = {breakdown.total_price}"
    )
    return build_quote_response(quote)


@router.get("/", response_model=List[QuoteOut])
async def list_quotes(
    status: Optional[QuoteStatus] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    quotes = await QuoteStore(db).list(status=status, limit=limit, offset=offset)
    return build_quote_response_list(quotes)


@router.get("/{quote_id}", response_model=QuoteOut)
async def get_quote(quote_id: int, db: AsyncSession = Depends(get_db)):
    quote = await QuoteStore(db).get(quote_id)
    check_not_found(quote, "Quote", quote_id)
    return build_quote_response(quote)


@router.patch("/{quote_id}/status", response_model=QuoteOut)
@audit_log(AuditAction.UPDATE_QUOTE_STATUS)
async def update_quote_status(
    quote_id: int,
    payload: QuoteStatusUpdate,
    db: AsyncSession = Depends(get_db),
    x_actor: Optional[str] = Header(None),
):
    quote = await QuoteStore(db).get(quote_id)
    check_not_found(quote, "Quote", quote_id)

    # a quote backing a delivery note stays approved
    if payload.status != QuoteStatus.APPROVED and await DeliveryNoteStore(db).quote_in_use(quote_id):
        raise QuoteAlreadyUsed(f"Quote {quote_id} already has a delivery note")

    old_status = quote.status
    quote.status = payload.status
    await db.commit()
    await db.refresh(quote)

    logger.info(f"Quote {quote_id} status {old_status} -> {quote.status}")
    return build_quote_response(quote)
