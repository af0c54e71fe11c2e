import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Query, Response
from pydantic import ValidationError as SchemaValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from freightdesk.core.audit_decorator import audit_log
from freightdesk.core.enums import AuditAction
from freightdesk.core.errors import ValidationError
from freightdesk.core.lookup import check_not_found
from freightdesk.db.session import get_db
from freightdesk.db.stores import ZoneRuleStore
from freightdesk.models.pricing_rule import PricingRule
from freightdesk.schemas.pricing_rule import (
    PricingRuleCreate,
    PricingRuleOut,
    PricingRuleUpdate,
    RuleOverlap,
)
from freightdesk.services.zone_rules import ZoneRuleTable

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/pricing-rules", tags=["pricing-rules"])


@router.get("/", response_model=List[PricingRuleOut])
async def list_pricing_rules(db: AsyncSession = Depends(get_db)):
    rules = await ZoneRuleStore(db).list_all()
    return [PricingRuleOut.model_validate(rule) for rule in rules]


@router.get("/overlaps", response_model=List[RuleOverlap])
async def list_overlapping_rules(
    country: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """Active rules of the same country whose distance ranges intersect."""
    table = ZoneRuleTable(await ZoneRuleStore(db).list_active(country))
    return [
        RuleOverlap(country=first.country, first=first, second=second)
        for first, second in table.overlaps()
    ]


@router.get("/{rule_id}", response_model=PricingRuleOut)
async def get_pricing_rule(rule_id: int, db: AsyncSession = Depends(get_db)):
    rule = await ZoneRuleStore(db).get(rule_id)
    check_not_found(rule, "Pricing rule", rule_id)
    return PricingRuleOut.model_validate(rule)


@router.post("/", response_model=PricingRuleOut, status_code=201)
@audit_log(AuditAction.CREATE_PRICING_RULE)
async def create_pricing_rule(
    payload: PricingRuleCreate,
    db: AsyncSession = Depends(get_db),
    x_actor: Optional[str] = Header(None),
):
    rule = PricingRule(**payload.model_dump())
    rule.country = rule.country.strip()
    db.add(rule)
    await db.commit()
    await db.refresh(rule)
    logger.info(f"Pricing rule {rule.id} ({rule.country} zone {rule.zone}) created")
    return PricingRuleOut.model_validate(rule)


@router.put("/{rule_id}", response_model=PricingRuleOut)
@audit_log(AuditAction.UPDATE_PRICING_RULE)
async def update_pricing_rule(
    rule_id: int,
    payload: PricingRuleUpdate,
    db: AsyncSession = Depends(get_db),
    x_actor: Optional[str] = Header(None),
):
    rule = await ZoneRuleStore(db).get(rule_id)
    check_not_found(rule, "Pricing rule", rule_id)

    changes = payload.model_dump(exclude_unset=True)
    merged = PricingRuleOut.model_validate(rule).model_dump()
    merged.update(changes)
    try:
        PricingRuleOut.model_validate(merged)
    except SchemaValidationError as e:
        raise ValidationError(f"Invalid pricing rule: {e.errors()[0]['msg']}") from e

    for field, value in changes.items():
        setattr(rule, field, value)

    await db.commit()
    await db.refresh(rule)
    return PricingRuleOut.model_validate(rule)


@router.delete("/{rule_id}", status_code=204)
@audit_log(AuditAction.DELETE_PRICING_RULE)
async def delete_pricing_rule(
    rule_id: int,
    db: AsyncSession = Depends(get_db),
    x_actor: Optional[str] = Header(None),
):
    rule = await ZoneRuleStore(db).get(rule_id)
    check_not_found(rule, "Pricing rule", rule_id)

    await db.delete(rule)
    await db.commit()
    logger.info(f"Pricing rule {rule_id} deleted")
    return Response(status_code=204)
