import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Response
from sqlalchemy.ext.asyncio import AsyncSession

from freightdesk.core.audit_decorator import audit_log
from freightdesk.core.enums import AuditAction
from freightdesk.core.lookup import check_not_found
from freightdesk.db.session import get_db
from freightdesk.db.stores import VehicleCatalogStore
from freightdesk.models.vehicle_type import VehicleType
from freightdesk.schemas.vehicle_type import VehicleTypeCreate, VehicleTypeOut, VehicleTypeUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/vehicle-types", tags=["vehicle-types"])


@router.get("/", response_model=List[VehicleTypeOut])
async def list_active_vehicle_types(db: AsyncSession = Depends(get_db)):
    vehicles = await VehicleCatalogStore(db).list_all()
    return [VehicleTypeOut.model_validate(v) for v in vehicles if v.is_active]


@router.get("/all", response_model=List[VehicleTypeOut])
async def list_all_vehicle_types(db: AsyncSession = Depends(get_db)):
    vehicles = await VehicleCatalogStore(db).list_all()
    return [VehicleTypeOut.model_validate(v) for v in vehicles]


@router.get("/{vehicle_type_id}", response_model=VehicleTypeOut)
async def get_vehicle_type(vehicle_type_id: int, db: AsyncSession = Depends(get_db)):
    vehicle = await VehicleCatalogStore(db).get(vehicle_type_id)
    check_not_found(vehicle, "Vehicle type", vehicle_type_id)
    return VehicleTypeOut.model_validate(vehicle)


@router.post("/", response_model=VehicleTypeOut, status_code=201)
@audit_log(AuditAction.CREATE_VEHICLE_TYPE)
async def create_vehicle_type(
    payload: VehicleTypeCreate,
    db: AsyncSession = Depends(get_db),
    x_actor: Optional[str] = Header(None),
):
    vehicle = VehicleType(**payload.model_dump())
    db.add(vehicle)
    await db.commit()
    await db.refresh(vehicle)
    logger.info(f"Vehicle type {vehicle.id} ({vehicle.name}) created")
    return VehicleTypeOut.model_validate(vehicle)


@router.put("/{vehicle_type_id}", response_model=VehicleTypeOut)
@audit_log(AuditAction.UPDATE_VEHICLE_TYPE)
async def update_vehicle_type(
    vehicle_type_id: int,
    payload: VehicleTypeUpdate,
    db: AsyncSession = Depends(get_db),
    x_actor: Optional[str] = Header(None),
):
    """Rate changes apply to new quotes only; stored quotes keep their breakdown."""
    vehicle = await VehicleCatalogStore(db).get(vehicle_type_id)
    check_not_found(vehicle, "Vehicle type", vehicle_type_id)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(vehicle, field, value)

    await db.commit()
    await db.refresh(vehicle)
    return VehicleTypeOut.model_validate(vehicle)


@router.delete("/{vehicle_type_id}", status_code=204)
@audit_log(AuditAction.DEACTIVATE_VEHICLE_TYPE)
async def deactivate_vehicle_type(
    vehicle_type_id: int,
    db: AsyncSession = Depends(get_db),
    x_actor: Optional[str] = Header(None),
):
    vehicle = await VehicleCatalogStore(db).get(vehicle_type_id)
    check_not_found(vehicle, "Vehicle type", vehicle_type_id)

    vehicle.is_active = False
    await db.commit()
    logger.info(f"Vehicle type {vehicle_type_id} deactivated")
    return Response(status_code=204)
