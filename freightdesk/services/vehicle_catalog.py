from typing import Dict, Iterable, List, Optional

from freightdesk.core.errors import NoActiveVehicle
from freightdesk.schemas.pricing import RateCard, VehicleRate


class VehicleRateCatalog:
    """Per-vehicle flat rates used when no zone rule matches a distance."""

    def __init__(self, vehicles: Iterable[VehicleRate]):
        self._vehicles: Dict[int, VehicleRate] = {vehicle.id: vehicle for vehicle in vehicles}

    def __contains__(self, vehicle_id: int) -> bool:
        return vehicle_id in self._vehicles

    def active(self) -> List[VehicleRate]:
        return [vehicle for vehicle in self._vehicles.values() if vehicle.is_active]

    def get(self, vehicle_id: Optional[int]) -> VehicleRate:
        vehicle = self._vehicles.get(vehicle_id)
        if vehicle is None or not vehicle.is_active:
            raise NoActiveVehicle(f"Vehicle type {vehicle_id} is missing or inactive")
        return vehicle

    @staticmethod
    def fallback_rate(vehicle: VehicleRate) -> RateCard:
        return RateCard.from_vehicle(vehicle)
