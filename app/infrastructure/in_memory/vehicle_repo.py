from dataclasses import replace

from app.application.interfaces.vehicle_repo import VehicleRepo
from app.domain.entities.vehicle import Vehicle


class InMemoryVehicleRepo(VehicleRepo):
    def __init__(self) -> None:
        self._items: dict[str, Vehicle] = {}

    async def get(self, vehicle_id: str) -> Vehicle | None:
        vehicle = self._items.get(vehicle_id)
        return replace(vehicle) if vehicle else None

    def add(self, vehicle: Vehicle) -> None:
        """Alta directa; el catálogo de vehículos lo administra otro servicio."""
        self._items[vehicle.id] = replace(vehicle)

    def ids_owned_by(self, owner_id: str) -> set[str]:
        return {v.id for v in self._items.values() if v.owner_id == owner_id}
