from app.domain.entities.vehicle import Vehicle


class VehicleRepo:
    """Consulta de vehículos; el alta y edición viven fuera de este servicio."""

    async def get(self, vehicle_id: str) -> Vehicle | None:
        raise NotImplementedError
