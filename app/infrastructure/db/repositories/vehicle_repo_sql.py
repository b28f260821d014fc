from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.vehicle_repo import VehicleRepo
from app.domain.entities.vehicle import Vehicle, VehicleStatus
from app.infrastructure.db.tables import vehicles


class VehicleRepoSQL(VehicleRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, vehicle_id: str) -> Vehicle | None:
        stmt = select(vehicles).where(vehicles.c.id == vehicle_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        if not row:
            return None
        return Vehicle(
            id=row["id"],
            owner_id=row["owner_id"],
            daily_rate=row["daily_rate"],
            available_from=row["available_from"],
            available_until=row["available_until"],
            status=VehicleStatus(row["status"]),
            model=row.get("model"),
            airport_location=row.get("airport_location"),
        )
