import asyncio
import sys
from pathlib import Path

# Add project root to sys.path
project_root = Path(__file__).resolve().parent.parent
sys.path.append(str(project_root))

from sqlalchemy import delete, insert  # noqa: E402

from app.api.deps import engine  # noqa: E402
from app.infrastructure.db.seed import DEMO_VEHICLES, vehicle_row  # noqa: E402
from app.infrastructure.db.tables import metadata, vehicles  # noqa: E402


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
        print("Created missing tables.")

        ids = [vehicle.id for vehicle in DEMO_VEHICLES]
        await conn.execute(delete(vehicles).where(vehicles.c.id.in_(ids)))
        await conn.execute(insert(vehicles), [vehicle_row(vehicle) for vehicle in DEMO_VEHICLES])

        for vehicle in DEMO_VEHICLES:
            print(f"Seeded {vehicle.id} ({vehicle.model}, owner {vehicle.owner_id})")

if __name__ == "__main__":
    asyncio.run(seed())
