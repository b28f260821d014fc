"""Vehículos de demostración para desarrollo local y el modo in-memory."""

from datetime import datetime

from app.domain.entities.vehicle import Vehicle

DEMO_VEHICLES = [
    Vehicle(
        id="veh-demo-0001",
        owner_id="owner-demo-1",
        model="Hyundai Avante",
        airport_location="ICN",
        daily_rate=55000,
        available_from=datetime(2025, 1, 1),
        available_until=datetime(2027, 12, 31),
    ),
    Vehicle(
        id="veh-demo-0002",
        owner_id="owner-demo-1",
        model="Kia Carnival",
        airport_location="ICN",
        daily_rate=98000,
        available_from=datetime(2025, 1, 1),
        available_until=datetime(2027, 12, 31),
    ),
    Vehicle(
        id="veh-demo-0003",
        owner_id="owner-demo-2",
        model="Tesla Model 3",
        airport_location="GMP",
        daily_rate=120000,
        available_from=datetime(2025, 3, 1),
        available_until=datetime(2026, 12, 31),
    ),
]


def vehicle_row(vehicle: Vehicle) -> dict:
    return {
        "id": vehicle.id,
        "owner_id": vehicle.owner_id,
        "model": vehicle.model,
        "airport_location": vehicle.airport_location,
        "daily_rate": vehicle.daily_rate,
        "available_from": vehicle.available_from,
        "available_until": vehicle.available_until,
        "status": vehicle.status.value,
    }
