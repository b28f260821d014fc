"""Entidad Vehicle - vehículo rentable (solo lectura para el motor de reservas)."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class VehicleStatus(str, Enum):
    """Estado de operabilidad del vehículo."""

    ACTIVE = "active"
    UNAVAILABLE = "unavailable"


@dataclass
class Vehicle:
    """
    Vehículo publicado por un dueño.

    Lo crea y modifica el dueño fuera de este servicio; aquí solo se consulta.
    La tarifa diaria está en la unidad monetaria mínima (ej. KRW).
    """

    id: str
    owner_id: str
    daily_rate: int
    available_from: datetime
    available_until: datetime
    status: VehicleStatus = VehicleStatus.ACTIVE
    model: str | None = None
    airport_location: str | None = None

    @property
    def is_listable(self) -> bool:
        return self.status == VehicleStatus.ACTIVE

    def is_owned_by(self, actor_id: str) -> bool:
        return self.owner_id == actor_id
