"""Availability Checker - ¿el rango pedido choca con una reserva aprobada?"""

from datetime import datetime

from app.application.interfaces.booking_repo import BookingRepo
from app.domain.errors import InvalidRangeError
from app.domain.value_objects.date_range import DateRange


class AvailabilityChecker:
    """
    Determina si un vehículo está libre en un rango [start, end).

    Solo las reservas aprobadas bloquean: pendientes, rechazadas y canceladas
    nunca afectan la disponibilidad. Es una lectura sin efectos; la garantía
    definitiva contra la doble reserva vive en la capa de persistencia.
    """

    def __init__(self, booking_repo: BookingRepo) -> None:
        self._booking_repo = booking_repo

    async def is_available(
        self,
        vehicle_id: str,
        start: datetime,
        end: datetime,
        exclude_booking_id: str | None = None,
    ) -> bool:
        """
        Args:
            vehicle_id: Vehículo a consultar.
            start: Inicio del rango (incluido).
            end: Fin del rango (excluido).
            exclude_booking_id: Reserva que se ignora a sí misma al revalidarse.

        Raises:
            InvalidRangeError: Si start >= end.
        """
        candidate = to_date_range(start, end)
        approved = await self._booking_repo.list_approved_for_vehicle(
            vehicle_id, exclude_booking_id=exclude_booking_id
        )
        return not any(booking.overlaps(candidate) for booking in approved)


def to_date_range(start: datetime, end: datetime) -> DateRange:
    try:
        return DateRange(start=start, end=end)
    except ValueError as exc:
        raise InvalidRangeError(str(exc)) from exc
