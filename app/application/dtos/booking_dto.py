"""DTOs para reservas."""

from dataclasses import dataclass, field

from app.domain.entities.booking import Booking


@dataclass
class ApprovalResultDTO:
    """
    Resultado de aprobar una reserva.

    La aprobación ya quedó confirmada aunque haya advertencias: las advertencias
    solo reportan que el rechazo en cascada de las solicitudes en competencia
    falló y debe reintentarse.
    """

    booking: Booking
    rejected_booking_ids: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
