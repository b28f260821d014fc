"""Consultas de reservas para arrendatarios y dueños (solo lectura)."""

from typing import Sequence

from app.application.dtos.payment_dto import PaymentInfoDTO
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.vehicle_repo import VehicleRepo
from app.domain.entities.booking import Booking
from app.domain.errors import ForbiddenError, NotFoundError


class GetBookingUseCase:
    """Detalle de una reserva; visible solo para el arrendatario o el dueño del vehículo."""

    def __init__(self, booking_repo: BookingRepo, vehicle_repo: VehicleRepo) -> None:
        self._booking_repo = booking_repo
        self._vehicle_repo = vehicle_repo

    async def execute(self, booking_id: str, actor_id: str) -> Booking:
        booking = await self._booking_repo.get(booking_id)
        if not booking:
            raise NotFoundError("Reserva", booking_id)
        if booking.renter_id == actor_id:
            return booking
        vehicle = await self._vehicle_repo.get(booking.vehicle_id)
        if vehicle and vehicle.is_owned_by(actor_id):
            return booking
        raise ForbiddenError(actor_id, "ver esta reserva")


class ListMyBookingsUseCase:
    def __init__(self, booking_repo: BookingRepo) -> None:
        self._booking_repo = booking_repo

    async def execute(self, renter_id: str) -> Sequence[Booking]:
        return await self._booking_repo.list_by_renter(renter_id)


class ListReceivedBookingsUseCase:
    def __init__(self, booking_repo: BookingRepo) -> None:
        self._booking_repo = booking_repo

    async def execute(self, owner_id: str) -> Sequence[Booking]:
        return await self._booking_repo.list_by_owner(owner_id)


class GetPaymentInfoUseCase:
    def __init__(self, get_booking: GetBookingUseCase) -> None:
        self._get_booking = get_booking

    async def execute(self, booking_id: str, actor_id: str) -> PaymentInfoDTO:
        booking = await self._get_booking.execute(booking_id, actor_id)
        return PaymentInfoDTO(
            booking_id=booking.id,
            order_ref=booking.order_ref,
            transaction_key=booking.transaction_key,
            payment_status=booking.payment_status.value,
            amount=booking.total_price,
            approved_at=booking.approved_at,
        )
