import logging
from datetime import datetime

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.id_generator import IdGenerator
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.interfaces.vehicle_repo import VehicleRepo
from app.application.services.availability import AvailabilityChecker, to_date_range
from app.domain.entities.booking import Booking, BookingStatus, PaymentStatus
from app.domain.errors import (
    ConflictError,
    ForbiddenError,
    InvalidRangeError,
    InvalidStateError,
    NotFoundError,
)


class CreateBookingUseCase:
    def __init__(
        self,
        booking_repo: BookingRepo,
        vehicle_repo: VehicleRepo,
        availability_checker: AvailabilityChecker,
        transaction_manager: TransactionManager,
        id_generator: IdGenerator,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._vehicle_repo = vehicle_repo
        self._availability_checker = availability_checker
        self._transaction_manager = transaction_manager
        self._id_generator = id_generator
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        vehicle_id: str,
        renter_id: str,
        start_at: datetime,
        end_at: datetime,
        pickup_location: str | None = None,
        return_location: str | None = None,
    ) -> Booking:
        async with self._transaction_manager.start():
            vehicle = await self._vehicle_repo.get(vehicle_id)
            if not vehicle:
                raise NotFoundError("Vehículo", vehicle_id)
            if vehicle.is_owned_by(renter_id):
                raise ForbiddenError(renter_id, "reservar su propio vehículo")
            if not vehicle.is_listable:
                raise InvalidStateError(vehicle.status.value, "active", "reservar el vehículo")

            date_range = to_date_range(start_at, end_at)
            if not date_range.is_within(vehicle.available_from, vehicle.available_until):
                raise InvalidRangeError(
                    f"El rango {date_range} está fuera de la disponibilidad del vehículo "
                    f"({vehicle.available_from.isoformat()} -> {vehicle.available_until.isoformat()})"
                )

            # Solo atajo de experiencia de usuario: las pendientes no bloquean,
            # y la exclusión definitiva se aplica al aprobar.
            if not await self._availability_checker.is_available(vehicle_id, start_at, end_at):
                raise ConflictError(vehicle_id)

            now = self._clock.now_naive()
            booking = Booking(
                id=self._id_generator.generate_booking_id(),
                vehicle_id=vehicle_id,
                renter_id=renter_id,
                start_at=start_at,
                end_at=end_at,
                total_price=date_range.billable_days * vehicle.daily_rate,
                status=BookingStatus.PENDING,
                payment_status=PaymentStatus.UNPAID,
                pickup_location=pickup_location,
                return_location=return_location,
                created_at=now,
                updated_at=now,
            )
            await self._booking_repo.create(booking)

        self._logger.info(
            "Booking created",
            extra={
                "booking_id": booking.id,
                "vehicle_id": vehicle_id,
                "renter_id": renter_id,
                "billable_days": date_range.billable_days,
                "total_price": booking.total_price,
            },
        )
        return booking
