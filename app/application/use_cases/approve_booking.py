import logging

from app.application.dtos.booking_dto import ApprovalResultDTO
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.interfaces.vehicle_repo import VehicleRepo
from app.application.services.availability import AvailabilityChecker
from app.application.use_cases.reject_competing_bookings import RejectCompetingBookingsUseCase
from app.domain.entities.booking import BookingStatus
from app.domain.errors import ConflictError, ForbiddenError, InvalidStateError, NotFoundError


class ApproveBookingUseCase:
    def __init__(
        self,
        booking_repo: BookingRepo,
        vehicle_repo: VehicleRepo,
        availability_checker: AvailabilityChecker,
        reject_competing: RejectCompetingBookingsUseCase,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._vehicle_repo = vehicle_repo
        self._availability_checker = availability_checker
        self._reject_competing = reject_competing
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, booking_id: str, owner_id: str) -> ApprovalResultDTO:
        async with self._transaction_manager.start():
            booking = await self._booking_repo.get(booking_id)
            if not booking:
                raise NotFoundError("Reserva", booking_id)
            vehicle = await self._vehicle_repo.get(booking.vehicle_id)
            if not vehicle:
                raise NotFoundError("Vehículo", booking.vehicle_id)
            if not vehicle.is_owned_by(owner_id):
                raise ForbiddenError(owner_id, "aprobar reservas de este vehículo")
            if booking.status != BookingStatus.PENDING:
                raise InvalidStateError(booking.status.value, BookingStatus.PENDING.value, "aprobar")

            available = await self._availability_checker.is_available(
                booking.vehicle_id,
                booking.start_at,
                booking.end_at,
                exclude_booking_id=booking.id,
            )
            if not available:
                raise ConflictError(booking.vehicle_id)

            now = self._clock.now_naive()
            approved = await self._booking_repo.approve(booking, now)
            if not approved:
                current = await self._booking_repo.get(booking_id)
                current_status = current.status.value if current else "unknown"
                raise InvalidStateError(current_status, BookingStatus.PENDING.value, "aprobar")
            booking.status = BookingStatus.APPROVED
            booking.updated_at = now

        self._logger.info(
            "Booking approved",
            extra={"booking_id": booking.id, "vehicle_id": booking.vehicle_id},
        )

        result = ApprovalResultDTO(booking=booking)
        # La aprobación ya está confirmada; la cascada es limpieza de mejor esfuerzo.
        try:
            result.rejected_booking_ids = await self._reject_competing.reject_overlapping(booking)
        except Exception as exc:  # noqa: BLE001
            self._logger.warning(
                "Cascading rejection failed; approval kept",
                exc_info=exc,
                extra={"booking_id": booking.id, "vehicle_id": booking.vehicle_id},
            )
            result.warnings.append(
                "No se pudieron rechazar las solicitudes en competencia; reintente la limpieza"
            )
        return result
