import logging
from urllib.parse import urlencode

from app.application.dtos.payment_dto import PaymentIntentDTO
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.interfaces.vehicle_repo import VehicleRepo
from app.domain.entities.booking import Booking, BookingStatus, PaymentStatus
from app.domain.errors import AlreadyPaidError, ForbiddenError, InvalidStateError, NotFoundError
from app.domain.value_objects.order_ref import OrderRef

DEFAULT_CUSTOMER_NAME = "Customer"


class IssuePaymentIntentUseCase:
    """
    Emite el descriptor de pago de una reserva aprobada y no pagada.

    Cada llamada genera una referencia de orden nueva; la anterior queda
    obsoleta (no se invalida en el gateway) y los eventos que lleguen con
    ella ya no encuentran la reserva.
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        vehicle_repo: VehicleRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        app_base_url: str,
    ) -> None:
        self._booking_repo = booking_repo
        self._vehicle_repo = vehicle_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._app_base_url = app_base_url.rstrip("/")
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        booking_id: str,
        renter_id: str,
        customer_name: str | None = None,
    ) -> PaymentIntentDTO:
        async with self._transaction_manager.start():
            booking = await self._booking_repo.get(booking_id)
            if not booking:
                raise NotFoundError("Reserva", booking_id)
            self._ensure_payable(booking, renter_id)

            order_ref = OrderRef.generate(booking.id, self._clock.now())
            assigned = await self._booking_repo.assign_order_ref(
                booking.id, order_ref.value, self._clock.now_naive()
            )
            if not assigned:
                current = await self._booking_repo.get(booking_id)
                if current:
                    self._ensure_payable(current, renter_id)
                raise InvalidStateError("unknown", BookingStatus.APPROVED.value, "emitir el pago")

            vehicle = await self._vehicle_repo.get(booking.vehicle_id)

        order_name = f"{vehicle.model} rental" if vehicle and vehicle.model else "Vehicle rental"
        query = urlencode({"orderId": order_ref.value, "bookingId": booking.id})
        intent = PaymentIntentDTO(
            booking_id=booking.id,
            order_ref=order_ref.value,
            order_name=order_name,
            amount=booking.total_price,
            customer_name=customer_name or DEFAULT_CUSTOMER_NAME,
            success_url=f"{self._app_base_url}/payments/success?{query}",
            fail_url=f"{self._app_base_url}/payments/fail?{query}",
        )
        self._logger.info(
            "Payment intent issued",
            extra={"booking_id": booking.id, "order_ref": order_ref.value, "amount": intent.amount},
        )
        return intent

    @staticmethod
    def _ensure_payable(booking: Booking, renter_id: str) -> None:
        if booking.renter_id != renter_id:
            raise ForbiddenError(renter_id, "pagar esta reserva")
        if booking.status != BookingStatus.APPROVED:
            raise InvalidStateError(booking.status.value, BookingStatus.APPROVED.value, "pagar")
        if booking.payment_status == PaymentStatus.PAID:
            raise AlreadyPaidError(booking.id)
