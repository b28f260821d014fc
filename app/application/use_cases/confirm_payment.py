import logging

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.payment_gateway import PaymentGateway
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.reconcile_payment import ReconcilePaymentUseCase
from app.domain.entities.booking import BookingStatus, PaymentStatus
from app.domain.entities.payment_event import (
    PaymentEvent,
    PaymentEventKind,
    PaymentEventSource,
    ReconcileOutcome,
    ReconcileResult,
)
from app.domain.errors import AmountMismatchError, InvalidStateError, NotFoundError


class ConfirmPaymentUseCase:
    """
    Confirmación síncrona tras el redirect del gateway.

    Valida el monto antes de llamar al gateway; la escritura del estado de
    pago la hace el Payment Reconciler para converger con el webhook.
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        payment_gateway: PaymentGateway,
        reconciler: ReconcilePaymentUseCase,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._payment_gateway = payment_gateway
        self._reconciler = reconciler
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, transaction_key: str, order_ref: str, amount: int) -> ReconcileOutcome:
        # Las validaciones cierran su transacción antes de la llamada al gateway.
        async with self._transaction_manager.start():
            booking = await self._booking_repo.get_by_order_ref(order_ref)
        if not booking:
            raise NotFoundError("Reserva", f"order_ref={order_ref}")
        if booking.total_price != amount:
            self._logger.warning(
                "Confirm amount mismatch",
                extra={
                    "booking_id": booking.id,
                    "order_ref": order_ref,
                    "expected": booking.total_price,
                    "actual": amount,
                },
            )
            raise AmountMismatchError(expected=booking.total_price, actual=amount)
        if booking.is_paid:
            return ReconcileOutcome(
                booking_id=booking.id,
                payment_status=PaymentStatus.PAID,
                result=ReconcileResult.ALREADY_RECONCILED,
            )
        if booking.status != BookingStatus.APPROVED:
            raise InvalidStateError(booking.status.value, BookingStatus.APPROVED.value, "confirmar el pago")

        # Llamada de red sin transacción de base de datos abierta.
        confirmation = await self._payment_gateway.confirm_payment(
            transaction_key=transaction_key,
            order_ref=order_ref,
            amount=amount,
        )
        occurred_at = confirmation.approved_at or self._clock.now_naive()
        outcome = await self._reconciler.execute(
            PaymentEvent(
                order_ref=order_ref,
                transaction_key=confirmation.transaction_key,
                kind=PaymentEventKind.COMPLETED,
                occurred_at=occurred_at,
                amount=amount,
                approved_at=confirmation.approved_at,
                source=PaymentEventSource.CONFIRM,
            )
        )
        if outcome.payment_status != PaymentStatus.PAID:
            self._logger.error(
                "Gateway confirmed a payment the booking could not accept",
                extra={
                    "booking_id": booking.id,
                    "order_ref": order_ref,
                    "transaction_key": confirmation.transaction_key,
                    "payment_status": outcome.payment_status.value,
                },
            )
            raise InvalidStateError(outcome.payment_status.value, PaymentStatus.PAID.value, "confirmar el pago")
        return outcome
