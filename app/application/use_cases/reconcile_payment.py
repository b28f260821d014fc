"""
Payment Reconciler - punto de convergencia idempotente de los pagos.

Recibe dos señales independientes sobre el mismo pago real: la confirmación
síncrona que dispara el navegador tras el checkout y el webhook asíncrono del
gateway (entrega al menos una vez, sin orden garantizado). Ambas llegan aquí
como PaymentEvent y llevan el estado de pago de la reserva a un valor terminal
exactamente una vez.

Reglas:
- Un evento repetido (misma transaction_key, tipo y momento) dentro de la
  ventana de retención devuelve el resultado ya calculado sin efectos nuevos.
- paid y failed son terminales por orden: una señal opuesta tardía no degrada
  el estado, se registra como anomalía para revisión manual.
- La transición unpaid -> paid|failed es un UPDATE condicional (paid exige
  además la reserva approved); si no afecta filas, otra entrega ya concilió
  y se responde con el estado vigente, salvo que la reserva haya dejado de
  estar aprobada.
"""

import logging
from datetime import timedelta

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.payment_anomaly_repo import PaymentAnomalyRepo
from app.application.interfaces.payment_event_store import PaymentEventStore
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.entities.booking import Booking, BookingStatus, PaymentStatus
from app.domain.entities.payment_event import (
    PaymentAnomaly,
    PaymentEvent,
    ReconcileOutcome,
    ReconcileResult,
)
from app.domain.errors import AmountMismatchError, InvalidStateError, NotFoundError

DEFAULT_RETENTION_SECONDS = 60 * 60


class ReconcilePaymentUseCase:
    def __init__(
        self,
        booking_repo: BookingRepo,
        event_store: PaymentEventStore,
        anomaly_repo: PaymentAnomalyRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        retention_seconds: int = DEFAULT_RETENTION_SECONDS,
    ) -> None:
        self._booking_repo = booking_repo
        self._event_store = event_store
        self._anomaly_repo = anomaly_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._retention = timedelta(seconds=retention_seconds)
        self._logger = logging.getLogger(__name__)

    async def execute(self, event: PaymentEvent) -> ReconcileOutcome:
        """
        Concilia un evento de pago contra la reserva ligada a su order_ref.

        Raises:
            NotFoundError: Si ninguna reserva tiene esa referencia de orden.
            AmountMismatchError: Si el monto declarado difiere del total.
            InvalidStateError: Si se intenta pagar una reserva no aprobada.
        """
        async with self._transaction_manager.start():
            booking = await self._booking_repo.get_by_order_ref(event.order_ref)
            if not booking:
                raise NotFoundError("Reserva", f"order_ref={event.order_ref}")

            now = self._clock.now_naive()
            processed = await self._event_store.claim(
                event.dedup_key, now=now, expires_at=now + self._retention
            )
            if processed is not None and processed.outcome is not None:
                self._logger.info(
                    "Duplicate payment event skipped",
                    extra=self._log_context(booking, event),
                )
                return ReconcileOutcome.from_dict(processed.outcome)

            outcome = await self._apply(booking, event)
            await self._event_store.record_outcome(event.dedup_key, outcome.to_dict())
            return outcome

    async def _apply(self, booking: Booking, event: PaymentEvent) -> ReconcileOutcome:
        current = booking.payment_status
        target = event.kind.target_payment_status

        if current != PaymentStatus.UNPAID:
            if target == current:
                return self._outcome(booking, current, ReconcileResult.ALREADY_RECONCILED)
            if target is None:
                return self._outcome(booking, current, ReconcileResult.INFORMATIONAL)
            await self._record_anomaly(booking, event)
            return self._outcome(booking, current, ReconcileResult.ANOMALY)

        if event.amount is not None and event.amount != booking.total_price:
            raise AmountMismatchError(expected=booking.total_price, actual=event.amount)

        if target is None:
            self._logger.info(
                "Informational payment event, no state change",
                extra=self._log_context(booking, event),
            )
            return self._outcome(booking, current, ReconcileResult.INFORMATIONAL)

        if target == PaymentStatus.PAID and booking.status != BookingStatus.APPROVED:
            raise InvalidStateError(
                booking.status.value, BookingStatus.APPROVED.value, "registrar el pago"
            )

        applied = await self._booking_repo.transition_payment(
            booking.id,
            event.order_ref,
            target,
            now=self._clock.now_naive(),
            transaction_key=event.transaction_key if target == PaymentStatus.PAID else None,
            approved_at=(event.approved_at or event.occurred_at)
            if target == PaymentStatus.PAID
            else None,
        )
        if not applied:
            latest = await self._booking_repo.get(booking.id)
            if (
                target == PaymentStatus.PAID
                and latest is not None
                and latest.payment_status == PaymentStatus.UNPAID
                and latest.status != BookingStatus.APPROVED
            ):
                # La reserva cambió de estado entre la lectura y el UPDATE.
                self._logger.warning(
                    "Payment captured for a booking that is no longer approved",
                    extra={**self._log_context(booking, event), "booking_status": latest.status.value},
                )
                raise InvalidStateError(
                    latest.status.value, BookingStatus.APPROVED.value, "registrar el pago"
                )
            latest_status = latest.payment_status if latest else current
            self._logger.info(
                "Payment already reconciled by a concurrent delivery",
                extra={**self._log_context(booking, event), "payment_status": latest_status.value},
            )
            return self._outcome(booking, latest_status, ReconcileResult.ALREADY_RECONCILED)

        log = self._logger.info if target == PaymentStatus.PAID else self._logger.warning
        log(
            "Payment status reconciled",
            extra={**self._log_context(booking, event), "payment_status": target.value},
        )
        return self._outcome(booking, target, ReconcileResult.APPLIED)

    async def _record_anomaly(self, booking: Booking, event: PaymentEvent) -> None:
        reason = (
            f"Evento '{event.kind.value}' en conflicto con estado de pago "
            f"'{booking.payment_status.value}'"
        )
        if event.cancelled_amount is not None:
            reason += f" (monto cancelado: {event.cancelled_amount})"
        await self._anomaly_repo.record(
            PaymentAnomaly(
                booking_id=booking.id,
                order_ref=event.order_ref,
                transaction_key=event.transaction_key,
                event_kind=event.kind,
                current_payment_status=booking.payment_status,
                reason=reason,
                occurred_at=event.occurred_at,
                recorded_at=self._clock.now_naive(),
            )
        )
        self._logger.warning(
            "Conflicting late payment signal recorded as anomaly",
            extra={**self._log_context(booking, event), "payment_status": booking.payment_status.value},
        )

    @staticmethod
    def _outcome(booking: Booking, status: PaymentStatus, result: ReconcileResult) -> ReconcileOutcome:
        return ReconcileOutcome(booking_id=booking.id, payment_status=status, result=result)

    @staticmethod
    def _log_context(booking: Booking, event: PaymentEvent) -> dict:
        return {
            "booking_id": booking.id,
            "order_ref": event.order_ref,
            "transaction_key": event.transaction_key,
            "event_kind": event.kind.value,
            "event_source": event.source.value,
        }
