import logging

from app.application.interfaces.clock import Clock
from app.application.use_cases.reconcile_payment import ReconcilePaymentUseCase
from app.domain.entities.payment_event import (
    PaymentEvent,
    PaymentEventKind,
    PaymentEventSource,
    ReconcileOutcome,
)


class HandlePaymentFailureUseCase:
    """Redirect de falla del checkout: el pago se trata como un evento 'aborted'."""

    def __init__(self, reconciler: ReconcilePaymentUseCase, clock: Clock) -> None:
        self._reconciler = reconciler
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, order_ref: str, error_code: str, error_message: str) -> ReconcileOutcome:
        self._logger.warning(
            "Checkout failure reported",
            extra={"order_ref": order_ref, "error_code": error_code, "error_message": error_message},
        )
        return await self._reconciler.execute(
            PaymentEvent(
                order_ref=order_ref,
                transaction_key=None,
                kind=PaymentEventKind.ABORTED,
                occurred_at=self._clock.now_naive(),
                source=PaymentEventSource.FAIL_REDIRECT,
            )
        )
