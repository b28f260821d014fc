import logging
from typing import Any

from app.application.interfaces.clock import Clock
from app.application.interfaces.payment_gateway import GatewayConfirmation, PaymentGateway
from app.infrastructure.gateways.toss_payment_gateway import (
    decode_webhook_payload,
    verify_webhook_signature,
)

TEST_KEY_PREFIX = "TEST_"


class StubPaymentGateway(PaymentGateway):
    """
    Modo de prueba del gateway: no hay llamada de red.

    Se usa cuando no hay secret key configurada. La firma del webhook se sigue
    verificando si hay un secreto de webhook configurado.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def confirm_payment(
        self,
        transaction_key: str,
        order_ref: str,
        amount: int,
    ) -> GatewayConfirmation:
        self._logger.info(
            "Test-mode payment confirmation",
            extra={"order_ref": order_ref, "transaction_key": transaction_key, "amount": amount},
        )
        return GatewayConfirmation(
            transaction_key=f"{TEST_KEY_PREFIX}{transaction_key}",
            status="DONE",
            approved_at=self._clock.now_naive(),
        )

    async def parse_webhook_event(
        self,
        payload: bytes,
        signature_header: str | None,
        webhook_secret: str | None,
    ) -> dict[str, Any]:
        if not payload:
            raise ValueError("Empty webhook payload")
        verify_webhook_signature(payload, signature_header, webhook_secret)
        return decode_webhook_payload(payload)
