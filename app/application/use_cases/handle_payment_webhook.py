import hashlib
import logging

from pydantic import ValidationError

from app.application.interfaces.clock import Clock
from app.application.interfaces.payment_gateway import PaymentGateway
from app.application.schemas import PaymentWebhookEnvelope
from app.application.use_cases.reconcile_payment import ReconcilePaymentUseCase
from app.domain.entities.payment_event import PaymentEvent, PaymentEventKind, PaymentEventSource
from app.domain.errors import (
    AmountMismatchError,
    InvalidPayloadError,
    InvalidStateError,
    NotFoundError,
)


class HandlePaymentWebhookUseCase:
    """
    Recibe las notificaciones asíncronas del gateway.

    Solo la firma y el formato del cuerpo producen un error hacia el gateway;
    cualquier fallo de negocio se responde como recibido para que el gateway
    no reintente indefinidamente una entrega que nunca va a prosperar.
    """

    def __init__(
        self,
        payment_gateway: PaymentGateway,
        reconciler: ReconcilePaymentUseCase,
        webhook_secret: str | None,
        clock: Clock,
    ) -> None:
        self._payment_gateway = payment_gateway
        self._reconciler = reconciler
        self._webhook_secret = webhook_secret
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self, raw_body: bytes, signature: str | None) -> dict:
        """
        Raises:
            InvalidSignatureError: Si la firma no coincide con el secreto configurado.
            InvalidPayloadError: Si el cuerpo no es un evento válido.
        """
        if not raw_body:
            raise InvalidPayloadError("cuerpo vacío")
        try:
            event_dict = await self._payment_gateway.parse_webhook_event(
                payload=raw_body,
                signature_header=signature,
                webhook_secret=self._webhook_secret,
            )
            envelope = PaymentWebhookEnvelope.model_validate(event_dict)
        except ValidationError as exc:
            raise InvalidPayloadError(str(exc.errors()[0]["msg"]) if exc.errors() else "formato") from exc
        except ValueError as exc:
            raise InvalidPayloadError(str(exc)) from exc

        log_context = {
            "order_ref": envelope.data.order_ref,
            "transaction_key": envelope.data.transaction_key,
            "gateway_status": envelope.status,
        }
        if not envelope.status:
            self._logger.warning("Webhook without status ignored", extra=log_context)
            return {"success": True, "message": "Ignored"}
        try:
            kind = PaymentEventKind.from_gateway_status(envelope.status)
        except ValueError:
            self._logger.warning("Unknown webhook status ignored", extra=log_context)
            return {"success": True, "message": "Ignored"}

        occurred_at = envelope.created_at or envelope.data.approved_at
        event = PaymentEvent(
            order_ref=envelope.data.order_ref,
            transaction_key=envelope.data.transaction_key,
            kind=kind,
            occurred_at=occurred_at or self._clock.now_naive(),
            amount=envelope.data.total_amount if kind == PaymentEventKind.COMPLETED else None,
            approved_at=envelope.data.approved_at,
            source=PaymentEventSource.WEBHOOK,
            # Sin momento informado, las reentregas se reconocen por su cuerpo.
            fingerprint=None if occurred_at else hashlib.sha256(raw_body).hexdigest(),
            cancelled_amount=envelope.data.cancelled_amount,
        )

        try:
            outcome = await self._reconciler.execute(event)
        except NotFoundError:
            self._logger.warning("Webhook for unknown order reference", extra=log_context)
            return {"success": True, "message": "Booking not found"}
        except (AmountMismatchError, InvalidStateError) as exc:
            self._logger.error(
                "Webhook rejected by reconciliation",
                extra={**log_context, "error_code": exc.code, "error": exc.message},
            )
            return {"success": True, "message": exc.message}

        self._logger.info(
            "Payment webhook processed",
            extra={**log_context, "booking_id": outcome.booking_id, "result": outcome.result.value},
        )
        return {"success": True, **outcome.to_dict()}
