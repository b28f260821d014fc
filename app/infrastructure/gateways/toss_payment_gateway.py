import base64
import hashlib
import hmac
import json
import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from app.application.interfaces.payment_gateway import GatewayConfirmation, PaymentGateway
from app.domain.errors import InvalidSignatureError, PaymentGatewayError
from app.infrastructure.circuit_breaker import CircuitBreakerError, payment_breaker

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-tosspayments-signature"


class GatewayUnavailable(Exception):
    """Fallo de transporte o 5xx; cuenta para el circuit breaker."""


class TossPaymentGateway(PaymentGateway):
    def __init__(self, secret_key: str, api_url: str, timeout_seconds: float = 10.0) -> None:
        """
        Adaptador HTTP del gateway de pagos estilo Toss.

        Args:
            secret_key: Secret key del comercio (Basic auth `secret:`).
            api_url: URL base del API, p. ej. https://api.tosspayments.com/v1
            timeout_seconds: Timeout de la llamada de confirmación.
        """
        self._secret_key = secret_key
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout_seconds

    async def confirm_payment(
        self,
        transaction_key: str,
        order_ref: str,
        amount: int,
    ) -> GatewayConfirmation:
        """
        Confirm payment with the gateway API, protected by Circuit Breaker.

        Raises:
            PaymentGatewayError: When the gateway rejects the payment, is
                unreachable, or the circuit is open.
        """
        url = f"{self._api_url}/payments/confirm"
        payload = {"paymentKey": transaction_key, "orderId": order_ref, "amount": amount}
        log_context = {"order_ref": order_ref, "transaction_key": transaction_key}

        try:
            with payment_breaker.calling():
                try:
                    async with httpx.AsyncClient(timeout=self._timeout) as client:
                        response = await client.post(
                            url,
                            json=payload,
                            headers={"Authorization": self._authorization()},
                        )
                except httpx.HTTPError as exc:
                    raise GatewayUnavailable(str(exc)) from exc
                if response.status_code >= 500:
                    raise GatewayUnavailable(f"HTTP {response.status_code}")
        except CircuitBreakerError as exc:
            logger.error(
                "Payment circuit breaker is open - service unavailable",
                extra={**log_context, "circuit_state": str(exc)},
            )
            raise PaymentGatewayError(
                "CIRCUIT_OPEN", "Payment gateway temporarily unavailable"
            ) from exc
        except GatewayUnavailable as exc:
            logger.error("Payment gateway unavailable", exc_info=exc, extra=log_context)
            raise PaymentGatewayError("UNAVAILABLE", str(exc)) from exc

        body = _json_body(response)
        if response.status_code >= 400:
            logger.error(
                "Payment gateway rejected confirmation",
                extra={**log_context, "http_status": response.status_code, "gateway_code": body.get("code")},
            )
            raise PaymentGatewayError(
                body.get("code") or "REJECTED",
                body.get("message") or "Payment confirmation failed",
                http_status=response.status_code,
            )

        logger.info("Payment confirmed by gateway", extra=log_context)
        return GatewayConfirmation(
            transaction_key=body.get("paymentKey") or transaction_key,
            status=body.get("status") or "DONE",
            approved_at=parse_gateway_datetime(body.get("approvedAt")),
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

    def _authorization(self) -> str:
        token = base64.b64encode(f"{self._secret_key}:".encode()).decode()
        return f"Basic {token}"


def compute_webhook_signature(payload: bytes, webhook_secret: str) -> str:
    digest = hmac.new(webhook_secret.encode(), payload, hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def verify_webhook_signature(
    payload: bytes, signature_header: str | None, webhook_secret: str | None
) -> None:
    """
    base64(HMAC-SHA256(secret, cuerpo crudo)); sin secreto configurado no se verifica.

    Raises:
        InvalidSignatureError: Si falta la firma o no coincide.
    """
    if not webhook_secret:
        logger.debug("Webhook signature verification skipped (no secret configured)")
        return
    if not signature_header:
        raise InvalidSignatureError("missing signature header")
    expected = compute_webhook_signature(payload, webhook_secret)
    if not hmac.compare_digest(expected.encode(), signature_header.strip().encode()):
        raise InvalidSignatureError("signature mismatch")


def decode_webhook_payload(payload: bytes) -> dict[str, Any]:
    try:
        event = json.loads(payload.decode() or "{}")
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError("Invalid webhook payload") from exc
    if not isinstance(event, dict):
        raise ValueError("Webhook payload must be a JSON object")
    return event


def parse_gateway_datetime(value: str | None) -> datetime | None:
    """ISO-8601 del gateway (con offset) a UTC naive."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unparseable gateway timestamp", extra={"value": value})
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _json_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}
