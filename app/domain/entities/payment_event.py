"""Entidad PaymentEvent - notificación entrante del gateway de pagos."""

import hashlib
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from app.domain.entities.booking import PaymentStatus


class PaymentEventKind(str, Enum):
    """Tipos de evento que reporta el gateway."""

    COMPLETED = "completed"
    CANCELED = "canceled"
    PARTIALLY_CANCELED = "partially-canceled"
    AWAITING_DEPOSIT = "awaiting-deposit"
    EXPIRED = "expired"
    ABORTED = "aborted"

    @property
    def target_payment_status(self) -> PaymentStatus | None:
        """Estado de pago al que conduce el evento; None si es solo informativo."""
        return _TARGET_STATUS[self]

    @property
    def is_failure(self) -> bool:
        return self.target_payment_status == PaymentStatus.FAILED

    @classmethod
    def from_gateway_status(cls, value: str) -> "PaymentEventKind":
        """
        Traduce el estado del gateway (DONE, CANCELED, ...) o el nombre interno.

        Raises:
            ValueError: Si el estado no es conocido.
        """
        normalized = value.strip()
        if normalized.upper() in GATEWAY_STATUS_MAP:
            return GATEWAY_STATUS_MAP[normalized.upper()]
        return cls(normalized.lower())


_TARGET_STATUS: dict[PaymentEventKind, PaymentStatus | None] = {
    PaymentEventKind.COMPLETED: PaymentStatus.PAID,
    PaymentEventKind.CANCELED: PaymentStatus.FAILED,
    PaymentEventKind.PARTIALLY_CANCELED: PaymentStatus.FAILED,
    PaymentEventKind.EXPIRED: PaymentStatus.FAILED,
    PaymentEventKind.ABORTED: PaymentStatus.FAILED,
    PaymentEventKind.AWAITING_DEPOSIT: None,
}

GATEWAY_STATUS_MAP: dict[str, PaymentEventKind] = {
    "DONE": PaymentEventKind.COMPLETED,
    "CANCELED": PaymentEventKind.CANCELED,
    "PARTIAL_CANCELED": PaymentEventKind.PARTIALLY_CANCELED,
    "WAITING_FOR_DEPOSIT": PaymentEventKind.AWAITING_DEPOSIT,
    "EXPIRED": PaymentEventKind.EXPIRED,
    "ABORTED": PaymentEventKind.ABORTED,
}


class PaymentEventSource(str, Enum):
    """Origen de la notificación."""

    CONFIRM = "confirm"
    WEBHOOK = "webhook"
    FAIL_REDIRECT = "fail-redirect"


@dataclass(frozen=True)
class PaymentEvent:
    """
    Notificación efímera sobre un pago real.

    Nunca se persiste como fila propia: solo su clave de deduplicación y el
    resultado calculado viven en el almacén de eventos procesados.

    Attributes:
        order_ref: Referencia de orden emitida por el Payment Intent Issuer.
        transaction_key: Clave de la transacción en el gateway (None en el redirect de falla).
        kind: Tipo de evento.
        occurred_at: Momento del evento según el emisor (UTC naive).
        amount: Monto declarado; None cuando el emisor no lo informa.
        approved_at: Momento de aprobación reportado por el gateway, si existe.
        fingerprint: Huella del cuerpo recibido; reemplaza a occurred_at en la
            clave de deduplicación cuando el emisor no informa ningún momento.
        cancelled_amount: Monto devuelto según las cancelaciones informadas.
    """

    order_ref: str
    transaction_key: str | None
    kind: PaymentEventKind
    occurred_at: datetime
    amount: int | None = None
    approved_at: datetime | None = None
    source: PaymentEventSource = PaymentEventSource.WEBHOOK
    fingerprint: str | None = None
    cancelled_amount: int | None = None

    @property
    def dedup_key(self) -> str:
        """Clave estable (transaction_key, kind, occurred_at) como sha256 hex."""
        raw = "|".join(
            (
                self.transaction_key or f"order:{self.order_ref}",
                self.kind.value,
                self.fingerprint or self.occurred_at.isoformat(),
            )
        )
        return hashlib.sha256(raw.encode()).hexdigest()


class ReconcileResult(str, Enum):
    """Cómo terminó la conciliación de un evento."""

    APPLIED = "applied"
    ALREADY_RECONCILED = "already_reconciled"
    INFORMATIONAL = "informational"
    ANOMALY = "anomaly"


@dataclass(frozen=True)
class ReconcileOutcome:
    """Resultado observable de conciliar un evento; se guarda para las reentregas."""

    booking_id: str
    payment_status: PaymentStatus
    result: ReconcileResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "booking_id": self.booking_id,
            "payment_status": self.payment_status.value,
            "result": self.result.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReconcileOutcome":
        return cls(
            booking_id=data["booking_id"],
            payment_status=PaymentStatus(data["payment_status"]),
            result=ReconcileResult(data["result"]),
        )


@dataclass
class PaymentAnomaly:
    """Señal tardía en conflicto con un estado de pago terminal; requiere revisión manual."""

    booking_id: str
    order_ref: str
    transaction_key: str | None
    event_kind: PaymentEventKind
    current_payment_status: PaymentStatus
    reason: str
    occurred_at: datetime
    recorded_at: datetime | None = None
    id: int | None = None
