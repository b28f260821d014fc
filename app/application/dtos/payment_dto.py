"""DTOs para pagos."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class PaymentIntentDTO:
    """Descriptor que consume el SDK cliente del gateway para abrir el checkout."""

    # Reserva
    booking_id: str
    order_ref: str
    order_name: str

    # Monto en unidad mínima de la moneda
    amount: int

    # Cliente
    customer_name: str

    # Redirecciones
    success_url: str
    fail_url: str


@dataclass
class PaymentInfoDTO:
    """Estado de pago de una reserva (respuesta simplificada)."""

    booking_id: str
    order_ref: str | None
    transaction_key: str | None
    payment_status: str
    amount: int
    approved_at: datetime | None = None

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"
