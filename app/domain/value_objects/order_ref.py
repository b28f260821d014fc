"""Value Object OrderRef - referencia de orden enviada al gateway de pagos."""

import secrets
import string
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class OrderRef:
    """
    Value Object inmutable que representa la referencia de orden de un pago.

    Formato: ORDER_<id de reserva sin guiones, 20 chars>_<epoch ms>_<sufijo>.
    El gateway exige entre 6 y 64 caracteres alfanuméricos, '-' o '_'.
    """

    value: str

    MAX_LENGTH = 64
    SUFFIX_LENGTH = 6
    ALLOWED_CHARS = string.ascii_uppercase + string.digits

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("order_ref no puede estar vacío")

        if len(self.value) > self.MAX_LENGTH:
            raise ValueError(f"order_ref excede {self.MAX_LENGTH} caracteres: {len(self.value)}")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls, booking_id: str, issued_at: datetime) -> "OrderRef":
        """Genera una referencia nueva y única para la reserva."""
        compact_id = booking_id.replace("-", "")[:20]
        millis = int(issued_at.timestamp() * 1000)
        suffix = "".join(secrets.choice(cls.ALLOWED_CHARS) for _ in range(cls.SUFFIX_LENGTH))
        return cls(value=f"ORDER_{compact_id}_{millis}_{suffix}")
