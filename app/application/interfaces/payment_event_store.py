"""Interface PaymentEventStore - Puerto para deduplicación de eventos de pago."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class ProcessedPaymentEvent:
    dedup_key: str
    expires_at: datetime
    outcome: dict[str, Any] | None = None


class PaymentEventStore:
    """
    Almacén acotado en el tiempo de eventos de pago ya procesados.

    Las entradas con expires_at vencido se consideran inexistentes y pueden
    purgarse. En despliegues con varias instancias debe ser durable y compartido.
    """

    async def claim(
        self,
        dedup_key: str,
        now: datetime,
        expires_at: datetime,
    ) -> ProcessedPaymentEvent | None:
        """
        Reclama la clave para la unidad de trabajo actual.

        Returns:
            None si la clave quedó reclamada por esta llamada; el registro
            existente si el evento ya fue procesado dentro de la ventana.
        """
        raise NotImplementedError

    async def record_outcome(self, dedup_key: str, outcome: dict[str, Any]) -> None:
        raise NotImplementedError

    async def purge_expired(self, now: datetime) -> int:
        """Elimina las entradas vencidas y retorna cuántas se borraron."""
        raise NotImplementedError
