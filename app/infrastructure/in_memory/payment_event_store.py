from datetime import datetime
from typing import Any

from app.application.interfaces.payment_event_store import PaymentEventStore, ProcessedPaymentEvent


class InMemoryPaymentEventStore(PaymentEventStore):
    """Solo para una instancia: se pierde al reiniciar el proceso."""

    def __init__(self) -> None:
        self._items: dict[str, ProcessedPaymentEvent] = {}

    async def claim(
        self,
        dedup_key: str,
        now: datetime,
        expires_at: datetime,
    ) -> ProcessedPaymentEvent | None:
        self._sweep(now)
        existing = self._items.get(dedup_key)
        if existing is not None:
            return existing
        self._items[dedup_key] = ProcessedPaymentEvent(dedup_key=dedup_key, expires_at=expires_at)
        return None

    async def record_outcome(self, dedup_key: str, outcome: dict[str, Any]) -> None:
        record = self._items.get(dedup_key)
        if record is not None:
            record.outcome = dict(outcome)

    async def purge_expired(self, now: datetime) -> int:
        return self._sweep(now)

    def _sweep(self, now: datetime) -> int:
        expired = [key for key, record in self._items.items() if record.expires_at <= now]
        for key in expired:
            del self._items[key]
        return len(expired)
