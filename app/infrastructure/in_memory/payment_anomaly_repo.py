from typing import Sequence

from app.application.interfaces.payment_anomaly_repo import PaymentAnomalyRepo
from app.domain.entities.payment_event import PaymentAnomaly


class InMemoryPaymentAnomalyRepo(PaymentAnomalyRepo):
    def __init__(self) -> None:
        self._items: list[PaymentAnomaly] = []
        self._next_id = 1

    async def record(self, anomaly: PaymentAnomaly) -> None:
        anomaly.id = self._next_id
        self._next_id += 1
        self._items.append(anomaly)

    async def list_by_booking(self, booking_id: str) -> Sequence[PaymentAnomaly]:
        return [a for a in self._items if a.booking_id == booking_id]
