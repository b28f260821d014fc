from typing import Sequence

from app.domain.entities.payment_event import PaymentAnomaly


class PaymentAnomalyRepo:
    async def record(self, anomaly: PaymentAnomaly) -> None:
        raise NotImplementedError

    async def list_by_booking(self, booking_id: str) -> Sequence[PaymentAnomaly]:
        raise NotImplementedError
