from typing import Sequence

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.payment_anomaly_repo import PaymentAnomalyRepo
from app.domain.entities.booking import PaymentStatus
from app.domain.entities.payment_event import PaymentAnomaly, PaymentEventKind
from app.infrastructure.db.tables import payment_anomalies


class PaymentAnomalyRepoSQL(PaymentAnomalyRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def record(self, anomaly: PaymentAnomaly) -> None:
        stmt = insert(payment_anomalies).values(
            booking_id=anomaly.booking_id,
            order_ref=anomaly.order_ref,
            transaction_key=anomaly.transaction_key,
            event_kind=anomaly.event_kind.value,
            current_payment_status=anomaly.current_payment_status.value,
            reason=anomaly.reason,
            occurred_at=anomaly.occurred_at,
            recorded_at=anomaly.recorded_at,
        )
        result = await self._session.execute(stmt)
        anomaly.id = result.inserted_primary_key[0]

    async def list_by_booking(self, booking_id: str) -> Sequence[PaymentAnomaly]:
        stmt = (
            select(payment_anomalies)
            .where(payment_anomalies.c.booking_id == booking_id)
            .order_by(payment_anomalies.c.id)
        )
        result = await self._session.execute(stmt)
        return [
            PaymentAnomaly(
                id=row["id"],
                booking_id=row["booking_id"],
                order_ref=row["order_ref"],
                transaction_key=row["transaction_key"],
                event_kind=PaymentEventKind(row["event_kind"]),
                current_payment_status=PaymentStatus(row["current_payment_status"]),
                reason=row["reason"],
                occurred_at=row["occurred_at"],
                recorded_at=row["recorded_at"],
            )
            for row in result.mappings().all()
        ]
