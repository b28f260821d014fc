from datetime import datetime
from typing import Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.payment_event_store import PaymentEventStore, ProcessedPaymentEvent
from app.infrastructure.db.tables import payment_event_dedup


class PaymentEventStoreSQL(PaymentEventStore):
    """Almacén de deduplicación durable y compartido entre instancias."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def claim(
        self,
        dedup_key: str,
        now: datetime,
        expires_at: datetime,
    ) -> ProcessedPaymentEvent | None:
        existing = await self._get(dedup_key)
        if existing is not None:
            if existing.expires_at > now:
                return existing
            # Vencida: la ventana de deduplicación ya no la cubre.
            await self._session.execute(
                delete(payment_event_dedup).where(payment_event_dedup.c.dedup_key == dedup_key)
            )

        try:
            async with self._session.begin_nested():
                await self._session.execute(
                    insert(payment_event_dedup).values(
                        dedup_key=dedup_key,
                        outcome=None,
                        created_at=now,
                        expires_at=expires_at,
                    )
                )
        except IntegrityError:
            # Otra entrega concurrente reclamó la clave primero.
            return await self._get(dedup_key)
        return None

    async def record_outcome(self, dedup_key: str, outcome: dict[str, Any]) -> None:
        await self._session.execute(
            update(payment_event_dedup)
            .where(payment_event_dedup.c.dedup_key == dedup_key)
            .values(outcome=outcome)
        )

    async def purge_expired(self, now: datetime) -> int:
        result = await self._session.execute(
            delete(payment_event_dedup).where(payment_event_dedup.c.expires_at <= now)
        )
        return result.rowcount or 0

    async def _get(self, dedup_key: str) -> ProcessedPaymentEvent | None:
        stmt = (
            select(payment_event_dedup)
            .where(payment_event_dedup.c.dedup_key == dedup_key)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        if not row:
            return None
        return ProcessedPaymentEvent(
            dedup_key=row["dedup_key"],
            expires_at=row["expires_at"],
            outcome=row["outcome"],
        )
