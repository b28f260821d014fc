import logging

from app.application.interfaces.clock import Clock
from app.application.interfaces.payment_event_store import PaymentEventStore
from app.application.interfaces.transaction_manager import TransactionManager


class PurgePaymentEventsUseCase:
    def __init__(
        self,
        event_store: PaymentEventStore,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._event_store = event_store
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(self) -> int:
        async with self._transaction_manager.start():
            purged = await self._event_store.purge_expired(self._clock.now_naive())
        self._logger.info("Expired payment events purged", extra={"purged": purged})
        return purged
