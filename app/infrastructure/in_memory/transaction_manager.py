from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from app.application.interfaces.transaction_manager import TransactionManager


class NoopTransactionManager(TransactionManager):
    """Sin rollback: lo escrito antes de una excepción permanece en memoria."""

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        yield
