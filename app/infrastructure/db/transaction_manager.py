from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.transaction_manager import TransactionManager


class SQLAlchemyTransactionManager(TransactionManager):
    """
    Una unidad de trabajo por bloque `start()` exterior.

    Los bloques anidados se unen a la transacción abierta. Si la sesión quedó
    con una transacción implícita de lecturas previas, se cierra antes de
    abrir la propia para que el commit del bloque sea real.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._depth = 0

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        if self._depth > 0:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        if self._session.in_transaction():
            await self._session.commit()
        self._depth = 1
        try:
            async with self._session.begin():
                yield
        finally:
            self._depth = 0
