"""
Reintento de unidades de trabajo que fallan por bloqueos transitorios.

La aprobación bloquea la fila del vehículo y la purga borra en lote; ambas
pueden chocar con otra transacción y conviene repetirlas completas.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import DBAPIError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# PostgreSQL SQLSTATE
PG_DEADLOCK_DETECTED = "40P01"
PG_SERIALIZATION_FAILURE = "40001"
# MySQL error codes
MYSQL_DEADLOCK_ERROR = "1213"
MYSQL_LOCK_WAIT_TIMEOUT = "1205"

RETRYABLE_CODES = (
    PG_DEADLOCK_DETECTED,
    PG_SERIALIZATION_FAILURE,
    MYSQL_DEADLOCK_ERROR,
    MYSQL_LOCK_WAIT_TIMEOUT,
)


def is_deadlock_error(error: Exception) -> bool:
    """True si el error es un deadlock o fallo de serialización reintentable."""
    if not isinstance(error, DBAPIError):
        return False
    orig = getattr(error, "orig", None)
    code = str(getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None) or "")
    if code in RETRYABLE_CODES:
        return True
    error_str = str(error)
    return any(retryable in error_str for retryable in RETRYABLE_CODES)


async def retry_on_deadlock(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 0.1,
) -> T:
    """
    Ejecuta `func` y la repite con backoff exponencial ante un deadlock.

    Raises:
        La excepción original si no es un deadlock o si se agotan los intentos.
    """
    for attempt in range(max_attempts):
        try:
            return await func()
        except DBAPIError as e:
            if not is_deadlock_error(e) or attempt == max_attempts - 1:
                if is_deadlock_error(e):
                    logger.error(
                        "Database deadlock persists after max retries",
                        extra={"attempts": max_attempts, "error": str(e)},
                    )
                raise

            delay = base_delay * (2 ** attempt)
            logger.warning(
                "Database deadlock detected, retrying",
                extra={
                    "attempt": attempt + 1,
                    "max_attempts": max_attempts,
                    "retry_delay": delay,
                    "error": str(e),
                },
            )
            await asyncio.sleep(delay)
    raise RuntimeError("retry_on_deadlock requires max_attempts >= 1")
