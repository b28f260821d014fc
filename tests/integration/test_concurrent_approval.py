"""
Aprobaciones concurrentes sobre una base SQLite compartida.

Cada aprobación abre su propia sesión, igual que dos requests independientes;
solo una de dos reservas superpuestas puede quedar aprobada.
"""

import asyncio
from datetime import datetime

import pytest
import pytest_asyncio
from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.api.dependencies import build_use_cases
from app.application.interfaces.id_generator import FakeIdGenerator
from app.domain.entities.booking import BookingStatus
from app.infrastructure.db.repositories.booking_repo_sql import BookingRepoSQL
from app.infrastructure.db.repositories.payment_anomaly_repo_sql import PaymentAnomalyRepoSQL
from app.infrastructure.db.repositories.payment_event_store_sql import PaymentEventStoreSQL
from app.infrastructure.db.repositories.vehicle_repo_sql import VehicleRepoSQL
from app.infrastructure.db.seed import vehicle_row
from app.infrastructure.db.tables import bookings, metadata, vehicles
from app.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from app.infrastructure.in_memory.payment_gateway import StubPaymentGateway
from conftest import OTHER_RENTER_ID, OWNER_ID, RENTER_ID, VEHICLE_ID

pytestmark = pytest.mark.sql


@pytest_asyncio.fixture
async def session_factory(tmp_path, vehicle):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
        await conn.execute(insert(vehicles).values(**vehicle_row(vehicle)))

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


def _booking_actions(session, clock, settings):
    bundle = {
        "clock": clock,
        "id_generator": FakeIdGenerator(),
        "vehicle_repo": VehicleRepoSQL(session),
        "booking_repo": BookingRepoSQL(session),
        "event_store": PaymentEventStoreSQL(session),
        "anomaly_repo": PaymentAnomalyRepoSQL(session),
        "tx_manager": SQLAlchemyTransactionManager(session),
        "payment_gateway": StubPaymentGateway(clock=clock),
    }
    return build_use_cases(bundle, settings)["booking_actions"]


async def test_overlapping_approvals_in_parallel_admit_one(session_factory, clock, settings):
    async with session_factory() as session:
        actions = _booking_actions(session, clock, settings)
        first = await actions.create(RENTER_ID, VEHICLE_ID, datetime(2025, 6, 1, 10), datetime(2025, 6, 4, 10))
        second = await actions.create(
            OTHER_RENTER_ID, VEHICLE_ID, datetime(2025, 6, 3, 10), datetime(2025, 6, 6, 10)
        )

    async def approve(booking_id: str):
        async with session_factory() as request_session:
            return await _booking_actions(request_session, clock, settings).approve(OWNER_ID, booking_id)

    results = await asyncio.gather(approve(first.data.id), approve(second.data.id))

    assert sum(result.success for result in results) == 1
    assert [result.code for result in results if not result.success] == ["CONFLICT"]
    async with session_factory() as session:
        approved = (
            await session.execute(
                select(bookings.c.id).where(bookings.c.status == BookingStatus.APPROVED.value)
            )
        ).scalars().all()
    assert len(approved) == 1
