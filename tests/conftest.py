"""
Pytest configuration and shared fixtures.

Este módulo provee fixtures reutilizables para:
- Reloj y generador de ids deterministas
- Adaptadores in-memory ya cableados a los casos de uso
- Vehículo de prueba sembrado
- Cliente HTTP de prueba (FastAPI TestClient) con overrides de dependencias
- Sesión SQLite in-memory (aiosqlite) para los repositorios SQL
"""

from datetime import datetime, timezone
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.api.dependencies import build_use_cases, get_use_cases
from app.application.interfaces.clock import FakeClock
from app.application.interfaces.id_generator import FakeIdGenerator
from app.config import Settings
from app.domain.entities.vehicle import Vehicle
from app.infrastructure.db.seed import vehicle_row
from app.infrastructure.db.tables import metadata, vehicles
from app.infrastructure.in_memory.booking_repo import InMemoryBookingRepo
from app.infrastructure.in_memory.payment_anomaly_repo import InMemoryPaymentAnomalyRepo
from app.infrastructure.in_memory.payment_event_store import InMemoryPaymentEventStore
from app.infrastructure.in_memory.payment_gateway import StubPaymentGateway
from app.infrastructure.in_memory.transaction_manager import NoopTransactionManager
from app.infrastructure.in_memory.vehicle_repo import InMemoryVehicleRepo
from app.main import app

OWNER_ID = "owner-1"
RENTER_ID = "renter-1"
OTHER_RENTER_ID = "renter-2"
VEHICLE_ID = "veh-0001"
DAILY_RATE = 50000
WEBHOOK_SECRET = "whsec_test"


# ============================================================================
# FIXTURES DE DOMINIO / IN-MEMORY
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 5, 20, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def vehicle() -> Vehicle:
    return Vehicle(
        id=VEHICLE_ID,
        owner_id=OWNER_ID,
        daily_rate=DAILY_RATE,
        available_from=datetime(2025, 1, 1),
        available_until=datetime(2026, 12, 31),
        model="Avante",
        airport_location="ICN",
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        use_in_memory=True,
        toss_secret_key=None,
        toss_webhook_secret=WEBHOOK_SECRET,
        app_base_url="http://localhost:3000",
        payment_event_retention_seconds=3600,
    )


@pytest.fixture
def bundle(clock: FakeClock, vehicle: Vehicle) -> dict:
    """Adaptadores in-memory con un vehículo sembrado."""
    vehicle_repo = InMemoryVehicleRepo()
    vehicle_repo.add(vehicle)
    return {
        "clock": clock,
        "id_generator": FakeIdGenerator(),
        "vehicle_repo": vehicle_repo,
        "booking_repo": InMemoryBookingRepo(vehicle_repo=vehicle_repo),
        "event_store": InMemoryPaymentEventStore(),
        "anomaly_repo": InMemoryPaymentAnomalyRepo(),
        "tx_manager": NoopTransactionManager(),
        "payment_gateway": StubPaymentGateway(clock=clock),
    }


@pytest.fixture
def use_cases(bundle: dict, settings: Settings) -> dict:
    return build_use_cases(bundle, settings)


# ============================================================================
# FIXTURES DE CLIENTE HTTP
# ============================================================================

@pytest.fixture
def client(use_cases: dict) -> Generator[TestClient, None, None]:
    """
    FastAPI TestClient con override de los casos de uso.
    Cada test recibe sus propios repositorios in-memory.
    """
    app.dependency_overrides[get_use_cases] = lambda: use_cases

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ============================================================================
# FIXTURES DE BASE DE DATOS
# ============================================================================

@pytest_asyncio.fixture
async def sql_session(vehicle: Vehicle) -> AsyncGenerator[AsyncSession, None]:
    """Sesión sobre un SQLite in-memory nuevo, con el vehículo de prueba insertado."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
        await conn.execute(insert(vehicles).values(**vehicle_row(vehicle)))

    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


# ============================================================================
# MARKERS DE PYTEST
# ============================================================================

def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "sql: Tests que usan los repositorios SQL sobre SQLite in-memory"
    )
    config.addinivalue_line(
        "markers",
        "circuit_breaker: Tests del circuit breaker del gateway de pagos"
    )


# ============================================================================
# HOOKS DE PYTEST
# ============================================================================

@pytest.fixture(autouse=True)
def reset_circuit_breakers():
    """
    Reset circuit breaker antes de cada test.
    Evita que tests fallen por breakers abiertos de tests anteriores.
    """
    from app.infrastructure.circuit_breaker import payment_breaker

    payment_breaker.close()
    yield
    payment_breaker.close()
