from sqlalchemy import (
    DDL,
    JSON,
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    event,
)

metadata = MetaData()

vehicles = Table(
    "vehicles",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("owner_id", String(64), nullable=False, index=True),
    Column("model", String(100)),
    Column("airport_location", String(100)),
    Column("daily_rate", BigInteger, nullable=False),
    Column("available_from", DateTime, nullable=False),
    Column("available_until", DateTime, nullable=False),
    Column("status", String(16), nullable=False, default="active"),
)

bookings = Table(
    "bookings",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("vehicle_id", String(36), ForeignKey("vehicles.id"), nullable=False),
    Column("renter_id", String(64), nullable=False, index=True),
    Column("start_at", DateTime, nullable=False),
    Column("end_at", DateTime, nullable=False),
    Column("total_price", BigInteger, nullable=False),
    Column("status", String(16), nullable=False, default="pending"),
    Column("payment_status", String(16), nullable=False, default="unpaid"),
    Column("pickup_location", String(255)),
    Column("return_location", String(255)),
    Column("order_ref", String(64), unique=True),
    Column("transaction_key", String(200)),
    Column("approved_at", DateTime),
    Column("created_at", DateTime),
    Column("updated_at", DateTime),
)

Index("ix_bookings_vehicle_status", bookings.c.vehicle_id, bookings.c.status)

payment_event_dedup = Table(
    "payment_event_dedup",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("dedup_key", String(64), nullable=False, unique=True),
    Column("outcome", JSON),
    Column("created_at", DateTime, nullable=False),
    Column("expires_at", DateTime, nullable=False, index=True),
)

payment_anomalies = Table(
    "payment_anomalies",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("booking_id", String(36), nullable=False, index=True),
    Column("order_ref", String(64), nullable=False),
    Column("transaction_key", String(200)),
    Column("event_kind", String(32), nullable=False),
    Column("current_payment_status", String(16), nullable=False),
    Column("reason", String(255), nullable=False),
    Column("occurred_at", DateTime, nullable=False),
    Column("recorded_at", DateTime),
)

# Garantía de base de datos contra la doble reserva (solo PostgreSQL).
event.listen(
    bookings,
    "after_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    bookings,
    "after_create",
    DDL(
        "ALTER TABLE bookings ADD CONSTRAINT ex_bookings_approved_no_overlap "
        "EXCLUDE USING gist (vehicle_id WITH =, tsrange(start_at, end_at) WITH &&) "
        "WHERE (status = 'approved')"
    ).execute_if(dialect="postgresql"),
)
