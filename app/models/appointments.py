"""Appointments table model using SQLAlchemy Core."""

import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    Table,
    Text,
    Uuid,
    func,
    text,
)

from app.models.base import metadata

# Statuses that hold a (doctor, date, time) slot
ACTIVE_HOLD_PREDICATE = "status IN ('Pending', 'Confirmed')"

appointments = Table(
    "appointments",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    # Ownership / references
    Column(
        "patient_id",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column(
        "doctor_id",
        Uuid,
        ForeignKey("doctors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    # Slot
    Column("date", Date, nullable=False),
    Column("time", String(20), nullable=False),
    # Status management
    Column("status", String(20), nullable=False, server_default="Pending"),
    # Details
    Column("symptoms", Text, nullable=False, server_default=""),
    Column("notes", Text, nullable=False, server_default=""),
    # Audit fields
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column(
        "updated_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    ),
    # Constraints
    CheckConstraint(
        "status IN ('Pending', 'Confirmed', 'Completed', 'Cancelled', 'Rejected', 'Expired')",
        name="appointments_status_check",
    ),
    Index(
        "uq_appointments_active_slot",
        "doctor_id",
        "date",
        "time",
        unique=True,
        postgresql_where=text(ACTIVE_HOLD_PREDICATE),
        sqlite_where=text(ACTIVE_HOLD_PREDICATE),
    ),
    Index("idx_appointments_status_date", "status", "date"),
)
