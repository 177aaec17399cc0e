"""User model definition using SQLAlchemy Core."""

import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    String,
    Table,
    Text,
    Uuid,
    func,
)

from app.models.base import metadata

users = Table(
    "users",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    # Identity
    Column("name", Text, nullable=False),
    Column("email", Text, nullable=False, unique=True, index=True),
    Column("password_hash", Text, nullable=False),
    Column("role", String(20), nullable=False, server_default="Patient", index=True),
    # Profile info (mutable)
    Column("phone", String(20)),
    Column("address", Text),
    Column("gender", String(20)),
    Column("dob", Date),
    # Audit
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column(
        "updated_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    ),
    CheckConstraint("role IN ('Patient', 'Doctor', 'Admin')", name="users_role_check"),
)
