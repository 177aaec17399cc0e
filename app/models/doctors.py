"""Doctor model definition using SQLAlchemy Core."""

import uuid

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    Uuid,
    func,
)

from app.models.base import metadata

doctors = Table(
    "doctors",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column(
        "user_id",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    ),
    # Professional details
    Column("specialization", String(200), index=True),
    Column("qualification", Text),
    Column("experience", Integer),
    # Practice information
    Column("fees", Numeric(10, 2), nullable=False, server_default="0"),
    Column("profile_pic", Text),
    # Metadata
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column(
        "updated_at",
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    ),
)
