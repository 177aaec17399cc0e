"""Database models."""

from app.models.admins import admins
from app.models.appointments import appointments
from app.models.base import metadata
from app.models.doctors import doctors
from app.models.users import users

__all__ = [
    "admins",
    "appointments",
    "doctors",
    "metadata",
    "users",
]
