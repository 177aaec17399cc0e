"""API v1 router configuration."""

from fastapi import APIRouter

from app.api.v1.endpoints import admin, appointments, auth, doctors, health, patients

api_router = APIRouter()

api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(appointments.router, tags=["Appointments"])
api_router.include_router(doctors.router, tags=["Doctors"])
api_router.include_router(patients.router, tags=["Patients"])
api_router.include_router(admin.router, tags=["Admin"])
