"""Tests for patient booking."""

from datetime import date, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ConflictException, ForbiddenException
from app.models.appointments import appointments
from app.schemas.appointments import ACTIVE_HOLD_STATUSES, AppointmentBook
from app.services.appointment_service import (
    SLOT_TAKEN_MESSAGE,
    AppointmentService,
    is_slot_violation,
)


def tomorrow() -> str:
    return (date.today() + timedelta(days=1)).isoformat()


def booking_payload(doctor_profile: dict, **overrides) -> dict:
    payload = {
        "doctor_id": str(doctor_profile["id"]),
        "date": tomorrow(),
        "time": "10:00 AM",
        "symptoms": "Chest pain",
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient) -> None:
    """Test health check endpoint."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


@pytest.mark.asyncio
async def test_book_appointment(
    client: AsyncClient,
    patient_headers: dict,
    doctor_profile: dict,
) -> None:
    """A patient booking starts out Pending."""
    response = await client.post(
        "/api/v1/book-appointment",
        json=booking_payload(doctor_profile),
        headers=patient_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Appointment booked successfully"
    appointment = data["appointment"]
    assert appointment["status"] == "Pending"
    assert appointment["doctor_id"] == str(doctor_profile["id"])
    assert appointment["date"] == tomorrow()
    assert appointment["time"] == "10:00 AM"
    assert "id" in appointment


@pytest.mark.asyncio
async def test_double_booking_rejected(
    client: AsyncClient,
    patient_headers: dict,
    other_patient_headers: dict,
    doctor_profile: dict,
) -> None:
    """Only one Pending or Confirmed appointment may hold a slot."""
    first = await client.post(
        "/api/v1/book-appointment",
        json=booking_payload(doctor_profile),
        headers=patient_headers,
    )
    assert first.status_code == 201

    second = await client.post(
        "/api/v1/book-appointment",
        json=booking_payload(doctor_profile),
        headers=other_patient_headers,
    )
    assert second.status_code == 400
    assert second.json()["message"] == "This time slot is already booked"

    # A different time on the same day is still free
    third = await client.post(
        "/api/v1/book-appointment",
        json=booking_payload(doctor_profile, time="11:00 AM"),
        headers=other_patient_headers,
    )
    assert third.status_code == 201


@pytest.mark.asyncio
async def test_cancelled_slot_can_be_rebooked(
    client: AsyncClient,
    patient_headers: dict,
    patient_user: dict,
    doctor_profile: dict,
    appointment_factory,
) -> None:
    """Cancelled and Rejected appointments release their slot."""
    slot = date.today() + timedelta(days=1)
    await appointment_factory(
        patient_id=patient_user["id"],
        doctor_id=doctor_profile["id"],
        date=slot,
        time="10:00 AM",
        status="Cancelled",
    )
    await appointment_factory(
        patient_id=patient_user["id"],
        doctor_id=doctor_profile["id"],
        date=slot,
        time="10:00 AM",
        status="Rejected",
    )

    response = await client.post(
        "/api/v1/book-appointment",
        json=booking_payload(doctor_profile),
        headers=patient_headers,
    )
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_doctor_cannot_book(
    client: AsyncClient,
    doctor_headers: dict,
    doctor_profile: dict,
) -> None:
    """Booking is reserved for patients."""
    response = await client.post(
        "/api/v1/book-appointment",
        json=booking_payload(doctor_profile),
        headers=doctor_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_self_booking_rejected_by_service(
    db_session,
    doctor_user: dict,
    doctor_profile: dict,
) -> None:
    """The owner of a doctor profile can never book it."""
    service = AppointmentService(db_session)
    data = AppointmentBook(
        doctor_id=doctor_profile["id"],
        date=date.today() + timedelta(days=1),
        time="10:00 AM",
    )

    with pytest.raises(ForbiddenException):
        await service.book_appointment(doctor_user["id"], data)

    assert await service.list_doctor_appointments(doctor_user["id"]) == []


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["doctor_id", "date", "time"])
async def test_missing_field_rejected(
    client: AsyncClient,
    patient_headers: dict,
    doctor_profile: dict,
    missing: str,
) -> None:
    """Incomplete booking payloads are validation errors."""
    payload = booking_payload(doctor_profile)
    del payload[missing]

    response = await client.post("/api/v1/book-appointment", json=payload, headers=patient_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_unknown_doctor(
    client: AsyncClient,
    patient_headers: dict,
    doctor_profile: dict,
) -> None:
    """Booking an unknown doctor returns 404."""
    payload = booking_payload(doctor_profile, doctor_id="00000000-0000-0000-0000-000000000000")

    response = await client.post("/api/v1/book-appointment", json=payload, headers=patient_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Doctor not found"


@pytest.mark.asyncio
async def test_booking_requires_authentication(
    client: AsyncClient,
    doctor_profile: dict,
) -> None:
    """Anonymous callers cannot book."""
    response = await client.post("/api/v1/book-appointment", json=booking_payload(doctor_profile))
    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_patient_appointment_list(
    client: AsyncClient,
    patient_headers: dict,
    other_patient_headers: dict,
    doctor_profile: dict,
) -> None:
    """Patients only see their own bookings."""
    await client.post(
        "/api/v1/book-appointment",
        json=booking_payload(doctor_profile),
        headers=patient_headers,
    )
    await client.post(
        "/api/v1/book-appointment",
        json=booking_payload(doctor_profile, time="02:00 PM"),
        headers=other_patient_headers,
    )

    response = await client.get("/api/v1/patient/appointments", headers=patient_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    item = data["appointments"][0]
    assert item["time"] == "10:00 AM"
    assert item["doctor_name"] == "Dr. Dana"
    assert item["specialization"] == "Cardiology"
    assert item["fees"] == 500.0


@pytest.mark.asyncio
async def test_doctor_appointment_list(
    client: AsyncClient,
    patient_headers: dict,
    doctor_headers: dict,
    doctor_profile: dict,
) -> None:
    """Doctors see the bookings made with them."""
    await client.post(
        "/api/v1/book-appointment",
        json=booking_payload(doctor_profile),
        headers=patient_headers,
    )

    response = await client.get("/api/v1/doctor/appointments", headers=doctor_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["appointments"][0]["patient"] == "Pat Patient"
    assert data["appointments"][0]["patient_email"] == "patient@careline.io"
    assert data["appointments"][0]["symptoms"] == "Chest pain"


@pytest.mark.asyncio
async def test_doctor_appointments_without_profile(
    client: AsyncClient,
    doctor_headers: dict,
) -> None:
    """A doctor account without a profile has no schedule."""
    response = await client.get("/api/v1/doctor/appointments", headers=doctor_headers)
    assert response.status_code == 404


async def active_holds(db_session, doctor_id) -> int:
    result = await db_session.execute(
        select(func.count())
        .select_from(appointments)
        .where(
            appointments.c.doctor_id == doctor_id,
            appointments.c.status.in_(ACTIVE_HOLD_STATUSES),
        )
    )
    return result.scalar_one()


@pytest.mark.asyncio
async def test_slot_index_stops_booking_that_passed_precheck(
    db_session,
    patient_user: dict,
    other_patient: dict,
    doctor_profile: dict,
    monkeypatch,
) -> None:
    """Two bookings racing past the slot check still yield one active hold."""

    async def slot_looks_free(self, doctor_id, slot_date, slot_time) -> None:
        return None

    monkeypatch.setattr(AppointmentService, "_ensure_slot_free", slot_looks_free)

    service = AppointmentService(db_session)
    data = AppointmentBook(
        doctor_id=doctor_profile["id"],
        date=date.today() + timedelta(days=1),
        time="10:00 AM",
    )
    await service.book_appointment(patient_user["id"], data)

    with pytest.raises(ConflictException) as exc_info:
        await service.book_appointment(other_patient["id"], data)

    assert exc_info.value.message == SLOT_TAKEN_MESSAGE
    assert exc_info.value.status_code == 400
    assert await active_holds(db_session, doctor_profile["id"]) == 1


def test_only_slot_index_violations_are_conflicts() -> None:
    """Other integrity failures are not reported as a taken slot."""
    postgres_slot = IntegrityError(
        "INSERT INTO appointments",
        {},
        Exception('duplicate key value violates unique constraint "uq_appointments_active_slot"'),
    )
    sqlite_slot = IntegrityError(
        "INSERT INTO appointments",
        {},
        Exception(
            "UNIQUE constraint failed: "
            "appointments.doctor_id, appointments.date, appointments.time"
        ),
    )
    missing_doctor = IntegrityError(
        "INSERT INTO appointments",
        {},
        Exception(
            'insert or update on table "appointments" violates foreign key constraint '
            '"appointments_doctor_id_fkey"'
        ),
    )

    assert is_slot_violation(postgres_slot)
    assert is_slot_violation(sqlite_slot)
    assert not is_slot_violation(missing_doctor)


@pytest.mark.asyncio
async def test_blank_time_rejected(
    client: AsyncClient,
    patient_headers: dict,
    doctor_profile: dict,
) -> None:
    """A whitespace-only slot label is a validation error."""
    response = await client.post(
        "/api/v1/book-appointment",
        json=booking_payload(doctor_profile, time="   "),
        headers=patient_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_padded_time_hits_same_slot(
    client: AsyncClient,
    db_session,
    patient_headers: dict,
    other_patient_headers: dict,
    doctor_profile: dict,
) -> None:
    """Surrounding whitespace does not make a different slot."""
    first = await client.post(
        "/api/v1/book-appointment",
        json=booking_payload(doctor_profile, time=" 10:00 AM"),
        headers=patient_headers,
    )
    assert first.status_code == 201
    assert first.json()["appointment"]["time"] == "10:00 AM"

    second = await client.post(
        "/api/v1/book-appointment",
        json=booking_payload(doctor_profile, time="10:00 AM "),
        headers=other_patient_headers,
    )
    assert second.status_code == 400
    assert second.json()["message"] == SLOT_TAKEN_MESSAGE
    assert await active_holds(db_session, doctor_profile["id"]) == 1
