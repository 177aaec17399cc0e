"""Tests for admin account management."""

import pytest
from httpx import AsyncClient

from app.schemas.admins import DEFAULT_ADMIN_PERMISSIONS

UNKNOWN_ID = "00000000-0000-0000-0000-000000000000"


@pytest.mark.asyncio
async def test_promote_user_with_default_permissions(
    client: AsyncClient,
    admin_headers: dict,
    patient_user: dict,
    patient_headers: dict,
) -> None:
    """Promotion flips the role and stores the default permission set."""
    response = await client.post(
        "/api/v1/admin/create",
        json={"user_id": str(patient_user["id"])},
        headers=admin_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Admin created successfully"
    assert data["admin"]["user_id"] == str(patient_user["id"])
    assert data["admin"]["permissions"] == [p.value for p in DEFAULT_ADMIN_PERMISSIONS]

    # The promoted account's existing token now passes the admin guard
    dashboard = await client.get("/api/v1/admin/dashboard", headers=patient_headers)
    assert dashboard.status_code == 200
    admin = dashboard.json()["admin"]
    assert admin["role"] == "Admin"
    assert admin["permissions"] == [p.value for p in DEFAULT_ADMIN_PERMISSIONS]


@pytest.mark.asyncio
async def test_promote_with_explicit_permissions(
    client: AsyncClient,
    admin_headers: dict,
    patient_user: dict,
) -> None:
    """Explicit permissions replace the defaults."""
    response = await client.post(
        "/api/v1/admin/create",
        json={"user_id": str(patient_user["id"]), "permissions": ["view_users"]},
        headers=admin_headers,
    )
    assert response.status_code == 201
    assert response.json()["admin"]["permissions"] == ["view_users"]


@pytest.mark.asyncio
async def test_promote_errors(
    client: AsyncClient,
    admin_headers: dict,
    patient_user: dict,
) -> None:
    """Unknown users are 404, existing admins are 400."""
    unknown = await client.post(
        "/api/v1/admin/create", json={"user_id": UNKNOWN_ID}, headers=admin_headers
    )
    assert unknown.status_code == 404
    assert unknown.json()["message"] == "User not found"

    first = await client.post(
        "/api/v1/admin/create",
        json={"user_id": str(patient_user["id"])},
        headers=admin_headers,
    )
    assert first.status_code == 201

    again = await client.post(
        "/api/v1/admin/create",
        json={"user_id": str(patient_user["id"])},
        headers=admin_headers,
    )
    assert again.status_code == 400
    assert again.json()["message"] == "User is already an admin"

    bogus = await client.post(
        "/api/v1/admin/create",
        json={"user_id": str(patient_user["id"]), "permissions": ["launch_rockets"]},
        headers=admin_headers,
    )
    assert bogus.status_code == 400
    assert bogus.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_list_admins(
    client: AsyncClient,
    admin_headers: dict,
    admin_user: dict,
    admin_record_factory,
) -> None:
    """Admin records are listed with their account details."""
    await admin_record_factory(admin_user["id"], ["view_appointments", "manage_admins"])

    response = await client.get("/api/v1/admin/list", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    admin = data["admins"][0]
    assert admin["name"] == "Ada Admin"
    assert admin["email"] == "admin@careline.io"
    assert admin["role"] == "Admin"
    assert admin["permissions"] == ["view_appointments", "manage_admins"]


@pytest.mark.asyncio
async def test_update_admin_permissions(
    client: AsyncClient,
    admin_headers: dict,
    admin_user: dict,
    admin_record_factory,
) -> None:
    """Permissions are replaced wholesale."""
    record = await admin_record_factory(admin_user["id"])

    response = await client.put(
        f"/api/v1/admin/permissions/{record['id']}",
        json={"permissions": ["manage_users", "view_doctors"]},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Admin permissions updated successfully"
    assert data["admin"]["email"] == "admin@careline.io"
    assert data["admin"]["permissions"] == ["manage_users", "view_doctors"]

    missing = await client.put(
        f"/api/v1/admin/permissions/{UNKNOWN_ID}",
        json={"permissions": []},
        headers=admin_headers,
    )
    assert missing.status_code == 404
    assert missing.json()["message"] == "Admin not found"


@pytest.mark.asyncio
async def test_remove_admin_demotes_to_patient(
    client: AsyncClient,
    admin_headers: dict,
    user_factory,
    admin_record_factory,
) -> None:
    """Removing an admin record turns the account back into a patient."""
    colleague = await user_factory(role="Admin", name="Cole League")
    record = await admin_record_factory(colleague["id"])

    response = await client.delete(f"/api/v1/admin/{record['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "Admin removed successfully"

    listing = await client.get("/api/v1/admin/list", headers=admin_headers)
    assert listing.json()["total"] == 0

    patients = await client.get("/api/v1/admin/users", headers=admin_headers)
    emails = [u["email"] for u in patients.json()["users"]]
    assert colleague["email"] in emails

    missing = await client.delete(f"/api/v1/admin/{record['id']}", headers=admin_headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_admin_cannot_remove_self(
    client: AsyncClient,
    admin_headers: dict,
    admin_user: dict,
    admin_record_factory,
) -> None:
    """An admin cannot demote their own account."""
    record = await admin_record_factory(admin_user["id"])

    response = await client.delete(f"/api/v1/admin/{record['id']}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Admins cannot remove themselves"


@pytest.mark.asyncio
async def test_dashboard_permissions_default_to_empty(
    client: AsyncClient,
    admin_headers: dict,
) -> None:
    """An admin account without an admin record reports no permissions."""
    response = await client.get("/api/v1/admin/dashboard", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["admin"]["permissions"] == []


@pytest.mark.asyncio
async def test_admin_management_rejects_other_roles(
    client: AsyncClient,
    patient_headers: dict,
    doctor_headers: dict,
    patient_user: dict,
) -> None:
    """Only admins may grant or list admin rights."""
    for headers in (patient_headers, doctor_headers):
        create = await client.post(
            "/api/v1/admin/create",
            json={"user_id": str(patient_user["id"])},
            headers=headers,
        )
        assert create.status_code == 403

        listing = await client.get("/api/v1/admin/list", headers=headers)
        assert listing.status_code == 403
