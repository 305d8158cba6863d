"""Tests for admin endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from teambuilder.models.admin import AdminUser


@pytest.mark.asyncio
async def test_setup_and_current_administrator(client: AsyncClient):
    response = await client.get("/api/admin/current")
    assert response.status_code == 404

    response = await client.post(
        "/api/admin/setup",
        json={"name": "Ada", "email": "ada@example.com", "group_size": 4},
    )
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert response.json()["admin"]["is_active"] is True

    response = await client.get("/api/admin/current")
    assert response.status_code == 200
    assert response.json()["email"] == "ada@example.com"


@pytest.mark.asyncio
async def test_setup_replaces_active_administrator(client: AsyncClient):
    await client.post(
        "/api/admin/setup", json={"name": "Ada", "email": "ada@example.com", "group_size": 4}
    )
    await client.post(
        "/api/admin/setup", json={"name": "Bob", "email": "bob@example.com", "group_size": 5}
    )

    current = (await client.get("/api/admin/current")).json()
    assert current["email"] == "bob@example.com"
    assert current["group_size"] == 5

    # Setting up an earlier admin again reactivates the existing row
    response = await client.post(
        "/api/admin/setup", json={"name": "Ada L.", "email": "ada@example.com", "group_size": 6}
    )
    assert response.status_code == 200
    current = (await client.get("/api/admin/current")).json()
    assert current["name"] == "Ada L."
    assert current["group_size"] == 6


@pytest.mark.asyncio
async def test_setup_rejects_group_size(client: AsyncClient):
    response = await client.post(
        "/api/admin/setup", json={"name": "Ada", "email": "ada@example.com", "group_size": 1}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_verify_admin(client: AsyncClient, db: AsyncSession):
    await client.post(
        "/api/admin/setup", json={"name": "Ada", "email": "ada@example.com", "group_size": 4}
    )
    db.add(AdminUser(name="Helper", email="helper@example.com"))
    await db.flush()

    response = await client.post("/api/admin/verify", json={"email": " ADA@example.com "})
    data = response.json()
    assert data["is_admin"] is True
    assert data["admin_info"] == {"name": "Ada", "email": "ada@example.com"}

    response = await client.post("/api/admin/verify", json={"email": "helper@example.com"})
    assert response.json()["admin_info"]["name"] == "Helper"

    response = await client.post("/api/admin/verify", json={"email": "nobody@example.com"})
    assert response.json() == {"success": True, "is_admin": False, "admin_info": None}


@pytest.mark.asyncio
async def test_verify_requires_email(client: AsyncClient):
    response = await client.post("/api/admin/verify", json={})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_database_diagnostics_masks_password(client: AsyncClient):
    response = await client.get("/api/admin/database")
    assert response.status_code == 200
    data = response.json()
    assert set(data) == {"source", "host", "masked_url"}
    assert "secret" not in data["masked_url"]


@pytest.mark.asyncio
async def test_record_data_migration(client: AsyncClient):
    payload = {
        "name": "backfill_join_positions",
        "checksum": "abc123",
        "environment": "development",
        "executed_by": "ops@example.com",
    }
    response = await client.post("/api/admin/data-migrations", json=payload)
    assert response.status_code == 201
    assert response.json()["status"] == "completed"

    response = await client.post("/api/admin/data-migrations", json=payload)
    assert response.status_code == 409

    # Same migration in another environment is a separate record
    response = await client.post(
        "/api/admin/data-migrations", json={**payload, "environment": "production"}
    )
    assert response.status_code == 201

    response = await client.get("/api/admin/data-migrations")
    assert len(response.json()) == 2


@pytest.mark.asyncio
async def test_record_data_migration_rejects_environment(client: AsyncClient):
    response = await client.post(
        "/api/admin/data-migrations",
        json={"name": "x", "checksum": "y", "environment": "staging"},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_ping_and_health(client: AsyncClient):
    response = await client.get("/api/ping")
    assert response.status_code == 200
    assert response.json()["ok"] is True

    response = await client.get("/health")
    assert response.json()["status"] == "healthy"
