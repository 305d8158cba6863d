"""Tests for user registration, lookup and team endpoints."""

import uuid
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import user_payload
from teambuilder.core.errors import ConflictError
from teambuilder.models.partnership import Partnership
from teambuilder.models.user import User
from teambuilder.schemas.user import UserCreateRequest
from teambuilder.services.user_registration import register_user


async def _register(client: AsyncClient, company_id=None, **overrides) -> dict:
    response = await client.post("/api/users", json=user_payload(company_id, **overrides))
    assert response.status_code == 200, response.text
    return response.json()["user"]


@pytest.mark.asyncio
async def test_register_user_without_company(client: AsyncClient):
    response = await client.post("/api/users", json=user_payload(first_name="Alice"))
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["user"]["first_name"] == "Alice"
    assert data["user"]["company_id"] is None
    assert data["user"]["join_position"] is None


@pytest.mark.asyncio
async def test_register_user_assigns_teams(client: AsyncClient, make_company):
    company = await make_company(group_size=4)
    first = await _register(client, company.id, first_name="A")
    second = await _register(client, company.id, first_name="B")
    assert (first["join_position"], second["join_position"]) == (1, 2)

    response = await client.get(f"/api/partnerships/user/{second['id']}")
    assert response.status_code == 200
    numbers = sorted(p["team_number"] for p in response.json())
    assert numbers == [1, 2]


@pytest.mark.asyncio
async def test_register_unknown_company(client: AsyncClient, db: AsyncSession):
    response = await client.post("/api/users", json=user_payload(uuid.uuid4()))
    assert response.status_code == 404

    assert (await db.execute(select(func.count()).select_from(User))).scalar() == 0
    assert (await db.execute(select(func.count()).select_from(Partnership))).scalar() == 0


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, make_company):
    company = await make_company()
    await _register(client, company.id, email="dup@example.com")

    response = await client.post(
        "/api/users", json=user_payload(company.id, email="DUP@example.com")
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_register_invalid_email(client: AsyncClient):
    response = await client.post("/api/users", json=user_payload(email="not-an-email"))
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_and_get_users(client: AsyncClient):
    user = await _register(client, first_name="Listed")

    response = await client.get("/api/users")
    assert response.status_code == 200
    assert [u["id"] for u in response.json()] == [user["id"]]

    response = await client.get(f"/api/users/{user['id']}")
    assert response.status_code == 200
    assert response.json()["first_name"] == "Listed"

    response = await client.get(f"/api/users/{uuid.uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_get_user_by_email_is_case_insensitive(client: AsyncClient):
    user = await _register(client, email="Mixed.Case@example.com")

    response = await client.get("/api/users/email/mixed.case@EXAMPLE.com")
    assert response.status_code == 200
    assert response.json()["id"] == user["id"]

    response = await client.get("/api/users/email/missing@example.com")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_user_status_by_email(client: AsyncClient, make_company):
    company = await make_company(group_size=3)
    await _register(client, company.id, first_name="A")
    user = await _register(client, company.id, first_name="B", email="b@example.com")

    response = await client.post("/api/user-status", json={"email": "b@example.com"})
    assert response.status_code == 200
    data = response.json()
    assert data["exists"] is True
    assert data["user"]["id"] == user["id"]
    assert data["partnerships"] == 2
    assert {p["team_number"] for p in data["partnership_details"]} == {1, 2}


@pytest.mark.asyncio
async def test_user_status_by_name(client: AsyncClient):
    user = await _register(client, first_name="Grace", last_name="Hopper")

    response = await client.post(
        "/api/user-status", json={"first_name": "grace", "last_name": "HOPPER"}
    )
    data = response.json()
    assert data["exists"] is True
    assert data["user"]["id"] == user["id"]
    assert data["partnerships"] == 0


@pytest.mark.asyncio
async def test_user_status_unknown(client: AsyncClient):
    response = await client.post("/api/user-status", json={"email": "ghost@example.com"})
    assert response.status_code == 200
    assert response.json() == {
        "exists": False,
        "user": None,
        "partnerships": 0,
        "partnership_details": [],
    }


@pytest.mark.asyncio
async def test_company_teams(client: AsyncClient, make_company):
    company = await make_company(name="MakeCents Group", group_size=4)
    names = ["A", "B", "C", "D", "E"]
    users = {n: await _register(client, company.id, first_name=n, last_name="X") for n in names}

    response = await client.get(f"/api/teams/company/{company.id}")
    assert response.status_code == 200
    teams = response.json()
    assert [t["team_number"] for t in teams] == [1, 2, 3, 4, 5]

    team1 = teams[0]
    assert team1["group_id"] == "MAKECENTSGRO-T1"
    assert team1["status"] == "complete"
    assert team1["leader_id"] == users["A"]["id"]
    assert team1["member_count"] == 4
    assert [m["name"] for m in team1["members"]] == ["A X", "B X", "C X", "D X"]
    assert [m["is_leader"] for m in team1["members"]] == [True, False, False, False]

    team2 = teams[1]
    assert team2["status"] == "filling"
    assert [m["name"] for m in team2["members"]] == ["B X", "E X"]

    assert {t["status"] for t in teams[2:]} == {"inactive"}


@pytest.mark.asyncio
async def test_company_teams_unknown_company(client: AsyncClient):
    response = await client.get(f"/api/teams/company/{uuid.uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_partnerships_includes_members(client: AsyncClient, make_company):
    company = await make_company(group_size=2)
    await _register(client, company.id, first_name="A")
    await _register(client, company.id, first_name="B")

    response = await client.get("/api/partnerships")
    assert response.status_code == 200
    teams = {t["team_number"]: t for t in response.json()}
    assert len(teams[1]["members"]) == 2
    assert {m["user"]["first_name"] for m in teams[1]["members"]} == {"A", "B"}
    assert len(teams[2]["members"]) == 1


@pytest.mark.asyncio
async def test_email_unique_regardless_of_case(db: AsyncSession, make_company):
    company = await make_company()
    await register_user(db, UserCreateRequest(**user_payload(company.id, email="ann@example.com")))

    # A concurrent request that passed the lookup before the first insert landed
    with patch(
        "teambuilder.services.user_registration.get_user_by_email",
        new=AsyncMock(return_value=None),
    ):
        with pytest.raises(ConflictError):
            await register_user(
                db, UserCreateRequest(**user_payload(company.id, email="ANN@example.com"))
            )

    emails = (await db.execute(select(User.email))).scalars().all()
    assert emails == ["ann@example.com"]
    await db.refresh(company)
    assert company.member_seq == 1
