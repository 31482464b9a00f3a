"""Authorization: capability map and route-level enforcement."""

from uuid import uuid4

import pytest
import structlog
from httpx import AsyncClient

from schoolhub.auth.dependencies import get_current_user
from schoolhub.auth.permissions import ROLE_PERMISSIONS, permissions_for
from schoolhub.auth.security import create_access_token
from schoolhub.core.enums import Permission, Role


def test_every_role_has_a_capability_set() -> None:
    assert set(ROLE_PERMISSIONS) == set(Role)


def test_admins_hold_every_permission() -> None:
    assert permissions_for(Role.ADMIN) == frozenset(Permission)
    assert permissions_for(Role.SUPER_ADMIN) == frozenset(Permission)


def test_cashier_cannot_manage_fee_structures() -> None:
    cashier = permissions_for(Role.CASHIER)
    assert Permission.RECORD_PAYMENTS in cashier
    assert Permission.MANAGE_FEE_STRUCTURES not in cashier


async def test_missing_token_is_401(client: AsyncClient) -> None:
    response = await client.get("/api/finance/structure")
    assert response.status_code == 401
    assert response.json()["success"] is False


async def test_garbage_token_is_401(client: AsyncClient) -> None:
    response = await client.get("/api/finance/structure", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Could not validate credentials"}


async def test_token_for_unknown_user_is_401(client: AsyncClient) -> None:
    token = create_access_token(subject={"sub": str(uuid4()), "role": "ADMIN"})
    response = await client.get("/api/finance/structure", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


async def test_inactive_user_is_401(client: AsyncClient, make_user, headers_of) -> None:
    user = await make_user(Role.ADMIN, status="INACTIVE")
    response = await client.get("/api/finance/structure", headers=headers_of(user))
    assert response.status_code == 401


@pytest.mark.parametrize("role", [Role.CASHIER, Role.TEACHER, Role.PARENT, Role.STUDENT])
async def test_only_admins_create_fee_structures(client: AsyncClient, headers_for, role: Role) -> None:
    response = await client.post(
        "/api/finance/structure", json={"name": "Tuition", "amount": 10}, headers=await headers_for(role)
    )
    assert response.status_code == 403
    assert response.json() == {"success": False, "message": "Insufficient permissions"}


@pytest.mark.parametrize("role", [Role.TEACHER, Role.PARENT, Role.STUDENT])
async def test_payments_restricted_to_finance_roles(client: AsyncClient, headers_for, role: Role) -> None:
    response = await client.post(
        "/api/finance/pay",
        json={"studentFeeId": str(uuid4()), "amount": 10, "method": "CASH"},
        headers=await headers_for(role),
    )
    assert response.status_code == 403


async def test_student_reads_own_ledger_only(
    client: AsyncClient, make_user, make_student, headers_of
) -> None:
    login = await make_user(Role.STUDENT)
    own = await make_student("Own", "Student", user_id=login.id)
    other = await make_student("Other", "Student")
    headers = headers_of(login)

    response = await client.get(f"/api/finance/ledger/{own.id}", headers=headers)
    assert response.status_code == 200
    assert response.json()["data"]["studentId"] == str(own.id)

    response = await client.get(f"/api/finance/ledger/{other.id}", headers=headers)
    assert response.status_code == 403


async def test_parent_reads_child_ledger_and_payments(
    client: AsyncClient, make_user, make_student, headers_of
) -> None:
    parent = await make_user(Role.PARENT)
    child = await make_student("Child", "Doe", parent_user_id=parent.id)
    stranger = await make_student("Someone", "Else")
    headers = headers_of(parent)

    assert (await client.get(f"/api/finance/ledger/{child.id}", headers=headers)).status_code == 200
    assert (await client.get(f"/api/finance/payments/{child.id}", headers=headers)).status_code == 200
    assert (await client.get(f"/api/finance/ledger/{stranger.id}", headers=headers)).status_code == 403
    assert (await client.get(f"/api/finance/payments/{stranger.id}", headers=headers)).status_code == 403


async def test_teacher_cannot_read_ledgers(client: AsyncClient, headers_for, make_student) -> None:
    student = await make_student()
    response = await client.get(f"/api/finance/ledger/{student.id}", headers=await headers_for(Role.TEACHER))
    assert response.status_code == 403


async def test_authenticated_user_is_bound_to_log_context(db_session, make_user) -> None:
    user = await make_user(Role.CASHIER)
    token = create_access_token(subject={"sub": str(user.id), "role": user.role})
    structlog.contextvars.clear_contextvars()
    try:
        current = await get_current_user(token=token, db=db_session)
        assert structlog.contextvars.get_contextvars()["user_id"] == str(current.id)
    finally:
        structlog.contextvars.clear_contextvars()
