"""Login, registration, token verification and the auth dependency"""
from datetime import timedelta

import pytest
from jose import jwt

from conftest import PASSWORD, make_employee
from intranet.config import settings
from intranet.errors import ForbiddenError, InternalServerError, UnauthorizedError
from intranet.models.employee import Employee
from intranet.security import create_access_token, decode_access_token, get_password_hash, verify_password
from intranet.services.auth import auth_service


def test_password_hash_roundtrip():
    hashed = get_password_hash("s3cret!")
    assert hashed != "s3cret!"
    assert verify_password("s3cret!", hashed)
    assert not verify_password("wrong", hashed)


def test_expired_and_invalid_tokens_have_distinct_messages():
    expired = create_access_token({"id": "abc"}, expires_delta=timedelta(seconds=-10))

    with pytest.raises(UnauthorizedError) as exc:
        decode_access_token(expired)
    assert exc.value.message == "Token expired"

    with pytest.raises(UnauthorizedError) as exc:
        decode_access_token("not-a-token")
    assert exc.value.message == "Invalid token"

    forged = jwt.encode({"id": "abc"}, "another-secret", algorithm="HS256")
    with pytest.raises(UnauthorizedError) as exc:
        decode_access_token(forged)
    assert exc.value.message == "Invalid token"


def test_missing_secret_is_a_server_error(monkeypatch):
    monkeypatch.setattr(settings, "JWT_SECRET", "")
    with pytest.raises(InternalServerError) as exc:
        create_access_token({"id": "abc"})
    assert exc.value.message == "JWT_SECRET not configured"


async def test_login_success_issues_token_for_same_employee(employee):
    result = await auth_service.login(employee.email, PASSWORD)

    claims = decode_access_token(result.token)
    assert claims["id"] == str(employee.id)
    assert claims["email"] == employee.email
    assert claims["employee_number"] == employee.employee_number
    assert "password_hash" not in result.user.model_dump()

    refreshed = await Employee.get(employee.id)
    assert refreshed.last_login is not None


async def test_login_rejects_bad_credentials(employee):
    with pytest.raises(UnauthorizedError) as exc:
        await auth_service.login(employee.email, "wrong-password")
    assert exc.value.message == "Invalid email or password"

    with pytest.raises(UnauthorizedError):
        await auth_service.login("nobody@company.com", PASSWORD)


async def test_login_without_password_set():
    employee = await make_employee(password=None)
    with pytest.raises(UnauthorizedError) as exc:
        await auth_service.login(employee.email, PASSWORD)
    assert exc.value.message == "Password not set for this account"


async def test_login_inactive_account_is_forbidden():
    employee = await make_employee(is_active=False)
    with pytest.raises(ForbiddenError) as exc:
        await auth_service.login(employee.email, PASSWORD)
    assert exc.value.message == "Account is inactive"


async def test_login_endpoint(client, employee):
    resp = await client.post("/api/auth/login", json={"email": employee.email, "password": PASSWORD})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "success"
    assert body["code"] == 200
    assert body["data"]["user"]["id"] == str(employee.id)
    assert body["data"]["user"]["department"]["name"] == "Engineering"
    assert "password_hash" not in body["data"]["user"]

    resp = await client.post("/api/auth/login", json={"email": employee.email, "password": "nope"})
    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Invalid email or password"}


async def test_login_validation_error_shape(client):
    resp = await client.post("/api/auth/login", json={"email": "not-an-email"})
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "Validation error"
    fields = {e["field"] for e in body["errors"]}
    assert "body.email" in fields
    assert "body.password" in fields


async def test_register_then_login(client, department):
    payload = {
        "employee_number": "EMP100",
        "full_name": "New Hire",
        "email": "new.hire@company.com",
        "password": "welcome1",
        "department_id": str(department.id),
    }
    resp = await client.post("/api/auth/register", json=payload)
    assert resp.status_code == 201
    assert resp.json()["data"]["user"]["department"]["id"] == str(department.id)

    resp = await client.post("/api/auth/register", json=payload)
    assert resp.status_code == 409

    resp = await client.post("/api/auth/login", json={"email": payload["email"], "password": "welcome1"})
    assert resp.status_code == 200


async def test_verify_endpoint(client, token):
    resp = await client.post("/api/auth/verify", json={"token": token})
    assert resp.status_code == 200
    assert resp.json()["data"]["email"] == "john.doe@company.com"

    resp = await client.post("/api/auth/verify", json={"token": "garbage"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid token"


async def test_me_requires_token(client, employee, auth_headers):
    resp = await client.get("/api/auth/me")
    assert resp.status_code == 401
    assert resp.json()["message"] == "No token provided"

    resp = await client.get("/api/auth/me", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["employee_number"] == employee.employee_number


async def test_me_for_deleted_employee(client, employee, auth_headers):
    await employee.delete()
    resp = await client.get("/api/auth/me", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json()["message"] == "User not found"
