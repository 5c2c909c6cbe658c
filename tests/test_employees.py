"""Employee directory"""
import pytest

from conftest import make_announcement, make_employee
from intranet.errors import BadRequestError, ConflictError, NotFoundError
from intranet.models.employee import Employee, EmployeeCreate, EmployeeUpdate
from intranet.security import verify_password
from intranet.services.employee import employee_service


async def test_create_hashes_password_and_checks_uniqueness(department):
    created = await employee_service.create(EmployeeCreate(
        employee_number="EMP010",
        full_name="Ana Lee",
        email="ana.lee@company.com",
        password="secret1",
        department_id=department.id,
    ))

    stored = await Employee.get(created.id)
    assert stored.password_hash != "secret1"
    assert verify_password("secret1", stored.password_hash)
    assert created.department.name == "Engineering"

    with pytest.raises(ConflictError) as exc:
        await employee_service.create(EmployeeCreate(employee_number="EMP010", full_name="Someone"))
    assert exc.value.message == "Employee number already exists"

    with pytest.raises(ConflictError) as exc:
        await employee_service.create(EmployeeCreate(
            employee_number="EMP011", full_name="Someone", email="ana.lee@company.com",
        ))
    assert exc.value.message == "Email already exists"


async def test_create_with_unknown_department():
    with pytest.raises(NotFoundError) as exc:
        await employee_service.create(EmployeeCreate(
            employee_number="EMP012",
            full_name="Lost Soul",
            department_id="65a000000000000000000000",
        ))
    assert exc.value.message == "Department not found"


async def test_update_checks_other_rows(employee, other_employee):
    with pytest.raises(ConflictError):
        await employee_service.update(str(employee.id), EmployeeUpdate(email=other_employee.email))

    # re-submitting the current values is not a conflict
    same = await employee_service.update(
        str(employee.id),
        EmployeeUpdate(email=employee.email, employee_number=employee.employee_number, position="Lead"),
    )
    assert same.position == "Lead"


async def test_update_can_move_out_of_department(employee):
    updated = await employee_service.update(str(employee.id), EmployeeUpdate(department_id=None))
    assert updated.department_id is None
    assert updated.department is None


async def test_update_ignores_null_for_required_fields(client, employee):
    resp = await client.put(
        f"/api/employees/{employee.id}",
        json={"full_name": None, "employee_number": None, "is_active": None, "position": None},
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["full_name"] == employee.full_name
    assert data["employee_number"] == employee.employee_number
    assert data["is_active"] is True
    assert data["position"] is None


async def test_update_can_clear_email(employee):
    updated = await employee_service.update(str(employee.id), EmployeeUpdate(email=None))
    assert updated.email is None


async def test_list_search_and_filters(department):
    await make_employee("EMP001", "Zoe Adams", "zoe@company.com", department)
    await make_employee("EMP002", "Adam Brown", "adam@company.com", department, is_active=False)
    await make_employee("EMP003", "Carl Doe", "carl@company.com")

    result = await employee_service.get_all(search="adam")
    assert [e.full_name for e in result["data"]] == ["Adam Brown", "Zoe Adams"]

    active = await employee_service.get_all(is_active=True)
    assert active["meta"]["total"] == 2

    in_dept = await employee_service.get_all(department_id=str(department.id))
    assert in_dept["meta"]["total"] == 2

    page = await employee_service.get_all(page=2, limit=2)
    assert [e.full_name for e in page["data"]] == ["Zoe Adams"]
    assert page["meta"]["totalPage"] == 2


async def test_delete_blocked_by_announcements(employee):
    announcement = await make_announcement(employee)

    with pytest.raises(BadRequestError) as exc:
        await employee_service.delete(str(employee.id))
    assert "1 announcement(s)" in exc.value.message

    await announcement.delete()
    await employee_service.delete(str(employee.id))
    assert await Employee.get(employee.id) is None


async def test_employee_routes(client, employee, auth_headers, department):
    resp = await client.get("/api/employees/")
    assert resp.status_code == 401

    resp = await client.get("/api/employees/", params={"isActive": "true"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["meta"]["total"] == 1

    resp = await client.get(f"/api/employees/{employee.id}")
    assert resp.status_code == 200
    assert "password_hash" not in resp.json()["data"]

    resp = await client.get(f"/api/employees/department/{department.id}")
    assert [e["id"] for e in resp.json()["data"]] == [str(employee.id)]

    resp = await client.post("/api/employees/", json={"employee_number": "EMP050", "full_name": "Temp Worker"})
    assert resp.status_code == 201

    resp = await client.put(f"/api/employees/{employee.id}", json={"password": "123"})
    assert resp.status_code == 400

    resp = await client.get("/api/employees/65a000000000000000000000")
    assert resp.status_code == 404
