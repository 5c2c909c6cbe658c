"""
Pytest configuration and shared fixtures
"""
import os
import tempfile

import pytest

# Configure the environment before importing the application.
_UPLOAD_DIR = tempfile.mkdtemp(prefix="intranet-uploads-")
os.environ["ENVIRONMENT"] = "test"
os.environ["JWT_SECRET"] = "test_jwt_secret"
os.environ["UPLOAD_DIR"] = _UPLOAD_DIR
os.environ["UPLOAD_TEMP_DIR"] = os.path.join(_UPLOAD_DIR, "temp")
os.environ["CLOUDINARY_CLOUD_NAME"] = ""
os.environ["CLOUDINARY_API_KEY"] = ""
os.environ["CLOUDINARY_API_SECRET"] = ""

from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from intranet.database import init_db
from intranet.models.announcement import Announcement
from intranet.models.department import Department
from intranet.models.employee import Employee
from intranet.security import get_password_hash
from intranet.services.auth import create_employee_token
from main import app


PASSWORD = "password123"


@pytest.fixture(autouse=True)
async def db():
    """Fresh in-memory database bound to every document model"""
    client = AsyncMongoMockClient()
    database = await init_db(client["intranet_test"])
    yield database


@pytest.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def department():
    dept = Department(name="Engineering")
    await dept.insert()
    return dept


async def make_employee(number="EMP001", name="John Doe", email="john.doe@company.com",
                        department=None, password=PASSWORD, is_active=True):
    employee = Employee(
        employee_number=number,
        full_name=name,
        email=email,
        position="Engineer",
        department_id=department.id if department else None,
        password_hash=get_password_hash(password) if password else None,
        is_active=is_active,
    )
    await employee.insert()
    return employee


async def make_announcement(owner, title="Quarterly town hall", **fields):
    announcement = Announcement(
        title=title,
        description="Agenda and dial-in details",
        content="Full announcement body",
        created_by=owner.id,
        **fields,
    )
    await announcement.insert()
    return announcement


# ============== Auth fixtures ==============

@pytest.fixture
async def employee(department):
    return await make_employee(department=department)


@pytest.fixture
async def other_employee(department):
    return await make_employee("EMP002", "Jane Smith", "jane.smith@company.com", department)


@pytest.fixture
def token(employee):
    return create_employee_token(employee)


@pytest.fixture
def auth_headers(token):
    """Authorization header for `employee`"""
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers(other_employee):
    return {"Authorization": f"Bearer {create_employee_token(other_employee)}"}
