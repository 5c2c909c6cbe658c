"""
Seed the database with sample departments and employees.
Existing rows (matched by department name / employee email) are left untouched.
"""
import asyncio
import logging

from intranet.database import close_db, init_db
from intranet.models.department import Department
from intranet.models.employee import Employee
from intranet.security import get_password_hash


logger = logging.getLogger("intranet.seed")

DEFAULT_PASSWORD = "password123"

DEPARTMENTS = ["Engineering", "UI/UX Design", "Human Resources"]

EMPLOYEES = [
    {
        "employee_number": "EMP001",
        "full_name": "John Doe",
        "email": "john.doe@company.com",
        "position": "UI UX Super Admin",
        "department": "UI/UX Design",
    },
    {
        "employee_number": "EMP002",
        "full_name": "Jane Smith",
        "email": "jane.smith@company.com",
        "position": "Senior Software Engineer",
        "department": "Engineering",
    },
    {
        "employee_number": "EMP003",
        "full_name": "Mike Johnson",
        "email": "mike.johnson@company.com",
        "position": "HR Manager",
        "department": "Human Resources",
    },
]


async def seed() -> dict:
    """Create any missing sample rows; returns how many of each were inserted"""
    created = {"departments": 0, "employees": 0}

    departments = {}
    for name in DEPARTMENTS:
        department = await Department.find_one(Department.name == name)
        if not department:
            department = Department(name=name)
            await department.insert()
            created["departments"] += 1
        departments[name] = department

    password_hash = get_password_hash(DEFAULT_PASSWORD)

    for data in EMPLOYEES:
        if await Employee.find_one(Employee.email == data["email"]):
            continue
        employee = Employee(
            employee_number=data["employee_number"],
            full_name=data["full_name"],
            email=data["email"],
            position=data["position"],
            department_id=departments[data["department"]].id,
            password_hash=password_hash,
            is_active=True,
        )
        await employee.insert()
        created["employees"] += 1

    logger.info(
        "Seeded %d department(s) and %d employee(s)",
        created["departments"],
        created["employees"],
    )
    return created


async def main():
    await init_db()
    try:
        await seed()
    finally:
        close_db()

    print("Test credentials:")
    for data in EMPLOYEES:
        print(f"  {data['email']} / {DEFAULT_PASSWORD}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")
    asyncio.run(main())
