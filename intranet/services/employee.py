"""
Employee Service
Employee directory CRUD
"""
import logging
import re
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from beanie import PydanticObjectId
from beanie.operators import In

from intranet.errors import BadRequestError, ConflictError, NotFoundError
from intranet.models.announcement import Announcement
from intranet.models.department import Department, DepartmentSummary
from intranet.models.employee import Employee, EmployeeCreate, EmployeeResponse, EmployeeUpdate
from intranet.security import get_password_hash
from intranet.utils.ids import parse_object_id
from intranet.utils.pagination import get_pagination_meta, get_pagination_params


logger = logging.getLogger(__name__)

# Fields an update may explicitly clear with null
NULLABLE_FIELDS = {"department_id", "email", "position", "avatar_url"}


class EmployeeService:
    """Employee CRUD with uniqueness and reference checks"""

    async def _departments_by_id(self, ids: Iterable[PydanticObjectId]) -> Dict[PydanticObjectId, Department]:
        ids = list({i for i in ids if i is not None})
        if not ids:
            return {}
        departments = await Department.find(In(Department.id, ids)).to_list()
        return {d.id: d for d in departments}

    async def to_responses(self, employees: List[Employee]) -> List[EmployeeResponse]:
        departments = await self._departments_by_id(e.department_id for e in employees)
        responses = []
        for employee in employees:
            department = departments.get(employee.department_id)
            responses.append(EmployeeResponse(
                **employee.model_dump(exclude={"password_hash"}),
                department=DepartmentSummary.model_validate(department) if department else None,
            ))
        return responses

    async def to_response(self, employee: Employee) -> EmployeeResponse:
        return (await self.to_responses([employee]))[0]

    async def _get_or_404(self, employee_id: str) -> Employee:
        employee = await Employee.get(parse_object_id(employee_id, "Employee not found"))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    async def resolve_department_id(self, department_id) -> Optional[PydanticObjectId]:
        """Validate an optional department reference"""
        if department_id is None:
            return None
        oid = parse_object_id(department_id, "Department not found")
        if not await Department.get(oid):
            raise NotFoundError("Department not found")
        return oid

    async def get_all(
        self,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        department_id: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> dict:
        skip, take = get_pagination_params(page, limit)

        query = {}
        if department_id:
            query["department_id"] = parse_object_id(department_id, "Department not found")
        if is_active is not None:
            query["is_active"] = is_active
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [
                {"full_name": pattern},
                {"email": pattern},
                {"employee_number": pattern},
            ]

        total = await Employee.find(query).count()
        employees = await Employee.find(query).sort("+full_name", "+_id").skip(skip).limit(take).to_list()

        return {
            "data": await self.to_responses(employees),
            "meta": get_pagination_meta(page, limit, total),
        }

    async def get_by_id(self, employee_id: str) -> EmployeeResponse:
        return await self.to_response(await self._get_or_404(employee_id))

    async def get_by_department(self, department_id: str) -> List[EmployeeResponse]:
        oid = parse_object_id(department_id, "Department not found")
        employees = await Employee.find(Employee.department_id == oid).sort("+full_name").to_list()
        return await self.to_responses(employees)

    async def create(self, data: EmployeeCreate) -> EmployeeResponse:
        if await Employee.find_one(Employee.employee_number == data.employee_number):
            raise ConflictError("Employee number already exists")

        if data.email and await Employee.find_one(Employee.email == data.email):
            raise ConflictError("Email already exists")

        employee = Employee(
            employee_number=data.employee_number,
            full_name=data.full_name,
            department_id=await self.resolve_department_id(data.department_id),
            email=data.email,
            password_hash=get_password_hash(data.password) if data.password else None,
            position=data.position,
            avatar_url=data.avatar_url,
            is_active=data.is_active,
        )
        await employee.insert()
        logger.info("Created employee %s", employee.employee_number)

        return await self.to_response(employee)

    async def update(self, employee_id: str, data: EmployeeUpdate) -> EmployeeResponse:
        employee = await self._get_or_404(employee_id)
        update_dict = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field in NULLABLE_FIELDS
        }

        number = update_dict.get("employee_number")
        if number and number != employee.employee_number:
            if await Employee.find_one(Employee.employee_number == number):
                raise ConflictError("Employee number already exists")

        email = update_dict.get("email")
        if email and email != employee.email:
            if await Employee.find_one(Employee.email == email):
                raise ConflictError("Email already exists")

        if "department_id" in update_dict:
            update_dict["department_id"] = await self.resolve_department_id(update_dict["department_id"])

        password = update_dict.pop("password", None)
        if password:
            update_dict["password_hash"] = get_password_hash(password)

        for field, value in update_dict.items():
            setattr(employee, field, value)

        employee.updated_at = datetime.utcnow()
        await employee.save()

        return await self.to_response(employee)

    async def delete(self, employee_id: str) -> None:
        employee = await self._get_or_404(employee_id)

        announcement_count = await Announcement.find(Announcement.created_by == employee.id).count()
        if announcement_count > 0:
            raise BadRequestError(
                f"Cannot delete employee with {announcement_count} announcement(s). "
                "Please reassign or delete announcements first."
            )

        await employee.delete()
        logger.info("Deleted employee %s", employee.employee_number)


# Global instance
employee_service = EmployeeService()
