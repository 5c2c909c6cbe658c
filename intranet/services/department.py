"""
Department Service
Department CRUD with member-count guard on delete
"""
import logging
from datetime import datetime
from typing import List

from intranet.errors import BadRequestError, ConflictError, NotFoundError
from intranet.models.department import (
    Department,
    DepartmentCreate,
    DepartmentDetail,
    DepartmentMember,
    DepartmentResponse,
    DepartmentUpdate,
)
from intranet.models.employee import Employee
from intranet.utils.ids import parse_object_id


logger = logging.getLogger(__name__)


class DepartmentService:

    async def _get_or_404(self, department_id: str) -> Department:
        department = await Department.get(parse_object_id(department_id, "Department not found"))
        if not department:
            raise NotFoundError("Department not found")
        return department

    async def get_all(self) -> List[DepartmentResponse]:
        departments = await Department.find_all().sort("+name").to_list()

        counts = await Employee.aggregate([
            {"$match": {"department_id": {"$ne": None}}},
            {"$group": {"_id": "$department_id", "count": {"$sum": 1}}},
        ]).to_list()
        count_by_id = {row["_id"]: row["count"] for row in counts}

        return [
            DepartmentResponse(
                **d.model_dump(),
                employee_count=count_by_id.get(d.id, 0),
            )
            for d in departments
        ]

    async def get_by_id(self, department_id: str) -> DepartmentDetail:
        department = await self._get_or_404(department_id)
        employees = await Employee.find(Employee.department_id == department.id).sort("+full_name").to_list()

        return DepartmentDetail(
            **department.model_dump(),
            employee_count=len(employees),
            employees=[DepartmentMember.model_validate(e) for e in employees],
        )

    async def create(self, data: DepartmentCreate) -> DepartmentResponse:
        if await Department.find_one(Department.name == data.name):
            raise ConflictError("Department already exists")

        department = Department(name=data.name)
        await department.insert()
        logger.info("Created department %s", department.name)

        return DepartmentResponse(**department.model_dump())

    async def update(self, department_id: str, data: DepartmentUpdate) -> DepartmentResponse:
        department = await self._get_or_404(department_id)

        if data.name != department.name:
            clash = await Department.find_one(Department.name == data.name)
            if clash and clash.id != department.id:
                raise ConflictError("Department already exists")

        department.name = data.name
        department.updated_at = datetime.utcnow()
        await department.save()

        employee_count = await Employee.find(Employee.department_id == department.id).count()
        return DepartmentResponse(**department.model_dump(), employee_count=employee_count)

    async def delete(self, department_id: str) -> None:
        department = await self._get_or_404(department_id)

        employee_count = await Employee.find(Employee.department_id == department.id).count()
        if employee_count > 0:
            raise BadRequestError(f"Cannot delete department with {employee_count} employee(s)")

        await department.delete()
        logger.info("Deleted department %s", department.name)


# Global instance
department_service = DepartmentService()
