"""
Department Routes
All endpoints require a bearer token
"""
from fastapi import APIRouter, Depends, status

from intranet.api.routes.auth import get_current_employee
from intranet.models.department import DepartmentCreate, DepartmentUpdate
from intranet.services.department import department_service
from intranet.utils.response import success_response


router = APIRouter(dependencies=[Depends(get_current_employee)])


@router.get("/")
async def get_departments():
    """List departments with their employee counts"""
    departments = await department_service.get_all()
    return success_response(departments, "Departments retrieved successfully")


@router.get("/{department_id}")
async def get_department(department_id: str):
    """Get a department and its employees"""
    department = await department_service.get_by_id(department_id)
    return success_response(department, "Department retrieved successfully")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_department(data: DepartmentCreate):
    """Create a department"""
    department = await department_service.create(data)
    return success_response(department, "Department created successfully", status.HTTP_201_CREATED)


@router.put("/{department_id}")
async def update_department(department_id: str, data: DepartmentUpdate):
    """Rename a department"""
    department = await department_service.update(department_id, data)
    return success_response(department, "Department updated successfully")


@router.delete("/{department_id}")
async def delete_department(department_id: str):
    """Delete a department with no employees"""
    await department_service.delete(department_id)
    return success_response(None, "Department deleted successfully")
