"""
Employee Routes
Employee directory endpoints. Only the listing requires a bearer token.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from intranet.api.routes.auth import get_current_employee
from intranet.models.employee import EmployeeCreate, EmployeeUpdate
from intranet.services.auth import TokenData
from intranet.services.employee import employee_service
from intranet.utils.response import success_response


router = APIRouter()


@router.get("/")
async def get_all_employees(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1),
    search: Optional[str] = None,
    department_id: Optional[str] = Query(None, alias="departmentId"),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    current_employee: TokenData = Depends(get_current_employee),
):
    """
    Paginated employee directory
    """
    result = await employee_service.get_all(
        page=page,
        limit=limit,
        search=search,
        department_id=department_id,
        is_active=is_active,
    )
    return success_response(result, "Employees retrieved successfully")


@router.get("/department/{department_id}")
async def get_employees_by_department(department_id: str):
    """Employees of one department"""
    employees = await employee_service.get_by_department(department_id)
    return success_response(employees, "Employees retrieved successfully")


@router.get("/{employee_id}")
async def get_employee(employee_id: str):
    """Get employee by ID"""
    employee = await employee_service.get_by_id(employee_id)
    return success_response(employee, "Employee retrieved successfully")


@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_employee(employee_data: EmployeeCreate):
    """
    Create a new employee
    """
    employee = await employee_service.create(employee_data)
    return success_response(employee, "Employee created successfully", status.HTTP_201_CREATED)


@router.put("/{employee_id}")
async def update_employee(employee_id: str, update_data: EmployeeUpdate):
    """
    Update an employee's profile
    """
    employee = await employee_service.update(employee_id, update_data)
    return success_response(employee, "Employee updated successfully")


@router.delete("/{employee_id}")
async def delete_employee(employee_id: str):
    """Delete an employee with no announcements"""
    await employee_service.delete(employee_id)
    return success_response(None, "Employee deleted successfully")
