"""
Auth Service
Login, registration, profile lookup and token verification
"""
import logging
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from intranet.errors import ConflictError, ForbiddenError, NotFoundError, UnauthorizedError
from intranet.models.employee import Employee, EmployeeResponse
from intranet.security import create_access_token, decode_access_token, get_password_hash, verify_password
from intranet.services.employee import employee_service


logger = logging.getLogger(__name__)


class TokenData(BaseModel):
    """Token payload data"""
    id: str
    email: Optional[str] = None
    employee_number: Optional[str] = None


class LoginRequest(BaseModel):
    """Login request"""
    email: EmailStr
    password: str = Field(..., min_length=1)


class RegisterRequest(BaseModel):
    """Registration request"""
    employee_number: str = Field(..., min_length=1, max_length=50)
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    department_id: Optional[str] = None
    position: Optional[str] = None


class VerifyTokenRequest(BaseModel):
    token: str = Field(..., min_length=1)


class AuthResult(BaseModel):
    token: str
    user: EmployeeResponse


def create_employee_token(employee: Employee) -> str:
    return create_access_token({
        "id": str(employee.id),
        "email": employee.email,
        "employee_number": employee.employee_number,
    })


class AuthService:
    """Credential checks and session tokens"""

    async def login(self, email: str, password: str) -> AuthResult:
        employee = await Employee.find_one(Employee.email == email)

        if not employee:
            raise UnauthorizedError("Invalid email or password")

        if not employee.password_hash:
            raise UnauthorizedError("Password not set for this account")

        if not verify_password(password, employee.password_hash):
            raise UnauthorizedError("Invalid email or password")

        if not employee.is_active:
            raise ForbiddenError("Account is inactive")

        token = create_employee_token(employee)

        # Update last login
        employee.last_login = datetime.utcnow()
        await employee.save()
        logger.info("Employee %s logged in", employee.employee_number)

        return AuthResult(token=token, user=await employee_service.to_response(employee))

    async def register(self, data: RegisterRequest) -> AuthResult:
        if await Employee.find_one(Employee.email == data.email):
            raise ConflictError("Email already registered")

        if await Employee.find_one(Employee.employee_number == data.employee_number):
            raise ConflictError("Employee number already exists")

        employee = Employee(
            employee_number=data.employee_number,
            full_name=data.full_name,
            email=data.email,
            password_hash=get_password_hash(data.password),
            department_id=await employee_service.resolve_department_id(data.department_id),
            position=data.position,
            is_active=True,
        )
        await employee.insert()
        logger.info("Registered employee %s", employee.employee_number)

        return AuthResult(
            token=create_employee_token(employee),
            user=await employee_service.to_response(employee),
        )

    async def get_profile(self, user_id: str) -> EmployeeResponse:
        try:
            return await employee_service.get_by_id(user_id)
        except NotFoundError:
            raise NotFoundError("User not found")

    def verify_token(self, token: str) -> dict:
        return decode_access_token(token)


# Global instance
auth_service = AuthService()
