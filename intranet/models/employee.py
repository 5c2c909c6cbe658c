"""
Employee Model
Database schema for employee data
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from beanie import Document, PydanticObjectId

from intranet.models.department import DepartmentSummary


class Employee(Document):
    """Employee document model"""

    # Basic Information
    employee_number: str
    full_name: str
    email: Optional[EmailStr] = None
    position: Optional[str] = None
    avatar_url: Optional[str] = None

    # Employment Details
    department_id: Optional[PydanticObjectId] = None

    # Authentication
    password_hash: Optional[str] = None
    is_active: bool = True

    # Metadata
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    last_login: Optional[datetime] = None

    class Settings:
        name = "employees"
        indexes = [
            "employee_number",
            "email",
            "department_id",
        ]

    class Config:
        json_schema_extra = {
            "example": {
                "employee_number": "EMP001",
                "full_name": "John Doe",
                "email": "john.doe@company.com",
                "position": "Senior Developer",
                "is_active": True,
            }
        }


class EmployeeCreate(BaseModel):
    """Schema for creating a new employee"""
    employee_number: str = Field(..., min_length=1, max_length=50)
    full_name: str = Field(..., min_length=1, max_length=255)
    department_id: Optional[PydanticObjectId] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    position: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool = True


class EmployeeUpdate(BaseModel):
    """Schema for updating employee information"""
    employee_number: Optional[str] = Field(None, min_length=1, max_length=50)
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    department_id: Optional[PydanticObjectId] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    position: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: Optional[bool] = None


class EmployeeResponse(BaseModel):
    """Schema for employee response (without sensitive data)"""
    model_config = ConfigDict(from_attributes=True)

    id: PydanticObjectId
    employee_number: str
    full_name: str
    email: Optional[str] = None
    position: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool
    department_id: Optional[PydanticObjectId] = None
    department: Optional[DepartmentSummary] = None
    created_at: datetime
    updated_at: datetime


class AuthorSummary(BaseModel):
    """Employee projection attached to announcements and comments"""
    model_config = ConfigDict(from_attributes=True)

    id: PydanticObjectId
    employee_number: str
    full_name: str
    avatar_url: Optional[str] = None
    position: Optional[str] = None
