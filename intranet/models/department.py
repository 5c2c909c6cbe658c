"""
Department Model
Database schema for company departments
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from beanie import Document, PydanticObjectId


class Department(Document):
    """Department document model"""
    name: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "departments"
        indexes = ["name"]


class DepartmentCreate(BaseModel):
    """Schema for creating a department"""
    name: str = Field(..., min_length=1, max_length=100)


class DepartmentUpdate(BaseModel):
    """Schema for renaming a department"""
    name: str = Field(..., min_length=1, max_length=100)


class DepartmentSummary(BaseModel):
    """Department projection embedded in other responses"""
    model_config = ConfigDict(from_attributes=True)

    id: PydanticObjectId
    name: str


class DepartmentMember(BaseModel):
    """Employee projection listed under a department"""
    model_config = ConfigDict(from_attributes=True)

    id: PydanticObjectId
    employee_number: str
    full_name: str
    email: Optional[str] = None
    position: Optional[str] = None
    avatar_url: Optional[str] = None


class DepartmentResponse(BaseModel):
    """Department with its employee count"""
    model_config = ConfigDict(from_attributes=True)

    id: PydanticObjectId
    name: str
    created_at: datetime
    updated_at: datetime
    employee_count: int = 0


class DepartmentDetail(DepartmentResponse):
    """Department with its member employees"""
    employees: List[DepartmentMember] = []
