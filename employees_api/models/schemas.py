"""
Pydantic schemas for API validation
"""
from datetime import date
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


Gender = Literal["M", "F"]


# Catalog schemas
class Department(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    dept_no: str
    dept_name: str


class Title(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    title: str


# Employee schemas
class EmployeeBase(BaseModel):
    birth_date: date
    first_name: str = Field(..., min_length=1, max_length=14)
    last_name: str = Field(..., min_length=1, max_length=16)
    gender: Gender


class EmployeeCreate(EmployeeBase):
    """Create payload; hire_date is stamped by the server"""
    title: str = Field(..., min_length=1, max_length=50)
    salary: int = Field(..., gt=0)
    dept_no: str = Field(..., min_length=1, max_length=4)


class EmployeeUpdate(BaseModel):
    """Partial update; fields left out (or sent as null) are untouched"""
    birth_date: Optional[date] = None
    first_name: Optional[str] = Field(None, min_length=1, max_length=14)
    last_name: Optional[str] = Field(None, min_length=1, max_length=16)
    gender: Optional[Gender] = None
    hire_date: Optional[date] = None
    title: Optional[str] = Field(None, min_length=1, max_length=50)
    salary: Optional[int] = Field(None, gt=0)
    dept_no: Optional[str] = Field(None, min_length=1, max_length=4)

    def identity_changes(self) -> dict:
        fields = ("birth_date", "first_name", "last_name", "gender", "hire_date")
        return {
            name: value
            for name, value in self.model_dump(include=set(fields)).items()
            if value is not None
        }

    def is_empty(self) -> bool:
        return not self.identity_changes() and self.title is None \
            and self.salary is None and self.dept_no is None


class Employee(EmployeeBase):
    model_config = ConfigDict(from_attributes=True)

    emp_no: int
    hire_date: date


class EmployeeRow(BaseModel):
    """Projection row: identity plus current title, salary and department"""
    model_config = ConfigDict(from_attributes=True)

    emp_no: int
    birth_date: date
    first_name: str
    last_name: str
    gender: str
    hire_date: date
    title: Optional[str] = None
    salary: Optional[int] = None
    dept_no: Optional[str] = None
    dept_name: Optional[str] = None


# Pagination schemas
class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    page_size: int = Field(..., alias="pageSize")
    total: int
    total_pages: int = Field(..., alias="totalPages")


class EmployeePage(BaseModel):
    data: List[EmployeeRow]
    pagination: Pagination


class ErrorResponse(BaseModel):
    error: str
